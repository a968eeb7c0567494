"""
Pytest fixtures for functest tests
"""
import asyncio
import os
import sys
import textwrap

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Test environment: no reports, short timeouts
os.environ["FUNCTEST_ENV"] = "test"

from functest.config import reset_config  # noqa: E402
from functest.framework import SuiteRunner, collect  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_config():
    """Re-read configuration for every test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def run_declared():
    """Collect whatever ``declare`` registers and run it; returns RunStats."""

    def _run(declare, timeout=None):
        with collect() as root:
            declare()
        return asyncio.run(SuiteRunner(timeout=timeout).run(root))

    return _run


@pytest.fixture
def write_test_file(tmp_path):
    """Write a test file into a temp directory and return its path."""

    def _write(name, source):
        path = tmp_path / name
        path.write_text(textwrap.dedent(source))
        return path

    return _write
