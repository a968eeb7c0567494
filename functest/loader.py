"""
Test File Loader

Loads functional test files (Python modules declaring suites) and wraps
them in runnable ``TestFile`` handles. Every load evicts the cached module
first, so repeated runs pick up edits to the file.
"""

import hashlib
import importlib.util
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .config import get_config
from .framework import Suite, SuiteRunner, collect
from .models import RunStats
from .reporter import write_report
from .utils import now_ms

logger = logging.getLogger(__name__)

_FROM_CONFIG = object()


def module_name_for(path: Union[str, Path]) -> str:
    """Stable module name for a test file path."""
    resolved = Path(path).resolve()
    digest = hashlib.md5(str(resolved).encode()).hexdigest()[:12]
    return f"functest_file_{resolved.stem}_{digest}"


def reset_cache(path: Union[str, Path]) -> bool:
    """
    Evict any cached module loaded from ``path``.

    Returns:
        True if a cached module was removed
    """
    resolved = Path(path).resolve()
    removed = sys.modules.pop(module_name_for(resolved), None) is not None

    for name, module in list(sys.modules.items()):
        module_file = getattr(module, "__file__", None)
        if module_file and Path(module_file).resolve() == resolved:
            del sys.modules[name]
            removed = True

    if removed:
        logger.debug(f"Evicted cached module for {resolved}")
    return removed


def load_test_file(path: Union[str, Path]) -> Suite:
    """
    Import a test file and collect the suites it declares.

    Raises:
        FileNotFoundError: The file does not exist
        Exception: Whatever the test file raises while importing
    """
    resolved = Path(path).resolve()
    if not resolved.exists():
        raise FileNotFoundError(f"Test file not found: {path}")

    reset_cache(resolved)
    importlib.invalidate_caches()

    name = module_name_for(resolved)
    spec = importlib.util.spec_from_file_location(name, str(resolved))
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module

    dont_write_bytecode = sys.dont_write_bytecode
    sys.dont_write_bytecode = True
    try:
        with collect(title="") as root:
            spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(name, None)
        raise
    finally:
        sys.dont_write_bytecode = dont_write_bytecode

    logger.debug(f"Loaded {resolved}: {root.total_tests()} tests")
    return root


class TestFile:
    """A test file ready to be run."""

    __test__ = False

    def __init__(
        self,
        path: Union[str, Path],
        report_dir: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
    ):
        self.path = Path(path)
        self.report_dir = Path(report_dir) if report_dir else None
        self.timeout = timeout

    @property
    def name(self) -> str:
        return self.path.stem

    def load(self) -> Suite:
        return load_test_file(self.path)

    async def run(self) -> RunStats:
        """Load the file, run its suites and write its report."""
        root = self.load()
        stats = await SuiteRunner(timeout=self.timeout).run(root)
        if self.report_dir:
            write_report(self.report_dir, self.name, stats)
        return stats

    def __repr__(self) -> str:
        return f"TestFile({str(self.path)!r})"


def get(
    files: Iterable[Union[str, Path]],
    report_root=_FROM_CONFIG,
    timeout=_FROM_CONFIG,
) -> List[TestFile]:
    """
    Create TestFile handles for one run.

    All files share one report directory named after the run's start time:
    ``<report_root>/<epoch ms>/<file stem>``. ``report_root=None`` disables
    reports; omitted arguments come from configuration.
    """
    config = get_config()
    if report_root is _FROM_CONFIG:
        report_root = config.get("report_dir")
    if timeout is _FROM_CONFIG:
        timeout = config.get("timeout")

    run_dir = Path(report_root) / str(now_ms()) if report_root else None

    return [
        TestFile(
            path,
            report_dir=run_dir / Path(path).stem if run_dir else None,
            timeout=timeout,
        )
        for path in files
    ]
