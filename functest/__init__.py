"""
Functional API Testing

Suites are declared as ordered action lists in plain Python files:

- plain callables are setup/teardown hooks,
- lists of callables run before/after every test,
- ``test()``/``tests()`` declare requests and the assertions on their responses.

Files are run sequentially or concurrently and their statistics merged
into one summary.
"""

from .actions import ActionGroups, TestAction, classify_actions
from .builders import build_test, build_tests, case, log, register_suite, test, tests, think
from .context import ExecContext
from .errors import (
    ActionOrderError,
    ConfigError,
    FuncTestError,
    InvalidActionError,
    RegistrationError,
    TransportError,
    UnknownAssertionError,
)
from .loader import TestFile, get
from .models import AggregateStats, Response, RunStats, TestOutcome, TestStatus
from .orchestrator import format_stats, run, run_files
from .request import build_request
from .resource import Resource, assertion
from .transport import Transport

request = build_request

__all__ = [
    "ActionGroups",
    "TestAction",
    "classify_actions",
    "ExecContext",
    "case",
    "register_suite",
    "build_test",
    "build_tests",
    "test",
    "tests",
    "log",
    "think",
    "request",
    "build_request",
    "Resource",
    "assertion",
    "Transport",
    "Response",
    "TestFile",
    "get",
    "run",
    "run_files",
    "format_stats",
    "RunStats",
    "AggregateStats",
    "TestOutcome",
    "TestStatus",
    "FuncTestError",
    "ActionOrderError",
    "InvalidActionError",
    "UnknownAssertionError",
    "RegistrationError",
    "TransportError",
    "ConfigError",
]
