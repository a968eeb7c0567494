"""
Functional Test Models

Value records produced while running functional tests: HTTP responses,
per-test outcomes, per-file run statistics and the aggregated summary.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


class TestStatus(str, Enum):
    """Test execution status."""

    __test__ = False

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class Response:
    """
    Response-shaped value handed to resources.

    Real requests fill every field; mocked requests only carry ``data``.
    """

    data: Any = None
    status: Optional[int] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    url: Optional[str] = None
    method: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300


@dataclass
class TestOutcome:
    """Result of a single test or a failed hook."""

    __test__ = False

    title: str
    status: TestStatus
    duration: int = 0  # ms
    error: Optional[str] = None
    hook: bool = False

    def to_dict(self) -> Dict:
        """Convert to dictionary for reports."""
        return {
            "title": self.title,
            "status": self.status.value,
            "duration": self.duration,
            "error": self.error,
            "hook": self.hook,
        }


@dataclass
class RunStats:
    """
    Statistics for one executed test file.

    ``start`` and ``end`` are epoch milliseconds, ``duration`` is in ms.
    """

    start: int = 0
    end: int = 0
    suites: int = 0
    tests: int = 0
    passes: int = 0
    pending: int = 0
    failures: int = 0
    duration: int = 0
    outcomes: List[TestOutcome] = field(default_factory=list, repr=False, compare=False)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data.pop("outcomes")
        return data


@dataclass
class AggregateStats:
    """Summary of several runs; ``duration`` is rendered with its unit, e.g. "300ms"."""

    start: int = 0
    end: Optional[int] = 0
    suites: int = 0
    tests: int = 0
    passes: int = 0
    pending: int = 0
    failures: int = 0
    duration: Union[int, str] = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict:
        return asdict(self)
