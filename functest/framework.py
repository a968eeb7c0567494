"""
Suite Framework

Declares suites, tests and hooks (``describe``/``it``/``before``...) and runs
them on the asyncio event loop, producing one ``RunStats`` per root suite.

Declaration happens while a ``collect()`` block is open:

    with collect() as root:
        describe("users", lambda: it("lists users", check_users))

    stats = await SuiteRunner().run(root)
"""

import asyncio
import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

from .errors import RegistrationError
from .logs import current_test
from .models import RunStats, TestOutcome, TestStatus
from .utils import elapsed_ms, invoke, now_ms

logger = logging.getLogger(__name__)

# Suite currently receiving declarations
_current_suite: ContextVar[Optional["Suite"]] = ContextVar("functest_suite", default=None)


@dataclass
class Hook:
    """A setup/teardown callable attached to a suite."""

    kind: str  # before, before_each, after_each, after
    fn: Callable
    title: Optional[str] = None

    @property
    def label(self) -> str:
        names = {
            "before": '"before all" hook',
            "before_each": '"before each" hook',
            "after_each": '"after each" hook',
            "after": '"after all" hook',
        }
        label = names[self.kind]
        return f"{label}: {self.title}" if self.title else label


@dataclass
class Test:
    """A single test case; ``fn`` is None for pending tests."""

    __test__ = False

    title: str
    fn: Optional[Callable]
    parent: "Suite" = field(repr=False, compare=False)
    pending: bool = False

    @property
    def full_title(self) -> str:
        prefix = self.parent.full_title
        return f"{prefix} {self.title}" if prefix else self.title


@dataclass
class Suite:
    """A group of tests, hooks and child suites."""

    title: str
    parent: Optional["Suite"] = field(default=None, repr=False, compare=False)
    suites: List["Suite"] = field(default_factory=list)
    tests: List[Test] = field(default_factory=list)
    before: List[Hook] = field(default_factory=list)
    before_each: List[Hook] = field(default_factory=list)
    after_each: List[Hook] = field(default_factory=list)
    after: List[Hook] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def full_title(self) -> str:
        if self.parent is None:
            return self.title
        prefix = self.parent.full_title
        return f"{prefix} {self.title}" if prefix else self.title

    def ancestors(self) -> List["Suite"]:
        """This suite and its parents, outermost first."""
        chain = []
        suite = self
        while suite is not None:
            chain.append(suite)
            suite = suite.parent
        return list(reversed(chain))

    def total_tests(self) -> int:
        return len(self.tests) + sum(s.total_tests() for s in self.suites)


# =============================================================================
# Declaration
# =============================================================================


@contextmanager
def collect(title: str = "") -> Iterator[Suite]:
    """Open a root suite that receives every declaration made inside the block."""
    root = Suite(title=title)
    token = _current_suite.set(root)
    try:
        yield root
    finally:
        _current_suite.reset(token)


def current_suite() -> Suite:
    suite = _current_suite.get()
    if suite is None:
        raise RegistrationError("No suite is being collected; declare tests inside collect()")
    return suite


def describe(title: str, fn: Callable[[], None]) -> Suite:
    """Declare a child suite; ``fn`` runs immediately and declares its contents."""
    parent = current_suite()
    suite = Suite(title=title, parent=parent)
    parent.suites.append(suite)

    token = _current_suite.set(suite)
    try:
        fn()
    finally:
        _current_suite.reset(token)
    return suite


def it(title: str, fn: Optional[Callable] = None) -> Test:
    """Declare a test. Without a body the test is pending."""
    suite = current_suite()
    test = Test(title=title, fn=fn, parent=suite, pending=fn is None)
    suite.tests.append(test)
    return test


def xit(title: str, fn: Optional[Callable] = None) -> Test:
    """Declare a pending (skipped) test."""
    suite = current_suite()
    test = Test(title=title, fn=fn, parent=suite, pending=True)
    suite.tests.append(test)
    return test


def _add_hook(kind: str, fn: Callable, title: Optional[str]) -> Hook:
    hook = Hook(kind=kind, fn=fn, title=title)
    getattr(current_suite(), kind).append(hook)
    return hook


def before(fn: Callable, title: Optional[str] = None) -> Hook:
    return _add_hook("before", fn, title)


def before_each(fn: Callable, title: Optional[str] = None) -> Hook:
    return _add_hook("before_each", fn, title)


def after_each(fn: Callable, title: Optional[str] = None) -> Hook:
    return _add_hook("after_each", fn, title)


def after(fn: Callable, title: Optional[str] = None) -> Hook:
    return _add_hook("after", fn, title)


# =============================================================================
# Execution
# =============================================================================


class SuiteRunner:
    """
    Runs a collected suite tree.

    Failing tests are recorded and the run continues. A failing
    before/before_each hook skips the remaining tests of its suite;
    ``after`` hooks still run.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._stats = RunStats()

    async def run(self, root: Suite) -> RunStats:
        """Run every suite and test under ``root``."""
        self._stats = RunStats(start=now_ms())
        started = time.perf_counter()

        try:
            await self._run_suite(root)
        finally:
            self._stats.end = now_ms()
            self._stats.duration = elapsed_ms(started)

        logger.info(
            f"Run finished: {self._stats.passes}/{self._stats.tests} passed, "
            f"{self._stats.failures} failed, {self._stats.pending} pending"
        )
        return self._stats

    async def _call(self, fn: Callable) -> None:
        if self.timeout:
            try:
                await asyncio.wait_for(invoke(fn), self.timeout)
            except asyncio.TimeoutError:
                raise asyncio.TimeoutError(f"Timeout of {self.timeout}s exceeded") from None
        else:
            await invoke(fn)

    def _record(self, outcome: TestOutcome) -> None:
        self._stats.outcomes.append(outcome)

    async def _run_hooks(self, suite: Suite, hooks: List[Hook]) -> bool:
        """Run hooks in order; on the first failure record it and stop."""
        for hook in hooks:
            started = time.perf_counter()
            try:
                await self._call(hook.fn)
            except Exception as e:
                title = f"{hook.label} in \"{suite.full_title}\"" if suite.full_title else hook.label
                self._stats.failures += 1
                self._record(
                    TestOutcome(
                        title=title,
                        status=TestStatus.FAILED,
                        duration=elapsed_ms(started),
                        error=_describe_error(e),
                        hook=True,
                    )
                )
                logger.debug(f"Hook failed: {title}: {e}")
                return False
        return True

    async def _run_suite(self, suite: Suite) -> None:
        if not suite.is_root:
            self._stats.suites += 1
            logger.info(f"Running suite: {suite.full_title}")

        if await self._run_hooks(suite, suite.before):
            for test in suite.tests:
                if not await self._run_test(test):
                    break
            else:
                for child in suite.suites:
                    await self._run_suite(child)

        await self._run_hooks(suite, suite.after)

    async def _run_test(self, test: Test) -> bool:
        """Run one test with its each-hooks. Returns False when a hook failed."""
        if test.pending:
            self._stats.tests += 1
            self._stats.pending += 1
            self._record(TestOutcome(title=test.full_title, status=TestStatus.PENDING))
            return True

        chain = test.parent.ancestors()
        for suite in chain:
            if not await self._run_hooks(suite, suite.before_each):
                return False

        token = current_test.set(test.full_title)
        started = time.perf_counter()
        try:
            logger.info(f"Running test: {test.full_title}")
            await self._call(test.fn)
        except Exception as e:
            outcome = TestOutcome(
                title=test.full_title,
                status=TestStatus.FAILED,
                duration=elapsed_ms(started),
                error=_describe_error(e),
            )
            self._stats.failures += 1
        else:
            outcome = TestOutcome(
                title=test.full_title, status=TestStatus.PASSED, duration=elapsed_ms(started)
            )
            self._stats.passes += 1
        finally:
            current_test.reset(token)

        self._stats.tests += 1
        self._record(outcome)
        logger.info(f"Test {test.full_title}: {outcome.status.value}")

        for suite in reversed(chain):
            if not await self._run_hooks(suite, suite.after_each):
                return False
        return True


def _describe_error(error: BaseException) -> str:
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__
