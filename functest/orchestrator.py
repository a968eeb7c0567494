"""
Run Orchestrator

Runs test files concurrently or one after another and merges their
statistics into a single summary.
"""

import logging
from typing import IO, Any, Iterable, List, Optional, Sequence, Union

from .config import get_config
from .loader import TestFile, get
from .logs import DEFAULT_LOG_FORMAT, intercept_logs
from .models import AggregateStats, RunStats
from .utils import gather_all

logger = logging.getLogger(__name__)

SUMMED_FIELDS = ("suites", "tests", "passes", "pending", "failures")


async def run(
    test_files: Sequence[TestFile], is_parallel: bool = False, log_stream: Optional[IO[str]] = None
) -> AggregateStats:
    """
    Run test files and aggregate their statistics.

    Log output produced during the run goes to ``log_stream``; the
    interception is removed when the run ends, even on error.

    Args:
        test_files: Handles from ``get()``
        is_parallel: Run all files concurrently instead of in order
        log_stream: Writable text stream for run logs (None to skip)

    Returns:
        AggregateStats with ``duration`` rendered as e.g. "300ms"
    """
    config = get_config()
    level = logging.getLevelName(str(config.get("logging.level", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    fmt = config.get("logging.format") or DEFAULT_LOG_FORMAT

    with intercept_logs(log_stream, level=level, fmt=fmt):
        if is_parallel:
            stats = await gather_all(*(test_file.run() for test_file in test_files))
        else:
            stats = []
            for test_file in test_files:
                stats.append(await test_file.run())

    return format_stats(stats, is_parallel)


async def run_files(
    files: Iterable[str], is_parallel: bool = False, log_stream: Optional[IO[str]] = None, **kwargs
) -> AggregateStats:
    """Shortcut for ``run(get(files, **kwargs), ...)``."""
    return await run(get(files, **kwargs), is_parallel, log_stream)


def _value(stat: Union[RunStats, dict], name: str) -> Any:
    """Field of a stats record; absent or None counts as 0."""
    if isinstance(stat, dict):
        value = stat.get(name)
    else:
        value = getattr(stat, name, None)
    return 0 if value is None else value


def format_stats(stats: List[Union[RunStats, dict]], is_parallel: bool) -> AggregateStats:
    """
    Merge per-file statistics.

    Counters are summed in both modes. Sequentially, ``end`` is the last
    file's end and ``duration`` the sum of durations. In parallel,
    ``duration`` is the longest single-file duration and ``end`` the end
    of that file (None when every duration is 0).
    """
    result = AggregateStats(
        start=_value(stats[0], "start") if stats else 0,
        end=None if is_parallel else (_value(stats[-1], "end") if stats else 0),
    )
    duration = 0

    for stat in stats:
        for name in SUMMED_FIELDS:
            setattr(result, name, getattr(result, name) + _value(stat, name))

        if is_parallel:
            if _value(stat, "duration") > duration:
                result.end = _value(stat, "end")
                duration = _value(stat, "duration")
        else:
            duration += _value(stat, "duration")

    result.duration = f"{duration}ms"
    return result
