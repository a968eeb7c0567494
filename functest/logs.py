"""
Run Log Interception

Routes log output produced while functional tests run into a caller
supplied stream, tagging each record with the title of the running test.

Usage:
    with intercept_logs(stream):
        stats = await run_files(files)

    # Records carry %(test_title)s automatically:
    logger.info("Token refreshed")  # "... [users lists users] Token refreshed"
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import IO, Iterator, Optional

# Title of the test currently executing (task-local)
current_test: ContextVar[Optional[str]] = ContextVar("functest_current_test", default=None)

DEFAULT_LOG_FORMAT = "%(asctime)s [%(test_title)s] %(name)s - %(levelname)s - %(message)s"


class CurrentTestFilter(logging.Filter):
    """
    Logging filter that adds the running test's title to all log records.

    Usage:
        handler = logging.StreamHandler()
        handler.addFilter(CurrentTestFilter())
        handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add test_title to the log record."""
        record.test_title = current_test.get() or "-"
        return True


@contextmanager
def intercept_logs(
    stream: Optional[IO[str]],
    level: int = logging.INFO,
    fmt: str = DEFAULT_LOG_FORMAT,
    logger_name: Optional[str] = None,
) -> Iterator[Optional[logging.Handler]]:
    """
    Send log records to ``stream`` for the duration of the block.

    The handler is always removed and the logger level restored on exit,
    including when the block raises. A None stream intercepts nothing.

    Args:
        stream: Writable text stream receiving formatted records
        level: Minimum level captured
        fmt: logging format string; may use %(test_title)s
        logger_name: Logger to attach to (root logger by default)
    """
    if stream is None:
        yield None
        return

    target = logging.getLogger(logger_name)
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.addFilter(CurrentTestFilter())
    handler.setFormatter(logging.Formatter(fmt))

    previous_level = target.level
    target.addHandler(handler)
    if target.getEffectiveLevel() > level:
        target.setLevel(level)

    try:
        yield handler
    finally:
        target.removeHandler(handler)
        target.setLevel(previous_level)
        handler.flush()
