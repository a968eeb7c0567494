"""Small helpers shared across functest modules."""

import asyncio
import inspect
import time
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, List


async def invoke(fn: Callable, *args, **kwargs) -> Any:
    """Call a sync or async callable and return its (awaited) result."""
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def elapsed_ms(started: float) -> int:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return int(round((time.perf_counter() - started) * 1000))


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """
    Navigate a dotted path through nested mappings, lists and attributes.

    ``"data.items.0.id"`` walks dict keys, list indexes and object attributes.
    """
    current = data
    for key in path.split("."):
        if isinstance(current, Mapping) and key in current:
            current = current[key]
        elif isinstance(current, (list, tuple)) and key.lstrip("-").isdigit():
            try:
                current = current[int(key)]
            except IndexError:
                return default
        elif not isinstance(current, (Mapping, list, tuple)) and hasattr(current, key):
            current = getattr(current, key)
        else:
            return default
    return current


async def gather_all(*aws: Awaitable) -> List[Any]:
    """
    Await all awaitables concurrently and return their results in order.

    Every branch is allowed to finish before the first exception, if any,
    is raised, so no branch is left running unobserved.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
