"""
Execution Context

Holds the values shared by a suite's hooks and tests and composes hooks
into sequential operations.
"""

import logging
from typing import Any, Callable, Dict, Optional

from .utils import invoke

logger = logging.getLogger(__name__)


class ExecContext:
    """
    Shared state of one declared suite.

    Hooks receive ``context`` and may add keys to it. Parameterized tests
    get a copy extended with their ``suite`` value (see ``extend``), so
    concurrent branches never write into the shared mapping.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None, strict: bool = True):
        self.context: Dict[str, Any] = dict(context or {})
        self.strict = strict

    def extend(self, **values) -> Dict[str, Any]:
        """Return a snapshot of the context with extra values added."""
        return {**self.context, **values}

    def series(self, *actions) -> Callable:
        """
        Compose actions into one async operation run in declaration order.

        Lists/tuples are expanded in place, so each-hooks can be passed as-is.
        """

        async def run_series():
            for action in actions:
                if isinstance(action, (list, tuple)):
                    await self.series(*action)()
                else:
                    await invoke(action, self.context)

        return run_series

    def __repr__(self) -> str:
        return f"ExecContext(keys={sorted(self.context)})"
