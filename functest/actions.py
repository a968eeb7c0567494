"""
Action Classification

A suite is declared as one flat, ordered list of actions:

- a plain callable is a hook that runs once,
- a list/tuple of callables is an each-hook that runs around every test,
- a ``TestAction`` (made by ``test()``/``tests()``) registers test cases.

Actions before the first test are setup, actions after it are teardown.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Sequence

from .errors import ActionOrderError, InvalidActionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestAction:
    """
    Marker wrapping a test registration callable.

    ``register`` is called with the suite's ``ExecContext`` while the suite
    is being declared.
    """

    __test__ = False

    register: Callable[[Any], None]
    title: str = ""

    def __call__(self, exec_context) -> None:
        self.register(exec_context)


@dataclass
class ActionGroups:
    """Actions split into lifecycle groups, each in declaration order."""

    before: List[Callable] = field(default_factory=list)
    before_each: List[Sequence[Callable]] = field(default_factory=list)
    after: List[Callable] = field(default_factory=list)
    after_each: List[Sequence[Callable]] = field(default_factory=list)
    tests: List[TestAction] = field(default_factory=list)


def is_each_hook(action: Any) -> bool:
    return isinstance(action, (list, tuple)) and all(callable(a) for a in action)


def classify_actions(actions: Sequence[Any], strict: bool = True) -> ActionGroups:
    """
    Split actions into before/before_each/after/after_each/tests groups.

    Args:
        actions: Ordered actions of one suite
        strict: Raise ActionOrderError when a test follows a teardown action.
            With strict=False such hooks silently become teardown.

    Returns:
        ActionGroups
    """
    groups = ActionGroups()
    post_seen = False

    for index, action in enumerate(actions):
        if isinstance(action, TestAction):
            if strict and post_seen:
                raise ActionOrderError(index)
            groups.tests.append(action)
            continue

        if not is_each_hook(action) and not callable(action):
            raise InvalidActionError(action, index)

        if groups.tests:
            post_seen = True
            if is_each_hook(action):
                groups.after_each.append(action)
            else:
                groups.after.append(action)
        elif is_each_hook(action):
            groups.before_each.append(action)
        else:
            groups.before.append(action)

    logger.debug(
        f"Classified {len(actions)} actions: {len(groups.before)} before, "
        f"{len(groups.before_each)} before_each, {len(groups.tests)} tests, "
        f"{len(groups.after_each)} after_each, {len(groups.after)} after"
    )
    return groups
