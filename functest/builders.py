"""
Suite and Case Builders

Turn an ordered action list into a declared suite:

    ctx = ExecContext({"base_url": "http://localhost:8080"})
    case("users", [
        login,                                  # before
        [reset_fixtures],                       # before_each
        test("lists users", list_users, {"status": 200}),
        tests("user {{suite}}", [1, 2], get_user, {"status": 200}, parallel=True),
        logout,                                 # after
    ], ctx)

``test``/``tests`` return ``TestAction`` markers; the suite builder hands
them the suite's ``ExecContext`` and they register their cases.
"""

import asyncio
import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .actions import TestAction, classify_actions
from .context import ExecContext
from .framework import Suite, Test, after, after_each, before, before_each, describe, it
from .resource import Resource, ResolvedAssertion, resolve_assertions
from .templates import render, render_value
from .utils import gather_all

logger = logging.getLogger(__name__)


def register_suite(
    title: str, actions: Sequence[Any], exec_context: Optional[ExecContext] = None
) -> Suite:
    """
    Declare a suite from an ordered action list.

    Hooks are composed with ``exec_context.series`` and attached to the
    framework lifecycle; test actions register their cases in between.
    Hook failures are left to the framework.
    """
    exec_context = exec_context if exec_context is not None else ExecContext()
    groups = classify_actions(actions, strict=exec_context.strict)

    def declare():
        if groups.before:
            before(exec_context.series(*groups.before))

        if groups.before_each:
            before_each(exec_context.series(*groups.before_each))

        for action in groups.tests:
            action(exec_context)

        if groups.after_each:
            after_each(exec_context.series(*groups.after_each))

        if groups.after:
            after(exec_context.series(*groups.after))

    return describe(title, declare)


# The name test files use
case = register_suite


def _resource_cls(request_fn: Callable) -> type:
    return getattr(request_fn, "resource_cls", Resource)


def _check_all(
    resolved: List[ResolvedAssertion], resource: Resource, context: Mapping, data: Mapping
) -> None:
    """Run assertions in order; string expectations are rendered with ``data`` first."""
    for check in resolved:
        check(resource, context, expected=render_value(check.expected, data))


def build_test(
    title: str, request_fn: Callable, assertions: Mapping[str, Any], exec_context: ExecContext
) -> Test:
    """Register one test that requests a resource and runs every assertion on it."""
    resolved = resolve_assertions(_resource_cls(request_fn), assertions)

    async def run_test():
        resource = await request_fn(exec_context.context)
        for check in resolved:
            check(resource, exec_context.context)

    return it(title, run_test)


def build_tests(
    title: str,
    suite_params: Sequence[Any],
    request_fn: Callable,
    assertions: Mapping[str, Any],
    parallel: bool,
    exec_context: ExecContext,
) -> List[Test]:
    """
    Register one test per element of ``suite_params``.

    Each test sees the context extended with ``suite`` set to its parameter;
    the title and string assertions are rendered with ``{"suite": param}``.

    In parallel mode a single ``before`` hook issues every request
    concurrently and the tests only assert on the prefetched resources.
    In series mode each test issues its own request when it runs.
    """
    resolved = resolve_assertions(_resource_cls(request_fn), assertions)
    params = list(suite_params)

    if parallel:
        resources: List[Resource] = []

        async def fetch_all():
            # each branch gets its own snapshot of the context
            fetched = await gather_all(
                *(request_fn(exec_context.extend(suite=param)) for param in params)
            )
            resources[:] = fetched

        before(fetch_all, title=f"fetch {len(params)} x {title}")

        def make_test(index: int, param: Any) -> Callable:
            def run_test():
                data = {"suite": param}
                _check_all(resolved, resources[index], exec_context.extend(suite=param), data)

            return run_test

        return [
            it(render(title, {"suite": param}), make_test(index, param))
            for index, param in enumerate(params)
        ]

    def make_series_test(param: Any) -> Callable:
        async def run_test():
            context = exec_context.extend(suite=param)
            resource = await request_fn(context)
            _check_all(resolved, resource, context, {"suite": param})

        return run_test

    return [it(render(title, {"suite": param}), make_series_test(param)) for param in params]


# =============================================================================
# Actions
# =============================================================================


def test(title: str, request_fn: Callable, assertions: Mapping[str, Any]) -> TestAction:
    """Action registering a single test case."""
    return TestAction(
        register=lambda exec_context: build_test(title, request_fn, assertions, exec_context),
        title=title,
    )


test.__test__ = False


def tests(
    title: str,
    suite_params: Sequence[Any],
    request_fn: Callable,
    assertions: Mapping[str, Any],
    parallel: bool = False,
) -> TestAction:
    """Action registering one test case per parameter."""
    return TestAction(
        register=lambda exec_context: build_tests(
            title, suite_params, request_fn, assertions, parallel, exec_context
        ),
        title=title,
    )


tests.__test__ = False


def log(message: str, level: int = logging.INFO) -> Callable:
    """Hook logging ``message`` rendered with the suite context."""

    def log_action(context):
        logger.log(level, render(message, context))

    return log_action


def think(seconds: float) -> Callable:
    """Hook pausing the suite for ``seconds``."""

    async def think_action(context):
        await asyncio.sleep(seconds)

    return think_action
