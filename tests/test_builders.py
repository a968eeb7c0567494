"""
Suite and Case Builder Tests

Tests for declaring suites from action lists and for single and
parameterized test cases in series and parallel mode.
"""
import asyncio
import logging

import pytest

from functest.builders import build_test, build_tests, log, register_suite, test, tests, think
from functest.context import ExecContext
from functest.errors import ActionOrderError, UnknownAssertionError
from functest.framework import collect, describe
from functest.models import Response, TestStatus
from functest.request import build_request
from functest.resource import Resource, assertion


def fake_request(status_for=None, log_calls=None):
    """Request function answering with the suite param echoed back."""
    status_for = status_for or {}

    async def request_fn(context):
        if log_calls is not None:
            log_calls.append(dict(context))
        await asyncio.sleep(0)
        param = context.get("suite")
        return Resource(Response(data={"id": param}, status=status_for.get(param, 200)))

    return request_fn


class TestBuildTest:
    """Test the single test case builder."""

    def test_request_gets_shared_context(self, run_declared):
        """The request receives the suite's context object."""
        calls = []
        ctx = ExecContext({"token": "abc"})

        def declare():
            describe("s", lambda: build_test("t", fake_request(log_calls=calls), {"status": 200}, ctx))

        stats = run_declared(declare)

        assert stats.passes == 1
        assert calls == [{"token": "abc"}]

    def test_first_failing_assertion_stops_the_rest(self, run_declared):
        """Assertions run in order and the first failure ends the test."""
        seen = []

        class Tracking(Resource):
            @assertion("first")
            def assert_first(self, expected, context):
                seen.append("first")
                raise AssertionError("first failed")

            @assertion("second")
            def assert_second(self, expected, context):
                seen.append("second")

        request_fn = build_request({"url": "unused"}, mock={"ok": True}, resource=Tracking)

        def declare():
            describe("s", lambda: build_test("t", request_fn, {"first": 1, "second": 2}, ExecContext()))

        stats = run_declared(declare)

        assert seen == ["first"]
        assert stats.failures == 1

    def test_unknown_assertion_rejected_at_declaration(self):
        """Assertion names are resolved when the test is declared."""
        with collect():
            with pytest.raises(UnknownAssertionError):
                describe("s", lambda: build_test("t", fake_request(), {"nope": 1}, ExecContext()))


class TestBuildTests:
    """Test the parameterized test case builder."""

    @pytest.mark.parametrize("parallel", [False, True])
    def test_titles_rendered_per_param(self, parallel):
        """Each param produces one test titled from the template."""
        with collect():
            suite = describe(
                "s",
                lambda: build_tests(
                    "case {{suite}}", ["a", "b"], fake_request(), {"status": 200}, parallel, ExecContext()
                ),
            )

        assert [t.title for t in suite.tests] == ["case a", "case b"]

    def test_series_issues_one_request_per_test(self, run_declared):
        """Series mode requests inside each test with the extended context."""
        calls = []
        ctx = ExecContext({"base": "x"})

        def declare():
            describe(
                "s",
                lambda: build_tests(
                    "case {{suite}}", ["a", "b"], fake_request(log_calls=calls), {}, False, ctx
                ),
            )

        stats = run_declared(declare)

        assert stats.passes == 2
        assert calls == [{"base": "x", "suite": "a"}, {"base": "x", "suite": "b"}]
        assert ctx.context == {"base": "x"}

    def test_parallel_requests_are_concurrent(self, run_declared):
        """Parallel mode starts every request before any completes."""
        in_flight = 0
        peak = 0

        async def request_fn(context):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return Resource(Response(data=context["suite"], status=200))

        def declare():
            describe(
                "s", lambda: build_tests("n {{suite}}", [1, 2, 3], request_fn, {}, True, ExecContext())
            )

        stats = run_declared(declare)

        assert peak == 3
        assert stats.passes == 3

    def test_parallel_results_aligned_with_params(self, run_declared):
        """Each test asserts on the response for its own param."""

        async def request_fn(context):
            # later params finish first
            await asyncio.sleep(0.01 * (3 - context["suite"]))
            return Resource(Response(data={"id": context["suite"]}, status=200))

        def declare():
            describe(
                "s",
                lambda: build_tests(
                    "n {{suite}}",
                    [0, 1, 2],
                    request_fn,
                    {"check": lambda res, ctx: res.data["id"] == ctx["suite"]},
                    True,
                    ExecContext(),
                ),
            )

        stats = run_declared(declare)
        assert stats.passes == 3

    def test_parallel_fetch_failure_waits_for_siblings(self, run_declared):
        """A failing request fails the fetch hook only after the others finish."""
        finished = []

        async def request_fn(context):
            if context["suite"] == 0:
                raise ConnectionError("refused")
            await asyncio.sleep(0.01)
            finished.append(context["suite"])
            return Resource(Response(status=200))

        def declare():
            describe(
                "s", lambda: build_tests("n {{suite}}", [0, 1, 2], request_fn, {}, True, ExecContext())
            )

        stats = run_declared(declare)

        assert sorted(finished) == [1, 2]
        assert stats.failures == 1
        assert stats.passes == 0
        assert "ConnectionError: refused" in stats.outcomes[0].error

    @pytest.mark.parametrize("parallel", [False, True])
    def test_same_verdicts_in_both_modes(self, run_declared, parallel):
        """Execution mode changes timing, not outcomes."""
        request_fn = fake_request(status_for={"b": 500})

        def declare():
            describe(
                "s",
                lambda: build_tests(
                    "case {{suite}}", ["a", "b", "c"], request_fn, {"status": 200}, parallel, ExecContext()
                ),
            )

        stats = run_declared(declare)

        verdicts = {o.title: o.status for o in stats.outcomes if not o.hook}
        assert verdicts == {
            "s case a": TestStatus.PASSED,
            "s case b": TestStatus.FAILED,
            "s case c": TestStatus.PASSED,
        }

    @pytest.mark.parametrize("parallel", [False, True])
    def test_string_assertions_rendered(self, run_declared, parallel):
        """String expectations are rendered with the param before comparing."""

        async def request_fn(context):
            return Resource(Response(data=f"user-{context['suite']}", status=200))

        def declare():
            describe(
                "s",
                lambda: build_tests(
                    "u {{suite}}", ["x", "y"], request_fn, {"data": "user-{{suite}}"}, parallel, ExecContext()
                ),
            )

        stats = run_declared(declare)
        assert stats.passes == 2

    def test_empty_params_parallel(self, run_declared):
        """No params means no tests; the fetch hook is a no-op."""

        def declare():
            describe("s", lambda: build_tests("x", [], fake_request(), {}, True, ExecContext()))

        stats = run_declared(declare)

        assert stats.tests == 0
        assert stats.failures == 0


class TestRegisterSuite:
    """Test declaring suites from action lists."""

    def test_full_suite(self, run_declared):
        """Hooks share the context and wrap the declared tests."""
        calls = []
        ctx = ExecContext()

        def login(context):
            calls.append("login")
            context["token"] = "t0k3n"

        def reset(context):
            calls.append("reset")

        async def cleanup(context):
            calls.append("cleanup")

        def logout(context):
            calls.append("logout")

        request_fn = build_request(
            lambda c: {"url": "http://unused", "headers": {"Authorization": c["token"]}},
            mock={"users": []},
        )

        def declare():
            register_suite(
                "users",
                [
                    login,
                    [reset],
                    test("lists users", request_fn, {"data": {"users": []}}),
                    tests("user {{suite}}", [1, 2], request_fn, {"contains": {"users": []}}),
                    [cleanup],
                    logout,
                ],
                ctx,
            )

        stats = run_declared(declare)

        assert stats.passes == 3
        assert stats.failures == 0
        assert calls == [
            "login",
            "reset", "cleanup",
            "reset", "cleanup",
            "reset", "cleanup",
            "logout",
        ]
        assert ctx.context["token"] == "t0k3n"

    def test_interleaved_hooks_fail_fast(self):
        """Strict contexts reject hooks between tests."""
        request_fn = build_request({"url": "x"}, mock={})

        with collect():
            with pytest.raises(ActionOrderError):
                register_suite(
                    "s",
                    [test("a", request_fn, {}), lambda c: None, test("b", request_fn, {})],
                    ExecContext(),
                )

    def test_interleaved_hooks_allowed_when_not_strict(self):
        """Non-strict contexts keep the legacy teardown classification."""
        request_fn = build_request({"url": "x"}, mock={})

        with collect():
            suite = register_suite(
                "s",
                [test("a", request_fn, {}), lambda c: None, test("b", request_fn, {})],
                ExecContext(strict=False),
            )

        assert [t.title for t in suite.tests] == ["a", "b"]
        assert len(suite.after) == 1

    def test_hook_failure_reported_by_framework(self, run_declared):
        """Hook errors are not swallowed by the builder."""
        request_fn = build_request({"url": "x"}, mock={})

        def broken(context):
            raise RuntimeError("setup broke")

        def declare():
            register_suite("s", [broken, test("a", request_fn, {})], ExecContext())

        stats = run_declared(declare)

        assert stats.failures == 1
        assert stats.passes == 0
        assert "setup broke" in stats.outcomes[0].error


class TestUtilityActions:
    """Test log and think actions."""

    def test_log_renders_message(self, caplog):
        """log() logs the message rendered with the context."""
        with caplog.at_level(logging.INFO, logger="functest.builders"):
            log("user is {{name}}")({"name": "ada"})

        assert "user is ada" in caplog.text

    def test_think_sleeps(self):
        """think() pauses for the given time."""
        loop_time = []

        async def main():
            loop = asyncio.get_running_loop()
            started = loop.time()
            await think(0.02)({})
            loop_time.append(loop.time() - started)

        asyncio.run(main())
        assert loop_time[0] >= 0.015
