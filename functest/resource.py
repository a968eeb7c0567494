"""
Resources and Assertions

A ``Resource`` carries one response plus the data captured from it and
exposes named assertions. Assertions are registered with ``@assertion`` and
looked up once, when a test is declared, through ``resolve_assertions``:

    class UserResource(Resource):
        @assertion("user_name")
        def assert_user_name(self, expected, context):
            assert self.res.data["name"] == expected
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from .errors import UnknownAssertionError
from .models import Response

ASSERTION_ATTR = "__functest_assertion__"
_UNSET = object()


def assertion(name: str) -> Callable:
    """Mark a Resource method as the assertion called ``name``."""

    def decorator(fn: Callable) -> Callable:
        setattr(fn, ASSERTION_ATTR, name)
        return fn

    return decorator


@dataclass
class ResolvedAssertion:
    """An assertion bound to its expected value, ready to run against a resource."""

    name: str
    check: Callable[["Resource", Any, Mapping], None]
    expected: Any

    def __call__(self, resource: "Resource", context: Mapping, expected: Any = _UNSET) -> None:
        self.check(resource, self.expected if expected is _UNSET else expected, context)


def _contains(actual: Any, expected: Any) -> bool:
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return False
        return all(k in actual and _contains(actual[k], v) for k, v in expected.items())
    if isinstance(actual, (str, list, tuple)) and not isinstance(expected, (list, tuple)):
        return expected in actual
    return actual == expected


class Resource:
    """Response holder with the built-in assertion set."""

    def __init__(self, res: Optional[Response] = None, captured_data: Optional[Dict] = None):
        self.res = res
        self.captured_data = captured_data or {}

    @classmethod
    def assertion_map(cls) -> Dict[str, Callable]:
        """Assertion name -> function, subclasses overriding their bases."""
        registry = {}
        for klass in reversed(cls.__mro__):
            for attr in vars(klass).values():
                name = getattr(attr, ASSERTION_ATTR, None)
                if name:
                    registry[name] = attr
        return registry

    @property
    def data(self) -> Any:
        return self.res.data if self.res is not None else None

    @assertion("status")
    def assert_status(self, expected: int, context: Mapping) -> None:
        actual = self.res.status if self.res is not None else None
        if actual != expected:
            raise AssertionError(f"Status mismatch. Expected: {expected}, Actual: {actual}")

    @assertion("data")
    def assert_data(self, expected: Any, context: Mapping) -> None:
        if self.data != expected:
            raise AssertionError(f"Data mismatch. Expected: {expected!r}, Actual: {self.data!r}")

    @assertion("contains")
    def assert_contains(self, expected: Any, context: Mapping) -> None:
        if not _contains(self.data, expected):
            raise AssertionError(f"Data {self.data!r} does not contain {expected!r}")

    @assertion("headers")
    def assert_headers(self, expected: Mapping[str, str], context: Mapping) -> None:
        headers = self.res.headers if self.res is not None else {}
        actual = {k.lower(): v for k, v in headers.items()}
        for name, value in expected.items():
            if name.lower() not in actual:
                raise AssertionError(f"Header missing: {name}")
            if actual[name.lower()] != value:
                raise AssertionError(
                    f"Header {name} mismatch. Expected: {value}, Actual: {actual[name.lower()]}"
                )

    @assertion("captured")
    def assert_captured(self, expected: Mapping[str, Any], context: Mapping) -> None:
        if not _contains(self.captured_data, dict(expected)):
            raise AssertionError(f"Captured data {self.captured_data!r} does not match {expected!r}")

    @assertion("check")
    def assert_check(self, predicate: Callable[["Resource", Mapping], Any], context: Mapping) -> None:
        if not predicate(self, context):
            name = getattr(predicate, "__name__", "predicate")
            raise AssertionError(f"Check {name} returned a falsy value")

    def __repr__(self) -> str:
        status = self.res.status if self.res is not None else None
        return f"{type(self).__name__}(status={status}, captured={sorted(self.captured_data)})"


def resolve_assertions(
    resource_cls: Type[Resource], assertions: Mapping[str, Any]
) -> List[ResolvedAssertion]:
    """
    Bind assertion names to their implementations.

    Raises:
        UnknownAssertionError: A name has no implementation on resource_cls
    """
    available = resource_cls.assertion_map()
    resolved = []
    for name, expected in assertions.items():
        if name not in available:
            raise UnknownAssertionError(name, available)
        resolved.append(ResolvedAssertion(name=name, check=available[name], expected=expected))
    return resolved
