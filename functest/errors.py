"""
Functional Test Errors

Exceptions raised while declaring, loading and running functional tests.
Assertion failures are plain ``AssertionError`` so any test framework
reports them the usual way.
"""


class FuncTestError(Exception):
    """Base class for all functest errors."""

    pass


class InvalidActionError(FuncTestError, TypeError):
    """Raised when an action is neither a hook, an each-hook nor a test."""

    def __init__(self, action, index: int):
        self.action = action
        self.index = index
        super().__init__(f"Action #{index} has unsupported type {type(action).__name__}: {action!r}")


class ActionOrderError(FuncTestError):
    """Raised when setup/teardown actions are interleaved between test actions."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(
            f"Test action #{index} follows a teardown action; "
            "hooks between tests are not supported"
        )


class UnknownAssertionError(FuncTestError, KeyError):
    """Raised when a test names an assertion the resource does not provide."""

    def __init__(self, name: str, available):
        self.name = name
        self.available = sorted(available)
        super().__init__(f"Unknown assertion '{name}'. Available: {', '.join(self.available)}")

    def __str__(self) -> str:
        return self.args[0]


class RegistrationError(FuncTestError):
    """Raised when suites, tests or hooks are declared outside a collection."""

    pass


class TransportError(FuncTestError):
    """
    Raised by the transport when a request fails.

    ``response`` is set when the server answered (non-2xx status) and is
    None when no response was received at all.
    """

    def __init__(self, message: str, response=None):
        self.response = response
        super().__init__(message)


class ConfigError(FuncTestError):
    """Raised when configuration cannot be loaded."""

    pass
