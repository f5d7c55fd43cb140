"""
Error taxonomy for the interaction driver.

Every failure raised by the core derives from DriverError and carries a
machine-readable code. Errors propagate unchanged up to Browser.run(), which
renders them as an error envelope.
"""

from typing import Any


class DriverError(Exception):
    """Base driver error with machine-readable code."""

    code = "DRIVER_ERROR"

    def __init__(self, message: str, code: str = None) -> None:
        if code:
            self.code = code
        super().__init__(message)


class SoftMatchFailure(DriverError):
    """An action required at least one match and the engine returned none."""

    code = "NO_MATCH"


class NoOptionsMatched(SoftMatchFailure):
    def __init__(self, matcher: Any) -> None:
        self.matcher = matcher
        super().__init__(f"No options matched {matcher}")


class StaleTargetError(DriverError):
    """The page, context or browser a call refers to no longer exists."""

    code = "STALE_TARGET"


class NoActivePage(StaleTargetError):
    code = "NO_ACTIVE_PAGE"

    def __init__(self, message: str = "Tried to do browser action, but no open page.") -> None:
        super().__init__(message)


class EngineInvocationError(DriverError):
    """The underlying browser engine call raised."""

    code = "ENGINE_ERROR"

    def __init__(self, method: str, cause: BaseException) -> None:
        self.method = method
        self.cause = cause
        super().__init__(f"{method} failed: {cause}")


class MalformedArgumentError(DriverError):
    """A wire argument could not be decoded. Raised before any engine call."""

    code = "MALFORMED_ARGUMENT"
