"""
Error taxonomy shared by the registry, the pipeline and capability handlers.

Handlers raise CapabilityError (or a subclass) to choose their own HTTP status;
anything else that escapes a handler is reported as a 500.
"""

from typing import Optional


class CapabilityError(Exception):
    """Failure raised by a capability handler."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.code = code


class RequestValidationError(CapabilityError):
    """Request data does not satisfy the capability schema."""

    status_code = 400

    def __init__(self, field: Optional[str], message: str):
        super().__init__(message)
        self.field = field


class AuthenticationError(CapabilityError):
    status_code = 401


class NotFoundError(CapabilityError):
    status_code = 404


class ModuleUnavailableError(CapabilityError):
    status_code = 503


class RegistrationError(Exception):
    """The registry refused a definition."""


class LoadError(Exception):
    """Capability source could not be turned into a definition."""
