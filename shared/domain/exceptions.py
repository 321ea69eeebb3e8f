"""
Domain Errors

Every rejected engine operation raises one of these with a stable
``code`` so that clients can tell an overlap from a capacity problem
from a missing record. The HTTP mapping lives in
``shared.infrastructure.exception_handler``.
"""


class DomainError(Exception):
    """Base class for errors raised by the domain layer."""

    default_code = "domain_error"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)

    def __repr__(self):
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class NotFound(DomainError):
    """Property, guest, booking, rating or conversation is absent."""

    default_code = "not_found"


class Conflict(DomainError):
    """Date-range overlap, duplicate rating or illegal status transition."""

    default_code = "conflict"


class InvalidInput(DomainError):
    """Request is well-formed but violates a domain rule."""

    default_code = "invalid_input"


class Forbidden(DomainError):
    """Acting user is not allowed to perform the operation."""

    default_code = "forbidden"


class Unavailable(DomainError):
    """Storage failed transiently; the unit of work was rolled back."""

    default_code = "storage_unavailable"
