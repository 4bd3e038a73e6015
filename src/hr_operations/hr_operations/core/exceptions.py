class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when an operation collides with existing state (overlap, duplicate, final record)."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class UpstreamError(DomainError):
    """Raised when a collaborating service (employee directory) cannot be reached or answers badly."""


class AuthenticationError(DomainError):
    """Raised when the acting principal is unknown or inactive."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
