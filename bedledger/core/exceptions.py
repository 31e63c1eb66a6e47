"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    code: str = "error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    code = "validation_error"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    code = "not_found"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    code = "authentication_failed"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(AppException):
    """Actor lacks rights for the operation."""

    code = "forbidden"

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class RelationshipMismatch(AppException):
    """Room or bed does not belong to the stated parent."""

    code = "relationship_mismatch"

    def __init__(self, detail: str = "Entity does not belong to the specified parent") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class BedUnavailable(AppException):
    """Bed is not AVAILABLE at claim time."""

    code = "bed_unavailable"

    def __init__(self, detail: str = "Bed is not available for booking") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class BedAlreadyClaimed(AppException):
    """Another booking holds the bed (a concurrent claim won)."""

    code = "bed_already_claimed"

    def __init__(self, detail: str = "Bed already has an active booking") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidTransition(AppException):
    """Requested booking status change is not permitted."""

    code = "invalid_transition"

    def __init__(self, current: str, target: str, detail: str | None = None) -> None:
        self.current = current
        self.target = target
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail or f"Invalid booking transition: {current} → {target}",
        )


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    code = "rate_limited"

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)


class ReferenceCollision(Exception):
    """Generated booking reference already exists.

    Internal only: the allocator regenerates the reference and retries.
    """

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"Booking reference collision: {reference}")


class ConflictError(AppException):
    """Request conflicts with the current state of a resource."""

    code = "conflict"

    def __init__(self, detail: str = "Resource conflict") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
