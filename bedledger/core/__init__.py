"""Core utilities and security modules."""

from bedledger.core.exceptions import (
    AppException,
    AuthenticationError,
    BedAlreadyClaimed,
    BedUnavailable,
    ConflictError,
    Forbidden,
    InvalidTransition,
    NotFoundError,
    RelationshipMismatch,
    ValidationError,
)
from bedledger.core.permissions import Principal, UserRole
from bedledger.core.security import create_access_token, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "BedAlreadyClaimed",
    "BedUnavailable",
    "ConflictError",
    "Forbidden",
    "InvalidTransition",
    "NotFoundError",
    "RelationshipMismatch",
    "ValidationError",
    "Principal",
    "UserRole",
    "create_access_token",
    "verify_token",
]
