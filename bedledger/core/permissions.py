"""Authenticated principal and roles."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    """Account roles supplied by the identity service."""

    TENANT = "tenant"
    OWNER = "owner"  # property-owning account
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of an operation."""

    id: UUID
    role: UserRole

    @property
    def is_owner(self) -> bool:
        return self.role in (UserRole.OWNER, UserRole.ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
