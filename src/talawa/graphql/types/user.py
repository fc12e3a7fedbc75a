"""
User GraphQL type definitions
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

import strawberry


@strawberry.enum
class UserRole(Enum):
    """Global role of a user."""

    ADMINISTRATOR = "administrator"
    REGULAR = "regular"


@strawberry.type
class User:
    """User type for GraphQL API."""

    id: UUID
    name: str
    email_address: str
    role: UserRole
    created_at: datetime
    updated_at: datetime | None
