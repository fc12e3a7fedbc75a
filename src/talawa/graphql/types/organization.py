"""
Organization GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry


@strawberry.type
class Organization:
    """Organization type for GraphQL API."""

    id: UUID
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime | None
