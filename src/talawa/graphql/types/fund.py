"""
Fund GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry

from .organization import Organization
from .user import User


@strawberry.type
class Fund:
    """Fund type for GraphQL API."""

    id: UUID
    name: str
    is_tax_deductible: bool
    created_at: datetime
    updated_at: datetime | None

    organization_id: strawberry.Private[UUID]
    creator_id: strawberry.Private[UUID | None]
    updater_id: strawberry.Private[UUID | None]

    @strawberry.field(description="Organization which the fund belongs to.")
    async def organization(self, info: strawberry.Info) -> Organization | None:
        from ..resolvers.fund import resolve_fund_organization

        return await resolve_fund_organization(self, info)

    @strawberry.field(description="User who created the fund.")
    async def creator(self, info: strawberry.Info) -> User | None:
        from ..resolvers.user import resolve_user_reference

        return await resolve_user_reference(self.creator_id, info)

    @strawberry.field(description="User who last updated the fund.")
    async def updater(self, info: strawberry.Info) -> User | None:
        from ..resolvers.user import resolve_user_reference

        return await resolve_user_reference(self.updater_id, info)
