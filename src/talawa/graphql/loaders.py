from uuid import UUID

import strawberry
from sqlalchemy import select
from strawberry.dataloader import DataLoader

from ..database.connection import get_async_session
from ..dbmodels import Organizations, Users


async def load_users(keys: list[UUID]) -> list[Users | None]:
    """Batch load users by ID."""
    async with get_async_session() as session:
        stmt = select(Users).where(Users.id.in_(keys))
        result = await session.execute(stmt)
        users_map = {user.id: user for user in result.scalars().all()}
        return [users_map.get(key) for key in keys]


async def load_organizations(keys: list[UUID]) -> list[Organizations | None]:
    """Batch load organizations by ID."""
    async with get_async_session() as session:
        stmt = select(Organizations).where(Organizations.id.in_(keys))
        result = await session.execute(stmt)
        organizations_map = {org.id: org for org in result.scalars().all()}
        return [organizations_map.get(key) for key in keys]


class Loaders:
    """Per-request batching loaders, created by the GraphQL context getter."""

    def __init__(self):
        self.user_loader = DataLoader(load_fn=load_users)
        self.organization_loader = DataLoader(load_fn=load_organizations)


def get_loaders(info: strawberry.Info) -> Loaders:
    """Return the request's loaders, creating them for contexts built without any."""
    loaders = info.context.get("loaders")
    if loaders is None:
        loaders = Loaders()
        info.context["loaders"] = loaders
    return loaders
