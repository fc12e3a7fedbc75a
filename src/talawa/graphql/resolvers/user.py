from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import select

from ...database.connection import get_async_session
from ...dbmodels import Users
from ...logging import get_logger
from ..access_control import require_current_user_id
from ..errors import UnauthenticatedError
from ..loaders import get_loaders

if TYPE_CHECKING:
    from ..types.user import User

logger = get_logger(__name__)


def to_user_type(user: Users) -> User:
    """Convert a user row to its GraphQL type."""
    from ..types.user import User as UserType
    from ..types.user import UserRole

    return UserType(
        id=user.id,
        name=user.name,
        email_address=user.email_address,
        role=UserRole(user.role),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


async def resolve_current_user(info: strawberry.Info) -> User:
    """
    Resolve the authenticated caller.

    A token whose user id no longer resolves to a user is treated as
    unauthenticated.
    """
    current_user_id = await require_current_user_id(info)

    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.id == current_user_id))
        user = result.scalar_one_or_none()

    if user is None:
        logger.info("Authenticated user no longer exists", user_id=str(current_user_id))
        raise UnauthenticatedError()

    return to_user_type(user)


async def resolve_user_reference(user_id: UUID | None, info: strawberry.Info) -> User | None:
    """Resolve a nullable user reference through the request's user loader."""
    if user_id is None:
        return None

    user = await get_loaders(info).user_loader.load(user_id)
    return to_user_type(user) if user is not None else None
