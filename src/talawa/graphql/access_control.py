"""
Shared access control logic for GraphQL resolvers
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ..auth.middleware import get_auth_context_optional
from ..logging import get_logger
from .errors import UnauthenticatedError

if TYPE_CHECKING:
    from uuid import UUID

    from ..auth.context import AuthContext

logger = get_logger(__name__)

ADMINISTRATOR = "administrator"


async def get_auth_context_from_info(info: strawberry.Info) -> AuthContext | None:
    """
    Extract auth context from GraphQL info object.

    Returns None if request is not available.
    """
    request = info.context.get("request")
    if not request:
        logger.error("Request not found in GraphQL context")
        return None

    return await get_auth_context_optional(authorization=request.headers.get("authorization"))


async def require_current_user_id(info: strawberry.Info) -> UUID:
    """Return the caller's user id or raise ``UnauthenticatedError``."""
    auth_context = await get_auth_context_from_info(info)
    if not auth_context or not auth_context.is_authenticated or auth_context.user_id is None:
        raise UnauthenticatedError()
    return auth_context.user_id


def is_administrator(role: str | None) -> bool:
    return role == ADMINISTRATOR


def can_update_fund(user_role: str | None, membership_role: str | None) -> bool:
    """
    Check if a user may modify a fund.

    Allowed for global administrators and for administrators of the
    organization owning the fund.
    """
    return is_administrator(user_role) or is_administrator(membership_role)


def can_view_fund(user_role: str | None, membership_role: str | None) -> bool:
    """
    Check if a user may read a fund.

    Allowed for global administrators and for any member of the organization
    owning the fund.
    """
    return is_administrator(user_role) or membership_role is not None
