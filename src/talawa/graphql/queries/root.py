"""
Root GraphQL query definitions
"""

import strawberry

from ..types.comment import Comment
from ..types.fund import Fund
from ..types.user import User


@strawberry.input
class QueryCommentInput:
    id: strawberry.ID


@strawberry.input
class QueryFundInput:
    id: strawberry.ID


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field(name="currentUser")
    async def current_user(self, info: strawberry.Info) -> User:
        """Get the current authenticated user."""
        from ..resolvers.user import resolve_current_user

        return await resolve_current_user(info)

    @strawberry.field
    async def comment(self, info: strawberry.Info, input: QueryCommentInput) -> Comment:
        """Get a comment by ID."""
        from ..resolvers.comment import resolve_comment_by_id

        return await resolve_comment_by_id(info, {"input": {"id": input.id}})

    @strawberry.field
    async def fund(self, info: strawberry.Info, input: QueryFundInput) -> Fund:
        """Get a fund by ID."""
        from ..resolvers.fund import resolve_fund_by_id

        return await resolve_fund_by_id(info, {"input": {"id": input.id}})
