"""
Comment GraphQL type definitions
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

import strawberry

from ..connection import Connection
from .user import User


class CommentVoteType(Enum):
    DOWN_VOTE = "down_vote"
    UP_VOTE = "up_vote"


@strawberry.type
class Comment:
    """Comment type for GraphQL API."""

    id: UUID
    body: str
    created_at: datetime
    updated_at: datetime | None

    creator_id: strawberry.Private[UUID | None]

    @strawberry.field(description="User who created the comment.")
    async def creator(self, info: strawberry.Info) -> User | None:
        from ..resolvers.user import resolve_user_reference

        return await resolve_user_reference(self.creator_id, info)

    @strawberry.field(
        description="GraphQL connection to traverse through the voters that up voted the comment."
    )
    async def up_voters(
        self,
        info: strawberry.Info,
        after: str | None = None,
        before: str | None = None,
        first: int | None = None,
        last: int | None = None,
    ) -> Connection[User]:
        from ..resolvers.comment import resolve_comment_voters

        return await resolve_comment_voters(
            self,
            info,
            CommentVoteType.UP_VOTE,
            {"after": after, "before": before, "first": first, "last": last},
        )

    @strawberry.field(
        description=(
            "GraphQL connection to traverse through the voters that down voted the comment."
        )
    )
    async def down_voters(
        self,
        info: strawberry.Info,
        after: str | None = None,
        before: str | None = None,
        first: int | None = None,
        last: int | None = None,
    ) -> Connection[User]:
        from ..resolvers.comment import resolve_comment_voters

        return await resolve_comment_voters(
            self,
            info,
            CommentVoteType.DOWN_VOTE,
            {"after": after, "before": before, "first": first, "last": last},
        )

    @strawberry.field(description="Total number of up votes on the comment.")
    async def up_votes_count(self, info: strawberry.Info) -> int:
        from ..resolvers.comment import resolve_comment_votes_count

        return await resolve_comment_votes_count(self, info, CommentVoteType.UP_VOTE)

    @strawberry.field(description="Total number of down votes on the comment.")
    async def down_votes_count(self, info: strawberry.Info) -> int:
        from ..resolvers.comment import resolve_comment_votes_count

        return await resolve_comment_votes_count(self, info, CommentVoteType.DOWN_VOTE)
