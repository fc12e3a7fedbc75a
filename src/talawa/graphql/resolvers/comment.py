from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

import strawberry
from pydantic import BaseModel
from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.orm import aliased, selectinload

from ...database.connection import get_async_session
from ...dbmodels import Comments, CommentVotes
from ...logging import get_logger
from ..arguments import ArgumentIssue, ParseResult, parse_arguments
from ..connection import (
    ParsedConnectionArguments,
    cursor_argument_name,
    transform_connection_arguments,
    transform_to_connection,
)
from ..cursors import VoteCursor, decode_cursor, encode_cursor
from ..errors import ArgumentsAssociatedResourcesNotFoundError, InvalidArgumentsError
from .user import to_user_type

if TYPE_CHECKING:
    from ..connection import Connection
    from ..types.comment import Comment, CommentVoteType
    from ..types.user import User

logger = get_logger(__name__)


class _CommentIdInput(BaseModel):
    id: UUID


class QueryCommentArguments(BaseModel):
    input: _CommentIdInput


@dataclass(frozen=True)
class VotersArguments:
    connection: ParsedConnectionArguments
    cursor: VoteCursor | None


def to_comment_type(comment: Comments) -> Comment:
    """Convert a comment row to its GraphQL type."""
    from ..types.comment import Comment as CommentType

    return CommentType(
        id=comment.id,
        body=comment.body,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        creator_id=comment.creator_id,
    )


async def resolve_comment_by_id(info: strawberry.Info, arguments: Mapping[str, Any]) -> Comment:
    """Resolve a comment from ``{"input": {"id": ...}}`` arguments."""
    parsed = parse_arguments(QueryCommentArguments, arguments)
    if not parsed.success:
        raise InvalidArgumentsError(parsed.issues)

    comment_id = parsed.data.input.id

    async with get_async_session() as session:
        result = await session.execute(select(Comments).where(Comments.id == comment_id))
        comment = result.scalar_one_or_none()

    if comment is None:
        logger.info("Comment not found", comment_id=str(comment_id))
        raise ArgumentsAssociatedResourcesNotFoundError([ArgumentIssue(("input", "id"))])

    return to_comment_type(comment)


def parse_voters_arguments(arguments: Mapping[str, Any]) -> ParseResult[VotersArguments]:
    """
    Parse connection arguments of a voters field and decode its cursor.

    A cursor that does not decode is reported against ``after`` or ``before``
    depending on the traversal direction.
    """
    transformed = transform_connection_arguments(arguments)
    if transformed.data is None:
        return ParseResult(issues=transformed.issues)

    connection_args = transformed.data
    issues = list(transformed.issues)
    cursor = None

    if connection_args.cursor is not None:
        cursor = decode_cursor(connection_args.cursor, VoteCursor)
        if cursor is None:
            issues.append(
                ArgumentIssue(
                    (cursor_argument_name(connection_args.is_inversed),), "Not a valid cursor."
                )
            )

    return ParseResult(
        data=VotersArguments(connection=connection_args, cursor=cursor), issues=issues
    )


def build_voters_statement(
    comment_id: UUID, vote_type: CommentVoteType, arguments: VotersArguments
) -> Select[tuple[CommentVotes]]:
    """
    Keyset query for one page of votes of ``vote_type`` on a comment.

    Votes are ordered by (created_at, creator_id), descending for forward
    traversal and ascending for inverse traversal. With a cursor, only rows
    strictly past the cursor position are selected, and only while the row the
    cursor points at still exists.
    """
    is_inversed = arguments.connection.is_inversed
    cursor = arguments.cursor

    conditions = [
        CommentVotes.comment_id == comment_id,
        CommentVotes.type == vote_type.value,
        CommentVotes.creator_id.is_not(None),
    ]

    if cursor is not None:
        cursor_vote = aliased(CommentVotes)
        cursor_vote_exists = (
            select(cursor_vote.id)
            .where(
                cursor_vote.created_at == cursor.created_at,
                cursor_vote.creator_id == cursor.creator_id,
                cursor_vote.comment_id == comment_id,
                cursor_vote.type == vote_type.value,
            )
            .exists()
        )

        if is_inversed:
            past_cursor = or_(
                and_(
                    CommentVotes.created_at == cursor.created_at,
                    CommentVotes.creator_id > cursor.creator_id,
                ),
                CommentVotes.created_at > cursor.created_at,
            )
        else:
            past_cursor = or_(
                and_(
                    CommentVotes.created_at == cursor.created_at,
                    CommentVotes.creator_id < cursor.creator_id,
                ),
                CommentVotes.created_at < cursor.created_at,
            )

        conditions.extend([cursor_vote_exists, past_cursor])

    if is_inversed:
        order_by = (CommentVotes.created_at.asc(), CommentVotes.creator_id.asc())
    else:
        order_by = (CommentVotes.created_at.desc(), CommentVotes.creator_id.desc())

    return (
        select(CommentVotes)
        .where(*conditions)
        .options(selectinload(CommentVotes.creator))
        .order_by(*order_by)
        .limit(arguments.connection.limit)
    )


def create_vote_cursor(vote: CommentVotes) -> str:
    return encode_cursor(VoteCursor(created_at=vote.created_at, creator_id=vote.creator_id))


async def resolve_comment_voters(
    comment: Comment,
    info: strawberry.Info,
    vote_type: CommentVoteType,
    arguments: Mapping[str, Any],
) -> Connection[User]:
    """Resolve a page of users who voted ``vote_type`` on the comment."""
    parsed = parse_voters_arguments(arguments)
    if not parsed.success:
        raise InvalidArgumentsError(parsed.issues)

    voters_args = parsed.data
    stmt = build_voters_statement(comment.id, vote_type, voters_args)

    async with get_async_session() as session:
        result = await session.execute(stmt)
        votes = result.scalars().all()

    if voters_args.cursor is not None and not votes:
        logger.info(
            "No votes found past cursor",
            comment_id=str(comment.id),
            vote_type=vote_type.value,
        )
        raise ArgumentsAssociatedResourcesNotFoundError(
            [ArgumentIssue((cursor_argument_name(voters_args.connection.is_inversed),))]
        )

    # Votes whose voter row is gone are skipped
    return transform_to_connection(
        voters_args.connection,
        [vote for vote in votes if vote.creator is not None],
        create_cursor=create_vote_cursor,
        create_node=lambda vote: to_user_type(vote.creator),
    )


async def resolve_comment_votes_count(
    comment: Comment, info: strawberry.Info, vote_type: CommentVoteType
) -> int:
    async with get_async_session() as session:
        stmt = select(func.count(CommentVotes.id)).where(
            CommentVotes.comment_id == comment.id,
            CommentVotes.type == vote_type.value,
        )
        result = await session.execute(stmt)
        return result.scalar() or 0
