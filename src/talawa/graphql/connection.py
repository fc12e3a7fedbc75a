"""
Cursor connections shared by paginated GraphQL fields.

Connection fields accept ``first``/``after`` for forward traversal or
``last``/``before`` for inverse traversal. Arguments are normalised into
:class:`ParsedConnectionArguments`, rows are fetched one past the page size to
detect further pages, and :func:`transform_to_connection` turns those rows into
a :class:`Connection`.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import strawberry
from pydantic import BaseModel, Field

from .arguments import ArgumentIssue, ParseResult, parse_arguments

NodeType = TypeVar("NodeType")
RowT = TypeVar("RowT")

MAX_PAGE_SIZE = 32


class ConnectionArguments(BaseModel):
    after: str | None = None
    before: str | None = None
    first: int | None = Field(default=None, ge=1, le=MAX_PAGE_SIZE)
    last: int | None = Field(default=None, ge=1, le=MAX_PAGE_SIZE)


@dataclass(frozen=True)
class ParsedConnectionArguments:
    cursor: str | None
    is_inversed: bool
    limit: int


def cursor_argument_name(is_inversed: bool) -> str:
    """Name of the argument that carries the cursor for a traversal direction."""
    return "before" if is_inversed else "after"


def transform_connection_arguments(
    arguments: Mapping[str, Any],
) -> ParseResult[ParsedConnectionArguments]:
    parsed = parse_arguments(ConnectionArguments, arguments)
    if not parsed.success:
        return ParseResult(issues=parsed.issues)

    args = parsed.data
    issues: list[ArgumentIssue] = []

    if args.first is not None:
        if args.last is not None:
            issues.append(
                ArgumentIssue(
                    ("last",), 'Argument "last" cannot be provided with argument "first".'
                )
            )
        if args.before is not None:
            issues.append(
                ArgumentIssue(
                    ("before",), 'Argument "before" cannot be provided with argument "first".'
                )
            )
        # One extra row tells whether a next page exists
        result = ParsedConnectionArguments(
            cursor=args.after, is_inversed=False, limit=args.first + 1
        )
    elif args.last is not None:
        if args.after is not None:
            issues.append(
                ArgumentIssue(
                    ("after",), 'Argument "after" cannot be provided with argument "last".'
                )
            )
        result = ParsedConnectionArguments(
            cursor=args.before, is_inversed=True, limit=args.last + 1
        )
    else:
        issues.append(
            ArgumentIssue(("first",), 'A non-null value for argument "first" must be provided.')
        )
        issues.append(
            ArgumentIssue(("last",), 'A non-null value for argument "last" must be provided.')
        )
        return ParseResult(issues=issues)

    return ParseResult(data=result, issues=issues)


@strawberry.type
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None
    end_cursor: str | None


@strawberry.type
class Edge(Generic[NodeType]):
    cursor: str
    node: NodeType


@strawberry.type
class Connection(Generic[NodeType]):
    edges: list[Edge[NodeType]]
    page_info: PageInfo


def transform_to_connection(
    parsed_args: ParsedConnectionArguments,
    raw_nodes: Sequence[RowT],
    create_cursor: Callable[[RowT], str],
    create_node: Callable[[RowT], NodeType],
) -> Connection[NodeType]:
    """Build a connection from rows fetched with ``limit`` in traversal order."""
    rows = list(raw_nodes)
    has_next_page = False
    has_previous_page = False

    # Inverse traversal fetches rows backwards; restore natural order
    if parsed_args.is_inversed:
        rows.reverse()

    if len(rows) == parsed_args.limit:
        if parsed_args.is_inversed:
            has_previous_page = True
            rows.pop(0)
        else:
            has_next_page = True
            rows.pop()

    # A cursor means there are edges on the side it was taken from
    if parsed_args.is_inversed:
        has_next_page = parsed_args.cursor is not None
    else:
        has_previous_page = parsed_args.cursor is not None

    edges = [Edge(cursor=create_cursor(row), node=create_node(row)) for row in rows]

    return Connection(
        edges=edges,
        page_info=PageInfo(
            has_next_page=has_next_page,
            has_previous_page=has_previous_page,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        ),
    )
