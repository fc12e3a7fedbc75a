"""
GraphQL errors raised by resolvers.

Every error carries a machine-readable ``code`` in its extensions; errors about
specific arguments also carry the offending ``issues``.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from graphql import GraphQLError

if TYPE_CHECKING:
    from .arguments import ArgumentIssue


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENTS = "invalid_arguments"
    ARGUMENTS_ASSOCIATED_RESOURCES_NOT_FOUND = "arguments_associated_resources_not_found"
    FORBIDDEN_ACTION_ON_ARGUMENTS_ASSOCIATED_RESOURCES = (
        "forbidden_action_on_arguments_associated_resources"
    )
    UNAUTHORIZED_ACTION_ON_ARGUMENTS_ASSOCIATED_RESOURCES = (
        "unauthorized_action_on_arguments_associated_resources"
    )
    UNEXPECTED = "unexpected"


class TalawaGraphQLError(GraphQLError):
    """Base error whose extensions are exposed to API clients."""

    code: ErrorCode
    default_message: str

    def __init__(
        self,
        issues: Sequence[ArgumentIssue] | None = None,
        message: str | None = None,
    ):
        extensions: dict[str, Any] = {"code": self.code.value}
        if issues is not None:
            extensions["issues"] = [issue.to_extension() for issue in issues]
        self.issues = list(issues or [])
        super().__init__(message or self.default_message, extensions=extensions)


class UnauthenticatedError(TalawaGraphQLError):
    code = ErrorCode.UNAUTHENTICATED
    default_message = "Only authenticated users can perform this action."


class InvalidArgumentsError(TalawaGraphQLError):
    code = ErrorCode.INVALID_ARGUMENTS
    default_message = "Invalid arguments provided."


class ArgumentsAssociatedResourcesNotFoundError(TalawaGraphQLError):
    code = ErrorCode.ARGUMENTS_ASSOCIATED_RESOURCES_NOT_FOUND
    default_message = "No associated resources found for the provided arguments."


class ForbiddenActionOnArgumentsAssociatedResourcesError(TalawaGraphQLError):
    code = ErrorCode.FORBIDDEN_ACTION_ON_ARGUMENTS_ASSOCIATED_RESOURCES
    default_message = (
        "This action is forbidden on the resources associated to the provided arguments."
    )


class UnauthorizedActionOnArgumentsAssociatedResourcesError(TalawaGraphQLError):
    code = ErrorCode.UNAUTHORIZED_ACTION_ON_ARGUMENTS_ASSOCIATED_RESOURCES
    default_message = (
        "You are not authorized to perform this action on the resources associated to the "
        "provided arguments."
    )


class UnexpectedError(TalawaGraphQLError):
    """A detected inconsistency; the cause is logged, never exposed."""

    code = ErrorCode.UNEXPECTED
    default_message = "Something went wrong. Please try again."
