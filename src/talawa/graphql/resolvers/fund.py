from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

import strawberry
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_core import PydanticCustomError
from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError

from ...database.connection import get_async_session
from ...dbmodels import Funds, OrganizationMemberships, Organizations, Users
from ...logging import get_logger
from ..access_control import can_update_fund, can_view_fund, require_current_user_id
from ..arguments import ArgumentIssue, parse_arguments
from ..errors import (
    ArgumentsAssociatedResourcesNotFoundError,
    ForbiddenActionOnArgumentsAssociatedResourcesError,
    InvalidArgumentsError,
    UnauthenticatedError,
    UnauthorizedActionOnArgumentsAssociatedResourcesError,
    UnexpectedError,
)
from ..loaders import get_loaders

if TYPE_CHECKING:
    from ..types.fund import Fund
    from ..types.organization import Organization

logger = get_logger(__name__)

NAME_NOT_AVAILABLE = "This name is not available."
FUND_NAME_CONSTRAINT = "funds_organization_id_name_key"


class _FundIdInput(BaseModel):
    id: UUID


class QueryFundArguments(BaseModel):
    input: _FundIdInput


class _UpdateFundInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    name: str | None = Field(default=None, min_length=1, max_length=256)
    is_tax_deductible: bool | None = Field(default=None, alias="isTaxDeductible")

    @model_validator(mode="after")
    def require_optional_argument(self) -> _UpdateFundInput:
        if self.name is None and self.is_tax_deductible is None:
            raise PydanticCustomError(
                "missing_optional_argument", "At least one optional argument must be provided."
            )
        return self


class UpdateFundArguments(BaseModel):
    input: _UpdateFundInput


def to_fund_type(fund: Funds) -> Fund:
    """Convert a fund row to its GraphQL type."""
    from ..types.fund import Fund as FundType

    return FundType(
        id=fund.id,
        name=fund.name,
        is_tax_deductible=fund.is_tax_deductible,
        created_at=fund.created_at,
        updated_at=fund.updated_at,
        organization_id=fund.organization_id,
        creator_id=fund.creator_id,
        updater_id=fund.updater_id,
    )


def to_organization_type(organization: Organizations) -> Organization:
    from ..types.organization import Organization as OrganizationType

    return OrganizationType(
        id=organization.id,
        name=organization.name,
        description=organization.description,
        created_at=organization.created_at,
        updated_at=organization.updated_at,
    )


async def load_user_role(user_id: UUID) -> str | None:
    """Return the global role of a user, or None if the user does not exist."""
    async with get_async_session() as session:
        result = await session.execute(select(Users.role).where(Users.id == user_id))
        return result.scalar_one_or_none()


async def load_fund_with_membership(
    fund_id: UUID, user_id: UUID
) -> tuple[Funds, str | None] | None:
    """
    Load a fund together with the user's role in the fund's organization.

    Returns None if the fund does not exist. The role is None when the user is
    not a member of the organization.
    """
    async with get_async_session() as session:
        stmt = (
            select(Funds, OrganizationMemberships.role)
            .outerjoin(
                OrganizationMemberships,
                and_(
                    OrganizationMemberships.organization_id == Funds.organization_id,
                    OrganizationMemberships.member_id == user_id,
                ),
            )
            .where(Funds.id == fund_id)
        )
        result = await session.execute(stmt)
        row = result.first()

    if row is None:
        return None
    return row[0], row[1]


async def load_role_and_fund(
    user_id: UUID, fund_id: UUID
) -> tuple[str | None, tuple[Funds, str | None] | None]:
    """Run the user role and fund lookups concurrently.

    If either lookup fails the other is cancelled, and the first failure is
    raised as is.
    """
    try:
        async with asyncio.TaskGroup() as tg:
            role_task = tg.create_task(load_user_role(user_id))
            fund_task = tg.create_task(load_fund_with_membership(fund_id, user_id))
    except ExceptionGroup as group:
        raise group.exceptions[0] from None

    return role_task.result(), fund_task.result()


def violated_constraint(error: IntegrityError) -> str | None:
    """Name of the constraint an ``IntegrityError`` reports, if it can be told."""
    # asyncpg attaches the name to the driver exception the DBAPI error wraps
    for candidate in (error.orig, getattr(error.orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name

    # SQLite names the columns of a unique index instead of the constraint
    if "UNIQUE constraint failed: funds.organization_id, funds.name" in str(error.orig):
        return FUND_NAME_CONSTRAINT
    return None


async def is_fund_name_taken(organization_id: UUID, name: str, excluded_fund_id: UUID) -> bool:
    """Check whether another fund of the organization already uses ``name``."""
    async with get_async_session() as session:
        stmt = (
            select(Funds.id)
            .where(
                Funds.organization_id == organization_id,
                Funds.name == name,
                Funds.id != excluded_fund_id,
            )
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None


async def update_fund(info: strawberry.Info, arguments: Mapping[str, Any]) -> Fund:
    """
    Update the name and/or tax deductibility of a fund.

    Only global administrators and administrators of the organization owning
    the fund may update it. Fund names are unique within an organization.
    """
    current_user_id = await require_current_user_id(info)

    parsed = parse_arguments(UpdateFundArguments, arguments)
    if not parsed.success:
        raise InvalidArgumentsError(parsed.issues)

    fund_input = parsed.data.input

    user_role, fund_row = await load_role_and_fund(current_user_id, fund_input.id)

    if user_role is None:
        logger.warning("Authenticated user no longer exists", user_id=str(current_user_id))
        raise UnauthenticatedError()

    if fund_row is None:
        raise ArgumentsAssociatedResourcesNotFoundError([ArgumentIssue(("input", "id"))])

    fund, membership_role = fund_row

    if fund_input.name is not None and await is_fund_name_taken(
        fund.organization_id, fund_input.name, fund_input.id
    ):
        raise ForbiddenActionOnArgumentsAssociatedResourcesError(
            [ArgumentIssue(("input", "name"), NAME_NOT_AVAILABLE)]
        )

    if not can_update_fund(user_role, membership_role):
        logger.info(
            "Fund update denied",
            fund_id=str(fund_input.id),
            user_id=str(current_user_id),
        )
        raise UnauthorizedActionOnArgumentsAssociatedResourcesError(
            [ArgumentIssue(("input", "id"))]
        )

    values: dict[str, Any] = {
        "updater_id": current_user_id,
        "updated_at": datetime.now(UTC),
    }
    if fund_input.name is not None:
        values["name"] = fund_input.name
    if fund_input.is_tax_deductible is not None:
        values["is_tax_deductible"] = fund_input.is_tax_deductible

    stmt = update(Funds).where(Funds.id == fund_input.id).values(**values).returning(Funds)

    try:
        async with get_async_session() as session:
            result = await session.execute(stmt)
            updated_fund = result.scalar_one_or_none()
    except IntegrityError as e:
        constraint = violated_constraint(e)
        # A concurrent rename can claim the name after the availability check
        if fund_input.name is not None and constraint == FUND_NAME_CONSTRAINT:
            logger.info("Fund name conflict on write", fund_id=str(fund_input.id))
            raise ForbiddenActionOnArgumentsAssociatedResourcesError(
                [ArgumentIssue(("input", "name"), NAME_NOT_AVAILABLE)]
            ) from e

        logger.error(
            "Fund update violated a constraint",
            fund_id=str(fund_input.id),
            constraint=constraint,
        )
        raise UnexpectedError() from e

    if updated_fund is None:
        logger.error("Fund vanished before it could be updated", fund_id=str(fund_input.id))
        raise UnexpectedError()

    logger.info("Fund updated", fund_id=str(updated_fund.id), user_id=str(current_user_id))
    return to_fund_type(updated_fund)


async def resolve_fund_by_id(info: strawberry.Info, arguments: Mapping[str, Any]) -> Fund:
    """Resolve a fund readable by the caller from ``{"input": {"id": ...}}``."""
    current_user_id = await require_current_user_id(info)

    parsed = parse_arguments(QueryFundArguments, arguments)
    if not parsed.success:
        raise InvalidArgumentsError(parsed.issues)

    fund_id = parsed.data.input.id

    user_role, fund_row = await load_role_and_fund(current_user_id, fund_id)

    if user_role is None:
        raise UnauthenticatedError()

    if fund_row is None:
        raise ArgumentsAssociatedResourcesNotFoundError([ArgumentIssue(("input", "id"))])

    fund, membership_role = fund_row
    if not can_view_fund(user_role, membership_role):
        raise UnauthorizedActionOnArgumentsAssociatedResourcesError(
            [ArgumentIssue(("input", "id"))]
        )

    return to_fund_type(fund)


async def resolve_fund_organization(fund: Fund, info: strawberry.Info) -> Organization | None:
    organization = await get_loaders(info).organization_loader.load(fund.organization_id)
    return to_organization_type(organization) if organization is not None else None
