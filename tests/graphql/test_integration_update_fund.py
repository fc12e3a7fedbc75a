"""
Integration tests for the updateFund mutation and the fund query
"""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from talawa.dbmodels import Funds, OrganizationMemberships, Organizations
from talawa.graphql.resolvers.fund import load_role_and_fund, violated_constraint
from talawa.graphql.schema import schema

UPDATE_FUND_MUTATION = """
mutation UpdateFund($input: MutationUpdateFundInput!) {
  updateFund(input: $input) {
    id
    name
    isTaxDeductible
    updatedAt
    organization {
      id
    }
    creator {
      id
    }
    updater {
      id
    }
  }
}
"""

FUND_QUERY = """
query Fund($id: ID!) {
  fund(input: {id: $id}) {
    id
    name
    organization {
      name
    }
  }
}
"""


@dataclass
class FundFixture:
    organization_id: UUID
    fund_id: UUID
    sibling_fund_id: UUID
    foreign_fund_id: UUID
    global_admin_id: UUID
    org_admin_id: UUID
    member_id: UUID
    outsider_id: UUID


@pytest_asyncio.fixture
async def funds(test_database, create_user, add_rows) -> FundFixture:
    """Two organizations; the first owns "General" and "Building", the second its own "General"."""
    global_admin = await create_user(role="administrator")
    org_admin = await create_user()
    member = await create_user()
    outsider = await create_user()

    organization = Organizations(id=uuid4(), name="Helping Hands")
    other_organization = Organizations(id=uuid4(), name="Green Earth")
    now = datetime.now(UTC)

    fund = Funds(
        id=uuid4(),
        name="General",
        is_tax_deductible=False,
        organization_id=organization.id,
        creator_id=org_admin.id,
        created_at=now,
    )
    sibling_fund = Funds(
        id=uuid4(),
        name="Building",
        is_tax_deductible=True,
        organization_id=organization.id,
        created_at=now,
    )
    foreign_fund = Funds(
        id=uuid4(),
        name="Scholarships",
        is_tax_deductible=True,
        organization_id=other_organization.id,
        created_at=now,
    )

    await add_rows(
        organization,
        other_organization,
        OrganizationMemberships(
            member_id=org_admin.id, organization_id=organization.id, role="administrator"
        ),
        OrganizationMemberships(
            member_id=member.id, organization_id=organization.id, role="regular"
        ),
        OrganizationMemberships(
            member_id=outsider.id, organization_id=other_organization.id, role="administrator"
        ),
        fund,
        sibling_fund,
        foreign_fund,
    )

    return FundFixture(
        organization_id=organization.id,
        fund_id=fund.id,
        sibling_fund_id=sibling_fund.id,
        foreign_fund_id=foreign_fund.id,
        global_admin_id=global_admin.id,
        org_admin_id=org_admin.id,
        member_id=member.id,
        outsider_id=outsider.id,
    )


async def _update_fund(context, **fields):
    return await schema.execute(
        UPDATE_FUND_MUTATION,
        variable_values={"input": fields},
        context_value=context,
    )


def _error_extensions(result) -> dict:
    assert result.errors, "expected an error"
    return result.errors[0].extensions


@pytest.mark.integration
@pytest.mark.requires_db
class TestUpdateFundAuthentication:
    """Callers must be authenticated users that still exist."""

    @pytest.mark.asyncio
    async def test_unauthenticated(self, funds, authenticate_as, graphql_context):
        authenticate_as(None)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Renamed")

        assert result.data is None
        assert _error_extensions(result) == {"code": "unauthenticated"}

    @pytest.mark.asyncio
    async def test_unauthenticated_takes_precedence_over_invalid_arguments(
        self, funds, authenticate_as, graphql_context
    ):
        authenticate_as(None)

        result = await _update_fund(graphql_context, id="not-a-uuid")

        assert _error_extensions(result) == {"code": "unauthenticated"}

    @pytest.mark.asyncio
    async def test_deleted_user(self, funds, authenticate_as, graphql_context):
        authenticate_as(uuid4())

        result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Renamed")

        assert _error_extensions(result) == {"code": "unauthenticated"}


@pytest.mark.integration
@pytest.mark.requires_db
class TestUpdateFundArguments:
    """Argument validation."""

    @pytest.mark.asyncio
    async def test_no_optional_argument(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.global_admin_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id))

        assert _error_extensions(result) == {
            "code": "invalid_arguments",
            "issues": [
                {
                    "argumentPath": ["input"],
                    "message": "At least one optional argument must be provided.",
                }
            ],
        }

    @pytest.mark.asyncio
    async def test_null_optional_arguments_count_as_missing(
        self, funds, authenticate_as, graphql_context
    ):
        authenticate_as(funds.global_admin_id)

        result = await _update_fund(
            graphql_context, id=str(funds.fund_id), name=None, isTaxDeductible=None
        )

        assert _error_extensions(result)["code"] == "invalid_arguments"

    @pytest.mark.asyncio
    async def test_invalid_id(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.global_admin_id)

        result = await _update_fund(graphql_context, id="not-a-uuid", name="Renamed")

        extensions = _error_extensions(result)
        assert extensions["code"] == "invalid_arguments"
        assert [issue["argumentPath"] for issue in extensions["issues"]] == [["input", "id"]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "x" * 257])
    async def test_name_length(self, funds, authenticate_as, graphql_context, name):
        authenticate_as(funds.global_admin_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), name=name)

        extensions = _error_extensions(result)
        assert extensions["code"] == "invalid_arguments"
        assert [issue["argumentPath"] for issue in extensions["issues"]] == [["input", "name"]]

    @pytest.mark.asyncio
    async def test_unknown_fund(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.global_admin_id)

        result = await _update_fund(graphql_context, id=str(uuid4()), name="Renamed")

        assert _error_extensions(result) == {
            "code": "arguments_associated_resources_not_found",
            "issues": [{"argumentPath": ["input", "id"]}],
        }


@pytest.mark.integration
@pytest.mark.requires_db
class TestUpdateFundAuthorization:
    """Only global and organization administrators may update a fund."""

    @pytest.mark.asyncio
    async def test_regular_member_denied(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.member_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), isTaxDeductible=True)

        assert _error_extensions(result) == {
            "code": "unauthorized_action_on_arguments_associated_resources",
            "issues": [{"argumentPath": ["input", "id"]}],
        }

    @pytest.mark.asyncio
    async def test_administrator_of_other_organization_denied(
        self, funds, authenticate_as, graphql_context
    ):
        authenticate_as(funds.outsider_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Renamed")

        assert (
            _error_extensions(result)["code"]
            == "unauthorized_action_on_arguments_associated_resources"
        )

    @pytest.mark.asyncio
    async def test_taken_name_reported_before_authorization(
        self, funds, authenticate_as, graphql_context
    ):
        authenticate_as(funds.member_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Building")

        assert (
            _error_extensions(result)["code"] == "forbidden_action_on_arguments_associated_resources"
        )


@pytest.mark.integration
@pytest.mark.requires_db
class TestUpdateFundSuccess:
    """Successful updates."""

    @pytest.mark.asyncio
    async def test_organization_administrator_renames_fund(
        self, funds, authenticate_as, graphql_context
    ):
        authenticate_as(funds.org_admin_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Operations")

        assert result.errors is None
        fund = result.data["updateFund"]
        assert fund["id"] == str(funds.fund_id)
        assert fund["name"] == "Operations"
        assert fund["isTaxDeductible"] is False
        assert fund["updatedAt"] is not None
        assert fund["organization"]["id"] == str(funds.organization_id)
        assert fund["creator"]["id"] == str(funds.org_admin_id)
        assert fund["updater"]["id"] == str(funds.org_admin_id)

    @pytest.mark.asyncio
    async def test_global_administrator_updates_tax_deductibility_only(
        self, funds, authenticate_as, graphql_context
    ):
        authenticate_as(funds.global_admin_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), isTaxDeductible=True)

        assert result.errors is None
        fund = result.data["updateFund"]
        assert fund["name"] == "General"
        assert fund["isTaxDeductible"] is True
        assert fund["updater"]["id"] == str(funds.global_admin_id)

    @pytest.mark.asyncio
    async def test_keeping_own_name(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.org_admin_id)

        result = await _update_fund(
            graphql_context, id=str(funds.fund_id), name="General", isTaxDeductible=True
        )

        assert result.errors is None
        assert result.data["updateFund"]["name"] == "General"

    @pytest.mark.asyncio
    async def test_name_used_in_other_organization(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.org_admin_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Scholarships")

        assert result.errors is None
        assert result.data["updateFund"]["name"] == "Scholarships"

    @pytest.mark.asyncio
    async def test_update_is_persisted(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.org_admin_id)

        await _update_fund(graphql_context, id=str(funds.fund_id), name="Operations")
        result = await schema.execute(
            FUND_QUERY, variable_values={"id": str(funds.fund_id)}, context_value=graphql_context
        )

        assert result.errors is None
        assert result.data["fund"]["name"] == "Operations"


@pytest.mark.integration
@pytest.mark.requires_db
class TestUpdateFundNameConflicts:
    """Fund names are unique within an organization."""

    @pytest.mark.asyncio
    async def test_name_taken_in_same_organization(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.org_admin_id)

        result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Building")

        assert _error_extensions(result) == {
            "code": "forbidden_action_on_arguments_associated_resources",
            "issues": [{"argumentPath": ["input", "name"], "message": "This name is not available."}],
        }

    @pytest.mark.asyncio
    async def test_conflict_on_write(self, funds, authenticate_as, graphql_context):
        """A name claimed after the availability check is rejected by the database."""
        authenticate_as(funds.org_admin_id)

        with patch(
            "talawa.graphql.resolvers.fund.is_fund_name_taken",
            new=AsyncMock(return_value=False),
        ):
            result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Building")

        assert _error_extensions(result) == {
            "code": "forbidden_action_on_arguments_associated_resources",
            "issues": [{"argumentPath": ["input", "name"], "message": "This name is not available."}],
        }


@pytest_asyncio.fixture
async def enforce_foreign_keys(test_database):
    """Turn on SQLite foreign key enforcement for connections opened from now on."""
    from sqlalchemy import event

    from talawa.database.connection import get_async_engine

    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    engine = get_async_engine()
    await engine.dispose()
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    yield
    event.remove(engine.sync_engine, "connect", _enable_foreign_keys)


@pytest.mark.integration
@pytest.mark.requires_db
class TestUpdateFundConstraintViolations:
    """Constraint violations on write that are not a name conflict."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [{"isTaxDeductible": True}, {"name": "Fresh name"}],
        ids=["tax_deductibility_only", "with_free_name"],
    )
    async def test_updater_removed_before_write(
        self, funds, enforce_foreign_keys, authenticate_as, graphql_context, fields
    ):
        """The updater row vanishing after the role lookup is an unexpected failure."""
        authenticate_as(uuid4())

        with patch(
            "talawa.graphql.resolvers.fund.load_user_role",
            new=AsyncMock(return_value="administrator"),
        ):
            result = await _update_fund(graphql_context, id=str(funds.fund_id), **fields)

        assert _error_extensions(result) == {"code": "unexpected"}

    @pytest.mark.asyncio
    async def test_name_conflict_still_reported_with_foreign_keys(
        self, funds, enforce_foreign_keys, authenticate_as, graphql_context
    ):
        authenticate_as(funds.org_admin_id)

        with patch(
            "talawa.graphql.resolvers.fund.is_fund_name_taken",
            new=AsyncMock(return_value=False),
        ):
            result = await _update_fund(graphql_context, id=str(funds.fund_id), name="Building")

        assert _error_extensions(result)["issues"] == [
            {"argumentPath": ["input", "name"], "message": "This name is not available."}
        ]


class TestViolatedConstraint:
    """Tests for violated_constraint."""

    def test_constraint_name_from_driver_cause(self):
        class ForeignKeyViolation(Exception):
            constraint_name = "funds_updater_id_fkey"

        orig = Exception("insert or update violates foreign key constraint")
        orig.__cause__ = ForeignKeyViolation()

        error = IntegrityError("UPDATE funds ...", {}, orig)

        assert violated_constraint(error) == "funds_updater_id_fkey"

    def test_sqlite_unique_message(self):
        orig = Exception("UNIQUE constraint failed: funds.organization_id, funds.name")

        error = IntegrityError("UPDATE funds ...", {}, orig)

        assert violated_constraint(error) == "funds_organization_id_name_key"

    def test_unidentified_constraint(self):
        error = IntegrityError("UPDATE funds ...", {}, Exception("FOREIGN KEY constraint failed"))

        assert violated_constraint(error) is None


class TestLoadRoleAndFund:
    """Tests for the concurrent role and fund lookup."""

    @pytest.mark.asyncio
    async def test_failure_cancels_sibling_lookup(self):
        sibling_cancelled = asyncio.Event()

        async def slow_fund_lookup(fund_id, user_id):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                sibling_cancelled.set()
                raise

        with (
            patch(
                "talawa.graphql.resolvers.fund.load_user_role",
                new=AsyncMock(side_effect=RuntimeError("connection lost")),
            ),
            patch(
                "talawa.graphql.resolvers.fund.load_fund_with_membership",
                new=slow_fund_lookup,
            ),
        ):
            with pytest.raises(RuntimeError, match="connection lost"):
                await load_role_and_fund(uuid4(), uuid4())

        assert sibling_cancelled.is_set()

    @pytest.mark.asyncio
    async def test_returns_both_results(self):
        fund = MagicMock(spec=Funds)

        with (
            patch(
                "talawa.graphql.resolvers.fund.load_user_role",
                new=AsyncMock(return_value="regular"),
            ),
            patch(
                "talawa.graphql.resolvers.fund.load_fund_with_membership",
                new=AsyncMock(return_value=(fund, "administrator")),
            ),
        ):
            result = await load_role_and_fund(uuid4(), uuid4())

        assert result == ("regular", (fund, "administrator"))


@pytest.mark.integration
@pytest.mark.requires_db
class TestUpdateFundRace:
    """A fund removed between the lookup and the update."""

    @pytest.mark.asyncio
    async def test_fund_removed_before_update(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.global_admin_id)
        vanished_fund = MagicMock(spec=Funds)
        vanished_fund.organization_id = funds.organization_id

        with patch(
            "talawa.graphql.resolvers.fund.load_fund_with_membership",
            new=AsyncMock(return_value=(vanished_fund, None)),
        ):
            result = await _update_fund(graphql_context, id=str(uuid4()), isTaxDeductible=True)

        assert _error_extensions(result) == {"code": "unexpected"}
        assert result.errors[0].message == "Something went wrong. Please try again."


@pytest.mark.integration
@pytest.mark.requires_db
class TestFundQuery:
    """Tests for the fund query."""

    async def _query(self, context, fund_id):
        return await schema.execute(
            FUND_QUERY, variable_values={"id": str(fund_id)}, context_value=context
        )

    @pytest.mark.asyncio
    async def test_member_can_view(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.member_id)

        result = await self._query(graphql_context, funds.fund_id)

        assert result.errors is None
        assert result.data["fund"] == {
            "id": str(funds.fund_id),
            "name": "General",
            "organization": {"name": "Helping Hands"},
        }

    @pytest.mark.asyncio
    async def test_global_administrator_can_view(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.global_admin_id)

        result = await self._query(graphql_context, funds.foreign_fund_id)

        assert result.errors is None
        assert result.data["fund"]["name"] == "Scholarships"

    @pytest.mark.asyncio
    async def test_non_member_denied(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.member_id)

        result = await self._query(graphql_context, funds.foreign_fund_id)

        assert _error_extensions(result) == {
            "code": "unauthorized_action_on_arguments_associated_resources",
            "issues": [{"argumentPath": ["input", "id"]}],
        }

    @pytest.mark.asyncio
    async def test_unknown_fund(self, funds, authenticate_as, graphql_context):
        authenticate_as(funds.member_id)

        result = await self._query(graphql_context, uuid4())

        assert _error_extensions(result)["code"] == "arguments_associated_resources_not_found"

    @pytest.mark.asyncio
    async def test_unauthenticated(self, funds, authenticate_as, graphql_context):
        authenticate_as(None)

        result = await self._query(graphql_context, funds.fund_id)

        assert _error_extensions(result) == {"code": "unauthenticated"}
