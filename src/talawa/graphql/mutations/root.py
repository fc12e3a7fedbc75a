"""
Root GraphQL mutation definitions
"""

import strawberry

from ..types.fund import Fund


# Input types for mutations
@strawberry.input
class MutationUpdateFundInput:
    """Input for updating a fund."""

    id: strawberry.ID = strawberry.field(description="Global identifier of the fund.")
    name: str | None = strawberry.field(default=None, description="Name of the fund.")
    is_tax_deductible: bool | None = strawberry.field(
        default=None, description="Boolean to tell if the fund is tax deductible."
    )


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Fund mutations
    @strawberry.mutation(name="updateFund", description="Mutation field to update a fund.")
    async def update_fund(self, info: strawberry.Info, input: MutationUpdateFundInput) -> Fund:
        """Update an existing fund."""
        from ..resolvers.fund import update_fund

        return await update_fund(
            info,
            {
                "input": {
                    "id": input.id,
                    "name": input.name,
                    "isTaxDeductible": input.is_tax_deductible,
                }
            },
        )
