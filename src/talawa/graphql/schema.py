"""
GraphQL schema and its FastAPI router
"""

from typing import Any

import strawberry
from fastapi import Request
from strawberry.fastapi import GraphQLRouter

from .loaders import Loaders
from .mutations.root import Mutation
from .queries.root import Query

# Type references are resolved here, so a broken type fails at import time
schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_context(request: Request) -> dict[str, Any]:
    """Per-request resolver context: the request for auth, fresh DataLoaders."""
    return {"request": request, "loaders": Loaders()}


def create_graphql_router(
    graphql_ide: str | None = "graphiql",
) -> GraphQLRouter[dict[str, Any], None]:
    """Mount the schema at ``/graphql``; pass ``graphql_ide=None`` to disable the IDE."""
    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide=graphql_ide,
        context_getter=get_context,
    )
