"""Resolver package for GraphQL schema.

Resolvers validate field arguments, enforce access rules and talk to the
database. GraphQL types call into them lazily to avoid import cycles.
"""

# Intentionally empty; functions are defined in sibling modules.
