"""
Talawa API
GraphQL API for community and organization management
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
