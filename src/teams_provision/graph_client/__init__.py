"""Microsoft Graph client."""

from .auth import AuthError, acquire_token
from .client import GraphClient, GraphError, eq_filter
from .models import Group, Team, User
from .protocols import DirectoryClient

__all__ = [
    "AuthError",
    "DirectoryClient",
    "GraphClient",
    "GraphError",
    "Group",
    "Team",
    "User",
    "acquire_token",
    "eq_filter",
]
