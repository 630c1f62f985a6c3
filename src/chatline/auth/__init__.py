"""Authentication and session handling for Chatline."""

from .adapters.base import AuthAdapter, AuthenticationError, Principal
from .context import AuthContext
from .factory import get_auth_adapter
from .middleware import get_auth_context, get_auth_context_optional

__all__ = [
    "AuthAdapter",
    "AuthenticationError",
    "Principal",
    "AuthContext",
    "get_auth_context",
    "get_auth_context_optional",
    "get_auth_adapter",
]
