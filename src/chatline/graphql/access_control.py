"""
Shared access control logic for GraphQL resolvers
"""

from typing import TYPE_CHECKING, Any

import strawberry

from ..auth.middleware import get_auth_context_optional
from ..errors import AuthorizationError
from ..logging import get_logger

if TYPE_CHECKING:
    from ..auth.context import AuthContext

logger = get_logger(__name__)

_AUTH_CONTEXT_KEY = "auth_context"


def _authorization_from_context(context: dict[str, Any]) -> str | None:
    """Find the Authorization value for an HTTP request or websocket connection.

    Websocket clients pass it in the connection-init payload; the upgrade
    request header is used as a fallback.
    """
    connection_params = context.get("connection_params")
    if isinstance(connection_params, dict):
        for key in ("authorization", "Authorization"):
            value = connection_params.get(key)
            if isinstance(value, str) and value:
                return value

    request = context.get("request")
    if request is None:
        logger.error("Request not found in GraphQL context")
        return None
    return request.headers.get("authorization")


async def get_auth_context_from_info(info: strawberry.Info) -> "AuthContext":
    """
    Extract the session from a GraphQL info object.

    The result is cached on the context, so a connection or request
    authenticates once.
    """
    context = info.context
    cached = context.get(_AUTH_CONTEXT_KEY)
    if cached is not None:
        return cached

    auth_context = await get_auth_context_optional(
        authorization=_authorization_from_context(context)
    )
    context[_AUTH_CONTEXT_KEY] = auth_context
    return auth_context


async def require_auth_context(info: strawberry.Info) -> "AuthContext":
    """
    Return the authenticated session or raise.

    Raises:
        AuthorizationError: If the request carries no authenticated user
    """
    auth_context = await get_auth_context_from_info(info)
    if not auth_context.is_authenticated:
        logger.info("Unauthenticated GraphQL operation rejected")
        raise AuthorizationError()
    return auth_context
