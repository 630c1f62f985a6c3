from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ...auth.provisioning import get_user_by_id
from ...database.connection import get_async_session
from ..access_control import require_auth_context
from ..error_handling import resolver_boundary

if TYPE_CHECKING:
    from ..types.user import User


async def resolve_current_user(info: strawberry.Info) -> User | None:
    from ..types.user import User as UserType

    with resolver_boundary("me"):
        auth_context = await require_auth_context(info)

        async with get_async_session() as session:
            user = await get_user_by_id(session, auth_context.user_id)
            if user is None:
                return None

            return UserType(
                id=user.id,
                username=user.username,
                name=user.name,
                email=user.email,
                email_verified=user.email_verified,
                image=user.image,
                created_at=user.created_at,
            )
