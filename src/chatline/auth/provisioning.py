"""User provisioning and management."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..dbmodels import Users
from ..logging import get_logger
from .adapters.base import Principal

logger = get_logger(__name__)


async def ensure_local_user(db: AsyncSession, principal: Principal) -> UUID:
    """
    Ensure a local user exists for the given principal (JIT provisioning).

    Creates a user row the first time an (auth_provider, auth_subject) pair is
    seen. Existing rows only get empty profile fields filled in.

    Returns:
        UUID of the local user
    """
    provider = principal["provider"]
    subject = principal["subject"]

    user = await get_user_by_auth_info(db, provider, subject)

    if user:
        updated = False

        email = principal.get("email")
        if email and not user.email:
            user.email = email
            updated = True

        display_name = principal.get("display_name")
        if display_name and not user.name:
            user.name = display_name
            updated = True

        avatar_url = principal.get("avatar_url")
        if avatar_url and not user.image:
            user.image = avatar_url
            updated = True

        if principal.get("email_verified") and not user.email_verified:
            user.email_verified = True
            updated = True

        user_id = user.id
        if updated:
            await db.commit()
            logger.info("Updated user info (preserving existing values)", user_id=str(user_id))

        return user_id

    user = Users(
        auth_provider=provider,
        auth_subject=subject,
        username=principal.get("username"),
        name=principal.get("display_name"),
        email=principal.get("email"),
        email_verified=bool(principal.get("email_verified", False)),
        image=principal.get("avatar_url"),
        metadata_={
            "created_via": "jit_provisioning",
            "provider_claims": principal.get("claims", {}),
        },
    )

    db.add(user)
    await db.flush()
    user_id = user.id
    await db.commit()

    logger.info(
        "Created new user via JIT provisioning",
        user_id=str(user_id),
        provider=provider,
    )

    return user_id


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Users | None:
    """Get a user by ID."""
    stmt = select(Users).where(Users.id == user_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_user_by_auth_info(
    db: AsyncSession, auth_provider: str, auth_subject: str
) -> Users | None:
    """Get a user by auth provider information."""
    stmt = select(Users).where(
        and_(
            Users.auth_provider == auth_provider,
            Users.auth_subject == auth_subject,
        )
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()
