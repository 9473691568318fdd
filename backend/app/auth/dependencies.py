"""
FastAPI dependencies for API key authentication.

Flow:
  1. Extract Bearer token from Authorization header
  2. Reject tokens that are not shaped like a marketplace key (no DB hit)
  3. Hash the token (SHA-256)
  4. Look up api_keys by hash
  5. Verify is_active = true
  6. Return Identity (subject id + role)

Role and ownership checks happen later, in the matching service, against
the Identity produced here.

Security:
  • Generic 401 for ALL authentication failure modes (missing, invalid,
    inactive) — the precise reason is only logged
  • Raw keys are NEVER logged
  • Hash lookup means the DB never sees the raw key
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.hashing import display_prefix, hash_api_key, is_well_formed
from app.auth.identity import Identity
from app.core.database import get_db_session
from app.models.api_key import APIKey, Role

logger = logging.getLogger(__name__)

# Generic 401 — same message for all auth failures to avoid leaking info
_AUTH_FAILED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or missing API key.",
    headers={"WWW-Authenticate": "Bearer"},
)


class AuthenticationError(Exception):
    """Raised when an API key cannot be resolved to an identity.

    The message is for internal logging only — the client always
    receives the generic 401 above.
    """


def _extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise AuthenticationError("missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization header is not a Bearer token")
    return token.strip()


async def resolve_identity(session: AsyncSession, raw_key: str) -> Identity:
    """Map a raw API key to the Identity it was issued for."""
    if not is_well_formed(raw_key):
        raise AuthenticationError("malformed API key")

    stmt = select(APIKey).where(APIKey.key_hash == hash_api_key(raw_key))
    result = await session.execute(stmt)
    api_key = result.scalar_one_or_none()

    if api_key is None:
        raise AuthenticationError(f"unknown API key {display_prefix(raw_key)}")
    if not api_key.is_active:
        raise AuthenticationError(f"inactive API key {api_key.prefix}")

    return Identity(
        subject_id=api_key.subject_id,
        role=Role(api_key.role),
        api_key_id=api_key.id,
    )


async def get_current_identity(
    authorization: str | None = Header(default=None, alias="Authorization"),
    session: AsyncSession = Depends(get_db_session),
) -> Identity:
    """
    FastAPI dependency — resolves a Bearer token to an Identity.

    Usage in routers:
        caller: CurrentIdentity
    """
    try:
        raw_key = _extract_bearer(authorization)
        return await resolve_identity(session, raw_key)
    except AuthenticationError as exc:
        logger.info("Authentication failed: %s", exc)
        raise _AUTH_FAILED from exc


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]

