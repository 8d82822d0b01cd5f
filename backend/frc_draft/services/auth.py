from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx
import jwt
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from frc_draft.config import settings
from frc_draft.database import get_db
from frc_draft.models import User

logger = logging.getLogger("frc_draft.auth")

DEV_SUBJECT = "dev_user"


@dataclass
class _JwksCache:
    jwks: dict[str, Any] | None = None
    fetched_at: float = 0.0
    ttl_seconds: float = 60.0 * 10

    def fresh(self) -> bool:
        return self.jwks is not None and (time.time() - self.fetched_at) < self.ttl_seconds


_jwks_cache = _JwksCache()


@dataclass(frozen=True)
class Identity:
    subject: str
    email: str | None = None
    username: str | None = None
    full_name: str | None = None


DEV_IDENTITY = Identity(subject=DEV_SUBJECT, username=DEV_SUBJECT, full_name="Dev User")


def identity_from_claims(claims: dict[str, Any]) -> Identity | None:
    subject = claims.get("sub")
    if not subject:
        return None
    full_name = claims.get("name") or claims.get("full_name") or None
    if not full_name:
        given = claims.get("given_name") or claims.get("first_name")
        family = claims.get("family_name") or claims.get("last_name")
        full_name = " ".join(str(p) for p in (given, family) if p) or None
    return Identity(
        subject=str(subject),
        email=claims.get("email") or claims.get("primary_email") or None,
        username=claims.get("username") or claims.get("preferred_username") or None,
        full_name=full_name,
    )


def _retry_on(e: BaseException) -> bool:
    if isinstance(e, httpx.TransportError):
        return True
    if isinstance(e, httpx.HTTPStatusError):
        return e.response.status_code >= 500
    return False


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception(_retry_on),
    reraise=True,
)
async def _fetch_jwks(url: str) -> dict[str, Any]:
    async with httpx.AsyncClient(headers={"User-Agent": "frc-draft/1.0"}) as client:
        resp = await client.get(url, timeout=20)
        resp.raise_for_status()
        return resp.json()


async def _get_jwks() -> dict[str, Any]:
    if _jwks_cache.fresh():
        return _jwks_cache.jwks or {}

    if not settings.clerk_jwks_url:
        raise RuntimeError("CLERK_JWKS_URL is not configured.")

    jwks = await _fetch_jwks(settings.clerk_jwks_url)

    _jwks_cache.jwks = jwks
    _jwks_cache.fetched_at = time.time()
    return jwks


async def _verified_claims(token: str) -> dict[str, Any]:
    try:
        header = jwt.get_unverified_header(token)
    except jwt.PyJWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token header") from e

    kid = header.get("kid")
    if not kid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing kid")

    jwks = await _get_jwks()
    jwk = next((k for k in jwks.get("keys") or [] if k.get("kid") == kid), None)
    if not jwk:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown signing key")

    try:
        public_key = jwt.algorithms.RSAAlgorithm.from_jwk(jwk)
        return jwt.decode(
            token,
            public_key,
            algorithms=[header.get("alg", "RS256")],
            issuer=settings.clerk_issuer if settings.clerk_issuer else None,
            options={"verify_aud": False},
        )
    except jwt.PyJWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from e


def _unverified_identity(token: str) -> Identity:
    """Dev-only: trust the token's claims so each browser session keeps a stable user."""
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_aud": False, "verify_iss": False})
    except jwt.PyJWTError:
        return DEV_IDENTITY
    return identity_from_claims(claims) or DEV_IDENTITY


async def get_or_create_user(db: AsyncSession, identity: Identity) -> User:
    existing = (await db.execute(select(User).where(User.clerk_id == identity.subject))).scalar_one_or_none()
    if existing:
        changed = False
        if identity.email and existing.email != identity.email:
            existing.email = identity.email
            changed = True
        if identity.full_name and existing.full_name != identity.full_name:
            existing.full_name = identity.full_name
            changed = True
        # Keep a handle the user already has.
        if identity.username and not (existing.username or "").strip():
            existing.username = identity.username
            changed = True
        if changed:
            await db.commit()
        return existing

    user = User(
        clerk_id=identity.subject,
        email=identity.email,
        username=identity.username or identity.full_name,
        full_name=identity.full_name,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Two first requests from the same new user raced; the other one created the row.
        await db.rollback()
        return (await db.execute(select(User).where(User.clerk_id == identity.subject))).scalar_one()
    await db.refresh(user)
    logger.info("user created subject=%s", identity.subject)
    return user


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> User:
    """
    Resolve the caller from a Clerk bearer token.

    In dev with AUTH_OPTIONAL_IN_DEV, tokens are decoded without verification (or verification
    failures fall back to that), and a missing token maps to a shared dev user.
    """
    lenient = settings.is_dev and settings.auth_optional_in_dev
    token: str | None = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip() or None

    if token is None:
        if lenient:
            return await get_or_create_user(db, DEV_IDENTITY)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    if lenient and not settings.clerk_jwks_url:
        return await get_or_create_user(db, _unverified_identity(token))

    try:
        claims = await _verified_claims(token)
    except HTTPException:
        if lenient:
            return await get_or_create_user(db, _unverified_identity(token))
        raise

    identity = identity_from_claims(claims)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing subject")
    return await get_or_create_user(db, identity)
