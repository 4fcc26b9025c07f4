# laundry_saas/core/security.py

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from passlib.context import CryptContext
from jose import jwt, JWTError, ExpiredSignatureError
from fastapi import HTTPException, status

from laundry_saas.core.config import (
    JWT_ACCESS_SECRET_KEY,
    JWT_ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
)

TOKEN_ISSUER = "laundry-saas"
TOKEN_TYPE = "access"

# =====================================================
# PASSWORDS
# =====================================================
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# =====================================================
# CLAIMS
# =====================================================
@dataclass(frozen=True)
class AccessClaims:
    """What an access token asserts about its bearer."""

    username: str
    role: str
    token_version: int
    tenancy_id: Optional[int]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def issue_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """
    Tokens are bound to the user's tenancy and token_version at issue time;
    bumping token_version (logout) or moving the user invalidates them.
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = {
        "iss": TOKEN_ISSUER,
        "type": TOKEN_TYPE,
        "sub": user.username,
        "role": user.role,
        "tenancy_id": user.tenancy_id,
        "token_version": user.token_version,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(claims, JWT_ACCESS_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> AccessClaims:
    try:
        payload = jwt.decode(
            token,
            JWT_ACCESS_SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
            issuer=TOKEN_ISSUER,
        )
    except ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except JWTError:
        raise _unauthorized("Invalid or expired token")

    if payload.get("type") != TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    if not payload.get("sub") or payload.get("token_version") is None:
        raise _unauthorized("Malformed token")

    return AccessClaims(
        username=payload["sub"],
        role=payload.get("role", ""),
        token_version=payload["token_version"],
        tenancy_id=payload.get("tenancy_id"),
    )
