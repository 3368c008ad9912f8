"""
Bearer credential handling

The cart service does not issue or verify tokens; it only reads the user id
out of the caller's JWT and forwards the raw header to the order service.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import jwt
from fastapi import HTTPException, Request

from ..core.config import settings

logger = logging.getLogger(__name__)


class TokenStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"
    MISSING = "missing"


@dataclass
class Credential:
    """What the service knows about the caller's bearer token"""
    status: TokenStatus
    authorization: Optional[str] = None
    user_id: Optional[str] = None


def strip_bearer(authorization: str) -> str:
    token = authorization.strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token


def read_claims(authorization: str) -> dict:
    """Decode the JWT payload without checking the signature"""
    return jwt.decode(
        strip_bearer(authorization),
        options={"verify_signature": False},
    )


def inspect_credential(
    authorization: Optional[str],
    user_id_claims: Optional[list[str]] = None,
) -> Credential:
    """Classify an Authorization header and pull the user id out of it"""
    if not authorization or not authorization.strip():
        return Credential(status=TokenStatus.MISSING)

    try:
        claims = read_claims(authorization)
    except jwt.PyJWTError as e:
        logger.warning(f"Could not decode bearer token: {e}")
        return Credential(status=TokenStatus.INVALID, authorization=authorization)

    user_id = next(
        (str(claims[name]) for name in (user_id_claims or settings.user_id_claims) if claims.get(name)),
        None,
    )

    expires = claims.get("exp")
    if isinstance(expires, (int, float)) and expires < time.time():
        return Credential(status=TokenStatus.EXPIRED, authorization=authorization, user_id=user_id)

    return Credential(status=TokenStatus.VALID, authorization=authorization, user_id=user_id)


class CredentialDependency:
    """
    FastAPI dependency reading the caller's bearer credential.

    Rejects requests without a decodable token carrying a user id. Expired
    tokens are passed through so the route can answer with a dedicated
    error code.
    """

    async def __call__(self, request: Request) -> Credential:
        credential = inspect_credential(request.headers.get("Authorization"))

        if credential.status == TokenStatus.MISSING:
            raise HTTPException(status_code=401, detail="Authorization header is required")

        if credential.status == TokenStatus.INVALID:
            raise HTTPException(status_code=401, detail="Invalid bearer token")

        if not credential.user_id:
            logger.warning("User id not found in bearer token")
            raise HTTPException(status_code=401, detail="User authentication failed")

        return credential


# Dependency instance
require_user = CredentialDependency()
