"""
Bearer-token identity for the Lessonbook API.

Tokens are HS256 JWTs carrying ``sub`` (user id) and ``role``. Decoding one
yields the ``Actor`` that every service method receives explicitly.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

import jwt
from jwt import PyJWTError

from .core.config import settings
from .core.enums import RoleName
from .core.exceptions import UnauthorizedException
from .principal import Actor

logger = logging.getLogger(__name__)

# Role spellings issued by older identity providers
_ROLE_ALIASES = {"USER": RoleName.STUDENT}


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: The claims to encode (``sub`` and ``role`` at minimum)
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(to_encode, _secret_value(settings.secret_key), algorithm=settings.algorithm)
    return str(encoded_jwt)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT access token."""
    payload_raw = jwt.decode(
        token,
        _secret_value(settings.secret_key),
        algorithms=[settings.algorithm],
        options={"verify_aud": False},
    )
    return cast(Dict[str, Any], payload_raw)


def parse_role(value: Any) -> RoleName:
    raw = str(value or "").strip().upper()
    if raw in _ROLE_ALIASES:
        return _ROLE_ALIASES[raw]
    try:
        return RoleName(raw)
    except ValueError:
        raise UnauthorizedException("Token carries an unknown role", details={"role": raw})


def actor_from_token(token: Optional[str]) -> Actor:
    """
    Resolve the caller from a bearer token.

    Raises:
        UnauthorizedException: missing, invalid or expired token, or bad claims
    """
    if not token:
        raise UnauthorizedException("Not authenticated")
    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.info(f"Rejected access token: {str(e)}")
        raise UnauthorizedException("Could not validate credentials")

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise UnauthorizedException("Could not validate credentials")
    return Actor(user_id=user_id, role=parse_role(payload.get("role")))
