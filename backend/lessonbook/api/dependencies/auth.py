# backend/lessonbook/api/dependencies/auth.py
"""
Authentication dependencies.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...auth import actor_from_token
from ...principal import Actor

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    """
    Resolve the calling Actor from the Authorization header.

    Raises:
        UnauthorizedException: no or invalid bearer token (401)
    """
    token = credentials.credentials if credentials else None
    return actor_from_token(token)
