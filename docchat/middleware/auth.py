"""
Authentication dependency resolving the user identity from a bearer JWT
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from docchat.core.config import settings
from docchat.deps.exceptions import AuthenticationRequiredError

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme; missing credentials are reported by get_current_user_id
security = HTTPBearer(auto_error=False)


def decode_user_id(token: str) -> str:
    """
    Verify a JWT issued by the identity provider and return its subject

    Raises:
        AuthenticationRequiredError: If the token is invalid, expired or has no subject
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {str(e)}")
        raise AuthenticationRequiredError()

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationRequiredError()
    return str(user_id)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Dependency returning the authenticated user id"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationRequiredError()
    return decode_user_id(credentials.credentials)
