"""
Admin Authentication

Bearer token check for the admin back-office endpoints.
Placeholder for the real session/OAuth login, which lives outside this service.
"""
import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from testcademy.config import settings

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(code: str, message: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": {
                "code": code,
                "message": message,
                "details": details
            }
        },
        headers={"WWW-Authenticate": "Bearer"}
    )


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Verify the admin bearer token.

    Returns:
        Admin user context dictionary

    Raises:
        HTTPException: 401 if the header is missing or the token is wrong
    """
    if credentials is None:
        raise _unauthorized(
            "AUTH_001",
            "Authorization header missing",
            "Please provide a valid bearer token",
        )

    if not secrets.compare_digest(credentials.credentials, settings.admin_api_token):
        logger.warning("Invalid admin token attempt")
        raise _unauthorized(
            "AUTH_002",
            "Invalid or expired token",
            "The provided token is not valid",
        )

    return {
        "user_id": "admin",
        "username": "admin",
        "role": "admin"
    }
