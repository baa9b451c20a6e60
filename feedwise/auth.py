"""
Authentication module for API access control.

Two independent checks:
1. API key - when AUTH_API_KEY is set, every request must carry a matching
   X-API-Key header; otherwise all requests are allowed (local development)
2. Current user - the owner id forwarded by the upstream identity layer in the
   X-User-Id header, defaulting to DEFAULT_USER_ID in local mode
"""

import secrets

from fastapi import Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from .config import config

# Header name for the API key
API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


def verify_api_key(api_key: str | None = Security(API_KEY_HEADER)) -> str:
    """
    Verify the API key from request headers.

    If AUTH_API_KEY is not configured in the environment, authentication
    is disabled and all requests are allowed.

    Raises:
        HTTPException: If authentication is enabled and the key is missing or invalid
    """
    configured_key = config.AUTH_API_KEY

    # If no auth key is configured, skip authentication (local dev mode)
    if not configured_key:
        return ""

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Provide X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(api_key, configured_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


def get_current_user(x_user_id: str | None = Header(default=None)) -> int:
    """
    Resolve the owner id for the request.

    Raises:
        HTTPException: If the header is present but not a positive integer
    """
    if x_user_id is None or not x_user_id.strip():
        return config.DEFAULT_USER_ID

    try:
        user_id = int(x_user_id)
    except ValueError:
        user_id = 0

    if user_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identity",
        )
    return user_id
