"""
Shared-secret guard for API routes.
Users are addressed by path parameter; this only checks the caller holds the key.
"""
import secrets

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from habit_tracker.shared.constants import API_KEY

API_KEY_HEADER_NAME = "X-API-Key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)) -> str:
    """Reject requests without the configured API key"""
    if not api_key or not secrets.compare_digest(api_key.encode(), API_KEY.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key"
        )
    return api_key
