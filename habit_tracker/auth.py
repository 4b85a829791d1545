from fastapi import Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader
import os

# API key protecting all /api endpoints
# In production keep it in an environment variable or a secret store
API_KEY = os.getenv("HABIT_TRACKER_API_KEY", "your-secret-key-change-me")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)):
    """Verify API key for authentication"""
    if not api_key or api_key != API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key"
        )
    return api_key


async def get_owner_id(x_user_id: int = Header(..., alias="X-User-Id")) -> int:
    """Owner of the request, resolved by the upstream session layer"""
    if x_user_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user"
        )
    return x_user_id
