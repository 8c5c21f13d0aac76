"""
Bearer-token authentication against Supabase Auth
"""
from fastapi import HTTPException, Depends, Header
from typing import Optional, Dict, Any
import logging
import os
import httpx

logger = logging.getLogger(__name__)

# Short, explicit timeouts so a slow auth server fails the request quickly
AUTH_TIMEOUT = httpx.Timeout(connect=1.5, read=2.0, write=2.0, pool=1.0)


# Helper function to get auth header
async def get_auth_header(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Extract JWT token from Authorization header"""
    if authorization and authorization.startswith("Bearer "):
        return authorization.replace("Bearer ", "", 1).strip() or None
    return None


async def fetch_auth_user(access_token: str) -> Optional[Dict[str, Any]]:
    """
    Validate a token with Supabase Auth.

    Returns:
        The auth user if the token is valid, None otherwise
    """
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_SERVICE_KEY")
    if not url or not key:
        logger.error("SUPABASE_URL and SUPABASE_KEY must be set to validate tokens")
        return None

    headers = {
        "Authorization": f"Bearer {access_token}",
        "apikey": key
    }
    try:
        async with httpx.AsyncClient(timeout=AUTH_TIMEOUT) as client:
            response = await client.get(f"{url}/auth/v1/user", headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Token validation request failed: {str(e)}")
        return None

    if response.status_code != 200:
        logger.warning(f"Token validation failed with status: {response.status_code}")
        return None
    return response.json()


async def get_current_user_id(token: Optional[str] = Depends(get_auth_header)) -> str:
    """Resolve the authenticated user's id or reject the request with 401"""
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await fetch_auth_user(token)
    if not user or not user.get("id"):
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user["id"]
