"""
Optional token guard for the destructive reset endpoint.

Security model:
- If API_TOKEN is not set, POST /reset is open (demo environments)
- If API_TOKEN is set, POST /reset requires a valid token via X-API-Key
- No query param token support (prevents log/referrer leakage)

Signup, login and the vendor routes are never guarded by this token.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyHeader

from .config import Settings, get_settings
from .errors import AuthError


# API key via header only (no query param for security)
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_token(
    api_key: Optional[str] = Depends(api_key_header),
    settings: Settings = Depends(get_settings),
) -> bool:
    """
    Verify API token if configured.

    Returns:
        True if authentication passes

    Raises:
        AuthError: 401 if a token is configured and missing or wrong
    """
    if not settings.api_token:
        return True

    if not api_key:
        raise AuthError("API token required. Provide via X-API-Key header.")

    if api_key != settings.api_token:
        raise AuthError("Invalid API token")

    return True
