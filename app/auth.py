"""
API key check for the HTTP routes.

The key is read from the X-API-Key header, falling back to
"Authorization: Bearer <key>", and compared against the configured
allow-list. The WebSocket channel does not go through this check.
"""
import logging
from typing import List, Optional

from fastapi import Header, HTTPException, Request

from config.settings import settings

logger = logging.getLogger("auth")


def extract_api_key(x_api_key: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """Pick the credential from the headers, X-API-Key first."""
    if x_api_key:
        return x_api_key.strip()
    if authorization:
        return authorization.replace("Bearer ", "", 1).strip() or None
    return None


def warn_on_default_keys() -> None:
    """Log a warning when the built-in keys are active in production."""
    if settings.environment == "production" and settings.uses_default_api_keys:
        logger.warning("Using default API keys in production! Set the API_KEYS environment variable.")


def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> str:
    """
    FastAPI dependency guarding a route with the API key allow-list.

    The allow-list is read from app.state.api_keys so tests and
    deployments can swap it without touching the global settings.

    Raises:
        HTTPException(401): If the key is missing or not allow-listed
    """
    api_key = extract_api_key(x_api_key, authorization)
    if not api_key:
        raise HTTPException(status_code=401, detail="API key is required")

    valid_keys: List[str] = getattr(request.app.state, "api_keys", settings.api_key_list)
    if api_key not in valid_keys:
        logger.warning(f"Rejected request to {request.url.path}: invalid API key")
        raise HTTPException(status_code=401, detail="Invalid API key")

    return api_key
