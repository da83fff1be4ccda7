import logging
import secrets
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader

from reglements_api.core.config import Settings, get_settings
from reglements_api.core.exceptions import AuthenticationException

logger = logging.getLogger(__name__)

# X-API-Key header security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_api_key(
    api_key: Optional[str] = Security(api_key_header),
    settings: Settings = Depends(get_settings),
) -> str:
    """Reject the request unless X-API-Key matches the configured API_KEY"""
    if not api_key:
        logger.debug("Request without X-API-Key header")
        raise AuthenticationException("API key required. Please provide X-API-Key header.")

    if not settings.api_key or not secrets.compare_digest(
        api_key.encode("utf-8"), settings.api_key.encode("utf-8")
    ):
        logger.warning("Request with invalid API key")
        raise AuthenticationException("Invalid API key")

    return api_key
