"""
Identity Provider HTTP Client

Resolves the authenticated user behind a bearer token via the Supabase
auth endpoint (GET /auth/v1/user). Shares the pooled client of
store_client, since both talk to the same backend.

Functions:
- get_user_id: Return the user id for an Authorization header
"""

import logging
from typing import Optional

import httpx

from chemstock.constants.constants import (
    APIKEY_HEADER_NAME,
    AUTHORIZATION_HEADER_NAME,
    AUTH_USER_PATH,
)
from chemstock.core.config import settings
from chemstock.core.errors import NotAuthenticatedError, ServiceUnavailableError
from chemstock.core.security import mask_token, require_auth
from chemstock.tools import store_client

logger = logging.getLogger(__name__)


async def get_user_id(auth_header: Optional[str]) -> str:
    """
    Identify the user owning the bearer token.

    Args:
        auth_header: Authorization header value ("Bearer <jwt>")

    Returns:
        The user's id

    Raises:
        NotAuthenticatedError: Missing/invalid credential or token rejected (401/403)
        ServiceUnavailableError: Identity provider unreachable or failing
    """
    auth_header = require_auth(auth_header)

    headers = {"Accept": "application/json", AUTHORIZATION_HEADER_NAME: auth_header}
    if settings.SUPABASE_ANON_KEY:
        headers[APIKEY_HEADER_NAME] = settings.SUPABASE_ANON_KEY

    try:
        client = store_client.get_client()
        response = await client.get(f"{settings.SUPABASE_URL}{AUTH_USER_PATH}", headers=headers)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        if status_code in (401, 403):
            logger.info(f"Identity provider rejected token {mask_token(auth_header)}")
            raise NotAuthenticatedError(details={"reason": "Token rejected"}) from e
        logger.error(f"Identity provider error ({status_code})")
        raise ServiceUnavailableError(message="Identity provider error") from e
    except httpx.HTTPError as e:
        logger.error(f"Identity provider connection error: {type(e).__name__}: {e}")
        raise ServiceUnavailableError(
            message=f"Cannot connect to identity provider: {type(e).__name__}"
        ) from e
    except ValueError as e:
        raise ServiceUnavailableError(message="Identity provider returned invalid JSON") from e

    user_id = data.get("id") if isinstance(data, dict) else None
    if not user_id:
        raise NotAuthenticatedError(details={"reason": "No user for token"})

    return str(user_id)
