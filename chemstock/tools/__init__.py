"""
Tools Package

Backend clients used by the resolver and the API.

Service Clients (shared connection pool, graceful shutdown):
- store_client: Supabase/PostgREST tables (user_roles, user_permissions)
- identity_client: Supabase auth user lookup

NOTE: Clients are NOT imported eagerly; import them as needed:
`from chemstock.tools import store_client`
"""

import logging

logger = logging.getLogger(__name__)


async def aclose_all_clients() -> None:
    """
    Close all HTTP clients gracefully.
    Called from the FastAPI lifespan on shutdown.
    """
    from chemstock.tools import store_client

    try:
        await store_client.aclose_client()
    except Exception as e:
        logger.error(f"Error closing store_client: {e}")
