"""
Central API Router

Aggregates the endpoint routers of the ChemStock authorization service.
"""

import logging
from fastapi import APIRouter

from chemstock.api import admin, authorization
from chemstock.core.config import settings

logger = logging.getLogger(__name__)

api_router = APIRouter()

# Router configurations: (router, prefix, tags, enabled)
ROUTER_CONFIGS = [
    (authorization.router, "/authorization", ["Authorization"], True),
    (admin.router, "/admin", ["Admin"], settings.ENABLE_ADMIN_API),
]

for router, prefix, tags, enabled in ROUTER_CONFIGS:
    if not enabled:
        logger.info(f"Router at {prefix} disabled by configuration")
        continue
    api_router.include_router(router, prefix=prefix, tags=tags)
    logger.info(f"Registered router at {prefix}")

logger.info(f"API router initialized with {len(api_router.routes)} routes")
