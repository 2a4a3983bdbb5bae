"""
API Package - FastAPI Routers

Routers are aggregated in chemstock.api.router and mounted under /api.
"""

API_VERSION = "1.0.0"

__all__ = ["API_VERSION"]
