"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Unlike a router-wide auth dependency, auth here is per route:
item reads are public while item writes need a token, so items.py
adds get_current_user only on the mutating handlers.
"""

from fastapi import APIRouter

from marketplace.api.auth import router as auth_router
from marketplace.api.health import router as health_router
from marketplace.api.items import router as items_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(items_router, tags=["items"])
