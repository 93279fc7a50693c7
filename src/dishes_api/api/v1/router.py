"""API v1 router aggregating all endpoint routers.

All endpoints are mounted under the configured ``api.v1_prefix``.
"""

from __future__ import annotations

from fastapi import APIRouter

from dishes_api.api.v1.endpoints import (
    categories,
    dishes,
    drinks,
    health,
    ingredients,
    members,
    reviews,
    tokens,
)


router = APIRouter()

# Health checks take no credentials
router.include_router(health.router)

router.include_router(members.router)
router.include_router(tokens.router)
router.include_router(dishes.router)
router.include_router(drinks.router)
router.include_router(categories.router)
router.include_router(ingredients.router)
router.include_router(reviews.router)
