from fastapi import APIRouter

from app.api.v1 import (
    admin,
    ads,
    billing,
    movies,
    premium_codes,
    two_factor,
    users,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(movies.router)
api_router.include_router(ads.router)
api_router.include_router(premium_codes.router)
api_router.include_router(users.router)
api_router.include_router(two_factor.router)
api_router.include_router(billing.router)
api_router.include_router(admin.router)
