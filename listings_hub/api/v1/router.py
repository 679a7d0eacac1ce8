from fastapi import APIRouter

from listings_hub.api.v1.endpoints.health import router as health_router
from listings_hub.api.v1.endpoints.me import router as me_router
from listings_hub.api.v1.endpoints.listings import router as listings_router
from listings_hub.api.v1.endpoints.moderation import router as moderation_router
from listings_hub.api.v1.endpoints.notifications import router as notifications_router
from listings_hub.api.v1.endpoints.geo import router as geo_router
from listings_hub.api.v1.endpoints.internal import router as internal_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(me_router, tags=["me"])
router.include_router(listings_router, tags=["listings"])
router.include_router(moderation_router, tags=["moderation"])
router.include_router(notifications_router, tags=["notifications"])
router.include_router(geo_router, tags=["geo"])
router.include_router(internal_router, tags=["internal"])
