from fastapi import APIRouter

from broker_portal.api.v1.routers import broker_applications, health

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(broker_applications.router)

__all__ = ["api_router"]
