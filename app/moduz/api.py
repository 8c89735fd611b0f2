from fastapi import APIRouter

from app.moduz.core.config import settings
from app.moduz.routers.admin import router as admin_router
from app.moduz.routers.audit import router as audit_router
from app.moduz.routers.context import router as context_router
from app.moduz.routers.health import router as health_router
from app.moduz.routers.metrics import router as metrics_router
from app.moduz.routers.modules import router as modules_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(context_router, prefix="/moduz", tags=["context"])
api_router.include_router(modules_router, prefix="/moduz", tags=["modules"])
api_router.include_router(audit_router, prefix="/moduz", tags=["audit"])
api_router.include_router(admin_router, prefix="/moduz", tags=["admin"])
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])
