from fastapi import FastAPI

from app.moduz.api import api_router
from app.moduz.core.config import settings
from app.moduz.core.errors import setup_exception_handlers
from app.moduz.core.logging import configure_logging
from app.moduz.middleware.observability import ObservabilityMiddleware
from app.moduz.middleware.tenant import TenantContextMiddleware
from app.moduz.middleware.trace import TraceIdMiddleware


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(TenantContextMiddleware)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
