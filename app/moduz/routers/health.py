from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.moduz.core.context import trace_id_of
from app.moduz.core.error_catalog import ErrorCatalog
from app.moduz.core.errors import error_response
from app.moduz.db.session import get_db

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    return {"status": "ok", "trace_id": trace_id_of(request)}


@router.get("/ready")
def ready(request: Request, db=Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return error_response(
            code=ErrorCatalog.STORAGE_UNAVAILABLE.code,
            message=ErrorCatalog.STORAGE_UNAVAILABLE.message,
            details={"type": exc.__class__.__name__},
            trace_id=trace_id_of(request),
            status_code=ErrorCatalog.STORAGE_UNAVAILABLE.status_code,
        )
    return {"status": "ready", "trace_id": trace_id_of(request)}
