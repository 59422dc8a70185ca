import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from authority.app.services.unit_of_work import UnitOfWork
from authority.depends import get_unit_of_work

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(uow: UnitOfWork = Depends(get_unit_of_work)):
    """Liveness plus a round trip to the record store."""
    try:
        async with uow:
            await uow.ping()
    except SQLAlchemyError as exc:
        logger.error(f"Health check failed: {type(exc).__name__}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "unreachable"},
        )
    return {"status": "ok", "database": "ok"}
