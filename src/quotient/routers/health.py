import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str


@router.get("/health", response_model=HealthResponse, status_code=200)
async def healthcheck():
    return {"status": "ok"}


@router.get("/health/ready", response_model=HealthResponse)
async def readiness(request: Request):
    """Report whether the search store answers a ping."""
    es = getattr(request.app.state, "es", None)
    try:
        reachable = es is not None and await es.ping()
    except Exception:
        logger.exception("Elasticsearch ping failed")
        reachable = False
    if not reachable:
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ok"}
