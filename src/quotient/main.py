import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import InvalidInputError, QuotientError
from .lib.elasticsearch import create_client
from .routers import health, search, share, webhook
from .settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store client and the outbound HTTP client once per process."""
    settings = get_settings()
    app.state.es = create_client(settings)
    app.state.http = httpx.AsyncClient()
    logger.info("Connected clients for %s", settings.elasticsearch_url)
    try:
        yield
    finally:
        await app.state.http.aclose()
        await app.state.es.close()


app = FastAPI(
    title="Quotient API",
    description="Hybrid search and LLM relevance filtering over Farcaster builders",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(search.router)
app.include_router(share.router)
app.include_router(webhook.router)


def error_body(exc: QuotientError) -> dict:
    return {"error": exc.code, "details": exc.details}


@app.exception_handler(QuotientError)
async def handle_quotient_error(request: Request, exc: QuotientError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.details, exc_info=exc
        )
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.details)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return await handle_quotient_error(request, InvalidInputError(problems or "Invalid input"))


@app.get("/")
async def root():
    return {"message": "Quotient API"}
