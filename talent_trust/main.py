"""
Talent Trust - API Server

Trust score administration for the marketplace.

Start with:
    uvicorn talent_trust.main:app --host 0.0.0.0 --port 3001
"""
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from talent_trust import __version__
from talent_trust.api import admin_trust_router, trust_router
from talent_trust.config import get_settings
from talent_trust.errors import TrustError, status_code_for
from talent_trust.log import configure_logging

configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("trust_service_starting", version=__version__)

    try:
        from talent_trust.db.neo4j import init_schema
        init_schema()
        logger.info("neo4j_schema_initialized")
    except Exception as e:
        logger.warning("neo4j_init_failed", error=str(e))

    yield

    from talent_trust.db.neo4j import close
    close()
    logger.info("trust_service_stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Talent Trust",
        description="Trust scores for marketplace talent: on-demand reads, admin updates, bulk recalculation.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    @app.middleware("http")
    async def request_middleware(request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        start = time.time()
        request.state.request_id = request_id
        response = await call_next(request)
        duration_ms = round((time.time() - start) * 1000, 2)
        response.headers["X-Request-Id"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        if request.url.path != "/health":
            logger.info("request",
                        method=request.method,
                        path=request.url.path,
                        status=response.status_code,
                        duration_ms=duration_ms,
                        request_id=request_id)
        return response

    @app.exception_handler(TrustError)
    async def trust_error_handler(request: Request, exc: TrustError):
        status = status_code_for(exc)
        message = exc.message
        if status >= 500:
            logger.error("trust_error", path=request.url.path, error=str(exc), type=type(exc).__name__)
            message = "Internal server error"
        return JSONResponse(status_code=status, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_exception",
                     path=request.url.path,
                     error=str(exc),
                     type=type(exc).__name__)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(trust_router)
    app.include_router(admin_trust_router)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "service": "talent-trust",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()
