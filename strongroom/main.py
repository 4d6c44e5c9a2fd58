"""FastAPI application entrypoint. No business logic; only wiring, lifecycle and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from strongroom.api.v1 import router as v1_router
from strongroom.core.config import settings
from strongroom.core.database import create_db_engine, create_session_factory
from strongroom.core.errors import (
    ConflictError,
    InvalidQueryError,
    NotFoundError,
    StorageError,
)
from strongroom.core.storage import create_object_store, create_s3_client, ensure_bucket

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Acquire the connection pool and object store client; release the pool on shutdown."""
    engine = create_db_engine(settings)
    app.state.session_factory = create_session_factory(engine)
    s3_client = create_s3_client(settings)
    ensure_bucket(s3_client, settings)
    app.state.object_store = create_object_store(s3_client, settings)
    logger.info("Storage initialized. Bucket: %s", settings.S3_BUCKET_NAME)
    try:
        yield
    finally:
        engine.dispose()
        logger.info("Database connection pool disposed")


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses. Storage failures never expose backend detail."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})

    @app.exception_handler(ConflictError)
    async def conflict_handler(_request: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": exc.message})

    @app.exception_handler(InvalidQueryError)
    async def invalid_query_handler(_request: Request, exc: InvalidQueryError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal storage error"},
        )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Strongroom API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Strongroom API"}

    return app


app = create_app()
