"""Main FastAPI application."""
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.logging import setup_logging, get_logger, request_id_var
from app.core.database import engine, Base
from app.core.validation import VALIDATION_FAILED, format_errors
from app.api.v1 import router as v1_router
from app import models  # noqa: F401  Force models to register with Base


setup_logging(settings.DEBUG)
logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def check_schema() -> None:
    """Log, without failing startup, when migrations have not been applied."""
    try:
        async with engine.connect() as conn:
            existing_tables = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )
    except SQLAlchemyError as e:
        logger.error(f"Database schema check failed: {e}")
        return

    missing = sorted(set(Base.metadata.tables) - set(existing_tables))
    if missing:
        logger.error(f"Missing tables: {missing}. Run `alembic upgrade head`.")
    else:
        logger.info("Database schema check passed.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    await check_schema()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Multi-tenant identity API: companies, users, roles, permissions and invitations",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag the request with an id (the caller's, if sent) and log its outcome."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        request_id_var.reset(token)


app.include_router(v1_router, prefix="/api")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Answer path, query and malformed-body errors in the structured validation shape."""
    errors = format_errors(exc.errors())
    logger.warning(f"Request validation failed on {request.url.path}: {[e['field'] for e in errors]}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"message": VALIDATION_FAILED, "errors": errors}},
    )


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.APP_NAME}


@app.get("/")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/api/docs",
    }
