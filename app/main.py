import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import admin_appointments, appointments, auth
from app.core.config import _ENV_FILE, settings
from app.core.db import init_db
from app.core.errors import AppError, StorageError

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    if settings.allow_admin_setup:
        logger.warning("Admin setup endpoint is enabled; set ALLOW_ADMIN_SETUP=false after bootstrapping")
    if settings.auto_create_tables:
        logger.info("AUTO_CREATE_TABLES set: creating missing tables")
        await init_db()
    yield


app = FastAPI(
    title="Global Tech API",
    description="Backend for Global Tech: bookings, slot availability, admin dashboard",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(appointments.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(admin_appointments.router, prefix="/api")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


def _field_name(loc: tuple) -> str:
    # ("body", "appointmentDate") -> "appointmentDate"; ("query", "date") -> "date"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed input is a 400 with one entry per offending field."""
    errors = [
        {"field": _field_name(tuple(err.get("loc", ()))), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": "Dados inválidos", "errors": errors},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = _cors_headers(request.headers.get("origin"))
    if isinstance(exc, StorageError):
        # Already logged where it happened; never echo store details to the client.
        return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE}, headers=headers)
    return JSONResponse(status_code=exc.status_code, content=exc.payload(), headers=headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500 with CORS so the browser can read it; details stay in the log."""
    headers = _cors_headers(request.headers.get("origin"))
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=headers,
        )
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"message": INTERNAL_ERROR_MESSAGE},
        headers=headers,
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
