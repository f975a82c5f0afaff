import logging
import sqlite3
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from dms.config import settings
from dms.exceptions import DMSError
from dms.routers import (
    archive,
    auth,
    catalog,
    dashboard,
    departments,
    documents,
    export,
    notifications,
    recycle_bin,
    roles,
    search,
    trails,
    users,
    workflow,
)

__version__ = "0.1.0"

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("dms")

HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthenticated",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    413: "payload_too_large",
    429: "too_many_attempts",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    from dms.database import SessionLocal, init_db
    from dms.services.seed_service import seed_all
    from dms.utils.filesystem import ensure_data_dirs

    ensure_data_dirs()
    init_db()
    conn = sqlite3.connect(str(settings.db_path))
    result = conn.execute("PRAGMA integrity_check").fetchone()
    conn.close()
    if result and result[0] == "ok":
        logger.info("Database integrity check passed.")
    else:
        logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)

    db = SessionLocal()
    try:
        seed_all(db)
    finally:
        db.close()
    yield
    from dms.services.auth_service import auth_service
    auth_service.reset()


app = FastAPI(
    title="Document Management System",
    description="Document routing, tracking and archiving between departments",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(message: str, code: str, details=None) -> dict:
    error = {"message": message, "code": code}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


@app.exception_handler(DMSError)
async def dms_error_handler(request: Request, exc: DMSError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    if isinstance(exc.detail, str):
        message, details = exc.detail, None
    else:
        message, details = "Request failed", exc.detail
    code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message, code, details),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=_error_body("Invalid request", "validation_error", {"errors": jsonable_encoder(exc.errors())}),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body("Internal server error", "internal_error"))


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(users.router, prefix=settings.api_prefix)
app.include_router(roles.router, prefix=settings.api_prefix)
app.include_router(departments.router, prefix=settings.api_prefix)
app.include_router(catalog.router, prefix=settings.api_prefix)
# workflow owns fixed /documents/... listing paths; it must precede /documents/{id}
app.include_router(workflow.router, prefix=settings.api_prefix)
app.include_router(documents.router, prefix=settings.api_prefix)
app.include_router(archive.router, prefix=settings.api_prefix)
app.include_router(trails.router, prefix=settings.api_prefix)
app.include_router(recycle_bin.router, prefix=settings.api_prefix)
app.include_router(search.router, prefix=settings.api_prefix)
app.include_router(notifications.router, prefix=settings.api_prefix)
app.include_router(dashboard.router, prefix=settings.api_prefix)
app.include_router(export.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}
