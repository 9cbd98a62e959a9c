"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the lesson listing backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and wrap results in the `{"success": true, "data": ...}`
envelope. Service errors are `AppError`s; the handlers below are the
only place where an error kind becomes an HTTP status.

Endpoints implemented:
- POST /user/register
- POST /user/login
- GET /user/validate
- POST /user/uploadAvatar
- GET /slider/list
- GET /lesson/list
- GET /lesson/{id}
"""

from fastapi import FastAPI, Depends, UploadFile, File, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlmodel import Session
from typing import Optional
import json
import logging
import time
import uuid
from .config import Settings, get_settings, settings
from .database import create_db_and_tables, get_session
from .errors import AppError, ErrorKind
from .schemas import LoginIn, RegisterIn, UserOut
from . import services, models
from .auth import get_current_user
from .utils.storage import public_upload_url, remove_upload, store_avatar

app = FastAPI(title="Lesson API")
logger = logging.getLogger("lesson_api.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.USERNAME_TAKEN: 422,
    ErrorKind.AUTHENTICATION_FAILED: 401,
    ErrorKind.MISSING_CREDENTIAL: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.USER_NOT_FOUND: 401,
    ErrorKind.NOT_FOUND_RESOURCE: 404,
    ErrorKind.INTERNAL: 500,
}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Uploaded avatars are served back from /uploads/<name>
settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

create_db_and_tables()


def ok(data) -> dict:
    return {"success": True, "data": data}


def error_response(kind: ErrorKind, message: str, errors: Optional[dict] = None, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_KIND[kind],
        content={"success": False, "kind": kind.value, "message": message, "errors": errors or {}},
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return error_response(exc.kind, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header")]
        errors[".".join(loc) or "body"] = err.get("msg", "invalid value")
    return error_response(ErrorKind.VALIDATION_FAILED, "request data is invalid", errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(ErrorKind.NOT_FOUND_RESOURCE, "no route is assigned to this path")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "errors": {}},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # keep tracebacks and connection details in the server log only
    logger.exception("unhandled_error path=%s", request.url.path)
    # this response bypasses request_context_middleware, so set its headers here
    headers = dict(SECURITY_HEADERS)
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers["X-Request-ID"] = req_id
    return error_response(ErrorKind.INTERNAL, "internal server error", headers=headers)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.error(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "client": request.client.host if request.client else "unknown",
            },
            ensure_ascii=True,
        ),
    )
    return response


@app.get("/")
def home():
    """Minimal homepage for quick manual testing."""
    return ok("hello world")


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


@app.post('/user/register')
def register(payload: RegisterIn, db: Session = Depends(get_session), settings: Settings = Depends(get_settings)):
    """Register a new user.

    Returns the public user view; the password hash is never included.
    """
    auth = services.AuthService(db, settings)
    user = auth.register(payload.username, payload.password, payload.confirm_password, payload.email)
    return ok(user)


@app.post('/user/login')
def login(payload: LoginIn, db: Session = Depends(get_session), settings: Settings = Depends(get_settings)):
    """Authenticate a user and return a JWT access token valid for one hour."""
    token = services.AuthService(db, settings).login(payload.username, payload.password)
    return ok(token)


@app.get('/user/validate')
def validate(user: models.User = Depends(get_current_user)):
    """Return the user owning the bearer token in the `Authorization` header."""
    return ok(UserOut.model_validate(user))


@app.post('/user/uploadAvatar')
def upload_avatar(
    request: Request,
    avatar: UploadFile = File(...),
    db: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    user: models.User = Depends(get_current_user),
):
    """Store an avatar image for the authenticated user and return its URL."""
    payload = avatar.file.read(settings.MAX_UPLOAD_BYTES + 1)
    name = store_avatar(payload, avatar.filename or "", settings.UPLOAD_DIR, settings.MAX_UPLOAD_BYTES)
    uri = public_upload_url(str(request.base_url), name)
    try:
        services.AuthService(db, settings).update_avatar(user.id, uri)
    except Exception:
        # the file has no owner if the avatar was not recorded
        remove_upload(settings.UPLOAD_DIR, name)
        raise
    return ok(uri)


@app.get('/slider/list')
def list_sliders(db: Session = Depends(get_session)):
    return ok(services.ListingService(db).list_sliders())


@app.get('/lesson/list')
def list_lessons(
    category: Optional[str] = None,
    offset: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_session),
):
    """Return one page of lessons as `{"list": [...], "hasMore": bool}`.

    `category=all` (the default) lists every lesson; `offset` and `limit`
    default to 0 and 5 when missing or not non-negative integers.
    """
    page = services.ListingService(db).list_lessons(category, offset, limit)
    return ok({"list": page.items, "hasMore": page.has_more})


@app.get('/lesson/{lesson_id}')
def get_lesson(lesson_id: str, db: Session = Depends(get_session)):
    return ok(services.ListingService(db).get_lesson(lesson_id))


def run():
    """Serve the API with uvicorn on `settings.PORT`."""
    import uvicorn
    uvicorn.run("lesson_api.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
