"""Точка входа FastAPI."""
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.backend.clients.exotel import ExotelClient
from apps.backend.config import get_settings
from apps.backend.errors import AppError
from apps.backend.middleware.request_log import RequestLogMiddleware, TRACE_HEADER
from apps.backend.routers import auth, credentials, health, messages, onboarding, templates, webhooks
from apps.backend.services.send_queue import SendQueue
from apps.backend.utils.api_errors import error_envelope

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    s = get_settings()
    app.state.send_queue = SendQueue.from_settings(s)
    app.state.exotel_client = ExotelClient.from_settings(s)
    yield
    app.state.send_queue.queue.connection.close()


app = FastAPI(
    title="Exotel WhatsApp Admin",
    description="Multi-tenant WhatsApp Business sending via Exotel",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["System"])
app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
app.include_router(credentials.router, prefix=f"{API_PREFIX}/credentials", tags=["Credentials"])
app.include_router(messages.router, prefix=f"{API_PREFIX}/messages", tags=["Messages"])
app.include_router(templates.router, prefix=f"{API_PREFIX}/templates", tags=["Templates"])
app.include_router(onboarding.router, prefix=f"{API_PREFIX}/onboarding-links", tags=["Onboarding"])
app.include_router(webhooks.router, prefix=f"{API_PREFIX}/webhooks", tags=["Webhooks"])


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or str(uuid.uuid4())[:16]


def _error_response(request: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    trace_id = _trace_id(request)
    payload = error_envelope(code=code, message=message, trace_id=trace_id, details=details)
    resp = JSONResponse(content=payload, status_code=status_code)
    resp.headers[TRACE_HEADER] = trace_id
    return resp


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return _error_response(request, exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": ".".join(str(p) for p in e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return _error_response(request, 400, "validation_error", "Invalid request", details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error_response(request, exc.status_code, "http_error", message)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    trace_id = _trace_id(request)
    logger.exception("Unhandled exception trace_id=%s path=%s", trace_id, request.url.path)
    return _error_response(request, 500, "internal_error", "Internal Server Error")
