import time
import uuid

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pymongo.errors import PyMongoError

from app.core.config import get_settings
from app.core.exceptions import (
    AppError,
    app_exception_handler,
    generic_exception_handler,
)
from app.core.logging import bind_request_id, configure_logging, get_logger, log_environment_check
from app.db.init import init_db
from app.routers import payments

settings = get_settings()
configure_logging(debug=settings.debug)
log = get_logger(__name__)

app = FastAPI(
    title="EduSource Payments API",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def request_id_middleware(request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    bind_request_id(request_id)
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    log.info(
        "request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    response.headers["X-Request-ID"] = request_id
    return response


app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(payments.router, prefix="/api", tags=["payments"])


@app.on_event("startup")
async def startup():
    if settings.sentry_dsn:
        import sentry_sdk
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.1)
        log.info("startup", msg="Sentry enabled")
    log_environment_check(settings)
    if not settings.payments_configured:
        log.warning("startup", msg="Razorpay keys missing; payment actions will fail")
    app.state.document_store = None
    if not settings.store_configured:
        log.warning("startup", msg="MONGODB_URI not set; payment verification disabled")
        return
    try:
        app.state.document_store = await init_db(settings)
    except PyMongoError as exc:
        # Order creation keeps working; verification fails fast with ConfigurationError
        log.error("startup", msg="DB unreachable; payment verification disabled", error=str(exc))
        return
    log.info("startup", msg="DB connected")


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Combined Backend Server is running."


@app.get("/health")
async def health():
    """Health check for load balancers and monitoring."""
    return {"status": "ok"}
