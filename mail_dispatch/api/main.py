"""Mail Dispatch API.

FastAPI application providing endpoints for email operations:
- GET  /api: Service index
- GET  /api/status: Liveness check
- POST /api/email/test: SMTP diagnostic email to the sender
- POST /api/email/send: Caller-composed email
- POST /api/email/booking-confirmation: Booking confirmation (+ PDF)
- POST /api/email/payment-receipt: Payment receipt (+ PDF)
- POST /api/email/transfer-details: Transfer confirmation (+ PDF)
- POST /api/email/itinerary: Itinerary delivery (+ PDF)

Every POST body carries its own SMTP settings; the service keeps no SMTP
credentials. Delivery happens within the request and is never retried.

Security features:
- Optional JWT bearer authentication (enabled when JWT_SECRET is set)
- Request body size limit
- Uniform {success, error} error bodies

Author: Triptics
Version: 1.0.0
"""

from __future__ import annotations

import time
import traceback
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated, Any, Callable

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from starlette.exceptions import HTTPException as StarletteHTTPException

from mail_dispatch.api.schemas import (
    ApiIndexResponse,
    ErrorResponse,
    SendResponse,
    StatusResponse,
)
from mail_dispatch.config import DispatchConfig
from mail_dispatch.core.cache import SettingsCache
from mail_dispatch.core.exceptions import (
    MailDispatchError,
    RequestValidationFailed,
    SMTPClientError,
)
from mail_dispatch.core.logger import get_logger, setup_logging
from mail_dispatch.models.email import EmailKind, EmailResult
from mail_dispatch.models.requests import (
    BookingConfirmationRequest,
    ItineraryRequest,
    PaymentReceiptRequest,
    SendEmailRequest,
    TestEmailRequest,
    TransferDetailsRequest,
)
from mail_dispatch.services.company import CompanySettingsProvider
from mail_dispatch.services.dispatcher import MailDispatcher
from mail_dispatch.templates.renderer import TemplateRenderer

logger = get_logger(__name__)


# =============================================================================
# Application State (Dependency Injection)
# =============================================================================
@dataclass
class AppState:
    """Application state container for dependency injection."""

    config: DispatchConfig
    cache: SettingsCache | None = None
    dispatcher: MailDispatcher | None = None


def get_app_state(request: Request) -> AppState:
    """Dependency: Get the state built by the lifespan handler."""
    state: AppState | None = getattr(request.app.state, "dispatch", None)
    if state is None or state.dispatcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return state


def get_config(state: Annotated[AppState, Depends(get_app_state)]) -> DispatchConfig:
    """Dependency: Get application configuration."""
    return state.config


def get_dispatcher(
    state: Annotated[AppState, Depends(get_app_state)],
) -> MailDispatcher:
    """Dependency: Get the mail dispatcher."""
    return state.dispatcher


# =============================================================================
# JWT Authentication
# =============================================================================
BEARER_SCHEME = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(BEARER_SCHEME)],
    config: Annotated[DispatchConfig, Depends(get_config)],
) -> dict[str, Any] | None:
    """Verify the bearer token if authentication is enabled.

    Returns:
        Decoded token claims, or None when JWT_SECRET is not configured.
    """
    if not config.auth_enabled:
        return None

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return jwt.decode(
            credentials.credentials,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
        )
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        ) from None


# =============================================================================
# Error Responses
# =============================================================================
def error_response(
    status_code: int,
    error: str,
    stack: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the uniform ``{success: false, error}`` response."""
    body = ErrorResponse(error=error, stack=stack)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _field_path(loc: tuple[Any, ...]) -> str:
    """Dotted field path from a validation error location, minus 'body'."""
    parts = [str(p) for p in loc if p != "body"]
    return ".".join(parts) or "body"


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map request validation failures to 400."""
    errors = exc.errors()

    if any(err.get("type") == "json_invalid" for err in errors):
        logger.warning(f"Malformed JSON body: {request.method} {request.url.path}")
        return error_response(status.HTTP_400_BAD_REQUEST, "Malformed JSON body")

    fields = list(dict.fromkeys(_field_path(tuple(err["loc"])) for err in errors))
    failure = RequestValidationFailed(
        f"Missing or invalid required fields: {', '.join(fields)}", fields=fields
    )
    logger.warning(f"Rejected {request.method} {request.url.path}: {failure}")
    return error_response(status.HTTP_400_BAD_REQUEST, str(failure))


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTP errors (including 404) in the uniform error shape."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, f"Not Found - {request.url.path}")
    return error_response(
        exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: 500, with a traceback in development."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    state: AppState | None = getattr(request.app.state, "dispatch", None)
    stack = None
    if state is not None and state.config.is_development:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc) or "Internal Server Error",
        stack=stack,
    )


# =============================================================================
# Lifespan Context Manager
# =============================================================================
def _build_state(config: DispatchConfig) -> AppState:
    """Wire cache, company settings, renderer and dispatcher together."""
    config.validate_auth_config()

    cache = SettingsCache(ttl_seconds=config.SETTINGS_CACHE_TTL_SECONDS)
    company = CompanySettingsProvider(cache, config.COMPANY_SETTINGS_FILE or None)
    renderer = TemplateRenderer(config.TEMPLATE_DIR)

    for kind in EmailKind:
        if kind is not EmailKind.GENERIC and not renderer.template_exists(kind):
            logger.warning(f"Missing HTML template for {kind.value}")

    dispatcher = MailDispatcher(
        renderer,
        company_settings=company,
        smtp_timeout=config.SMTP_TIMEOUT,
    )
    return AppState(config=config, cache=cache, dispatcher=dispatcher)


def _make_lifespan(config: DispatchConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        setup_logging(
            log_dir=config.LOG_DIR,
            log_level=config.LOG_LEVEL,
            enable_file=config.LOG_TO_FILE,
            max_size_mb=config.LOG_MAX_SIZE_MB,
            backup_count=config.LOG_BACKUP_COUNT,
            settings=config,
        )

        try:
            app.state.dispatch = _build_state(config)
        except Exception as e:
            logger.error(f"Failed to start API: {e}")
            raise

        logger.info(f"{config.SERVICE_NAME} ready on port {config.PORT}")

        yield  # Application runs here

        # Shutdown
        logger.info(f"Shutting down {config.SERVICE_NAME}...")
        app.state.dispatch.cache.invalidate()
        app.state.dispatch = None
        logger.info(f"{config.SERVICE_NAME} stopped")

    return lifespan


# =============================================================================
# API Endpoints
# =============================================================================
router = APIRouter(prefix="/api")

SEND_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    403: {"model": ErrorResponse, "description": "Invalid or expired token"},
    413: {"model": ErrorResponse, "description": "Request body too large"},
    500: {"model": ErrorResponse, "description": "Delivery failed"},
}


async def _send(operation: Callable[[Any], EmailResult], payload: Any) -> JSONResponse:
    """Run a blocking dispatch operation off the event loop."""
    try:
        result = await run_in_threadpool(operation, payload)
    except MailDispatchError as e:
        hint = ""
        if isinstance(e, SMTPClientError) and e.is_transient:
            hint = " (temporary, caller may retry)"
        logger.error(f"{payload.kind.value} failed{hint}: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=EmailResult.failed(str(e)).to_response(),
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content=result.to_response())


@router.get("", response_model=ApiIndexResponse)
async def api_index(
    config: Annotated[DispatchConfig, Depends(get_config)],
) -> ApiIndexResponse:
    """Service index."""
    return ApiIndexResponse(
        message=f"{config.SERVICE_NAME} API is running",
        version=config.SERVICE_VERSION,
    )


@router.get("/status", response_model=StatusResponse)
async def api_status() -> StatusResponse:
    """Liveness check. No authentication required."""
    return StatusResponse()


@router.post(
    "/email/test",
    response_model=SendResponse,
    responses=SEND_RESPONSES,
)
async def send_test_email(
    request: TestEmailRequest,
    dispatcher: Annotated[MailDispatcher, Depends(get_dispatcher)],
    _auth: Annotated[dict | None, Depends(verify_token)],
) -> JSONResponse:
    """Send the SMTP diagnostic email to the configured sender address."""
    return await _send(dispatcher.send_test_email, request)


@router.post(
    "/email/send",
    response_model=SendResponse,
    responses=SEND_RESPONSES,
)
async def send_email(
    request: SendEmailRequest,
    dispatcher: Annotated[MailDispatcher, Depends(get_dispatcher)],
    _auth: Annotated[dict | None, Depends(verify_token)],
) -> JSONResponse:
    """Send a caller-composed email as-is."""
    return await _send(dispatcher.send_email, request)


@router.post(
    "/email/booking-confirmation",
    response_model=SendResponse,
    responses=SEND_RESPONSES,
)
async def send_booking_confirmation(
    request: BookingConfirmationRequest,
    dispatcher: Annotated[MailDispatcher, Depends(get_dispatcher)],
    _auth: Annotated[dict | None, Depends(verify_token)],
) -> JSONResponse:
    """Send a booking confirmation, with the itinerary PDF if provided."""
    return await _send(dispatcher.send_templated, request)


@router.post(
    "/email/payment-receipt",
    response_model=SendResponse,
    responses=SEND_RESPONSES,
)
async def send_payment_receipt(
    request: PaymentReceiptRequest,
    dispatcher: Annotated[MailDispatcher, Depends(get_dispatcher)],
    _auth: Annotated[dict | None, Depends(verify_token)],
) -> JSONResponse:
    """Send a payment receipt, with the invoice PDF if provided."""
    return await _send(dispatcher.send_templated, request)


@router.post(
    "/email/transfer-details",
    response_model=SendResponse,
    responses=SEND_RESPONSES,
)
async def send_transfer_details(
    request: TransferDetailsRequest,
    dispatcher: Annotated[MailDispatcher, Depends(get_dispatcher)],
    _auth: Annotated[dict | None, Depends(verify_token)],
) -> JSONResponse:
    """Send transfer vehicle and driver details."""
    return await _send(dispatcher.send_templated, request)


@router.post(
    "/email/itinerary",
    response_model=SendResponse,
    responses=SEND_RESPONSES,
)
async def send_itinerary(
    request: ItineraryRequest,
    dispatcher: Annotated[MailDispatcher, Depends(get_dispatcher)],
    _auth: Annotated[dict | None, Depends(verify_token)],
) -> JSONResponse:
    """Send a travel itinerary, with the itinerary PDF if provided."""
    return await _send(dispatcher.send_templated, request)


# =============================================================================
# FastAPI Application
# =============================================================================
def create_app(config: DispatchConfig | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Service configuration (loaded from the environment if None).
    """
    config = config or DispatchConfig()

    application = FastAPI(
        title=config.SERVICE_NAME,
        description="Transactional email dispatch for travel bookings",
        version=config.SERVICE_VERSION,
        lifespan=_make_lifespan(config),
    )

    @application.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > config.max_request_bytes:
            logger.warning(
                f"Rejected {request.method} {request.url.path}: "
                f"body of {length} bytes exceeds {config.MAX_REQUEST_SIZE_MB}MB"
            )
            return error_response(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                f"Request body exceeds {config.MAX_REQUEST_SIZE_MB}MB limit",
            )
        return await call_next(request)

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} "
            f"({elapsed_ms:.0f}ms)"
        )
        return response

    # Must stay outermost so early 413 responses carry CORS headers
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(
        RequestValidationError, validation_exception_handler
    )
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)

    application.include_router(router)
    return application


app = create_app()


# =============================================================================
# Entry Point
# =============================================================================
def run():
    """Run the API server."""
    import uvicorn

    config = DispatchConfig()
    logger.info(f"Starting {config.SERVICE_NAME} on {config.API_HOST}:{config.PORT}")
    uvicorn.run(
        "mail_dispatch.api.main:app",
        host=config.API_HOST,
        port=config.PORT,
        reload=False,
    )


if __name__ == "__main__":
    run()
