"""Print Bridge: FastAPI application entry point.

A local HTTP bridge that accepts print jobs from client applications and
hands them to the host's CUPS spooler, enforcing CORS, token auth, rate
limits and payload limits on the way in.
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from print_bridge.config.settings import Settings, get_settings
from print_bridge.errors import BridgeError
from print_bridge.logging.audit import (
    RequestTimer,
    generate_request_id,
    get_audit_logger,
    log_error,
    log_request,
    request_id_var,
    setup_logging,
)
from print_bridge.middleware import BodySizeLimitMiddleware
from print_bridge.printing.directory import list_printers
from print_bridge.printing.dispatcher import submit
from print_bridge.printing.models import PrinterInfo, PrintRequest, PrintResponse
from print_bridge.security.auth import client_identity, require_admission
from print_bridge.security.cors import install_cors
from print_bridge.security.ratelimit import RateLimitResult, SlidingWindowLimiter

VERSION = "0.3.0"
SERVICE_NAME = "print-bridge"

_HTTP_ERROR_KINDS = {
    404: "NotFound",
    405: "MethodNotAllowed",
    413: "FileTooLarge",
}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an app bound to one immutable settings object.

    CORS policy and the rate limiter are created here, once per app.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown lifecycle hooks."""
        setup_logging(settings)
        get_audit_logger().info(
            "Bridge started",
            extra={"audit_data": {"host": settings.host, "port": settings.port, "version": VERSION}},
        )
        yield
        get_audit_logger().info("Bridge stopped")

    app = FastAPI(
        title="Print Bridge",
        description="Local bridge between client applications and the system print spooler",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_limiter = SlidingWindowLimiter()

    app.add_middleware(BodySizeLimitMiddleware)

    @app.middleware("http")
    async def audit_requests(request: Request, call_next):
        rid = generate_request_id()
        token = request_id_var.set(rid)
        try:
            with RequestTimer() as timer:
                response = await call_next(request)
            log_request(
                request.method,
                request.url.path,
                response.status_code,
                timer.elapsed_ms,
                client_identity(request),
            )
            response.headers["X-Request-Id"] = rid
            return response
        finally:
            request_id_var.reset(token)

    # Added last so it is outermost: preflights and rejections carry CORS headers
    install_cors(app, settings)

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": SERVICE_NAME, "version": VERSION}

    @app.get("/api/printers", response_model=list[PrinterInfo])
    async def printers(request: Request, _: RateLimitResult = Depends(require_admission)):
        return await list_printers(request.app.state.settings)

    @app.post("/api/print", response_model=PrintResponse)
    async def print_document(
        print_request: PrintRequest,
        request: Request,
        _: RateLimitResult = Depends(require_admission),
    ):
        """Pipeline: Admission -> Format check -> Size check -> Convert -> Spool -> Log"""
        return await submit(print_request, request.app.state.settings)


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError):
        if exc.status_code >= 500:
            log_error(exc, f"{request.method} {request.url.path}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "message": exc.message},
            headers=exc.headers or None,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "InvalidRequest", "message": _describe_validation_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": _HTTP_ERROR_KINDS.get(exc.status_code, "HTTPError"),
                "message": str(exc.detail),
            },
            headers=getattr(exc, "headers", None),
        )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg', 'invalid value')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request body"
