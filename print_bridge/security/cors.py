"""CORS policy derived once from the configured origins."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from print_bridge.config.settings import Settings

ALLOWED_HEADERS = ["content-type", "authorization", "x-api-token"]
ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]


def cors_options(settings: Settings) -> dict:
    """Middleware kwargs: any origin for "*", otherwise the exact origins.

    Configured origins must include the scheme, e.g. ``https://example.com``.
    """
    if settings.allows_any_origin:
        origins = ["*"]
    else:
        origins = [origin.rstrip("/") for origin in settings.allowed_origins]
    return {
        "allow_origins": origins,
        "allow_methods": ALLOWED_METHODS,
        "allow_headers": ALLOWED_HEADERS,
    }


def install_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(CORSMiddleware, **cors_options(settings))
