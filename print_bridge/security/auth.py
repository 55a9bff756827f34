"""Admission control for the bridge API.

A request is admitted when its client is within the rate limit and, if an
API token is configured, it presents that exact token in the x-api-token
header (or as an ``Authorization: Bearer`` credential).

Attempts are counted before the token check: a request with a bad token
still consumes quota, so repeated probing is throttled too.
"""

import hmac

from fastapi import Request, Response, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from print_bridge.config.settings import Settings
from print_bridge.errors import RateLimitExceeded, Unauthorized
from print_bridge.logging.audit import get_audit_logger
from print_bridge.security.ratelimit import RateLimitResult, SlidingWindowLimiter

api_token_header = APIKeyHeader(name="x-api-token", auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


def token_matches(presented: str | None, configured: str | None) -> bool:
    """No configured token admits everyone; otherwise require an exact match."""
    if configured is None:
        return True
    if presented is None:
        return False
    return hmac.compare_digest(presented.encode(), configured.encode())


async def admit(
    client_id: str,
    presented_token: str | None,
    settings: Settings,
    limiter: SlidingWindowLimiter,
) -> RateLimitResult:
    """Return the rate state of an admitted request, or raise the rejection."""
    logger = get_audit_logger()

    rate_result = await limiter.check(client_id, settings.rate_limit_per_minute)
    if not rate_result.allowed:
        logger.warning(
            "Rate limit exceeded",
            extra={"audit_data": {
                "client_ip": client_id,
                "rate_limit": rate_result.limit,
                "retry_after": rate_result.reset_seconds,
            }},
        )
        raise RateLimitExceeded(
            headers={
                "Retry-After": str(max(1, int(rate_result.reset_seconds))),
                "X-RateLimit-Limit": str(rate_result.limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(int(rate_result.reset_seconds)),
            },
        )

    if not token_matches(presented_token, settings.api_token):
        logger.warning(
            "Invalid or missing API token",
            extra={"audit_data": {
                "client_ip": client_id,
                "token_present": presented_token is not None,
            }},
        )
        raise Unauthorized()

    return rate_result


def client_identity(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def require_admission(
    request: Request,
    response: Response,
    api_token: str | None = Security(api_token_header),
    bearer: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> RateLimitResult:
    """FastAPI dependency guarding every /api route."""
    presented = api_token if api_token is not None else (bearer.credentials if bearer else None)
    rate_result = await admit(
        client_identity(request),
        presented,
        request.app.state.settings,
        request.app.state.rate_limiter,
    )
    response.headers["X-RateLimit-Limit"] = str(rate_result.limit)
    response.headers["X-RateLimit-Remaining"] = str(rate_result.remaining)
    response.headers["X-RateLimit-Reset"] = str(int(rate_result.reset_seconds))
    return rate_result
