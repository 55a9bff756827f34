"""Transport-level request body ceiling.

Independent of the per-request size check in the dispatcher: this one stops
unbounded uploads before the body is buffered and parsed.
"""

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

TRANSPORT_BODY_LIMIT = 50 * 1024 * 1024  # 50MB


class BodySizeLimitMiddleware:
    """Rejects bodies over ``max_body_bytes`` with 413.

    A declared Content-Length is checked up front; chunked bodies are
    counted as they are received.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int = TRANSPORT_BODY_LIMIT):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = dict(scope["headers"]).get(b"content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body_bytes:
            response = JSONResponse(
                status_code=413,
                content={"error": "FileTooLarge", "message": self._message()},
            )
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise HTTPException(status_code=413, detail=self._message())
            return message

        await self.app(scope, limited_receive, send)

    def _message(self) -> str:
        return f"Request body exceeds {self.max_body_bytes // (1024 * 1024)} MB"
