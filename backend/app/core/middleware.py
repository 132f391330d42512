from __future__ import annotations

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects scheduling payloads whose declared body size is over the limit."""

    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max(1, max_bytes)

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.scope.get("type") != "http":
            return await call_next(request)

        declared = _declared_length(request.headers.get("content-length"))
        if declared > self._max_bytes:
            return JSONResponse(
                status_code=413,
                content={
                    "message": "Request body too large",
                    "details": {"size_bytes": declared, "max_bytes": self._max_bytes},
                },
            )
        return await call_next(request)


def _declared_length(raw_length: str | None) -> int:
    if not raw_length:
        return 0
    try:
        return int(raw_length)
    except ValueError:
        return 0
