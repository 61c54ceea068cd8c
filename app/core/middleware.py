"""
HTTP edge middleware: security headers, request body cap and rate limiting.
"""
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

MAX_BODY_BYTES = 10 * 1024 * 1024  # 10MB
RATE_LIMIT_REQUESTS = 100
RATE_LIMIT_WINDOW_SECONDS = 15 * 60

# Helmet defaults, minus Content-Security-Policy and Cross-Origin-Embedder-Policy
SECURITY_HEADERS = {
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than max_bytes with 413.

    A declared Content-Length is checked up front. The body itself is then
    read and counted before the app sees it, so chunked requests without
    Content-Length are capped as well. At most max_bytes are buffered.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = MAX_BODY_BYTES):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length:
            try:
                declared = int(content_length)
            except ValueError:
                response = JSONResponse(status_code=400, content={"error": "Invalid Content-Length header"})
                await response(scope, receive, send)
                return
            if declared > self.max_bytes:
                await self._reject(scope, receive, send)
                return

        messages: List[Message] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_bytes:
                await self._reject(scope, receive, send)
                return
            more_body = message.get("more_body", False)

        async def replay() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(status_code=413, content={"error": "Request body too large"})
        await response(scope, receive, send)


class FixedWindowCounter:
    """
    In-process fixed-window request counter keyed by client identity.
    Windows start at the first request seen for a key.
    """

    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> Tuple[bool, int, float]:
        """Count a request. Returns (allowed, remaining, seconds until reset)."""
        now = self.clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            # Forget expired windows so the map does not grow without bound
            if len(self._windows) > 10000:
                self._windows = {
                    k: v for k, v in self._windows.items() if now - v[0] < self.window_seconds
                }
        reset_in = max(self.window_seconds - (now - started), 0)
        return count <= self.limit, max(self.limit - count, 0), reset_in

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window rate limiting for paths under prefix, per client IP."""

    def __init__(self, app, counter: Optional[FixedWindowCounter] = None, prefix: str = "/api/"):
        super().__init__(app)
        self.counter = counter or FixedWindowCounter(RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW_SECONDS)
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.prefix):
            return await call_next(request)

        client_key = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = self.counter.hit(client_key)
        headers = {
            "RateLimit-Limit": str(self.counter.limit),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(int(reset_in)),
        }

        if not allowed:
            headers["Retry-After"] = str(int(reset_in))
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests, please try again later"},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
