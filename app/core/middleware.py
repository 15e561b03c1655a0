from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp
from app.core.config import settings

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to responses."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self.security_headers = {
            "X-Frame-Options": "DENY",
            "X-Content-Type-Options": "nosniff",
            "Strict-Transport-Security": f"max-age={settings.HSTS_MAX_AGE}; includeSubDomains",
            "Referrer-Policy": "strict-origin-when-cross-origin"
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for header_name, header_value in self.security_headers.items():
            response.headers[header_name] = header_value
        return response

class RequestSizeMiddleware(BaseHTTPMiddleware):
    """Reject request bodies above the configured size (base64 flyers included)."""

    def __init__(self, app: ASGIApp, max_content_length: int | None = None) -> None:
        super().__init__(app)
        self.max_content_length = max_content_length or settings.MAX_CONTENT_LENGTH

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_content_length:
            return Response(status_code=413, content="Request too large")

        return await call_next(request)
