"""
Response headers shared by the middleware stack and the catch-all error handler.
"""
from starlette.requests import Request

from app.core.config import settings


def security_headers() -> dict:
    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Referrer-Policy": "no-referrer",
    }
    if settings.is_production:
        headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"
    return headers


def cors_headers(request: Request) -> dict:
    """CORS headers for an allowed ``Origin``, as CORSMiddleware would add them."""
    origin = request.headers.get("origin")
    if not origin or origin not in settings.allowed_origins:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
        "Vary": "Origin",
    }
