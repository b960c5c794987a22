"""
Security headers applied to every response
"""

from fastapi import FastAPI, Request, Response

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline'",
    "style-src 'self' 'unsafe-inline'",
    "img-src 'self' data: https: *",
    "connect-src 'self'",
    "font-src 'self'",
    "object-src 'none'",
    "frame-src 'none'",
    "base-uri 'self'",
    "form-action 'self'",
])

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
}


def apply_security_headers(response: Response) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    # never advertise the server stack
    for name in ("server", "x-powered-by"):
        if name in response.headers:
            del response.headers[name]
    return response


def add_security_headers(app: FastAPI) -> None:
    """Register the middleware that stamps SECURITY_HEADERS on responses.

    The catch-all 500 handler runs outside this middleware and stamps the
    headers itself with apply_security_headers.
    """

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        return apply_security_headers(await call_next(request))
