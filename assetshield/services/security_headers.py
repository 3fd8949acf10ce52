# -*- coding: utf-8 -*-
"""
Security headers added to every response.

- Strict-Transport-Security: max-age=31536000; includeSubDomains
- X-Content-Type-Options: nosniff
- Referrer-Policy: strict-origin-when-cross-origin
- X-Frame-Options: DENY on API responses
"""
from flask import Flask, Response, request


def add_security_headers(response: Response) -> Response:
    # tenant domains are not ours to preload
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if request.path.startswith("/api/"):
        response.headers["X-Frame-Options"] = "DENY"
    return response


def apply_security_headers_to_app(app: Flask) -> None:
    @app.after_request
    def after_request(response: Response) -> Response:
        return add_security_headers(response)
