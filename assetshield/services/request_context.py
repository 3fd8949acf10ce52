# -*- coding: utf-8 -*-
"""
Request context for the AssetShield platform.

Every request gets a request id (taken from ``X-Request-ID`` when the caller
sends a valid UUID, generated otherwise) that is echoed back in the response
headers and attached to every structured log line. Dashboard and API-key
authentication record the acting customer here so request logs can be
filtered per tenant.
"""

import time
import uuid
from typing import Optional

from flask import Flask, Response, g, request


class RequestContextMiddleware:
    """Stamps request id and timing onto each request."""

    def __init__(self, app: Flask):
        self.app = app
        app.before_request(self._before_request)
        app.after_request(self._after_request)

    def _before_request(self):
        g.request_id = self._incoming_or_new_request_id()
        g.request_start_time = time.time()
        g.request_method = request.method
        g.request_path = request.path
        g.request_host = request.host
        g.request_remote_addr = client_ip()
        g.customer_id = None
        g.auth_method = None

    def _after_request(self, response: Response) -> Response:
        if hasattr(g, "request_id"):
            response.headers["X-Request-ID"] = g.request_id
        if hasattr(g, "request_start_time"):
            duration_ms = round((time.time() - g.request_start_time) * 1000, 2)
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
        return response

    @staticmethod
    def _incoming_or_new_request_id() -> str:
        request_id = request.headers.get("X-Request-ID")
        if request_id:
            try:
                uuid.UUID(request_id)
                return request_id
            except ValueError:
                pass
        return str(uuid.uuid4())


def client_ip() -> Optional[str]:
    """First hop of X-Forwarded-For, else the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or request.remote_addr
    return request.remote_addr


def get_request_id() -> Optional[str]:
    return getattr(g, "request_id", None)


def get_request_context() -> dict:
    """Fields merged into every log line emitted during a request."""
    context = {
        "request_id": getattr(g, "request_id", None),
        "method": getattr(g, "request_method", None),
        "path": getattr(g, "request_path", None),
        "host": getattr(g, "request_host", None),
        "remote_addr": getattr(g, "request_remote_addr", None),
    }
    if getattr(g, "customer_id", None):
        context["customer_id"] = g.customer_id
    if getattr(g, "auth_method", None):
        context["auth_method"] = g.auth_method
    return context


def set_auth_context(customer_id: Optional[int] = None, auth_method: Optional[str] = None):
    """Record who is acting on this request (dashboard token or API key)."""
    if customer_id:
        g.customer_id = customer_id
    if auth_method:
        g.auth_method = auth_method


def init_request_context(app: Flask):
    return RequestContextMiddleware(app)
