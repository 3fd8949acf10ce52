# -*- coding: utf-8 -*-
"""
Exception hierarchy for the platform services.

Services raise these; the error handlers in ``assetshield.middleware.errors``
turn them into ``{"error": ...}`` JSON responses with the matching status.
"""
from typing import Any, Optional


class AppError(Exception):
    """Base error carrying an HTTP status and a client-safe message."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequestError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class PaymentProviderError(AppError):
    status_code = 502


class NotificationError(AppError):
    """Raised by notifiers when a message could not be handed off."""


class ProvisioningError(AppError):
    """A provisioning step failed; ``step`` names which one."""

    def __init__(self, message: str, step: str, run_id: Optional[int] = None):
        super().__init__(message, details={"step": step, "run_id": run_id})
        self.step = step
        self.run_id = run_id
