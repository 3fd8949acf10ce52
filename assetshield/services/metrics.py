# -*- coding: utf-8 -*-
"""
Prometheus metrics for the AssetShield platform.

HTTP request counters are recorded by an after_request hook; the domain
counters (tenants provisioned, provisioning failures, leads recorded, domain
resolutions) are bumped by the services through ``get_metrics_service()``.
"""

import time
import uuid
from typing import Optional

from flask import Flask, current_app, g, has_app_context, request
from prometheus_client import CollectorRegistry, Counter, Histogram
from prometheus_client.exposition import CONTENT_TYPE_LATEST, generate_latest


def init_metrics(app: Flask) -> None:
    service = MetricsService(enabled=bool(app.config.get("METRICS_ENABLED", True)))
    app.extensions["metrics"] = service

    if not service.enabled:
        return

    @app.before_request
    def _start_timer():
        g.metrics_start_time = time.time()

    @app.after_request
    def _record_request(response):
        started = getattr(g, "metrics_start_time", None)
        if started is not None:
            service.record_http_request(
                route=request.path,
                method=request.method,
                status_code=response.status_code,
                duration_seconds=time.time() - started,
            )
        return response

    @app.route("/metrics")
    def metrics():
        return generate_latest(service.registry), 200, {"Content-Type": CONTENT_TYPE_LATEST}


def get_metrics_service() -> Optional["MetricsService"]:
    if has_app_context():
        return current_app.extensions.get("metrics")
    return None


class MetricsService:
    """Owns a registry per application so factories can be called repeatedly."""

    def __init__(self, enabled: bool = True, registry: Optional[CollectorRegistry] = None):
        self.enabled = enabled
        self.registry = registry if registry is not None else CollectorRegistry()

        if self.enabled:
            self.http_requests_total = Counter(
                "assetshield_http_requests_total",
                "Total number of HTTP requests.",
                ["route", "method", "status"],
                registry=self.registry,
            )
            self.http_request_duration_seconds = Histogram(
                "assetshield_http_request_duration_seconds",
                "Duration of HTTP requests in seconds.",
                ["route", "method"],
                registry=self.registry,
            )
            self.tenants_provisioned_total = Counter(
                "assetshield_tenants_provisioned_total",
                "Tenants created by the provisioning pipeline.",
                ["tier"],
                registry=self.registry,
            )
            self.provisioning_failures_total = Counter(
                "assetshield_provisioning_failures_total",
                "Provisioning runs that failed or finished incomplete.",
                ["step"],
                registry=self.registry,
            )
            self.leads_recorded_total = Counter(
                "assetshield_leads_recorded_total",
                "Client leads recorded.",
                registry=self.registry,
            )
            self.domain_resolutions_total = Counter(
                "assetshield_domain_resolutions_total",
                "Host resolution outcomes.",
                ["outcome"],
                registry=self.registry,
            )

    def record_http_request(self, route: str, method: str, status_code: int, duration_seconds: float):
        if self.enabled:
            normalized_route = self._normalize_route(route)
            self.http_requests_total.labels(
                route=normalized_route, method=method, status=status_code).inc()
            self.http_request_duration_seconds.labels(
                route=normalized_route, method=method).observe(duration_seconds)

    def record_tenant_provisioned(self, tier: str):
        if self.enabled:
            self.tenants_provisioned_total.labels(tier=tier).inc()

    def record_provisioning_failure(self, step: str):
        if self.enabled:
            self.provisioning_failures_total.labels(step=step).inc()

    def record_lead(self):
        if self.enabled:
            self.leads_recorded_total.inc()

    def record_domain_resolution(self, outcome: str):
        if self.enabled:
            self.domain_resolutions_total.labels(outcome=outcome).inc()

    def get_metrics(self) -> str:
        if self.enabled:
            return generate_latest(self.registry).decode("utf-8")
        return ""

    @staticmethod
    def _normalize_route(route: str) -> str:
        parts = route.split("/")
        for i, part in enumerate(parts):
            if part.isdigit():
                parts[i] = "{id}"
                continue
            try:
                uuid.UUID(part)
                parts[i] = "{uuid}"
            except ValueError:
                pass
        return "/".join(parts)
