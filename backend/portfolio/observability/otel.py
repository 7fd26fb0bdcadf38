from __future__ import annotations

import os

from fastapi import FastAPI

from ..settings import Settings
from .logging import get_logger


def _truthy(v: str | None) -> bool:
    return str(v or "").strip().lower() in ("1", "true", "yes", "y", "on")


def otel_enabled(settings: Settings) -> bool:
    return bool(getattr(settings, "otel_enabled", False)) or _truthy(
        os.environ.get("OTEL_ENABLED")
    )


def configure_otel(settings: Settings) -> None:
    """
    Optional OpenTelemetry tracing, installed with the ``otel`` extra.

    - Disabled unless OTEL_ENABLED is set.
    - Without the extra installed, logs once and leaves tracing off.
    - Without an OTLP endpoint, spans go to the console exporter.
    """
    if not otel_enabled(settings):
        return

    log = get_logger("otel")

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
            OTLPSpanExporter,
        )
    except ImportError:
        log.warning("otel_disabled_missing_deps")
        return

    service_name = str(settings.otel_service_name or "portfolio-cms").strip()
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    endpoint = str(settings.otel_exporter_otlp_endpoint or "").strip()
    if endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        log.info("otel_configured", exporter="otlp_http", endpoint=endpoint)
    else:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        log.info("otel_configured", exporter="console")

    trace.set_tracer_provider(provider)


def instrument_app(app: FastAPI, settings: Settings) -> None:
    """
    Instrument inbound FastAPI requests and outbound httpx calls (Cloudinary).
    """
    if not otel_enabled(settings):
        return

    log = get_logger("otel")

    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app)
        log.info("otel_instrumented", target="fastapi")
    except ImportError:
        log.warning("otel_instrument_failed", target="fastapi")

    try:
        from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

        HTTPXClientInstrumentor().instrument()
        log.info("otel_instrumented", target="httpx")
    except ImportError:
        log.warning("otel_instrument_failed", target="httpx")
