"""OpenTelemetry initialization helpers for the product database service."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from productdb.core.config import settings

logger = logging.getLogger(__name__)
_TRACING_INITIALIZED = False


def setup_tracing(app: Optional[FastAPI] = None) -> bool:
    """Configure OpenTelemetry and instrument FastAPI when tracing is enabled."""

    global _TRACING_INITIALIZED
    if not settings.ENABLE_TRACING:
        return False

    if not _TRACING_INITIALIZED:
        resource = Resource.create(
            {
                "service.name": settings.API_TITLE.lower().replace(" ", "-"),
                "service.version": settings.API_VERSION,
                "environment": settings.ENVIRONMENT,
            }
        )

        provider = TracerProvider(resource=resource)
        headers = parse_headers(settings.OTEL_EXPORTER_OTLP_HEADERS)
        exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, headers=headers or None)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

        _TRACING_INITIALIZED = True
        logger.info("OpenTelemetry tracing initialized", extra={"endpoint": settings.OTEL_EXPORTER_OTLP_ENDPOINT})

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)
    return True


def parse_headers(raw_headers: Optional[str]) -> Dict[str, str]:
    """Parse ``key=value,key2=value2`` exporter headers."""

    if not raw_headers:
        return {}
    pairs = {}
    for item in raw_headers.split(","):
        if "=" not in item:
            continue
        key, value = item.split("=", 1)
        if key.strip():
            pairs[key.strip()] = value.strip()
    return pairs


__all__ = ["parse_headers", "setup_tracing"]
