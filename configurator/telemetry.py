"""OpenTelemetry configuration for the configurator service."""

import os
import sys

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from prometheus_client import start_http_server

from .logging_config import get_logger

logger = get_logger(__name__)

METRICS_PORTS = (8080, 8081)


def telemetry_enabled() -> bool:
    """Telemetry is opt-in with ENABLE_TELEMETRY and never runs under pytest."""
    if not os.getenv("ENABLE_TELEMETRY"):
        return False
    return "pytest" not in sys.modules and not os.getenv("TESTING")


def _start_metrics_server() -> int:
    for port in METRICS_PORTS:
        try:
            start_http_server(port)
        except OSError:
            logger.warning("Metrics port busy", port=port)
            continue
        return port
    raise OSError(f"No free port for Prometheus metrics in {METRICS_PORTS}")


def setup_telemetry(app: FastAPI) -> None:
    """Configure OpenTelemetry tracing and metrics for the FastAPI application."""
    if not telemetry_enabled():
        return

    try:
        prometheus_reader = PrometheusMetricReader()
        metrics.set_meter_provider(MeterProvider(metric_readers=[prometheus_reader]))
        port = _start_metrics_server()
        logger.info("Prometheus metrics server started", port=port)

        tracer_provider = TracerProvider()
        # Console exporter until an OTLP collector is deployed
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        trace.set_tracer_provider(tracer_provider)

        FastAPIInstrumentor.instrument_app(app)
        SQLAlchemyInstrumentor().instrument()

        logger.info("OpenTelemetry tracing and metrics setup completed")

    except Exception as e:
        # Telemetry failures must not prevent the API from starting
        logger.error("Failed to setup OpenTelemetry", error=str(e))
