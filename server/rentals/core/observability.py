"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from .config import settings

SERVICE_NAME = "rental-availability-api"
SERVICE_VERSION = "1.0.0"

# Prometheus metrics
REGISTRY = CollectorRegistry()

ADMISSIONS = Counter(
    'booking_admissions_total',
    'Admission decisions by outcome',
    ['outcome'],
    registry=REGISTRY
)

ADMISSION_CONFLICT_RETRIES = Counter(
    'booking_admission_conflict_retries_total',
    'Reservation races lost and retried',
    registry=REGISTRY
)

AVAILABILITY_CHECKS = Counter(
    'availability_checks_total',
    'Day-table availability queries served',
    registry=REGISTRY
)

LEDGER_RANGE_DAYS = Histogram(
    'availability_ledger_range_days',
    'Number of days walked per ledger computation',
    buckets=(1, 2, 7, 14, 31, 62, 92, 183, 366, 731),
    registry=REGISTRY
)

STATUS_TRANSITIONS = Counter(
    'booking_status_transitions_total',
    'Booking status transitions',
    ['from_status', 'to_status'],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_tracing(app_name: str = SERVICE_NAME):
    """Setup OpenTelemetry tracing."""
    resource = Resource.create({
        "service.name": app_name,
        "service.version": SERVICE_VERSION,
        "environment": settings.environment,
    })

    provider = TracerProvider(resource=resource)

    # Export only when a collector is configured
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))

    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the async engine's sync core with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_admission(outcome: str):
        """Record an admission decision (accepted, rejected, contention)."""
        ADMISSIONS.labels(outcome=outcome).inc()

    @staticmethod
    def record_conflict_retry():
        """Record a lost reservation race that will be retried."""
        ADMISSION_CONFLICT_RETRIES.inc()

    @staticmethod
    def record_availability_check(days: int):
        """Record an availability check and the number of days it walked."""
        AVAILABILITY_CHECKS.inc()
        LEDGER_RANGE_DAYS.observe(days)

    @staticmethod
    def record_status_transition(from_status: str, to_status: str):
        """Record a booking status transition."""
        STATUS_TRANSITIONS.labels(from_status=from_status, to_status=to_status).inc()


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
