# catalog/config/otel.py
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from catalog.core.config import settings

logger = logging.getLogger(__name__)

_TRACER_PROVIDER = None


def setup_telemetry(db_engine=None):
    """OpenTelemetry 트레이싱 및 SQLAlchemy 계측 설정. OTEL_ENABLED일 때만 동작"""
    global _TRACER_PROVIDER

    if not settings.OTEL_ENABLED:
        logger.info("OpenTelemetry disabled, spans are no-op.")
        return None
    if _TRACER_PROVIDER is not None:
        return _TRACER_PROVIDER

    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    resource = Resource.create({"service.name": settings.OTEL_SERVICE_NAME})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True))
    )
    trace.set_tracer_provider(provider)
    _TRACER_PROVIDER = provider

    if db_engine is not None:
        # async 엔진은 sync_engine을 계측해야 함
        SQLAlchemyInstrumentor().instrument(engine=db_engine.sync_engine, tracer_provider=provider)
        logger.info("SQLAlchemyInstrumentor applied.")

    logger.info("OpenTelemetry tracing configured.", extra={
        "service_name": settings.OTEL_SERVICE_NAME,
        "endpoint": settings.OTEL_EXPORTER_OTLP_ENDPOINT,
    })
    return provider


def instrument_fastapi_app(app):
    """FastAPI 앱을 OpenTelemetry로 계측합니다."""
    if _TRACER_PROVIDER is None:
        return
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    FastAPIInstrumentor.instrument_app(app, tracer_provider=_TRACER_PROVIDER)
    logger.info("FastAPI application instrumented.", extra={"service_name": settings.OTEL_SERVICE_NAME})


def shutdown_telemetry():
    if _TRACER_PROVIDER is not None:
        _TRACER_PROVIDER.shutdown()
        logger.info("TracerProvider shut down.")
