from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from sqlalchemy.ext.asyncio import AsyncEngine

from marketplace.core.config import ServiceSettings


def setup_telemetry(app: FastAPI, settings: ServiceSettings) -> None:
    if not settings.otel_enabled:
        return

    env = "debug" if settings.debug else "release"
    resource = Resource.create({"service.name": settings.service_name, "deployment.environment": env})
    provider = TracerProvider(resource=resource)
    processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{settings.otlp_endpoint}/v1/traces"))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)


def instrument_engine(engine: AsyncEngine, settings: ServiceSettings) -> None:
    if not settings.otel_enabled:
        return
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
