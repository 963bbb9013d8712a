"""
Distributed Tracing Configuration

Sets up and configures OpenTelemetry for distributed tracing.
"""
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from loguru import logger

from storefront.core.constants import APP_NAME, APP_VERSION


def setup_tracing(otlp_endpoint: str = "") -> None:
    """
    Initialize the OpenTelemetry tracer provider.

    Args:
        otlp_endpoint: OTLP/HTTP traces endpoint (e.g. http://localhost:4318/v1/traces);
            spans are only exported when it is set
    """
    resource = Resource(attributes={
        "service.name": APP_NAME,
        "service.version": APP_VERSION,
    })

    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info(f"OpenTelemetry tracing initialized (exporting to {otlp_endpoint}).")
    else:
        logger.info("OpenTelemetry tracing initialized (exporter disabled).")

    trace.set_tracer_provider(provider)


def get_tracer(name: str):
    """Gets a tracer instance for a specific module."""
    return trace.get_tracer(name)
