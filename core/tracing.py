import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from core.settings import Settings

log = structlog.get_logger(__name__)


def init_tracer(settings: Settings) -> TracerProvider:
    """Initialize OpenTelemetry tracer with OTLP exporter.

    With DISABLE_TRACING set the provider is still installed, so spans are
    created and propagated, but nothing is exported.
    """
    provider = TracerProvider(
        resource=Resource.create({"service.name": settings.OTEL_SERVICE_NAME})
    )

    if settings.DISABLE_TRACING:
        log.info("tracing.disabled")
    else:
        try:
            provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
        except Exception as exc:  # pragma: no cover
            log.warning("OTLP exporter unavailable, tracing disabled", error=str(exc))

    trace.set_tracer_provider(provider)
    return provider
