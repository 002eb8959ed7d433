import logging
from typing import Sequence

from fastapi import FastAPI
from opentelemetry import trace
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from rewrite_proxy.app_proxy.route import router
from rewrite_proxy.config import ProxyConfigError, get_proxy_config
from rewrite_proxy.vars import METRICS_PATH, OTLP_ENDPOINT, OTLP_HEADERS, SERVICE_NAME

logger = logging.getLogger("uvicorn.error")

app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

if METRICS_PATH:
    instrumentator = Instrumentator(excluded_handlers=[METRICS_PATH])
    instrumentator.instrument(app).expose(app, endpoint=METRICS_PATH)
    # Add app_name to the metrics
    app_info = Info("fastapi_app_info", "Application Info")
    app_info.info({"app_name": SERVICE_NAME})


try:
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider, ReadableSpan
    from opentelemetry.sdk.trace.export import (
        BatchSpanProcessor,
        SpanExporter,
        SpanExportResult,
    )
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

    _OTEL_AVAILABLE = True
except ImportError:  # pragma: no cover - tracing stays a no-op without the otel extra
    Resource = TracerProvider = ReadableSpan = BatchSpanProcessor = SpanExporter = SpanExportResult = None  # type: ignore
    FastAPIInstrumentor = OTLPSpanExporter = None  # type: ignore
    _OTEL_AVAILABLE = False


class FilteringSpanExporter(SpanExporter if _OTEL_AVAILABLE else object):
    """
    Wrapper exporter that filters out ASGI body spans.
    Every streamed chunk of a proxied download would otherwise become a span.
    """

    def __init__(self, exporter: SpanExporter):
        self.exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        filtered_spans = [
            span
            for span in spans
            if not (
                span.attributes
                and span.attributes.get("asgi.event.type") == "http.response.body"
            )
        ]
        if filtered_spans:
            return self.exporter.export(filtered_spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return self.exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000):
        return self.exporter.force_flush(timeout_millis)


# Configure tracing if OpenTelemetry dependencies are available
if _OTEL_AVAILABLE:
    trace.set_tracer_provider(
        TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
    )
    tracer_provider = trace.get_tracer_provider()
    if OTLP_ENDPOINT:
        otlp_exporter = OTLPSpanExporter(
            endpoint=OTLP_ENDPOINT,
            headers=((OTLP_HEADERS).split(",") if OTLP_HEADERS else None),
        )
        tracer_provider.add_span_processor(
            BatchSpanProcessor(FilteringSpanExporter(otlp_exporter))
        )

    FastAPIInstrumentor.instrument_app(app)


def log_startup_config() -> None:
    """Report the proxy config once so misconfiguration shows up before traffic does."""
    try:
        config = get_proxy_config()
    except ProxyConfigError as e:
        logger.error(f"[Proxy] Invalid configuration, every request will fail: {e}")
        return
    if not config.proxy_hostname:
        logger.warning("[Proxy] PROXY_HOSTNAME is not set, every request will be rejected")
        return
    splits = ", ".join(
        f"{s.base_hostname}->{s.alias_hostname}" for s in config.host_splits
    )
    logger.info(
        f"[Proxy] Forwarding to {config.proxy_protocol}://{config.proxy_hostname} "
        f"(host splits: {splits or 'none'}, debug: {config.debug})"
    )


log_startup_config()

app.include_router(router)
