import logging
from typing import Optional, Dict
from contextlib import contextmanager

from opentelemetry.trace import Tracer

from rewrite_proxy.access.client import ClientContext

logger = logging.getLogger("uvicorn.error")


@contextmanager
def traced_request(
    tracer: Tracer,
    operation: str,
    client: ClientContext,
    method: str,
    extra_attrs: Optional[Dict] = None,
):
    """Context manager to create a span, set the client attributes, and log the request."""
    with tracer.start_as_current_span(operation) as span:
        span.set_attribute("http.method", method)
        span.set_attribute("http.url", client.url)
        if client.client_ip:
            span.set_attribute("client.address", client.client_ip)
        if client.region:
            span.set_attribute("client.region", client.region)
        if extra_attrs:
            for k, v in extra_attrs.items():
                span.set_attribute(k, v)
        logger.debug(f"[Proxy] {method} {client.url} from {client.client_ip or 'unknown'}")
        yield span
