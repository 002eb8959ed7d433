import logging

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response
from opentelemetry import trace

from rewrite_proxy.access import ClientContext, client_context_from_request, evaluate
from rewrite_proxy.app_proxy.request_builder import build_upstream_request, request_has_body
from rewrite_proxy.app_proxy.response_builder import build_client_response
from rewrite_proxy.config import ProxyConfig, get_proxy_config
from rewrite_proxy.fallback import rejection_response
from rewrite_proxy.rewrite import RewriteContext
from rewrite_proxy.routing import HostResolver
from rewrite_proxy.utils.exception_logging import log_exception_with_details
from rewrite_proxy.utils.traced_requests import traced_request

router = APIRouter()
tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

# Routing needs an explicit list; anything outside it is answered with 405
PROXY_METHODS = [
    "GET",
    "POST",
    "PUT",
    "DELETE",
    "PATCH",
    "HEAD",
    "OPTIONS",
    "TRACE",
    # WebDAV
    "PROPFIND",
    "PROPPATCH",
    "MKCOL",
    "COPY",
    "MOVE",
    "LOCK",
    "UNLOCK",
    "REPORT",
    "SEARCH",
]


def create_upstream_client(config: ProxyConfig) -> httpx.AsyncClient:
    """One client per request. Redirects are followed upstream, as the client would."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout),
        follow_redirects=True,
    )


def _fallback_context(request: Request) -> ClientContext:
    # Used when the config itself could not be loaded
    return ClientContext(
        url=str(request.url),
        path=request.url.path,
        client_ip=request.client.host if request.client else "",
        user_agent=request.headers.get("user-agent", ""),
    )


async def proxy_request(
    request: Request, config: ProxyConfig, client_context: ClientContext
) -> Response:
    """Resolve the upstream host, send the rewritten request and rewrite the answer."""
    resolver = HostResolver(config.host_splits)
    base_hostname = config.proxy_hostname
    resolved_hostname = resolver.resolve(base_hostname, request.url.path)
    context = RewriteContext(
        origin_hostname=request.url.hostname or "",
        resolved_hostname=resolved_hostname,
        base_hostname=base_hostname,
        aliased_hostname=resolver.counterpart(base_hostname, resolved_hostname),
    )

    headers = request.headers.items()
    client = create_upstream_client(config)
    upstream = None

    async def close():
        if upstream is not None:
            await upstream.aclose()
        await client.aclose()

    try:
        upstream_request = build_upstream_request(
            client,
            request.method,
            str(request.url),
            headers,
            context,
            protocol=config.proxy_protocol,
            alias_headers=resolver.alias_headers(resolved_hostname),
            content=request.stream() if request_has_body(headers) else None,
        )
        span = trace.get_current_span()
        span.set_attribute("proxy.target_url", str(upstream_request.url))
        logger.debug(
            f"[Proxy] {request.method} {client_context.url} -> {upstream_request.url}"
        )

        upstream = await client.send(upstream_request, stream=True)
        span.set_attribute("proxy.status_code", upstream.status_code)

        return await build_client_response(
            upstream,
            context,
            close,
            pathname_filter=config.pathname_filter,
            debug=config.debug,
            method=request.method,
        )
    except BaseException:
        await close()
        raise


async def forward_to_upstream(request: Request) -> Response:
    """
    Handle one request end to end.

    Rejected requests get the fallback page (or a 302 to ``URL302``). Any
    failure while loading the config, building, fetching or rewriting is
    logged once here and answered with a bare 500.
    """
    client_context = None
    try:
        config = get_proxy_config()
        client_context = client_context_from_request(request, config)

        with traced_request(
            tracer,
            operation="proxy_request",
            client=client_context,
            method=request.method,
        ) as span:
            decision = evaluate(client_context, config)
            if not decision.allowed:
                span.set_attribute("proxy.rejected", decision.reason)
                logger.warning(
                    f"[Proxy] Invalid request ({decision.reason}), {client_context.describe()}",
                    extra={
                        "client_ip": client_context.client_ip,
                        "user_agent": client_context.user_agent,
                        "url": client_context.url,
                        "reason": decision.reason,
                    },
                )
                return rejection_response(config)

            return await proxy_request(request, config, client_context)

    except Exception as e:
        if client_context is None:
            client_context = _fallback_context(request)
        log_exception_with_details(
            logger, "[Proxy]", e, context=client_context.describe()
        )
        return PlainTextResponse("Internal Server Error", status_code=500)


@router.api_route("/{path:path}", methods=PROXY_METHODS)
async def proxy_all(request: Request, path: str):
    """Catch-all route that proxies every request to the configured upstream."""
    return await forward_to_upstream(request)
