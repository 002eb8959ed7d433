import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Pattern, Tuple

import httpx
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from rewrite_proxy.app_proxy.headers import HOP_BY_HOP_HEADERS, without_headers
from rewrite_proxy.rewrite import RewriteContext, rewrite_body, rewrite_headers, rewrite_text

logger = logging.getLogger("uvicorn.error")

# httpx has already decompressed a buffered body and its length changes on rewrite
BUFFERED_EXCLUDED_HEADERS = {"content-length", "content-encoding"}


def is_rewritable(content_type: str) -> bool:
    return "text/" in content_type or "application/json" in content_type


def rewrite_response_headers(
    headers: List[Tuple[str, str]], context: RewriteContext, debug: bool = False
) -> List[Tuple[str, str]]:
    rewritten = rewrite_headers(
        without_headers(headers, HOP_BY_HOP_HEADERS),
        context.resolved_hostname,
        context.origin_hostname,
    )
    if debug:
        rewritten = without_headers(rewritten, {"content-security-policy"})
    return rewritten


def rewrite_response_text(
    text: str, context: RewriteContext, pathname_filter: Optional[Pattern] = None
) -> str:
    """
    Rewrite a text body for the client.

    The resolved host is rewritten (scoped by the pathname filter when one is
    configured), then the other host of an active split is collapsed onto the
    origin as well.
    """
    text = rewrite_body(
        text, context.resolved_hostname, context.origin_hostname, pathname_filter
    )
    if context.aliased_hostname:
        text = rewrite_text(text, context.aliased_hostname, context.origin_hostname)
    return text


async def _stream_raw(
    upstream: httpx.Response, close: Callable[[], Awaitable[None]]
) -> AsyncIterator[bytes]:
    try:
        async for chunk in upstream.aiter_raw():
            yield chunk
    finally:
        await close()


async def build_client_response(
    upstream: httpx.Response,
    context: RewriteContext,
    close: Callable[[], Awaitable[None]],
    pathname_filter: Optional[Pattern] = None,
    debug: bool = False,
    method: str = "GET",
) -> Response:
    """
    Turn an upstream response opened with ``stream=True`` into the client response.

    Text and JSON bodies are read completely and rewritten. Every other body,
    and every ``HEAD`` answer, is forwarded byte for byte as it arrives with
    its upstream length. ``close`` releases the upstream response and client
    once the body is no longer needed.
    """
    headers = rewrite_response_headers(upstream.headers.multi_items(), context, debug)
    content_type = upstream.headers.get("content-type", "")
    rewritable = method.upper() != "HEAD" and is_rewritable(content_type)

    if rewritable or upstream.is_stream_consumed:
        # A consumed stream (body already read into memory) cannot be iterated raw
        try:
            await upstream.aread()
        finally:
            await close()
        content = upstream.content
        if rewritable:
            encoding = upstream.encoding or "utf-8"
            text = rewrite_response_text(upstream.text, context, pathname_filter)
            content = text.encode(encoding, errors="replace")
        response = Response(content=content, status_code=upstream.status_code)
        headers = without_headers(headers, BUFFERED_EXCLUDED_HEADERS)
    else:
        logger.debug(f"[Proxy] Streaming {content_type or 'untyped'} body unchanged")
        response = StreamingResponse(
            _stream_raw(upstream, close),
            status_code=upstream.status_code,
            background=BackgroundTask(close),
        )

    for name, value in headers:
        response.headers.append(name, value)
    return response
