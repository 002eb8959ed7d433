from typing import AsyncIterator, Iterable, Optional, Tuple, Union

import httpx

from rewrite_proxy.app_proxy.headers import HOP_BY_HOP_HEADERS, has_header, without_headers
from rewrite_proxy.rewrite import RewriteContext, rewrite_headers


def upstream_url(incoming_url: str, protocol: str, hostname: str) -> httpx.URL:
    """Point the incoming URL at the upstream host, keeping path and query."""
    return httpx.URL(incoming_url).copy_with(scheme=protocol, host=hostname, port=None)


def request_has_body(headers: Iterable[Tuple[str, str]]) -> bool:
    return has_header(headers, "content-length") or has_header(
        headers, "transfer-encoding"
    )


def build_upstream_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: Iterable[Tuple[str, str]],
    context: RewriteContext,
    protocol: str = "https",
    alias_headers: Iterable[Tuple[str, str]] = (),
    content: Optional[Union[bytes, AsyncIterator[bytes]]] = None,
) -> httpx.Request:
    """
    Build the request sent upstream.

    Header values mentioning the origin host are rewritten to the resolved
    host. ``host`` is left for httpx to derive from the new URL. When talking
    to a split alias, ``alias_headers`` are added if the client did not send
    them.
    """
    outgoing = without_headers(headers, HOP_BY_HOP_HEADERS | {"host"})
    outgoing = rewrite_headers(
        outgoing, context.origin_hostname, context.resolved_hostname
    )
    for name, value in alias_headers:
        if not has_header(outgoing, name):
            outgoing.append((name, value))

    return client.build_request(
        method,
        upstream_url(url, protocol, context.resolved_hostname),
        headers=outgoing,
        content=content,
    )
