from dataclasses import dataclass

from fastapi import Request

from rewrite_proxy.config import ProxyConfig


@dataclass(frozen=True)
class ClientContext:
    """What the access filters and the logs need to know about the caller."""

    url: str
    path: str
    client_ip: str = ""
    user_agent: str = ""
    region: str = ""

    def describe(self) -> str:
        return f"clientIp: {self.client_ip}, user-agent: {self.user_agent}, url: {self.url}"


def _client_ip(request: Request, header_name: str) -> str:
    ip = request.headers.get(header_name)
    if ip:
        return ip.strip()
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else ""


def client_context_from_request(request: Request, config: ProxyConfig) -> ClientContext:
    """Extract the client context. Missing headers become empty strings."""
    return ClientContext(
        url=str(request.url),
        path=request.url.path,
        client_ip=_client_ip(request, config.client_ip_header),
        user_agent=request.headers.get("user-agent", ""),
        region=request.headers.get(config.region_header, ""),
    )
