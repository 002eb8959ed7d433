from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RewriteContext:
    """
    Hostnames involved in one proxied request.

    Attributes:
        origin_hostname: Host the client connected to. Written into responses,
            replaced in requests.
        resolved_hostname: Upstream host the request is actually sent to.
        base_hostname: Configured ``PROXY_HOSTNAME`` before host splitting.
        aliased_hostname: The other host of an active host split, also
            collapsed onto the origin in response bodies.
    """

    origin_hostname: str
    resolved_hostname: str
    base_hostname: str
    aliased_hostname: Optional[str] = None
