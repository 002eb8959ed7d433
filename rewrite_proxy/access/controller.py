from dataclasses import dataclass
from typing import Optional, Pattern

from rewrite_proxy.access.client import ClientContext
from rewrite_proxy.config import ProxyConfig


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None


ACCEPT = AccessDecision(allowed=True)


def _fails_allow(pattern: Optional[Pattern], value: str) -> bool:
    return pattern is not None and pattern.search(value) is None


def _hits_deny(pattern: Optional[Pattern], value: str) -> bool:
    return pattern is not None and pattern.search(value) is not None


def evaluate(client: ClientContext, config: ProxyConfig) -> AccessDecision:
    """
    Decide whether a request may be proxied.

    Every configured filter must pass. The first failing check is reported as
    the rejection reason. Filters use search semantics, and the user-agent is
    lower-cased before matching.
    """
    if not config.proxy_hostname:
        return AccessDecision(False, "missing_proxy_hostname")

    user_agent = client.user_agent.lower()
    checks = (
        ("pathname", _fails_allow(config.pathname_filter, client.path)),
        ("user_agent_allow", _fails_allow(config.user_agent_allow, user_agent)),
        ("user_agent_deny", _hits_deny(config.user_agent_deny, user_agent)),
        ("ip_allow", _fails_allow(config.ip_allow, client.client_ip)),
        ("ip_deny", _hits_deny(config.ip_deny, client.client_ip)),
        ("region_allow", _fails_allow(config.region_allow, client.region)),
        ("region_deny", _hits_deny(config.region_deny, client.region)),
    )
    for reason, failed in checks:
        if failed:
            return AccessDecision(False, reason)
    return ACCEPT
