"""
Proxy configuration sourced from the process environment.

The environment is read on every request, but a config is only built (and
its regexes compiled) once per distinct set of values.
"""

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional, Pattern, Tuple

from rewrite_proxy.routing import DEFAULT_HOST_SPLITS, HostSplit, parse_host_splits
from rewrite_proxy.vars import (
    DEFAULT_CLIENT_IP_HEADER,
    DEFAULT_PROXY_TIMEOUT,
    DEFAULT_REGION_HEADER,
    PROXY_ENV_KEYS,
)


class ProxyConfigError(ValueError):
    """Raised when an environment value cannot be turned into a usable config."""


@dataclass(frozen=True)
class ProxyConfig:
    proxy_hostname: Optional[str] = None
    proxy_protocol: str = "https"
    pathname_filter: Optional[Pattern] = None
    user_agent_allow: Optional[Pattern] = None
    user_agent_deny: Optional[Pattern] = None
    ip_allow: Optional[Pattern] = None
    ip_deny: Optional[Pattern] = None
    region_allow: Optional[Pattern] = None
    region_deny: Optional[Pattern] = None
    redirect_url: Optional[str] = None
    debug: bool = False
    host_splits: Tuple[HostSplit, ...] = DEFAULT_HOST_SPLITS
    timeout: float = DEFAULT_PROXY_TIMEOUT
    client_ip_header: str = DEFAULT_CLIENT_IP_HEADER
    region_header: str = DEFAULT_REGION_HEADER


def _compile(name: str, value: Optional[str]) -> Optional[Pattern]:
    if not value:
        return None
    try:
        return re.compile(value)
    except re.error as e:
        raise ProxyConfigError(f"{name} is not a valid regular expression: {e}") from e


def _parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("true", "1", "yes")


def _parse_timeout(value: Optional[str]) -> float:
    if not value:
        return DEFAULT_PROXY_TIMEOUT
    try:
        timeout = float(value)
    except ValueError as e:
        raise ProxyConfigError(f"PROXY_TIMEOUT must be a number, got {value!r}") from e
    if timeout <= 0:
        raise ProxyConfigError(f"PROXY_TIMEOUT must be positive, got {value!r}")
    return timeout


@lru_cache(maxsize=32)
def _build_config(items: Tuple[Tuple[str, Optional[str]], ...]) -> ProxyConfig:
    env = dict(items)

    proxy_hostname = (env.get("PROXY_HOSTNAME") or "").strip() or None
    if proxy_hostname is None:
        # Every request is rejected, so the filters are never compiled
        return ProxyConfig(
            redirect_url=env.get("URL302") or None,
            debug=_parse_bool(env.get("DEBUG")),
        )

    host_splits = DEFAULT_HOST_SPLITS
    if env.get("HOST_SPLITS"):
        try:
            host_splits = parse_host_splits(env["HOST_SPLITS"])
        except ValueError as e:
            raise ProxyConfigError(f"HOST_SPLITS is invalid: {e}") from e

    return ProxyConfig(
        proxy_hostname=proxy_hostname,
        proxy_protocol=(env.get("PROXY_PROTOCOL") or "https").strip().rstrip(":"),
        pathname_filter=_compile("PATHNAME_REGEX", env.get("PATHNAME_REGEX")),
        user_agent_allow=_compile("UA_WHITELIST_REGEX", env.get("UA_WHITELIST_REGEX")),
        user_agent_deny=_compile("UA_BLACKLIST_REGEX", env.get("UA_BLACKLIST_REGEX")),
        ip_allow=_compile("IP_WHITELIST_REGEX", env.get("IP_WHITELIST_REGEX")),
        ip_deny=_compile("IP_BLACKLIST_REGEX", env.get("IP_BLACKLIST_REGEX")),
        region_allow=_compile(
            "REGION_WHITELIST_REGEX", env.get("REGION_WHITELIST_REGEX")
        ),
        region_deny=_compile("REGION_BLACKLIST_REGEX", env.get("REGION_BLACKLIST_REGEX")),
        redirect_url=env.get("URL302") or None,
        debug=_parse_bool(env.get("DEBUG")),
        host_splits=host_splits,
        timeout=_parse_timeout(env.get("PROXY_TIMEOUT")),
        client_ip_header=(env.get("CLIENT_IP_HEADER") or DEFAULT_CLIENT_IP_HEADER).lower(),
        region_header=(env.get("REGION_HEADER") or DEFAULT_REGION_HEADER).lower(),
    )


def get_proxy_config(environ: Optional[Mapping[str, str]] = None) -> ProxyConfig:
    """
    Build the proxy config from ``environ`` (defaults to ``os.environ``).

    Raises:
        ProxyConfigError: if a regex, ``HOST_SPLITS`` or ``PROXY_TIMEOUT`` is invalid.
            Without ``PROXY_HOSTNAME`` none of these are read, so it never raises.
    """
    if environ is None:
        environ = os.environ
    return _build_config(tuple((key, environ.get(key)) for key in PROXY_ENV_KEYS))
