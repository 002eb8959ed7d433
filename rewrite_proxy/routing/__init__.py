from .host_resolver import (
    HostSplit,
    HostResolver,
    DEFAULT_HOST_SPLITS,
    GITHUB_API_PATH_PREFIXES,
    parse_host_splits,
)

__all__ = [
    "HostSplit",
    "HostResolver",
    "DEFAULT_HOST_SPLITS",
    "GITHUB_API_PATH_PREFIXES",
    "parse_host_splits",
]
