import json
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class HostSplit:
    """
    One configured upstream host that is served by two real hosts.

    Attributes:
        base_hostname: The host configured as ``PROXY_HOSTNAME``.
        alias_hostname: The host used for paths starting with one of ``path_prefixes``.
        path_prefixes: Literal, case-sensitive path prefixes routed to the alias.
        alias_headers: Headers added to requests for the alias when the client did not send them.
    """

    base_hostname: str
    alias_hostname: str
    path_prefixes: Tuple[str, ...]
    alias_headers: Tuple[Tuple[str, str], ...] = ()

    def matches(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.path_prefixes)


GITHUB_API_PATH_PREFIXES = (
    "/repos/",
    "/user",
    "/users/",
    "/orgs/",
    "/organizations/",
    "/gists/",
    "/search/",
    "/rate_limit",
    "/emojis",
    "/events",
    "/feeds",
    "/notifications",
    "/meta",
    "/octocat",
    "/zen",
    "/marketplace_listing/",
    "/installation/",
    "/app/",
    "/applications/",
)

# The GitHub REST API rejects requests without a user-agent.
DEFAULT_API_USER_AGENT = "host-rewrite-proxy"

DEFAULT_HOST_SPLITS = (
    HostSplit(
        base_hostname="github.com",
        alias_hostname="api.github.com",
        path_prefixes=GITHUB_API_PATH_PREFIXES,
        alias_headers=(
            ("user-agent", DEFAULT_API_USER_AGENT),
            ("accept", "application/vnd.github+json"),
        ),
    ),
)


class HostResolver:
    """Picks the real upstream host for a request path."""

    def __init__(self, splits: Iterable[HostSplit] = DEFAULT_HOST_SPLITS):
        self.splits = tuple(splits)

    def split_for(self, base_hostname: str) -> Optional[HostSplit]:
        for split in self.splits:
            if split.base_hostname == base_hostname:
                return split
        return None

    def resolve(self, base_hostname: str, path: str) -> str:
        split = self.split_for(base_hostname)
        if split is not None and split.matches(path):
            return split.alias_hostname
        return base_hostname

    def counterpart(self, base_hostname: str, resolved_hostname: str) -> Optional[str]:
        """
        Return the host of the split that was *not* chosen for this request.

        Responses from either host may reference the other one, and both are
        collapsed onto the origin hostname.
        """
        split = self.split_for(base_hostname)
        if split is None:
            return None
        if resolved_hostname == split.alias_hostname:
            return split.base_hostname
        return split.alias_hostname

    def alias_headers(self, resolved_hostname: str) -> Tuple[Tuple[str, str], ...]:
        for split in self.splits:
            if split.alias_hostname == resolved_hostname:
                return split.alias_headers
        return ()


def parse_host_splits(raw: str) -> Tuple[HostSplit, ...]:
    """
    Parse the ``HOST_SPLITS`` JSON table.

    Example::

        [{"base": "github.com", "alias": "api.github.com",
          "prefixes": ["/repos/", "/users/"],
          "headers": {"accept": "application/vnd.github+json"}}]

    Raises ``ValueError`` when the value is not a list of such objects.
    """
    entries = json.loads(raw)
    if not isinstance(entries, list):
        raise ValueError("HOST_SPLITS must be a JSON list")

    splits = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"HOST_SPLITS entry must be an object: {entry!r}")
        base = entry.get("base")
        alias = entry.get("alias")
        prefixes = entry.get("prefixes") or []
        headers = entry.get("headers") or {}
        if not base or not alias:
            raise ValueError(f"HOST_SPLITS entry needs 'base' and 'alias': {entry!r}")
        if not isinstance(prefixes, list) or not all(
            isinstance(p, str) for p in prefixes
        ):
            raise ValueError(f"HOST_SPLITS 'prefixes' must be a list of strings: {entry!r}")
        if not isinstance(headers, dict):
            raise ValueError(f"HOST_SPLITS 'headers' must be an object: {entry!r}")
        splits.append(
            HostSplit(
                base_hostname=base,
                alias_hostname=alias,
                path_prefixes=tuple(prefixes),
                alias_headers=tuple((k.lower(), str(v)) for k, v in headers.items()),
            )
        )
    return tuple(splits)
