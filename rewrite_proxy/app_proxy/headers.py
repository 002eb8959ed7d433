from typing import Iterable, List, Tuple

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}


def without_headers(
    headers: Iterable[Tuple[str, str]], excluded: Iterable[str]
) -> List[Tuple[str, str]]:
    """Drop headers by case-insensitive name, keeping order and repeats of the rest."""
    excluded = {name.lower() for name in excluded}
    return [(name, value) for name, value in headers if name.lower() not in excluded]


def has_header(headers: Iterable[Tuple[str, str]], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key, _ in headers)
