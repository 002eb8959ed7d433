"""
Hostname substitution used on both sides of the proxy.

Only whole-word occurrences of a hostname that are not preceded by a dot are
replaced, so that rewriting ``github.com`` leaves ``api.github.com``,
``.github.com`` cookie domains and ``notgithub.com`` alone.

Word boundaries are ASCII-only: a hostname glued to non-ASCII text (``ägithub.com``,
CJK prose without a space) is still rewritten.
"""

import re
from typing import Iterable, List, Optional, Pattern, Tuple

# Explicit ASCII guards instead of \b, which is Unicode-aware for str patterns
_BEFORE_HOSTNAME = r"(?<![A-Za-z0-9_.])"
_AFTER_HOSTNAME = r"(?![A-Za-z0-9_])"

_LEADING_GLOBAL_FLAGS = re.compile(r"^(?:\(\?[aiLmsux]+\))+")


def hostname_pattern(hostname: str) -> str:
    """Regex source matching ``hostname`` as a standalone, non-dot-prefixed word."""
    return f"{_BEFORE_HOSTNAME}{re.escape(hostname)}{_AFTER_HOSTNAME}"


def rewrite_text(text: str, from_hostname: str, to_hostname: str) -> str:
    """Replace every guarded occurrence of ``from_hostname`` with ``to_hostname``."""
    if not text or not from_hostname or from_hostname not in text:
        return text
    return re.sub(hostname_pattern(from_hostname), lambda _: to_hostname, text)


def rewrite_headers(
    headers: Iterable[Tuple[str, str]], from_hostname: str, to_hostname: str
) -> List[Tuple[str, str]]:
    """
    Rewrite hostname references in header values.

    Header names are never touched and the order and multiplicity of the
    incoming pairs (e.g. repeated ``set-cookie``) is preserved.
    """
    rewritten = []
    for name, value in headers:
        if from_hostname and from_hostname in value:
            value = rewrite_text(value, from_hostname, to_hostname)
        rewritten.append((name, value))
    return rewritten


def strip_start_anchor(pathname_regex: str) -> str:
    """
    Drop leading inline flags like ``(?i)`` and a leading ``^`` so the
    pattern can be embedded after a hostname.

    The flags are not lost: a compiled pattern already reports them through
    ``Pattern.flags``, which ``rewrite_body`` passes on.
    """
    return re.sub(r"^\^", "", _LEADING_GLOBAL_FLAGS.sub("", pathname_regex))


def rewrite_body(
    text: str,
    from_hostname: str,
    to_hostname: str,
    pathname_filter: Optional[Pattern] = None,
) -> str:
    """
    Rewrite a text or JSON body.

    With a pathname filter only hostnames immediately followed by a path the
    filter accepts are rewritten, leaving links to other parts of the upstream
    site pointing at the upstream.
    """
    if pathname_filter is None:
        return rewrite_text(text, from_hostname, to_hostname)
    if not text or from_hostname not in text:
        return text

    scoped = re.compile(
        f"({hostname_pattern(from_hostname)})({strip_start_anchor(pathname_filter.pattern)})",
        pathname_filter.flags,
    )
    return scoped.sub(lambda match: to_hostname + match.group(2), text)
