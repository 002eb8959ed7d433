from .context import RewriteContext
from .substitution import (
    hostname_pattern,
    rewrite_text,
    rewrite_headers,
    rewrite_body,
    strip_start_anchor,
)

__all__ = [
    "RewriteContext",
    "hostname_pattern",
    "rewrite_text",
    "rewrite_headers",
    "rewrite_body",
    "strip_start_anchor",
]
