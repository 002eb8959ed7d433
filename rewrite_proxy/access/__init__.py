from .client import ClientContext, client_context_from_request
from .controller import AccessDecision, evaluate

__all__ = [
    "ClientContext",
    "client_context_from_request",
    "AccessDecision",
    "evaluate",
]
