from .route import router, forward_to_upstream

__all__ = ["router", "forward_to_upstream"]
