"""API package exports."""

from tubeauth.api.auth import router
from tubeauth.api.middleware import CorrelationIdMiddleware

__all__ = ["router", "CorrelationIdMiddleware"]
