"""Host web application and inbound middleware."""

from .app import build_invoker, create_app
from .middleware import LoopPreventionMiddleware

__all__ = ["LoopPreventionMiddleware", "build_invoker", "create_app"]
