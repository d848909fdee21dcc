"""FastAPI middleware for authentication, setup gating and error handling."""

from .auth_middleware import AuthContext, get_auth_context
from .error_handlers import (
    error_response,
    http_exception_handler,
    internal_exception_handler,
    register_error_handlers,
    validation_exception_handler,
)
from .setup_gate import SetupGateMiddleware, render_setup_page

__all__ = [
    "AuthContext",
    "get_auth_context",
    "SetupGateMiddleware",
    "render_setup_page",
    "error_response",
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "internal_exception_handler",
]
