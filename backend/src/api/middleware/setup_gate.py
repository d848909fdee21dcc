"""Serve configuration instructions until the identity provider is configured."""

from __future__ import annotations

import logging
from typing import Callable

import jinja2
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import HTMLResponse

from ...services.config import AppConfig, get_config

logger = logging.getLogger(__name__)

ALWAYS_OPEN_PATHS = frozenset({"/health"})

SETUP_PAGE = jinja2.Environment(autoescape=True).from_string(
    """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
</head>
<body>
  <main>
    <h1>{{ title }}</h1>
    <p>Authentication is not configured yet. Set the following environment variables and restart the server:</p>
    <ul>
    {% for name, description in variables %}
      <li><code>{{ name }}</code>: {{ description }}</li>
    {% endfor %}
    </ul>
    <p>Values may also be placed in a <code>.env</code> file next to the backend.</p>
  </main>
</body>
</html>
"""
)

REQUIRED_VARIABLES = (
    ("IDENTITY_PUBLISHABLE_KEY", "publishable key of your identity provider application"),
    ("IDENTITY_SECRET_KEY", "secret key used to verify session tokens (at least 16 characters)"),
)


def render_setup_page() -> str:
    return SETUP_PAGE.render(title="Configuration required", variables=REQUIRED_VARIABLES)


class SetupGateMiddleware(BaseHTTPMiddleware):
    """Short-circuit every request with the setup page while identity is unset."""

    def __init__(self, app, config_provider: Callable[[], AppConfig] = get_config):
        super().__init__(app)
        self.config_provider = config_provider

    async def dispatch(self, request: Request, call_next):
        if request.url.path in ALWAYS_OPEN_PATHS or self.config_provider().identity_configured:
            return await call_next(request)
        logger.warning("Identity provider not configured; serving setup page", extra={"path": request.url.path})
        return HTMLResponse(render_setup_page(), status_code=503)


__all__ = ["SetupGateMiddleware", "render_setup_page"]
