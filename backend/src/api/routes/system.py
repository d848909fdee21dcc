"""System routes for logs and client configuration."""

import logging
from collections import deque
from typing import Any, Dict, List
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..middleware import AuthContext, get_auth_context
from ...services.catalog import client_catalog
from ...services.config import get_config

router = APIRouter()

# Global in-memory log buffer
LOG_BUFFER: deque = deque(maxlen=100)

_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


class LogEntry(BaseModel):
    timestamp: str
    level: str
    message: str
    extra: Dict[str, Any]


class MemoryLogHandler(logging.Handler):
    """Custom handler to capture logs into memory."""

    def emit(self, record):
        try:
            msg = self.format(record)
            extra = {
                k: v if isinstance(v, (str, int, float, bool, type(None))) else str(v)
                for k, v in record.__dict__.items()
                if k not in _RESERVED_ATTRS
            }
            LOG_BUFFER.append(
                {
                    "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                    "level": record.levelname,
                    "message": msg,
                    "extra": extra,
                }
            )
        except Exception:
            self.handleError(record)


memory_handler = MemoryLogHandler()
memory_handler.setFormatter(logging.Formatter("%(message)s"))


def install_log_buffer(level: str = "INFO") -> None:
    """Attach the buffer to the root logger (once) and apply ``level``."""
    root = logging.getLogger()
    if memory_handler not in root.handlers:
        root.addHandler(memory_handler)
    root.setLevel(level)


@router.get("/api/system/logs", response_model=List[LogEntry])
async def get_logs(auth: AuthContext = Depends(get_auth_context)):
    """Retrieve recent system logs."""
    return list(LOG_BUFFER)


@router.get("/api/config")
async def client_config() -> Dict[str, Any]:
    """Public settings the browser client needs before sign-in."""
    config = get_config()
    return {
        "publishableKey": config.identity_publishable_key,
        "identityConfigured": config.identity_configured,
        **client_catalog(),
    }
