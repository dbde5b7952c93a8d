"""Health check and recent-log routes."""

import logging
from collections import deque
from datetime import datetime
from typing import Any, Deque, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..middleware import AuthContext, get_auth_context

router = APIRouter()

LOG_BUFFER_SIZE = 200
LOG_BUFFER: Deque[Dict[str, Any]] = deque(maxlen=LOG_BUFFER_SIZE)

# Attributes every LogRecord has; anything else came in through ``extra=``.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class LogEntry(BaseModel):
    timestamp: str
    level: str
    logger: str
    message: str
    extra: Dict[str, Any]


def _plain(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool, type(None))):
        return value
    return repr(value)


class MemoryLogHandler(logging.Handler):
    """Keep the most recent records in ``LOG_BUFFER`` for the logs endpoint."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created).isoformat(),
                level=record.levelname,
                logger=record.name,
                message=self.format(record),
                extra={
                    key: _plain(value)
                    for key, value in vars(record).items()
                    if key not in _STANDARD_ATTRS
                },
            )
            LOG_BUFFER.append(entry.model_dump())
        except Exception:
            self.handleError(record)


memory_handler = MemoryLogHandler()
memory_handler.setFormatter(logging.Formatter("%(message)s"))


def install_memory_log_handler(level: int = logging.INFO) -> None:
    """Attach the buffer handler to the root logger once."""
    root = logging.getLogger()
    if memory_handler not in root.handlers:
        root.addHandler(memory_handler)
    if root.level == logging.NOTSET or root.level > level:
        root.setLevel(level)


@router.get("/api/system/logs", response_model=List[LogEntry])
async def get_logs(auth: AuthContext = Depends(get_auth_context)):
    """Recent log records, oldest first."""
    return list(LOG_BUFFER)


@router.get("/health")
async def health():
    return {"status": "healthy"}


__all__ = ["router", "LOG_BUFFER", "MemoryLogHandler", "install_memory_log_handler"]
