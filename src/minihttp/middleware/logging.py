"""
=============================================================================
LOGGING MIDDLEWARE
=============================================================================

One access-log line per dispatched request, with timing.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default, Apache-like):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [18/Oct/2026:10:55:36 +0000] "GET /echo/abc" 200 3 0.41ms │
    │ ─────────   ──────────────────────────── ─────────────── ─── ─ ──────  │
    │ IP          Timestamp                    Method/Target   Code Size Time │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
        {"request_id": "a1b2c3d4", "method": "GET", "target": "/echo/abc", ...}

The request ID only appears in the log. Responses go out exactly as the
handler built them, so no X-Request-ID header is added.

Requests that fail to parse never reach the router and are therefore not
in the access log; the connection worker logs those itself.

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


# Namespaced so it can be routed separately:
#   logging.getLogger("minihttp.access").addHandler(file_handler)
logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """Structured log entry for a request."""

    request_id: str
    method: str
    target: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so its timing covers everything else.

        pipeline.add(LoggingMiddleware())                   # text
        pipeline.add(LoggingMiddleware(log_format="json"))  # JSON
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level access lines are emitted at.
        """
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {log_format}")
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            # Log and re-raise; the worker turns it into a response
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method.value} {request.target} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        log_entry = RequestLog(
            request_id=request_id,
            method=request.method.value,
            target=request.target,
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
