"""
JSON-lines logging for the collection and its HTTP service.

Every line carries service/env/version/sha identity, the bound request id and
an `event_type`. Collection code emits `collection.*` events through
`log_event`; the service middleware adds one `http.request` line per request.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

_REQUEST_ID: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord already has; `extra=` may not overwrite these.
_LOGRECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

# Keys the formatter writes itself.
_CORE_KEYS: frozenset[str] = frozenset(
    {"timestamp", "severity", "service", "env", "version", "sha", "request_id", "correlation_id", "event_type"}
)


def _one_line(v: Any, limit: int) -> str:
    s = "" if v is None else str(v)
    s = " ".join(s.splitlines()).strip()
    return s if len(s) <= limit else s[: limit - 1] + "…"


def _first_env(*names: str, default: str) -> str:
    for name in names:
        v = (os.getenv(name) or "").strip()
        if v:
            return _one_line(v, 128)
    return default


def default_service_name() -> str:
    return _first_env("SERVICE_NAME", "K_SERVICE", default="nondilutive")


def _identity(service: str | None, env: str | None, version: str | None, sha: str | None) -> dict[str, str]:
    return {
        "service": service or default_service_name(),
        "env": env or _first_env("ENV", "APP_ENV", default="unknown"),
        "version": version or _first_env("APP_VERSION", "K_REVISION", default="unknown"),
        "sha": sha or _first_env("GIT_SHA", "COMMIT_SHA", default="unknown"),
    }


def get_request_id() -> Optional[str]:
    return _REQUEST_ID.get()


@contextmanager
def bind_request_id(*, request_id: str | None = None) -> Iterator[str]:
    rid = _one_line(request_id, 128) or uuid.uuid4().hex
    token = _REQUEST_ID.set(rid)
    try:
        yield rid
    finally:
        _REQUEST_ID.reset(token)


class JsonLogFormatter(logging.Formatter):
    def __init__(
        self,
        *,
        service: str | None = None,
        env: str | None = None,
        version: str | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__()
        self._identity = _identity(service, env, version, sha)

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        rid = getattr(record, "request_id", None) or get_request_id()
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            **self._identity,
            "request_id": rid,
            "correlation_id": getattr(record, "correlation_id", None) or rid,
            "event_type": getattr(record, "event_type", None) or "log",
            "message": _one_line(record.getMessage(), 4000),
            "logger": record.name,
        }
        if getattr(record, "service", None):
            payload["service"] = record.service
        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info))[-8000:]

        for k, v in record.__dict__.items():
            if k in _LOGRECORD_ATTRS or k in _CORE_KEYS or k.startswith("_"):
                continue
            payload[k] = v
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def init_structured_logging(
    *,
    service: str | None = None,
    env: str | None = None,
    version: str | None = None,
    sha: str | None = None,
    level: str | int | None = None,
) -> None:
    """Route the root logger (and uvicorn's loggers) to one JSON stdout handler."""
    lvl = level or os.getenv("LOG_LEVEL", "INFO").upper()
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter(service=service, env=env, version=version, sha=sha))

    root = logging.getLogger()
    root.setLevel(lvl)
    root.handlers = [handler]
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers = []
        lg.propagate = True


def log_event(
    logger: logging.Logger,
    event_type: str,
    *,
    severity: str = "INFO",
    message: str | None = None,
    **fields: Any,
) -> None:
    """
    Emit a semantic event. Field names that clash with LogRecord attributes
    (`name`, `module`, `args`, ...) are suffixed with `_` instead of failing.
    """
    extra = {(f"{k}_" if k in _LOGRECORD_ATTRS else k): v for k, v in fields.items()}
    extra["event_type"] = event_type
    logger.log(getattr(logging, severity.upper(), logging.INFO), message or event_type, extra=extra)


def install_fastapi_request_id_middleware(app: Any, *, service: str | None = None) -> None:
    """
    Bind X-Request-ID (or X-Correlation-Id, or a fresh id) for each request,
    echo it in the response and log one `http.request` line.
    """
    from starlette.requests import Request

    http_logger = logging.getLogger("http")
    svc = service or default_service_name()

    @app.middleware("http")
    async def _request_id_mw(request: Request, call_next):
        incoming = request.headers.get("x-request-id") or request.headers.get("x-correlation-id")
        start = time.perf_counter()
        status_code = 500
        with bind_request_id(request_id=incoming) as bound:
            try:
                resp = await call_next(request)
                status_code = resp.status_code
            finally:
                log_event(
                    http_logger,
                    "http.request",
                    service=svc,
                    request_id=bound,
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    duration_ms=int((time.perf_counter() - start) * 1000),
                )
        resp.headers["X-Request-ID"] = bound
        return resp
