"""Per-request state and levelled request logging."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Protocol

from .logger.context import Field, LogContext, inject_ctx, to_field
from .models import UserSession

APP_SESSION = "App_Session"
USER_SESSION = "User_Session"

_MILLISECOND = timedelta(milliseconds=1)


class _InfoLogger(Protocol):
    def info(self, ctx: Optional[Mapping[Any, Any]], message: str, *args: Field) -> None:
        ...


def _message_fields(messages: tuple[Any, ...]) -> list[Field]:
    return [to_field(f"_message_{index}", msg) for index, msg in enumerate(messages)]


def _elapsed_millis(start: datetime, stop: datetime) -> int:
    return int((stop - start) // _MILLISECOND)


class RequestContext:
    """State gathered while serving one request, plus a shared value store.

    The store is safe to use from several threads. The ``lv1`` to ``lv4``
    methods write info records tagged with their level name.
    """

    def __init__(self, logger: _InfoLogger) -> None:
        self.logger = logger
        self.request_time: datetime = datetime.now()
        self.user_session = UserSession()
        self.x_request_id = ""
        self.app_name = ""
        self.app_version = ""
        self.ip = ""
        self.port = 0
        self.src_ip = ""
        self.url = ""
        self.method = ""
        self.header: Any = {}
        self.request: Any = {}
        self.response: Any = None
        self.error_message = ""
        self.response_code = 0
        self._values: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """Return the stored value for ``key``; raises KeyError if absent."""
        with self._lock:
            try:
                return self._values[key]
            except KeyError:
                raise KeyError("not found") from None

    def put(self, key: str, data: Any) -> None:
        """Store ``data`` under ``key``."""
        with self._lock:
            self._values[key] = data

    def _items(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._values)

    def _log_context(self, tag: str) -> Mapping[Any, Any]:
        log_ctx = LogContext(
            service_name=self.app_name,
            service_version=self.app_version,
            service_port=self.port,
            x_request_id=self.x_request_id,
            tag=tag,
            req_method=self.method,
            req_uri=self.url,
            additional_data=self._items(),
            error=self.error_message,
        )
        if tag == "Lv4":
            log_ctx.request = to_field("req", self.request)
            log_ctx.response = to_field("resp", self.response)
        return inject_ctx(None, log_ctx)

    def lv1(self, *args: Any) -> None:
        """Log the given messages at stage Lv1."""
        self.logger.info(self._log_context("Lv1"), "", *_message_fields(args))

    def lv2(self, *args: Any) -> datetime:
        """Log the given messages at stage Lv2 and return the current time."""
        self.logger.info(self._log_context("Lv2"), "", *_message_fields(args))
        return datetime.now()

    def lv3(self, start_process_time: datetime, *args: Any) -> None:
        """Log the messages with the milliseconds since ``start_process_time``."""
        stop = datetime.now()
        fields = _message_fields(args)
        fields.append(to_field("_process_time", _elapsed_millis(start_process_time, stop)))
        self.logger.info(self._log_context("Lv3"), "", *fields)

    def lv4(self, *args: Any) -> None:
        """Log the messages with response time, response code, request and response."""
        stop = datetime.now()
        fields = _message_fields(args)
        fields.append(to_field("_response_time", _elapsed_millis(self.request_time, stop)))
        fields.append(to_field("_response_code", self.response_code))
        self.logger.info(self._log_context("Lv4"), "", *fields)