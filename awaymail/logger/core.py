"""Structured JSON logger writing one record per line."""

from __future__ import annotations

import base64
import dataclasses
import datetime as _dt
import json
import sys
import threading
from enum import IntEnum
from typing import Any, Iterable, Mapping, Optional

from .context import Field, extract_ctx
from .masking import mask as _mask_value

LOG_TYPE_SYS = "SYS"
SEPARATOR = "|"
TIME_KEY = "xtime"
MESSAGE_KEY = "x"


class Level(IntEnum):
    """Logging priority; higher levels are more important."""

    DEBUG = -1
    INFO = 0
    WARN = 1
    ERROR = 2
    DPANIC = 3
    PANIC = 4
    FATAL = 5


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    if isinstance(obj, _dt.timedelta):
        return int(obj / _dt.timedelta(milliseconds=1))
    if isinstance(obj, (_dt.datetime, _dt.date, _dt.time)):
        return obj.isoformat()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    return str(obj)


def _encode_value(value: Any) -> str:
    try:
        return json.dumps(
            value, default=_json_default, ensure_ascii=False, separators=(",", ":")
        )
    except (TypeError, ValueError):
        return json.dumps(str(value), ensure_ascii=False)


def _format_time(moment: _dt.datetime) -> str:
    base = moment.strftime("%Y-%m-%d %H:%M:%S")
    fraction = f"{moment.microsecond // 1000:03d}".rstrip("0")
    return f"{base}.{fraction}" if fraction else base


def _encode_record(pairs: Iterable[tuple[str, Any]]) -> str:
    body = ",".join(f"{json.dumps(key)}:{_encode_value(value)}" for key, value in pairs)
    return "{" + body + "}\n"


def format_log(key: str, value: Any, mask: bool) -> tuple[str, Any]:
    """Turn one field into a ``(key, value)`` pair ready for encoding.

    ``None`` becomes an empty object, strings holding JSON are decoded,
    and with masking on, dataclasses, lists and tuples are masked.
    """
    if value is None:
        return key, {}
    if isinstance(value, str):
        try:
            return key, json.loads(value)
        except ValueError:
            return key, value
    if not mask:
        return key, value
    if isinstance(value, (list, tuple)) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    ):
        return key, _mask_value(value)
    return key, value


def format_logs(
    ctx: Optional[Mapping[Any, Any]], message: str, mask: bool, *args: Field
) -> list[tuple[str, Any]]:
    """Build the ordered pairs of a record from its context, message and fields."""
    log_ctx = extract_ctx(ctx)
    record: list[tuple[str, Any]] = [
        ("message", message),
        ("_app_name", log_ctx.service_name),
        ("_app_version", log_ctx.service_version),
        ("_app_port", log_ctx.service_port),
        ("_x_request_id", log_ctx.x_request_id),
        ("_app_tag", log_ctx.tag),
        ("_app_method", log_ctx.req_method),
        ("_app_uri", log_ctx.req_uri),
        ("_error", log_ctx.error),
    ]
    if log_ctx.additional_data is not None:
        record.append(("_app_data", log_ctx.additional_data))
    if log_ctx.request is not None and log_ctx.request.value is not None:
        record.append(("_request", log_ctx.request.value))
    if log_ctx.response is not None and log_ctx.response.value is not None:
        record.append(("_response", log_ctx.response.value))
    if log_ctx.additional_data is not None:
        record.append(("_app_data", log_ctx.additional_data))
    record.extend(format_log(item.key, item.value, mask) for item in args)
    return record


class JsonLogger:
    """Logger writing JSON lines to every configured writer.

    ``panic`` raises :class:`RuntimeError` and ``fatal`` raises
    :class:`SystemExit` after writing, even when the level is filtered out.
    """

    def __init__(
        self,
        writers: Optional[Iterable[Any]] = None,
        closers: Optional[Iterable[Any]] = None,
        mask: bool = False,
        level: Level = Level.INFO,
        noop: bool = False,
    ) -> None:
        given = list(writers) if writers is not None else []
        if not given:
            given = [sys.stdout]
        self._writers = [writer for writer in given if writer is not None]
        self._closers = list(closers) if closers is not None else []
        self.mask = mask
        self.level = Level(level)
        self.noop = noop
        self._lock = threading.Lock()

    def _write(self, line: str) -> None:
        with self._lock:
            for writer in self._writers:
                try:
                    try:
                        writer.write(line)
                    except TypeError:
                        writer.write(line.encode("utf-8"))
                    flush = getattr(writer, "flush", None)
                    if callable(flush):
                        flush()
                except OSError as exc:
                    print(
                        f"{_format_time(_dt.datetime.now())} write error: {exc}",
                        file=sys.stderr,
                    )

    def _log(
        self,
        level: Level,
        ctx: Optional[Mapping[Any, Any]],
        message: str,
        fields: tuple[Field, ...],
    ) -> None:
        if not self.noop and level >= self.level:
            pairs: list[tuple[str, Any]] = [
                (TIME_KEY, _format_time(_dt.datetime.now())),
                (MESSAGE_KEY, SEPARATOR),
                ("logType", LOG_TYPE_SYS),
                ("level", level.name.lower()),
            ]
            pairs.extend(format_logs(ctx, message, self.mask, *fields))
            self._write(_encode_record(pairs))
        if level == Level.PANIC:
            raise RuntimeError(message)
        if level == Level.FATAL:
            raise SystemExit(1)

    def debug(self, ctx: Optional[Mapping[Any, Any]], message: str, *args: Field) -> None:
        """Write a debug record."""
        self._log(Level.DEBUG, ctx, message, args)

    def info(self, ctx: Optional[Mapping[Any, Any]], message: str, *args: Field) -> None:
        """Write an info record."""
        self._log(Level.INFO, ctx, message, args)

    def warn(self, ctx: Optional[Mapping[Any, Any]], message: str, *args: Field) -> None:
        """Write a warning record."""
        self._log(Level.WARN, ctx, message, args)

    def error(self, ctx: Optional[Mapping[Any, Any]], message: str, *args: Field) -> None:
        """Write an error record."""
        self._log(Level.ERROR, ctx, message, args)

    def fatal(self, ctx: Optional[Mapping[Any, Any]], message: str, *args: Field) -> None:
        """Write a fatal record, then exit with status 1."""
        self._log(Level.FATAL, ctx, message, args)

    def panic(self, ctx: Optional[Mapping[Any, Any]], message: str, *args: Field) -> None:
        """Write a panic record, then raise RuntimeError."""
        self._log(Level.PANIC, ctx, message, args)

    def close(self) -> None:
        """Close every closer; the last failure is raised after all are tried."""
        errors: list[BaseException] = []
        for closer in self._closers:
            if closer is None:
                continue
            try:
                closer.close()
            except Exception as exc:  # re-raised below once all are closed
                errors.append(exc)
        if len(errors) > 1:
            raise errors[-1] from errors[-2]
        if errors:
            raise errors[0]


class NoopLogger:
    """Logger that discards every record, keeping only a count of them."""

    def __init__(self) -> None:
        self.discarded = 0
        self.closed = False
        self._lock = threading.Lock()

    def _discard(self) -> None:
        with self._lock:
            self.discarded += 1

    def debug(self, ctx: Any, message: str, *args: Field) -> None:
        """Discard a debug record."""
        self._discard()

    def info(self, ctx: Any, message: str, *args: Field) -> None:
        """Discard an info record."""
        self._discard()

    def warn(self, ctx: Any, message: str, *args: Field) -> None:
        """Discard a warning record."""
        self._discard()

    def error(self, ctx: Any, message: str, *args: Field) -> None:
        """Discard an error record."""
        self._discard()

    def fatal(self, ctx: Any, message: str, *args: Field) -> None:
        """Discard a fatal record without exiting."""
        self._discard()

    def panic(self, ctx: Any, message: str, *args: Field) -> None:
        """Discard a panic record without raising."""
        self._discard()

    def close(self) -> None:
        """Mark the logger closed; never fails."""
        self.closed = True


def new_logger(
    writers: Optional[Iterable[Any]] = None,
    closers: Optional[Iterable[Any]] = None,
    mask: bool = False,
    level: Level = Level.INFO,
    noop: bool = False,
) -> JsonLogger:
    """Build a :class:`JsonLogger`; with no writers it writes to stdout."""
    return JsonLogger(writers=writers, closers=closers, mask=mask, level=level, noop=noop)