"""Log fields and the per-call logging context carried alongside a request."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Field:
    """A single key/value pair attached to a log record."""

    key: str = ""
    value: Any = None


@dataclass
class LogContext:
    """Values that every log record written within a context carries."""

    service_name: str = ""
    service_version: str = ""
    service_port: int = 0
    thread_id: str = ""
    x_request_id: str = ""
    tag: str = ""
    request: Field = field(default_factory=Field)
    response: Field = field(default_factory=Field)
    error: str = ""
    req_method: str = ""
    req_uri: str = ""
    additional_data: Optional[dict[str, Any]] = None


class _ContextKey:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<log context key>"


_CTX_KEY = _ContextKey()


def to_field(key: str, value: Any) -> Field:
    """Build a :class:`Field`."""
    return Field(key, value)


def inject_ctx(
    parent: Optional[Mapping[Any, Any]], log_ctx: LogContext
) -> Mapping[Any, Any]:
    """Return a read-only copy of ``parent`` that carries ``log_ctx``."""
    values = dict(parent) if parent is not None else {}
    values[_CTX_KEY] = log_ctx
    return MappingProxyType(values)


def extract_ctx(ctx: Optional[Mapping[Any, Any]]) -> LogContext:
    """Return the log context held by ``ctx``, or an empty one."""
    if ctx is None:
        return LogContext()
    value = ctx.get(_CTX_KEY)
    if isinstance(value, LogContext):
        return value
    return LogContext()