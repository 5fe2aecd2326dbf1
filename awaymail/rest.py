"""Minimal JSON REST request helper."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import requests


class RestRequestError(Exception):
    """Raised when a request cannot be built, sent or understood."""


@dataclass
class RequestOptions:
    """Payload and extra headers for :func:`request`."""

    payload: Any = None
    headers: Optional[dict[str, str]] = None


@dataclass
class Response:
    """The standard response envelope, with the HTTP status filled in."""

    error: bool = False
    data: Any = None
    status: int = 0
    user_message: str = ""
    errors: Any = None


_ENVELOPE_KEYS = {
    "error": "error",
    "data": "data",
    "status": "status",
    "userMessage": "user_message",
    "errors": "errors",
}


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _parse_envelope(body: bytes) -> Response:
    try:
        decoded = json.loads(body)
    except ValueError as exc:
        raise RestRequestError(f"unable to get the correct response: {exc}") from exc
    if decoded is None:
        return Response()
    if not isinstance(decoded, dict):
        raise RestRequestError(
            "unable to get the correct response: "
            f"cannot decode {type(decoded).__name__} into response object"
        )
    values = {
        attr: decoded[key]
        for key, attr in _ENVELOPE_KEYS.items()
        if key in decoded and decoded[key] is not None
    }
    return Response(**values)


def request(
    method: str, request_url: str, options: Optional[RequestOptions] = None
) -> Response:
    """Send a request and decode the JSON response envelope.

    Non-GET requests carry the payload as JSON. A GET with a payload sends
    it as multipart form fields. The returned status is the HTTP status.
    """
    options = options if options is not None else RequestOptions()
    headers: dict[str, str] = {"Accept-Encoding": "gzip"}
    data: Optional[bytes] = None
    files: Optional[dict[str, tuple[None, str]]] = None

    if method != "GET":
        try:
            data = json.dumps(options.payload, default=_json_default).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise RestRequestError(
                f"could not marshal request or invalid json: {exc}"
            ) from exc
        headers["Content-Type"] = "application/json"
    elif options.payload is not None:
        payload: Mapping[str, str] = options.payload
        files = {key: (None, str(value)) for key, value in payload.items()}
    else:
        headers["Content-Type"] = "application/json"

    if options.headers:
        headers.update(options.headers)

    try:
        resp = requests.request(
            method, request_url, data=data, files=files, headers=headers
        )
    except requests.RequestException as exc:
        raise RestRequestError(f"unable to make request: {exc}") from exc

    try:
        body = resp.content
    except requests.RequestException as exc:
        raise RestRequestError(f"could not read body from response: {exc}") from exc

    response = _parse_envelope(body)
    response.status = resp.status_code
    return response