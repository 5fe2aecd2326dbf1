"""HTTP client bound to a base address, returning raw bodies and status codes."""

from __future__ import annotations

import base64
import dataclasses
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

import requests

_log = logging.getLogger(__name__)

_JSON_CONTENT_TYPE = "application/json"
_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
_TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

HeaderValue = Union[str, Sequence[str]]
Headers = Optional[Mapping[str, HeaderValue]]


@dataclass
class ClientOptions:
    """Settings for :class:`RestClient`; ``timeout`` is in seconds, 0 for none."""

    address: str = ""
    timeout: float = 0
    debug_mode: bool = False
    with_proxy: bool = False
    proxy_address: str = ""
    skip_tls: bool = False
    skip_check_redirect: bool = False


@dataclass
class RestResult:
    """Body and status code of a completed request."""

    body: bytes = b""
    status_code: int = 0

    @property
    def ok(self) -> bool:
        """Tell whether the status code is 200."""
        return self.status_code == 200


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _flatten_headers(headers: Headers) -> dict[str, str]:
    if not headers:
        return {}
    return {
        name: value if isinstance(value, str) else ", ".join(value)
        for name, value in headers.items()
    }


def _content_type(headers: Mapping[str, str]) -> Optional[str]:
    for name, value in headers.items():
        if name.lower() == "content-type":
            return value
    return None


def _encode_body(payload: Any, headers: dict[str, str]) -> Optional[bytes]:
    """Encode ``payload``, filling in a Content-Type when none is set."""
    if payload is None:
        return None
    content_type = _content_type(headers)
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if isinstance(payload, str):
        if content_type is None:
            headers["Content-Type"] = _TEXT_CONTENT_TYPE
        return payload.encode("utf-8")
    if content_type is None:
        headers["Content-Type"] = _JSON_CONTENT_TYPE
    return json.dumps(payload, default=_json_default).encode("utf-8")


class RestClient:
    """Send requests to ``options.address`` joined with a path.

    A status of 200, or any other status the server answers with, comes
    back as a :class:`RestResult`; failures to reach the server raise the
    underlying :class:`requests.RequestException`.
    """

    def __init__(self, options: Optional[ClientOptions] = None) -> None:
        self.options = options if options is not None else ClientOptions()
        self.timeout: Optional[float] = self.options.timeout or None
        self._session = requests.Session()
        if self.options.skip_tls:
            self._session.verify = False
        if self.options.with_proxy:
            self._session.proxies = {
                "http": self.options.proxy_address,
                "https": self.options.proxy_address,
            }
        else:
            self._session.trust_env = False
            self._session.proxies = {}

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def basic_auth(self, username: str, password: str) -> str:
        """Return the base64 credentials for HTTP basic authentication."""
        raw = f"{username}:{password}".encode("utf-8")
        return base64.b64encode(raw).decode("ascii")

    def default_header(self, username: str, password: str) -> dict[str, str]:
        """Return headers carrying basic authentication."""
        return {"Authorization": "Basic " + self.basic_auth(username, password)}

    def _send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        data: Optional[Union[bytes, Mapping[str, str]]] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> RestResult:
        url = self.options.address + path
        if self.options.debug_mode:
            _log.debug("request %s %s headers=%r body=%r", method, url, headers, data)
        response = self._session.request(
            method,
            url,
            headers=headers,
            data=data,
            params=params,
            timeout=self.timeout,
            allow_redirects=not self.options.skip_check_redirect,
        )
        result = RestResult(body=response.content, status_code=response.status_code)
        if self.options.debug_mode:
            _log.debug("response %s %s status=%d body=%r", method, url,
                       result.status_code, result.body)
        return result

    def _with_body(
        self, method: str, path: str, headers: Headers, payload: Any, json_default: bool
    ) -> RestResult:
        prepared = _flatten_headers(headers)
        if json_default and _content_type(prepared) is None:
            prepared["Content-Type"] = _JSON_CONTENT_TYPE
        body = _encode_body(payload, prepared)
        return self._send(method, path, prepared, data=body)

    def post(self, path: str, headers: Headers, payload: Any) -> RestResult:
        """POST ``payload``, as JSON unless a Content-Type says otherwise."""
        return self._with_body("POST", path, headers, payload, json_default=True)

    def post_form_data(
        self, path: str, headers: Headers, payload: Mapping[str, str]
    ) -> RestResult:
        """POST ``payload`` as URL-encoded form fields."""
        prepared = {
            name: value
            for name, value in _flatten_headers(headers).items()
            if name.lower() != "content-type"
        }
        prepared["Content-Type"] = _FORM_CONTENT_TYPE
        return self._send("POST", path, prepared, data=dict(payload or {}))

    def put(self, path: str, headers: Headers, payload: Any) -> RestResult:
        """PUT ``payload``, as JSON unless a Content-Type says otherwise."""
        return self._with_body("PUT", path, headers, payload, json_default=True)

    def patch(self, path: str, headers: Headers, payload: Any) -> RestResult:
        """PATCH ``payload``, as JSON unless a Content-Type says otherwise."""
        return self._with_body("PATCH", path, headers, payload, json_default=True)

    def delete(self, path: str, headers: Headers, payload: Any) -> RestResult:
        """DELETE with an optional body; its type picks the Content-Type."""
        return self._with_body("DELETE", path, headers, payload, json_default=False)

    def get(self, path: str, headers: Headers) -> RestResult:
        """GET ``path``."""
        return self._send("GET", path, _flatten_headers(headers))

    def get_with_query_param(
        self, path: str, headers: Headers, query_param: Mapping[str, str]
    ) -> RestResult:
        """GET ``path`` with the given query parameters."""
        return self._send(
            "GET", path, _flatten_headers(headers), params=dict(query_param or {})
        )