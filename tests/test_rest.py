import json
from dataclasses import dataclass

import pytest
import responses

from awaymail.rest import RequestOptions, Response, RestRequestError, request

URL = "http://api.example.com/items"


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def test_post_sends_json_and_decodes_envelope(rsps):
    rsps.add(
        responses.POST,
        URL,
        json={"error": False, "data": {"id": 5}, "userMessage": "ok", "errors": None},
        status=201,
    )
    result = request("POST", URL, RequestOptions(payload={"name": "a"}))
    assert result == Response(error=False, data={"id": 5}, status=201, user_message="ok")
    sent = rsps.calls[0].request
    assert json.loads(sent.body) == {"name": "a"}
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.headers["Accept-Encoding"] == "gzip"


def test_status_taken_from_http_not_body(rsps):
    rsps.add(responses.PUT, URL, json={"status": 999, "error": True}, status=400)
    result = request("PUT", URL, RequestOptions(payload=[1, 2]))
    assert result.status == 400
    assert result.error is True


def test_dataclass_payload_is_serialised(rsps):
    @dataclass
    class Item:
        name: str
        count: int

    rsps.add(responses.PATCH, URL, json={}, status=200)
    result = request("PATCH", URL, RequestOptions(payload=Item("x", 2)))
    assert result.status == 200
    assert json.loads(rsps.calls[0].request.body) == {"name": "x", "count": 2}


def test_custom_headers_are_sent(rsps):
    rsps.add(responses.DELETE, URL, json={}, status=200)
    result = request("DELETE", URL, RequestOptions(headers={"Authorization": "Bearer token"}))
    assert result.status == 200
    assert rsps.calls[0].request.headers["Authorization"] == "Bearer token"


def test_get_without_payload_has_no_body(rsps):
    rsps.add(responses.GET, URL, json={"data": [1]}, status=200)
    result = request("GET", URL, RequestOptions())
    assert result.data == [1]
    assert result.status == 200
    assert not rsps.calls[0].request.body


def test_get_with_payload_sends_form_fields(rsps):
    rsps.add(responses.GET, URL, json={}, status=200)
    result = request("GET", URL, RequestOptions(payload={"field": "value"}))
    assert result.status == 200
    sent = rsps.calls[0].request
    assert sent.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="field"' in sent.body
    assert b"value" in sent.body


def test_invalid_json_response_raises(rsps):
    rsps.add(responses.GET, URL, body="not json", status=200)
    with pytest.raises(RestRequestError, match="unable to get the correct response"):
        request("GET", URL, RequestOptions())


def test_non_object_response_raises(rsps):
    rsps.add(responses.GET, URL, json=[1, 2], status=200)
    with pytest.raises(RestRequestError):
        request("GET", URL, RequestOptions())


def test_connection_failure_raises(rsps):
    with pytest.raises(RestRequestError, match="unable to make request"):
        request("GET", "http://unreachable.example.com/", RequestOptions())


def test_unserialisable_payload_raises():
    with pytest.raises(RestRequestError, match="could not marshal request"):
        request("POST", URL, RequestOptions(payload=object()))