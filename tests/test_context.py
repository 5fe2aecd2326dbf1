from awaymail.logger.context import (
    Field,
    LogContext,
    extract_ctx,
    inject_ctx,
    to_field,
)


def test_to_field_holds_key_and_value():
    result = to_field("user", {"id": 7})
    assert result == Field("user", {"id": 7})
    assert result.key == "user"
    assert result.value == {"id": 7}


def test_inject_then_extract_round_trip():
    log_ctx = LogContext(service_name="svc", service_port=8081, tag="Lv1")
    ctx = inject_ctx(None, log_ctx)
    assert extract_ctx(ctx) == log_ctx


def test_extract_from_none_gives_empty_context():
    assert extract_ctx(None) == LogContext()


def test_extract_without_log_context_gives_empty_context():
    assert extract_ctx({"other": 1}) == LogContext()


def test_inject_keeps_parent_entries():
    ctx = inject_ctx({"trace": "abc"}, LogContext(tag="x"))
    assert ctx["trace"] == "abc"
    assert extract_ctx(ctx).tag == "x"


def test_inject_does_not_change_parent():
    first = LogContext(tag="first")
    parent = inject_ctx(None, first)
    child = inject_ctx(parent, LogContext(tag="second"))
    assert extract_ctx(parent) == first
    assert extract_ctx(child).tag == "second"


def test_default_request_and_response_are_empty_fields():
    log_ctx = LogContext()
    assert log_ctx.request.value is None
    assert log_ctx.response == Field()
    assert log_ctx.additional_data is None