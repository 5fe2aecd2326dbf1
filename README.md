# awaymail

Shared building blocks for the Awaymail backend: structured JSON logging with
field masking, a per-request logging context, two small REST clients, a thin
MongoDB wrapper, and salted AES-CBC encryption helpers.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

| Module | Purpose |
| --- | --- |
| `awaymail.constants` | Labels, limits, cache-key templates, `ApplicationError` and ready-made errors built with `new_error(code, message)` |
| `awaymail.models` | `UserSession` dataclass with `to_dict()` / `from_dict()` |
| `awaymail.cbc` | AES-CBC `encrypt` / `decrypt` (random IV prepended) with `pkcs5_padding` / `pkcs5_trimming` |
| `awaymail.utils` | Salted hex `encrypt` / `decrypt`, `validate_weekday`, `remove_duplicate_str`, `generate_thread_id` (ULID strings) |
| `awaymail.logger.masking` | `mask(data)`: copies dataclasses, lists, tuples and dicts, replacing byte fields marked with `field(metadata={"mask": True})` |
| `awaymail.logger.context` | `Field`, `LogContext`, `to_field`, `inject_ctx`, `extract_ctx` |
| `awaymail.logger.core` | `Level`, `JsonLogger`, `NoopLogger`, `new_logger`, `format_logs`, `format_log` |
| `awaymail.logger.options` | `FileOptions`, `RotatingFileWriter` (daily `<location>.YYYYMMDD` files), `setup_logger_file`, `get_logger` |
| `awaymail.request_context` | `RequestContext`: a thread-safe value store plus the `lv1`–`lv4` request log records |
| `awaymail.rest` | `request(method, request_url, options)` returning the `Response` envelope; failures raise `RestRequestError` |
| `awaymail.restclient` | `RestClient` with `get`, `get_with_query_param`, `post`, `post_form_data`, `put`, `patch`, `delete`, returning `RestResult` |
| `awaymail.mongo_client` | `connect(uri, options)` returning a `MongoConnection` with find, insert, update, delete, count and aggregate calls |

## Examples

Encrypt and decrypt with a salt:

```python
from awaymail import utils

salt = "secret"
encrypted = utils.encrypt(salt, "hello world")
assert utils.decrypt(salt, encrypted) == "hello world"
```

Structured logging from a request:

```python
from awaymail.logger.options import get_logger
from awaymail.request_context import RequestContext

ctx = RequestContext(get_logger())
ctx.put("user_id", "42")
ctx.lv1("request received")
started = ctx.lv2("calling upstream")
ctx.lv3(started, "upstream done")
ctx.response_code = 200
ctx.lv4("response sent")
```

`JsonLogger.panic` raises `RuntimeError` and `JsonLogger.fatal` raises
`SystemExit(1)` after writing their record.

Calling a JSON API:

```python
from awaymail.restclient import ClientOptions, RestClient

with RestClient(ClientOptions(address="https://api.example.com", timeout=10)) as client:
    result = client.get("/status", {})
    print(result.status_code, result.body)
```

Working with MongoDB:

```python
from awaymail.mongo_client import connect

conn = connect("mongodb://localhost:27017/app", None).db("app")
conn.collection("users")
inserted_id = conn.insert_one({"email": "someone@example.com"}, None)
```

`find_one` and `find_one_and_update` raise `LookupError` when nothing matches;
choosing a collection before a database raises `DBRequiredError`.

## What this package does not do

It is a library only. It provides no HTTP server, no API routes, no command-line
program and no background workers; those belong to the application that uses
these pieces. It does not manage Gmail accounts, push notifications or
message queues.