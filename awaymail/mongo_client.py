"""Thin MongoDB access layer bound to one database and a set of collections."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional

import pymongo
from bson import ObjectId
from pymongo import MongoClient


class DBRequiredError(Exception):
    """Raised when a collection is chosen before a database."""


@dataclass
class Options:
    """Per-call options; ``collection_name`` picks a registered collection."""

    hint: Any = None
    limit: int = 0
    max: Any = None
    min: Any = None
    projection: Any = None
    skip: int = 0
    sort: Any = None
    upsert: bool = False
    collection_name: str = ""


@dataclass
class Credential:
    """Authentication settings for :func:`connect`."""

    auth_mechanism: str = ""
    auth_mechanism_properties: dict[str, str] = field(default_factory=dict)
    auth_source: str = ""
    username: str = ""
    password: str = ""
    password_set: bool = False


@dataclass
class ClientOptions:
    """Pool and authentication settings; ``max_conn_idle_time`` is in seconds."""

    max_pool_size: int = 0
    min_pool_size: int = 0
    max_conn_idle_time: float = 0
    auth: Credential = field(default_factory=Credential)


def _pairs(spec: Any) -> Any:
    """Turn a mapping into the list of pairs the driver expects."""
    if isinstance(spec, Mapping):
        return list(spec.items())
    return spec


def _drain(cursor: Any) -> list[Any]:
    try:
        return list(cursor)
    finally:
        close = getattr(cursor, "close", None)
        if callable(close):
            close()


def _client_kwargs(options: ClientOptions) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if options.max_conn_idle_time > 0:
        kwargs["maxIdleTimeMS"] = int(options.max_conn_idle_time * 1000)
    if options.max_pool_size > 0:
        kwargs["maxPoolSize"] = options.max_pool_size
    if options.min_pool_size > 0:
        kwargs["minPoolSize"] = options.min_pool_size
    auth = options.auth
    if auth.username:
        kwargs["username"] = auth.username
    if auth.password or auth.password_set:
        kwargs["password"] = auth.password
    if auth.auth_source:
        kwargs["authSource"] = auth.auth_source
    if auth.auth_mechanism:
        kwargs["authMechanism"] = auth.auth_mechanism
    if auth.auth_mechanism_properties:
        kwargs["authMechanismProperties"] = ",".join(
            f"{key}:{value}" for key, value in auth.auth_mechanism_properties.items()
        )
    return kwargs


class MongoConnection:
    """Operations on the current collection or on a registered one by name."""

    def __init__(self, client: Any) -> None:
        self.client = client
        self.db_name = ""
        self.current: Any = None
        self.collections: dict[str, Any] = {}
        self._deadline: Optional[float] = None
        self._cancelled = False

    def db(self, db_name: str) -> "MongoConnection":
        """Select the database and forget registered collections."""
        self.db_name = db_name
        self.collections = {}
        return self

    def collection(self, collection_name: str) -> None:
        """Register a collection and make it current, unless already registered."""
        if not self.db_name:
            raise DBRequiredError("DB required")
        if collection_name in self.collections:
            return
        self.current = self.client[self.db_name][collection_name]
        self.collections[collection_name] = self.current

    def disconnect(self) -> None:
        """Close the underlying client."""
        self.client.close()

    def with_timeout(self, seconds: float) -> Callable[[], None]:
        """Bound later operations by ``seconds``; returns a cancel function."""
        deadline = time.monotonic() + seconds
        if self._deadline is None or deadline < self._deadline:
            self._deadline = deadline

        def cancel() -> None:
            self._cancelled = True

        return cancel

    @contextmanager
    def _scope(self) -> Iterator[None]:
        if self._cancelled:
            raise TimeoutError("context canceled")
        if self._deadline is None:
            yield
            return
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError("context deadline exceeded")
        with pymongo.timeout(remaining):
            yield

    def _target(self, options: Optional[Options]) -> Any:
        if options is not None and options.collection_name:
            return self.collections[options.collection_name]
        if self.current is None:
            raise RuntimeError("no collection selected")
        return self.current

    def find(self, filter: Any, options: Optional[Options] = None) -> list[Any]:
        """Return every document matching ``filter``."""
        target = self._target(options)
        kwargs: dict[str, Any] = {}
        if options is not None:
            kwargs = {"skip": options.skip, "limit": options.limit}
            for name, value in (
                ("projection", options.projection),
                ("sort", _pairs(options.sort)),
                ("hint", _pairs(options.hint)),
                ("max", _pairs(options.max)),
                ("min", _pairs(options.min)),
            ):
                if value is not None:
                    kwargs[name] = value
        with self._scope():
            return _drain(target.find(filter, **kwargs))

    def find_one(self, filter: Any, options: Optional[Options] = None) -> Any:
        """Return one matching document; raises LookupError if none matches."""
        target = self._target(options)
        kwargs: dict[str, Any] = {}
        if options is not None:
            kwargs["skip"] = options.skip
            for name, value in (
                ("projection", options.projection),
                ("sort", _pairs(options.sort)),
                ("hint", _pairs(options.hint)),
                ("max", _pairs(options.max)),
                ("min", _pairs(options.min)),
            ):
                if value is not None:
                    kwargs[name] = value
        with self._scope():
            document = target.find_one(filter, **kwargs)
        if document is None:
            raise LookupError("mongo: no documents in result")
        return document

    def find_one_and_update(
        self, filter: Any, update: Any, options: Optional[Options] = None
    ) -> Any:
        """Update one document and return it as it was before the update."""
        target = self._target(options)
        kwargs: dict[str, Any] = {}
        if options is not None:
            kwargs["upsert"] = options.upsert
            for name, value in (
                ("projection", options.projection),
                ("sort", _pairs(options.sort)),
                ("hint", _pairs(options.hint)),
            ):
                if value is not None:
                    kwargs[name] = value
        with self._scope():
            document = target.find_one_and_update(filter, update, **kwargs)
        if document is None:
            raise LookupError("mongo: no documents in result")
        return document

    def insert_one(self, document: Any, options: Optional[Options] = None) -> str:
        """Insert ``document`` and return its ObjectId as hex."""
        target = self._target(options)
        with self._scope():
            result = target.insert_one(document)
        inserted = result.inserted_id
        if not isinstance(inserted, ObjectId):
            raise TypeError(f"inserted id is {type(inserted).__name__}, not ObjectId")
        return str(inserted)

    def delete_one(self, filter: Any, options: Optional[Options] = None) -> int:
        """Delete one matching document; returns the number deleted."""
        target = self._target(options)
        with self._scope():
            return target.delete_one(filter).deleted_count

    def delete_many(self, filter: Any, options: Optional[Options] = None) -> int:
        """Delete every matching document; returns the number deleted."""
        target = self._target(options)
        with self._scope():
            return target.delete_many(filter).deleted_count

    def count_documents(self, filter: Any, options: Optional[Options] = None) -> int:
        """Count matching documents; zero skip or limit means unset."""
        target = self._target(options)
        kwargs: dict[str, Any] = {}
        if options is not None:
            if options.skip:
                kwargs["skip"] = options.skip
            if options.limit:
                kwargs["limit"] = options.limit
            if options.hint is not None:
                kwargs["hint"] = _pairs(options.hint)
        with self._scope():
            return target.count_documents(filter, **kwargs)

    def aggregate(self, pipeline: Any, options: Optional[Options] = None) -> list[Any]:
        """Run an aggregation pipeline and return its documents."""
        target = self._target(options)
        with self._scope():
            return _drain(target.aggregate(pipeline))

    def update_many(
        self, filter: Any, update: Any, options: Optional[Options] = None
    ) -> int:
        """Update every matching document; returns the number modified."""
        target = self._target(options)
        with self._scope():
            return target.update_many(filter, update).modified_count

    def update_one(
        self, filter: Any, update: Any, options: Optional[Options] = None
    ) -> tuple[str, int]:
        """Update one document; returns the upserted id as hex (or "") and the count."""
        target = self._target(options)
        kwargs: dict[str, Any] = {}
        if options is not None:
            kwargs["upsert"] = options.upsert
            if options.hint is not None:
                kwargs["hint"] = _pairs(options.hint)
        with self._scope():
            result = target.update_one(filter, update, **kwargs)
        upserted = result.upserted_id
        if upserted is None:
            return "", result.modified_count
        if not isinstance(upserted, ObjectId):
            raise TypeError(f"upserted id is {type(upserted).__name__}, not ObjectId")
        return str(upserted), result.modified_count


def connect(uri: str, options: Optional[ClientOptions] = None) -> MongoConnection:
    """Open a client for ``uri`` and check it answers a ping."""
    kwargs = _client_kwargs(options) if options is not None else {}
    client = MongoClient(uri, **kwargs)
    try:
        client.admin.command("ping")
    except Exception:
        client.close()
        raise
    return MongoConnection(client)