"""Assorted helpers: salted encryption, weekday checks, ids."""

from __future__ import annotations

import hashlib
import secrets
import time
from typing import Iterable

from . import cbc

_WEEKDAYS = frozenset(
    {"Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"}
)

_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_ULID_LENGTH = 26


def _key_from_salt(salt: str) -> bytes:
    return hashlib.md5(salt.encode("utf-8")).hexdigest().encode("ascii")


def encrypt(salt: str, plain_text: str) -> str:
    """Encrypt text with a key derived from ``salt``; returns hex."""
    cipher = cbc.encrypt(_key_from_salt(salt), plain_text.encode("utf-8"))
    return cipher.hex()


def decrypt(salt: str, cipher_text: str) -> str:
    """Reverse :func:`encrypt`; raises ValueError on malformed input."""
    cipher = bytes.fromhex(cipher_text)
    plain = cbc.decrypt(_key_from_salt(salt), cipher)
    return plain.decode("utf-8", errors="replace")


def validate_weekday(value: str) -> bool:
    """Tell whether ``value`` is an English weekday name, capitalised."""
    return value in _WEEKDAYS


def remove_duplicate_str(items: Iterable[str]) -> list[str]:
    """Drop repeated strings, keeping first occurrences in order."""
    return list(dict.fromkeys(items))


def generate_thread_id() -> str:
    """Return a new ULID string: 48-bit millisecond time plus 80 random bits."""
    millis = time.time_ns() // 1_000_000
    value = (millis << 80) | secrets.randbits(80)
    chars = []
    for _ in range(_ULID_LENGTH):
        chars.append(_CROCKFORD[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))