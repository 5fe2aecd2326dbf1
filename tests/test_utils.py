import hashlib
import time

import pytest

from awaymail import cbc, utils

CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def test_encrypt_decrypt_round_trip():
    salt = "salt-value"
    message = "meet me at noon"
    assert utils.decrypt(salt, utils.encrypt(salt, message)) == message


def test_encrypt_output_is_hex():
    out = utils.encrypt("salt", "hello")
    assert bytes.fromhex(out).hex() == out
    assert len(out) == 64


def test_unicode_round_trip():
    message = "héllo wörld ✓"
    assert utils.decrypt("s", utils.encrypt("s", message)) == message


def test_key_is_hex_md5_of_salt():
    out = utils.encrypt("right", "a secret message")
    derived = hashlib.md5(b"right").hexdigest().encode()
    assert cbc.decrypt(derived, bytes.fromhex(out)) == b"a secret message"


def test_decrypt_invalid_hex_raises():
    with pytest.raises(ValueError):
        utils.decrypt("salt", "zz-not-hex")


@pytest.mark.parametrize(
    "day", ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
)
def test_validate_weekday_accepts_days(day):
    assert utils.validate_weekday(day) is True


@pytest.mark.parametrize("value", ["monday", "Mon", "", "Funday"])
def test_validate_weekday_rejects(value):
    assert utils.validate_weekday(value) is False


def test_remove_duplicate_str_keeps_order():
    assert utils.remove_duplicate_str(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


def test_remove_duplicate_str_empty():
    assert utils.remove_duplicate_str([]) == []


def test_thread_id_shape():
    tid = utils.generate_thread_id()
    assert len(tid) == 26
    assert set(tid) <= set(CROCKFORD)


def test_thread_id_encodes_current_time():
    before = time.time_ns() // 1_000_000
    tid = utils.generate_thread_id()
    after = time.time_ns() // 1_000_000
    millis = 0
    for ch in tid[:10]:
        millis = millis * 32 + CROCKFORD.index(ch)
    assert before <= millis <= after


def test_thread_ids_unique():
    ids = {utils.generate_thread_id() for _ in range(200)}
    assert len(ids) == 200