"""AES in CBC mode with a random IV prepended to the cipher text."""

from __future__ import annotations

import os
from typing import Callable

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

BLOCK_SIZE = 16
_KEY_SIZES = (16, 24, 32)

PadFn = Callable[[bytes, int], bytes]
TrimFn = Callable[[bytes], bytes]


def pkcs5_padding(data: bytes, block_size: int) -> bytes:
    """Append PKCS#5 padding up to a multiple of ``block_size``."""
    padding = block_size - len(data) % block_size
    return bytes(data) + bytes([padding]) * padding


def pkcs5_trimming(data: bytes) -> bytes:
    """Strip PKCS#5 padding; data whose padding would empty it is returned whole."""
    if not data:
        raise ValueError("cannot trim empty data")
    padding = data[-1]
    if len(data) - padding < 1:
        return bytes(data)
    return bytes(data[: len(data) - padding])


def _check_key(key: bytes) -> None:
    if len(key) not in _KEY_SIZES:
        raise ValueError(f"invalid AES key size {len(key)}")


def encrypt(key: bytes, plain_text: bytes, pad: PadFn = pkcs5_padding) -> bytes:
    """Encrypt ``plain_text``; input already block-aligned is not padded."""
    _check_key(key)
    if len(plain_text) % BLOCK_SIZE != 0:
        plain_text = pad(plain_text, BLOCK_SIZE)
    iv = os.urandom(BLOCK_SIZE)
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return iv + encryptor.update(plain_text) + encryptor.finalize()


def decrypt(key: bytes, cipher_text: bytes, unpad: TrimFn = pkcs5_trimming) -> bytes:
    """Decrypt IV-prefixed ``cipher_text`` and remove padding."""
    _check_key(key)
    if len(cipher_text) < BLOCK_SIZE or len(cipher_text) % BLOCK_SIZE != 0:
        raise ValueError("cipher text is not a whole number of blocks")
    iv, body = cipher_text[:BLOCK_SIZE], cipher_text[BLOCK_SIZE:]
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    plain = decryptor.update(body) + decryptor.finalize()
    return unpad(plain)