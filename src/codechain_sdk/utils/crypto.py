"""Cryptographic helpers — content hashes and account-id compression."""

from __future__ import annotations

import hashlib


def hash256(data: bytes) -> bytes:
    """BLAKE2b hash with a 32-byte digest (content hash)."""
    return hashlib.blake2b(data, digest_size=32).digest()


def hash256_with_key(data: bytes, key: bytes) -> bytes:
    """Keyed BLAKE2b hash with a 32-byte digest.

    The key separates derived identifiers (asset types) from plain content hashes.
    """
    return hashlib.blake2b(data, digest_size=32, key=key).digest()


def ripemd160(data: bytes) -> bytes:
    """RIPEMD-160 hash."""
    h = hashlib.new("ripemd160")
    h.update(data)
    return h.digest()


def hash160(data: bytes) -> bytes:
    """Compress *data* (usually a content hash) to 20 bytes with RIPEMD-160."""
    return ripemd160(data)
