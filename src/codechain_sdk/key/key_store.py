"""Key-store capability used by signers and authorizers.

A key store holds private keys and hands out only public keys and
signatures. Implementations may be hardware-backed, so every call is async.
"""

from __future__ import annotations

import logging
from typing import Protocol

from codechain_sdk.core.keys import (
    generate_private_key,
    private_key_to_public_key,
    public_key_hash,
    sign_ecdsa,
)
from codechain_sdk.errors.core_errors import KeyNotFoundError
from codechain_sdk.utils.encoding import to_hex

logger = logging.getLogger(__name__)


class KeyStore(Protocol):
    """Protocol for key store implementations."""

    async def create_key(self) -> bytes: ...
    async def sign(self, public_key: bytes, message: bytes) -> bytes: ...
    async def get_public_key(self, public_key_hash: bytes) -> bytes | None: ...


class MemoryKeyStore:
    """Dict-backed key store for tests and local tooling.

    Keys live only in process memory and are indexed by public key and by
    public key hash (``hash256`` of the public key).
    """

    def __init__(self) -> None:
        self._private_keys: dict[bytes, bytes] = {}
        self._by_hash: dict[bytes, bytes] = {}

    def import_private_key(self, private_key: bytes) -> bytes:
        """Add an existing private key and return its public key."""
        public_key = private_key_to_public_key(private_key)
        self._private_keys[public_key] = private_key
        self._by_hash[public_key_hash(public_key)] = public_key
        return public_key

    async def create_key(self) -> bytes:
        public_key = self.import_private_key(generate_private_key())
        logger.debug("Created key %s", to_hex(public_key_hash(public_key)))
        return public_key

    async def sign(self, public_key: bytes, message: bytes) -> bytes:
        """Sign a 32-byte message hash, returning the 65-byte ``r || s || v`` form.

        Raises:
            KeyNotFoundError: If *public_key* is not held by this store.
        """
        private_key = self._private_keys.get(bytes(public_key))
        if private_key is None:
            msg = f"no private key for public key {to_hex(public_key)}"
            raise KeyNotFoundError(msg)
        return sign_ecdsa(message, private_key).to_bytes()

    async def get_public_key(self, public_key_hash: bytes) -> bytes | None:
        return self._by_hash.get(bytes(public_key_hash))

    async def get_keys(self) -> list[bytes]:
        return list(self._private_keys)

    async def remove_key(self, public_key: bytes) -> bool:
        """Forget *public_key*; returns False if it was not present."""
        if self._private_keys.pop(bytes(public_key), None) is None:
            return False
        self._by_hash.pop(public_key_hash(public_key), None)
        return True
