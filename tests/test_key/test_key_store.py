"""Tests for the in-memory key store — key/key_store.py."""

from __future__ import annotations

import pytest

from codechain_sdk.core.keys import (
    EcdsaSignature,
    account_id_from_public_key,
    public_key_hash,
    recover_ecdsa,
)
from codechain_sdk.errors.core_errors import KeyNotFoundError
from codechain_sdk.key.key_store import KeyStore, MemoryKeyStore
from codechain_sdk.utils.crypto import hash256


class TestMemoryKeyStore:
    def test_satisfies_protocol(self, key_store: MemoryKeyStore) -> None:
        store: KeyStore = key_store
        assert store is key_store

    @pytest.mark.asyncio
    async def test_create_key(self, key_store: MemoryKeyStore) -> None:
        public_key = await key_store.create_key()
        assert len(public_key) == 64
        assert await key_store.get_keys() == [public_key]

    @pytest.mark.asyncio
    async def test_sign_returns_recoverable_signature(self, key_store: MemoryKeyStore) -> None:
        public_key = await key_store.create_key()
        message = hash256(b"payload")
        raw = await key_store.sign(public_key, message)
        assert len(raw) == 65
        assert recover_ecdsa(message, EcdsaSignature.from_bytes(raw)) == public_key

    @pytest.mark.asyncio
    async def test_sign_unknown_key(self, key_store: MemoryKeyStore, public_key: bytes) -> None:
        with pytest.raises(KeyNotFoundError) as exc_info:
            await key_store.sign(public_key, hash256(b"payload"))
        assert exc_info.value.code == "key-not-found"

    @pytest.mark.asyncio
    async def test_get_public_key_by_hash(self, key_store: MemoryKeyStore, secret: bytes) -> None:
        public_key = key_store.import_private_key(secret)
        assert await key_store.get_public_key(public_key_hash(public_key)) == public_key
        assert await key_store.get_public_key(b"\x00" * 32) is None

    @pytest.mark.asyncio
    async def test_indexed_by_hash256_not_account_id(
        self, key_store: MemoryKeyStore, secret: bytes
    ) -> None:
        public_key = key_store.import_private_key(secret)
        assert await key_store.get_public_key(hash256(public_key)) == public_key
        assert await key_store.get_public_key(account_id_from_public_key(public_key)) is None

    @pytest.mark.asyncio
    async def test_remove_key(self, key_store: MemoryKeyStore) -> None:
        public_key = await key_store.create_key()
        assert await key_store.remove_key(public_key) is True
        assert await key_store.remove_key(public_key) is False
        assert await key_store.get_public_key(public_key_hash(public_key)) is None
