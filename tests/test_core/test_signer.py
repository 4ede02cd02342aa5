"""Tests for parcel signing and signer recovery — core/signer.py."""

from __future__ import annotations

import pytest

from codechain_sdk.core.keys import account_id_from_private_key, verify_ecdsa
from codechain_sdk.core.parcel import Parcel
from codechain_sdk.core.signer import (
    recover_signer_account_id,
    recover_signer_public_key,
    sign_parcel,
    sign_parcel_with_key_store,
    to_signed_parcel,
)
from codechain_sdk.errors.core_errors import AuthorizationError, KeyNotFoundError
from codechain_sdk.key.key_store import MemoryKeyStore


def _parcel() -> Parcel:
    return Parcel.payment(b"\x00" * 20, 33, network_id="tc", nonce=11, fee=44)


class TestSigner:
    def test_sign_parcel_verifies(self, secret: bytes, public_key: bytes) -> None:
        signature = sign_parcel(_parcel(), secret)
        assert verify_ecdsa(_parcel().hash(), signature, public_key)

    def test_to_signed_parcel(self, secret: bytes) -> None:
        signature = sign_parcel(_parcel(), secret)
        signed = to_signed_parcel(_parcel(), signature, block_number=1, block_hash=b"\x01" * 32, parcel_index=0)
        assert signed.signature() == signature
        assert signed.block_number == 1
        assert signed == _parcel().sign(secret, block_number=1, block_hash=b"\x01" * 32, parcel_index=0)

    def test_recover_signer(self, secret: bytes, public_key: bytes) -> None:
        signed = to_signed_parcel(_parcel(), sign_parcel(_parcel(), secret))
        assert recover_signer_public_key(signed) == public_key
        assert recover_signer_account_id(signed) == account_id_from_private_key(secret)


class TestKeyStoreSigning:
    @pytest.mark.asyncio
    async def test_sign_with_key_store(self, key_store: MemoryKeyStore, secret: bytes) -> None:
        public_key = key_store.import_private_key(secret)
        signed = await sign_parcel_with_key_store(_parcel(), key_store, public_key)
        assert recover_signer_public_key(signed) == public_key
        assert signed == _parcel().sign(secret)

    @pytest.mark.asyncio
    async def test_unknown_key(self, key_store: MemoryKeyStore, public_key: bytes) -> None:
        with pytest.raises(KeyNotFoundError):
            await sign_parcel_with_key_store(_parcel(), key_store, public_key)

    @pytest.mark.asyncio
    async def test_signature_for_other_key(self, secret: bytes, public_key: bytes) -> None:
        class LyingKeyStore(MemoryKeyStore):
            async def sign(self, public_key: bytes, message: bytes) -> bytes:
                other = self.import_private_key(b"\x02" * 32)
                return await super().sign(other, message)

        with pytest.raises(AuthorizationError) as exc_info:
            await sign_parcel_with_key_store(_parcel(), LyingKeyStore(), public_key)
        assert exc_info.value.reason == "signer-mismatch"
