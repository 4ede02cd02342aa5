"""Tests for the SDK facades — sdk.py."""

from __future__ import annotations

import pytest

from codechain_sdk import SDK, SDKConfig
from codechain_sdk.core.action import CreateShard, Payment, SetShardUsers
from codechain_sdk.core.address import PlatformAddress
from codechain_sdk.core.asset import Recipient
from codechain_sdk.core.script import ScriptResult
from codechain_sdk.key.key_store import MemoryKeyStore
from codechain_sdk.key.p2pkh import P2PKH, P2PKHBurn


@pytest.fixture
def sdk(sdk_config: SDKConfig) -> SDK:
    return SDK(sdk_config, MemoryKeyStore())


class TestCore:
    def test_payment_parcel_uses_default_fee(self, sdk: SDK) -> None:
        parcel = sdk.core.create_payment_parcel(b"\x00" * 20, 33, nonce=11)
        assert parcel.fee == 10
        assert parcel.network_id == "tc"
        assert parcel.action == Payment(b"\x00" * 20, 33)

    def test_explicit_fee(self, sdk: SDK) -> None:
        assert sdk.core.create_payment_parcel(b"\x00" * 20, 33, nonce=11, fee=44).fee == 44

    def test_other_parcels(self, sdk: SDK) -> None:
        users = [PlatformAddress.from_account_id(b"\x01" * 20)]
        assert sdk.core.create_create_shard_parcel(nonce=0).action == CreateShard()
        parcel = sdk.core.create_set_shard_users_parcel(2, users, nonce=0)
        assert parcel.action == SetShardUsers(shard_id=2, users=tuple(users))

    def test_network_follows_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CODECHAIN_NETWORK_ID", raising=False)
        sdk = SDK(SDKConfig(network_id="sc"))
        assert sdk.core.create_asset_transfer_transaction().network_id == "sc"

    def test_end_to_end_payment(self, sdk: SDK, secret: bytes) -> None:
        parcel = sdk.core.create_payment_parcel(b"\x00" * 20, 33, nonce=11, fee=44)
        signed = parcel.sign(secret)
        assert signed.get_signer_account_id() == sdk.util.get_account_id_from_private_key(secret)

    @pytest.mark.asyncio
    async def test_mint_transfer_and_verify(self, sdk: SDK) -> None:
        p2pkh = sdk.key.create_p2pkh()
        owner = await p2pkh.create_address()
        receiver = await p2pkh.create_address()

        mint = sdk.core.create_asset_mint_transaction(owner, "gold", shard_id=1, amount=100)
        asset = mint.get_minted_asset()
        transfer = sdk.core.create_transfer_from_asset(
            asset, [Recipient(receiver, 60), Recipient(owner, 40)]
        )
        await p2pkh.sign_input(transfer, 0)

        assert sdk.core.authorize_input(transfer, 0).result == ScriptResult.UNLOCKED
        sdk.core.verify_transaction(transfer)
        parcel = sdk.core.create_change_shard_state_parcel([mint, transfer], nonce=0)
        assert parcel.to_encode_object()[3][0] == 1


class TestKeyFactory:
    def test_authorizers(self, sdk: SDK) -> None:
        assert isinstance(sdk.key.create_p2pkh(), P2PKH)
        burner = sdk.key.create_p2pkh_burn()
        assert isinstance(burner, P2PKHBurn)
        assert burner.network_id == "tc"


class TestUtil:
    def test_primitives(self, sdk: SDK, secret: bytes, public_key: bytes) -> None:
        assert sdk.util.get_public_key_from_private_key(secret) == public_key
        message = sdk.util.hash256(b"data")
        signature = sdk.util.sign_ecdsa(message, secret)
        assert sdk.util.verify_ecdsa(message, signature, public_key)
        assert sdk.util.recover_ecdsa(message, signature) == public_key
        assert sdk.util.signature_to_string(signature) == signature.to_string()
