"""Tests for asset transfer and mint transactions — core/transaction.py."""

from __future__ import annotations

import pytest

from codechain_sdk.core import rlp
from codechain_sdk.core.address import PlatformAddress
from codechain_sdk.core.script import P2PKH_LOCK_SCRIPT_HASH
from codechain_sdk.core.transaction import (
    ASSET_TYPE_PREFIX,
    AssetMintOutput,
    AssetMintTransaction,
    AssetOutPoint,
    AssetTransferInput,
    AssetTransferOutput,
    AssetTransferTransaction,
    asset_type_from_mint_hash,
    shard_id_from_asset_type,
    transaction_from_dict,
)
from codechain_sdk.errors.core_errors import MalformedInputError

_TX_HASH = b"\x11" * 32
_ASSET_TYPE = ASSET_TYPE_PREFIX + b"\x00\x07" + b"\x00\x00" + b"\x22" * 26
_OWNER = b"\x33" * 32


def _out_point(index: int = 0, amount: int = 100) -> AssetOutPoint:
    return AssetOutPoint(
        transaction_hash=_TX_HASH,
        index=index,
        asset_type=_ASSET_TYPE,
        amount=amount,
        lock_script_hash=P2PKH_LOCK_SCRIPT_HASH,
        parameters=(_OWNER,),
    )


def _output(amount: int = 100) -> AssetTransferOutput:
    return AssetTransferOutput(
        lock_script_hash=P2PKH_LOCK_SCRIPT_HASH,
        parameters=(_OWNER,),
        asset_type=_ASSET_TYPE,
        amount=amount,
    )


def _transfer() -> AssetTransferTransaction:
    tx = AssetTransferTransaction(network_id="tc", nonce=3)
    tx.add_input(_out_point())
    tx.add_output(_output(60))
    tx.add_output(_output(40))
    return tx


# ---------------------------------------------------------------------------
# Asset types
# ---------------------------------------------------------------------------


class TestAssetType:
    def test_shard_id(self) -> None:
        assert shard_id_from_asset_type(_ASSET_TYPE) == 7

    @pytest.mark.parametrize(
        ("shard_bytes", "expected"),
        [(b"\x00\x00", 0), (b"\xff\xff", 65535), (b"\x01\x00", 256)],
    )
    def test_shard_id_boundaries(self, shard_bytes: bytes, expected: int) -> None:
        asset_type = ASSET_TYPE_PREFIX + shard_bytes + b"\xff\xff" + b"\xee" * 26
        assert shard_id_from_asset_type(asset_type) == expected

    def test_shard_id_requires_32_bytes(self) -> None:
        with pytest.raises(MalformedInputError):
            shard_id_from_asset_type(b"\x53\x00\x00\x07")

    def test_from_mint_hash_layout(self) -> None:
        asset_type = asset_type_from_mint_hash(_TX_HASH, 0x0102, 0x0304)
        assert len(asset_type) == 32
        assert asset_type[:6] == b"\x53\x00\x01\x02\x03\x04"
        assert shard_id_from_asset_type(asset_type) == 0x0102


# ---------------------------------------------------------------------------
# Out points, inputs and outputs
# ---------------------------------------------------------------------------


class TestAssetOutPoint:
    def test_encode_omits_lock_data(self) -> None:
        assert _out_point().to_encode_object() == [_TX_HASH, 0, _ASSET_TYPE, 100]

    def test_dict_roundtrip(self) -> None:
        point = _out_point(index=2)
        data = point.to_dict()
        assert data["transactionHash"] == "0x" + "11" * 32
        assert data["parameters"] == [list(_OWNER)]
        assert AssetOutPoint.from_dict(data) == point

    def test_zero_amount_rejected(self) -> None:
        with pytest.raises(MalformedInputError, match="amount"):
            _out_point(amount=0)

    def test_short_hash_rejected(self) -> None:
        with pytest.raises(MalformedInputError):
            AssetOutPoint(transaction_hash=b"\x00", index=0, asset_type=_ASSET_TYPE, amount=1)

    def test_shard_id(self) -> None:
        assert _out_point().shard_id == 7


class TestAssetTransferInput:
    def test_scripts_start_empty(self) -> None:
        inp = AssetTransferInput(prev_out=_out_point())
        assert inp.lock_script == b""
        assert inp.unlock_script == b""

    def test_scripts_set_once(self) -> None:
        inp = AssetTransferInput(prev_out=_out_point())
        inp.set_lock_script(b"\x02")
        inp.set_unlock_script(b"\x30\x01")
        with pytest.raises(MalformedInputError, match="already set"):
            inp.set_lock_script(b"\x02")
        with pytest.raises(MalformedInputError, match="already set"):
            inp.set_unlock_script(b"\x30\x01")

    def test_without_script(self) -> None:
        inp = AssetTransferInput(prev_out=_out_point(), lock_script=b"\x02", unlock_script=b"\x00")
        bare = inp.without_script()
        assert bare.lock_script == b""
        assert bare.prev_out == inp.prev_out

    def test_dict_roundtrip(self) -> None:
        inp = AssetTransferInput(prev_out=_out_point(), lock_script=b"\x02", unlock_script=b"\x30\x05")
        data = inp.to_dict()
        assert data["lockScript"] == [2]
        assert AssetTransferInput.from_dict(data) == inp


class TestAssetTransferOutput:
    def test_encode(self) -> None:
        assert _output().to_encode_object() == [P2PKH_LOCK_SCRIPT_HASH, [_OWNER], _ASSET_TYPE, 100]

    def test_dict_roundtrip(self) -> None:
        out = _output(5)
        assert AssetTransferOutput.from_dict(out.to_dict()) == out


# ---------------------------------------------------------------------------
# AssetTransferTransaction
# ---------------------------------------------------------------------------


class TestAssetTransferTransaction:
    def test_encode_shape(self) -> None:
        encoded = _transfer().to_encode_object()
        assert encoded[0] == 4
        assert encoded[1] == "tc"
        assert encoded[2] == []
        assert len(encoded[3]) == 1
        assert len(encoded[4]) == 2
        assert encoded[5] == 3

    def test_rlp_is_canonical(self) -> None:
        tx = _transfer()
        assert rlp.encode(rlp.decode(tx.rlp_bytes())) == tx.rlp_bytes()

    def test_hash_is_deterministic(self) -> None:
        assert _transfer().hash() == _transfer().hash()

    def test_hash_depends_on_output_order(self) -> None:
        tx = _transfer()
        swapped = _transfer()
        swapped.outputs.reverse()
        assert tx.hash() != swapped.hash()

    def test_hash_without_script_ignores_scripts(self) -> None:
        tx = _transfer()
        before_hash = tx.hash()
        before_signed = tx.hash_without_script()
        tx.inputs[0].set_lock_script(b"\x02")
        tx.inputs[0].set_unlock_script(b"\x30\x01")
        assert tx.hash() != before_hash
        assert tx.hash_without_script() == before_signed

    def test_hash_without_script_leaves_scripts(self) -> None:
        tx = _transfer()
        tx.inputs[0].set_lock_script(b"\x02")
        tx.hash_without_script()
        assert tx.inputs[0].lock_script == b"\x02"

    def test_add_burn(self) -> None:
        tx = _transfer()
        burn = tx.add_burn(_out_point(index=1))
        assert tx.burns == [burn]
        assert len(tx.to_encode_object()[2]) == 1

    def test_transferred_assets(self) -> None:
        tx = _transfer()
        assets = tx.get_transferred_assets()
        assert [a.amount for a in assets] == [60, 40]
        assert assets[1].transaction_hash == tx.hash()
        assert assets[1].transaction_output_index == 1
        assert assets[1].out_point.index == 1

    def test_transferred_asset_out_of_range(self) -> None:
        with pytest.raises(MalformedInputError):
            _transfer().get_transferred_asset(2)

    def test_dict_roundtrip(self) -> None:
        tx = _transfer()
        data = tx.to_dict()
        assert data["type"] == "assetTransfer"
        restored = AssetTransferTransaction.from_dict(data)
        assert restored == tx
        assert restored.hash() == tx.hash()

    def test_negative_nonce_rejected(self) -> None:
        with pytest.raises(MalformedInputError):
            AssetTransferTransaction(nonce=-1)

    def test_bad_network_rejected(self) -> None:
        with pytest.raises(MalformedInputError):
            AssetTransferTransaction(network_id="t")


# ---------------------------------------------------------------------------
# AssetMintTransaction
# ---------------------------------------------------------------------------


def _mint(amount: int | None = 1000, registrar: PlatformAddress | None = None) -> AssetMintTransaction:
    return AssetMintTransaction(
        network_id="tc",
        shard_id=7,
        world_id=1,
        metadata="gold",
        output=AssetMintOutput(P2PKH_LOCK_SCRIPT_HASH, (_OWNER,), amount),
        registrar=registrar,
        nonce=0,
    )


class TestAssetMintTransaction:
    def test_encode_shape(self) -> None:
        registrar = PlatformAddress.from_account_id(b"\x44" * 20)
        encoded = _mint(registrar=registrar).to_encode_object()
        assert encoded == [
            3,
            "tc",
            7,
            1,
            "gold",
            P2PKH_LOCK_SCRIPT_HASH,
            [_OWNER],
            [1000],
            [b"\x44" * 20],
            0,
        ]

    def test_optional_fields_encode_empty(self) -> None:
        encoded = _mint(amount=None).to_encode_object()
        assert encoded[7] == []
        assert encoded[8] == []

    def test_asset_type_embeds_shard_and_world(self) -> None:
        asset_type = _mint().get_asset_type()
        assert asset_type[:6] == b"\x53\x00\x00\x07\x00\x01"

    def test_minted_asset(self) -> None:
        mint = _mint()
        asset = mint.get_minted_asset()
        assert asset.asset_type == mint.get_asset_type()
        assert asset.amount == 1000
        assert asset.transaction_hash == mint.hash()
        assert asset.transaction_output_index == 0
        assert asset.shard_id == 7

    def test_minted_asset_requires_amount(self) -> None:
        with pytest.raises(MalformedInputError):
            _mint(amount=None).get_minted_asset()

    def test_asset_scheme(self) -> None:
        scheme = _mint().get_asset_scheme()
        assert scheme.metadata == "gold"
        assert scheme.amount == 1000
        assert scheme.shard_id == 7

    def test_dict_roundtrip(self) -> None:
        mint = _mint(registrar=PlatformAddress.from_account_id(b"\x44" * 20))
        data = mint.to_dict()
        assert data["type"] == "assetMint"
        assert AssetMintTransaction.from_dict(data) == mint

    def test_shard_id_range(self) -> None:
        with pytest.raises(MalformedInputError):
            AssetMintTransaction(
                network_id="tc",
                shard_id=0x10000,
                world_id=0,
                metadata="",
                output=AssetMintOutput(P2PKH_LOCK_SCRIPT_HASH, (_OWNER,)),
            )


class TestTransactionFromDict:
    def test_dispatch(self) -> None:
        assert isinstance(transaction_from_dict(_mint().to_dict()), AssetMintTransaction)
        assert isinstance(transaction_from_dict(_transfer().to_dict()), AssetTransferTransaction)

    def test_unknown_type(self) -> None:
        with pytest.raises(MalformedInputError, match="unknown"):
            transaction_from_dict({"type": "assetCompose", "data": {}})
