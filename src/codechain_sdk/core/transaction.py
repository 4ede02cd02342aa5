"""Asset transactions — out points, inputs, outputs, transfer and mint.

Every object has two serializations:
- ``to_encode_object()`` — ordered list fed to the canonical (RLP) encoder
- ``to_dict()`` / ``from_dict()`` — JSON form with 0x hex for fixed-width values

Outputs are referenced by value (transaction hash + index), never by live object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from codechain_sdk.core import rlp
from codechain_sdk.core.address import PlatformAddress, check_network_id
from codechain_sdk.core.keys import HASH_SIZE
from codechain_sdk.errors.core_errors import MalformedInputError
from codechain_sdk.utils.crypto import hash256, hash256_with_key
from codechain_sdk.utils.encoding import (
    bytes_to_list,
    list_to_bytes,
    parse_hex,
    parse_uint,
    to_hex,
)

if TYPE_CHECKING:
    from codechain_sdk.core.asset import Asset, AssetScheme

ASSET_MINT_TYPE = 3
ASSET_TRANSFER_TYPE = 4

# Asset types: 0x53 0x00 || shard id (2) || world id (2) || hash tail
ASSET_TYPE_PREFIX = b"\x53\x00"
SHARD_ID_RANGE = slice(2, 4)
WORLD_ID_RANGE = slice(4, 6)
_ASSET_SCHEME_KEY = (2**64 - 1).to_bytes(16, "big")

_U16_MAX = 0xFFFF


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def shard_id_from_asset_type(asset_type: bytes) -> int:
    """Read the shard id embedded in bytes 2–4 of an asset type."""
    if len(asset_type) != HASH_SIZE:
        msg = f"asset type must be {HASH_SIZE} bytes, got {len(asset_type)}"
        raise MalformedInputError(msg)
    return int.from_bytes(asset_type[SHARD_ID_RANGE], "big")


def asset_type_from_mint_hash(transaction_hash: bytes, shard_id: int, world_id: int) -> bytes:
    """Derive the asset type minted by the transaction with *transaction_hash*."""
    tail = hash256_with_key(transaction_hash, _ASSET_SCHEME_KEY)[WORLD_ID_RANGE.stop :]
    return ASSET_TYPE_PREFIX + shard_id.to_bytes(2, "big") + world_id.to_bytes(2, "big") + tail


def _check_hash(value: bytes, name: str) -> bytes:
    if len(value) != HASH_SIZE:
        msg = f"{name} must be {HASH_SIZE} bytes, got {len(value)}"
        raise MalformedInputError(msg)
    return bytes(value)


def _check_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        msg = f"amount must be a positive integer, got {amount!r}"
        raise MalformedInputError(msg)
    return amount


def _check_uint(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        msg = f"{name} must be a non-negative integer, got {value!r}"
        raise MalformedInputError(msg)
    return value


def _check_u16(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U16_MAX:
        msg = f"{name} must fit in 16 bits, got {value!r}"
        raise MalformedInputError(msg)
    return value


def _parameters_from_json(values: list[Any]) -> tuple[bytes, ...]:
    return tuple(list_to_bytes(p, name="parameter") for p in values)


# ---------------------------------------------------------------------------
# AssetOutPoint
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AssetOutPoint:
    """Reference to one output of a previous transaction.

    Attributes:
        transaction_hash: Hash of the transaction that created the output.
        index: Output index within that transaction.
        asset_type: 32-byte asset type of the output.
        amount: Full amount held by the output.
        lock_script_hash: Recorded lock script hash (needed to sign, not encoded).
        parameters: Recorded lock parameters (needed to sign, not encoded).
    """

    transaction_hash: bytes
    index: int
    asset_type: bytes
    amount: int
    lock_script_hash: bytes | None = None
    parameters: tuple[bytes, ...] | None = None

    def __post_init__(self) -> None:
        _check_hash(self.transaction_hash, "transaction hash")
        _check_hash(self.asset_type, "asset type")
        _check_amount(self.amount)
        if isinstance(self.index, bool) or not isinstance(self.index, int) or self.index < 0:
            msg = f"output index must be a non-negative integer, got {self.index!r}"
            raise MalformedInputError(msg)
        if self.lock_script_hash is not None:
            _check_hash(self.lock_script_hash, "lock script hash")
        if self.parameters is not None:
            object.__setattr__(self, "parameters", tuple(bytes(p) for p in self.parameters))

    def to_encode_object(self) -> list[Any]:
        return [self.transaction_hash, self.index, self.asset_type, self.amount]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "transactionHash": to_hex(self.transaction_hash),
            "index": self.index,
            "assetType": to_hex(self.asset_type),
            "amount": self.amount,
        }
        if self.lock_script_hash is not None:
            data["lockScriptHash"] = to_hex(self.lock_script_hash)
        if self.parameters is not None:
            data["parameters"] = [bytes_to_list(p) for p in self.parameters]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetOutPoint:
        lock_script_hash = data.get("lockScriptHash")
        parameters = data.get("parameters")
        return cls(
            transaction_hash=parse_hex(data["transactionHash"], HASH_SIZE, name="transactionHash"),
            index=parse_uint(data["index"], name="index"),
            asset_type=parse_hex(data["assetType"], HASH_SIZE, name="assetType"),
            amount=parse_uint(data["amount"], name="amount"),
            lock_script_hash=(
                None
                if lock_script_hash is None
                else parse_hex(lock_script_hash, HASH_SIZE, name="lockScriptHash")
            ),
            parameters=None if parameters is None else _parameters_from_json(parameters),
        )

    @property
    def shard_id(self) -> int:
        return shard_id_from_asset_type(self.asset_type)


# ---------------------------------------------------------------------------
# AssetTransferInput
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class AssetTransferInput:
    """An input spending (or burning) a previous output.

    ``lock_script`` and ``unlock_script`` start empty and are each populated
    exactly once, after the script-free transaction hash has been signed.
    """

    prev_out: AssetOutPoint
    lock_script: bytes = b""
    unlock_script: bytes = b""

    def set_lock_script(self, lock_script: bytes) -> None:
        if self.lock_script:
            msg = "lock script is already set"
            raise MalformedInputError(msg)
        self.lock_script = bytes(lock_script)

    def set_unlock_script(self, unlock_script: bytes) -> None:
        if self.unlock_script:
            msg = "unlock script is already set"
            raise MalformedInputError(msg)
        self.unlock_script = bytes(unlock_script)

    def without_script(self) -> AssetTransferInput:
        """Copy of this input with both scripts blanked."""
        return AssetTransferInput(prev_out=self.prev_out)

    def to_encode_object(self) -> list[Any]:
        return [self.prev_out.to_encode_object(), self.lock_script, self.unlock_script]

    def to_dict(self) -> dict[str, Any]:
        return {
            "prevOut": self.prev_out.to_dict(),
            "lockScript": bytes_to_list(self.lock_script),
            "unlockScript": bytes_to_list(self.unlock_script),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetTransferInput:
        return cls(
            prev_out=AssetOutPoint.from_dict(data["prevOut"]),
            lock_script=list_to_bytes(data.get("lockScript", []), name="lockScript"),
            unlock_script=list_to_bytes(data.get("unlockScript", []), name="unlockScript"),
        )


# ---------------------------------------------------------------------------
# AssetTransferOutput
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AssetTransferOutput:
    """A new spend condition: lock script hash + parameters, asset type + amount."""

    lock_script_hash: bytes
    parameters: tuple[bytes, ...]
    asset_type: bytes
    amount: int

    def __post_init__(self) -> None:
        _check_hash(self.lock_script_hash, "lock script hash")
        _check_hash(self.asset_type, "asset type")
        _check_amount(self.amount)
        object.__setattr__(self, "parameters", tuple(bytes(p) for p in self.parameters))

    def to_encode_object(self) -> list[Any]:
        return [self.lock_script_hash, list(self.parameters), self.asset_type, self.amount]

    def to_dict(self) -> dict[str, Any]:
        return {
            "lockScriptHash": to_hex(self.lock_script_hash),
            "parameters": [bytes_to_list(p) for p in self.parameters],
            "assetType": to_hex(self.asset_type),
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetTransferOutput:
        return cls(
            lock_script_hash=parse_hex(data["lockScriptHash"], HASH_SIZE, name="lockScriptHash"),
            parameters=_parameters_from_json(data["parameters"]),
            asset_type=parse_hex(data["assetType"], HASH_SIZE, name="assetType"),
            amount=parse_uint(data["amount"], name="amount"),
        )

    @property
    def shard_id(self) -> int:
        return shard_id_from_asset_type(self.asset_type)


# ---------------------------------------------------------------------------
# AssetTransferTransaction
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class AssetTransferTransaction:
    """Moves (or burns) whole previous outputs into new outputs.

    The order of burns, inputs and outputs is part of the signed payload.
    """

    burns: list[AssetTransferInput] = field(default_factory=list)
    inputs: list[AssetTransferInput] = field(default_factory=list)
    outputs: list[AssetTransferOutput] = field(default_factory=list)
    network_id: str = "tc"
    nonce: int = 0

    def __post_init__(self) -> None:
        check_network_id(self.network_id)
        _check_uint(self.nonce, "nonce")

    def to_encode_object(self) -> list[Any]:
        return [
            ASSET_TRANSFER_TYPE,
            self.network_id,
            [burn.to_encode_object() for burn in self.burns],
            [inp.to_encode_object() for inp in self.inputs],
            [out.to_encode_object() for out in self.outputs],
            self.nonce,
        ]

    def rlp_bytes(self) -> bytes:
        return rlp.encode(self.to_encode_object())

    def hash(self) -> bytes:
        """Content hash of the full transaction, scripts included."""
        return hash256(self.rlp_bytes())

    def hash_without_script(self) -> bytes:
        """Hash with every input's and burn's scripts blanked — the signed message."""
        stripped = AssetTransferTransaction(
            burns=[burn.without_script() for burn in self.burns],
            inputs=[inp.without_script() for inp in self.inputs],
            outputs=list(self.outputs),
            network_id=self.network_id,
            nonce=self.nonce,
        )
        return stripped.hash()

    def add_input(self, prev_out: AssetOutPoint) -> AssetTransferInput:
        inp = AssetTransferInput(prev_out=prev_out)
        self.inputs.append(inp)
        return inp

    def add_burn(self, prev_out: AssetOutPoint) -> AssetTransferInput:
        burn = AssetTransferInput(prev_out=prev_out)
        self.burns.append(burn)
        return burn

    def add_output(self, output: AssetTransferOutput) -> AssetTransferOutput:
        self.outputs.append(output)
        return output

    def get_transferred_asset(self, index: int) -> Asset:
        """The asset created by output *index* once this transaction executes."""
        from codechain_sdk.core.asset import Asset

        if not 0 <= index < len(self.outputs):
            msg = f"output index {index} out of range"
            raise MalformedInputError(msg)
        output = self.outputs[index]
        return Asset(
            asset_type=output.asset_type,
            lock_script_hash=output.lock_script_hash,
            parameters=output.parameters,
            amount=output.amount,
            transaction_hash=self.hash(),
            transaction_output_index=index,
        )

    def get_transferred_assets(self) -> list[Asset]:
        return [self.get_transferred_asset(i) for i in range(len(self.outputs))]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "assetTransfer",
            "data": {
                "networkId": self.network_id,
                "burns": [burn.to_dict() for burn in self.burns],
                "inputs": [inp.to_dict() for inp in self.inputs],
                "outputs": [out.to_dict() for out in self.outputs],
                "nonce": self.nonce,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetTransferTransaction:
        body = data.get("data", data)
        return cls(
            burns=[AssetTransferInput.from_dict(b) for b in body.get("burns", [])],
            inputs=[AssetTransferInput.from_dict(i) for i in body.get("inputs", [])],
            outputs=[AssetTransferOutput.from_dict(o) for o in body.get("outputs", [])],
            network_id=body["networkId"],
            nonce=parse_uint(body.get("nonce", 0), name="nonce"),
        )


# ---------------------------------------------------------------------------
# AssetMintTransaction
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AssetMintOutput:
    """Owner condition and supply of a newly minted asset (``amount=None`` = unlimited)."""

    lock_script_hash: bytes
    parameters: tuple[bytes, ...]
    amount: int | None = None

    def __post_init__(self) -> None:
        _check_hash(self.lock_script_hash, "lock script hash")
        if self.amount is not None:
            _check_amount(self.amount)
        object.__setattr__(self, "parameters", tuple(bytes(p) for p in self.parameters))


@dataclass(frozen=True, slots=True)
class AssetMintTransaction:
    """Creates a new asset type in a shard and its first output.

    Attributes:
        network_id: Two-character network id.
        shard_id: Shard the asset type belongs to.
        world_id: World within the shard.
        metadata: Free-form description of the asset.
        output: Owner condition and amount of the minted output.
        registrar: Account allowed to approve transfers, if any.
        nonce: Distinguishes otherwise identical mints.
    """

    network_id: str
    shard_id: int
    world_id: int
    metadata: str
    output: AssetMintOutput
    registrar: PlatformAddress | None = None
    nonce: int = 0

    def __post_init__(self) -> None:
        check_network_id(self.network_id)
        _check_u16(self.shard_id, "shard id")
        _check_u16(self.world_id, "world id")
        _check_uint(self.nonce, "nonce")

    def to_encode_object(self) -> list[Any]:
        output = self.output
        return [
            ASSET_MINT_TYPE,
            self.network_id,
            self.shard_id,
            self.world_id,
            self.metadata,
            output.lock_script_hash,
            list(output.parameters),
            [] if output.amount is None else [output.amount],
            [] if self.registrar is None else [self.registrar.account_id],
            self.nonce,
        ]

    def rlp_bytes(self) -> bytes:
        return rlp.encode(self.to_encode_object())

    def hash(self) -> bytes:
        return hash256(self.rlp_bytes())

    def get_asset_type(self) -> bytes:
        """The asset type this mint creates (embeds shard and world ids)."""
        return asset_type_from_mint_hash(self.hash(), self.shard_id, self.world_id)

    def get_minted_asset(self) -> Asset:
        """The single output created by this mint.

        Raises:
            MalformedInputError: If the mint has no fixed amount.
        """
        from codechain_sdk.core.asset import Asset

        if self.output.amount is None:
            msg = "cannot realize an asset from a mint without an amount"
            raise MalformedInputError(msg)
        return Asset(
            asset_type=self.get_asset_type(),
            lock_script_hash=self.output.lock_script_hash,
            parameters=self.output.parameters,
            amount=self.output.amount,
            transaction_hash=self.hash(),
            transaction_output_index=0,
        )

    def get_asset_scheme(self) -> AssetScheme:
        from codechain_sdk.core.asset import AssetScheme

        return AssetScheme(
            asset_type=self.get_asset_type(),
            metadata=self.metadata,
            amount=self.output.amount,
            registrar=self.registrar,
            network_id=self.network_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "assetMint",
            "data": {
                "networkId": self.network_id,
                "shardId": self.shard_id,
                "worldId": self.world_id,
                "metadata": self.metadata,
                "output": {
                    "lockScriptHash": to_hex(self.output.lock_script_hash),
                    "parameters": [bytes_to_list(p) for p in self.output.parameters],
                    "amount": self.output.amount,
                },
                "registrar": None if self.registrar is None else self.registrar.value,
                "nonce": self.nonce,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetMintTransaction:
        body = data.get("data", data)
        output = body["output"]
        amount = output.get("amount")
        registrar = body.get("registrar")
        return cls(
            network_id=body["networkId"],
            shard_id=parse_uint(body["shardId"], name="shardId"),
            world_id=parse_uint(body["worldId"], name="worldId"),
            metadata=body["metadata"],
            output=AssetMintOutput(
                lock_script_hash=parse_hex(
                    output["lockScriptHash"], HASH_SIZE, name="lockScriptHash"
                ),
                parameters=_parameters_from_json(output["parameters"]),
                amount=None if amount is None else parse_uint(amount, name="amount"),
            ),
            registrar=None if registrar is None else PlatformAddress.from_string(registrar),
            nonce=parse_uint(body.get("nonce", 0), name="nonce"),
        )


AssetTransaction = AssetMintTransaction | AssetTransferTransaction


def transaction_from_dict(data: dict[str, Any]) -> AssetTransaction:
    """Rebuild an asset transaction from its tagged JSON form."""
    tx_type = data.get("type")
    if tx_type == "assetMint":
        return AssetMintTransaction.from_dict(data)
    if tx_type == "assetTransfer":
        return AssetTransferTransaction.from_dict(data)
    msg = f"unknown asset transaction type: {tx_type!r}"
    raise MalformedInputError(msg)
