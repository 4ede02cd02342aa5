"""Realized assets — outputs created by mint and transfer transactions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from codechain_sdk.core.address import AssetTransferAddress, PlatformAddress, resolve
from codechain_sdk.core.keys import HASH_SIZE
from codechain_sdk.core.transaction import (
    AssetOutPoint,
    AssetTransferInput,
    AssetTransferOutput,
    AssetTransferTransaction,
    shard_id_from_asset_type,
)
from codechain_sdk.errors.core_errors import MalformedInputError
from codechain_sdk.utils.encoding import bytes_to_list, list_to_bytes, parse_hex, parse_uint, to_hex


@dataclass(frozen=True, slots=True)
class Recipient:
    """Destination and amount of one output of a transfer."""

    address: AssetTransferAddress | str
    amount: int


@dataclass(frozen=True, slots=True)
class Asset:
    """An unspent output: who may spend it, what it is, and where it came from.

    Attributes:
        asset_type: 32-byte asset type.
        lock_script_hash: Hash of the lock script guarding the output.
        parameters: Lock parameters (e.g. the owner's public key hash).
        amount: Amount held; spending always consumes all of it.
        transaction_hash: Hash of the transaction that created the output.
        transaction_output_index: Index of the output in that transaction.
        out_point: Content-addressed reference built from the fields above.
    """

    asset_type: bytes
    lock_script_hash: bytes
    parameters: tuple[bytes, ...]
    amount: int
    transaction_hash: bytes
    transaction_output_index: int
    out_point: AssetOutPoint = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(bytes(p) for p in self.parameters))
        object.__setattr__(
            self,
            "out_point",
            AssetOutPoint(
                transaction_hash=self.transaction_hash,
                index=self.transaction_output_index,
                asset_type=self.asset_type,
                amount=self.amount,
                lock_script_hash=self.lock_script_hash,
                parameters=self.parameters,
            ),
        )

    @property
    def shard_id(self) -> int:
        return shard_id_from_asset_type(self.asset_type)

    def create_transfer_input(self) -> AssetTransferInput:
        """An input spending this asset, scripts still empty."""
        return AssetTransferInput(prev_out=self.out_point)

    def create_transfer_transaction(
        self,
        recipients: list[Recipient] | None = None,
        *,
        nonce: int = 0,
        network_id: str = "tc",
    ) -> AssetTransferTransaction:
        """Build a transaction spending this asset with one output per recipient.

        Each recipient address is resolved to its (lock script hash, parameters)
        spend condition. Change must be listed as a recipient explicitly.
        """
        outputs = []
        for recipient in recipients or []:
            lock_script_hash, parameters = resolve(recipient.address, network_id=network_id)
            outputs.append(
                AssetTransferOutput(
                    lock_script_hash=lock_script_hash,
                    parameters=parameters,
                    asset_type=self.asset_type,
                    amount=recipient.amount,
                )
            )
        return AssetTransferTransaction(
            burns=[],
            inputs=[self.create_transfer_input()],
            outputs=outputs,
            network_id=network_id,
            nonce=nonce,
        )

    def to_dict(self) -> dict[str, Any]:
        """Legacy JSON shape (snake_case for the asset fields)."""
        return {
            "asset_type": to_hex(self.asset_type),
            "lock_script_hash": to_hex(self.lock_script_hash),
            "parameters": [bytes_to_list(p) for p in self.parameters],
            "amount": self.amount,
            "transactionHash": to_hex(self.transaction_hash),
            "transactionOutputIndex": self.transaction_output_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Asset:
        return cls(
            asset_type=parse_hex(data["asset_type"], HASH_SIZE, name="asset_type"),
            lock_script_hash=parse_hex(data["lock_script_hash"], HASH_SIZE, name="lock_script_hash"),
            parameters=tuple(list_to_bytes(p, name="parameter") for p in data["parameters"]),
            amount=parse_uint(data["amount"], name="amount"),
            transaction_hash=parse_hex(data["transactionHash"], HASH_SIZE, name="transactionHash"),
            transaction_output_index=parse_uint(
                data["transactionOutputIndex"], name="transactionOutputIndex"
            ),
        )


@dataclass(frozen=True, slots=True)
class AssetScheme:
    """Description of an asset type as registered by its mint transaction."""

    asset_type: bytes
    metadata: str
    amount: int | None
    registrar: PlatformAddress | None
    network_id: str

    def __post_init__(self) -> None:
        if len(self.asset_type) != HASH_SIZE:
            msg = f"asset type must be {HASH_SIZE} bytes, got {len(self.asset_type)}"
            raise MalformedInputError(msg)

    @property
    def shard_id(self) -> int:
        return shard_id_from_asset_type(self.asset_type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "assetType": to_hex(self.asset_type),
            "metadata": self.metadata,
            "amount": self.amount,
            "registrar": None if self.registrar is None else self.registrar.value,
            "networkId": self.network_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetScheme:
        amount = data.get("amount")
        registrar = data.get("registrar")
        return cls(
            asset_type=parse_hex(data["assetType"], HASH_SIZE, name="assetType"),
            metadata=data["metadata"],
            amount=None if amount is None else parse_uint(amount, name="amount"),
            registrar=None if registrar is None else PlatformAddress.from_string(registrar),
            network_id=data["networkId"],
        )
