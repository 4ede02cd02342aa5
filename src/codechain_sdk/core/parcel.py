"""Parcels: account-level envelopes carrying one action.

An unsigned :class:`Parcel` is ``[nonce, fee, networkId, action]``; a
:class:`SignedParcel` appends the 65-byte signature. The signature covers the
hash of the unsigned encoding only, so block placement metadata can be
attached after the fact without invalidating it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from codechain_sdk.core import rlp
from codechain_sdk.core.action import (
    Action,
    ChangeShardState,
    CreateShard,
    Payment,
    SetRegularKey,
    SetShardOwners,
    SetShardUsers,
    action_from_dict,
)
from codechain_sdk.core.address import PlatformAddress, check_network_id
from codechain_sdk.core.keys import (
    HASH_SIZE,
    EcdsaSignature,
    account_id_from_public_key,
    recover_ecdsa,
    sign_ecdsa,
)
from codechain_sdk.core.transaction import AssetTransaction
from codechain_sdk.errors.core_errors import MalformedInputError, MissingRequiredFieldError
from codechain_sdk.utils.crypto import hash256
from codechain_sdk.utils.encoding import parse_hex, parse_uint, to_hex

logger = logging.getLogger(__name__)


def _optional_uint(value: int | str | None, name: str) -> int | None:
    return None if value is None else parse_uint(value, name=name)


# ---------------------------------------------------------------------------
# Parcel
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Parcel:
    """An unsigned parcel.

    ``nonce`` and ``fee`` may be left as ``None`` while the parcel is being
    assembled, but must be set before it is encoded, hashed or signed.
    """

    nonce: int | None
    fee: int | None
    network_id: str
    action: Action

    def __post_init__(self) -> None:
        check_network_id(self.network_id)
        for name in ("nonce", "fee"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                msg = f"{name} must be a non-negative integer, got {value!r}"
                raise MalformedInputError(msg)

    # -- builders -----------------------------------------------------------

    @staticmethod
    def payment(
        receiver: PlatformAddress | str | bytes,
        amount: int,
        *,
        network_id: str = "tc",
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        """Payment to an account, given by address or raw 20-byte account id."""
        if isinstance(receiver, (bytes, bytearray)):
            account_id = bytes(receiver)
        else:
            account_id = PlatformAddress.ensure(receiver).account_id
        return Parcel(nonce, fee, network_id, Payment(receiver=account_id, amount=amount))

    @staticmethod
    def set_regular_key(
        key: bytes,
        *,
        network_id: str = "tc",
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        return Parcel(nonce, fee, network_id, SetRegularKey(key=key))

    @staticmethod
    def create_shard(
        *, network_id: str = "tc", nonce: int | None = None, fee: int | None = None
    ) -> Parcel:
        return Parcel(nonce, fee, network_id, CreateShard())

    @staticmethod
    def set_shard_owners(
        shard_id: int,
        owners: list[PlatformAddress | str],
        *,
        network_id: str = "tc",
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        action = SetShardOwners(shard_id=shard_id, owners=tuple(PlatformAddress.ensure(o) for o in owners))
        return Parcel(nonce, fee, network_id, action)

    @staticmethod
    def set_shard_users(
        shard_id: int,
        users: list[PlatformAddress | str],
        *,
        network_id: str = "tc",
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        action = SetShardUsers(shard_id=shard_id, users=tuple(PlatformAddress.ensure(u) for u in users))
        return Parcel(nonce, fee, network_id, action)

    @staticmethod
    def change_shard_state(
        transactions: list[AssetTransaction],
        *,
        network_id: str = "tc",
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        return Parcel(nonce, fee, network_id, ChangeShardState(transactions=tuple(transactions)))

    # -- encoding -----------------------------------------------------------

    def to_encode_object(self) -> list[Any]:
        """``[nonce, fee, networkId, action]``.

        Raises:
            MissingRequiredFieldError: If nonce or fee is unset.
        """
        if self.nonce is None:
            msg = "parcel nonce is required before encoding"
            raise MissingRequiredFieldError(msg, field="nonce")
        if self.fee is None:
            msg = "parcel fee is required before encoding"
            raise MissingRequiredFieldError(msg, field="fee")
        return [self.nonce, self.fee, self.network_id, self.action.to_encode_object()]

    def rlp_bytes(self) -> bytes:
        return rlp.encode(self.to_encode_object())

    def hash(self) -> bytes:
        """Hash of the unsigned encoding; this is what gets signed."""
        return hash256(self.rlp_bytes())

    def sign(
        self,
        private_key: bytes,
        *,
        block_number: int | None = None,
        block_hash: bytes | None = None,
        parcel_index: int | None = None,
    ) -> SignedParcel:
        """Sign with *private_key* and wrap the result in a :class:`SignedParcel`."""
        signature = sign_ecdsa(self.hash(), private_key)
        logger.debug("Signed parcel nonce=%s network=%s", self.nonce, self.network_id)
        return SignedParcel.from_signature(
            self,
            signature,
            block_number=block_number,
            block_hash=block_hash,
            parcel_index=parcel_index,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "nonce": None if self.nonce is None else str(self.nonce),
            "fee": None if self.fee is None else str(self.fee),
            "networkId": self.network_id,
            "action": self.action.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Parcel:
        return cls(
            nonce=_optional_uint(data.get("nonce"), "nonce"),
            fee=_optional_uint(data.get("fee"), "fee"),
            network_id=data["networkId"],
            action=action_from_dict(data["action"]),
        )


# ---------------------------------------------------------------------------
# SignedParcel
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SignedParcel:
    """A parcel together with its recoverable signature.

    Attributes:
        unsigned: The parcel that was signed.
        v: Recovery id (0 or 1).
        r: First signature scalar.
        s: Second signature scalar.
        block_number: Block the parcel was included in, if known.
        block_hash: Hash of that block, if known.
        parcel_index: Position of the parcel within the block, if known.
    """

    unsigned: Parcel
    v: int
    r: int
    s: int
    block_number: int | None = None
    block_hash: bytes | None = None
    parcel_index: int | None = None

    def __post_init__(self) -> None:
        if self.block_hash is not None and len(self.block_hash) != HASH_SIZE:
            msg = f"block hash must be {HASH_SIZE} bytes, got {len(self.block_hash)}"
            raise MalformedInputError(msg)

    @classmethod
    def from_signature(
        cls,
        unsigned: Parcel,
        signature: EcdsaSignature,
        *,
        block_number: int | None = None,
        block_hash: bytes | None = None,
        parcel_index: int | None = None,
    ) -> SignedParcel:
        return cls(
            unsigned=unsigned,
            v=signature.v,
            r=signature.r,
            s=signature.s,
            block_number=block_number,
            block_hash=block_hash,
            parcel_index=parcel_index,
        )

    def signature(self) -> EcdsaSignature:
        return EcdsaSignature(r=self.r, s=self.s, v=self.v)

    def to_encode_object(self) -> list[Any]:
        return [*self.unsigned.to_encode_object(), self.signature().to_bytes()]

    def rlp_bytes(self) -> bytes:
        return rlp.encode(self.to_encode_object())

    def hash(self) -> bytes:
        return hash256(self.rlp_bytes())

    def get_signer_public_key(self) -> bytes:
        """Recover the signer's 64-byte public key from the signature."""
        return recover_ecdsa(self.unsigned.hash(), self.signature())

    def get_signer_account_id(self) -> bytes:
        return account_id_from_public_key(self.get_signer_public_key())

    def get_signer_address(self) -> PlatformAddress:
        return PlatformAddress.from_account_id(
            self.get_signer_account_id(), network_id=self.unsigned.network_id
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.unsigned.to_dict(),
            "sig": self.signature().to_string(),
            "blockNumber": self.block_number,
            "blockHash": None if self.block_hash is None else to_hex(self.block_hash),
            "parcelIndex": self.parcel_index,
            "hash": to_hex(self.hash()),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignedParcel:
        """Rebuild from the JSON form; ``hash`` is recomputed, not trusted."""
        if data.get("sig") is None:
            msg = "signed parcel is missing its signature"
            raise MissingRequiredFieldError(msg, field="sig")
        signature = EcdsaSignature.from_string(data["sig"])
        block_hash = data.get("blockHash")
        return cls.from_signature(
            Parcel.from_dict(data),
            signature,
            block_number=_optional_uint(data.get("blockNumber"), "blockNumber"),
            block_hash=None if block_hash is None else parse_hex(block_hash, HASH_SIZE, name="blockHash"),
            parcel_index=_optional_uint(data.get("parcelIndex"), "parcelIndex"),
        )
