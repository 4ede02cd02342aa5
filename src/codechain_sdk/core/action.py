"""Parcel actions — the tagged payload a parcel carries.

| Tag | Action             |
|-----|--------------------|
| 1   | ChangeShardState   |
| 2   | Payment            |
| 3   | SetRegularKey      |
| 4   | CreateShard        |
| 5   | SetShardOwners     |
| 6   | SetShardUsers      |

Each variant knows its own encode object and JSON form; decoding matches the
``action`` discriminator against the closed set above.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from codechain_sdk.core.address import PlatformAddress
from codechain_sdk.core.keys import ACCOUNT_ID_SIZE, PUBLIC_KEY_SIZE
from codechain_sdk.core.transaction import AssetTransaction, transaction_from_dict
from codechain_sdk.errors.core_errors import MalformedInputError
from codechain_sdk.utils.encoding import parse_hex, parse_uint, to_hex

CHANGE_SHARD_STATE = 1
PAYMENT = 2
SET_REGULAR_KEY = 3
CREATE_SHARD = 4
SET_SHARD_OWNERS = 5
SET_SHARD_USERS = 6


def _check_shard_id(shard_id: int) -> None:
    if isinstance(shard_id, bool) or not isinstance(shard_id, int) or not 0 <= shard_id <= 0xFFFF:
        msg = f"shard id must fit in 16 bits, got {shard_id!r}"
        raise MalformedInputError(msg)


@dataclass(frozen=True, slots=True)
class ChangeShardState:
    """Apply asset transactions to shard state."""

    transactions: tuple[AssetTransaction, ...]

    tag = CHANGE_SHARD_STATE

    def __post_init__(self) -> None:
        object.__setattr__(self, "transactions", tuple(self.transactions))

    def to_encode_object(self) -> list[Any]:
        return [CHANGE_SHARD_STATE, [tx.to_encode_object() for tx in self.transactions]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": "changeShardState",
            "transactions": [tx.to_dict() for tx in self.transactions],
        }


@dataclass(frozen=True, slots=True)
class Payment:
    """Move ``amount`` from the signer's account to ``receiver``."""

    receiver: bytes
    amount: int

    tag = PAYMENT

    def __post_init__(self) -> None:
        if len(self.receiver) != ACCOUNT_ID_SIZE:
            msg = f"receiver must be a {ACCOUNT_ID_SIZE}-byte account id, got {len(self.receiver)}"
            raise MalformedInputError(msg)
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount < 0:
            msg = f"amount must be a non-negative integer, got {self.amount!r}"
            raise MalformedInputError(msg)

    def to_encode_object(self) -> list[Any]:
        return [PAYMENT, self.receiver, self.amount]

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": "payment",
            "receiver": to_hex(self.receiver),
            "amount": str(self.amount),
        }


@dataclass(frozen=True, slots=True)
class SetRegularKey:
    """Register a secondary key allowed to sign parcels for the account."""

    key: bytes

    tag = SET_REGULAR_KEY

    def __post_init__(self) -> None:
        if len(self.key) != PUBLIC_KEY_SIZE:
            msg = f"regular key must be a {PUBLIC_KEY_SIZE}-byte public key, got {len(self.key)}"
            raise MalformedInputError(msg)

    def to_encode_object(self) -> list[Any]:
        return [SET_REGULAR_KEY, self.key]

    def to_dict(self) -> dict[str, Any]:
        return {"action": "setRegularKey", "key": to_hex(self.key)}


@dataclass(frozen=True, slots=True)
class CreateShard:
    """Create a new shard owned by the signer."""

    tag = CREATE_SHARD

    def to_encode_object(self) -> list[Any]:
        return [CREATE_SHARD]

    def to_dict(self) -> dict[str, Any]:
        return {"action": "createShard"}


@dataclass(frozen=True, slots=True)
class SetShardOwners:
    """Replace the owner set of a shard."""

    shard_id: int
    owners: tuple[PlatformAddress, ...]

    tag = SET_SHARD_OWNERS

    def __post_init__(self) -> None:
        _check_shard_id(self.shard_id)
        object.__setattr__(self, "owners", tuple(self.owners))

    def to_encode_object(self) -> list[Any]:
        return [SET_SHARD_OWNERS, self.shard_id, [o.account_id for o in self.owners]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": "setShardOwners",
            "shardId": self.shard_id,
            "owners": [o.value for o in self.owners],
        }


@dataclass(frozen=True, slots=True)
class SetShardUsers:
    """Replace the user set of a shard."""

    shard_id: int
    users: tuple[PlatformAddress, ...]

    tag = SET_SHARD_USERS

    def __post_init__(self) -> None:
        _check_shard_id(self.shard_id)
        object.__setattr__(self, "users", tuple(self.users))

    def to_encode_object(self) -> list[Any]:
        return [SET_SHARD_USERS, self.shard_id, [u.account_id for u in self.users]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": "setShardUsers",
            "shardId": self.shard_id,
            "users": [u.value for u in self.users],
        }


Action = ChangeShardState | Payment | SetRegularKey | CreateShard | SetShardOwners | SetShardUsers


def action_from_dict(data: dict[str, Any]) -> Action:
    """Rebuild an action from its JSON form.

    Raises:
        MalformedInputError: If the ``action`` discriminator is unknown.
    """
    kind = data.get("action")
    if kind == "changeShardState":
        return ChangeShardState(
            transactions=tuple(transaction_from_dict(tx) for tx in data["transactions"])
        )
    if kind == "payment":
        return Payment(
            receiver=parse_hex(data["receiver"], ACCOUNT_ID_SIZE, name="receiver"),
            amount=parse_uint(data["amount"], name="amount"),
        )
    if kind == "setRegularKey":
        return SetRegularKey(key=parse_hex(data["key"], PUBLIC_KEY_SIZE, name="key"))
    if kind == "createShard":
        return CreateShard()
    if kind == "setShardOwners":
        return SetShardOwners(
            shard_id=parse_uint(data["shardId"], name="shardId"),
            owners=tuple(PlatformAddress.from_string(o) for o in data["owners"]),
        )
    if kind == "setShardUsers":
        return SetShardUsers(
            shard_id=parse_uint(data["shardId"], name="shardId"),
            users=tuple(PlatformAddress.from_string(u) for u in data["users"]),
        )
    msg = f"unknown parcel action: {kind!r}"
    raise MalformedInputError(msg)
