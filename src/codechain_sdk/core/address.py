"""Address encoding — platform (account) and asset-transfer (lock condition) addresses.

Addresses are Bech32-checksummed strings laid out without a separator:

    <network id (2 chars)><kind char><data words><6 checksum words>

- Platform address (kind ``c``): ``[version] || account_id``
- Asset transfer address (kind ``a``): ``[version, type] || payload``, where
  the type tag says how to rebuild the (lock script hash, parameters) pair
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from bech32 import CHARSET, bech32_create_checksum, bech32_verify_checksum, convertbits

from codechain_sdk.core.keys import ACCOUNT_ID_SIZE, HASH_SIZE
from codechain_sdk.core.script import P2PKH_BURN_LOCK_SCRIPT_HASH, P2PKH_LOCK_SCRIPT_HASH
from codechain_sdk.errors.core_errors import (
    MalformedInputError,
    NetworkMismatchError,
    UnknownAddressTypeError,
)

ADDRESS_VERSION = 0
NETWORK_ID_LENGTH = 2

_PLATFORM_KIND = "c"
_ASSET_TRANSFER_KIND = "a"
_CHECKSUM_LENGTH = 6


class AssetTransferAddressType(enum.IntEnum):
    """Payload interpretations of an asset transfer address."""

    LOCK_SCRIPT_HASH = 0
    P2PKH = 1
    P2PKH_BURN = 2


# ---------------------------------------------------------------------------
# Bech32 framing (no separator)
# ---------------------------------------------------------------------------


def check_network_id(network_id: str) -> str:
    """Validate a two-character lowercase network id."""
    if (
        not isinstance(network_id, str)
        or len(network_id) != NETWORK_ID_LENGTH
        or not network_id.isascii()
        or network_id != network_id.lower()
    ):
        msg = f"network id must be {NETWORK_ID_LENGTH} lowercase ASCII characters: {network_id!r}"
        raise MalformedInputError(msg)
    return network_id


def _encode(prefix: str, payload: bytes) -> str:
    words = convertbits(list(payload), 8, 5, True)
    checksum = bech32_create_checksum(prefix, words)
    return prefix + "".join(CHARSET[w] for w in words + checksum)


def _decode(address: str) -> tuple[str, str, bytes]:
    """Split *address* into (network id, kind, payload), verifying the checksum."""
    if not isinstance(address, str):
        msg = f"address must be a string, got {type(address).__name__}"
        raise MalformedInputError(msg)
    if address != address.lower():
        msg = f"address must be lowercase: {address}"
        raise MalformedInputError(msg)
    prefix_length = NETWORK_ID_LENGTH + 1
    if len(address) < prefix_length + _CHECKSUM_LENGTH:
        msg = f"address too short: {address}"
        raise MalformedInputError(msg)
    prefix, body = address[:prefix_length], address[prefix_length:]
    if any(c not in CHARSET for c in body):
        msg = f"address contains invalid characters: {address}"
        raise MalformedInputError(msg)
    words = [CHARSET.find(c) for c in body]
    if not bech32_verify_checksum(prefix, words):
        msg = f"address checksum mismatch: {address}"
        raise MalformedInputError(msg)
    data = convertbits(words[:-_CHECKSUM_LENGTH], 5, 8, False)
    if data is None:
        msg = f"address has invalid padding: {address}"
        raise MalformedInputError(msg)
    return prefix[:NETWORK_ID_LENGTH], prefix[NETWORK_ID_LENGTH], bytes(data)


def _check_network(network_id: str, expected: str | None) -> None:
    if expected is not None and network_id != expected:
        msg = f"address is for network {network_id!r}, expected {expected!r}"
        raise NetworkMismatchError(msg, expected=expected, actual=network_id)


# ---------------------------------------------------------------------------
# Platform address
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PlatformAddress:
    """An account address: the 20-byte account id tagged with a network.

    Attributes:
        account_id: 20-byte account id.
        network_id: Two-character network id.
        value: The encoded address string.
    """

    account_id: bytes
    network_id: str
    value: str

    @classmethod
    def from_account_id(cls, account_id: bytes, *, network_id: str = "tc") -> PlatformAddress:
        """Encode an account id as a platform address."""
        check_network_id(network_id)
        if len(account_id) != ACCOUNT_ID_SIZE:
            msg = f"account id must be {ACCOUNT_ID_SIZE} bytes, got {len(account_id)}"
            raise MalformedInputError(msg)
        value = _encode(network_id + _PLATFORM_KIND, bytes([ADDRESS_VERSION]) + account_id)
        return cls(account_id=bytes(account_id), network_id=network_id, value=value)

    @classmethod
    def from_string(cls, address: str, *, network_id: str | None = None) -> PlatformAddress:
        """Decode a platform address string.

        Raises:
            MalformedInputError: On bad checksum, kind, version or payload length.
            NetworkMismatchError: If *network_id* is given and differs.
        """
        net, kind, payload = _decode(address)
        if kind != _PLATFORM_KIND:
            msg = f"not a platform address: {address}"
            raise MalformedInputError(msg)
        _check_network(net, network_id)
        if len(payload) != 1 + ACCOUNT_ID_SIZE or payload[0] != ADDRESS_VERSION:
            msg = f"invalid platform address payload: {address}"
            raise MalformedInputError(msg)
        return cls(account_id=payload[1:], network_id=net, value=address)

    @classmethod
    def ensure(cls, address: PlatformAddress | str) -> PlatformAddress:
        """Accept either an address object or its string form."""
        if isinstance(address, PlatformAddress):
            return address
        return cls.from_string(address)

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Asset transfer address
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AssetTransferAddress:
    """An address naming the lock condition new asset outputs are sent to.

    Attributes:
        address_type: How to interpret *payload*.
        payload: Lock script hash (type 0) or 32-byte public key hash (types 1 and 2).
        network_id: Two-character network id.
        value: The encoded address string.
    """

    address_type: AssetTransferAddressType
    payload: bytes
    network_id: str
    value: str

    @classmethod
    def from_type_and_payload(
        cls,
        address_type: int,
        payload: bytes,
        *,
        network_id: str = "tc",
    ) -> AssetTransferAddress:
        """Encode a typed payload as an asset transfer address."""
        check_network_id(network_id)
        kind = _address_type(address_type)
        _check_payload(kind, payload)
        data = bytes([ADDRESS_VERSION, kind]) + payload
        value = _encode(network_id + _ASSET_TRANSFER_KIND, data)
        return cls(address_type=kind, payload=bytes(payload), network_id=network_id, value=value)

    @classmethod
    def from_lock_script_hash_and_parameters(
        cls,
        lock_script_hash: bytes,
        parameters: tuple[bytes, ...] | list[bytes],
        *,
        network_id: str = "tc",
    ) -> AssetTransferAddress:
        """Pick the address type that reproduces (lock script hash, parameters)."""
        parameters = tuple(parameters)
        if len(parameters) == 0:
            return cls.from_type_and_payload(
                AssetTransferAddressType.LOCK_SCRIPT_HASH, lock_script_hash, network_id=network_id
            )
        if len(parameters) == 1 and len(parameters[0]) == HASH_SIZE:
            if lock_script_hash == P2PKH_LOCK_SCRIPT_HASH:
                return cls.from_type_and_payload(
                    AssetTransferAddressType.P2PKH, parameters[0], network_id=network_id
                )
            if lock_script_hash == P2PKH_BURN_LOCK_SCRIPT_HASH:
                return cls.from_type_and_payload(
                    AssetTransferAddressType.P2PKH_BURN, parameters[0], network_id=network_id
                )
        msg = "lock script hash and parameters have no address representation"
        raise MalformedInputError(msg)

    @classmethod
    def from_string(cls, address: str, *, network_id: str | None = None) -> AssetTransferAddress:
        """Decode an asset transfer address string.

        Raises:
            MalformedInputError: On bad checksum, kind, version or payload length.
            NetworkMismatchError: If *network_id* is given and differs.
            UnknownAddressTypeError: If the type tag is not recognized.
        """
        net, kind, data = _decode(address)
        if kind != _ASSET_TRANSFER_KIND:
            msg = f"not an asset transfer address: {address}"
            raise MalformedInputError(msg)
        _check_network(net, network_id)
        if len(data) < 2 or data[0] != ADDRESS_VERSION:
            msg = f"invalid asset transfer address payload: {address}"
            raise MalformedInputError(msg)
        address_type = _address_type(data[1])
        payload = data[2:]
        _check_payload(address_type, payload)
        return cls(address_type=address_type, payload=payload, network_id=net, value=address)

    @classmethod
    def ensure(cls, address: AssetTransferAddress | str) -> AssetTransferAddress:
        """Accept either an address object or its string form."""
        if isinstance(address, AssetTransferAddress):
            return address
        return cls.from_string(address)

    def get_lock_script_hash_and_parameters(self) -> tuple[bytes, tuple[bytes, ...]]:
        """Rebuild the (lock script hash, parameters) spend condition."""
        if self.address_type == AssetTransferAddressType.LOCK_SCRIPT_HASH:
            return self.payload, ()
        if self.address_type == AssetTransferAddressType.P2PKH:
            return P2PKH_LOCK_SCRIPT_HASH, (self.payload,)
        return P2PKH_BURN_LOCK_SCRIPT_HASH, (self.payload,)

    def __str__(self) -> str:
        return self.value


def _address_type(value: int) -> AssetTransferAddressType:
    try:
        return AssetTransferAddressType(value)
    except ValueError as exc:
        msg = f"unknown asset transfer address type: {value}"
        raise UnknownAddressTypeError(msg, address_type=value) from exc


def _check_payload(address_type: AssetTransferAddressType, payload: bytes) -> None:
    if len(payload) != HASH_SIZE:
        msg = f"address type {int(address_type)} needs a {HASH_SIZE}-byte payload, got {len(payload)}"
        raise MalformedInputError(msg)


# ---------------------------------------------------------------------------
# Codec entry points
# ---------------------------------------------------------------------------


def resolve(
    address: AssetTransferAddress | str,
    *,
    network_id: str | None = None,
) -> tuple[bytes, tuple[bytes, ...]]:
    """Resolve an asset transfer address to its (lock script hash, parameters)."""
    if isinstance(address, AssetTransferAddress):
        _check_network(address.network_id, network_id)
        return address.get_lock_script_hash_and_parameters()
    parsed = AssetTransferAddress.from_string(address, network_id=network_id)
    return parsed.get_lock_script_hash_and_parameters()


def format_address(
    lock_script_hash: bytes,
    parameters: tuple[bytes, ...] | list[bytes],
    network_id: str,
) -> str:
    """Format a spend condition as an asset transfer address string."""
    return AssetTransferAddress.from_lock_script_hash_and_parameters(
        lock_script_hash, parameters, network_id=network_id
    ).value
