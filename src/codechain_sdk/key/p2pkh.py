"""Standard pay-to-public-key-hash authorizers.

:class:`P2PKH` creates addresses whose outputs are spendable by a key in the
store, and fills in the lock/unlock scripts of inputs spending them.
:class:`P2PKHBurn` does the same for outputs that can only be burnt.
"""

from __future__ import annotations

import logging

from codechain_sdk.core.address import AssetTransferAddress, AssetTransferAddressType
from codechain_sdk.core.keys import HASH_SIZE, public_key_hash
from codechain_sdk.core.script import (
    P2PKH_BURN_LOCK_SCRIPT_HASH,
    P2PKH_LOCK_SCRIPT_HASH,
    p2pkh_burn_lock_script,
    p2pkh_lock_script,
    p2pkh_unlock_script,
)
from codechain_sdk.core.transaction import AssetTransferInput, AssetTransferTransaction
from codechain_sdk.errors.core_errors import (
    AuthorizationError,
    KeyNotFoundError,
    MalformedInputError,
)
from codechain_sdk.key.key_store import KeyStore
from codechain_sdk.utils.encoding import to_hex

logger = logging.getLogger(__name__)


class P2PKH:
    """Authorizer for P2PKH outputs backed by a :class:`KeyStore`."""

    address_type = AssetTransferAddressType.P2PKH

    def __init__(self, key_store: KeyStore, network_id: str = "tc") -> None:
        self.key_store = key_store
        self.network_id = network_id

    @staticmethod
    def lock_script() -> bytes:
        return p2pkh_lock_script()

    @staticmethod
    def lock_script_hash() -> bytes:
        return P2PKH_LOCK_SCRIPT_HASH

    async def create_address(self) -> AssetTransferAddress:
        """Create a fresh key and return the address that locks to it."""
        public_key = await self.key_store.create_key()
        return AssetTransferAddress.from_type_and_payload(
            self.address_type,
            public_key_hash(public_key),
            network_id=self.network_id,
        )

    async def sign_input(self, transaction: AssetTransferTransaction, index: int) -> None:
        """Populate the scripts of input *index* so it spends its prevOut.

        Raises:
            MalformedInputError: If *index* is out of range or the prevOut does
                not carry exactly one parameter.
            AuthorizationError: If the prevOut is not locked by this script.
            KeyNotFoundError: If the key store does not hold the owner's key.
        """
        await self._sign(transaction, transaction.inputs, index)

    async def _sign(
        self,
        transaction: AssetTransferTransaction,
        entries: list[AssetTransferInput],
        index: int,
    ) -> None:
        if not 0 <= index < len(entries):
            msg = f"input index {index} out of range for {len(entries)} entries"
            raise MalformedInputError(msg)
        entry = entries[index]
        if entry.lock_script or entry.unlock_script:
            msg = f"input {index} already carries scripts"
            raise MalformedInputError(msg)
        prev_out = entry.prev_out
        if prev_out.lock_script_hash != self.lock_script_hash():
            msg = f"input {index} is not locked by this script"
            raise AuthorizationError(msg, reason="lock-script-hash-mismatch")
        if prev_out.parameters is None or len(prev_out.parameters) != 1:
            count = 0 if prev_out.parameters is None else len(prev_out.parameters)
            msg = f"input {index} must carry exactly 1 parameter, got {count}"
            raise MalformedInputError(msg)
        key_hash = prev_out.parameters[0]
        if len(key_hash) != HASH_SIZE:
            msg = f"public key hash must be {HASH_SIZE} bytes, got {len(key_hash)}"
            raise MalformedInputError(msg)
        public_key = await self.key_store.get_public_key(key_hash)
        if public_key is None:
            msg = f"no key for public key hash {to_hex(key_hash)}"
            raise KeyNotFoundError(msg)

        signature = await self.key_store.sign(public_key, transaction.hash_without_script())
        unlock_script = p2pkh_unlock_script(signature, public_key)
        # both scripts are assigned only after signing succeeded
        entry.set_lock_script(self.lock_script())
        entry.set_unlock_script(unlock_script)
        logger.debug("Signed input %d for %s", index, to_hex(key_hash))


class P2PKHBurn(P2PKH):
    """Authorizer for outputs that may only be spent by burning them."""

    address_type = AssetTransferAddressType.P2PKH_BURN

    @staticmethod
    def lock_script() -> bytes:
        return p2pkh_burn_lock_script()

    @staticmethod
    def lock_script_hash() -> bytes:
        return P2PKH_BURN_LOCK_SCRIPT_HASH

    async def sign_input(self, transaction: AssetTransferTransaction, index: int) -> None:
        msg = "burn outputs can only be spent as burns; use sign_burn"
        raise AuthorizationError(msg, reason="burn-only")

    async def sign_burn(self, transaction: AssetTransferTransaction, index: int) -> None:
        """Populate the scripts of burn *index*; see :meth:`P2PKH.sign_input`."""
        await self._sign(transaction, transaction.burns, index)
