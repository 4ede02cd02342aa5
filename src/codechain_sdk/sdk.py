"""SDK entry point: parcel/transaction builders and key helpers bound to one config."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codechain_sdk.config.settings import SDKConfig
from codechain_sdk.core import keys
from codechain_sdk.core.address import AssetTransferAddress, PlatformAddress
from codechain_sdk.core.asset import Asset, Recipient
from codechain_sdk.core.parcel import Parcel
from codechain_sdk.core.script import ScriptOutcome, authorize_input, verify_transaction
from codechain_sdk.core.transaction import (
    AssetMintOutput,
    AssetMintTransaction,
    AssetTransaction,
    AssetTransferTransaction,
)
from codechain_sdk.key.key_store import KeyStore, MemoryKeyStore
from codechain_sdk.key.p2pkh import P2PKH, P2PKHBurn
from codechain_sdk.utils import crypto

if TYPE_CHECKING:
    from codechain_sdk.core.keys import EcdsaSignature

logger = logging.getLogger(__name__)


class Core:
    """Builders that fill in the configured network id and default fee."""

    def __init__(self, config: SDKConfig) -> None:
        self._config = config

    @property
    def network_id(self) -> str:
        return self._config.network_id

    def _fee(self, fee: int | None) -> int:
        return self._config.parcel_fee if fee is None else fee

    # -- parcels ------------------------------------------------------------

    def create_payment_parcel(
        self,
        recipient: PlatformAddress | str | bytes,
        amount: int,
        *,
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        return Parcel.payment(
            recipient, amount, network_id=self.network_id, nonce=nonce, fee=self._fee(fee)
        )

    def create_set_regular_key_parcel(
        self, key: bytes, *, nonce: int | None = None, fee: int | None = None
    ) -> Parcel:
        return Parcel.set_regular_key(key, network_id=self.network_id, nonce=nonce, fee=self._fee(fee))

    def create_create_shard_parcel(self, *, nonce: int | None = None, fee: int | None = None) -> Parcel:
        return Parcel.create_shard(network_id=self.network_id, nonce=nonce, fee=self._fee(fee))

    def create_set_shard_owners_parcel(
        self,
        shard_id: int,
        owners: list[PlatformAddress | str],
        *,
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        return Parcel.set_shard_owners(
            shard_id, owners, network_id=self.network_id, nonce=nonce, fee=self._fee(fee)
        )

    def create_set_shard_users_parcel(
        self,
        shard_id: int,
        users: list[PlatformAddress | str],
        *,
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        return Parcel.set_shard_users(
            shard_id, users, network_id=self.network_id, nonce=nonce, fee=self._fee(fee)
        )

    def create_change_shard_state_parcel(
        self,
        transactions: list[AssetTransaction],
        *,
        nonce: int | None = None,
        fee: int | None = None,
    ) -> Parcel:
        return Parcel.change_shard_state(
            transactions, network_id=self.network_id, nonce=nonce, fee=self._fee(fee)
        )

    # -- asset transactions -------------------------------------------------

    def create_asset_mint_transaction(
        self,
        recipient: AssetTransferAddress | str,
        metadata: str,
        *,
        shard_id: int = 0,
        world_id: int = 0,
        amount: int | None = None,
        registrar: PlatformAddress | str | None = None,
        nonce: int = 0,
    ) -> AssetMintTransaction:
        """Mint a new asset type whose first output goes to *recipient*."""
        address = AssetTransferAddress.ensure(recipient)
        lock_script_hash, parameters = address.get_lock_script_hash_and_parameters()
        return AssetMintTransaction(
            network_id=self.network_id,
            shard_id=shard_id,
            world_id=world_id,
            metadata=metadata,
            output=AssetMintOutput(lock_script_hash, parameters, amount),
            registrar=None if registrar is None else PlatformAddress.ensure(registrar),
            nonce=nonce,
        )

    def create_asset_transfer_transaction(self, *, nonce: int = 0) -> AssetTransferTransaction:
        """An empty transfer to be filled with ``add_input``/``add_burn``/``add_output``."""
        return AssetTransferTransaction(network_id=self.network_id, nonce=nonce)

    def create_transfer_from_asset(
        self, asset: Asset, recipients: list[Recipient], *, nonce: int = 0
    ) -> AssetTransferTransaction:
        return asset.create_transfer_transaction(recipients, nonce=nonce, network_id=self.network_id)

    # -- authorization ------------------------------------------------------

    def authorize_input(
        self, transaction: AssetTransferTransaction, index: int, *, burn: bool = False
    ) -> ScriptOutcome:
        return authorize_input(transaction, index, burn=burn, config=self._config.script)

    def verify_transaction(self, transaction: AssetTransferTransaction) -> None:
        verify_transaction(transaction, config=self._config.script)


class KeyFactory:
    """Authorizers bound to a key store and the configured network."""

    def __init__(self, key_store: KeyStore, config: SDKConfig) -> None:
        self.key_store = key_store
        self._config = config

    def create_p2pkh(self) -> P2PKH:
        return P2PKH(self.key_store, self._config.network_id)

    def create_p2pkh_burn(self) -> P2PKHBurn:
        return P2PKHBurn(self.key_store, self._config.network_id)


class Util:
    """Hash and key primitives, re-exported for convenience."""

    hash256 = staticmethod(crypto.hash256)
    hash256_with_key = staticmethod(crypto.hash256_with_key)
    ripemd160 = staticmethod(crypto.ripemd160)
    hash160 = staticmethod(crypto.hash160)
    generate_private_key = staticmethod(keys.generate_private_key)
    get_public_key_from_private_key = staticmethod(keys.private_key_to_public_key)
    get_account_id_from_public_key = staticmethod(keys.account_id_from_public_key)
    get_account_id_from_private_key = staticmethod(keys.account_id_from_private_key)
    sign_ecdsa = staticmethod(keys.sign_ecdsa)
    verify_ecdsa = staticmethod(keys.verify_ecdsa)
    recover_ecdsa = staticmethod(keys.recover_ecdsa)

    @staticmethod
    def signature_to_string(signature: EcdsaSignature) -> str:
        return signature.to_string()


class SDK:
    """Top-level handle exposing ``core``, ``key`` and ``util``.

    Example::

        sdk = SDK(SDKConfig(network_id="tc"))
        parcel = sdk.core.create_payment_parcel(address, 33, nonce=11, fee=44)
        signed = parcel.sign(secret)
    """

    def __init__(self, config: SDKConfig | None = None, key_store: KeyStore | None = None) -> None:
        self.config = config or SDKConfig()
        self.core = Core(self.config)
        self.key = KeyFactory(key_store or MemoryKeyStore(), self.config)
        self.util = Util()
        logger.debug("SDK initialized for network %s", self.config.network_id)
