"""Signing and signer recovery for parcels.

Signing takes the hash of the unsigned parcel encoding and produces a
recoverable signature; recovery goes the other way and yields the account id
of whoever signed. Keys are supplied either directly or through a
:class:`~codechain_sdk.key.key_store.KeyStore`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codechain_sdk.core.keys import (
    EcdsaSignature,
    account_id_from_public_key,
    recover_ecdsa,
    sign_ecdsa,
)
from codechain_sdk.core.parcel import Parcel, SignedParcel
from codechain_sdk.errors.core_errors import AuthorizationError

if TYPE_CHECKING:
    from codechain_sdk.key.key_store import KeyStore

logger = logging.getLogger(__name__)


def sign_parcel(parcel: Parcel, private_key: bytes) -> EcdsaSignature:
    """Sign the hash of *parcel*'s unsigned encoding."""
    return sign_ecdsa(parcel.hash(), private_key)


def to_signed_parcel(
    parcel: Parcel,
    signature: EcdsaSignature,
    *,
    block_number: int | None = None,
    block_hash: bytes | None = None,
    parcel_index: int | None = None,
) -> SignedParcel:
    """Attach a signature and optional block placement to *parcel*."""
    return SignedParcel.from_signature(
        parcel,
        signature,
        block_number=block_number,
        block_hash=block_hash,
        parcel_index=parcel_index,
    )


async def sign_parcel_with_key_store(
    parcel: Parcel,
    key_store: KeyStore,
    public_key: bytes,
) -> SignedParcel:
    """Sign *parcel* with a key held by *key_store*.

    Raises:
        KeyNotFoundError: If the store does not hold *public_key*.
        AuthorizationError: If the returned signature does not recover to
            *public_key*.
    """
    message = parcel.hash()
    signature = EcdsaSignature.from_bytes(await key_store.sign(public_key, message))
    if recover_ecdsa(message, signature) != public_key:
        msg = "key store returned a signature for a different key"
        raise AuthorizationError(msg, reason="signer-mismatch")
    logger.debug("Signed parcel via key store nonce=%s", parcel.nonce)
    return SignedParcel.from_signature(parcel, signature)


def recover_signer_public_key(signed: SignedParcel) -> bytes:
    return recover_ecdsa(signed.unsigned.hash(), signed.signature())


def recover_signer_account_id(signed: SignedParcel) -> bytes:
    """Account id of the key that signed *signed*: ``hash160(hash256(pub))``."""
    return account_id_from_public_key(recover_signer_public_key(signed))
