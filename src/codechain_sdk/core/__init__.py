"""Core data model — parcels, asset transactions, addresses and scripts."""

from codechain_sdk.core.action import (
    ChangeShardState,
    CreateShard,
    Payment,
    SetRegularKey,
    SetShardOwners,
    SetShardUsers,
)
from codechain_sdk.core.address import AssetTransferAddress, PlatformAddress
from codechain_sdk.core.asset import Asset, AssetScheme, Recipient
from codechain_sdk.core.keys import EcdsaSignature
from codechain_sdk.core.parcel import Parcel, SignedParcel
from codechain_sdk.core.script import ScriptOutcome, ScriptResult
from codechain_sdk.core.transaction import (
    AssetMintOutput,
    AssetMintTransaction,
    AssetOutPoint,
    AssetTransferInput,
    AssetTransferOutput,
    AssetTransferTransaction,
)

__all__ = [
    "Asset",
    "AssetMintOutput",
    "AssetMintTransaction",
    "AssetOutPoint",
    "AssetScheme",
    "AssetTransferAddress",
    "AssetTransferInput",
    "AssetTransferOutput",
    "AssetTransferTransaction",
    "ChangeShardState",
    "CreateShard",
    "EcdsaSignature",
    "Parcel",
    "Payment",
    "PlatformAddress",
    "Recipient",
    "ScriptOutcome",
    "ScriptResult",
    "SetRegularKey",
    "SetShardOwners",
    "SetShardUsers",
    "SignedParcel",
]
