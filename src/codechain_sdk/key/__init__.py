"""Key stores and the P2PKH authorizers that use them."""

from codechain_sdk.key.key_store import KeyStore, MemoryKeyStore
from codechain_sdk.key.p2pkh import P2PKH, P2PKHBurn

__all__ = ["KeyStore", "MemoryKeyStore", "P2PKH", "P2PKHBurn"]
