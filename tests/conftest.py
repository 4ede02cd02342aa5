"""Shared test fixtures for the codechain-sdk test suite."""

from __future__ import annotations

import pytest

from codechain_sdk.config.settings import SDKConfig
from codechain_sdk.core.keys import account_id_from_public_key, private_key_to_public_key
from codechain_sdk.key.key_store import MemoryKeyStore

# Fixed secret used throughout the parcel signing examples
SECRET_HEX = "ede1d4ccb4ec9a8bbbae9a13db3f4a7b56ea04189be86ac3a6a439d9a0a1addd"


@pytest.fixture
def secret() -> bytes:
    return bytes.fromhex(SECRET_HEX)


@pytest.fixture
def public_key(secret: bytes) -> bytes:
    return private_key_to_public_key(secret)


@pytest.fixture
def account_id(public_key: bytes) -> bytes:
    return account_id_from_public_key(public_key)


@pytest.fixture
def sdk_config(monkeypatch: pytest.MonkeyPatch) -> SDKConfig:
    """Provide an SDKConfig isolated from CODECHAIN_* environment variables."""
    import os

    for name in list(os.environ):
        if name.startswith("CODECHAIN_"):
            monkeypatch.delenv(name)
    return SDKConfig(network_id="tc", parcel_fee=10)


@pytest.fixture
def key_store() -> MemoryKeyStore:
    return MemoryKeyStore()
