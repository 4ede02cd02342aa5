"""Tests for error classes."""

from __future__ import annotations

import pytest

from codechain_sdk.errors.core_errors import (
    AuthorizationError,
    KeyNotFoundError,
    MalformedInputError,
    MissingRequiredFieldError,
    NetworkMismatchError,
    UnknownAddressTypeError,
)
from codechain_sdk.errors.sdk_errors import SDKError

# ---------------------------------------------------------------------------
# SDKError base class
# ---------------------------------------------------------------------------


class TestSDKError:
    def test_default_attributes(self) -> None:
        err = SDKError("something broke")
        assert str(err) == "something broke"
        assert err.message == "something broke"
        assert err.code == "sdk-error"

    def test_custom_code(self) -> None:
        assert SDKError("bad", code="bad-input").code == "bad-input"

    def test_is_exception(self) -> None:
        with pytest.raises(SDKError, match="boom"):
            raise SDKError("boom")


# ---------------------------------------------------------------------------
# Core errors
# ---------------------------------------------------------------------------


class TestCoreErrors:
    @pytest.mark.parametrize(
        ("cls", "code"),
        [
            (MalformedInputError, "malformed-input"),
            (MissingRequiredFieldError, "missing-required-field"),
            (UnknownAddressTypeError, "unknown-address-type"),
            (NetworkMismatchError, "network-mismatch"),
            (AuthorizationError, "authorization-failure"),
            (KeyNotFoundError, "key-not-found"),
        ],
    )
    def test_codes(self, cls: type[SDKError], code: str) -> None:
        err = cls("failed")
        assert isinstance(err, SDKError)
        assert err.code == code
        assert err.message == "failed"

    def test_malformed_input_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            raise MalformedInputError("bad length")

    def test_missing_field(self) -> None:
        assert MissingRequiredFieldError("no fee", field="fee").field == "fee"

    def test_unknown_address_type(self) -> None:
        assert UnknownAddressTypeError("type 7", address_type=7).address_type == 7

    def test_network_mismatch(self) -> None:
        err = NetworkMismatchError("wrong network", expected="tc", actual="cc")
        assert (err.expected, err.actual) == ("tc", "cc")

    def test_authorization_reason_defaults_to_message(self) -> None:
        assert AuthorizationError("input 0 failed").reason == "input 0 failed"
        assert AuthorizationError("input 0 failed", reason="sig").reason == "sig"
