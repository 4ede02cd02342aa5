"""Typed failures raised by the transaction, signing and authorization core."""

from __future__ import annotations

from codechain_sdk.errors.sdk_errors import SDKError


class MalformedInputError(SDKError, ValueError):
    """A field has the wrong shape or length (signature, hash, parameters...)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="malformed-input")


class MissingRequiredFieldError(SDKError):
    """Encoding or signing was attempted without a required field."""

    def __init__(self, message: str, *, field: str = "") -> None:
        super().__init__(message, code="missing-required-field")
        self.field = field


class UnknownAddressTypeError(SDKError):
    """An address carries a type tag the codec does not understand."""

    def __init__(self, message: str, *, address_type: int | None = None) -> None:
        super().__init__(message, code="unknown-address-type")
        self.address_type = address_type


class NetworkMismatchError(SDKError):
    """An address belongs to a different network than the one expected."""

    def __init__(self, message: str, *, expected: str = "", actual: str = "") -> None:
        super().__init__(message, code="network-mismatch")
        self.expected = expected
        self.actual = actual


class AuthorizationError(SDKError):
    """An unlock proof does not satisfy the lock condition of an output."""

    def __init__(self, message: str, *, reason: str = "") -> None:
        super().__init__(message, code="authorization-failure")
        self.reason = reason or message


class KeyNotFoundError(SDKError):
    """The key store cannot resolve a public key needed for signing."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="key-not-found")
