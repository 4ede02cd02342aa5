"""SDKError — base exception class for all codechain-sdk errors."""

from __future__ import annotations


class SDKError(Exception):
    """Base error for all SDK operations.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code string.
    """

    def __init__(self, message: str, *, code: str = "sdk-error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code
