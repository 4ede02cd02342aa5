"""ECDSA keys and signatures on secp256k1 — signing, verification, recovery.

- Private keys are 32-byte scalars, public keys the 64-byte raw ``x || y`` encoding
- Signatures carry a recovery id ``v`` so the signer's key can be recovered
- Account ids are ``hash160(hash256(public_key))``
- 65-byte signature strings: ``0x || r(32) || s(32) || v(1)`` in hex

Malleability policy: :func:`sign_ecdsa` always produces low-s signatures
(``s <= n/2``); :func:`verify_ecdsa` accepts both ``s`` and ``n - s``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from ecdsa import SECP256k1, BadSignatureError, SigningKey, VerifyingKey
from ecdsa.keys import MalformedPointError
from ecdsa.numbertheory import SquareRootError
from ecdsa.util import sigdecode_string, sigencode_string

from codechain_sdk.errors.core_errors import MalformedInputError
from codechain_sdk.utils.crypto import hash160, hash256

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CURVE = SECP256k1
CURVE_ORDER = _CURVE.order
_HALF_ORDER = CURVE_ORDER // 2

PRIVATE_KEY_SIZE = 32
PUBLIC_KEY_SIZE = 64
ACCOUNT_ID_SIZE = 20
HASH_SIZE = 32

# r(32) || s(32) || v(1)
SCALAR_SIZE = 32
RECOVERY_ID_SIZE = 1
SIGNATURE_SIZE = 2 * SCALAR_SIZE + RECOVERY_ID_SIZE


# ---------------------------------------------------------------------------
# Signature string helpers
# ---------------------------------------------------------------------------


def pad_hex(value: int, width: int) -> str:
    """Render *value* as hex zero-padded to *width* bytes."""
    if value < 0 or value.bit_length() > width * 8:
        msg = f"value does not fit in {width} bytes"
        raise MalformedInputError(msg)
    return format(value, "x").zfill(width * 2)


def strip_hex_prefix(value: str) -> str:
    """Drop a leading ``0x`` marker if present."""
    return value[2:] if value.startswith(("0x", "0X")) else value


def signature_to_string(
    r: int,
    s: int,
    v: int,
    *,
    scalar_size: int = SCALAR_SIZE,
    recovery_id_size: int = RECOVERY_ID_SIZE,
) -> str:
    """Render (r, s, v) as the ``0x``-prefixed fixed-width signature string."""
    return (
        "0x"
        + pad_hex(r, scalar_size)
        + pad_hex(s, scalar_size)
        + pad_hex(v, recovery_id_size)
    )


def signature_from_string(
    signature: str,
    *,
    scalar_size: int = SCALAR_SIZE,
    recovery_id_size: int = RECOVERY_ID_SIZE,
) -> tuple[int, int, int]:
    """Parse a fixed-width signature string back to (r, s, v).

    Raises:
        MalformedInputError: If the string is not exactly
            ``2 * scalar_size + recovery_id_size`` bytes of hex.
    """
    if not isinstance(signature, str):
        msg = f"signature must be a string, got {type(signature).__name__}"
        raise MalformedInputError(msg)
    body = strip_hex_prefix(signature)
    expected = (2 * scalar_size + recovery_id_size) * 2
    if len(body) != expected:
        msg = f"signature must be {expected // 2} bytes, got {len(body) / 2:g}"
        raise MalformedInputError(msg)
    try:
        raw = bytes.fromhex(body)
    except ValueError as exc:
        msg = f"signature is not valid hex: {signature}"
        raise MalformedInputError(msg) from exc
    r = int.from_bytes(raw[:scalar_size], "big")
    s = int.from_bytes(raw[scalar_size : 2 * scalar_size], "big")
    v = int.from_bytes(raw[2 * scalar_size :], "big")
    return r, s, v


@dataclass(frozen=True, slots=True)
class EcdsaSignature:
    """A recoverable ECDSA signature.

    Attributes:
        r: First signature scalar.
        s: Second signature scalar.
        v: Recovery id (0 or 1).
    """

    r: int
    s: int
    v: int

    def to_bytes(self) -> bytes:
        """Serialize to 65 bytes: r(32) || s(32) || v(1)."""
        return bytes.fromhex(strip_hex_prefix(self.to_string()))

    @classmethod
    def from_bytes(cls, data: bytes) -> EcdsaSignature:
        """Parse a 65-byte ``r || s || v`` signature."""
        if len(data) != SIGNATURE_SIZE:
            msg = f"signature must be {SIGNATURE_SIZE} bytes, got {len(data)}"
            raise MalformedInputError(msg)
        return cls(
            r=int.from_bytes(data[:SCALAR_SIZE], "big"),
            s=int.from_bytes(data[SCALAR_SIZE : 2 * SCALAR_SIZE], "big"),
            v=data[-1],
        )

    def to_string(self) -> str:
        """Render as the ``0x``-prefixed 65-byte hex signature string."""
        return signature_to_string(self.r, self.s, self.v)

    @classmethod
    def from_string(cls, signature: str) -> EcdsaSignature:
        """Parse a ``0x``-prefixed 65-byte hex signature string."""
        r, s, v = signature_from_string(signature)
        return cls(r=r, s=s, v=v)

    @property
    def is_low_s(self) -> bool:
        """True if ``s`` is in the lower half of the curve order."""
        return self.s <= _HALF_ORDER

    def complement(self) -> EcdsaSignature:
        """The malleated twin ``(r, n - s, v ^ 1)`` — valid for the same key."""
        return EcdsaSignature(r=self.r, s=CURVE_ORDER - self.s, v=self.v ^ 1)


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


def _check_private_key(private_key: bytes) -> None:
    if len(private_key) != PRIVATE_KEY_SIZE:
        msg = f"private key must be {PRIVATE_KEY_SIZE} bytes, got {len(private_key)}"
        raise MalformedInputError(msg)
    if not 0 < int.from_bytes(private_key, "big") < CURVE_ORDER:
        msg = "private key is out of range for secp256k1"
        raise MalformedInputError(msg)


def _check_hash(message_hash: bytes) -> None:
    if len(message_hash) != HASH_SIZE:
        msg = f"message hash must be {HASH_SIZE} bytes, got {len(message_hash)}"
        raise MalformedInputError(msg)


def _verifying_key(public_key: bytes) -> VerifyingKey:
    if len(public_key) != PUBLIC_KEY_SIZE:
        msg = f"public key must be {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}"
        raise MalformedInputError(msg)
    try:
        return VerifyingKey.from_string(public_key, curve=_CURVE)
    except MalformedPointError as exc:
        msg = "public key is not a point on secp256k1"
        raise MalformedInputError(msg) from exc


def generate_private_key() -> bytes:
    """Generate a fresh random 32-byte private key."""
    return SigningKey.generate(curve=_CURVE).to_string()


def private_key_to_public_key(private_key: bytes) -> bytes:
    """Derive the 64-byte raw public key from a 32-byte private key."""
    _check_private_key(private_key)
    sk = SigningKey.from_string(private_key, curve=_CURVE)
    return sk.get_verifying_key().to_string()


def public_key_hash(public_key: bytes) -> bytes:
    """32-byte ``hash256(public_key)``; the parameter of P2PKH outputs."""
    if len(public_key) != PUBLIC_KEY_SIZE:
        msg = f"public key must be {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}"
        raise MalformedInputError(msg)
    return hash256(public_key)


def account_id_from_public_key(public_key: bytes) -> bytes:
    """Derive the 20-byte account id: ``hash160(hash256(public_key))``."""
    return hash160(public_key_hash(public_key))


def account_id_from_private_key(private_key: bytes) -> bytes:
    """Derive the 20-byte account id of the key pair owning *private_key*."""
    return account_id_from_public_key(private_key_to_public_key(private_key))


# ---------------------------------------------------------------------------
# ECDSA
# ---------------------------------------------------------------------------


def sign_ecdsa(message_hash: bytes, private_key: bytes) -> EcdsaSignature:
    """Sign a 32-byte hash, returning a low-s recoverable signature.

    Uses RFC 6979 deterministic nonces, so the same inputs always give the
    same signature.
    """
    _check_hash(message_hash)
    _check_private_key(private_key)
    sk = SigningKey.from_string(private_key, curve=_CURVE)
    r, s = sk.sign_digest_deterministic(
        message_hash,
        hashfunc=hashlib.sha256,
        sigencode=lambda r, s, order: (r, s),
    )
    if s > _HALF_ORDER:
        s = CURVE_ORDER - s
    public_key = sk.get_verifying_key().to_string()
    for v in (0, 1):
        candidate = EcdsaSignature(r=r, s=s, v=v)
        if recover_ecdsa(message_hash, candidate) == public_key:
            return candidate
    msg = "unable to determine recovery id for signature"
    raise MalformedInputError(msg)


def verify_ecdsa(message_hash: bytes, signature: EcdsaSignature, public_key: bytes) -> bool:
    """Verify (r, s) over *message_hash* against *public_key*.

    High-s signatures are accepted; the recovery id is not consulted.
    """
    _check_hash(message_hash)
    vk = _verifying_key(public_key)
    if not (0 < signature.r < CURVE_ORDER and 0 < signature.s < CURVE_ORDER):
        return False
    raw = sigencode_string(signature.r, signature.s, CURVE_ORDER)
    try:
        return vk.verify_digest(raw, message_hash, sigdecode=sigdecode_string)
    except BadSignatureError:
        return False


def recover_ecdsa(message_hash: bytes, signature: EcdsaSignature) -> bytes:
    """Recover the 64-byte public key that produced *signature*.

    Raises:
        MalformedInputError: If r/s are out of range, v is not 0 or 1, or
            no public key can be recovered.
    """
    _check_hash(message_hash)
    if not (0 < signature.r < CURVE_ORDER and 0 < signature.s < CURVE_ORDER):
        msg = "signature scalars are out of range"
        raise MalformedInputError(msg)
    if signature.v not in (0, 1):
        msg = f"recovery id must be 0 or 1, got {signature.v}"
        raise MalformedInputError(msg)
    raw = sigencode_string(signature.r, signature.s, CURVE_ORDER)
    try:
        candidates = VerifyingKey.from_public_key_recovery_with_digest(
            raw,
            message_hash,
            _CURVE,
            hashfunc=hashlib.sha256,
            sigdecode=sigdecode_string,
        )
    except (SquareRootError, MalformedPointError, RuntimeError) as exc:
        msg = "no public key can be recovered from signature"
        raise MalformedInputError(msg) from exc
    if len(candidates) <= signature.v:
        msg = "no public key can be recovered from signature"
        raise MalformedInputError(msg)
    # candidates are ordered by the parity of R.y: even first
    return candidates[signature.v].to_string()
