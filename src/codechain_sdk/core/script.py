"""Lock-script interpreter — opcodes, standard scripts, input authorization.

A spend is authorized by running, on a single value stack:

1. the caller-supplied unlock script (push-only),
2. the output's parameters, pushed in declared order,
3. the lock script whose hash the output recorded.

Evaluation never raises on a malformed or failing program; it returns a
:class:`ScriptOutcome` carrying the failure reason.
"""

from __future__ import annotations

import enum
import hashlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from codechain_sdk.config.settings import ScriptConfig
from codechain_sdk.core.keys import (
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    EcdsaSignature,
    recover_ecdsa,
)
from codechain_sdk.errors.core_errors import AuthorizationError, MalformedInputError
from codechain_sdk.utils.crypto import hash256, ripemd160

if TYPE_CHECKING:
    from codechain_sdk.core.transaction import AssetTransferInput, AssetTransferTransaction

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Opcodes
# ---------------------------------------------------------------------------


class OpCode(int, enum.Enum):
    """The closed opcode vocabulary of the lock-script machine."""

    NOP = 0x00
    BURN = 0x01
    SUCCESS = 0x02
    FAIL = 0x03
    NOT = 0x10
    EQ = 0x11
    JMP = 0x20
    JNZ = 0x21
    JZ = 0x22
    PUSH = 0x30
    POP = 0x31
    PUSHB = 0x32
    DUP = 0x33
    SWAP = 0x34
    COPY = 0x35
    DROP = 0x36
    CHKSIG = 0x80
    BLAKE256 = 0x90
    SHA256 = 0x91
    RIPEMD160 = 0x92


# Opcodes followed by a single-byte operand
_BYTE_OPERAND = frozenset(
    {OpCode.JMP, OpCode.JNZ, OpCode.JZ, OpCode.PUSH, OpCode.COPY, OpCode.DROP}
)
_PUSH_ONLY = frozenset({OpCode.PUSH, OpCode.PUSHB})

# Jump distance the standard scripts use to bail out past the end
JUMP_TO_FAIL = 0xFF

TRUE = b"\x01"
FALSE = b""


class ScriptResult(enum.StrEnum):
    """Final state of an evaluation."""

    UNLOCKED = "unlocked"
    BURNT = "burnt"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class Instruction:
    """A decoded instruction and its operand (if any)."""

    opcode: OpCode
    operand: int | bytes | None = None


@dataclass(frozen=True, slots=True)
class ScriptOutcome:
    """Result of evaluating an unlock/lock script pair.

    Attributes:
        result: UNLOCKED, BURNT or FAIL.
        reason: Why evaluation failed (empty on success).
        steps: Number of instructions executed.
    """

    result: ScriptResult
    reason: str = ""
    steps: int = 0

    @property
    def ok(self) -> bool:
        return self.result != ScriptResult.FAIL


class _Abort(Exception):
    """Internal signal: stop evaluation with a failure reason."""


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_script(script: bytes) -> list[Instruction]:
    """Decode raw script bytes into instructions.

    Raises:
        MalformedInputError: On unknown opcodes or truncated operands.
    """
    instructions: list[Instruction] = []
    i = 0
    while i < len(script):
        try:
            opcode = OpCode(script[i])
        except ValueError as exc:
            msg = f"unknown opcode {script[i]:#04x} at offset {i}"
            raise MalformedInputError(msg) from exc
        i += 1
        if opcode == OpCode.PUSHB:
            if i >= len(script):
                msg = "PUSHB is missing its length"
                raise MalformedInputError(msg)
            length = script[i]
            data = script[i + 1 : i + 1 + length]
            if len(data) != length:
                msg = f"PUSHB wants {length} bytes, only {len(data)} remain"
                raise MalformedInputError(msg)
            instructions.append(Instruction(opcode, bytes(data)))
            i += 1 + length
        elif opcode in _BYTE_OPERAND:
            if i >= len(script):
                msg = f"{opcode.name} is missing its operand"
                raise MalformedInputError(msg)
            instructions.append(Instruction(opcode, script[i]))
            i += 1
        else:
            instructions.append(Instruction(opcode))
    return instructions


# ---------------------------------------------------------------------------
# Standard scripts
# ---------------------------------------------------------------------------


def p2pkh_lock_script() -> bytes:
    """Pay-to-public-key-hash lock script.

    ``COPY 1, BLAKE256, EQ, JZ 0xFF, CHKSIG``

    The copied public key is hashed and compared with the single output
    parameter, its 32-byte ``hash256``; the final CHKSIG result decides the
    spend.
    """
    return bytes(
        [
            OpCode.COPY, 0x01,
            OpCode.BLAKE256,
            OpCode.EQ,
            OpCode.JZ, JUMP_TO_FAIL,
            OpCode.CHKSIG,
        ]
    )  # fmt: skip


def p2pkh_burn_lock_script() -> bytes:
    """P2PKH variant that destroys the asset once the signature checks out."""
    return bytes(
        [
            OpCode.COPY, 0x01,
            OpCode.BLAKE256,
            OpCode.EQ,
            OpCode.JZ, JUMP_TO_FAIL,
            OpCode.CHKSIG,
            OpCode.JZ, JUMP_TO_FAIL,
            OpCode.BURN,
        ]
    )  # fmt: skip


def p2pkh_unlock_script(signature: bytes, public_key: bytes) -> bytes:
    """``PUSHB 65 <signature>, PUSHB 64 <public key>``."""
    if len(signature) != SIGNATURE_SIZE:
        msg = f"signature must be {SIGNATURE_SIZE} bytes, got {len(signature)}"
        raise MalformedInputError(msg)
    if len(public_key) != PUBLIC_KEY_SIZE:
        msg = f"public key must be {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}"
        raise MalformedInputError(msg)
    return (
        bytes([OpCode.PUSHB, SIGNATURE_SIZE])
        + signature
        + bytes([OpCode.PUSHB, PUBLIC_KEY_SIZE])
        + public_key
    )


P2PKH_LOCK_SCRIPT_HASH = hash256(p2pkh_lock_script())
P2PKH_BURN_LOCK_SCRIPT_HASH = hash256(p2pkh_burn_lock_script())

_STANDARD_LOCK_SCRIPTS = frozenset({p2pkh_lock_script(), p2pkh_burn_lock_script()})


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def is_truthy(item: bytes) -> bool:
    """An item is true iff any of its bytes is non-zero."""
    return any(item)


def _check_signature(tx_hash: bytes, signature: bytes, public_key: bytes) -> bool:
    if len(signature) != SIGNATURE_SIZE or len(public_key) != PUBLIC_KEY_SIZE:
        return False
    try:
        recovered = recover_ecdsa(tx_hash, EcdsaSignature.from_bytes(signature))
    except MalformedInputError:
        return False
    return recovered == public_key


class _Machine:
    """One evaluation: a value stack, a program counter and a step budget."""

    def __init__(self, tx_hash: bytes, *, burn: bool, config: ScriptConfig) -> None:
        self.tx_hash = tx_hash
        self.burn = burn
        self.config = config
        self.stack: list[bytes] = []
        self.steps = 0

    def push(self, item: bytes) -> None:
        if len(self.stack) >= self.config.max_stack_size:
            msg = "stack overflow"
            raise _Abort(msg)
        self.stack.append(item)

    def pop(self) -> bytes:
        if not self.stack:
            msg = "stack underflow"
            raise _Abort(msg)
        return self.stack.pop()

    def peek(self, depth: int) -> bytes:
        if depth >= len(self.stack):
            msg = f"stack underflow reading depth {depth}"
            raise _Abort(msg)
        return self.stack[-1 - depth]

    def run(self, program: list[Instruction]) -> ScriptResult | None:
        """Run *program*; None means it ran off the end without stopping."""
        pc = 0
        while pc < len(program):
            self.steps += 1
            if self.steps > self.config.max_steps:
                msg = "step limit exceeded"
                raise _Abort(msg)
            instr = program[pc]
            pc += 1
            op = instr.opcode

            if op == OpCode.NOP:
                continue
            if op == OpCode.BURN:
                if not self.burn:
                    msg = "BURN is only valid for burn inputs"
                    raise _Abort(msg)
                return ScriptResult.BURNT
            if op == OpCode.SUCCESS:
                return ScriptResult.UNLOCKED
            if op == OpCode.FAIL:
                msg = "FAIL executed"
                raise _Abort(msg)
            if op == OpCode.NOT:
                self.push(FALSE if is_truthy(self.pop()) else TRUE)
            elif op == OpCode.EQ:
                a, b = self.pop(), self.pop()
                self.push(TRUE if a == b else FALSE)
            elif op in (OpCode.JMP, OpCode.JNZ, OpCode.JZ):
                if op == OpCode.JMP:
                    jump = True
                else:
                    cond = is_truthy(self.pop())
                    jump = cond if op == OpCode.JNZ else not cond
                if jump:
                    pc += instr.operand
                    if pc > len(program):
                        msg = f"{op.name} jumped out of the program"
                        raise _Abort(msg)
            elif op == OpCode.PUSH:
                self.push(bytes([instr.operand]))
            elif op == OpCode.PUSHB:
                self.push(instr.operand)
            elif op == OpCode.POP:
                self.pop()
            elif op == OpCode.DUP:
                self.push(self.peek(0))
            elif op == OpCode.SWAP:
                a, b = self.pop(), self.pop()
                self.push(a)
                self.push(b)
            elif op == OpCode.COPY:
                self.push(self.peek(instr.operand))
            elif op == OpCode.DROP:
                self.peek(instr.operand)
                del self.stack[-1 - instr.operand]
            elif op == OpCode.CHKSIG:
                public_key = self.pop()
                signature = self.pop()
                ok = _check_signature(self.tx_hash, signature, public_key)
                self.push(TRUE if ok else FALSE)
            elif op == OpCode.BLAKE256:
                self.push(hash256(self.pop()))
            elif op == OpCode.SHA256:
                self.push(hashlib.sha256(self.pop()).digest())
            elif op == OpCode.RIPEMD160:
                self.push(ripemd160(self.pop()))

        return None

    def final_result(self) -> ScriptResult:
        if self.stack and is_truthy(self.stack[-1]):
            return ScriptResult.UNLOCKED
        msg = "script finished without a true value on the stack"
        raise _Abort(msg)


def execute(
    unlock_script: bytes,
    parameters: tuple[bytes, ...] | list[bytes],
    lock_script: bytes,
    tx_hash: bytes,
    *,
    burn: bool = False,
    config: ScriptConfig | None = None,
) -> ScriptOutcome:
    """Evaluate an unlock/lock script pair against a transaction hash.

    Args:
        unlock_script: Push-only proof supplied by the spender.
        parameters: Output parameters, pushed between the two scripts.
        lock_script: The script whose hash the output recorded.
        tx_hash: Transaction hash computed without any script fields.
        burn: True when evaluating a burn input; only then is BURN allowed,
            and only a BURNT result authorizes it.
        config: Length, step and stack limits.
    """
    config = config or ScriptConfig()
    machine = _Machine(tx_hash, burn=burn, config=config)
    try:
        for name, script in (("unlock", unlock_script), ("lock", lock_script)):
            if len(script) > config.max_script_length:
                msg = f"{name} script exceeds {config.max_script_length} bytes"
                raise _Abort(msg)
        try:
            unlock = decode_script(unlock_script)
            lock = decode_script(lock_script)
        except MalformedInputError as exc:
            raise _Abort(str(exc)) from exc
        if any(instr.opcode not in _PUSH_ONLY for instr in unlock):
            msg = "unlock script must contain only push instructions"
            raise _Abort(msg)

        machine.run(unlock)
        for parameter in parameters:
            machine.push(bytes(parameter))
        result = machine.run(lock) or machine.final_result()
    except _Abort as exc:
        logger.debug("Script evaluation failed: %s", exc)
        return ScriptOutcome(ScriptResult.FAIL, reason=str(exc), steps=machine.steps)

    if burn and result != ScriptResult.BURNT:
        reason = "burn input was not burnt"
        return ScriptOutcome(ScriptResult.FAIL, reason=reason, steps=machine.steps)
    return ScriptOutcome(result, steps=machine.steps)


# ---------------------------------------------------------------------------
# Input authorization
# ---------------------------------------------------------------------------


def _fail(reason: str) -> ScriptOutcome:
    logger.debug("Input authorization failed: %s", reason)
    return ScriptOutcome(ScriptResult.FAIL, reason=reason)


def authorize_input(
    transaction: AssetTransferTransaction,
    index: int,
    *,
    burn: bool = False,
    config: ScriptConfig | None = None,
) -> ScriptOutcome:
    """Check that input (or burn) *index* of *transaction* may spend its prevOut.

    The supplied lock script must hash to ``prev_out.lock_script_hash`` before
    anything is executed; the signature is checked against the transaction
    hash taken without any script fields.
    """
    entries: list[AssetTransferInput] = transaction.burns if burn else transaction.inputs
    if not 0 <= index < len(entries):
        return _fail(f"input index {index} out of range")
    entry = entries[index]
    prev_out = entry.prev_out
    if prev_out.lock_script_hash is None or prev_out.parameters is None:
        return _fail("out point does not record its lock script hash and parameters")
    if hash256(entry.lock_script) != prev_out.lock_script_hash:
        return _fail("lock script does not match the recorded lock script hash")
    if entry.lock_script in _STANDARD_LOCK_SCRIPTS and len(prev_out.parameters) != 1:
        return _fail(f"expected exactly 1 parameter, got {len(prev_out.parameters)}")
    return execute(
        entry.unlock_script,
        prev_out.parameters,
        entry.lock_script,
        transaction.hash_without_script(),
        burn=burn,
        config=config,
    )


def verify_transaction(
    transaction: AssetTransferTransaction,
    *,
    config: ScriptConfig | None = None,
) -> None:
    """Authorize every input and burn of *transaction*.

    Raises:
        AuthorizationError: On the first input or burn that fails.
    """
    for burn, entries in ((False, transaction.inputs), (True, transaction.burns)):
        for index in range(len(entries)):
            outcome = authorize_input(transaction, index, burn=burn, config=config)
            if not outcome.ok:
                kind = "burn" if burn else "input"
                msg = f"{kind} {index} is not authorized: {outcome.reason}"
                raise AuthorizationError(msg, reason=outcome.reason)
