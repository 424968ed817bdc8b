"""Bytecode instruction set: opcodes, encoding and disassembly."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

Instructions = bytes


class Opcode(IntEnum):
    CONSTANT = 0
    ADD = 1
    POP = 2
    SUB = 3
    MUL = 4
    DIV = 5
    TRUE = 6
    FALSE = 7
    EQUAL = 8
    NOT_EQUAL = 9
    GREATER_THAN = 10
    MINUS = 11
    BANG = 12
    JUMP_NOT_TRUTHY = 13
    JUMP = 14
    NULL = 15
    GET_GLOBAL = 16
    SET_GLOBAL = 17
    ARRAY = 18
    HASH = 19
    INDEX = 20
    CALL = 21
    RETURN_VALUE = 22
    RETURN = 23
    GET_LOCAL = 24
    SET_LOCAL = 25
    GET_BUILTIN = 26
    CLOSURE = 27
    GET_FREE = 28
    CURRENT_CLOSURE = 29


@dataclass(frozen=True)
class Definition:
    name: str
    operand_widths: tuple[int, ...] = ()


_DEFINITIONS: dict[Opcode, Definition] = {
    Opcode.CONSTANT: Definition("OpConstant", (2,)),
    Opcode.ADD: Definition("OpAdd"),
    Opcode.POP: Definition("OpPop"),
    Opcode.SUB: Definition("OpSub"),
    Opcode.MUL: Definition("OpMul"),
    Opcode.DIV: Definition("OpDiv"),
    Opcode.TRUE: Definition("OpTrue"),
    Opcode.FALSE: Definition("OpFalse"),
    Opcode.EQUAL: Definition("OpEqual"),
    Opcode.NOT_EQUAL: Definition("OpNotEqual"),
    Opcode.GREATER_THAN: Definition("OpGreaterThan"),
    Opcode.MINUS: Definition("OpMinus"),
    Opcode.BANG: Definition("OpBang"),
    Opcode.JUMP_NOT_TRUTHY: Definition("OpJumpNotTruthy", (2,)),
    Opcode.JUMP: Definition("OpJump", (2,)),
    Opcode.NULL: Definition("OpNull"),
    Opcode.GET_GLOBAL: Definition("OpGetGlobal", (2,)),
    Opcode.SET_GLOBAL: Definition("OpSetGlobal", (2,)),
    Opcode.ARRAY: Definition("OpArray", (2,)),
    Opcode.HASH: Definition("OpHash", (2,)),
    Opcode.INDEX: Definition("OpIndex"),
    Opcode.CALL: Definition("OpCall", (1,)),
    Opcode.RETURN_VALUE: Definition("OpReturnValue"),
    Opcode.RETURN: Definition("OpReturn"),
    Opcode.GET_LOCAL: Definition("OpGetLocal", (1,)),
    Opcode.SET_LOCAL: Definition("OpSetLocal", (1,)),
    Opcode.GET_BUILTIN: Definition("OpGetBuiltin", (1,)),
    Opcode.CLOSURE: Definition("OpClosure", (2, 1)),
    Opcode.GET_FREE: Definition("OpGetFree", (1,)),
    Opcode.CURRENT_CLOSURE: Definition("OpCurrentClosure"),
}


def lookup(op: int) -> Definition:
    """Return the definition of an opcode; raise ValueError if it has none."""
    try:
        return _DEFINITIONS[op]
    except KeyError:
        raise ValueError(f"opcode {op} undefined") from None


def make(op: int, *operands: int) -> bytes:
    """Encode one instruction; an unknown opcode yields empty bytes."""
    definition = _DEFINITIONS.get(op)
    if definition is None:
        return b""
    if len(operands) > len(definition.operand_widths):
        raise ValueError(
            f"{definition.name} takes {len(definition.operand_widths)} operands, "
            f"got {len(operands)}"
        )
    instruction = bytearray([int(op)])
    for index, width in enumerate(definition.operand_widths):
        value = operands[index] if index < len(operands) else 0
        instruction += (value & ((1 << (8 * width)) - 1)).to_bytes(width, "big")
    return bytes(instruction)


def read_uint8(ins: bytes) -> int:
    return ins[0]


def read_uint16(ins: bytes) -> int:
    if len(ins) < 2:
        raise ValueError("truncated 16-bit operand")
    return int.from_bytes(ins[:2], "big")


def read_operands(definition: Definition, ins: bytes) -> tuple[list[int], int]:
    """Decode the operands following an opcode; return them and bytes read."""
    operands = []
    offset = 0
    for width in definition.operand_widths:
        if width == 2:
            operands.append(read_uint16(ins[offset:]))
        elif width == 1:
            operands.append(read_uint8(ins[offset:]))
        offset += width
    return operands, offset


def _format_instruction(definition: Definition, operands: list[int]) -> str:
    count = len(definition.operand_widths)
    if len(operands) != count:
        return f"ERROR: operand len {len(operands)} does not match defined {count}\n"
    if count == 0:
        return definition.name
    if count == 1:
        return f"{definition.name} {operands[0]}"
    if count == 2:
        return f"{definition.name} {operands[0]} {operands[1]}"
    return f"ERROR: unhandled operandCount for {definition.name}\n"


def format_instructions(ins: bytes) -> str:
    """Disassemble instructions, one line per instruction with its offset."""
    lines = []
    position = 0
    while position < len(ins):
        try:
            definition = lookup(ins[position])
        except ValueError as exc:
            lines.append(f"ERROR: {exc}\n")
            position += 1
            continue
        operands, read = read_operands(definition, ins[position + 1 :])
        lines.append(f"{position:04d} {_format_instruction(definition, operands)}\n")
        position += 1 + read
    return "".join(lines)