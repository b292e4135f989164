"""
Intcode VM — Opcode Table / Instruction Variants

This module maps opcode numbers to (mnemonic, read_count, writes) and
defines one frozen dataclass per instruction kind. A decoded instruction
carries only the operands its kind needs, already resolved:

  read operands    resolved to values through the parameter mode
  write operand    resolved to an absolute address (`target`)

Operand layout per opcode:
   1  ADD   value_1 value_2 -> target
   2  MUL   value_1 value_2 -> target
   3  IN                    -> target
   4  OUT   value_1
   5  JNZ   value_1 value_2           (jump to value_2 if value_1 != 0)
   6  JZ    value_1 value_2           (jump to value_2 if value_1 == 0)
   7  LT    value_1 value_2 -> target
   8  EQ    value_1 value_2 -> target
   9  ARB   value_1                   (relative base += value_1)
  99  HALT
"""

from dataclasses import dataclass
from typing import Union

# ──────────────────────────────────────────────
# Opcode numbers
# ──────────────────────────────────────────────

OP_ADD = 1
OP_MUL = 2
OP_IN = 3
OP_OUT = 4
OP_JNZ = 5
OP_JZ = 6
OP_LT = 7
OP_EQ = 8
OP_ARB = 9
OP_HALT = 99

# Format: opcode -> (mnemonic, read_count, writes)
OPCODES = {
    OP_ADD:  ('ADD',  2, True),
    OP_MUL:  ('MUL',  2, True),
    OP_IN:   ('IN',   0, True),
    OP_OUT:  ('OUT',  1, False),
    OP_JNZ:  ('JNZ',  2, False),
    OP_JZ:   ('JZ',   2, False),
    OP_LT:   ('LT',   2, True),
    OP_EQ:   ('EQ',   2, True),
    OP_ARB:  ('ARB',  1, False),
    OP_HALT: ('HALT', 0, False),
}


# ──────────────────────────────────────────────
# Instruction variants
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Add:
    value_1: int
    value_2: int
    target: int


@dataclass(frozen=True)
class Multiply:
    value_1: int
    value_2: int
    target: int


@dataclass(frozen=True)
class Input:
    """Read one value from the host into target."""
    target: int


@dataclass(frozen=True)
class Output:
    value_1: int


@dataclass(frozen=True)
class JumpIfTrue:
    value_1: int
    value_2: int


@dataclass(frozen=True)
class JumpIfFalse:
    value_1: int
    value_2: int


@dataclass(frozen=True)
class LessThan:
    value_1: int
    value_2: int
    target: int


@dataclass(frozen=True)
class Equals:
    value_1: int
    value_2: int
    target: int


@dataclass(frozen=True)
class AdjustRelativeBase:
    value_1: int


@dataclass(frozen=True)
class Halt:
    pass


Instruction = Union[Add, Multiply, Input, Output, JumpIfTrue, JumpIfFalse,
                    LessThan, Equals, AdjustRelativeBase, Halt]

# opcode -> variant class
VARIANTS = {
    OP_ADD:  Add,
    OP_MUL:  Multiply,
    OP_IN:   Input,
    OP_OUT:  Output,
    OP_JNZ:  JumpIfTrue,
    OP_JZ:   JumpIfFalse,
    OP_LT:   LessThan,
    OP_EQ:   Equals,
    OP_ARB:  AdjustRelativeBase,
    OP_HALT: Halt,
}

MNEMONICS = {VARIANTS[code]: entry[0] for code, entry in OPCODES.items()}


def build_instruction(opcode: int, values, target=None) -> Instruction:
    """Build the variant for opcode from resolved reads and write target."""
    cls = VARIANTS[opcode]
    if target is None:
        return cls(*values)
    return cls(*values, target)


def format_instruction(instr: Instruction) -> str:
    """Render an instruction as `MNEMONIC op op -> target` for traces."""
    match instr:
        case Input(target=target):
            return f"IN -> {target}"
        case Add() | Multiply() | LessThan() | Equals():
            mnem = MNEMONICS[type(instr)]
            return f"{mnem} {instr.value_1} {instr.value_2} -> {instr.target}"
        case JumpIfTrue() | JumpIfFalse():
            return f"{MNEMONICS[type(instr)]} {instr.value_1} {instr.value_2}"
        case Output(value_1=value) | AdjustRelativeBase(value_1=value):
            return f"{MNEMONICS[type(instr)]} {value}"
        case Halt():
            return "HALT"
        case _:
            raise ValueError(f"Unknown instruction: {instr}")
