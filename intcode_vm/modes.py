"""
Intcode VM — Parameter-Mode Decoder

An instruction header packs its addressing modes above the opcode:

    header = opcode + 100 * mode_digits

mode_digits is consumed one decimal digit at a time, least significant
first, one digit per operand in the order the operands are read. Once the
digits run out every further operand is in position mode.

Modes:
  POSITION   0   operand is an address; value lives at memory[operand]
  IMMEDIATE  1   operand is the value itself (never a write destination)
  RELATIVE   2   operand is an offset; value lives at memory[operand + base]
"""

from enum import IntEnum

from .errors import InvalidParameterMode


class Mode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2


class ParameterModes:
    """Yields one Mode per operand from the header's mode digits.

    Digits are validated lazily: an unknown digit only raises when the
    operand it belongs to is read. Surplus digits are ignored.
    """

    def __init__(self, digits: int, pointer: int = 0):
        self.digits = digits
        self.pointer = pointer

    def __iter__(self):
        return self

    def __next__(self) -> Mode:
        if self.digits == 0:
            return Mode.POSITION
        self.digits, digit = divmod(self.digits, 10)
        try:
            return Mode(digit)
        except ValueError:
            raise InvalidParameterMode(digit, self.pointer) from None


def split_header(header: int):
    """Split an instruction header into (opcode, mode_digits)."""
    mode_digits, opcode = divmod(header, 100)
    return opcode, mode_digits
