"""
Intcode VM — Computer (Decoder/Executor + Halt/Resume Protocol)

Execution model:
  1. Fetch header at the instruction pointer (pointer advances by one)
  2. Split header into opcode + mode digits
  3. Fetch each operand (pointer advances by one per operand) and resolve
     it through its parameter mode; a write operand resolves to an address
  4. Execute the instruction variant
  5. Repeat until the instruction yields a signal to the host

Signals returned by run():
  AwaitingInput      an IN instruction needs a value; call send_input(v)
                     and then run() again
  ProducedOutput(v)  an OUT instruction produced v; run() again to continue
  Halted             HALT reached; further run() calls re-return Halted

The decoded IN destination is kept in _pending_target across the pause,
so resuming performs only the deferred write, never a second decode.

Usage:
    computer = Computer(parse_program("3,0,4,0,99"))
    computer.run()            # AwaitingInput()
    computer.send_input(42)
    computer.run()            # ProducedOutput(value=42)
    computer.run()            # Halted()
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from .errors import (
    IntcodeError, InvalidAddress, InvalidOpcode, InvalidState,
    InvalidWriteTarget,
)
from .loader import Program
from .memory import Memory
from .modes import Mode, ParameterModes, split_header
from .opcodes import (
    OPCODES, Instruction, build_instruction, format_instruction,
    Add, Multiply, Input, Output, JumpIfTrue, JumpIfFalse, LessThan, Equals,
    AdjustRelativeBase, Halt,
)

log = logging.getLogger(__name__)

INT64_SIGN = 1 << 63
UINT64_MASK = (1 << 64) - 1


def wrap_int64(value: int) -> int:
    """Wrap an int to the signed 64-bit range (two's complement)."""
    return ((value + INT64_SIGN) & UINT64_MASK) - INT64_SIGN


class State(Enum):
    READY = 'READY'
    AWAITING_INPUT = 'AWAITING_INPUT'
    HALTED = 'HALTED'
    FAULTED = 'FAULTED'


# ══════════════════════════════════════════════
# Signals
# ══════════════════════════════════════════════

@dataclass(frozen=True)
class AwaitingInput:
    pass


@dataclass(frozen=True)
class ProducedOutput:
    value: int


@dataclass(frozen=True)
class Halted:
    pass


Signal = Union[AwaitingInput, ProducedOutput, Halted]

AWAITING_INPUT = AwaitingInput()
HALTED = Halted()


class Computer:
    """Intcode virtual machine.

    `rom` is the immutable program image shared by every reset; `ram` is
    this instance's private working copy. Callers may read and write `ram`
    directly, e.g. to patch inputs before a run or to read a result after
    Halted.
    """

    def __init__(self, program, trace: bool = False):
        if not isinstance(program, Program):
            program = Program(tuple(program))
        self.rom: Program = program
        self.ram = Memory.from_program(program)

        self.pointer = 0
        self.relative_base = 0
        self.state = State.READY

        # IN destination decoded but not yet written
        self._pending_target: Optional[int] = None

        self._trace = trace
        self._trace_output: List[str] = []

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def run(self) -> Signal:
        """Run until the program needs input, produces output, or halts."""
        while True:
            signal = self.step()
            if signal is not None:
                return signal

    def step(self) -> Optional[Signal]:
        """Execute one instruction. Returns a Signal if execution paused, else None.

        A fault moves the computer to FAULTED and re-raises; reset() is
        the only way out.
        """
        if self.state is State.HALTED:
            return HALTED
        if self.state is State.AWAITING_INPUT:
            return AWAITING_INPUT
        if self.state is State.FAULTED:
            raise InvalidState("Computer faulted; reset() required", self.state)

        try:
            instr = self.decode()
            return self.execute(instr)
        except IntcodeError as e:
            self.state = State.FAULTED
            log.debug("Fault: %s", e)
            raise

    def send_input(self, value: int):
        """Supply the value an IN instruction is waiting for.

        Only valid after run() returned AwaitingInput. Performs the deferred
        write; the instruction pointer is already past the IN instruction.
        A value outside the signed 64-bit range raises ValueError and the
        computer keeps waiting for input.
        """
        if self.state is not State.AWAITING_INPUT:
            raise InvalidState(
                f"send_input() requires {State.AWAITING_INPUT.name}, "
                f"computer is {self.state.name}", self.state)
        if wrap_int64(value) != value:
            raise ValueError(f"Input {value} is outside the signed 64-bit range")
        self.ram.write(self._pending_target, value)
        self._pending_target = None
        self.state = State.READY

    def reset(self):
        """Restore ram from rom and zero the pointer and relative base."""
        self.ram = Memory.from_program(self.rom)
        self.pointer = 0
        self.relative_base = 0
        self.state = State.READY
        self._pending_target = None
        self._trace_output.clear()
        log.debug("Reset (%d cells)", len(self.rom))

    @property
    def halted(self) -> bool:
        return self.state is State.HALTED

    # ══════════════════════════════════════════════
    # Decoding
    # ══════════════════════════════════════════════

    def decode(self) -> Instruction:
        """Fetch and decode the instruction at the pointer.

        Advances the pointer past the header and every operand.
        """
        start = self.pointer
        header = self._fetch()
        if header < 0:
            raise InvalidOpcode(header, start)

        opcode, mode_digits = split_header(header)
        if opcode not in OPCODES:
            raise InvalidOpcode(opcode, start)
        _, read_count, writes = OPCODES[opcode]

        modes = ParameterModes(mode_digits, start)
        values = [self._read_parameter(next(modes)) for _ in range(read_count)]
        target = self._write_target(next(modes), start) if writes else None

        instr = build_instruction(opcode, values, target)
        if self._trace:
            line = f"{start:>6}: {format_instruction(instr)}"
            self._trace_output.append(line)
            log.debug(line)
        return instr

    def _fetch(self) -> int:
        """Read the value at the pointer, advance the pointer."""
        value = self.ram.read(self.pointer)
        self.pointer += 1
        return value

    def _read_parameter(self, mode: Mode) -> int:
        raw = self._fetch()
        if mode is Mode.IMMEDIATE:
            return raw
        if mode is Mode.RELATIVE:
            return self.ram.read(raw + self.relative_base)
        return self.ram.read(raw)

    def _write_target(self, mode: Mode, start: int) -> int:
        raw = self._fetch()
        if mode is Mode.IMMEDIATE:
            raise InvalidWriteTarget(start)
        addr = raw + self.relative_base if mode is Mode.RELATIVE else raw
        if addr < 0:
            raise InvalidAddress(addr)
        return addr

    # ══════════════════════════════════════════════
    # Instruction execution
    # ══════════════════════════════════════════════

    def execute(self, instr: Instruction) -> Optional[Signal]:
        """Apply one decoded instruction. Returns a Signal for IN/OUT/HALT."""
        match instr:
            case Add(value_1=a, value_2=b, target=target):
                self.ram.write(target, wrap_int64(a + b))

            case Multiply(value_1=a, value_2=b, target=target):
                self.ram.write(target, wrap_int64(a * b))

            case Input(target=target):
                self._pending_target = target
                self.state = State.AWAITING_INPUT
                log.debug("Awaiting input at %d", self.pointer)
                return AWAITING_INPUT

            case Output(value_1=value):
                log.debug("Output %d", value)
                return ProducedOutput(value)

            case JumpIfTrue(value_1=cond, value_2=dest):
                if cond != 0:
                    self._jump(dest)

            case JumpIfFalse(value_1=cond, value_2=dest):
                if cond == 0:
                    self._jump(dest)

            case LessThan(value_1=a, value_2=b, target=target):
                self.ram.write(target, 1 if a < b else 0)

            case Equals(value_1=a, value_2=b, target=target):
                self.ram.write(target, 1 if a == b else 0)

            case AdjustRelativeBase(value_1=offset):
                self.relative_base += offset

            case Halt():
                self.state = State.HALTED
                log.debug("Halted at %d", self.pointer - 1)
                return HALTED

            case _:
                raise ValueError(f"Unknown instruction: {instr}")

        return None

    def _jump(self, dest: int):
        if dest < 0:
            raise InvalidAddress(dest)
        self.pointer = dest

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace logging."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()
