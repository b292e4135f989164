"""
Intcode VM
==========
A virtual machine for Intcode: programs are flat lists of signed integers,
instructions carry their addressing modes in the header, and execution
pauses at every input, output and halt so the host can drive the machine
one step at a time.

Architecture:
    ┌──────────┐    ┌─────────┐    ┌──────────┐    ┌──────────────┐
    │ "1,0,.." │───>│ Program │───>│  Memory  │───>│   Computer   │──> Signal
    │  (text)  │    │  (rom)  │    │  (ram)   │    │ decode/exec  │
    └──────────┘    └─────────┘    └──────────┘    └──────────────┘

    - loader.py:      comma-separated text -> immutable Program
    - memory.py:      sparse zero-filled address space
    - modes.py:       position / immediate / relative mode digits
    - opcodes.py:     opcode table + one dataclass per instruction kind
    - computer.py:    fetch/decode/execute loop, pause/resume protocol
    - amplify.py:     ring of Computers driven round-robin
    - diagnostics.py: host drivers (run with inputs, noun/verb search)
"""

__version__ = "0.1.0"

from .errors import (
    IntcodeError, ProgramParseError, InvalidOpcode, InvalidParameterMode,
    InvalidWriteTarget, InvalidAddress, InvalidState, UnexpectedSignal,
)
from .loader import Program, parse_program, load_program
from .memory import Memory
from .modes import Mode, ParameterModes
from .computer import (
    Computer, State, Signal, AwaitingInput, ProducedOutput, Halted,
    AWAITING_INPUT, HALTED,
)
from .amplify import (
    AmplifierChain, AmplifierResult, max_thruster_signal,
    SERIAL_PHASES, FEEDBACK_PHASES,
)
from .diagnostics import run_program, diagnostic_code, gravity_assist, find_noun_verb
