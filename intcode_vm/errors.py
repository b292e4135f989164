"""
Intcode VM — Exception Taxonomy

Every fault raised by the loader, memory, decoder or executor derives from
IntcodeError. Each exception keeps its diagnostic fields as attributes so
host code can inspect them without parsing the message.

UnexpectedSignal is different: the VM itself never raises it. Host drivers
(amplifier chain, diagnostics) raise it when a Computer yields a signal they
cannot act on.
"""


class IntcodeError(Exception):
    """Base class for all Intcode errors."""
    pass


class ProgramParseError(IntcodeError):
    """A program token is not a valid signed 64-bit integer."""
    def __init__(self, token: str, position: int):
        self.token = token
        self.position = position
        super().__init__(f"Token {position}: cannot parse {token!r} as an integer")


class InvalidOpcode(IntcodeError):
    """Unrecognized instruction code."""
    def __init__(self, code: int, pointer: int):
        self.code = code
        self.pointer = pointer
        super().__init__(f"Unknown opcode {code} at address {pointer}")


class InvalidParameterMode(IntcodeError):
    """Unrecognized addressing-mode digit in an instruction header."""
    def __init__(self, mode: int, pointer: int):
        self.mode = mode
        self.pointer = pointer
        super().__init__(f"Unknown parameter mode {mode} at address {pointer}")


class InvalidWriteTarget(IntcodeError):
    """Immediate mode used for a write destination."""
    def __init__(self, pointer: int):
        self.pointer = pointer
        super().__init__(
            f"Write destination in immediate mode at address {pointer}")


class InvalidAddress(IntcodeError):
    """Memory access at a negative address."""
    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Invalid memory address {address}")


class InvalidState(IntcodeError):
    """Operation not allowed in the Computer's current state."""
    def __init__(self, message: str, state=None):
        self.state = state
        super().__init__(message)


class UnexpectedSignal(IntcodeError):
    """A host driver received a signal it cannot handle."""
    def __init__(self, signal, expected: str = ""):
        self.signal = signal
        self.expected = expected
        if expected:
            super().__init__(f"Expected {expected}, got {signal}")
        else:
            super().__init__(f"Unexpected signal: {signal}")
