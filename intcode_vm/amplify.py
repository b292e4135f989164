"""
Intcode VM — Amplifier Chain

N Computers built from one program are wired into a ring: each
amplifier's output is the next amplifier's input, and the last feeds the
first. Every amplifier is first configured with its phase setting (its
first input), then a signal of 0 enters amplifier 0 and the chain is
driven round-robin until every amplifier halts.

With phases 0-4 the programs halt after one pass (serial mode); with
phases 5-9 they loop until the feedback signal settles.

The only channel between amplifiers is the integer handed across a
run()/send_input() boundary. Ordering is fixed by phase position.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .computer import HALTED, AwaitingInput, Computer, Halted, ProducedOutput
from .errors import UnexpectedSignal

log = logging.getLogger(__name__)

SERIAL_PHASES = (0, 1, 2, 3, 4)
FEEDBACK_PHASES = (5, 6, 7, 8, 9)


@dataclass(frozen=True)
class AmplifierResult:
    signal: int
    phases: Tuple[int, ...]


class AmplifierChain:
    """Ring of Computers sharing one program."""

    def __init__(self, program, phases: Sequence[int] = SERIAL_PHASES):
        phases = tuple(phases)
        if not phases:
            raise ValueError("At least one phase setting is required")
        if len(set(phases)) != len(phases):
            raise ValueError(f"Phase settings must be distinct: {phases}")
        self.phases = phases
        self.amps: List[Computer] = [Computer(program) for _ in phases]

    def run(self) -> int:
        """Maximum thruster signal over every ordering of the phase settings."""
        return self.best().signal

    def best(self) -> AmplifierResult:
        """Maximum thruster signal and the first phase sequence reaching it."""
        best: Optional[AmplifierResult] = None
        for sequence in itertools.permutations(self.phases):
            signal = self.run_sequence(sequence)
            log.debug("Phases %s -> %d", sequence, signal)
            if best is None or signal > best.signal:
                best = AmplifierResult(signal, sequence)
        log.info("Best thruster signal %d from phases %s", best.signal, best.phases)
        return best

    def run_sequence(self, sequence: Sequence[int]) -> int:
        """Drive the ring once with the given phase order.

        Returns the last output of the final amplifier.
        """
        if len(sequence) != len(self.amps):
            raise ValueError(
                f"Expected {len(self.amps)} phase settings, got {len(sequence)}")

        for index, (amp, phase) in enumerate(zip(self.amps, sequence)):
            amp.reset()
            signal = amp.run()
            if not isinstance(signal, AwaitingInput):
                raise UnexpectedSignal(
                    signal, f"amp #{index} to accept phase setting {phase}")
            amp.send_input(phase)

        forwarded = 0
        thruster: Optional[int] = None
        last = len(self.amps) - 1
        done = [False] * len(self.amps)

        while not all(done):
            for index, amp in enumerate(self.amps):
                if done[index]:
                    continue
                output = self._turn(index, amp, forwarded)
                if output is None:
                    done[index] = True
                    continue
                forwarded = output
                if index == last:
                    thruster = output

        if thruster is None:
            raise UnexpectedSignal(HALTED, "a thruster signal from the final amp")
        return thruster

    @staticmethod
    def _turn(index: int, amp: Computer, forwarded: int) -> Optional[int]:
        """Resume one amplifier until it outputs (value) or halts (None)."""
        fed = False
        while True:
            signal = amp.run()
            match signal:
                case ProducedOutput(value=value):
                    return value
                case Halted():
                    return None
                case AwaitingInput() if not fed:
                    amp.send_input(forwarded)
                    fed = True
                case _:
                    raise UnexpectedSignal(signal, f"output from amp #{index}")


def max_thruster_signal(program, phases: Sequence[int] = SERIAL_PHASES) -> int:
    """Convenience wrapper: best signal for program over phases."""
    return AmplifierChain(program, phases).run()
