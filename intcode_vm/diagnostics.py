"""
Intcode VM — Host Drivers

Small drivers that run a program through the public Computer API:

  run_program      feed a fixed list of inputs, collect every output
  diagnostic_code  answer every input with one system id, keep the last output
  gravity_assist   patch addresses 1 and 2, run to halt, read address 0
  find_noun_verb   search noun/verb pairs for a target gravity-assist result
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .computer import AwaitingInput, Computer, Halted, ProducedOutput
from .errors import UnexpectedSignal

log = logging.getLogger(__name__)


def run_program(program, inputs: Sequence[int] = (), trace: bool = False,
                computer: Optional[Computer] = None) -> List[int]:
    """Run program to halt, feeding inputs in order; return all outputs.

    When `computer` is given it is driven as-is and `program` is ignored.
    """
    computer = computer or Computer(program, trace=trace)
    pending = list(inputs)
    outputs: List[int] = []
    while True:
        signal = computer.run()
        match signal:
            case Halted():
                return outputs
            case ProducedOutput(value=value):
                outputs.append(value)
            case AwaitingInput() if pending:
                computer.send_input(pending.pop(0))
            case _:
                raise UnexpectedSignal(signal, "an input value to be available")


def diagnostic_code(program, system_id: int) -> int:
    """Run with system_id as every input; return the final output."""
    computer = Computer(program)
    last: Optional[int] = None
    while True:
        signal = computer.run()
        match signal:
            case Halted():
                break
            case ProducedOutput(value=value):
                if last:
                    log.warning("Diagnostic test failed with code %d", last)
                last = value
            case AwaitingInput():
                computer.send_input(system_id)
    if last is None:
        raise UnexpectedSignal(signal, "at least one output")
    return last


def gravity_assist(program, noun: int, verb: int,
                   computer: Optional[Computer] = None) -> int:
    """Set noun/verb at addresses 1/2, run to halt, return address 0."""
    computer = computer or Computer(program)
    computer.ram.write(1, noun)
    computer.ram.write(2, verb)
    signal = computer.run()
    if not isinstance(signal, Halted):
        raise UnexpectedSignal(signal, "Halted")
    return computer.ram.read(0)


def find_noun_verb(program, target: int,
                   values: Iterable[int] = range(1, 100)) -> int:
    """Find the noun/verb pair producing target; return 100 * noun + verb."""
    values = list(values)
    computer = Computer(program)
    for noun in values:
        for verb in values:
            computer.reset()
            if gravity_assist(program, noun, verb, computer=computer) == target:
                log.info("Found noun=%d verb=%d for target %d", noun, verb, target)
                return 100 * noun + verb
    raise LookupError(f"No noun and verb produce target {target}")
