"""
Computer Tests — decode/execute of every opcode, addressing modes,
the pause/resume protocol, faults, and end-to-end programs.
"""

import pytest

from intcode_vm.computer import (
    AWAITING_INPUT, HALTED, AwaitingInput, Computer, Halted, ProducedOutput,
    State, wrap_int64,
)
from intcode_vm.errors import (
    InvalidAddress, InvalidOpcode, InvalidParameterMode, InvalidState,
    InvalidWriteTarget,
)
from intcode_vm.loader import parse_program
from intcode_vm.opcodes import Add, Input, Multiply, Output

QUINE = "109,1,204,-1,1001,100,1,100,1008,100,16,101,1006,101,0,99"
EQUALS_8 = "3,9,8,9,10,9,4,9,99,-1,8"


def _run_all(computer, inputs=()):
    """Run to halt, answering inputs in order; return the yielded signals."""
    pending = list(inputs)
    signals = []
    while True:
        signal = computer.run()
        signals.append(signal)
        if isinstance(signal, Halted):
            return signals
        if isinstance(signal, AwaitingInput):
            computer.send_input(pending.pop(0))


def _outputs(signals):
    return [s.value for s in signals if isinstance(s, ProducedOutput)]


# ═══════════════════════════════════════════════
# Individual instructions
# ═══════════════════════════════════════════════

class TestDecodeExecute:
    def test_add(self):
        """1,3,1,0 → ADD mem[3] mem[1] -> 0, ram[0]=3, pointer=4"""
        comp = Computer([1, 3, 1, 0])
        instr = comp.decode()
        assert instr == Add(value_1=0, value_2=3, target=0)
        assert comp.execute(instr) is None
        assert comp.ram[0] == 3
        assert comp.pointer == 4

    def test_mul(self):
        """2,2,4,0,8 → MUL 4 8 -> 0, ram[0]=32"""
        comp = Computer([2, 2, 4, 0, 8])
        instr = comp.decode()
        assert instr == Multiply(value_1=4, value_2=8, target=0)
        comp.execute(instr)
        assert comp.ram[0] == 32
        assert comp.pointer == 4

    def test_input(self):
        """3,2,0 → IN -> 2, send_input(99) writes ram[2] without moving pointer"""
        comp = Computer([3, 2, 0])
        instr = comp.decode()
        assert instr == Input(target=2)
        assert comp.execute(instr) == AWAITING_INPUT
        comp.send_input(99)
        assert comp.ram[2] == 99
        assert comp.pointer == 2

    def test_output(self):
        """4,2,1000 → OUT 1000"""
        comp = Computer([4, 2, 1000])
        instr = comp.decode()
        assert instr == Output(value_1=1000)
        assert comp.execute(instr) == ProducedOutput(1000)

    def test_step_returns_none_without_signal(self):
        """ADD step → None, HALT step → Halted"""
        comp = Computer([1101, 1, 1, 5, 99, 0])
        assert comp.step() is None
        assert comp.step() == HALTED


class TestAddressingModes:
    def test_position(self):
        """ADD position mode: mem[5] + mem[6] → ram[7]=30"""
        comp = Computer([1, 5, 6, 7, 99, 10, 20, 0])
        assert comp.run() == HALTED
        assert comp.ram[7] == 30

    def test_immediate(self):
        """ADD immediate mode: 5 + 6 → ram[7]=11"""
        comp = Computer([1101, 5, 6, 7, 99, 0, 0, 0])
        comp.run()
        assert comp.ram[7] == 11

    def test_relative(self):
        """ADD relative mode with base 10: mem[10] + mem[11] → ram[12]=9"""
        comp = Computer([109, 10, 22201, 0, 1, 2, 99, 0, 0, 0, 4, 5, 0])
        comp.run()
        assert comp.relative_base == 10
        assert comp.ram[12] == 9
        assert comp.ram[2] == 22201

    def test_position_default_after_digits(self):
        """101: first operand immediate, the rest fall back to position."""
        comp = Computer([101, 7, 5, 6, 99, 3, 0])
        comp.run()
        assert comp.ram[6] == 10

    def test_write_beyond_program(self):
        """Write to address 100 of a 7-cell program, then output it."""
        comp = Computer([1101, 2, 3, 100, 4, 100, 99])
        assert _outputs(_run_all(comp)) == [5]
        assert comp.ram[100] == 5


class TestComparisons:
    @pytest.mark.parametrize("a,b,expected", [
        (1, 2, 1), (2, 1, 0), (2, 2, 0), (-5, 3, 1), (3, -5, 0),
    ])
    def test_less_than(self, a, b, expected):
        """LT writes exactly 1 or 0."""
        comp = Computer([1107, a, b, 5, 99, -1])
        comp.run()
        assert comp.ram[5] == expected

    @pytest.mark.parametrize("a,b,expected", [
        (1, 2, 0), (2, 2, 1), (-3, -3, 1), (0, 7, 0),
    ])
    def test_equals(self, a, b, expected):
        """EQ writes exactly 1 or 0."""
        comp = Computer([1108, a, b, 5, 99, -1])
        comp.run()
        assert comp.ram[5] == expected


class TestJumps:
    @pytest.mark.parametrize("opcode,cond,expected_pointer", [
        (1105, 1, 7),
        (1105, -4, 7),
        (1105, 0, 3),
        (1106, 0, 7),
        (1106, 5, 3),
    ])
    def test_jump(self, opcode, cond, expected_pointer):
        """Pointer jumps to 7 only when the condition holds, else lands on 3."""
        comp = Computer([opcode, cond, 7, 99, 0, 0, 0, 99])
        assert comp.step() is None
        assert comp.pointer == expected_pointer

    def test_negative_jump_destination(self):
        """Jump to -1 → InvalidAddress"""
        comp = Computer([1105, 1, -1])
        with pytest.raises(InvalidAddress):
            comp.step()


class TestRelativeBase:
    def test_adjustment_persists_across_output(self):
        """Base 9 → OUT 11, base 10 after resume → OUT 22"""
        comp = Computer([109, 9, 204, 0, 109, 1, 204, 0, 99, 11, 22])
        assert comp.run() == ProducedOutput(11)
        assert comp.relative_base == 9
        assert comp.run() == ProducedOutput(22)
        assert comp.relative_base == 10
        assert comp.run() == HALTED

    def test_negative_relative_address(self):
        """Relative read at -1 + base 0 → InvalidAddress(-1)"""
        comp = Computer([204, -1, 99])
        with pytest.raises(InvalidAddress) as exc:
            comp.run()
        assert exc.value.address == -1


# ═══════════════════════════════════════════════
# Pause / resume protocol
# ═══════════════════════════════════════════════

class TestProtocol:
    def test_echo(self):
        """3,0,4,0,99: AwaitingInput → send 42 → Output 42 → Halted"""
        comp = Computer(parse_program("3,0,4,0,99"))
        assert comp.run() == AWAITING_INPUT
        assert comp.state is State.AWAITING_INPUT
        comp.send_input(42)
        assert comp.state is State.READY
        assert comp.run() == ProducedOutput(42)
        assert comp.run() == HALTED
        assert comp.halted

    def test_halted_is_sticky(self):
        """run() after HALT re-returns Halted without moving the pointer."""
        comp = Computer([99, 104, 5])
        assert comp.run() == HALTED
        pointer = comp.pointer
        assert comp.run() == HALTED
        assert comp.pointer == pointer

    def test_run_while_awaiting_input(self):
        """run() without send_input re-returns AwaitingInput, executes nothing."""
        comp = Computer([3, 5, 4, 5, 99, 0])
        assert comp.run() == AWAITING_INPUT
        pointer = comp.pointer
        assert comp.run() == AWAITING_INPUT
        assert comp.pointer == pointer
        comp.send_input(8)
        assert comp.run() == ProducedOutput(8)

    def test_send_input_when_ready(self):
        """send_input before any AwaitingInput → InvalidState"""
        comp = Computer([3, 0, 99])
        with pytest.raises(InvalidState):
            comp.send_input(1)

    def test_send_input_when_halted(self):
        """send_input after HALT → InvalidState carrying HALTED"""
        comp = Computer([99])
        comp.run()
        with pytest.raises(InvalidState) as exc:
            comp.send_input(1)
        assert exc.value.state is State.HALTED

    def test_input_with_relative_target(self):
        """203 with base 6 writes the input to ram[7]."""
        comp = Computer([109, 6, 203, 1, 99, 0, 0, 0])
        assert comp.run() == AWAITING_INPUT
        comp.send_input(-3)
        assert comp.ram[7] == -3

    def test_input_int64_limits_accepted(self):
        """Inputs at the signed 64-bit limits are written unchanged."""
        for value in ((1 << 63) - 1, -(1 << 63)):
            comp = Computer(parse_program("3,0,4,0,99"))
            comp.run()
            comp.send_input(value)
            assert comp.run() == ProducedOutput(value)

    @pytest.mark.parametrize("value", [1 << 70, 1 << 63, -(1 << 63) - 1])
    def test_input_outside_int64_rejected(self, value):
        """Out-of-range input → ValueError, still awaiting input, nothing written."""
        comp = Computer(parse_program("3,0,4,0,99"))
        assert comp.run() == AWAITING_INPUT
        with pytest.raises(ValueError):
            comp.send_input(value)
        assert comp.state is State.AWAITING_INPUT
        assert comp.ram[0] == 3
        comp.send_input(7)
        assert comp.run() == ProducedOutput(7)


class TestReset:
    def test_reset_restores_state(self):
        """reset() restores ram from rom and zeroes pointer and base."""
        comp = Computer(parse_program(EQUALS_8))
        _run_all(comp, [8])
        assert comp.ram[9] == 1
        comp.reset()
        assert comp.ram[9] == -1
        assert comp.pointer == 0
        assert comp.relative_base == 0
        assert comp.state is State.READY

    def test_reset_reproduces_fresh_run(self):
        """Signals after reset() match a fresh Computer's signals."""
        program = parse_program(QUINE)
        fresh = _run_all(Computer(program))
        comp = Computer(program)
        _run_all(comp)
        comp.reset()
        assert _run_all(comp) == fresh

    def test_reset_clears_pending_input(self):
        """reset() while awaiting input drops the pending IN."""
        comp = Computer([3, 0, 99])
        comp.run()
        comp.reset()
        with pytest.raises(InvalidState):
            comp.send_input(1)

    def test_instances_do_not_share_memory(self):
        """Running one Computer leaves a sibling and the rom untouched."""
        program = parse_program("1,0,0,0,99")
        a = Computer(program)
        b = Computer(program)
        a.run()
        assert a.ram[0] == 2
        assert b.ram[0] == 1
        assert program[0] == 1


# ═══════════════════════════════════════════════
# Faults
# ═══════════════════════════════════════════════

class TestFaults:
    def test_invalid_opcode(self):
        """Opcode 77 at address 4 → InvalidOpcode(77, 4) after the ADD ran"""
        comp = Computer([1101, 1, 1, 5, 77, 0])
        with pytest.raises(InvalidOpcode) as exc:
            comp.run()
        assert exc.value.code == 77
        assert exc.value.pointer == 4
        assert comp.ram[5] == 2

    def test_negative_header(self):
        """Header -1 → InvalidOpcode(-1, 0), never HALT"""
        with pytest.raises(InvalidOpcode) as exc:
            Computer([-1]).run()
        assert exc.value.code == -1
        assert exc.value.pointer == 0

    def test_invalid_mode(self):
        """301 → InvalidParameterMode(3, 0)"""
        with pytest.raises(InvalidParameterMode) as exc:
            Computer([301, 0, 0, 0, 99]).run()
        assert exc.value.mode == 3
        assert exc.value.pointer == 0

    @pytest.mark.parametrize("program", [
        [11101, 1, 1, 3, 99],
        [103, 0, 99],
        [11107, 1, 2, 3, 99],
    ])
    def test_immediate_write_target(self, program):
        """Immediate-mode destination → InvalidWriteTarget"""
        with pytest.raises(InvalidWriteTarget) as exc:
            Computer(program).run()
        assert exc.value.pointer == 0

    def test_fault_is_terminal_until_reset(self):
        """After a fault run() raises InvalidState until reset()."""
        comp = Computer([42])
        with pytest.raises(InvalidOpcode):
            comp.run()
        assert comp.state is State.FAULTED
        with pytest.raises(InvalidState):
            comp.run()
        comp.reset()
        with pytest.raises(InvalidOpcode):
            comp.run()


# ═══════════════════════════════════════════════
# End-to-end programs
# ═══════════════════════════════════════════════

class TestPrograms:
    def test_quine(self):
        """Quine outputs its own program, in order."""
        program = parse_program(QUINE)
        assert _outputs(_run_all(Computer(program))) == list(program)

    def test_sixteen_digit_product(self):
        """34915192 * 34915192 → 1219070632396864"""
        comp = Computer(parse_program("1102,34915192,34915192,7,4,7,99,0"))
        assert _outputs(_run_all(comp)) == [1219070632396864]

    def test_large_literal(self):
        """OUT 1125899906842624 → 1125899906842624"""
        comp = Computer(parse_program("104,1125899906842624,99"))
        assert _outputs(_run_all(comp)) == [1125899906842624]

    @pytest.mark.parametrize("value,expected", [(8, 1), (7, 0), (9, 0)])
    def test_equals_eight(self, value, expected):
        """Outputs 1 only when the input equals 8."""
        comp = Computer(parse_program(EQUALS_8))
        assert _outputs(_run_all(comp, [value])) == [expected]

    def test_add_wraps_to_int64(self):
        """INT64_MAX + 1 → INT64_MIN"""
        comp = Computer([1101, (1 << 63) - 1, 1, 5, 99, 0])
        comp.run()
        assert comp.ram[5] == -(1 << 63)

    def test_wrap_int64(self):
        """wrap_int64 keeps in-range values, wraps the rest mod 2^64."""
        assert wrap_int64(5) == 5
        assert wrap_int64(-5) == -5
        assert wrap_int64(1 << 64) == 0
        assert wrap_int64(-(1 << 63) - 1) == (1 << 63) - 1


class TestTrace:
    def test_trace_lines(self):
        """Trace records '0: ADD 2 3 -> 5' then '4: HALT'."""
        comp = Computer([1101, 2, 3, 5, 99, 0], trace=True)
        comp.run()
        lines = comp.get_trace().split('\n')
        assert lines[0].strip() == "0: ADD 2 3 -> 5"
        assert lines[1].strip() == "4: HALT"
        comp.clear_trace()
        assert comp.get_trace() == ""

    def test_trace_disabled_by_default(self):
        """No trace unless requested."""
        comp = Computer([99])
        comp.run()
        assert comp.get_trace() == ""
