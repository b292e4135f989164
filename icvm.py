#!/usr/bin/env python3
"""
icvm — Intcode VM CLI

One CLI for every way of driving a program:
    icvm run         — Run a program, print every output
    icvm diagnostic  — Run with a system id as every input, print the last output
    icvm amplify     — Find the best phase sequence for an amplifier ring
    icvm gravity     — Gravity-assist result for a noun/verb, or search a target

The program is read from -i/--input, or from stdin when piped.

Examples:
    python icvm.py -i day09.txt run --value 1
    python icvm.py -i day05.txt diagnostic --system-id 5
    python icvm.py -i day07.txt amplify --phases 5,6,7,8,9
    python icvm.py -i day02.txt gravity --noun 12 --verb 2
    cat day02.txt | python icvm.py gravity --target 19690720
"""

import argparse
import logging
import sys
import os

# Allow running from project root without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from intcode_vm import __version__
from intcode_vm.amplify import AmplifierChain, SERIAL_PHASES
from intcode_vm.computer import Computer
from intcode_vm.diagnostics import (
    run_program, diagnostic_code, gravity_assist, find_noun_verb,
)
from intcode_vm.errors import IntcodeError
from intcode_vm.loader import parse_program
from intcode_vm.log_setup import setup_logging


def parse_phases(value: str):
    """Parse a phase list like '5,6,7,8,9'."""
    try:
        return tuple(int(v) for v in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid phase list: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icvm",
        description="Intcode VM — run, trace and compose Intcode programs",
    )
    parser.add_argument("--version", action="version", version=f"icvm {__version__}")
    parser.add_argument("-i", "--input", help="Program file (default: stdin)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log debug details to the console")
    parser.add_argument("--log-dir", default=None,
                        help="Also write a DEBUG log file to this directory")
    sub = parser.add_subparsers(dest="command", metavar="command")
    sub.required = True

    # ── run ──────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Run a program and print every output")
    p_run.add_argument("--value", type=int, action="append", default=[],
                       help="Input value (repeat for several inputs)")
    p_run.add_argument("--trace", action="store_true",
                       help="Print the instruction trace to stderr")

    # ── diagnostic ───────────────────────────────────────────────────────
    p_diag = sub.add_parser("diagnostic", help="Run with one system id as every input")
    p_diag.add_argument("--system-id", type=int, required=True)

    # ── amplify ──────────────────────────────────────────────────────────
    p_amp = sub.add_parser("amplify", help="Best thruster signal for an amplifier ring")
    p_amp.add_argument("--phases", type=parse_phases, default=SERIAL_PHASES,
                       help="Comma-separated phase settings (default: 0,1,2,3,4)")

    # ── gravity ──────────────────────────────────────────────────────────
    p_grav = sub.add_parser("gravity", help="Gravity-assist noun/verb run or search")
    p_grav.add_argument("--noun", type=int)
    p_grav.add_argument("--verb", type=int)
    p_grav.add_argument("--target", type=int,
                        help="Search noun/verb 1..99 for this result")

    return parser


def read_source(path) -> str:
    if path:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    if sys.stdin.isatty():
        raise OSError("No input stream found; pipe a program or use -i/--input")
    return sys.stdin.read()


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        "intcode_vm",
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
        log_dir=args.log_dir,
    )

    try:
        program = parse_program(read_source(args.input))

        if args.command == "run":
            computer = Computer(program, trace=args.trace)
            try:
                outputs = run_program(program, args.value, computer=computer)
            finally:
                if args.trace:
                    print(computer.get_trace(), file=sys.stderr)
            for value in outputs:
                print(value)

        elif args.command == "diagnostic":
            print(diagnostic_code(program, args.system_id))

        elif args.command == "amplify":
            result = AmplifierChain(program, args.phases).best()
            print(f"{result.signal} (phases {','.join(map(str, result.phases))})")

        elif args.command == "gravity":
            if args.target is not None:
                print(find_noun_verb(program, args.target))
            elif args.noun is not None and args.verb is not None:
                print(gravity_assist(program, args.noun, args.verb))
            else:
                parser.error("gravity needs --target, or both --noun and --verb")

    except (IntcodeError, LookupError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
