"""
Intcode VM — Program Loader

Program text is a single line of comma-separated signed decimal integers,
e.g. "1,9,10,3,2,3,11,0,99,30,40,50". Token N is stored at address N.
Whitespace around tokens and a trailing newline are ignored.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Tuple, Union

from .errors import ProgramParseError

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

TOKEN_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Program:
    """Immutable program image (rom). Address N holds values[N]."""
    values: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, addr: int) -> int:
        return self.values[addr]

    def __iter__(self) -> Iterator[int]:
        return iter(self.values)

    def to_text(self) -> str:
        return ','.join(str(v) for v in self.values)


def parse_program(text: str) -> Program:
    """Parse comma-separated program text into a Program.

    Raises:
        ProgramParseError: on the first token that is not a signed 64-bit integer
    """
    values = []
    for position, token in enumerate(text.strip().split(',')):
        token = token.strip()
        if not TOKEN_RE.fullmatch(token):
            raise ProgramParseError(token, position)
        value = int(token)
        if not INT64_MIN <= value <= INT64_MAX:
            raise ProgramParseError(token, position)
        values.append(value)
    return Program(tuple(values))


def load_program(path_or_text: Union[str, Path]) -> Program:
    """Load a program from a file path or from raw program text.

    A Path is always read as a file. A str without a comma is read as a
    file when one by that name exists, so "99" loads ./99 if present; pass
    text through parse_program() to avoid that lookup.
    """
    if isinstance(path_or_text, Path):
        return parse_program(path_or_text.read_text(encoding='utf-8'))
    p = Path(path_or_text)
    if ',' not in path_or_text and p.is_file():
        return parse_program(p.read_text(encoding='utf-8'))
    return parse_program(path_or_text)
