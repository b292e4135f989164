"""
Intcode VM — Sparse Memory

The address space is conceptually infinite: any non-negative address can be
read or written. Cells that were never written read as zero and are not
materialized by the read. Programs legitimately use cells past the end of
their initial image as scratch space, so there is no upper bound.

Storage is a dict (address -> value). A Memory is always a private copy;
building one from a Program never aliases the program's storage.
"""

from typing import Dict, Iterable, Optional

from .errors import InvalidAddress


class Memory:
    """Sparse, auto-growing signed-integer address space."""

    def __init__(self, cells: Optional[Dict[int, int]] = None):
        self._cells: Dict[int, int] = {}
        if cells:
            for addr, value in cells.items():
                self.write(addr, value)

    @classmethod
    def from_program(cls, program: Iterable[int]) -> 'Memory':
        """Build a fresh working copy from a program image."""
        mem = cls()
        mem._cells = dict(enumerate(program))
        return mem

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        """Read the value at addr. Unwritten cells read as zero."""
        if addr < 0:
            raise InvalidAddress(addr)
        return self._cells.get(addr, 0)

    def write(self, addr: int, value: int):
        """Write value at addr, materializing the cell."""
        if addr < 0:
            raise InvalidAddress(addr)
        self._cells[addr] = value

    def __getitem__(self, addr: int) -> int:
        return self.read(addr)

    def __setitem__(self, addr: int, value: int):
        self.write(addr, value)

    def __contains__(self, addr: int) -> bool:
        return addr in self._cells

    def __len__(self) -> int:
        """One past the highest materialized address."""
        if not self._cells:
            return 0
        return max(self._cells) + 1

    # --- Snapshots ---

    def snapshot(self) -> Dict[int, int]:
        """Copy of every materialized cell."""
        return dict(self._cells)

    def restore(self, snapshot: Dict[int, int]):
        """Replace the whole address space with a snapshot.

        Cells written since the snapshot was taken are dropped.
        """
        self._cells = dict(snapshot)

    # --- Debug ---

    def dump(self, start: int = 0, length: int = 32, width: int = 8) -> str:
        """Produce a listing of memory for debugging, `width` cells per row."""
        lines = []
        for offset in range(0, length, width):
            addr = start + offset
            count = min(width, length - offset)
            cells = ' '.join(f'{self.read(addr + i):>6}' for i in range(count))
            lines.append(f'{addr:06d}  {cells}')
        return '\n'.join(lines)
