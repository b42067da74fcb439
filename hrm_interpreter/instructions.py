"""
Instruction model for the HRM interpreter.

Defines the closed instruction set, the two addressing modes and the
resolved Program produced by the parser and consumed by the interpreter.

Addressing modes:
  DIRECT    COPYFROM 3     — tile 3
  INDIRECT  COPYFROM [3]   — the tile whose index is stored in tile 3

Jump targets are plain instruction indices once parsing is done. A target
equal to len(program) means "fall off the end", i.e. normal termination.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

__all__ = ['Opcode', 'Addr', 'Instruction', 'Program',
           'ADDRESS_OPCODES', 'JUMP_OPCODES', 'NO_OPERAND_OPCODES']


class Opcode(enum.Enum):
    INBOX = "INBOX"
    OUTBOX = "OUTBOX"
    COPYFROM = "COPYFROM"
    COPYTO = "COPYTO"
    ADD = "ADD"
    SUB = "SUB"
    BUMPUP = "BUMPUP"
    BUMPDN = "BUMPDN"
    JUMP = "JUMP"
    JUMPZ = "JUMPZ"
    JUMPN = "JUMPN"


# Operand shape per opcode
NO_OPERAND_OPCODES = frozenset({Opcode.INBOX, Opcode.OUTBOX})
ADDRESS_OPCODES = frozenset({
    Opcode.COPYFROM, Opcode.COPYTO, Opcode.ADD, Opcode.SUB,
    Opcode.BUMPUP, Opcode.BUMPDN,
})
JUMP_OPCODES = frozenset({Opcode.JUMP, Opcode.JUMPZ, Opcode.JUMPN})


@dataclass(frozen=True)
class Addr:
    """A tile reference: direct index or pointer through a tile."""
    index: int
    indirect: bool = False

    def __str__(self) -> str:
        return f"[{self.index}]" if self.indirect else str(self.index)


@dataclass(frozen=True)
class Instruction:
    """One resolved instruction.

    `line` is the 1-based source line it came from. It is kept for
    diagnostics and excluded from equality, so scripts that differ only in
    layout compare equal.
    """
    opcode: Opcode
    addr: Optional[Addr] = None
    target: Optional[int] = None
    line: int = field(default=0, compare=False)

    def __str__(self) -> str:
        if self.addr is not None:
            return f"{self.opcode.value} {self.addr}"
        if self.target is not None:
            return f"{self.opcode.value} @{self.target}"
        return self.opcode.value


@dataclass(frozen=True)
class Program:
    """Immutable, fully resolved instruction list.

    `labels` maps every declared label to the index it was bound to. The
    interpreter never looks at it; it only feeds listing().
    """
    instructions: Tuple[Instruction, ...]
    labels: Dict[str, int] = field(default_factory=dict, compare=False, hash=False)

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def listing(self) -> str:
        """Render the program back to HRM script text.

        Declared labels are reused; jump targets without one get a generated
        name. Parsing the result yields an equal Program.
        """
        names: Dict[int, List[str]] = {}
        for name, index in sorted(self.labels.items(), key=lambda kv: (kv[1], kv[0])):
            names.setdefault(index, []).append(name)

        taken = set(self.labels)
        counter = 0
        for instr in self.instructions:
            if instr.target is not None and instr.target not in names:
                while f"L{counter}" in taken:
                    counter += 1
                taken.add(f"L{counter}")
                names[instr.target] = [f"L{counter}"]

        lines = ["-- HUMAN RESOURCE MACHINE PROGRAM --", ""]
        for index in range(len(self.instructions) + 1):
            for name in names.get(index, []):
                lines.append(f"{name}:")
            if index == len(self.instructions):
                break
            instr = self.instructions[index]
            if instr.addr is not None:
                lines.append(f"    {instr.opcode.value:<8} {instr.addr}")
            elif instr.target is not None:
                lines.append(f"    {instr.opcode.value:<8} {names[instr.target][0]}")
            else:
                lines.append(f"    {instr.opcode.value}")
        return '\n'.join(lines) + '\n'
