"""
Two-pass parser for HRM scripts.

Turns the text the game copies to the clipboard into a resolved Program.

Script format:
  -- HUMAN RESOURCE MACHINE PROGRAM --     header / comment line
  a:                                       label declaration
      INBOX
      COPYTO   0
      ADD      [3]                         indirect address
      JUMPZ    a
  COMMENT  0                               comment-box placement, ignored
  DEFINE COMMENT 0                         everything from here on is the
  eJyzYGBgsOQyuS7rkW...                    game's embedded drawing data

How the two passes work:
  Pass 1: Walk the lines, register each label at the index of the next
          instruction, and build instructions with their jump operands
          still symbolic.
  Pass 2: Replace every symbolic jump operand with the label's index.
          An unknown label fails the whole parse; nothing partial is
          returned.
"""

from __future__ import annotations
import enum
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .instructions import (
    Opcode, Addr, Instruction, Program,
    ADDRESS_OPCODES, JUMP_OPCODES, NO_OPERAND_OPCODES,
)

__all__ = ['ParseError', 'ParseErrorKind', 'ScriptParser', 'parse']

log = logging.getLogger(__name__)


class ParseErrorKind(enum.Enum):
    UNKNOWN_MNEMONIC = "unknown mnemonic"
    BAD_OPERAND = "bad operand"
    UNKNOWN_LABEL = "unknown label"
    DUPLICATE_LABEL = "duplicate label"
    MALFORMED_COLON = "malformed colon"


class ParseError(Exception):
    """Raised on the first malformed line of a script."""
    def __init__(self, kind: ParseErrorKind, message: str,
                 line_num: int = 0, line_text: str = ""):
        self.kind = kind
        self.line_num = line_num
        self.line_text = line_text
        text = f"{kind.value}: {message}"
        if line_text:
            text += f" (`{line_text}`)"
        super().__init__(f"Line {line_num}: {text}" if line_num else text)


COMMENT_PREFIX = '--'
COMMENT_COMMAND = 'COMMENT'
DEFINE_COMMAND = 'DEFINE'

_LABEL_NAME = r'[A-Za-z0-9_]+'
_LABEL_DECL_RE = re.compile(rf'^({_LABEL_NAME}):$')
_LABEL_REF_RE = re.compile(rf'^{_LABEL_NAME}$')
_DIRECT_RE = re.compile(r'^([0-9]+)$')
_INDIRECT_RE = re.compile(r'^\[([0-9]+)\]$')


# ──────────────────────────────────────────────
# Line Parser
# ──────────────────────────────────────────────

@dataclass
class ScriptLine:
    """One retained source line, already split on whitespace."""
    line_num: int
    raw: str
    parts: List[str]


def _parse_addr(operand: str, line: ScriptLine) -> Addr:
    m = _DIRECT_RE.match(operand)
    if m:
        return Addr(int(m.group(1)))
    m = _INDIRECT_RE.match(operand)
    if m:
        return Addr(int(m.group(1)), indirect=True)
    raise ParseError(ParseErrorKind.BAD_OPERAND,
                     f"expected a tile index like 3 or [3], got '{operand}'",
                     line.line_num, line.raw)


# ──────────────────────────────────────────────
# The Parser
# ──────────────────────────────────────────────

class ScriptParser:
    """Two-pass HRM script parser.

    Usage:
        program = ScriptParser().parse(source_text)
    """

    def __init__(self):
        self.labels: Dict[str, int] = {}          # label -> instruction index
        self._label_lines: Dict[str, int] = {}    # label -> declaring line
        self._pending: List[Tuple[Opcode, Optional[Addr], Optional[str], ScriptLine]] = []

    def parse(self, source: str) -> Program:
        """Parse script text into a resolved Program. Raises ParseError."""
        self.labels = {}
        self._label_lines = {}
        self._pending = []

        for line in self._retained_lines(source):
            self._pass1_line(line)

        program = Program(tuple(self._pass2()), dict(self.labels))
        log.debug("Parsed %d instructions, labels=%s", len(program), self.labels)
        return program

    def _retained_lines(self, source: str):
        """Yield the lines that carry labels or instructions.

        Drops blanks, `--` comments and COMMENT lines, and stops for good at
        the first DEFINE.
        """
        for line_num, raw in enumerate(source.splitlines(), 1):
            text = raw.strip()
            if not text or text.startswith(COMMENT_PREFIX):
                continue
            parts = text.split()
            if parts[0] == COMMENT_COMMAND:
                continue
            if parts[0] == DEFINE_COMMAND:
                log.debug("DEFINE at line %d, ignoring the rest", line_num)
                return
            yield ScriptLine(line_num=line_num, raw=text, parts=parts)

    def _pass1_line(self, line: ScriptLine):
        """Register a label or build one instruction with symbolic jumps."""
        if ':' in line.raw:
            m = _LABEL_DECL_RE.match(line.raw)
            if not m:
                raise ParseError(ParseErrorKind.MALFORMED_COLON,
                                 "':' is only allowed in a label declaration like 'a:'",
                                 line.line_num, line.raw)
            name = m.group(1)
            if name in self.labels:
                raise ParseError(ParseErrorKind.DUPLICATE_LABEL,
                                 f"label '{name}' already declared on line "
                                 f"{self._label_lines[name]}",
                                 line.line_num, line.raw)
            self.labels[name] = len(self._pending)
            self._label_lines[name] = line.line_num
            return

        mnem, operands = line.parts[0], line.parts[1:]
        try:
            opcode = Opcode(mnem)
        except ValueError:
            raise ParseError(ParseErrorKind.UNKNOWN_MNEMONIC,
                             f"'{mnem}'", line.line_num, line.raw) from None

        if opcode in NO_OPERAND_OPCODES:
            if operands:
                raise ParseError(ParseErrorKind.BAD_OPERAND,
                                 f"{mnem} takes no operand", line.line_num, line.raw)
            self._pending.append((opcode, None, None, line))
            return

        if len(operands) != 1:
            raise ParseError(ParseErrorKind.BAD_OPERAND,
                             f"{mnem} takes exactly one operand, got {len(operands)}",
                             line.line_num, line.raw)
        operand = operands[0]

        if opcode in ADDRESS_OPCODES:
            self._pending.append((opcode, _parse_addr(operand, line), None, line))
        elif opcode in JUMP_OPCODES:
            if not _LABEL_REF_RE.match(operand):
                raise ParseError(ParseErrorKind.BAD_OPERAND,
                                 f"{mnem} needs a label name, got '{operand}'",
                                 line.line_num, line.raw)
            self._pending.append((opcode, None, operand, line))
        else:
            raise AssertionError(f"operand shape not declared for {opcode}")

    def _pass2(self) -> List[Instruction]:
        """Resolve every jump operand to an absolute instruction index."""
        result = []
        for opcode, addr, label, line in self._pending:
            target = None
            if label is not None:
                if label not in self.labels:
                    raise ParseError(ParseErrorKind.UNKNOWN_LABEL,
                                     f"no label '{label}' declared",
                                     line.line_num, line.raw)
                target = self.labels[label]
            result.append(Instruction(opcode, addr=addr, target=target,
                                      line=line.line_num))
        return result


def parse(source: str) -> Program:
    """Parse script text, return the resolved Program."""
    return ScriptParser().parse(source)
