"""
Value model for the HRM interpreter.

Everything that moves through the hand, the floor tiles and the conveyor
belts is one of two boxes:

  Integer — signed 32-bit number
  Letter  — single uppercase character 'A'..'Z'

The two kinds never convert into each other. Arithmetic lives here as pure
functions (add / sub / bump) so the interpreter only has to map the
exceptions they raise onto fault kinds.
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import total_ordering
from typing import Union

from .config import INTEGER_MIN, INTEGER_MAX, LETTERS

__all__ = [
    'Integer', 'Letter', 'Value', 'ValueTypeError', 'ValueOverflowError',
    'parse_value_token', 'add', 'sub', 'bump',
]


class ValueTypeError(TypeError):
    """Raised when an operation is applied to the wrong kind of value."""


class ValueOverflowError(OverflowError):
    """Raised when an arithmetic result leaves the 32-bit range."""


def _checked(result: int) -> 'Integer':
    if result < INTEGER_MIN or result > INTEGER_MAX:
        raise ValueOverflowError(f"result {result} outside [{INTEGER_MIN}, {INTEGER_MAX}]")
    return Integer(result)


@total_ordering
@dataclass(frozen=True)
class Integer:
    """A number box."""
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueTypeError(f"Integer needs an int, got {self.value!r}")
        if self.value < INTEGER_MIN or self.value > INTEGER_MAX:
            raise ValueOverflowError(f"{self.value} outside [{INTEGER_MIN}, {INTEGER_MAX}]")

    def __lt__(self, other: 'Integer') -> bool:
        if not isinstance(other, Integer):
            return NotImplemented
        return self.value < other.value

    def __str__(self) -> str:
        return str(self.value)


@total_ordering
@dataclass(frozen=True)
class Letter:
    """A letter box. Only 'A'..'Z' exist in the game."""
    char: str

    def __post_init__(self):
        if not isinstance(self.char, str) or len(self.char) != 1 or self.char not in LETTERS:
            raise ValueTypeError(f"Letter needs one of A-Z, got {self.char!r}")

    def __lt__(self, other: 'Letter') -> bool:
        if not isinstance(other, Letter):
            return NotImplemented
        return self.char < other.char

    def __str__(self) -> str:
        return self.char


Value = Union[Integer, Letter]


def parse_value_token(text: str) -> Value:
    """Parse one input/memory token: a signed decimal integer or a letter.

    Raises ValueError on anything else (lowercase, multi-char words, '+5'
    with junk, out-of-range numbers).
    """
    text = text.strip()
    if len(text) == 1 and text in LETTERS:
        return Letter(text)

    digits = text[1:] if text[:1] in ('-', '+') else text
    if digits.isdigit() and digits.isascii():
        try:
            return Integer(int(text))
        except ValueOverflowError as e:
            raise ValueError(f"value out of range: {text!r} ({e})") from e

    raise ValueError(f"not an integer or an uppercase letter: {text!r}")


# ──────────────────────────────────────────────
# Arithmetic
# ──────────────────────────────────────────────

def add(left: Value, right: Value) -> Integer:
    """left + right. Integers only."""
    if isinstance(left, Integer) and isinstance(right, Integer):
        return _checked(left.value + right.value)
    raise ValueTypeError(f"cannot add {_kind(left)} {left} and {_kind(right)} {right}")


def sub(left: Value, right: Value) -> Integer:
    """left - right.

    Two letters subtract as their distance in the alphabet, which yields an
    Integer. One letter and one integer is a type error.
    """
    if isinstance(left, Integer) and isinstance(right, Integer):
        return _checked(left.value - right.value)
    if isinstance(left, Letter) and isinstance(right, Letter):
        return Integer(ord(left.char) - ord(right.char))
    raise ValueTypeError(f"cannot subtract {_kind(right)} {right} from {_kind(left)} {left}")


def bump(value: Value, delta: int) -> Integer:
    """value + delta for BUMPUP (+1) / BUMPDN (-1)."""
    if isinstance(value, Integer):
        return _checked(value.value + delta)
    raise ValueTypeError(f"cannot bump {_kind(value)} {value}")


def _kind(value: Value) -> str:
    return 'letter' if isinstance(value, Letter) else 'integer'
