"""
Loaders for everything a run needs besides the program.

  inputs          -i 10 20 30 A E F
  memory preset   -m 0 10 1 A 2 30      (address/value pairs)
                  -m memory.txt         (same pairs, whitespace/newline separated)
  script          path to a .hrm/.txt file as copied out of the game
"""

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence, Union

from .values import Value, parse_value_token

__all__ = ['LoaderError', 'parse_inputs', 'parse_memory_pairs',
           'load_memory_preset', 'read_script', 'render_output', 'render_floor']


class LoaderError(ValueError):
    """Raised on malformed input/memory tokens or unreadable files."""


def parse_inputs(tokens: Iterable[str]) -> List[Value]:
    """Parse inbox tokens in order."""
    values = []
    for token in tokens:
        try:
            values.append(parse_value_token(token))
        except ValueError as e:
            raise LoaderError(f"Invalid input value: {e}") from e
    return values


def parse_memory_pairs(tokens: Sequence[str]) -> Dict[int, Value]:
    """Parse `<address> <value> <address> <value> ...` into a tile mapping.

    A later pair for the same address wins.
    """
    if len(tokens) % 2 != 0:
        raise LoaderError(
            "Invalid memory arguments: expected an even number of tokens "
            f"(address/value pairs), got {len(tokens)}")

    memory: Dict[int, Value] = {}
    for i in range(0, len(tokens), 2):
        addr_text, value_text = tokens[i].strip(), tokens[i + 1]
        if not (addr_text.isdigit() and addr_text.isascii()):
            raise LoaderError(f"Invalid memory address: {addr_text!r}")
        try:
            memory[int(addr_text)] = parse_value_token(value_text)
        except ValueError as e:
            raise LoaderError(f"Invalid memory value at address {addr_text}: {e}") from e
    return memory


def load_memory_preset(tokens: Sequence[str]) -> Dict[int, Value]:
    """Memory from CLI tokens: inline pairs, or a single file path."""
    if len(tokens) == 1:
        path = Path(tokens[0])
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise LoaderError(f"Could not read memory file {path}: {e}") from e
        return parse_memory_pairs(text.split())
    return parse_memory_pairs(tokens)


def read_script(path: Union[str, Path]) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise LoaderError(f"Could not read script {path}: {e}") from e


def render_output(values: Iterable[Value]) -> str:
    """Outbox contents as space-separated tokens."""
    return ' '.join(str(v) for v in values)


def render_floor(tiles: Mapping[int, Value]) -> str:
    """Occupied tiles as `addr=value` tokens, e.g. `0=9 3=A`."""
    return ' '.join(f"{address}={value}" for address, value in tiles.items())
