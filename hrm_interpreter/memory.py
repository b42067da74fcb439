"""
Floor tile memory for the HRM interpreter.

Tiles are index-addressed and stored sparsely, so only occupied tiles take
space. A level either has a fixed number of tiles (max_address given,
indices 0..max_address) or the floor extends to the highest index ever
written.

Reading a tile that was never written is not the same as reading past the
floor: the first is an uninitialized cell, the second an out-of-range
address. Both become runtime faults in the interpreter; this module only
raises the plain exceptions below.
"""

from typing import Dict, Mapping, Optional

from .instructions import Addr
from .values import Integer, Value

__all__ = ['Memory', 'ConfigurationError', 'TileAccessError', 'UninitializedCell',
           'AddressOutOfRange', 'BadPointer']


class ConfigurationError(ValueError):
    """Memory was set up inconsistently (preset beyond the last tile, ...)."""


class TileAccessError(Exception):
    """Base for tile access failures. `address` is the tile that failed."""
    def __init__(self, message: str, address: int):
        self.address = address
        super().__init__(message)


class UninitializedCell(TileAccessError):
    pass


class AddressOutOfRange(TileAccessError):
    pass


class BadPointer(TileAccessError):
    """The pointer tile of an indirect address holds a letter."""


class Memory:
    """Bounded or growing floor, stored as {address: Value} for occupied tiles."""

    def __init__(self, initial: Optional[Mapping[int, Value]] = None,
                 max_address: Optional[int] = None):
        if max_address is not None and max_address < 0:
            raise ConfigurationError(f"max address must be >= 0, got {max_address}")
        self.max_address = max_address
        self._tiles: Dict[int, Value] = {}
        for address, value in (initial or {}).items():
            if address < 0:
                raise ConfigurationError(f"negative memory address {address}")
            if max_address is not None and address > max_address:
                raise ConfigurationError(
                    f"memory address {address} out of bounds (accepted: [0, {max_address}])")
            self._tiles[address] = value

    def __len__(self) -> int:
        """Floor size: max_address + 1 when bounded, else highest written index + 1."""
        if self.max_address is not None:
            return self.max_address + 1
        return max(self._tiles) + 1 if self._tiles else 0

    def _check(self, address: int):
        if address < 0 or (self.max_address is not None and address > self.max_address):
            bound = f"[0, {self.max_address}]" if self.max_address is not None else "[0, ∞)"
            raise AddressOutOfRange(
                f"address {address} out of bounds (accepted: {bound})", address)

    # --- Core read/write ---

    def get(self, address: int) -> Optional[Value]:
        """Raw tile content, None when the tile is empty."""
        self._check(address)
        return self._tiles.get(address)

    def read(self, address: int) -> Value:
        value = self.get(address)
        if value is None:
            raise UninitializedCell(f"no value on tile {address}", address)
        return value

    def write(self, address: int, value: Value):
        self._check(address)
        self._tiles[address] = value

    # --- Addressing ---

    def resolve(self, addr: Addr) -> int:
        """Effective tile index for a direct or indirect address."""
        if not addr.indirect:
            self._check(addr.index)
            return addr.index

        pointer = self.get(addr.index)
        if pointer is None:
            raise UninitializedCell(
                f"no value on tile {addr.index} to use as an address", addr.index)
        if not isinstance(pointer, Integer):
            raise BadPointer(
                f"tile {addr.index} holds letter {pointer}, not an address", addr.index)
        self._check(pointer.value)
        return pointer.value

    def snapshot(self) -> Dict[int, Value]:
        """Occupied tiles as {address: value}, in address order."""
        return dict(sorted(self._tiles.items()))
