"""
HRM Interpreter — Execution Engine

Runs a resolved Program against the hand, the floor tiles and the inbox,
and collects what reaches the outbox.

Execution model:
  1. If PC is past the last instruction → DONE
  2. Fetch the instruction at PC
  3. Dispatch on its opcode → update hand, memory, inbox, outbox
  4. PC += 1 unless the handler jumped
  5. Count the step; abort with StepLimitExceeded past max_steps

Termination reasons:
  - DONE:  fell off the end of the program (or jumped to its end)
  - HALT:  INBOX with nothing left on the inbox (the level's normal end)

Anything else is a RuntimeFault and ends the run on the spot: no retry,
nothing more reaches the outbox.
"""

from __future__ import annotations
import enum
import logging
from collections import deque
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .instructions import Opcode, Instruction, Program
from .memory import (
    Memory, TileAccessError, UninitializedCell, AddressOutOfRange, BadPointer,
)
from .values import (
    Integer, Value, ValueTypeError, ValueOverflowError, add, sub, bump,
)

__all__ = ['Interpreter', 'RuntimeFault', 'FaultKind', 'StepLimitExceeded',
           'StopReason', 'run']

log = logging.getLogger(__name__)


class StopReason(enum.Enum):
    DONE = 'DONE'
    HALT = 'HALT'


class FaultKind(enum.Enum):
    EMPTY_HAND = "empty hand"
    UNINITIALIZED_CELL = "uninitialized cell"
    TYPE_MISMATCH = "type mismatch"
    ADDRESS_OUT_OF_RANGE = "address out of range"
    OVERFLOW = "overflow"


class RuntimeFault(Exception):
    """A script did something the game would stop it for.

    `position` is the index of the faulting instruction, `output` what
    reached the outbox before it.
    """
    def __init__(self, kind: FaultKind, position: int, instruction: Instruction,
                 detail: str, output: Optional[List[Value]] = None):
        self.kind = kind
        self.position = position
        self.instruction = instruction
        self.detail = detail
        self.output = list(output or [])
        where = f"instruction {position} ({instruction}"
        where += f", line {instruction.line})" if instruction.line else ")"
        super().__init__(f"{kind.value} at {where}: {detail}")


class StepLimitExceeded(Exception):
    """The run went past the caller's step budget. Not a script fault."""
    def __init__(self, max_steps: int, position: int,
                 output: Optional[List[Value]] = None):
        self.max_steps = max_steps
        self.position = position
        self.output = list(output or [])
        super().__init__(f"step limit of {max_steps} exceeded at instruction {position}")


class _HaltException(Exception):
    pass


class _EmptyHand(Exception):
    pass


class Interpreter:
    """Single-use HRM machine.

    Usage:
        interp = Interpreter(program, initial_memory={0: Integer(0)},
                             inputs=[Integer(3), Letter('A')], max_address=9)
        outputs = interp.run(max_steps=100_000)
        interp.stop_reason    # StopReason.HALT
    """

    def __init__(self, program: Program,
                 initial_memory: Optional[Mapping[int, Value]] = None,
                 inputs: Iterable[Value] = (),
                 max_address: Optional[int] = None):
        self.program = program
        self.memory = Memory(initial_memory, max_address)
        self.hand: Optional[Value] = None
        self.pc: int = 0
        self.inbox = deque(inputs)
        self.outbox: List[Value] = []
        self.steps: int = 0
        self.stop_reason: Optional[StopReason] = None

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def run(self, max_steps: Optional[int] = None) -> List[Value]:
        """Run to completion. Returns the outbox contents.

        Raises RuntimeFault on a script error and StepLimitExceeded when
        max_steps instructions ran without the program ending.
        """
        if self.stop_reason is not None:
            raise RuntimeError("interpreter already ran; build a new one per run")

        log.debug("Run start: %d instructions, %d inputs, max_address=%s",
                  len(self.program), len(self.inbox), self.memory.max_address)

        while self.pc < len(self.program):
            if max_steps is not None and self.steps >= max_steps:
                log.warning("Step limit %d hit at instruction %d", max_steps, self.pc)
                raise StepLimitExceeded(max_steps, self.pc, self.outbox)
            self._step()

        if self.stop_reason is None:
            self.stop_reason = StopReason.DONE
        log.debug("Run stop: %s after %d steps, %d outputs",
                  self.stop_reason.value, self.steps, len(self.outbox))
        return list(self.outbox)

    def _step(self):
        """Execute the instruction at PC, translating errors into faults."""
        pc = self.pc
        instr = self.program[pc]
        handler = self._dispatch[instr.opcode]

        try:
            next_pc = handler(instr)
        except _HaltException:
            self.stop_reason = StopReason.HALT
            next_pc = len(self.program)
        except _EmptyHand:
            raise self._fault(FaultKind.EMPTY_HAND, "nothing in hand") from None
        except UninitializedCell as e:
            raise self._fault(FaultKind.UNINITIALIZED_CELL, str(e)) from None
        except AddressOutOfRange as e:
            raise self._fault(FaultKind.ADDRESS_OUT_OF_RANGE, str(e)) from None
        except (BadPointer, ValueTypeError) as e:
            raise self._fault(FaultKind.TYPE_MISMATCH, str(e)) from None
        except ValueOverflowError as e:
            raise self._fault(FaultKind.OVERFLOW, str(e)) from None

        self.steps += 1
        self.pc = pc + 1 if next_pc is None else next_pc

    def _fault(self, kind: FaultKind, detail: str) -> RuntimeFault:
        fault = RuntimeFault(kind, self.pc, self.program[self.pc], detail, self.outbox)
        log.info("Fault: %s", fault)
        return fault

    def _take_hand(self) -> Value:
        if self.hand is None:
            raise _EmptyHand()
        return self.hand

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr) -> Optional[int]
    # Returns the next PC for a taken jump, None to fall through.

    def _build_dispatch(self) -> Dict[Opcode, Callable[[Instruction], Optional[int]]]:
        table = {
            Opcode.INBOX:    self._op_inbox,
            Opcode.OUTBOX:   self._op_outbox,
            Opcode.COPYFROM: self._op_copyfrom,
            Opcode.COPYTO:   self._op_copyto,
            Opcode.ADD:      self._op_add,
            Opcode.SUB:      self._op_sub,
            Opcode.BUMPUP:   self._op_bumpup,
            Opcode.BUMPDN:   self._op_bumpdn,
            Opcode.JUMP:     self._op_jump,
            Opcode.JUMPZ:    self._op_jumpz,
            Opcode.JUMPN:    self._op_jumpn,
        }
        assert set(table) == set(Opcode), "dispatch table out of sync with Opcode"
        return table

    # ── Inbox / outbox ──

    def _op_inbox(self, instr: Instruction):
        if not self.inbox:
            raise _HaltException()
        self.hand = self.inbox.popleft()

    def _op_outbox(self, instr: Instruction):
        self.outbox.append(self._take_hand())
        self.hand = None

    # ── Copy ──

    def _op_copyfrom(self, instr: Instruction):
        self.hand = self.memory.read(self.memory.resolve(instr.addr))

    def _op_copyto(self, instr: Instruction):
        value = self._take_hand()
        self.memory.write(self.memory.resolve(instr.addr), value)

    # ── Arithmetic ──

    def _op_add(self, instr: Instruction):
        held = self._take_hand()
        self.hand = add(held, self.memory.read(self.memory.resolve(instr.addr)))

    def _op_sub(self, instr: Instruction):
        held = self._take_hand()
        self.hand = sub(held, self.memory.read(self.memory.resolve(instr.addr)))

    def _bump(self, instr: Instruction, delta: int):
        address = self.memory.resolve(instr.addr)
        result = bump(self.memory.read(address), delta)
        self.memory.write(address, result)
        self.hand = result

    def _op_bumpup(self, instr: Instruction):
        self._bump(instr, 1)

    def _op_bumpdn(self, instr: Instruction):
        self._bump(instr, -1)

    # ── Jumps ──

    def _op_jump(self, instr: Instruction) -> int:
        return instr.target

    def _held_integer(self, opcode: Opcode) -> int:
        held = self._take_hand()
        if not isinstance(held, Integer):
            raise ValueTypeError(f"{opcode.value} needs a number in hand, got letter {held}")
        return held.value

    def _op_jumpz(self, instr: Instruction) -> Optional[int]:
        return instr.target if self._held_integer(instr.opcode) == 0 else None

    def _op_jumpn(self, instr: Instruction) -> Optional[int]:
        return instr.target if self._held_integer(instr.opcode) < 0 else None


def run(program: Program,
        initial_memory: Optional[Mapping[int, Value]] = None,
        inputs: Iterable[Value] = (),
        max_address: Optional[int] = None,
        max_steps: Optional[int] = None) -> List[Value]:
    """Run a program once on a fresh machine, return the outbox contents."""
    interp = Interpreter(program, initial_memory, inputs, max_address)
    return interp.run(max_steps=max_steps)
