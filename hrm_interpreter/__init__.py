"""
HRM Interpreter — runs Human Resource Machine scripts
======================================================
Parses the program text the game copies to the clipboard and executes it
against an inbox, a floor of memory tiles and an outbox, the way the game's
office worker would.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌───────────┐    ┌─────────────┐    ┌──────────┐
    │  Script  │───>│  Parser  │───>│  Program  │───>│ Interpreter │───>│  Outbox  │
    │  (text)  │    │ (2-pass) │    │ (resolved)│    │ (dispatch)  │    │ (values) │
    └──────────┘    └──────────┘    └───────────┘    └─────────────┘    └──────────┘
                                                            ^
                                        inbox + floor tiles ┘

    - values.py:       Integer / Letter boxes and their arithmetic
    - instructions.py: Opcode, Addr, Instruction, Program (+ listing)
    - parser.py:       Two-pass label resolver → Program
    - memory.py:       Sparse tile floor, direct/indirect address resolution
    - interpreter.py:  Fetch/dispatch loop, RuntimeFault taxonomy
    - loaders.py:      Inbox / memory preset / script file loading
"""

__version__ = "0.2.0"

from .values import Integer, Letter, Value, parse_value_token
from .instructions import Opcode, Addr, Instruction, Program
from .parser import ParseError, ParseErrorKind, ScriptParser, parse
from .memory import Memory, ConfigurationError
from .interpreter import (
    Interpreter, RuntimeFault, FaultKind, StepLimitExceeded, StopReason, run,
)
from .loaders import LoaderError, parse_inputs, load_memory_preset, render_output


def run_source(source: str, *, inputs=(), memory=None, max_address=None,
               max_steps=None) -> list:
    """Parse and run script text in one go.

    Full pipeline: parse() -> Program -> Interpreter.run().

    Args:
        source: HRM script text.
        inputs: Inbox values, front first.
        memory: Initial tiles as {address: Value}.
        max_address: Last valid tile index, or None for a growing floor.
        max_steps: Abort with StepLimitExceeded after this many steps.

    Returns:
        The outbox contents as a list of Integer / Letter.
    """
    program = parse(source)
    return run(program, initial_memory=memory, inputs=inputs,
               max_address=max_address, max_steps=max_steps)
