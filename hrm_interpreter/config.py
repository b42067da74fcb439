"""
HRM Interpreter — Defaults
===========================

Values the engine and CLI fall back to when the caller does not override
them. Per-run settings (max address, step limit, inputs) always travel as
arguments; nothing here is mutated at runtime.
"""

from pathlib import Path


# =============================================================================
#  VALUE RANGE
# =============================================================================
INTEGER_MIN = -(2 ** 31)   # signed 32-bit, same as the game's save format
INTEGER_MAX = 2 ** 31 - 1
LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


# =============================================================================
#  EXECUTION
# =============================================================================
# JUMP makes the language Turing-complete. The engine runs unbounded unless
# given max_steps; the CLI always passes this one.
DEFAULT_MAX_STEPS = 10_000_000


# =============================================================================
#  LOGGING
# =============================================================================
LOG_NAME = "hrm_interpreter"   # parent of every module logger
LOG_DIR = Path.cwd() / "logs"
