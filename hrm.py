#!/usr/bin/env python3
"""
hrm — Human Resource Machine script interpreter CLI

Usage:
    python hrm.py <script> [-i VALUE ...] [-m ADDR VALUE ... | -m FILE]
                           [-M MAX_ADDRESS] [--max-steps N] [--listing] [-v]

Outbox values are printed to stdout separated by spaces. Parse errors,
runtime faults and bad arguments go to stderr with exit code 1.

Examples:
    python hrm.py level02.txt -i 3 4 5 6 -M 0
    python hrm.py level41.txt -i 8 3 -2 A -m 0 0 24 0 -M 24
    python hrm.py level29.txt -i 3 -m memory.txt
    python hrm.py level02.txt --listing          # resolved program, no run
"""

import argparse
import logging
import sys
from pathlib import Path

from hrm_interpreter import __version__, parse
from hrm_interpreter.config import DEFAULT_MAX_STEPS, LOG_DIR, LOG_NAME
from hrm_interpreter.interpreter import Interpreter, RuntimeFault, StepLimitExceeded
from hrm_interpreter.loaders import (
    LoaderError, load_memory_preset, parse_inputs, read_script, render_floor,
    render_output,
)
from hrm_interpreter.log_setup import setup_logging, verbosity_to_level
from hrm_interpreter.memory import ConfigurationError
from hrm_interpreter.parser import ParseError

log = logging.getLogger(LOG_NAME)


def non_negative_int(value: str) -> int:
    """argparse type for tile indices and step counts."""
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hrm",
        description="Human Resource Machine interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""examples:
  hrm level02.txt -i 10 20 30 A E F
  hrm level02.txt -m 0 10 1 A 2 30 -M 24
  hrm level02.txt -m memory.txt
""",
    )
    parser.add_argument("script", help="Script file as copied out of the game")
    parser.add_argument("-i", "--inputs", nargs="+", default=[], metavar="VALUE",
                        help="Inbox values, integers or uppercase letters "
                             "(default: no input values)")
    parser.add_argument("-m", "--memory", nargs="+", default=[], metavar="TOKEN",
                        help="Starting floor: ADDR VALUE pairs, or one file holding them "
                             "(default: empty floor)")
    parser.add_argument("-M", "--max-mem", type=non_negative_int, default=None,
                        metavar="MAX_ADDRESS",
                        help="Last tile index, the level's tile count minus one "
                             "(default: no maximum)")
    parser.add_argument("--max-steps", type=non_negative_int, default=DEFAULT_MAX_STEPS,
                        help=f"Abort after this many instructions (default: {DEFAULT_MAX_STEPS})")
    parser.add_argument("--listing", action="store_true",
                        help="Print the resolved program and exit")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="More console logging (-v info, -vv debug)")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Write a DEBUG log to this file")
    parser.add_argument("--log", action="store_true",
                        help=f"Write a timestamped DEBUG log under {LOG_DIR}")
    parser.add_argument("--version", action="version", version=f"hrm {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        console_level=verbosity_to_level(args.verbose),
        log_dir=LOG_DIR if args.log else None,
        log_file=args.log_file,
    )

    try:
        source = read_script(args.script)
        program = parse(source)
        log.info("Loaded %s: %d instructions", args.script, len(program))

        if args.listing:
            sys.stdout.write(program.listing())
            return 0

        inputs = parse_inputs(args.inputs)
        memory = load_memory_preset(args.memory) if args.memory else {}

        interp = Interpreter(program, initial_memory=memory, inputs=inputs,
                             max_address=args.max_mem)
        outputs = interp.run(max_steps=args.max_steps)
        log.info("Finished (%s) after %d steps", interp.stop_reason.value, interp.steps)

    except LoaderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except RuntimeFault as e:
        print(f"Runtime fault: {e}", file=sys.stderr)
        if e.output:
            print(f"Output before fault: {render_output(e.output)}", file=sys.stderr)
        log.info("Floor at fault: %s", render_floor(interp.memory.snapshot()) or "(empty)")
        return 1
    except StepLimitExceeded as e:
        print(f"Aborted: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal interpreter error: {e}", file=sys.stderr)
        log.debug("Traceback", exc_info=True)
        return 2

    print(render_output(outputs))
    return 0


if __name__ == "__main__":
    sys.exit(main())
