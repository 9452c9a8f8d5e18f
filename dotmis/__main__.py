"""CLI entry point for the DotMis interpreter.

Usage:
    python -m dotmis [-v|-vv|-vvv] [program_file]

Options:
  -v            Increase debug verbosity (can be repeated)
  --debug-file  Where debug output goes (default: debug.txt)

With a program file (the `.pbcb` extension may be omitted) the program is
loaded, run once, and the interpreter exits. Without one, the interactive
prompt starts. Debug information is written to the debug file when
verbosity is greater than zero.
"""

import argparse
import os
import sys

from .errors import DotMisError
from .interpreter import Interpreter
from .repl import Repl, interrupt_handler
from .std.io import BasicIO


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="DotMis line-numbered interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', default='debug.txt', help='file receiving debug output')
    parser.add_argument('program', nargs='?', help='DotMis program file (.pbcb) to run')
    args = parser.parse_args(argv)

    if os.name == 'posix':
        # line editing and history for input()
        import readline  # noqa: F401

    interpreter = Interpreter(debug_level=args.v, debug_file=args.debug_file)
    try:
        if args.program:
            basic_io = BasicIO()
            try:
                basic_io.load_program(args.program, interpreter.program, interpreter.variables)
            except DotMisError as e:
                print(f"Error: {e.diag.message}", file=sys.stderr)
                sys.exit(1)
            with interrupt_handler(interpreter.context.interrupt):
                interpreter.run()
            return
        Repl(interpreter).loop()
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
