import builtins
import os
import shutil
import sys
import time
from typing import Optional

from .basic_io import BasicIO, PROGRAM_EXTENSION, program_filename

HELP_LINES = [
    "----------------------------------------",
    "|            DotMis Help               |",
    "----------------------------------------",
    "| .r      - Run program                |",
    "| .ls     - List program lines         |",
    "| .new    - Clear program              |",
    "| .c      - Clear screen               |",
    "| .sav    - Save program               |",
    "| .loa    - Load program               |",
    "| .bep    - Beep                       |",
    "| .wt     - Wait (ms)                  |",
    "| //      - Comment                    |",
    "| .let    - Assignment                 |",
    "| .p      - Print                      |",
    "| .in     - Input                      |",
    "| .if .th - If..Then                   |",
    "| .gt     - Goto                       |",
    "| .gs     - Gosub                      |",
    "| .rtn    - Return                     |",
    "| .?      - Help                       |",
    "| .q      - Quit                       |",
    "| .e      - End program                |",
    "----------------------------------------",
    "  Press ESC or any key to exit help...  ",
]

ENTER_ALT_SCREEN = "\033[?1049h"
LEAVE_ALT_SCREEN = "\033[?1049l"
CLEAR_SCREEN = "\033[H\033[J"


class Console:
    """Terminal side of the interpreter: output, diagnostics, input and the
    few host effects statements can trigger (tone, delay, help screen).

    Everything the interpreter prints or reads goes through one of these
    methods, so tests and embedders can swap the console for their own.
    """

    def write(self, text: str):
        sys.stdout.write(text)
        sys.stdout.flush()

    def error(self, text: str):
        print(text, file=sys.stderr)

    def read_line(self, prompt: str) -> Optional[str]:
        try:
            return builtins.input(prompt)
        except EOFError:
            return None

    def beep(self, frequency: int, duration_ms: int):
        # The terminal bell has no pitch; the frequency is only validated
        self.write("\a")
        self.delay(duration_ms)

    def delay(self, ms: int):
        if ms > 0:
            time.sleep(ms / 1000.0)

    def clear_screen(self):
        self.write(CLEAR_SCREEN)

    def show_help(self):
        self.write(ENTER_ALT_SCREEN)
        size = shutil.get_terminal_size()
        pad_top = max((size.lines - len(HELP_LINES)) // 2, 0)
        out = ["\n" * pad_top]
        for line in HELP_LINES:
            pad_left = max((size.columns - len(line)) // 2, 0)
            out.append(" " * pad_left + line + "\n")
        self.write(''.join(out))
        self.wait_for_key()
        self.write(LEAVE_ALT_SCREEN)

    def wait_for_key(self):
        if os.name != 'posix' or not sys.stdin.isatty():
            self.read_line('')
            return
        import termios
        import tty
        fd = sys.stdin.fileno()
        old = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            sys.stdin.read(1)
        finally:
            termios.tcsetattr(fd, termios.TCSANOW, old)


__all__ = [
    'BasicIO',
    'Console',
    'HELP_LINES',
    'PROGRAM_EXTENSION',
    'program_filename',
]
