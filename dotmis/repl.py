"""Interactive front end for DotMis.

A line starting with a number edits the stored program: `"<n> <text>"`
inserts or replaces line n and `"<n>"` alone deletes it. A line whose
first word is a REPL command (`.r`, `.ls`, `.new`, `.c`, `.sav`, `.loa`,
`.q`) runs that command. Anything else is executed immediately as a
single statement.
"""

from __future__ import annotations

import os
import signal
import threading
from contextlib import contextmanager
from typing import Optional

from .errors import DotMisError
from .interpreter import CancellationToken, Interpreter
from .parser import parse_line_entry
from .std.io import BasicIO
from .types import Diagnostic

VERSION = '1.0'


@contextmanager
def interrupt_handler(token: CancellationToken):
    """Route Ctrl-C to `token` instead of raising KeyboardInterrupt."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, lambda signum, frame: token.set())
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def free_memory_mb() -> Optional[int]:
    if not hasattr(os, 'sysconf'):
        return None
    try:
        pages = os.sysconf('SC_AVPHYS_PAGES')
        page_size = os.sysconf('SC_PAGE_SIZE')
    except (ValueError, OSError):
        return None
    return pages * page_size // (1024 * 1024)


class Repl:
    def __init__(self, interpreter: Optional[Interpreter] = None, basic_io: Optional[BasicIO] = None):
        self.interpreter = interpreter if interpreter is not None else Interpreter()
        self.basic_io = basic_io if basic_io is not None else BasicIO()
        self.commands = {
            '.r': self.cmd_run,
            '.ls': self.cmd_list,
            '.new': self.cmd_new,
            '.c': self.cmd_clear,
            '.sav': self.cmd_save,
            '.loa': self.cmd_load,
            '.q': self.cmd_quit,
        }

    @property
    def context(self):
        return self.interpreter.context

    @property
    def console(self):
        return self.interpreter.context.console

    def banner(self) -> str:
        free = free_memory_mb()
        memory = f"{free} MB free (OK)" if free is not None else "Free RAM unknown (OK)"
        return f"DotMis v{VERSION}\n{memory}\n"

    def loop(self):
        self.console.write(self.banner())
        while True:
            try:
                line = self.console.read_line("> ")
            except KeyboardInterrupt:
                self.console.write("\n")
                continue
            if line is None:
                break
            if not self.process_line(line):
                break
        self.cmd_new('')

    def process_line(self, line: str) -> bool:
        """Handle one line of input. Returns False when the REPL should stop."""
        stripped = line.strip()
        if not stripped:
            return True
        entry = parse_line_entry(line)
        if entry is not None:
            program = self.context.program
            if entry.text is None:
                program.delete(entry.number)
            elif entry.number <= 0:
                self.context.report(Diagnostic('SyntaxError', "Line number 0 is reserved"))
            else:
                program.upsert(entry.number, entry.text)
            return True
        parts = stripped.split(None, 1)
        command = self.commands.get(parts[0].lower())
        if command is not None:
            return command(parts[1].strip() if len(parts) > 1 else '')
        with interrupt_handler(self.context.interrupt):
            self.interpreter.execute_immediate(stripped)
        return True

    def cmd_run(self, arg: str) -> bool:
        with interrupt_handler(self.context.interrupt):
            self.interpreter.run()
        return True

    def cmd_list(self, arg: str) -> bool:
        for text in self.context.program.listing():
            self.console.write(text + "\n")
        return True

    def cmd_new(self, arg: str) -> bool:
        self.context.program.clear()
        self.context.variables.clear_strings()
        return True

    def cmd_clear(self, arg: str) -> bool:
        self.console.clear_screen()
        return True

    def cmd_save(self, arg: str) -> bool:
        if not arg:
            self.context.report(Diagnostic('SyntaxError', "Filename required for .sav"))
            return True
        try:
            with interrupt_handler(self.context.interrupt):
                self.basic_io.save_program(arg, self.context.program)
        except DotMisError as ex:
            self.context.report(ex.diag)
        return True

    def cmd_load(self, arg: str) -> bool:
        if not arg:
            self.context.report(Diagnostic('SyntaxError', "Filename required for .loa"))
            return True
        try:
            with interrupt_handler(self.context.interrupt):
                self.basic_io.load_program(arg, self.context.program, self.context.variables)
        except DotMisError as ex:
            self.context.report(ex.diag)
        return True

    def cmd_quit(self, arg: str) -> bool:
        return False
