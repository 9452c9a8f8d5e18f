"""Statement execution and run control for DotMis.

This module ties the stores and the expression evaluator together. It
provides:

* `InterpreterContext`, the single object owning the variable store, the
  program store, the subroutine call stack, the interrupt token and the
  line number used to tag error reports.
* `StatementExecutor`, which recognizes the keyword of one statement and
  performs its effect, returning a `StepResult` that tells the runner
  whether to move on, jump, or stop.
* `Interpreter`, the runner. It executes the stored program line by line
  until a halt condition, and can also execute a single statement
  immediately outside of a run.
"""

from __future__ import annotations

import operator
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .builtin_statement import BuiltinStatement
from .errors import DotMisError, syntax_error
from .expression import Cursor, ExpressionParser
from .parser import load_program_text
from .program import ProgramLine, ProgramStore
from .std.io import Console
from .types import Diagnostic, format_number, is_letter
from .variables import VariableStore

CALL_STACK_SIZE = 100

RELATIONAL_OPERATORS = {
    '=': operator.eq,
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
    '<>': operator.ne,
}


class RunState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    HALTED = 'halted'


class CancellationToken:
    """Interrupt flag set from outside a run and polled once per line."""
    def __init__(self):
        self.flag = False

    def set(self):
        self.flag = True

    def clear(self):
        self.flag = False

    def is_set(self) -> bool:
        return self.flag

    def consume(self) -> bool:
        if self.flag:
            self.flag = False
            return True
        return False


@dataclass
class StepResult:
    advance: bool = True
    jump_target: Optional[int] = None


class InterpreterContext:
    def __init__(self, console: Console):
        self.console = console
        self.variables = VariableStore()
        self.program = ProgramStore()
        self.call_stack: List[Optional[int]] = []
        self.interrupt = CancellationToken()
        # 0 while no run is in progress
        self.current_line = 0

    def reset(self):
        self.variables.reset()
        self.call_stack = []
        self.interrupt.clear()

    def report(self, diag: Diagnostic):
        if self.current_line != 0:
            self.console.error(f"Error at line {self.current_line}: {diag.message}")
        else:
            self.console.error(f"Error: {diag.message}")


class StatementExecutor:
    """Executes one statement against an InterpreterContext."""
    def __init__(self, context: InterpreterContext, interpreter: Optional['Interpreter'] = None):
        self.context = context
        self.interpreter = interpreter
        # Keywords are matched as prefixes, in this order
        self.statements = [
            BuiltinStatement('comment', '//', self.exec_comment),
            BuiltinStatement('let', '.let', self.exec_let),
            BuiltinStatement('print', '.p', self.exec_print),
            BuiltinStatement('input', '.in', self.exec_input),
            BuiltinStatement('if', '.if', self.exec_if),
            BuiltinStatement('goto', '.gt', self.exec_goto),
            BuiltinStatement('gosub', '.gs', self.exec_gosub),
            BuiltinStatement('return', '.rtn', self.exec_return),
            BuiltinStatement('wait', '.wt', self.exec_wait),
            BuiltinStatement('beep', '.bep', self.exec_beep),
            BuiltinStatement('help', '.?', self.exec_help),
            BuiltinStatement('quit', '.q', self.exec_quit),
            BuiltinStatement('end', '.e', self.exec_end),
        ]

    def debug(self, msg: str, level: int = 3):
        if self.interpreter is not None and self.interpreter.debug_level >= level:
            self.interpreter.debug(msg)

    def execute(self, text: str) -> StepResult:
        cursor = Cursor(text)
        cursor.skip_whitespace()
        for stmt in self.statements:
            if not cursor.match_keyword(stmt.keyword):
                continue
            result = StepResult()
            try:
                stmt.fn(cursor, result)
            except DotMisError as ex:
                self.context.report(ex.diag)
                return StepResult()
            return result
        self.context.report(Diagnostic('SyntaxError', '?'))
        return StepResult()

    def expression(self, cursor: Cursor) -> ExpressionParser:
        return ExpressionParser(cursor, self.context.variables, self.context.report)

    def read_line_number(self, cursor: Cursor, keyword: str) -> int:
        number = cursor.read_int()
        if number is None or number <= 0:
            raise syntax_error(f"[!!!] Expected line number after {keyword}")
        return number

    def exec_comment(self, cursor: Cursor, result: StepResult):
        pass

    def exec_let(self, cursor: Cursor, result: StepResult):
        cursor.skip_whitespace()
        name = cursor.read_letter()
        if name is None:
            raise syntax_error("[???] Expected variable after .let")
        is_string = cursor.match('$')
        cursor.skip_whitespace()
        if not cursor.match('='):
            raise syntax_error("[???] Expected '=' in .let")
        cursor.skip_whitespace()
        if is_string:
            value = cursor.read_quoted()
            if value is None:
                raise syntax_error("[???] Expected string literal in .let")
            self.context.variables.set_string(name, value)
        else:
            self.context.variables.set_number(name, self.expression(cursor).parse_expression())

    def exec_print(self, cursor: Cursor, result: StepResult):
        variables = self.context.variables
        parts: List[str] = []
        newline = True
        while True:
            cursor.skip_whitespace()
            if cursor.at_end():
                break
            if cursor.peek() == '"':
                parts.append(cursor.read_quoted())
            elif is_letter(cursor.peek()) and cursor.peek(1) == '$':
                name = cursor.read_letter()
                cursor.advance()
                value = variables.get_string(name)
                parts.append(value if value is not None else '(null)')
            else:
                parts.append(format_number(self.expression(cursor).parse_expression()))
            cursor.skip_whitespace()
            if cursor.match(';'):
                cursor.skip_whitespace()
                if cursor.at_end():
                    newline = False
                    break
        if newline:
            parts.append('\n')
        self.context.console.write(''.join(parts))

    def exec_input(self, cursor: Cursor, result: StepResult):
        cursor.skip_whitespace()
        name = cursor.read_letter()
        if name is None:
            raise syntax_error("[???] Expected variable after .in")
        is_string = cursor.match('$')
        if is_string:
            prompt = f"Input string for {name}$: "
        else:
            prompt = f"Input value for {name}: "
        text = self.context.console.read_line(prompt)
        if text is None:
            return
        if is_string:
            self.context.variables.set_string(name, text)
        else:
            reader = Cursor(text)
            reader.skip_whitespace()
            value = reader.scan_number()
            self.context.variables.set_number(name, value if value is not None else 0.0)

    def exec_if(self, cursor: Cursor, result: StepResult):
        left = self.expression(cursor).parse_expression()
        cursor.skip_whitespace()
        op = cursor.peek()
        if op not in ('<', '>', '='):
            raise syntax_error("[!!!] Expected relational operator in .if")
        cursor.advance()
        if cursor.peek() == '=' or (op == '<' and cursor.peek() == '>'):
            op += cursor.peek()
            cursor.advance()
        cursor.skip_whitespace()
        right = self.expression(cursor).parse_expression()
        compare = RELATIONAL_OPERATORS.get(op)
        if compare is None:
            raise DotMisError(Diagnostic('SemanticError', "[!!!] Unknown relational operator"))
        cursor.skip_whitespace()
        if not cursor.match_keyword('.th'):
            raise syntax_error("[!!!] Expected .th in .if")
        target = self.read_line_number(cursor, '.th')
        holds = compare(left, right)
        self.debug(f"if {format_number(left)} {op} {format_number(right)} -> {holds}")
        if holds:
            result.jump_target = target
            result.advance = False

    def exec_goto(self, cursor: Cursor, result: StepResult):
        result.jump_target = self.read_line_number(cursor, '.gt')
        result.advance = False

    def exec_gosub(self, cursor: Cursor, result: StepResult):
        target = self.read_line_number(cursor, '.gs')
        call_stack = self.context.call_stack
        if len(call_stack) >= CALL_STACK_SIZE:
            raise DotMisError(Diagnostic('ResourceError', "[!!!] GOSUB stack overflow"))
        following = self.context.program.successor(target)
        call_stack.append(following.number if following is not None else None)
        self.debug(f"gosub {target}, return to {call_stack[-1]}, depth {len(call_stack)}")
        result.jump_target = target
        result.advance = False

    def exec_return(self, cursor: Cursor, result: StepResult):
        call_stack = self.context.call_stack
        if not call_stack:
            raise DotMisError(Diagnostic('ResourceError', "[!!!] GOSUB stack underflow"))
        # None means the callee had no successor; the run stops there
        result.jump_target = call_stack.pop()
        result.advance = False
        self.debug(f"return to {result.jump_target}, depth {len(call_stack)}")

    def exec_wait(self, cursor: Cursor, result: StepResult):
        ms = cursor.read_int()
        if ms is not None and ms > 0:
            self.context.console.delay(ms)

    def exec_beep(self, cursor: Cursor, result: StepResult):
        frequency = cursor.read_int() or 0
        duration = cursor.read_int() or 0
        if frequency <= 0 or duration <= 0:
            raise DotMisError(Diagnostic('SemanticError', "[???] Invalid freq/dur for .bep"))
        self.context.console.beep(frequency, duration)

    def exec_help(self, cursor: Cursor, result: StepResult):
        self.context.console.show_help()

    def exec_quit(self, cursor: Cursor, result: StepResult):
        sys.exit(0)

    def exec_end(self, cursor: Cursor, result: StepResult):
        result.advance = False


class Interpreter:
    """Runs the stored program and executes immediate statements."""
    def __init__(self, console: Optional[Console] = None, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.context = InterpreterContext(console if console is not None else Console())
        self.executor = StatementExecutor(self.context, self)
        self.state = RunState.IDLE
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None

    @property
    def program(self) -> ProgramStore:
        return self.context.program

    @property
    def variables(self) -> VariableStore:
        return self.context.variables

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def load_source(self, source: str):
        """Replace the program with the lines of a persisted program text."""
        load_program_text(source, self.context.program, self.context.variables)

    def execute_immediate(self, text: str):
        """Execute one statement outside of a run; jump requests are ignored."""
        self.context.current_line = 0
        if self.debug_level >= 2:
            self.debug(f"immediate {text}")
        self.executor.execute(text)

    def run(self):
        ctx = self.context
        current = ctx.program.first()
        if current is None:
            return
        ctx.reset()
        self.state = RunState.RUNNING
        if self.debug_level >= 1:
            self.debug(f"run start at {current.number}")
        try:
            while self.state is RunState.RUNNING:
                current = self.step(current)
        finally:
            if self.debug_level >= 1:
                self.debug(f"run stop at {ctx.current_line}")
            ctx.current_line = 0
            self.state = RunState.IDLE

    def step(self, line: ProgramLine) -> Optional[ProgramLine]:
        ctx = self.context
        ctx.current_line = line.number
        if ctx.interrupt.consume():
            ctx.console.write("\nBreak\n")
            self.state = RunState.HALTED
            return None
        if self.debug_level >= 2:
            self.debug(f"exec {line.number}: {line.text}")
        result = self.executor.execute(line.text)
        if result.jump_target is not None:
            target = ctx.program.find(result.jump_target)
            if target is None:
                ctx.report(Diagnostic('JumpError', "Target line not found"))
                self.state = RunState.HALTED
                return None
            if self.debug_level >= 3:
                self.debug(f"jump {line.number} -> {target.number}")
            return target
        if result.advance:
            following = ctx.program.successor(line.number)
            if following is None:
                self.state = RunState.HALTED
            return following
        self.state = RunState.HALTED
        return None


def run_program(source: str, console: Optional[Console] = None, debug_level: int = 0) -> Interpreter:
    """Convenience function to load a program from its persisted text and run it."""
    interpreter = Interpreter(console=console, debug_level=debug_level)
    interpreter.load_source(source)
    interpreter.run()
    return interpreter
