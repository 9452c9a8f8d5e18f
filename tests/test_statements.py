import builtins

import pytest

from dotmis.interpreter import Interpreter, StepResult
from dotmis.std.io import Console


class RecordingConsole(Console):
    def __init__(self):
        self.delays = []
        self.beeps = []
        self.help_shown = 0

    def delay(self, ms):
        self.delays.append(ms)

    def beep(self, frequency, duration_ms):
        self.beeps.append((frequency, duration_ms))

    def show_help(self):
        self.help_shown += 1


def test_assignment_round_trip(capsys):
    interp = Interpreter()
    interp.execute_immediate('.let A=5')
    interp.execute_immediate('.p A')
    interp.execute_immediate('.let A$="hi"')
    interp.execute_immediate('.p A$')
    assert capsys.readouterr().out == '5\nhi\n'


def test_keywords_ignore_case(capsys):
    interp = Interpreter()
    interp.execute_immediate('.LET b = 2')
    interp.execute_immediate('.P B * 3')
    assert capsys.readouterr().out == '6\n'


def test_string_literal_is_verbatim():
    interp = Interpreter()
    interp.execute_immediate('.let S$="no escapes \\n here"')
    assert interp.variables.get_string('S') == 'no escapes \\n here'


def test_print_operands_concatenate(capsys):
    interp = Interpreter()
    interp.execute_immediate('.p "a"; 1+1; "b"')
    interp.execute_immediate('.p "x" 3 "y"')
    assert capsys.readouterr().out == 'a2b\nx3y\n'


def test_print_trailing_semicolon_suppresses_newline(capsys):
    interp = Interpreter()
    interp.execute_immediate('.p "x";')
    interp.execute_immediate('.p "y"')
    assert capsys.readouterr().out == 'xy\n'


def test_print_absent_string_and_rounding(capsys):
    interp = Interpreter()
    interp.execute_immediate('.p B$')
    interp.execute_immediate('.p 7/2')
    interp.execute_immediate('.p 2.5')
    interp.execute_immediate('.p')
    assert capsys.readouterr().out == '(null)\n4\n2\n\n'


def test_print_division_by_zero_still_prints(capsys):
    interp = Interpreter()
    interp.execute_immediate('.p 1/0; "ok"')
    captured = capsys.readouterr()
    assert captured.out == '0ok\n'
    assert captured.err == 'Error: Division by zero\n'


@pytest.mark.parametrize('text, message', [
    ('.let =5', "[???] Expected variable after .let"),
    ('.let A 5', "[???] Expected '=' in .let"),
    ('.let A$=hi', "[???] Expected string literal in .let"),
    ('.in 3', "[???] Expected variable after .in"),
    ('.if 1 2 .th 5', "[!!!] Expected relational operator in .if"),
    ('.if 1 == 1 .th 5', "[!!!] Unknown relational operator"),
    ('.if 1 = 1 .gt 5', "[!!!] Expected .th in .if"),
    ('.if 1 = 1 .th', "[!!!] Expected line number after .th"),
    ('.gt', "[!!!] Expected line number after .gt"),
    ('.gt 0', "[!!!] Expected line number after .gt"),
    ('.gs -4', "[!!!] Expected line number after .gs"),
    ('.rtn', "[!!!] GOSUB stack underflow"),
    ('.bep 0 100', "[???] Invalid freq/dur for .bep"),
    ('.foo', "?"),
])
def test_reported_errors_abort_statement(capsys, text, message):
    interp = Interpreter(console=RecordingConsole())
    result = interp.executor.execute(text)
    assert result == StepResult()
    assert capsys.readouterr().err == f'Error: {message}\n'


def test_failed_let_leaves_variable(capsys):
    interp = Interpreter()
    interp.execute_immediate('.let A=4')
    interp.execute_immediate('.let A 9')
    assert interp.variables.get_number('A') == 4


def test_conditional_jumps():
    executor = Interpreter().executor
    assert executor.execute('.if 1 < 2 .th 50') == StepResult(advance=False, jump_target=50)
    assert executor.execute('.if 1 > 2 .th 50') == StepResult()
    assert executor.execute('.if 1 <> 2 .TH 7') == StepResult(advance=False, jump_target=7)
    assert executor.execute('.if 2 >= 2 .th 8') == StepResult(advance=False, jump_target=8)
    assert executor.execute('.if 3 <= 2 .th 8') == StepResult()
    assert executor.execute('.if 2*2 = 4 .th 9') == StepResult(advance=False, jump_target=9)


def test_goto_and_end():
    executor = Interpreter().executor
    assert executor.execute('.gt 30') == StepResult(advance=False, jump_target=30)
    assert executor.execute('.e') == StepResult(advance=False, jump_target=None)
    assert executor.execute('// .gt 30') == StepResult()


def test_gosub_pushes_successor_of_target():
    interp = Interpreter()
    for number in (10, 100, 110, 200):
        interp.program.upsert(number, '.e')
    result = interp.executor.execute('.gs 100')
    assert result == StepResult(advance=False, jump_target=100)
    assert interp.context.call_stack == [110]
    interp.executor.execute('.gs 200')
    assert interp.context.call_stack == [110, None]
    assert interp.executor.execute('.rtn') == StepResult(advance=False, jump_target=None)
    assert interp.executor.execute('.rtn') == StepResult(advance=False, jump_target=110)


def test_gosub_overflow_keeps_stack(capsys):
    interp = Interpreter()
    interp.context.call_stack = [5] * 100
    result = interp.executor.execute('.gs 10')
    assert result == StepResult()
    assert len(interp.context.call_stack) == 100
    assert capsys.readouterr().err == 'Error: [!!!] GOSUB stack overflow\n'
    assert interp.executor.execute('.rtn') == StepResult(advance=False, jump_target=5)


def test_input_numeric(monkeypatch):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': '  42abc')
    interp = Interpreter()
    interp.execute_immediate('.in A')
    assert interp.variables.get_number('A') == 42
    monkeypatch.setattr(builtins, 'input', lambda prompt='': 'xyz')
    interp.execute_immediate('.in A')
    assert interp.variables.get_number('A') == 0


def test_input_string_and_prompt(monkeypatch):
    prompts = []

    def fake_input(prompt=''):
        prompts.append(prompt)
        return 'raw text  '

    monkeypatch.setattr(builtins, 'input', fake_input)
    interp = Interpreter()
    interp.execute_immediate('.in s$')
    interp.execute_immediate('.in n')
    assert interp.variables.get_string('S') == 'raw text  '
    assert prompts == ['Input string for S$: ', 'Input value for N: ']


def test_input_end_of_file_leaves_cell(monkeypatch):
    def eof(prompt=''):
        raise EOFError

    monkeypatch.setattr(builtins, 'input', eof)
    interp = Interpreter()
    interp.variables.set_number('A', 3)
    interp.execute_immediate('.in A')
    assert interp.variables.get_number('A') == 3


def test_wait_beep_and_help_use_console():
    console = RecordingConsole()
    interp = Interpreter(console=console)
    interp.execute_immediate('.wt 250')
    interp.execute_immediate('.wt 0')
    interp.execute_immediate('.bep 440 100')
    interp.execute_immediate('.bep 440')
    interp.execute_immediate('.?')
    assert console.delays == [250]
    assert console.beeps == [(440, 100)]
    assert console.help_shown == 1


def test_quit_exits_process():
    interp = Interpreter()
    with pytest.raises(SystemExit) as excinfo:
        interp.execute_immediate('.q')
    assert excinfo.value.code == 0
