# DotMis language package
# This package provides the interpreter and interactive prompt for DotMis.
from .interpreter import run_program, Interpreter, StatementExecutor
from .errors import DotMisError
from .program import ProgramStore
from .variables import VariableStore

__all__ = [
    'run_program',
    'Interpreter',
    'StatementExecutor',
    'DotMisError',
    'ProgramStore',
    'VariableStore',
]
