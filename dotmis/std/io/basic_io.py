from dotmis.errors import DotMisError
from dotmis.parser import format_program, load_program_text
from dotmis.program import ProgramStore
from dotmis.types import Diagnostic
from dotmis.variables import VariableStore

PROGRAM_EXTENSION = '.pbcb'


def program_filename(name: str) -> str:
    name = name.strip()
    if not name.endswith(PROGRAM_EXTENSION):
        name = name + PROGRAM_EXTENSION
    return name


class BasicIO:
    def save_program(self, name: str, program: ProgramStore) -> str:
        filename = program_filename(name)
        try:
            with open(filename, 'w', encoding='utf-8', newline='') as f:
                f.write(format_program(program))
        except OSError as e:
            raise DotMisError(Diagnostic('IOError', f"cannot write {filename}: {e.strerror}"))
        return filename

    def load_program(self, name: str, program: ProgramStore, variables: VariableStore) -> str:
        filename = program_filename(name)
        try:
            with open(filename, 'r', encoding='utf-8', newline='') as f:
                source = f.read()
        except FileNotFoundError:
            raise DotMisError(Diagnostic('IOError', f"file {filename} not found"))
        except OSError as e:
            raise DotMisError(Diagnostic('IOError', f"cannot read {filename}: {e.strerror}"))
        load_program_text(source, program, variables)
        return filename
