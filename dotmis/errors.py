from dotmis.types import Diagnostic


class DotMisError(Exception):
    """Exception type used to propagate DotMis errors to the reporter."""
    def __init__(self, diag: Diagnostic):
        super().__init__(f"DotMisError: {diag.kind}: {diag.message}")
        self.diag = diag


def syntax_error(message: str) -> DotMisError:
    return DotMisError(Diagnostic('SyntaxError', message))
