"""
Diagnostics — Pre-flight problems found while loading a program.

A program with any diagnostic is not indexed. The formatted text of all
diagnostics travels with the PreflightError raised by index().
"""

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Diagnostic:
    """One problem in one file."""
    path: str       # Path as given to the program loader
    line: int       # 1-indexed
    column: int     # 1-indexed
    message: str
    category: str = "error"

    def format(self) -> str:
        return f"{self.path}:{self.line}:{self.column} - {self.category}: {self.message}"


def format_diagnostics(diagnostics: Iterable[Diagnostic]) -> str:
    """Render diagnostics one per line, in the order given."""
    return "\n".join(d.format() for d in diagnostics)
