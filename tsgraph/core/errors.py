"""
Error taxonomy for the indexer.

Fatal conditions are exceptions; non-fatal ones (unhandled constructs,
unresolved references) are logged and never raised.

    TsGraphError
    ├── ProgramLoadError          requested file unreadable or unsupported
    ├── PreflightError            program has diagnostics; nothing emitted
    └── InternalConsistencyError  checker and indexer disagree about a symbol
"""


class TsGraphError(Exception):
    """Base class for all indexer errors."""


class ProgramLoadError(TsGraphError):
    """A requested file could not be loaded into the program."""


class PreflightError(TsGraphError):
    """
    The program has pre-existing diagnostics.

    Raised before any graph entry is emitted. The message is the formatted
    diagnostic text.
    """

    def __init__(self, message: str, diagnostics=None):
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])


class InternalConsistencyError(TsGraphError):
    """
    A symbol reached identity assignment without any declaration.

    Aborts indexing of the current file; its entries are discarded.
    """
