"""
Program — A parsed, checkable set of source files.

create_program() plays the role of a compiler host: it reads and parses the
requested files, follows relative `import`/`export ... from` specifiers to
pull in the files they depend on, and records every problem it finds as a
Diagnostic. The indexer refuses to run on a program with diagnostics.

Usage:
    from tsgraph.core.program import create_program

    program = create_program([Path("src/main.ts")])
    program.diagnostics          # [] when loadable and well-formed
    program.checker.symbol_at(identifier_node)
"""

import bisect
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .diagnostics import Diagnostic
from .errors import ProgramLoadError
from .parsing import LanguageConfig, ParserRegistry, SourceParser, default_registry
from .parsing.syntax import SyntaxKind, SyntaxNode
from ..logger_config import get_logger

logger = get_logger(__name__)


# Suffixes tried, in order, when resolving an extensionless module specifier
MODULE_SUFFIXES = ('.ts', '.tsx', '.d.ts', '.mts', '.cts')


class SourceFile:
    """One parsed file of a program."""

    def __init__(self, path: Path, text: str, root: SyntaxNode, config: LanguageConfig):
        self.path = path
        self.text = text
        self.source = text.encode('utf-8')
        self.root = root
        self.config = config
        root.source_file = self
        self._line_starts: Optional[List[int]] = None

    def slice(self, start: int, end: int) -> str:
        """Source text between two byte offsets."""
        return self.source[start:end].decode('utf-8', errors='replace')

    def position(self, offset: int) -> Tuple[int, int]:
        """1-indexed (line, column) of a byte offset."""
        if self._line_starts is None:
            starts = [0]
            for i, byte in enumerate(self.source):
                if byte == 0x0A:
                    starts.append(i + 1)
            self._line_starts = starts
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return line + 1, offset - self._line_starts[line] + 1

    def diagnostic(self, node: SyntaxNode, message: str) -> Diagnostic:
        line, column = self.position(node.start)
        return Diagnostic(path=str(self.path), line=line, column=column, message=message)

    def __repr__(self) -> str:
        return f"<SourceFile {self.path}>"


class Program:
    """
    A configured collection of parsed source files.

    Files requested by the caller come first in load order, followed by
    files pulled in through imports.
    """

    def __init__(self, registry: Optional[ParserRegistry] = None):
        self.registry = registry or default_registry()
        self.parser = SourceParser(self.registry)
        self._files: Dict[Path, SourceFile] = {}
        self._parse_diagnostics: List[Diagnostic] = []
        # (importing file, specifier) -> resolved path, None when external
        self._modules: Dict[Tuple[Path, str], Optional[Path]] = {}
        self._checker = None
        self._diagnostics: Optional[List[Diagnostic]] = None

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    @property
    def source_files(self) -> List[SourceFile]:
        return list(self._files.values())

    def get_source_file(self, path) -> Optional[SourceFile]:
        return self._files.get(Path(path).resolve())

    def add_source(self, path: Path, text: str) -> SourceFile:
        """Parse text and add it under an absolute path."""
        path = Path(path).resolve()
        result = self.parser.parse(path, text)
        source_file = SourceFile(path, text, result.root, result.config)
        self._files[path] = source_file
        self._parse_diagnostics.extend(result.diagnostics)
        if result.root.kind is not SyntaxKind.PROGRAM:
            self._parse_diagnostics.append(
                source_file.diagnostic(result.root, "File could not be parsed")
            )
        self._modules.clear()
        self._checker = None
        self._diagnostics = None
        return source_file

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    def module_specifiers(self, source_file: SourceFile) -> List[Tuple[str, SyntaxNode]]:
        """(specifier, string node) for every `import`/`export ... from` in a file."""
        specifiers = []
        for stmt in source_file.root.children:
            if stmt.kind not in (SyntaxKind.IMPORT_STATEMENT, SyntaxKind.EXPORT_STATEMENT):
                continue
            source = stmt.field('source')
            if source is not None and source.kind is SyntaxKind.STRING:
                specifiers.append((unquote(source.text), source))
        return specifiers

    def resolve_module(self, specifier: str, importing: SourceFile) -> Optional[SourceFile]:
        """The program file a specifier refers to, or None for external modules."""
        key = (importing.path, specifier)
        if key not in self._modules:
            self._modules[key] = self._find_module(specifier, importing.path)
        resolved = self._modules[key]
        return self._files.get(resolved) if resolved is not None else None

    def _find_module(self, specifier: str, importing: Path) -> Optional[Path]:
        if not specifier.startswith('.'):
            return None
        base = (importing.parent / specifier).resolve()
        candidates = []
        if self.registry.is_supported(base):
            candidates.append(base)
        candidates.extend(Path(str(base) + suffix) for suffix in MODULE_SUFFIXES)
        candidates.extend(base / f"index{suffix}" for suffix in MODULE_SUFFIXES)
        for candidate in candidates:
            if candidate in self._files or candidate.is_file():
                return candidate
        return None

    # -------------------------------------------------------------------------
    # Checking
    # -------------------------------------------------------------------------

    @property
    def checker(self):
        """The program's symbol resolution facility (built lazily)."""
        if self._checker is None:
            from .checker import TypeChecker
            self._checker = TypeChecker(self)
        return self._checker

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """All pre-flight diagnostics: syntax, module and binding problems."""
        if self._diagnostics is None:
            diagnostics = list(self._parse_diagnostics)
            for source_file in self.source_files:
                for specifier, node in self.module_specifiers(source_file):
                    if specifier.startswith('.') and self.resolve_module(specifier, source_file) is None:
                        diagnostics.append(source_file.diagnostic(
                            node, f"Cannot find module '{specifier}'"
                        ))
            diagnostics.extend(self.checker.diagnostics())
            self._diagnostics = diagnostics
        return list(self._diagnostics)


def unquote(text: str) -> str:
    """Strip the quotes from a string literal's source text."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'", '`'):
        return text[1:-1]
    return text


def create_program(
    paths: Iterable,
    registry: Optional[ParserRegistry] = None,
    follow_imports: bool = True,
) -> Program:
    """
    Load and parse files into a Program.

    Args:
        paths: Files to load
        registry: Language routing (defaults to the bundled configs)
        follow_imports: Also load files reached through relative imports

    Returns:
        Program; check program.diagnostics before indexing

    Raises:
        ProgramLoadError: A requested file is unreadable or unsupported
    """
    program = Program(registry)
    pending = [Path(p).resolve() for p in paths]

    for path in pending:
        if program.get_source_file(path) is not None:
            continue
        try:
            text = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ProgramLoadError(f"Could not read {path}: {e}") from e

        source_file = program.add_source(path, text)
        logger.debug("Loaded %s", path)

        if not follow_imports:
            continue
        for specifier, _ in program.module_specifiers(source_file):
            resolved = program._find_module(specifier, source_file.path)
            if resolved is not None and resolved not in pending:
                pending.append(resolved)

    return program
