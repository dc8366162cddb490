"""
SourceParser — Tree-sitter front end producing SyntaxNode trees.

Parses source text with tree-sitter-language-pack and copies the named
nodes into SyntaxNodes, classified by the LanguageConfig's node-kind table.
Syntax errors (ERROR and MISSING nodes) are returned as Diagnostics rather
than raised, so a program can collect all of them before refusing to index.

Usage:
    from tsgraph.core.parsing import SourceParser, default_registry

    parser = SourceParser(default_registry())
    result = parser.parse(Path("src/app.ts"), text)
    result.root        # SyntaxNode(PROGRAM)
    result.diagnostics # [] for a well-formed file
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, TYPE_CHECKING

from ..diagnostics import Diagnostic
from ..errors import ProgramLoadError
from .config import LanguageConfig
from .registry import ParserRegistry
from .syntax import IDENTIFIER_KINDS, SyntaxKind, SyntaxNode

if TYPE_CHECKING:
    from tree_sitter import Node, Parser


# Kinds whose source text is copied onto the SyntaxNode
_TEXT_KINDS = IDENTIFIER_KINDS | {
    SyntaxKind.SHORTHAND_PROPERTY_IDENTIFIER,
    SyntaxKind.THIS,
    SyntaxKind.STRING,
}


@dataclass
class ParseResult:
    """Output of parsing one file."""
    root: SyntaxNode
    config: LanguageConfig
    diagnostics: List[Diagnostic] = field(default_factory=list)


class SourceParser:
    """
    Parses files into SyntaxNode trees.

    Parsers are lazy-loaded per grammar and reused across files.
    """

    def __init__(self, registry: ParserRegistry):
        self.registry = registry
        self._parsers: Dict[str, 'Parser'] = {}

    def _get_parser(self, tree_sitter_name: str) -> 'Parser':
        if tree_sitter_name not in self._parsers:
            from tree_sitter_language_pack import get_parser
            self._parsers[tree_sitter_name] = get_parser(tree_sitter_name)
        return self._parsers[tree_sitter_name]

    def parse(self, path: Path, text: str) -> ParseResult:
        """
        Parse source text.

        Args:
            path: File path, used for config routing and diagnostics
            text: Full source text

        Returns:
            ParseResult with the tree and any syntax diagnostics

        Raises:
            ProgramLoadError: No config for the extension, or file too large
        """
        config = self.registry.get_config(path)
        if config is None:
            raise ProgramLoadError(f"No language configuration for {path}")

        source = text.encode('utf-8')
        if len(source) > config.max_file_size:
            raise ProgramLoadError(
                f"{path} is {len(source)} bytes, larger than the "
                f"{config.max_file_size} byte limit for {config.name}"
            )

        tree = self._get_parser(config.tree_sitter_name).parse(source)
        diagnostics: List[Diagnostic] = []
        root = self._convert(tree.root_node, config, source, str(path), diagnostics)
        return ParseResult(root=root, config=config, diagnostics=diagnostics)

    def _convert(
        self,
        ts_node: 'Node',
        config: LanguageConfig,
        source: bytes,
        path: str,
        diagnostics: List[Diagnostic],
    ) -> SyntaxNode:
        """Copy one named tree-sitter node and its named descendants."""
        kind = config.kind_of(ts_node.type)
        node = SyntaxNode(kind, ts_node.type, ts_node.start_byte, ts_node.end_byte)
        if kind in _TEXT_KINDS:
            node.text = source[ts_node.start_byte:ts_node.end_byte].decode('utf-8', errors='replace')

        cursor = ts_node.walk()
        if not cursor.goto_first_child():
            return node

        while True:
            child = cursor.node
            field_name = cursor.field_name
            if child.is_missing:
                diagnostics.append(self._diagnostic(child, path, f"Missing '{child.type}'"))
            elif child.type == 'ERROR':
                diagnostics.append(self._diagnostic(child, path, "Syntax error"))
            elif child.is_named and child.type not in config.dropped_types:
                node.add_child(
                    self._convert(child, config, source, path, diagnostics),
                    field_name,
                )
            if not cursor.goto_next_sibling():
                break

        return node

    @staticmethod
    def _diagnostic(ts_node: 'Node', path: str, message: str) -> Diagnostic:
        row, column = ts_node.start_point
        return Diagnostic(path=path, line=row + 1, column=column + 1, message=message)
