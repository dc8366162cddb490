"""
Parsing configuration data structures.

Defines LanguageConfig — the per-language rules the tree-sitter front end
needs to turn a grammar's parse tree into SyntaxNodes.

Design principle: New grammars are added via config, not code changes.
"""

from dataclasses import dataclass, field
from typing import Dict, Set

from .syntax import SyntaxKind


@dataclass
class LanguageConfig:
    """
    Configuration for parsing a specific language dialect.

    Attributes:
        name: Human-readable name (e.g., "TypeScript", "TSX")
        tree_sitter_name: Grammar name for tree-sitter-language-pack
        extensions: File extensions this config handles (e.g., {'.ts'})
        node_kinds: Grammar node type -> SyntaxKind; unmapped types are UNKNOWN
        dropped_types: Named grammar types omitted from the syntax tree
        max_file_size: Refuse files larger than this (bytes, default 1MB)
    """
    # Identity
    name: str
    tree_sitter_name: str
    extensions: Set[str]

    # Tree mapping
    node_kinds: Dict[str, SyntaxKind] = field(default_factory=dict)
    dropped_types: Set[str] = field(default_factory=lambda: {'comment'})
    max_file_size: int = 1_000_000

    def matches_extension(self, ext: str) -> bool:
        """Check if this config handles the given extension."""
        return ext.lower() in self.extensions

    def kind_of(self, type_name: str) -> SyntaxKind:
        """Classify a grammar node type."""
        return self.node_kinds.get(type_name, SyntaxKind.UNKNOWN)
