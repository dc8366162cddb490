"""
Parsing module — Tree-sitter front end for the indexer.

This module provides:
- LanguageConfig: Per-language parsing rules (grammar + node-kind table)
- ParserRegistry: Extension-based routing
- SourceParser: Parses text into SyntaxNode trees, collecting syntax errors
- SyntaxKind / SyntaxNode: The closed syntax model the indexer matches on

Design principle: Add new dialects via config, not code changes.

Usage:
    from tsgraph.core.parsing import SourceParser, default_registry

    parser = SourceParser(default_registry())
    result = parser.parse(Path("main.ts"), text)
"""

from .config import LanguageConfig
from .registry import ParserRegistry, default_registry
from .parser import SourceParser, ParseResult
from .syntax import SyntaxKind, SyntaxNode, declaration_name, simple_name

__all__ = [
    'LanguageConfig',
    'ParserRegistry',
    'default_registry',
    'SourceParser',
    'ParseResult',
    'SyntaxKind',
    'SyntaxNode',
    'declaration_name',
    'simple_name',
]
