"""
Language configurations for the tree-sitter front end.

Supported languages:
- typescript.py: TypeScript (.ts, .mts, .cts) and TSX (.tsx)
"""

from .typescript import TYPESCRIPT_CONFIG, TSX_CONFIG, TYPESCRIPT_NODE_KINDS

__all__ = [
    'TYPESCRIPT_CONFIG',
    'TSX_CONFIG',
    'TYPESCRIPT_NODE_KINDS',
]
