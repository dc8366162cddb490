"""
ScopeSignatureBuilder — Scoped, collision-resistant signatures.

A signature is the dotted path of enclosing scope names, outermost first.
A variable `bar` in a free-standing block inside function `foo` gets a
signature like `foo.block0.bar`.

Anonymous scopes get synthesized tokens from a single counter owned by the
builder: `anon<N>` for declarations without a simple name, `block<N>` for
free-standing blocks. Both draw from the same counter, so numbering
interleaves. A fresh builder is used for every file-indexing pass.
"""

from typing import List, Optional, Tuple

from .parsing.syntax import (
    FUNCTION_LIKE_KINDS,
    IDENTIFIER_KINDS,
    SyntaxKind,
    SyntaxNode,
    simple_name,
)

# Ancestors that contribute their declared name (or anon<N>)
NAMED_DECLARATION_KINDS = FUNCTION_LIKE_KINDS | frozenset({
    SyntaxKind.CLASS_DECLARATION,
    SyntaxKind.ABSTRACT_CLASS_DECLARATION,
    SyntaxKind.CLASS,
    SyntaxKind.INTERFACE_DECLARATION,
    SyntaxKind.ENUM_DECLARATION,
    SyntaxKind.ENUM_ASSIGNMENT,
    SyntaxKind.REQUIRED_PARAMETER,
    SyntaxKind.OPTIONAL_PARAMETER,
    SyntaxKind.PUBLIC_FIELD_DEFINITION,
    SyntaxKind.PROPERTY_SIGNATURE,
    SyntaxKind.VARIABLE_DECLARATOR,
    SyntaxKind.TYPE_ALIAS_DECLARATION,
    SyntaxKind.TYPE_PARAMETER,
    SyntaxKind.IMPORT_SPECIFIER,
    SyntaxKind.NAMESPACE_IMPORT,
})

# Named only when they are the declaration itself, never as an enclosing scope
SELF_NAMING_KINDS = frozenset({
    SyntaxKind.IMPORT_CLAUSE,
})

# Ancestors that contribute block<N> unless their owner already names them
BLOCK_SCOPE_KINDS = frozenset({
    SyntaxKind.STATEMENT_BLOCK,
    SyntaxKind.FOR_STATEMENT,
    SyntaxKind.FOR_IN_STATEMENT,
    SyntaxKind.CATCH_CLAUSE,
})

_BODY_OWNER_KINDS = FUNCTION_LIKE_KINDS | frozenset({
    SyntaxKind.CATCH_CLAUSE,
    SyntaxKind.FOR_STATEMENT,
    SyntaxKind.FOR_IN_STATEMENT,
})

SEPARATOR = "."


class ScopeSignatureBuilder:
    """Computes signatures for declaration nodes within one indexing pass."""

    def __init__(self):
        self._anon_id = 0

    def next_id(self) -> int:
        """Next value of the shared anon/block counter."""
        value = self._anon_id
        self._anon_id += 1
        return value

    def signature_of(self, start: SyntaxNode) -> Tuple[str, Optional[object]]:
        """
        Build the scoped signature of a declaration.

        Args:
            start: Declaration node (or a bare binding identifier)

        Returns:
            (signature, source file containing the declaration)
        """
        parts: List[str] = []
        source_file = None
        node: Optional[SyntaxNode] = start

        if start.kind in IDENTIFIER_KINDS:
            # Destructured, catch and for-of bindings are declared by the name itself
            parts.append(start.text)
            node = start.parent

        while node is not None:
            kind = node.kind
            if kind in BLOCK_SCOPE_KINDS:
                if not self._is_owned_body(node):
                    parts.append(f"block{self.next_id()}")
            elif kind in NAMED_DECLARATION_KINDS or (kind in SELF_NAMING_KINDS and node is start):
                name = simple_name(node)
                parts.append(name if name is not None else f"anon{self.next_id()}")
            elif kind is SyntaxKind.PROGRAM:
                source_file = node.source_file
                break
            node = node.parent

        # Gathered innermost-first
        parts.reverse()
        return SEPARATOR.join(parts), source_file

    @staticmethod
    def _is_owned_body(node: SyntaxNode) -> bool:
        """A block that is the body of a function, catch or loop adds no token."""
        parent = node.parent
        return (
            node.kind is SyntaxKind.STATEMENT_BLOCK
            and parent is not None
            and parent.kind in _BODY_OWNER_KINDS
            and parent.field('body') is node
        )
