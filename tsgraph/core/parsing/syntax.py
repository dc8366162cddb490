"""
Syntax model — Closed node-kind enumeration over tree-sitter parse trees.

Tree-sitter exposes node types as free-form strings that drift between
grammar releases (e.g. "function" vs "function_expression"). The indexer
matches on a closed SyntaxKind enum instead; the language config maps each
grammar type string onto a kind, and anything unmapped becomes
SyntaxKind.UNKNOWN (handled by generic structural recursion).

SyntaxNode is a lightweight, parent-linked copy of the tree-sitter tree.
Nodes are compared by identity, so they can key dictionaries for the
lifetime of a program.

Usage:
    from tsgraph.core.parsing.syntax import SyntaxKind

    if node.kind is SyntaxKind.CLASS_DECLARATION:
        name = node.field('name')
"""

from enum import Enum, auto
from typing import Dict, Iterator, List, Optional


class SyntaxKind(Enum):
    """Node kinds the indexer distinguishes."""
    # Roots and blocks
    PROGRAM = auto()
    STATEMENT_BLOCK = auto()
    CLASS_BODY = auto()
    INTERFACE_BODY = auto()
    ENUM_BODY = auto()
    FOR_STATEMENT = auto()
    FOR_IN_STATEMENT = auto()
    CATCH_CLAUSE = auto()

    # Names
    IDENTIFIER = auto()
    TYPE_IDENTIFIER = auto()
    PROPERTY_IDENTIFIER = auto()
    PRIVATE_PROPERTY_IDENTIFIER = auto()
    SHORTHAND_PROPERTY_IDENTIFIER = auto()
    SHORTHAND_PROPERTY_IDENTIFIER_PATTERN = auto()
    THIS = auto()

    # Declarations
    LEXICAL_DECLARATION = auto()
    VARIABLE_DECLARATION = auto()
    VARIABLE_DECLARATOR = auto()
    FUNCTION_DECLARATION = auto()
    GENERATOR_FUNCTION_DECLARATION = auto()
    FUNCTION_SIGNATURE = auto()
    FUNCTION_EXPRESSION = auto()
    GENERATOR_FUNCTION = auto()
    ARROW_FUNCTION = auto()
    METHOD_DEFINITION = auto()
    METHOD_SIGNATURE = auto()
    ABSTRACT_METHOD_SIGNATURE = auto()
    FORMAL_PARAMETERS = auto()
    REQUIRED_PARAMETER = auto()
    OPTIONAL_PARAMETER = auto()
    CLASS_DECLARATION = auto()
    ABSTRACT_CLASS_DECLARATION = auto()
    CLASS = auto()
    CLASS_HERITAGE = auto()
    PUBLIC_FIELD_DEFINITION = auto()
    INTERFACE_DECLARATION = auto()
    PROPERTY_SIGNATURE = auto()
    TYPE_ALIAS_DECLARATION = auto()
    ENUM_DECLARATION = auto()
    ENUM_ASSIGNMENT = auto()

    # Patterns
    OBJECT_PATTERN = auto()
    ARRAY_PATTERN = auto()
    PAIR_PATTERN = auto()
    REST_PATTERN = auto()
    ASSIGNMENT_PATTERN = auto()
    OBJECT_ASSIGNMENT_PATTERN = auto()

    # Types
    TYPE_ANNOTATION = auto()
    TYPE_ARGUMENTS = auto()
    TYPE_PARAMETERS = auto()
    TYPE_PARAMETER = auto()
    GENERIC_TYPE = auto()
    NESTED_TYPE_IDENTIFIER = auto()
    TYPE_QUERY = auto()
    IMPLEMENTS_CLAUSE = auto()
    EXTENDS_TYPE_CLAUSE = auto()

    # Expressions
    MEMBER_EXPRESSION = auto()

    # Modules
    IMPORT_STATEMENT = auto()
    IMPORT_CLAUSE = auto()
    NAMED_IMPORTS = auto()
    IMPORT_SPECIFIER = auto()
    NAMESPACE_IMPORT = auto()
    EXPORT_STATEMENT = auto()
    EXPORT_CLAUSE = auto()
    EXPORT_SPECIFIER = auto()
    STRING = auto()

    UNKNOWN = auto()


# Kinds that name something directly by their own text
IDENTIFIER_KINDS = frozenset({
    SyntaxKind.IDENTIFIER,
    SyntaxKind.TYPE_IDENTIFIER,
    SyntaxKind.PROPERTY_IDENTIFIER,
    SyntaxKind.PRIVATE_PROPERTY_IDENTIFIER,
    SyntaxKind.SHORTHAND_PROPERTY_IDENTIFIER_PATTERN,
})

FUNCTION_LIKE_KINDS = frozenset({
    SyntaxKind.FUNCTION_DECLARATION,
    SyntaxKind.GENERATOR_FUNCTION_DECLARATION,
    SyntaxKind.FUNCTION_SIGNATURE,
    SyntaxKind.FUNCTION_EXPRESSION,
    SyntaxKind.GENERATOR_FUNCTION,
    SyntaxKind.ARROW_FUNCTION,
    SyntaxKind.METHOD_DEFINITION,
    SyntaxKind.METHOD_SIGNATURE,
    SyntaxKind.ABSTRACT_METHOD_SIGNATURE,
})

CLASS_LIKE_KINDS = frozenset({
    SyntaxKind.CLASS_DECLARATION,
    SyntaxKind.ABSTRACT_CLASS_DECLARATION,
    SyntaxKind.CLASS,
})

PARAMETER_KINDS = frozenset({
    SyntaxKind.REQUIRED_PARAMETER,
    SyntaxKind.OPTIONAL_PARAMETER,
})


class SyntaxNode:
    """
    A named syntax node with parent link and field map.

    Attributes:
        kind: Closed SyntaxKind classification
        type_name: Raw grammar type string (kept for diagnostics)
        start: Start byte offset (inclusive)
        end: End byte offset (exclusive)
        text: Source text for leaf nodes, '' otherwise
        children: Named children in source order
        parent: Enclosing node, None for the root
    """

    __slots__ = ('kind', 'type_name', 'start', 'end', 'text',
                 'children', 'parent', '_fields', 'source_file')

    def __init__(self, kind: SyntaxKind, type_name: str, start: int, end: int,
                 text: str = ""):
        self.kind = kind
        self.type_name = type_name
        self.start = start
        self.end = end
        self.text = text
        self.children: List['SyntaxNode'] = []
        self.parent: Optional['SyntaxNode'] = None
        self._fields: Dict[str, List['SyntaxNode']] = {}
        # Only set on PROGRAM nodes
        self.source_file = None

    def add_child(self, child: 'SyntaxNode', field_name: Optional[str] = None) -> None:
        child.parent = self
        self.children.append(child)
        if field_name:
            self._fields.setdefault(field_name, []).append(child)

    def field(self, name: str) -> Optional['SyntaxNode']:
        """First child stored under a grammar field name."""
        nodes = self._fields.get(name)
        return nodes[0] if nodes else None

    def fields(self, name: str) -> List['SyntaxNode']:
        """All children stored under a grammar field name."""
        return list(self._fields.get(name, ()))

    def field_name_of(self, child: 'SyntaxNode') -> Optional[str]:
        """Grammar field under which a direct child is stored, if any."""
        for name, nodes in self._fields.items():
            if any(n is child for n in nodes):
                return name
        return None

    def first_child(self, *kinds: SyntaxKind) -> Optional['SyntaxNode']:
        for child in self.children:
            if child.kind in kinds:
                return child
        return None

    def walk(self) -> Iterator['SyntaxNode']:
        """Pre-order iteration over this subtree."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def ancestors(self) -> Iterator['SyntaxNode']:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    @property
    def root(self) -> 'SyntaxNode':
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def __repr__(self) -> str:
        label = f" {self.text!r}" if self.text else ""
        return f"<SyntaxNode {self.kind.name}{label} @{self.start}:{self.end}>"


def declaration_name(node: SyntaxNode) -> Optional[SyntaxNode]:
    """
    Return the node that names a declaration, or None when it has none.

    Most grammar rules use a `name` field; parameters use `pattern`,
    import bindings use `alias`/`name` or a bare identifier child.
    """
    kind = node.kind
    if kind in PARAMETER_KINDS:
        pattern = node.field('pattern')
        if pattern is not None and pattern.kind is SyntaxKind.REST_PATTERN:
            # `...args` names a single identifier
            inner = pattern.first_child(SyntaxKind.IDENTIFIER)
            if inner is not None and len(pattern.children) == 1:
                return inner
        return pattern
    if kind is SyntaxKind.IMPORT_SPECIFIER:
        return node.field('alias') or node.field('name')
    if kind in (SyntaxKind.NAMESPACE_IMPORT, SyntaxKind.IMPORT_CLAUSE):
        return node.first_child(SyntaxKind.IDENTIFIER)
    if kind is SyntaxKind.ENUM_ASSIGNMENT:
        return node.field('name')
    return node.field('name')


def simple_name(node: SyntaxNode) -> Optional[str]:
    """Text of a declaration's name if it is a plain identifier."""
    name = declaration_name(node)
    if name is not None and name.kind in IDENTIFIER_KINDS:
        return name.text
    return None
