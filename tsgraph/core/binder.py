"""
Binder — Lexical scopes and symbols for one source file.

Walks a file once and records:
- a Scope for every node that introduces one (module, function, class,
  block, for/catch header, type-parameter owner);
- a Symbol for every declaration, carrying its TYPE/VALUE meanings and its
  declaration sites in source order;
- which name nodes are declaration occurrences (so the indexer can tell a
  binding from a reference);
- import aliases and export entries, resolved lazily by the checker.

Redeclaring a name in the same scope and namespace is a diagnostic unless
the two declarations merge (var/var, function overloads, interface/interface,
interface/class, enum/enum).

Usage:
    binding = Binder(source_file).bind()
    binding.scopes[node]          # Scope introduced by node
    binding.declared[name_node]   # Symbol declared by a name occurrence
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .diagnostics import Diagnostic
from .parsing.syntax import (
    CLASS_LIKE_KINDS,
    FUNCTION_LIKE_KINDS,
    PARAMETER_KINDS,
    SyntaxKind,
    SyntaxNode,
    declaration_name,
)
from .program import unquote
from .vname import Namespace

BOTH = frozenset({Namespace.TYPE, Namespace.VALUE})
TYPE_ONLY = frozenset({Namespace.TYPE})
VALUE_ONLY = frozenset({Namespace.VALUE})

# Merge groups that may share a name within one scope
_MERGEABLE = {
    ('var', 'var'),
    ('function', 'function'),
    ('interface', 'interface'),
    ('interface', 'class'),
    ('class', 'interface'),
    ('enum', 'enum'),
}

_BINDING_KEYWORD = re.compile(r'\b(const|let|var)\b')


@dataclass(eq=False)
class Symbol:
    """
    A declared entity. Compared and hashed by identity.

    Attributes:
        name: Declared spelling
        meanings: Namespaces the symbol occupies
        declarations: Declaration nodes in source order (first wins)
        merge_group: Declaration family used for merge checks
        members: Member table for classes, interfaces and enums
        import_target: (specifier, export name, importing file) for aliases
    """
    name: str
    meanings: Set[Namespace]
    declarations: List[SyntaxNode] = field(default_factory=list)
    merge_group: str = ""
    members: Optional[Dict[str, 'Symbol']] = None
    import_target: Optional[Tuple[str, str, object]] = None

    @property
    def is_alias(self) -> bool:
        return self.import_target is not None

    def __repr__(self) -> str:
        meanings = ",".join(sorted(m.name for m in self.meanings))
        return f"<Symbol {self.name} [{meanings}] decls={len(self.declarations)}>"


@dataclass(eq=False)
class Scope:
    """Name table introduced by one syntax node."""
    node: SyntaxNode
    parent: Optional['Scope']
    is_function: bool = False
    symbols: Dict[str, Symbol] = field(default_factory=dict)

    def lookup(self, name: str, meaning: Optional[Namespace] = None) -> Optional[Symbol]:
        """Innermost symbol with this name (and meaning, if given)."""
        scope = self
        while scope is not None:
            symbol = scope.symbols.get(name)
            if symbol is not None and (meaning is None or meaning in symbol.meanings):
                return symbol
            scope = scope.parent
        return None

    def function_scope(self) -> 'Scope':
        """Nearest scope that `var` declarations hoist to."""
        scope = self
        while scope.parent is not None and not scope.is_function:
            scope = scope.parent
        return scope


@dataclass
class FileBinding:
    """Everything the binder learned about one file."""
    module_scope: Scope
    scopes: Dict[SyntaxNode, Scope] = field(default_factory=dict)
    declared: Dict[SyntaxNode, Symbol] = field(default_factory=dict)
    aliases: List[Tuple[Symbol, SyntaxNode]] = field(default_factory=list)
    # export name -> ('symbol', Symbol) | ('local', name) | ('module', specifier, name)
    exports: Dict[str, tuple] = field(default_factory=dict)
    star_exports: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def scope_of(self, node: SyntaxNode) -> Scope:
        """Innermost scope enclosing a node (excluding a scope the node owns)."""
        for ancestor in node.ancestors():
            scope = self.scopes.get(ancestor)
            if scope is not None:
                return scope
        return self.module_scope


class Binder:
    """Builds a FileBinding for one SourceFile."""

    def __init__(self, source_file):
        self.source_file = source_file
        root = source_file.root
        self.binding = FileBinding(module_scope=Scope(root, None, is_function=True))
        self.binding.scopes[root] = self.binding.module_scope
        # Member tables of anonymous class expressions
        self._owners: Dict[SyntaxNode, Symbol] = {}

    def bind(self) -> FileBinding:
        for child in self.source_file.root.children:
            self._bind(child, self.binding.module_scope)
        return self.binding

    # -------------------------------------------------------------------------
    # Declaration helpers
    # -------------------------------------------------------------------------

    def _declare(
        self,
        table: Dict[str, Symbol],
        name_node: SyntaxNode,
        decl: SyntaxNode,
        meanings: frozenset,
        group: str,
    ) -> Symbol:
        name = name_node.text
        existing = table.get(name)
        if existing is None:
            symbol = Symbol(name=name, meanings=set(meanings), merge_group=group)
            table[name] = symbol
        elif existing.meanings & meanings and (existing.merge_group, group) not in _MERGEABLE:
            self.binding.diagnostics.append(
                self.source_file.diagnostic(name_node, f"Duplicate identifier '{name}'")
            )
            symbol = existing
        else:
            symbol = existing
            symbol.meanings |= meanings
        symbol.declarations.append(decl)
        self.binding.declared[name_node] = symbol
        return symbol

    def _new_scope(self, node: SyntaxNode, parent: Scope, is_function: bool = False) -> Scope:
        scope = Scope(node, parent, is_function=is_function)
        self.binding.scopes[node] = scope
        return scope

    def _bind_pattern(self, pattern: SyntaxNode, scope: Scope, group: str) -> None:
        """Declare every identifier a destructuring pattern binds."""
        kind = pattern.kind
        if kind in (SyntaxKind.IDENTIFIER, SyntaxKind.SHORTHAND_PROPERTY_IDENTIFIER_PATTERN):
            self._declare(scope.symbols, pattern, pattern, VALUE_ONLY, group)
        elif kind is SyntaxKind.PAIR_PATTERN:
            value = pattern.field('value')
            if value is not None:
                self._bind_pattern(value, scope, group)
        elif kind in (SyntaxKind.ASSIGNMENT_PATTERN, SyntaxKind.OBJECT_ASSIGNMENT_PATTERN):
            left = pattern.field('left') or (pattern.children[0] if pattern.children else None)
            if left is not None:
                self._bind_pattern(left, scope, group)
        elif kind in (SyntaxKind.OBJECT_PATTERN, SyntaxKind.ARRAY_PATTERN, SyntaxKind.REST_PATTERN):
            for child in pattern.children:
                self._bind_pattern(child, scope, group)

    def _has_keyword(self, node: SyntaxNode, upto: SyntaxNode, word: str) -> bool:
        """Whether an anonymous keyword precedes `upto` within `node`."""
        return word in self.source_file.slice(node.start, upto.start).split()

    # -------------------------------------------------------------------------
    # Walk
    # -------------------------------------------------------------------------

    def _bind_children(self, node: SyntaxNode, scope: Scope) -> None:
        for child in node.children:
            self._bind(child, scope)

    def _bind(self, node: SyntaxNode, scope: Scope) -> None:
        kind = node.kind

        if kind in (SyntaxKind.STATEMENT_BLOCK, SyntaxKind.CATCH_CLAUSE, SyntaxKind.FOR_STATEMENT):
            inner = self._new_scope(node, scope)
            if kind is SyntaxKind.CATCH_CLAUSE:
                param = node.field('parameter')
                if param is not None:
                    self._bind_pattern(param, inner, 'let')
            self._bind_children(node, inner)

        elif kind is SyntaxKind.FOR_IN_STATEMENT:
            inner = self._new_scope(node, scope)
            left = node.field('left')
            if left is not None:
                match = _BINDING_KEYWORD.search(self.source_file.slice(node.start, left.start))
                if match:
                    target = inner if match.group(1) != 'var' else scope.function_scope()
                    self._bind_pattern(left, target, 'var' if match.group(1) == 'var' else 'let')
            self._bind_children(node, inner)

        elif kind is SyntaxKind.VARIABLE_DECLARATOR:
            self._bind_variable(node, scope)

        elif kind in FUNCTION_LIKE_KINDS:
            self._bind_function(node, scope)

        elif kind in CLASS_LIKE_KINDS:
            self._bind_class(node, scope)

        elif kind is SyntaxKind.INTERFACE_DECLARATION:
            self._bind_interface(node, scope)

        elif kind is SyntaxKind.TYPE_ALIAS_DECLARATION:
            name = node.field('name')
            if name is not None:
                self._declare(scope.symbols, name, node, TYPE_ONLY, 'alias')
            self._bind_children(node, self._new_scope(node, scope))

        elif kind is SyntaxKind.TYPE_PARAMETER:
            name = node.field('name')
            if name is not None:
                self._declare(scope.symbols, name, node, TYPE_ONLY, 'type-parameter')
            self._bind_children(node, scope)

        elif kind is SyntaxKind.ENUM_DECLARATION:
            self._bind_enum(node, scope)

        elif kind is SyntaxKind.IMPORT_STATEMENT:
            self._bind_import(node, scope)

        elif kind is SyntaxKind.EXPORT_STATEMENT:
            self._bind_export(node, scope)

        else:
            self._bind_children(node, scope)

    def _bind_variable(self, node: SyntaxNode, scope: Scope) -> None:
        name = node.field('name')
        is_var = node.parent is not None and node.parent.kind is SyntaxKind.VARIABLE_DECLARATION
        target = scope.function_scope() if is_var else scope
        group = 'var' if is_var else 'let'
        if name is not None:
            if name.kind is SyntaxKind.IDENTIFIER:
                self._declare(target.symbols, name, node, VALUE_ONLY, group)
            else:
                self._bind_pattern(name, target, group)
        self._bind_children(node, scope)

    def _bind_function(self, node: SyntaxNode, scope: Scope) -> None:
        kind = node.kind
        inner = self._new_scope(node, scope, is_function=True)
        name = node.field('name')

        if name is not None:
            if kind in (SyntaxKind.METHOD_DEFINITION, SyntaxKind.METHOD_SIGNATURE,
                        SyntaxKind.ABSTRACT_METHOD_SIGNATURE):
                members = self._enclosing_members(node)
                if members is not None and name.kind in (
                        SyntaxKind.PROPERTY_IDENTIFIER, SyntaxKind.PRIVATE_PROPERTY_IDENTIFIER):
                    self._declare(members, name, node, VALUE_ONLY, 'function')
            elif kind in (SyntaxKind.FUNCTION_EXPRESSION, SyntaxKind.GENERATOR_FUNCTION):
                # A function expression's name is only visible inside it
                self._declare(inner.symbols, name, node, VALUE_ONLY, 'function')
            else:
                self._declare(scope.symbols, name, node, VALUE_ONLY, 'function')

        for type_params in node.fields('type_parameters'):
            self._bind(type_params, inner)

        single = node.field('parameter')
        if single is not None and single.kind is SyntaxKind.IDENTIFIER:
            self._declare(inner.symbols, single, single, VALUE_ONLY, 'param')

        params = node.field('parameters')
        if params is not None:
            for param in params.children:
                if param.kind in PARAMETER_KINDS:
                    self._bind_parameter(param, inner)
                else:
                    self._bind(param, inner)

        for child in node.children:
            if child is name or child is params or child is single:
                continue
            if child.kind is SyntaxKind.TYPE_PARAMETERS:
                continue
            self._bind(child, inner)

    def _bind_parameter(self, param: SyntaxNode, scope: Scope) -> None:
        name = declaration_name(param)
        if name is not None:
            if name.kind is SyntaxKind.IDENTIFIER:
                self._declare(scope.symbols, name, param, VALUE_ONLY, 'param')
            elif name.kind is not SyntaxKind.THIS:
                self._bind_pattern(name, scope, 'param')
        for child in param.children:
            if child is not param.field('pattern'):
                self._bind(child, scope)

    def _enclosing_members(self, node: SyntaxNode) -> Optional[Dict[str, Symbol]]:
        """Member table of the class or interface a member directly belongs to."""
        body = node.parent
        owner = body.parent if body is not None else None
        if owner is None:
            return None
        if owner.kind in CLASS_LIKE_KINDS:
            if body.kind is not SyntaxKind.CLASS_BODY:
                return None
        elif owner.kind is SyntaxKind.INTERFACE_DECLARATION:
            if owner.field('body') is not body:
                return None
        else:
            return None

        name = owner.field('name')
        symbol = self.binding.declared.get(name) if name is not None else None
        if symbol is None:
            # Anonymous class expression: members live on a detached table
            symbol = self._anonymous_owner(owner)
        if symbol.members is None:
            symbol.members = {}
        return symbol.members

    def _anonymous_owner(self, node: SyntaxNode) -> Symbol:
        if node not in self._owners:
            self._owners[node] = Symbol(name="", meanings=set(), declarations=[node])
        return self._owners[node]

    def _bind_class(self, node: SyntaxNode, scope: Scope) -> None:
        name = node.field('name')
        inner = self._new_scope(node, scope)
        if name is not None:
            target = inner if node.kind is SyntaxKind.CLASS else scope
            symbol = self._declare(target.symbols, name, node, BOTH, 'class')
            if symbol.members is None:
                symbol.members = {}

        for child in node.children:
            if child is name:
                continue
            if child.kind is SyntaxKind.CLASS_BODY:
                for member in child.children:
                    if member.kind is SyntaxKind.PUBLIC_FIELD_DEFINITION:
                        self._bind_field(member, inner)
                    else:
                        self._bind(member, inner)
            else:
                self._bind(child, inner)

    def _bind_field(self, node: SyntaxNode, scope: Scope) -> None:
        name = node.field('name') or node.field('property')
        members = self._enclosing_members(node)
        if name is not None and members is not None and name.kind in (
                SyntaxKind.PROPERTY_IDENTIFIER, SyntaxKind.PRIVATE_PROPERTY_IDENTIFIER):
            self._declare(members, name, node, VALUE_ONLY, 'field')
        for child in node.children:
            if child is not name:
                self._bind(child, scope)

    def _bind_interface(self, node: SyntaxNode, scope: Scope) -> None:
        name = node.field('name')
        inner = self._new_scope(node, scope)
        if name is not None:
            symbol = self._declare(scope.symbols, name, node, TYPE_ONLY, 'interface')
            if symbol.members is None:
                symbol.members = {}

        for child in node.children:
            if child is name:
                continue
            if child is node.field('body'):
                for member in child.children:
                    if member.kind is SyntaxKind.PROPERTY_SIGNATURE:
                        self._bind_field(member, inner)
                    else:
                        self._bind(member, inner)
            else:
                self._bind(child, inner)

    def _bind_enum(self, node: SyntaxNode, scope: Scope) -> None:
        name = node.field('name')
        symbol = None
        if name is not None:
            symbol = self._declare(scope.symbols, name, node, BOTH, 'enum')
            if symbol.members is None:
                symbol.members = {}
        body = node.field('body')
        if body is None:
            return
        for member in body.children:
            if member.kind is SyntaxKind.PROPERTY_IDENTIFIER and symbol is not None:
                self._declare(symbol.members, member, member, VALUE_ONLY, 'enum-member')
            elif member.kind is SyntaxKind.ENUM_ASSIGNMENT:
                member_name = member.field('name')
                if symbol is not None and member_name is not None and \
                        member_name.kind is SyntaxKind.PROPERTY_IDENTIFIER:
                    self._declare(symbol.members, member_name, member, VALUE_ONLY, 'enum-member')
                self._bind_children(member, scope)

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    def _alias(self, scope: Scope, name_node: SyntaxNode, decl: SyntaxNode,
               specifier: str, export_name: str) -> None:
        symbol = self._declare(scope.symbols, name_node, decl, BOTH, 'import')
        symbol.import_target = (specifier, export_name, self.source_file)
        self.binding.aliases.append((symbol, decl))

    def _bind_import(self, node: SyntaxNode, scope: Scope) -> None:
        source = node.field('source')
        clause = node.first_child(SyntaxKind.IMPORT_CLAUSE)
        if source is None or clause is None:
            return
        specifier = unquote(source.text)

        for part in clause.children:
            if part.kind is SyntaxKind.IDENTIFIER:
                self._alias(scope, part, clause, specifier, 'default')
            elif part.kind is SyntaxKind.NAMESPACE_IMPORT:
                local = part.first_child(SyntaxKind.IDENTIFIER)
                if local is not None:
                    self._alias(scope, local, part, specifier, '*')
            elif part.kind is SyntaxKind.NAMED_IMPORTS:
                for spec in part.children:
                    if spec.kind is not SyntaxKind.IMPORT_SPECIFIER:
                        continue
                    imported = spec.field('name')
                    local = spec.field('alias') or imported
                    if imported is None or local is None or local.kind is not SyntaxKind.IDENTIFIER:
                        continue
                    self._alias(scope, local, spec, specifier, unquote(imported.text))

    def _bind_export(self, node: SyntaxNode, scope: Scope) -> None:
        exports = self.binding.exports
        declaration = node.field('declaration')
        value = node.field('value')
        source = node.field('source')
        specifier = unquote(source.text) if source is not None else None

        if declaration is not None:
            self._bind(declaration, scope)
            is_default = self._has_keyword(node, declaration, 'default')
            for name, symbol in scope.symbols.items():
                if self._declares(declaration, symbol):
                    exports['default' if is_default else name] = ('symbol', symbol)
            return

        if value is not None:
            self._bind(value, scope)
            if value.kind is SyntaxKind.IDENTIFIER:
                exports['default'] = ('local', value.text)
            return

        clause = node.first_child(SyntaxKind.EXPORT_CLAUSE)
        if clause is not None:
            for spec in clause.children:
                if spec.kind is not SyntaxKind.EXPORT_SPECIFIER:
                    continue
                name = spec.field('name')
                alias = spec.field('alias') or name
                if name is None:
                    continue
                if specifier is not None:
                    exports[unquote(alias.text)] = ('module', specifier, unquote(name.text))
                else:
                    exports[unquote(alias.text)] = ('local', name.text)
        elif specifier is not None:
            self.binding.star_exports.append(specifier)

    @staticmethod
    def _declares(declaration: SyntaxNode, symbol: Symbol) -> bool:
        for decl in symbol.declarations:
            node = decl
            while node is not None:
                if node is declaration:
                    return True
                node = node.parent
        return False
