"""
TypeChecker — Symbol resolution over a Program.

The indexer's view of the host type-resolution facility:

    checker.symbol_at(node)            -> Symbol or None
    checker.is_declaration_name(node)  -> True at binding occurrences
    checker.diagnostics()              -> binding/import problems

Resolution is lexical: value identifiers resolve through the VALUE meaning
of enclosing scopes, type identifiers through the TYPE meaning. Import
aliases are followed into the exporting program file when it is part of
the program; imports of external modules stay as local alias symbols.
Member names resolve for `this.x` inside a class and for `X.y` where X is a
class, enum, interface or namespace import.

Names the program never declares (globals, ambient library types) resolve
to None.
"""

from typing import Dict, List, Optional, Set

from .binder import Binder, FileBinding, Symbol
from .diagnostics import Diagnostic
from .parsing.syntax import CLASS_LIKE_KINDS, FUNCTION_LIKE_KINDS, SyntaxKind, SyntaxNode
from .program import unquote
from .vname import Namespace
from ..logger_config import get_logger

logger = get_logger(__name__)


class TypeChecker:
    """Resolves syntax nodes to symbols for one Program."""

    def __init__(self, program):
        self.program = program
        self._bindings: Dict[object, FileBinding] = {}
        self._exports: Dict[object, Dict[str, Symbol]] = {}
        self._exports_in_progress: Set[object] = set()

    # -------------------------------------------------------------------------
    # Bindings
    # -------------------------------------------------------------------------

    def binding_for(self, source_file) -> FileBinding:
        """Bind a file on first use."""
        binding = self._bindings.get(source_file)
        if binding is None:
            binding = Binder(source_file).bind()
            self._bindings[source_file] = binding
        return binding

    def _binding_of(self, node: SyntaxNode) -> FileBinding:
        return self.binding_for(node.root.source_file)

    def diagnostics(self) -> List[Diagnostic]:
        """Duplicate declarations and imports of missing exports, file by file."""
        diagnostics: List[Diagnostic] = []
        for source_file in self.program.source_files:
            binding = self.binding_for(source_file)
            diagnostics.extend(binding.diagnostics)
            for alias, decl in binding.aliases:
                specifier, export_name, importing = alias.import_target
                target = self.program.resolve_module(specifier, importing)
                if target is None or export_name == '*':
                    continue
                if self.module_exports(target).get(export_name) is None:
                    diagnostics.append(source_file.diagnostic(
                        decl, f"Module '{specifier}' has no exported member '{export_name}'"
                    ))
        return diagnostics

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def is_declaration_name(self, node: SyntaxNode) -> bool:
        """Whether a name node is where its symbol is declared."""
        return node in self._binding_of(node).declared

    def symbol_at(self, node: SyntaxNode) -> Optional[Symbol]:
        """
        The symbol a name node refers to.

        Args:
            node: An identifier-like node

        Returns:
            The resolved Symbol (import aliases followed), or None
        """
        binding = self._binding_of(node)
        symbol = binding.declared.get(node)
        if symbol is None:
            symbol = self._resolve_reference(node, binding)
        if symbol is not None and symbol.is_alias:
            symbol = self.resolve_alias(symbol)
        return symbol

    def _resolve_reference(self, node: SyntaxNode, binding: FileBinding) -> Optional[Symbol]:
        kind = node.kind
        parent = node.parent
        parent_kind = parent.kind if parent is not None else None

        if kind in (SyntaxKind.IDENTIFIER, SyntaxKind.SHORTHAND_PROPERTY_IDENTIFIER):
            if parent_kind is SyntaxKind.IMPORT_SPECIFIER:
                return self._imported(parent, node)
            if parent_kind is SyntaxKind.EXPORT_SPECIFIER:
                return self._exported(parent, node, binding)
            if parent_kind is SyntaxKind.NESTED_TYPE_IDENTIFIER:
                return binding.scope_of(node).lookup(node.text)
            return binding.scope_of(node).lookup(node.text, Namespace.VALUE)

        if kind is SyntaxKind.TYPE_IDENTIFIER:
            if parent_kind is SyntaxKind.NESTED_TYPE_IDENTIFIER and parent.field('name') is node:
                owner = parent.field('module')
                owner_symbol = self.symbol_at(owner) if owner is not None else None
                member = self.members_of(owner_symbol).get(node.text)
                if member is not None and Namespace.TYPE in member.meanings:
                    return member
                return None
            return binding.scope_of(node).lookup(node.text, Namespace.TYPE)

        if kind in (SyntaxKind.PROPERTY_IDENTIFIER, SyntaxKind.PRIVATE_PROPERTY_IDENTIFIER):
            if parent_kind is SyntaxKind.MEMBER_EXPRESSION and parent.field('property') is node:
                return self._member(parent.field('object'), node.text)
            return None

        return None

    def _member(self, owner: Optional[SyntaxNode], name: str) -> Optional[Symbol]:
        if owner is None:
            return None
        if owner.kind is SyntaxKind.THIS:
            for ancestor in owner.ancestors():
                if _rebinds_this(ancestor):
                    return None
                if ancestor.kind in CLASS_LIKE_KINDS:
                    class_name = ancestor.field('name')
                    if class_name is None:
                        return None
                    return self.members_of(self.symbol_at(class_name)).get(name)
            return None
        if owner.kind is SyntaxKind.IDENTIFIER:
            return self.members_of(self.symbol_at(owner)).get(name)
        return None

    def members_of(self, symbol: Optional[Symbol]) -> Dict[str, Symbol]:
        """Member table of a class/interface/enum, or a namespace import's exports."""
        if symbol is None:
            return {}
        if symbol.members is not None:
            return symbol.members
        if symbol.is_alias:
            specifier, export_name, importing = symbol.import_target
            if export_name == '*':
                target = self.program.resolve_module(specifier, importing)
                if target is not None:
                    return self.module_exports(target)
        return {}

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    def _imported(self, spec: SyntaxNode, node: SyntaxNode) -> Optional[Symbol]:
        """The exported symbol an import specifier's imported name refers to."""
        statement = spec.parent.parent.parent if spec.parent and spec.parent.parent else None
        source = statement.field('source') if statement is not None else None
        if source is None:
            return None
        target = self.program.resolve_module(unquote(source.text), node.root.source_file)
        if target is None:
            return None
        return self.module_exports(target).get(unquote(node.text))

    def _exported(self, spec: SyntaxNode, node: SyntaxNode, binding: FileBinding) -> Optional[Symbol]:
        if spec.field('name') is not node:
            return None
        statement = spec.parent.parent if spec.parent is not None else None
        source = statement.field('source') if statement is not None else None
        if source is None:
            return binding.module_scope.lookup(node.text)
        target = self.program.resolve_module(unquote(source.text), node.root.source_file)
        if target is None:
            return None
        return self.module_exports(target).get(unquote(node.text))

    def module_exports(self, source_file) -> Dict[str, Symbol]:
        """Exported name -> symbol for a program file (aliases followed)."""
        cached = self._exports.get(source_file)
        if cached is not None:
            return cached
        if source_file in self._exports_in_progress:
            return {}
        self._exports_in_progress.add(source_file)
        try:
            binding = self.binding_for(source_file)
            exports: Dict[str, Symbol] = {}
            for name, entry in binding.exports.items():
                symbol = None
                if entry[0] == 'symbol':
                    symbol = entry[1]
                elif entry[0] == 'local':
                    symbol = binding.module_scope.lookup(entry[1])
                elif entry[0] == 'module':
                    target = self.program.resolve_module(entry[1], source_file)
                    if target is not None:
                        symbol = self.module_exports(target).get(entry[2])
                if symbol is not None:
                    exports[name] = self.resolve_alias(symbol) if symbol.is_alias else symbol
            for specifier in binding.star_exports:
                target = self.program.resolve_module(specifier, source_file)
                if target is None:
                    continue
                for name, symbol in self.module_exports(target).items():
                    if name != 'default':
                        exports.setdefault(name, symbol)
        finally:
            self._exports_in_progress.discard(source_file)
        self._exports[source_file] = exports
        return exports

    def resolve_alias(self, alias: Symbol) -> Symbol:
        """
        Follow an import alias to the symbol it names.

        Returns the alias itself for external modules, namespace imports,
        and exports that cannot be found.
        """
        seen = set()
        symbol = alias
        while symbol.is_alias and id(symbol) not in seen:
            seen.add(id(symbol))
            specifier, export_name, importing = symbol.import_target
            if export_name == '*':
                return symbol
            target = self.program.resolve_module(specifier, importing)
            if target is None:
                return symbol
            resolved = self.module_exports(target).get(export_name)
            if resolved is None:
                return symbol
            symbol = resolved
        return symbol


def _rebinds_this(node: SyntaxNode) -> bool:
    """Whether `this` inside node no longer means the enclosing class instance."""
    if node.kind not in FUNCTION_LIKE_KINDS or node.kind is SyntaxKind.ARROW_FUNCTION:
        return False
    # Class member methods keep the instance
    parent = node.parent
    return not (
        node.kind is SyntaxKind.METHOD_DEFINITION
        and parent is not None
        and parent.kind is SyntaxKind.CLASS_BODY
    )
