"""
Indexer — Translates checked TypeScript syntax trees into graph entries.

One Visitor indexes one file. It walks the tree top-down with two dispatch
functions:

    visit(node)       value dispatch (declarations, value references)
    visit_type(node)  type dispatch (type references)

Declarations produce a node fact plus a `defines/binding` edge from an
anchor over the declared name. Resolved identifiers produce `ref` edges.
Kinds neither function recognizes fall through to structural recursion.

Usage:
    from tsgraph.core import create_program, index

    program = create_program(paths)
    index(paths, program, emit=sink)
"""

from typing import Iterable, List, Optional

from .binder import Symbol
from .diagnostics import format_diagnostics
from .emitter import GraphEmitter, JsonLinesSink, ListSink, Sink
from .errors import InternalConsistencyError, PreflightError, ProgramLoadError
from .identity import IdentityAssigner
from .parsing.syntax import (
    CLASS_LIKE_KINDS,
    PARAMETER_KINDS,
    SyntaxKind,
    SyntaxNode,
    declaration_name,
)
from .signature import ScopeSignatureBuilder
from .vname import Namespace, VName
from ..config import IndexerConfig
from ..logger_config import get_logger

logger = get_logger(__name__)


# Function-like kinds the visitor translates. Overload signatures
# (function_signature) only recurse, so the implementation owns the node.
VISITED_FUNCTION_KINDS = frozenset({
    SyntaxKind.FUNCTION_DECLARATION,
    SyntaxKind.GENERATOR_FUNCTION_DECLARATION,
    SyntaxKind.FUNCTION_EXPRESSION,
    SyntaxKind.GENERATOR_FUNCTION,
    SyntaxKind.ARROW_FUNCTION,
    SyntaxKind.METHOD_DEFINITION,
    SyntaxKind.METHOD_SIGNATURE,
    SyntaxKind.ABSTRACT_METHOD_SIGNATURE,
})

VARIABLE_KINDS = frozenset({
    SyntaxKind.VARIABLE_DECLARATOR,
    SyntaxKind.PUBLIC_FIELD_DEFINITION,
    SyntaxKind.PROPERTY_SIGNATURE,
})

# Value-dispatch kinds handed over to type dispatch
TYPE_CONTEXT_KINDS = frozenset({
    SyntaxKind.TYPE_ANNOTATION,
    SyntaxKind.TYPE_ARGUMENTS,
    SyntaxKind.TYPE_PARAMETERS,
    SyntaxKind.IMPLEMENTS_CLAUSE,
    SyntaxKind.EXTENDS_TYPE_CLAUSE,
    SyntaxKind.TYPE_IDENTIFIER,
    SyntaxKind.GENERIC_TYPE,
    SyntaxKind.NESTED_TYPE_IDENTIFIER,
})

# Identifier occurrences that may reference a value
VALUE_NAME_KINDS = frozenset({
    SyntaxKind.IDENTIFIER,
    SyntaxKind.PROPERTY_IDENTIFIER,
    SyntaxKind.PRIVATE_PROPERTY_IDENTIFIER,
    SyntaxKind.SHORTHAND_PROPERTY_IDENTIFIER,
})

# Declaration names the visitor can bind directly
SIMPLE_NAME_KINDS = frozenset({
    SyntaxKind.IDENTIFIER,
    SyntaxKind.TYPE_IDENTIFIER,
    SyntaxKind.PROPERTY_IDENTIFIER,
    SyntaxKind.PRIVATE_PROPERTY_IDENTIFIER,
})


class Visitor:
    """
    Indexes a single source file.

    Owns the per-file state: the signature builder (anonymous counter) and
    the identity assigner (Symbol -> VName table). Neither outlives the
    file pass.

    Args:
        checker: Symbol resolution for the program
        source_file: File to index
        config: VName corpus/root/language and path relativization
        sink: Receives every entry
    """

    def __init__(self, checker, source_file, config: IndexerConfig, sink: Sink):
        self.checker = checker
        self.source_file = source_file
        self.config = config
        self.signatures = ScopeSignatureBuilder()
        self.identities = IdentityAssigner(self.signatures, self.new_vname)
        self.file_vname = self.new_vname("").with_language("")
        self.emitter = GraphEmitter(sink, self.file_vname, config.language)
        # Entities whose node/kind fact is already out (merged declarations)
        self._declared: set = set()

    # -------------------------------------------------------------------------
    # Identity helpers
    # -------------------------------------------------------------------------

    def new_vname(self, signature: str, source_file=None) -> VName:
        """VName for a signature in a file (the indexed file by default)."""
        source_file = source_file or self.source_file
        return VName(
            signature=signature,
            path=self.config.relative_path(source_file.path),
            language=self.config.language,
            root=self.config.vname_root,
            corpus=self.config.corpus,
        )

    def identity_of(self, symbol: Symbol, namespace: Namespace) -> VName:
        return self.identities.identity_of(symbol, namespace)

    def _declare_node(self, vname: VName, kind: str) -> None:
        if vname in self._declared:
            return
        self._declared.add(vname)
        self.emitter.emit_node(vname, kind)

    def _bind(self, name: SyntaxNode, vname: VName) -> None:
        anchor = self.emitter.new_anchor(name)
        self.emitter.emit_edge(anchor, "defines/binding", vname)

    def _where(self, node: SyntaxNode) -> str:
        line, column = self.source_file.position(node.start)
        return f"{self.source_file.path}:{line}:{column}"

    def _symbol_of_name(self, name: Optional[SyntaxNode]) -> Optional[Symbol]:
        if name is None or name.kind not in SIMPLE_NAME_KINDS:
            return None
        return self.checker.symbol_at(name)

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def index_file(self) -> None:
        """Emit the file node, then walk every top-level statement."""
        self.emitter.emit_file(self.source_file.text)
        for child in self.source_file.root.children:
            self.visit(child)

    # -------------------------------------------------------------------------
    # Value dispatch
    # -------------------------------------------------------------------------

    def visit(self, node: SyntaxNode) -> None:
        kind = node.kind
        if kind is SyntaxKind.EXPORT_STATEMENT:
            self.visit_export_statement(node)
        elif kind in VARIABLE_KINDS:
            self.visit_variable_declaration(node)
        elif kind in VISITED_FUNCTION_KINDS:
            self.visit_function_like(node)
        elif kind in CLASS_LIKE_KINDS:
            self.visit_class_declaration(node)
        elif kind is SyntaxKind.INTERFACE_DECLARATION:
            self.visit_interface_declaration(node)
        elif kind is SyntaxKind.TYPE_ALIAS_DECLARATION:
            self.visit_type_alias(node)
        elif kind is SyntaxKind.FOR_IN_STATEMENT:
            self.visit_for_in(node)
        elif kind is SyntaxKind.CATCH_CLAUSE:
            self.visit_catch_clause(node)
        elif kind in TYPE_CONTEXT_KINDS:
            self.visit_type(node)
        elif kind in VALUE_NAME_KINDS:
            self.visit_value_name(node)
        else:
            for child in node.children:
                self.visit(child)

    def visit_class_declaration(self, node: SyntaxNode) -> None:
        name = node.field('name')
        symbol = self._symbol_of_name(name)
        if symbol is not None:
            k_class = self.identity_of(symbol, Namespace.VALUE)
            self._declare_node(k_class, "record")
            self._bind(name, k_class)

        for child in node.children:
            if child is name:
                continue
            if child.kind is SyntaxKind.CLASS_BODY:
                for member in child.children:
                    self.visit(member)
            else:
                # Heritage, type parameters, decorators
                self.visit(child)

    def visit_interface_declaration(self, node: SyntaxNode) -> None:
        name = node.field('name')
        symbol = self._symbol_of_name(name)
        if symbol is not None:
            k_iface = self.identity_of(symbol, Namespace.TYPE)
            self._declare_node(k_iface, "interface")
            self._bind(name, k_iface)

        body = node.field('body')
        for child in node.children:
            if child is name:
                continue
            if child is body:
                for member in body.children:
                    self.visit(member)
            else:
                self.visit(child)

    def visit_type_alias(self, node: SyntaxNode) -> None:
        name = node.field('name')
        symbol = self._symbol_of_name(name)
        if symbol is not None:
            k_alias = self.identity_of(symbol, Namespace.TYPE)
            self._declare_node(k_alias, "alias")
            self._bind(name, k_alias)

        for child in node.children:
            if child is not name:
                self.visit_type(child)

    def _declare_variable(self, name: Optional[SyntaxNode], node: SyntaxNode) -> None:
        """Variable node and binding for a simple name; patterns are only walked."""
        symbol = self._symbol_of_name(name)
        if symbol is not None:
            k_var = self.identity_of(symbol, Namespace.VALUE)
            self._declare_node(k_var, "variable")
            self._bind(name, k_var)
        else:
            logger.warning(
                "Unhandled variable declaration %s at %s",
                name.type_name if name is not None else "<missing>", self._where(node),
            )
            if name is not None:
                self.visit(name)

    def visit_variable_declaration(self, node: SyntaxNode) -> None:
        """Variables, class fields and interface property signatures."""
        name = node.field('name')
        self._declare_variable(name, node)

        for child in node.children:
            if child is name:
                continue
            if child.kind is SyntaxKind.TYPE_ANNOTATION:
                self.visit_type(child)
            else:
                self.visit(child)

    def visit_for_in(self, node: SyntaxNode) -> None:
        """`for (const x of xs)` and `for (let k in o)` declare their loop variable."""
        left = node.field('left')
        declares = left is not None and any(
            self.checker.is_declaration_name(n) for n in left.walk()
        )
        if declares:
            self._declare_variable(left, node)

        for child in node.children:
            if child is left and declares:
                continue
            self.visit(child)

    def visit_catch_clause(self, node: SyntaxNode) -> None:
        param = node.field('parameter')
        if param is not None:
            self._declare_variable(param, node)

        for child in node.children:
            if child is not param:
                self.visit(child)

    def visit_function_like(self, node: SyntaxNode) -> None:
        name = node.field('name')
        symbol = self._symbol_of_name(name)
        if symbol is not None:
            k_func = self.identity_of(symbol, Namespace.VALUE)
            self._declare_node(k_func, "function")
            self._bind(name, k_func)
        else:
            k_func = self._anonymous_function(node, name)

        params = node.field('parameters')
        single = node.field('parameter')
        parameters: List[SyntaxNode] = []
        if single is not None:
            parameters.append(single)
        elif params is not None:
            parameters.extend(params.children)

        for index, param in enumerate(parameters):
            self.visit_parameter(k_func, index, param)

        for child in node.children:
            if child is name or child is params or child is single:
                continue
            self.visit(child)

    def _anonymous_function(self, node: SyntaxNode, name: Optional[SyntaxNode]) -> VName:
        """Placeholder identity for a function without a symbol."""
        if name is None:
            logger.warning("Anonymous function at %s has a position-derived identity",
                           self._where(node))
        else:
            # Object-literal methods and computed names
            logger.warning("Function %r at %s has no symbol; using a position-derived identity",
                           self.source_file.slice(name.start, name.end), self._where(node))
        k_func = self.new_vname(f"anon@{node.start}:{node.end}")
        self._declare_node(k_func, "function")
        return k_func

    def visit_parameter(self, k_func: VName, index: int, param: SyntaxNode) -> None:
        if param.kind is SyntaxKind.IDENTIFIER:
            name = param
        elif param.kind in PARAMETER_KINDS:
            name = declaration_name(param)
        else:
            name = None

        symbol = self.checker.symbol_at(name) if name is not None and \
            name.kind is SyntaxKind.IDENTIFIER else None
        if symbol is not None:
            k_param = self.identity_of(symbol, Namespace.VALUE)
            self._declare_node(k_param, "variable")
            self.emitter.emit_edge(k_func, f"param.{index}", k_param)
            self._bind(name, k_param)
        else:
            logger.warning(
                "Unhandled parameter %d (%s) at %s",
                index, param.type_name, self._where(param),
            )
            if name is not None and name.kind is not SyntaxKind.THIS:
                self.visit(name)

        if param is name:
            return
        for child in param.children:
            if child is param.field('pattern'):
                continue
            if child.kind is SyntaxKind.TYPE_ANNOTATION:
                self.visit_type(child)
            else:
                self.visit(child)

    def visit_export_statement(self, node: SyntaxNode) -> None:
        clause = node.first_child(SyntaxKind.EXPORT_CLAUSE)
        if clause is not None:
            for element in clause.children:
                logger.warning(
                    "Unhandled export element %r at %s",
                    self.source_file.slice(element.start, element.end), self._where(element),
                )
        source = node.field('source')
        if source is not None:
            logger.warning("Unhandled module specifier %s at %s",
                           source.text, self._where(source))
        for child in node.children:
            self.visit(child)

    def visit_value_name(self, node: SyntaxNode) -> None:
        """Reference edge from an identifier use to its VALUE entity."""
        if self.checker.is_declaration_name(node):
            return
        symbol = self.checker.symbol_at(node)
        if symbol is None or not symbol.declarations:
            logger.debug("Unresolved value %r at %s", node.text, self._where(node))
            return
        k_ref = self.identity_of(symbol, Namespace.VALUE)
        self.emitter.emit_edge(self.emitter.new_anchor(node), "ref", k_ref)

    # -------------------------------------------------------------------------
    # Type dispatch
    # -------------------------------------------------------------------------

    def visit_type(self, node: SyntaxNode) -> None:
        kind = node.kind
        if kind is SyntaxKind.TYPE_IDENTIFIER:
            self.visit_type_name(node)
        elif kind is SyntaxKind.TYPE_QUERY:
            # `typeof x` names a value
            for child in node.children:
                self.visit(child)
        else:
            for child in node.children:
                self.visit_type(child)

    def visit_type_name(self, node: SyntaxNode) -> None:
        """Reference edge from a type name to its TYPE entity."""
        if self.checker.is_declaration_name(node):
            return
        symbol = self.checker.symbol_at(node)
        if symbol is None:
            logger.debug("Unresolved type %r at %s", node.text, self._where(node))
            return
        k_ref = self.identity_of(symbol, Namespace.TYPE)
        self.emitter.emit_edge(self.emitter.new_anchor(node), "ref", k_ref)


def index(
    paths: Iterable,
    program,
    emit: Optional[Sink] = None,
    config: Optional[IndexerConfig] = None,
) -> None:
    """
    Index files of a checked program.

    Args:
        paths: Files to index; each must be part of the program
        program: Loaded program (see create_program)
        emit: Sink for entries (default: JSON lines on stdout)
        config: VName settings (default: IndexerConfig())

    Raises:
        PreflightError: The program has diagnostics; nothing is emitted
        InternalConsistencyError: A file referenced a declaration-less symbol
        ProgramLoadError: A path is not part of the program
    """
    diagnostics = program.diagnostics
    if diagnostics:
        raise PreflightError(format_diagnostics(diagnostics), diagnostics)

    config = config or IndexerConfig()
    sink = emit if emit is not None else JsonLinesSink()
    checker = program.checker

    for path in paths:
        source_file = program.get_source_file(path)
        if source_file is None:
            raise ProgramLoadError(f"{path} is not part of the program")

        logger.info("Indexing %s", source_file.path)
        buffer = ListSink()
        try:
            Visitor(checker, source_file, config, buffer).index_file()
        except InternalConsistencyError:
            logger.error("Aborted indexing %s; no entries emitted for it", source_file.path)
            raise
        for entry in buffer:
            sink(entry)
