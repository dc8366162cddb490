"""
Core — AST-to-graph translation engine

Contains:
- VName / Namespace: Identity of graph entities
- Program: Parsed, checkable set of TypeScript files (host side)
- Binder / TypeChecker: Scopes, symbols and name resolution (host side)
- ScopeSignatureBuilder: Scoped signatures with anon/block tokens
- IdentityAssigner: Memoized Symbol -> VName table
- GraphEmitter: Node, fact, edge and anchor entries
- Visitor / index(): Value and type dispatch over syntax trees
"""

from .vname import VName, Namespace, TYPE_SUFFIX, anchor_signature
from .errors import TsGraphError, ProgramLoadError, PreflightError, InternalConsistencyError
from .diagnostics import Diagnostic, format_diagnostics
from .program import Program, SourceFile, create_program
from .binder import Binder, Symbol, Scope, FileBinding
from .checker import TypeChecker
from .signature import ScopeSignatureBuilder
from .identity import IdentityAssigner
from .emitter import GraphEmitter, ListSink, JsonLinesSink, encode_fact_value, decode_fact_value
from .indexer import Visitor, index

__all__ = [
    'VName', 'Namespace', 'TYPE_SUFFIX', 'anchor_signature',
    'TsGraphError', 'ProgramLoadError', 'PreflightError', 'InternalConsistencyError',
    'Diagnostic', 'format_diagnostics',
    'Program', 'SourceFile', 'create_program',
    'Binder', 'Symbol', 'Scope', 'FileBinding',
    'TypeChecker',
    'ScopeSignatureBuilder',
    'IdentityAssigner',
    'GraphEmitter', 'ListSink', 'JsonLinesSink', 'encode_fact_value', 'decode_fact_value',
    'Visitor', 'index',
]
