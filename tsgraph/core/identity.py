"""
IdentityAssigner — Memoized Symbol -> VName assignment.

Each symbol owns a two-slot record, one slot per Namespace. The scoped
signature is computed once per symbol, from its first declaration; the
TYPE slot appends TYPE_SUFFIX to it, so the two namespaces of one entity
never collide and differ only by that suffix.

The table lives exactly as long as one file-indexing pass.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .binder import Symbol
from .errors import InternalConsistencyError
from .signature import ScopeSignatureBuilder
from .vname import TYPE_SUFFIX, Namespace, VName

VNameFactory = Callable[[str, object], VName]


@dataclass
class _SymbolNames:
    """Per-symbol record: base signature plus one VName slot per namespace."""
    signature: str
    source_file: object
    type_name: Optional[VName] = None
    value_name: Optional[VName] = None

    def get(self, namespace: Namespace) -> Optional[VName]:
        return self.type_name if namespace is Namespace.TYPE else self.value_name

    def put(self, namespace: Namespace, vname: VName) -> None:
        if namespace is Namespace.TYPE:
            self.type_name = vname
        else:
            self.value_name = vname


class IdentityAssigner:
    """
    Assigns stable VNames to symbols.

    Args:
        signatures: The pass's signature builder (owns the anon counter)
        new_vname: Builds a VName from (signature, declaring source file)
    """

    def __init__(self, signatures: ScopeSignatureBuilder, new_vname: VNameFactory):
        self._signatures = signatures
        self._new_vname = new_vname
        self._names: Dict[Symbol, _SymbolNames] = {}

    def identity_of(self, symbol: Symbol, namespace: Namespace) -> VName:
        """
        VName of a symbol in a namespace.

        Raises:
            InternalConsistencyError: The symbol has no declarations
        """
        record = self._names.get(symbol)
        if record is not None:
            cached = record.get(namespace)
            if cached is not None:
                return cached

        if record is None:
            if not symbol.declarations:
                raise InternalConsistencyError(
                    f"Symbol {symbol.name!r} has no declarations"
                )
            # Only the first declaration names a merged symbol
            signature, source_file = self._signatures.signature_of(symbol.declarations[0])
            record = _SymbolNames(signature=signature, source_file=source_file)
            self._names[symbol] = record

        signature = record.signature
        if namespace is Namespace.TYPE:
            signature += TYPE_SUFFIX
        vname = self._new_vname(signature, record.source_file)
        record.put(namespace, vname)
        return vname

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, symbol: Symbol) -> bool:
        return symbol in self._names
