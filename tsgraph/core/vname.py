"""
VName — Identity of a graph entity.

A VName is a value: two VNames are equal iff all five fields are equal.
Symbols may carry one VName per Namespace; the TYPE one is the VALUE
signature with TYPE_SUFFIX appended.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict


# Appended to a declaration's signature for its TYPE-namespace VName
TYPE_SUFFIX = "#type"


class Namespace(Enum):
    """
    The two TypeScript namespaces a symbol may live in.

    A name may be a type, a value, or both (a class is a type and a
    constructor value); the two meanings get independent VNames.
    """
    TYPE = 0
    VALUE = 1


@dataclass(frozen=True)
class VName:
    """Kythe node identity."""
    signature: str
    path: str
    language: str
    root: str
    corpus: str

    def to_dict(self) -> Dict[str, str]:
        """Serialize in wire order."""
        return {
            "signature": self.signature,
            "path": self.path,
            "language": self.language,
            "root": self.root,
            "corpus": self.corpus,
        }

    def with_signature(self, signature: str) -> 'VName':
        return replace(self, signature=signature)

    def with_language(self, language: str) -> 'VName':
        return replace(self, language=language)


def anchor_signature(start: int, end: int) -> str:
    """Signature of the anchor covering [start, end)."""
    return f"@{start}:{end}"
