"""
GraphEmitter — Serializes nodes, facts, edges and anchors to a sink.

Every entry is a plain dict handed to a sink callable:

    fact: {"source": VName, "fact_name": "/kythe/<name>", "fact_value": <base64>}
    edge: {"source": VName, "edge_kind": "/kythe/edge/<kind>",
           "target": VName, "fact_name": "/"}

Entries are never retracted. Consumers must treat the stream as an
unordered multiset; the emitter still writes in traversal order so golden
outputs are stable.

Usage:
    sink = ListSink()
    emitter = GraphEmitter(sink, file_vname)
    emitter.emit_node(vname, "function")
    anchor = emitter.new_anchor(name_node)
    emitter.emit_edge(anchor, "defines/binding", vname)
"""

import base64
import io
import sys
from typing import Any, Callable, Dict, Iterator, List, Optional

import orjson

from .parsing.syntax import SyntaxNode
from .vname import VName, anchor_signature

# Schema prefixes for fact names and edge kinds
FACT_PREFIX = "/kythe/"
EDGE_PREFIX = "/kythe/edge/"

Entry = Dict[str, Any]
Sink = Callable[[Entry], None]


def encode_fact_value(value: str) -> str:
    """UTF-8 encode then base64 a fact value for transport."""
    return base64.b64encode(value.encode('utf-8')).decode('ascii')


def decode_fact_value(value: str) -> str:
    return base64.b64decode(value).decode('utf-8')


class GraphEmitter:
    """
    Low-level entry protocol for one file.

    Args:
        sink: Receives each finished entry
        file_vname: VName of the file being indexed (anchors are its children)
        language: Language tag for anchors; the file VName itself has none
    """

    def __init__(self, sink: Sink, file_vname: VName, language: str):
        self.sink = sink
        self.file_vname = file_vname
        self.language = language

    def emit_node(self, vname: VName, kind: str) -> None:
        """Declare the kind of a VName."""
        self.emit_fact(vname, "node/kind", kind)

    def emit_fact(self, vname: VName, name: str, value: str) -> None:
        """Tie an attribute to a VName."""
        self.sink({
            "source": vname.to_dict(),
            "fact_name": FACT_PREFIX + name,
            "fact_value": encode_fact_value(value),
        })

    def emit_edge(self, source: VName, kind: str, target: VName) -> None:
        """Relate two VNames."""
        self.sink({
            "source": source.to_dict(),
            "edge_kind": EDGE_PREFIX + kind,
            "target": target.to_dict(),
            "fact_name": "/",
        })

    def anchor_vname(self, node: SyntaxNode) -> VName:
        """VName of the anchor covering a node's span."""
        return VName(
            signature=anchor_signature(node.start, node.end),
            path=self.file_vname.path,
            language=self.language,
            root=self.file_vname.root,
            corpus=self.file_vname.corpus,
        )

    def new_anchor(self, node: SyntaxNode) -> VName:
        """Emit an anchor for a node's span and return its VName."""
        anchor = self.anchor_vname(node)
        self.emit_node(anchor, "anchor")
        self.emit_fact(anchor, "loc/start", str(node.start))
        self.emit_fact(anchor, "loc/end", str(node.end))
        self.emit_edge(anchor, "childof", self.file_vname)
        return anchor

    def emit_file(self, text: str) -> None:
        """Emit the file node and its full source text."""
        self.emit_fact(self.file_vname, "node/kind", "file")
        self.emit_fact(self.file_vname, "text", text)


# =============================================================================
# Sinks
# =============================================================================

class ListSink:
    """Collects entries in memory."""

    def __init__(self):
        self.entries: List[Entry] = []

    def __call__(self, entry: Entry) -> None:
        self.entries.append(entry)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def facts(self, name: Optional[str] = None) -> List[Entry]:
        """Fact entries, optionally only those with a given unprefixed name."""
        return [
            e for e in self.entries
            if "fact_value" in e and (name is None or e["fact_name"] == FACT_PREFIX + name)
        ]

    def edges(self, kind: Optional[str] = None) -> List[Entry]:
        """Edge entries, optionally only those with a given unprefixed kind."""
        return [
            e for e in self.entries
            if "edge_kind" in e and (kind is None or e["edge_kind"] == EDGE_PREFIX + kind)
        ]


class JsonLinesSink:
    """Writes one JSON object per line (orjson) to a binary or text stream."""

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout

    def __call__(self, entry: Entry) -> None:
        line = orjson.dumps(entry) + b"\n"
        if isinstance(self.stream, io.TextIOBase):
            self.stream.write(line.decode('utf-8'))
        else:
            self.stream.write(line)
