"""
Tests for GraphEmitter, sinks and VName value semantics.
"""

import base64
import io

import orjson
import pytest

from tsgraph.core.emitter import (
    EDGE_PREFIX,
    FACT_PREFIX,
    GraphEmitter,
    JsonLinesSink,
    ListSink,
    decode_fact_value,
    encode_fact_value,
)
from tsgraph.core.parsing.syntax import SyntaxKind, SyntaxNode
from tsgraph.core.vname import Namespace, VName, anchor_signature


FILE = VName(signature="", path="src/a.ts", language="", root="", corpus="default")


@pytest.fixture
def sink():
    return ListSink()


@pytest.fixture
def emitter(sink):
    return GraphEmitter(sink, FILE, "typescript")


def _name_node(start=4, end=7):
    return SyntaxNode(SyntaxKind.IDENTIFIER, "identifier", start, end, "foo")


class TestVName:
    """VName is a value type."""

    def test_equality_is_field_wise(self):
        a = VName("s", "p", "typescript", "", "c")
        b = VName("s", "p", "typescript", "", "c")
        assert a == b
        assert hash(a) == hash(b)
        assert a != a.with_signature("t")

    def test_wire_order(self):
        vname = VName("s", "p", "l", "r", "c")
        assert list(vname.to_dict()) == ["signature", "path", "language", "root", "corpus"]

    def test_with_language(self):
        assert FILE.with_language("typescript").language == "typescript"

    def test_anchor_signature(self):
        assert anchor_signature(3, 9) == "@3:9"

    def test_namespaces(self):
        assert {n.name for n in Namespace} == {"TYPE", "VALUE"}


class TestFactValues:

    def test_round_trip_unicode(self):
        value = "héllo ✓"
        assert decode_fact_value(encode_fact_value(value)) == value

    def test_base64_of_utf8(self):
        assert encode_fact_value("file") == base64.b64encode(b"file").decode("ascii")


class TestGraphEmitter:
    """Entry shapes."""

    def test_emit_node(self, emitter, sink):
        vname = VName("f", "src/a.ts", "typescript", "", "default")
        emitter.emit_node(vname, "function")

        assert sink.entries == [{
            "source": vname.to_dict(),
            "fact_name": FACT_PREFIX + "node/kind",
            "fact_value": encode_fact_value("function"),
        }]

    def test_emit_edge(self, emitter, sink):
        f = VName("f", "src/a.ts", "typescript", "", "default")
        x = VName("f.x", "src/a.ts", "typescript", "", "default")
        emitter.emit_edge(f, "param.0", x)

        assert sink.entries == [{
            "source": f.to_dict(),
            "edge_kind": EDGE_PREFIX + "param.0",
            "target": x.to_dict(),
            "fact_name": "/",
        }]

    def test_new_anchor(self, emitter, sink):
        """An anchor is a node with a span, always childof the file."""
        anchor = emitter.new_anchor(_name_node())

        assert anchor == VName("@4:7", "src/a.ts", "typescript", "", "default")
        assert [decode_fact_value(e["fact_value"]) for e in sink.facts()] == ["anchor", "4", "7"]
        childof = sink.edges("childof")
        assert len(childof) == 1
        assert childof[0]["target"] == FILE.to_dict()

    def test_anchor_identity(self, emitter):
        """Same span, same anchor VName."""
        assert emitter.new_anchor(_name_node()) == emitter.new_anchor(_name_node())
        assert emitter.anchor_vname(_name_node()) != emitter.anchor_vname(_name_node(4, 8))

    def test_emit_file(self, emitter, sink):
        emitter.emit_file("let a = 1;")

        facts = {e["fact_name"]: decode_fact_value(e["fact_value"]) for e in sink.facts()}
        assert facts == {FACT_PREFIX + "node/kind": "file", FACT_PREFIX + "text": "let a = 1;"}
        assert all(e["source"] == FILE.to_dict() for e in sink)


class TestSinks:

    def test_list_sink_filters(self, emitter, sink):
        emitter.new_anchor(_name_node())

        assert len(sink) == 4
        assert len(sink.facts("loc/start")) == 1
        assert len(sink.edges()) == 1

    def test_json_lines_binary_stream(self):
        stream = io.BytesIO()
        JsonLinesSink(stream)({"fact_name": "/kythe/text", "fact_value": "eA=="})

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert orjson.loads(lines[0]) == {"fact_name": "/kythe/text", "fact_value": "eA=="}

    def test_json_lines_text_stream(self):
        stream = io.StringIO()
        sink = JsonLinesSink(stream)
        sink({"a": 1})
        sink({"b": 2})

        assert stream.getvalue() == '{"a":1}\n{"b":2}\n'

    def test_any_callable_is_a_sink(self):
        seen = []
        GraphEmitter(seen.append, FILE, "typescript").emit_file("")
        assert len(seen) == 2
