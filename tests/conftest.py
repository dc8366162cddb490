"""
Shared pytest fixtures for the tsgraph test suite.

Programs are written to tmp_path and loaded with create_program, so every
test runs the real tree-sitter front end, binder and checker.

Usage in tests:
    def test_something(index_source):
        indexed = index_source("function f(x: number) { return x; }")
        assert indexed.signatures("function") == ["f"]

    def test_multi_file(program_factory):
        program_factory.write("a.ts", "export const a = 1;")
        program = program_factory.program("a.ts")
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from tsgraph.config import IndexerConfig
from tsgraph.core.emitter import ListSink, decode_fact_value


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI installs so they never outlive a test's streams."""
    yield
    package_logger = logging.getLogger("tsgraph")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


class IndexedFile:
    """Query helpers over the entries emitted for one file."""

    def __init__(self, sink: ListSink, source: bytes):
        self.sink = sink
        self.entries = sink.entries
        self.source = source

    def vnames_of_kind(self, kind: str) -> List[dict]:
        """VNames declared with a given node/kind, in emission order."""
        return [
            e["source"] for e in self.sink.facts("node/kind")
            if decode_fact_value(e["fact_value"]) == kind
        ]

    def signatures(self, kind: str) -> List[str]:
        return [v["signature"] for v in self.vnames_of_kind(kind)]

    def anchor_text(self, anchor: dict) -> str:
        start, end = anchor["signature"][1:].split(":")
        return self.source[int(start):int(end)].decode("utf-8")

    def bindings(self) -> List[Tuple[str, str]]:
        """(anchored text, target signature) for every defines/binding edge."""
        return [
            (self.anchor_text(e["source"]), e["target"]["signature"])
            for e in self.sink.edges("defines/binding")
        ]

    def refs(self) -> List[Tuple[str, str]]:
        """(anchored text, target signature) for every ref edge."""
        return [
            (self.anchor_text(e["source"]), e["target"]["signature"])
            for e in self.sink.edges("ref")
        ]

    def params(self) -> List[Tuple[str, str, str]]:
        """(function signature, edge kind, parameter signature)."""
        return [
            (e["source"]["signature"], e["edge_kind"].rsplit("/", 1)[-1], e["target"]["signature"])
            for e in self.sink.edges()
            if e["edge_kind"].rsplit("/", 1)[-1].startswith("param.")
        ]


class ProgramFactory:
    """Writes TypeScript sources under a root and loads them as a program."""

    def __init__(self, root: Path):
        pytest.importorskip("tree_sitter_language_pack")
        self.root = root

    def write(self, name: str, text: str) -> Path:
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def path(self, name: str) -> Path:
        return self.root / name

    def program(self, *names: str):
        from tsgraph.core.program import create_program
        return create_program([self.root / n for n in names])

    def config(self, **overrides) -> IndexerConfig:
        return IndexerConfig(root=self.root, **overrides)

    def index(self, name: str, program=None, **config_overrides) -> IndexedFile:
        """Index one file of a program (loaded from that file if not given)."""
        from tsgraph.core.indexer import index

        program = program or self.program(name)
        sink = ListSink()
        index([self.root / name], program, emit=sink, config=self.config(**config_overrides))
        source = (self.root / name).read_bytes()
        return IndexedFile(sink, source)


@pytest.fixture
def program_factory(tmp_path):
    """ProgramFactory rooted at a fresh temporary directory."""
    return ProgramFactory(tmp_path)


@pytest.fixture
def index_source(program_factory):
    """
    Index a single source text and return an IndexedFile.

    Extra files can be supplied for import resolution:
        index_source("import { a } from './a'; a;", files={"a.ts": "export const a = 1;"})
    """
    def _index(text: str, name: str = "main.ts", files: Optional[Dict[str, str]] = None,
               **config_overrides) -> IndexedFile:
        for extra_name, extra_text in (files or {}).items():
            program_factory.write(extra_name, extra_text)
        program_factory.write(name, text)
        return program_factory.index(name, **config_overrides)

    return _index
