"""
Tests for Program loading and the TypeChecker.

Covers:
- create_program: load order, import following, load errors
- Pre-flight diagnostics
- symbol_at: lexical scopes, namespaces, imports, members
"""

import pytest

from tsgraph.core.errors import ProgramLoadError
from tsgraph.core.parsing.syntax import SyntaxKind
from tsgraph.core.program import create_program, unquote
from tsgraph.core.vname import Namespace


def _names(source_file, text, kind=SyntaxKind.IDENTIFIER):
    """Every name node of a kind with the given spelling, in source order."""
    return [n for n in source_file.root.walk() if n.kind is kind and n.text == text]


# =============================================================================
# Loading
# =============================================================================

class TestCreateProgram:
    """create_program() as a compiler host."""

    def test_follows_relative_imports(self, program_factory):
        program_factory.write("util.ts", "export function helper() {}")
        program_factory.write("main.ts", "import { helper } from './util';\nhelper();")

        program = program_factory.program("main.ts")

        assert [f.path.name for f in program.source_files] == ["main.ts", "util.ts"]
        assert program.diagnostics == []

    def test_index_file_resolution(self, program_factory):
        program_factory.write("lib/index.ts", "export const x = 1;")
        program_factory.write("main.ts", "import { x } from './lib';")

        program = program_factory.program("main.ts")

        assert program.get_source_file(program_factory.path("lib/index.ts")) is not None

    def test_external_modules_ignored(self, program_factory):
        program_factory.write("main.ts", "import * as fs from 'fs';\nfs;")

        program = program_factory.program("main.ts")

        assert len(program.source_files) == 1
        assert program.diagnostics == []

    def test_follow_imports_disabled(self, program_factory):
        program_factory.write("util.ts", "export const a = 1;")
        program_factory.write("main.ts", "import { a } from './util';")

        program = create_program([program_factory.path("main.ts")], follow_imports=False)

        assert len(program.source_files) == 1

    def test_missing_file(self, program_factory):
        with pytest.raises(ProgramLoadError, match="Could not read"):
            program_factory.program("nope.ts")

    def test_unsupported_file(self, program_factory):
        program_factory.write("notes.md", "# hi")

        with pytest.raises(ProgramLoadError, match="No language configuration"):
            program_factory.program("notes.md")

    def test_position_is_one_indexed(self, program_factory):
        program_factory.write("main.ts", "let a = 1;\nlet é = 2; let b = 3;")
        source_file = program_factory.program("main.ts").source_files[0]

        b = _names(source_file, "b")[0]
        # Columns count bytes, and é is two of them
        assert source_file.position(b.start) == (2, 17)
        assert source_file.slice(b.start, b.end) == "b"


class TestDiagnostics:
    """Problems that block indexing."""

    def test_syntax_error(self, program_factory):
        program_factory.write("main.ts", "function (")

        diagnostics = program_factory.program("main.ts").diagnostics

        assert diagnostics
        assert diagnostics[0].path.endswith("main.ts")

    def test_cannot_find_module(self, program_factory):
        program_factory.write("main.ts", "import { a } from './missing';")

        messages = [d.message for d in program_factory.program("main.ts").diagnostics]

        assert messages == ["Cannot find module './missing'"]

    def test_duplicate_identifier(self, program_factory):
        program_factory.write("main.ts", "let a = 1;\nlet a = 2;")

        diagnostics = program_factory.program("main.ts").diagnostics

        assert [d.message for d in diagnostics] == ["Duplicate identifier 'a'"]
        assert diagnostics[0].line == 2

    def test_mergeable_declarations(self, program_factory):
        """Interfaces merge, and so do `var` redeclarations."""
        program_factory.write("main.ts", "interface I { a: number }\ninterface I { b: string }\n"
                                         "var v = 1;\nvar v = 2;")

        assert program_factory.program("main.ts").diagnostics == []

    def test_missing_export(self, program_factory):
        program_factory.write("util.ts", "export const a = 1;")
        program_factory.write("main.ts", "import { b } from './util';")

        messages = [d.message for d in program_factory.program("main.ts").diagnostics]

        assert messages == ["Module './util' has no exported member 'b'"]

    def test_format(self, program_factory):
        program_factory.write("main.ts", "let a = 1;\nlet a = 2;")

        text = program_factory.program("main.ts").diagnostics[0].format()

        assert text.endswith("main.ts:2:5 - error: Duplicate identifier 'a'")


# =============================================================================
# Resolution
# =============================================================================

class TestSymbolAt:
    """TypeChecker.symbol_at over real parse trees."""

    def _load(self, program_factory, text, files=None):
        for name, extra in (files or {}).items():
            program_factory.write(name, extra)
        program_factory.write("main.ts", text)
        program = program_factory.program("main.ts")
        return program, program.get_source_file(program_factory.path("main.ts"))

    def test_declaration_and_reference_share_symbol(self, program_factory):
        program, source_file = self._load(program_factory, "const a = 1;\nconsole.log(a);")
        decl, ref = _names(source_file, "a")

        checker = program.checker
        assert checker.is_declaration_name(decl)
        assert not checker.is_declaration_name(ref)
        assert checker.symbol_at(ref) is checker.symbol_at(decl)

    def test_shadowing(self, program_factory):
        program, source_file = self._load(
            program_factory, "const a = 1;\n{ const a = 2; a; }\na;"
        )
        outer, inner, inner_ref, outer_ref = _names(source_file, "a")

        checker = program.checker
        assert checker.symbol_at(inner_ref) is checker.symbol_at(inner)
        assert checker.symbol_at(outer_ref) is checker.symbol_at(outer)
        assert checker.symbol_at(inner) is not checker.symbol_at(outer)

    def test_globals_resolve_to_none(self, program_factory):
        program, source_file = self._load(program_factory, "console.log(1);")

        assert program.checker.symbol_at(_names(source_file, "console")[0]) is None

    def test_class_occupies_both_namespaces(self, program_factory):
        program, source_file = self._load(program_factory, "class C {}\nlet c: C = new C();")
        type_ref = _names(source_file, "C", SyntaxKind.TYPE_IDENTIFIER)[-1]
        value_ref = _names(source_file, "C")[-1]

        checker = program.checker
        symbol = checker.symbol_at(type_ref)
        assert symbol is checker.symbol_at(value_ref)
        assert symbol.meanings == {Namespace.TYPE, Namespace.VALUE}

    def test_interface_is_type_only(self, program_factory):
        program, source_file = self._load(program_factory, "interface I {}\nlet i: I;")
        ref = _names(source_file, "I", SyntaxKind.TYPE_IDENTIFIER)[-1]

        assert program.checker.symbol_at(ref).meanings == {Namespace.TYPE}

    def test_import_alias_followed(self, program_factory):
        program, source_file = self._load(
            program_factory,
            "import { helper as h } from './util';\nh();",
            files={"util.ts": "export function helper() {}"},
        )
        ref = _names(source_file, "h")[-1]

        symbol = program.checker.symbol_at(ref)
        assert symbol.name == "helper"
        assert symbol.declarations[0].root.source_file.path.name == "util.ts"

    def test_reexport_followed(self, program_factory):
        program, source_file = self._load(
            program_factory,
            "import { a } from './b';\na;",
            files={"a.ts": "export const a = 1;", "b.ts": "export { a } from './a';"},
        )
        ref = _names(source_file, "a")[-1]

        symbol = program.checker.symbol_at(ref)
        assert symbol.declarations[0].root.source_file.path.name == "a.ts"

    def test_namespace_import_member(self, program_factory):
        program, source_file = self._load(
            program_factory,
            "import * as util from './util';\nutil.helper();",
            files={"util.ts": "export function helper() {}"},
        )
        member = _names(source_file, "helper", SyntaxKind.PROPERTY_IDENTIFIER)[0]

        assert program.checker.symbol_at(member).name == "helper"

    def test_this_member(self, program_factory):
        program, source_file = self._load(
            program_factory,
            "class Box {\n  size = 0;\n  grow() { this.size++; }\n}",
        )
        decl, ref = _names(source_file, "size", SyntaxKind.PROPERTY_IDENTIFIER)

        checker = program.checker
        assert checker.symbol_at(ref) is checker.symbol_at(decl)

    def test_this_in_arrow_keeps_class(self, program_factory):
        """Arrow functions do not rebind `this`."""
        program, source_file = self._load(
            program_factory,
            "class Box {\n  size = 0;\n  grow() { [1].forEach(() => this.size++); }\n}",
        )
        decl, ref = _names(source_file, "size", SyntaxKind.PROPERTY_IDENTIFIER)

        checker = program.checker
        assert checker.symbol_at(ref) is checker.symbol_at(decl)

    @pytest.mark.parametrize("body", [
        "const o = { x: 2, f: function () { return this.x; } };",
        "function inner() { return this.x; }",
        "const o = { x: 2, f() { return this.x; } };",
    ])
    def test_this_rebound_by_function(self, program_factory, body):
        """`this` inside a nested non-arrow function is not the class instance."""
        program, source_file = self._load(
            program_factory,
            "class A {\n  x = 1;\n  m() { " + body + " }\n}",
        )
        ref = [n for n in _names(source_file, "x", SyntaxKind.PROPERTY_IDENTIFIER)
               if n.parent.kind is SyntaxKind.MEMBER_EXPRESSION][0]

        assert program.checker.symbol_at(ref) is None

    def test_object_literal_methods_are_not_members(self, program_factory):
        program, source_file = self._load(
            program_factory,
            "class K {}\nconst o = { run() {} };\nK;",
        )
        klass = program.checker.symbol_at(_names(source_file, "K")[-1])

        assert "run" not in program.checker.members_of(klass)


class TestUnquote:

    def test_quotes(self):
        assert unquote("'./a'") == "./a"
        assert unquote('"./b"') == "./b"
        assert unquote("plain") == "plain"
