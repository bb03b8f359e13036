# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the recursive-descent configuration parser."""

from pathlib import Path

import pytest

from confparse.model import MAX_PROPERTY_VALUES, ParseTree, ValueKind
from confparse.parser import CollectingSink, ErrorKind, ParseError, current_file_name, parse, parse_string
from confparse.parser.lexer import Lexer, Token, TokenType
from confparse.settings import ParserSettings

# ###############
# Test Helpers
# ###############

EXAMPLE_BODY = '{ test: one, 3, "test"; prop: propVal; prop: "string"; prop: 0x20; }'


def _parse(source: str) -> ParseTree:
    """Parse a source string and return the tree."""
    return parse_string(source, "test.cfg", sink=CollectingSink())


def _fail(source: str) -> tuple[ParseError, CollectingSink]:
    """Parse source that must fail; return the raised error and the sink."""
    sink = CollectingSink()
    with pytest.raises(ParseError) as exc_info:
        parse_string(source, "test.cfg", sink=sink)
    return exc_info.value, sink


# ###############
# Empty Input
# ###############


class TestEmptyInput:
    def test_empty_string_returns_empty_tree(self) -> None:
        tree = _parse("")
        assert tree.blocks == []

    def test_comments_and_whitespace_only(self) -> None:
        tree = _parse("# nothing here\n\n   # or here\n")
        assert tree.blocks == []


# ###############
# Blocks
# ###############


class TestBlocks:
    def test_named_block(self) -> None:
        tree = _parse("package test { }")
        assert len(tree.blocks) == 1
        block = tree.blocks[0]
        assert block.block_type == "package"
        assert block.block_name == "test"
        assert block.properties == []

    def test_unnamed_block(self) -> None:
        block = _parse("settings { verbose: yes; }").blocks[0]
        assert block.block_type == "settings"
        assert block.block_name == ""
        assert block.properties[0].name == "verbose"

    def test_block_line_is_type_line(self) -> None:
        tree = _parse("\n\npackage\nname\n{\n}")
        assert tree.blocks[0].line == 3

    def test_block_records_file_name(self) -> None:
        assert _parse("a { }").blocks[0].file_name == "test.cfg"

    def test_blocks_keep_declaration_order(self) -> None:
        tree = _parse("a one { } b { } c three { }")
        assert [(b.block_type, b.block_name) for b in tree.blocks] == [("a", "one"), ("b", ""), ("c", "three")]

    def test_same_type_and_name_may_repeat(self) -> None:
        tree = _parse("pkg x { } pkg x { }")
        assert len(tree.blocks) == 2


# ###############
# Properties and Values
# ###############


class TestProperties:
    def test_single_identifier_value(self) -> None:
        prop = _parse("b { prop: propVal; }").blocks[0].properties[0]
        assert prop.name == "prop"
        assert len(prop.values) == 1
        assert prop.values[0].kind == ValueKind.IDENTIFIER
        assert prop.values[0].value == "propVal"

    def test_string_value(self) -> None:
        value = _parse('b { prop: "a string"; }').blocks[0].properties[0].values[0]
        assert value.kind == ValueKind.STRING
        assert value.text == "a string"

    def test_number_value(self) -> None:
        value = _parse("b { prop: -42; }").blocks[0].properties[0].values[0]
        assert value.kind == ValueKind.NUMBER
        assert value.number == -42

    def test_mixed_values_in_order(self) -> None:
        prop = _parse('b { test: one, 3, "test"; }').blocks[0].properties[0]
        assert [(v.kind, v.value) for v in prop.values] == [
            (ValueKind.IDENTIFIER, "one"),
            (ValueKind.NUMBER, 3),
            (ValueKind.STRING, "test"),
        ]

    def test_identifier_and_string_distinguished(self) -> None:
        prop = _parse('b { p: same, "same"; }').blocks[0].properties[0]
        assert prop.values[0].kind == ValueKind.IDENTIFIER
        assert prop.values[1].kind == ValueKind.STRING
        assert prop.values[0].value == prop.values[1].value

    def test_value_lines(self) -> None:
        prop = _parse("b {\n p: 1,\n 2,\n\n 3; }").blocks[0].properties[0]
        assert prop.line == 2
        assert [v.line for v in prop.values] == [2, 3, 5]

    def test_properties_keep_declaration_order(self) -> None:
        block = _parse("b { z: 1; a: 2; m: 3; a: 4; }").blocks[0]
        assert [p.name for p in block.properties] == ["z", "a", "m", "a"]

    def test_maximum_number_of_values(self) -> None:
        values = ", ".join(str(i) for i in range(MAX_PROPERTY_VALUES))
        prop = _parse(f"b {{ p: {values}; }}").blocks[0].properties[0]
        assert [v.value for v in prop.values] == list(range(MAX_PROPERTY_VALUES))

    def test_too_many_values(self) -> None:
        values = ", ".join(str(i) for i in range(MAX_PROPERTY_VALUES + 1))
        error, sink = _fail(f"b {{ many: {values}; }}")
        assert error.kind == ErrorKind.TOO_MANY_VALUES
        assert "'many'" in str(error)
        assert len(sink.diagnostics) == 1


# ###############
# Reference Example
# ###############


class TestReferenceExample:
    def test_three_blocks(self) -> None:
        source = f"package test {EXAMPLE_BODY}\npackage test {EXAMPLE_BODY}\nblock test {EXAMPLE_BODY}\n"
        tree = _parse(source)
        assert [(b.block_type, b.block_name) for b in tree.blocks] == [
            ("package", "test"),
            ("package", "test"),
            ("block", "test"),
        ]
        for block in tree.blocks:
            assert [p.name for p in block.properties] == ["test", "prop", "prop", "prop"]
            first, second, third, fourth = block.properties
            assert [v.value for v in first.values] == ["one", 3, "test"]
            assert second.values[0].kind == ValueKind.IDENTIFIER
            assert second.values[0].value == "propVal"
            assert third.values[0].kind == ValueKind.STRING
            assert third.values[0].value == "string"
            assert fourth.values[0].number == 32


# ###############
# Syntax Errors
# ###############


class TestSyntaxErrors:
    def test_missing_colon(self) -> None:
        error, sink = _fail("id { prop ;")
        assert error.kind == ErrorKind.UNEXPECTED_TOKEN
        assert error.line == 1
        assert error.file_name == "test.cfg"
        assert sink.diagnostics[0].description == "unexpected token ';' after token identifier 'prop' (expected ':')"

    def test_error_message_format(self) -> None:
        error, _ = _fail("id {\n prop ;")
        assert str(error) == "error: test.cfg:2: unexpected token ';' after token identifier 'prop' (expected ':')"

    def test_top_level_garbage(self) -> None:
        error, sink = _fail("42")
        assert error.kind == ErrorKind.UNEXPECTED_TOKEN
        assert sink.diagnostics[0].description == "unexpected token number 42 (expected identifier or 'include')"

    def test_block_without_brace(self) -> None:
        error, _ = _fail("pkg name ;")
        assert error.kind == ErrorKind.UNEXPECTED_TOKEN
        assert "expected '{'" in str(error)

    def test_block_type_followed_by_garbage(self) -> None:
        error, _ = _fail("pkg : { }")
        assert "expected identifier or '{'" in str(error)

    def test_garbage_between_properties(self) -> None:
        error, _ = _fail("b { a: 1; 5 }")
        assert error.kind == ErrorKind.UNEXPECTED_TOKEN
        assert "unexpected token number 5 after token ';'" in str(error)

    def test_missing_semicolon(self) -> None:
        error, _ = _fail("b { a: 1 }")
        assert "expected ',' or ';'" in str(error)

    def test_trailing_comma(self) -> None:
        error, _ = _fail("b { a: 1, ; }")
        assert "expected identifier, string or number" in str(error)

    def test_empty_value_list(self) -> None:
        error, _ = _fail("b { a: ; }")
        assert error.kind == ErrorKind.UNEXPECTED_TOKEN

    def test_nested_block_rejected(self) -> None:
        error, _ = _fail("outer { inner { } }")
        assert "expected ':'" in str(error)

    def test_include_inside_block_rejected(self) -> None:
        error, _ = _fail('b { include "x.cfg" }')
        assert error.kind == ErrorKind.UNEXPECTED_TOKEN

    def test_end_of_file_inside_block(self) -> None:
        error, _ = _fail("b { a: 1;")
        assert error.kind == ErrorKind.UNEXPECTED_EOF
        assert str(error).endswith("unexpected end of file after token ';' (expected identifier or '}')")

    def test_end_of_file_after_block_type(self) -> None:
        error, _ = _fail("b")
        assert error.kind == ErrorKind.UNEXPECTED_EOF

    def test_include_without_path(self) -> None:
        error, _ = _fail("include name")
        assert "expected string" in str(error)

    def test_only_first_error_reported(self) -> None:
        _, sink = _fail("a { b ; } c { d ; }")
        assert len(sink.diagnostics) == 1


# ###############
# Lexical Errors
# ###############


class TestLexicalErrors:
    def test_unterminated_string(self) -> None:
        error, sink = _fail('b { prop: "abc')
        assert error.kind == ErrorKind.UNTERMINATED_STRING
        assert len(sink.diagnostics) == 1
        assert error.diagnostic is sink.diagnostics[0]

    def test_invalid_character(self) -> None:
        error, _ = _fail("b { p: 1 = 2; }")
        assert error.kind == ErrorKind.INVALID_CHARACTER

    def test_overflowing_property_name(self) -> None:
        error, _ = _fail("b { " + "n" * 300 + ": 1; }")
        assert error.kind == ErrorKind.OVERFLOW

    def test_very_long_number_is_a_value(self) -> None:
        value = _parse("b { p: " + "9" * 5000 + "; }").blocks[0].properties[0].values[0]
        assert value.kind == ValueKind.NUMBER
        assert -(2**63) <= value.number < 2**63

    def test_error_token_without_diagnostic(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(Lexer, "next_token", lambda self: Token(TokenType.ERROR, 2, text="scanner failed"))
        error, sink = _fail("a { }")
        assert error.kind == ErrorKind.INTERNAL
        assert error.line == 2
        assert sink.diagnostics == [error.diagnostic]
        assert "scanner failed" in str(error)


# ###############
# Files
# ###############


class TestParseFile:
    def test_parse_file(self, tmp_path: Path) -> None:
        config = tmp_path / "main.cfg"
        config.write_text("pkg demo {\n  version: 2;\n}\n", encoding="utf-8")
        tree = parse(config, sink=CollectingSink())
        assert tree.blocks[0].block_name == "demo"
        assert tree.blocks[0].file_name == str(config)
        assert tree.files == [str(config)]

    def test_parse_accepts_str_path(self, tmp_path: Path) -> None:
        config = tmp_path / "main.cfg"
        config.write_text("a { }", encoding="utf-8")
        assert len(parse(str(config), sink=CollectingSink()).blocks) == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        sink = CollectingSink()
        with pytest.raises(ParseError) as exc_info:
            parse(tmp_path / "absent.cfg", sink=sink)
        assert exc_info.value.kind == ErrorKind.INTERNAL
        assert "absent.cfg" in sink.diagnostics[0].description

    def test_undecodable_file(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.cfg"
        config.write_bytes(b"a {\n  p: 1;\n  q: 2;\n  r: \xff;\n}\n")
        with pytest.raises(ParseError) as exc_info:
            parse(config, sink=CollectingSink())
        assert exc_info.value.kind == ErrorKind.INTERNAL
        assert exc_info.value.line == 4
        assert "cannot decode" in str(exc_info.value)

    def test_carriage_return_kept_in_string(self, tmp_path: Path) -> None:
        config = tmp_path / "cr.cfg"
        config.write_bytes(b"a {\r\n  s: \"x\ry\";\r\n  t: 1;\r\n}\r\n")
        block = parse(config, sink=CollectingSink()).blocks[0]
        assert block.properties[0].values[0].text == "x\ry"
        assert block.properties[1].line == 3

    def test_unknown_encoding(self, tmp_path: Path) -> None:
        config = tmp_path / "main.cfg"
        config.write_text("a { }", encoding="utf-8")
        sink = CollectingSink()
        with pytest.raises(ParseError) as exc_info:
            parse(config, sink=sink, settings=ParserSettings(encoding="no-such-codec"))
        assert exc_info.value.kind == ErrorKind.INTERNAL
        assert exc_info.value.line == 1
        assert "no-such-codec" in sink.diagnostics[0].description

    def test_error_reports_file_name(self, tmp_path: Path) -> None:
        config = tmp_path / "broken.cfg"
        config.write_text("a {\n\n b c; }", encoding="utf-8")
        with pytest.raises(ParseError) as exc_info:
            parse(config, sink=CollectingSink())
        assert exc_info.value.file_name == str(config)
        assert exc_info.value.line == 3

    def test_current_file_name_after_parse(self, tmp_path: Path) -> None:
        config = tmp_path / "main.cfg"
        config.write_text("a { }", encoding="utf-8")
        parse(config, sink=CollectingSink())
        assert current_file_name() == str(config)

    def test_default_sink_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        with pytest.raises(ParseError):
            parse_string("a { b ; }", "logged.cfg")
        assert "error: logged.cfg:1: unexpected token ';'" in caplog.text
