# -*- coding: utf-8 -*-
"""Location: ./tests/unit/toongateway/repair/test_rules.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Unit tests for the individual JSON repair rules.
"""

# First-Party
from toongateway.repair.rules import (
    BracketBalanceRule,
    CommentRule,
    DuplicateCommaRule,
    LiteralValueRule,
    MissingCommaRule,
    RepairRule,
    SingleQuotedKeyRule,
    TrailingCommaRule,
    UnquotedKeyRule,
)


class TestCommentRule:
    """Test comment removal."""

    def test_line_comment(self):
        """Line comments end at the newline."""
        text, changes = CommentRule().apply('{\n  "a": 1, // one\n  "b": 2\n}')
        assert text == '{\n  "a": 1, \n  "b": 2\n}'
        assert changes == ["Removed comment: // one"]

    def test_block_comment_spanning_lines(self):
        """Block comments may span lines."""
        text, changes = CommentRule().apply('/* header\n   more */ {"a": 1}')
        assert text == '{"a": 1}'
        assert changes == ["Removed comment: /* header\n   more */"]

    def test_comment_markers_inside_strings(self):
        """URLs and slashes inside strings are kept."""
        source = '{"url": "https://example.com/a//b", "glob": "/*.json"}'
        assert CommentRule().apply(source) == (source, [])


class TestDuplicateCommaRule:
    """Test comma run collapsing."""

    def test_collapses_runs(self):
        """Each run becomes one comma and one log entry."""
        text, changes = DuplicateCommaRule().apply("[1,,2,,,3]")
        assert text == "[1,2,3]"
        assert changes == ["Removed duplicate comma: ,,", "Removed duplicate comma: ,,,"]

    def test_single_commas_untouched(self):
        """Ordinary commas are kept."""
        assert DuplicateCommaRule().apply("[1, 2]") == ("[1, 2]", [])


class TestTrailingCommaRule:
    """Test trailing comma removal."""

    def test_object_then_array(self):
        """Brace commas are handled before bracket commas."""
        text, changes = TrailingCommaRule().apply('{"a": [1, 2,], }')
        assert text == '{"a": [1, 2]}'
        assert changes == ["Removed comma before }", "Removed comma before ]"]

    def test_comma_before_newline(self):
        """Whitespace between comma and closer is dropped."""
        assert TrailingCommaRule().apply('{"a": 1,\n}')[0] == '{"a": 1}'


class TestMissingCommaRule:
    """Test comma insertion between properties."""

    def test_between_values_and_keys(self):
        """Strings, literals and numbers before a key get a comma."""
        text, changes = MissingCommaRule().apply('{"a": "x" "b": true "c": -1.5 "d": null}')
        assert text == '{"a": "x", "b": true, "c": -1.5, "d": null}'
        assert changes == ["Added missing comma between properties"] * 3

    def test_after_nested_containers(self):
        """Closing brackets before a key get a comma."""
        text, _ = MissingCommaRule().apply('{"a": [1]\n  "b": {"c": 1}\n  "d": 2}')
        assert text == '{"a": [1],\n  "b": {"c": 1},\n  "d": 2}'

    def test_array_values_untouched(self):
        """Adjacent array values are not keys and stay as they are."""
        assert MissingCommaRule().apply('["a" "b"]') == ('["a" "b"]', [])


class TestBracketBalanceRule:
    """Test bracket balancing."""

    def test_missing_closers(self):
        """Missing closers are appended."""
        assert BracketBalanceRule().apply('{"a": 1') == ('{"a": 1}', ["Added 1 closing braces"])
        assert BracketBalanceRule().apply("[[1, 2]") == ("[[1, 2]]", ["Added 1 closing brackets"])

    def test_missing_openers(self):
        """Missing openers are prepended."""
        assert BracketBalanceRule().apply('"a": 1}}') == ('{{"a": 1}}', ["Added 2 opening braces"])

    def test_brackets_in_strings_ignored(self):
        """Brackets inside strings are not counted."""
        assert BracketBalanceRule().apply('{"a": "[{"}') == ('{"a": "[{"}', [])


class TestKeyRules:
    """Test key quoting rules."""

    def test_unquoted_keys(self):
        """Identifier keys after { or , are quoted."""
        text, changes = UnquotedKeyRule().apply('{name: "Ann", _id: 1}')
        assert text == '{"name": "Ann", "_id": 1}'
        assert changes == ["Quoted unquoted key: name", "Quoted unquoted key: _id"]

    def test_unquoted_key_on_new_line(self):
        """Whitespace after the separator is kept."""
        assert UnquotedKeyRule().apply("{\n  a: 1}")[0] == '{\n  "a": 1}'

    def test_single_quoted_keys(self):
        """Single-quoted keys become double-quoted; values are left alone."""
        text, changes = SingleQuotedKeyRule().apply("{'a': 'x'}")
        assert text == "{\"a\": 'x'}"
        assert changes == ["Converted single-quoted key to double quotes: a"]


class TestLiteralValueRule:
    """Test bare literal quoting."""

    def test_object_values(self):
        """Literals directly before , or } are quoted."""
        text, changes = LiteralValueRule().apply('{"a": true,"b": false,"c": null}')
        assert text == '{"a": "true","b": "false","c": "null"}'
        assert changes == ["Quoted bare primitive value: true", "Quoted bare primitive value: false", "Quoted bare primitive value: null"]

    def test_array_values_untouched(self):
        """Array elements are not object values."""
        assert LiteralValueRule().apply("[true, null]") == ("[true, null]", [])


class TestRepairRuleBase:
    """Test the rule base class."""

    def test_repr(self):
        """Rules render as their class name."""
        assert repr(CommentRule()) == "CommentRule()"

    def test_names_unique(self):
        """Each rule has its own name."""
        rules = [CommentRule, DuplicateCommaRule, TrailingCommaRule, MissingCommaRule, BracketBalanceRule, UnquotedKeyRule, SingleQuotedKeyRule, LiteralValueRule]
        assert len({rule.name for rule in rules}) == len(rules)
        assert all(issubclass(rule, RepairRule) for rule in rules)
