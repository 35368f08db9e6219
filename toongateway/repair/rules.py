# -*- coding: utf-8 -*-
"""Location: ./toongateway/repair/rules.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Text rewrite rules for malformed JSON.

Each rule is a stateless object with an ``apply`` method that takes text and
returns the rewritten text plus one change-log line per rewrite. The rules
are regex heuristics: they do not parse JSON and can misfire on unusual but
valid input, so callers only run them on text that failed to parse.

Examples:
    >>> TrailingCommaRule().apply('{"a": 1,}')
    ('{"a": 1}', ['Removed comma before }'])
    >>> UnquotedKeyRule().apply("{name: 1}")
    ('{"name": 1}', ['Quoted unquoted key: name'])
"""

# Standard
import re
from typing import List, Match, Pattern, Tuple

# A JSON string literal, used to skip over strings while scanning
_STRING = r'"(?:[^"\\]|\\.)*"'
_STRING_RE = re.compile(_STRING, re.DOTALL)

RuleOutput = Tuple[str, List[str]]


class RepairRule:
    """Base class for a single rewrite.

    Subclasses set ``name`` and implement :meth:`apply`.
    """

    name: str = "rule"

    def apply(self, text: str) -> RuleOutput:
        """Rewrite ``text``.

        Args:
            text: Input text.

        Returns:
            Tuple of (rewritten text, change-log lines).

        Raises:
            NotImplementedError: Always, in the base class.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CommentRule(RepairRule):
    """Strip ``/* ... */`` and ``// ...`` comments outside string literals.

    Examples:
        >>> CommentRule().apply('{"url": "http://x"} // note')
        ('{"url": "http://x"}', ['Removed comment: // note'])
        >>> CommentRule().apply('{"a": /* one */ 1}')
        ('{"a":  1}', ['Removed comment: /* one */'])
    """

    name = "comments"
    pattern: Pattern[str] = re.compile(_STRING + r"|/\*.*?\*/|//[^\n]*", re.DOTALL)

    def apply(self, text: str) -> RuleOutput:
        changes: List[str] = []

        def _strip(match: Match[str]) -> str:
            token = match.group(0)
            if token.startswith('"'):
                return token
            changes.append(f"Removed comment: {token.strip()}")
            return ""

        result = self.pattern.sub(_strip, text)
        if changes:
            result = result.strip()
        return result, changes


class DuplicateCommaRule(RepairRule):
    """Collapse runs of commas into one.

    Examples:
        >>> DuplicateCommaRule().apply("[1,, ,2]")
        ('[1,2]', ['Removed duplicate comma: ,, ,'])
    """

    name = "duplicate_commas"
    pattern: Pattern[str] = re.compile(r",(?:\s*,)+")

    def apply(self, text: str) -> RuleOutput:
        changes: List[str] = []

        def _collapse(match: Match[str]) -> str:
            changes.append(f"Removed duplicate comma: {match.group(0)}")
            return ","

        return self.pattern.sub(_collapse, text), changes


class TrailingCommaRule(RepairRule):
    """Drop a comma that directly precedes ``}`` or ``]``.

    Examples:
        >>> TrailingCommaRule().apply("[1, 2, ]")
        ('[1, 2]', ['Removed comma before ]'])
    """

    name = "trailing_commas"
    patterns: Tuple[Tuple[Pattern[str], str], ...] = (
        (re.compile(r",\s*\}"), "}"),
        (re.compile(r",\s*\]"), "]"),
    )

    def apply(self, text: str) -> RuleOutput:
        changes: List[str] = []
        for pattern, closer in self.patterns:

            def _drop(_match: Match[str], closer: str = closer) -> str:
                changes.append(f"Removed comma before {closer}")
                return closer

            text = pattern.sub(_drop, text)
        return text, changes


class MissingCommaRule(RepairRule):
    """Insert a comma between a value and a following quoted key.

    A value is a string, number, ``true``/``false``/``null`` or a closing
    ``}``/``]``; only whitespace may separate it from the next ``"key":``.

    Examples:
        >>> MissingCommaRule().apply('{"a": 1 "b": 2}')
        ('{"a": 1, "b": 2}', ['Added missing comma between properties'])
        >>> MissingCommaRule().apply('{"a": {"x": 1}\\n "b": "y"}')
        ('{"a": {"x": 1},\\n "b": "y"}', ['Added missing comma between properties'])
    """

    name = "missing_commas"
    pattern: Pattern[str] = re.compile(r'("(?:[^"\\\n]|\\.)*"|-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|true|false|null|[}\]])(\s+)(?="(?:[^"\\\n]|\\.)*"\s*:)')

    def apply(self, text: str) -> RuleOutput:
        changes: List[str] = []

        def _insert(match: Match[str]) -> str:
            changes.append("Added missing comma between properties")
            return f"{match.group(1)},{match.group(2)}"

        return self.pattern.sub(_insert, text), changes


class BracketBalanceRule(RepairRule):
    """Even out ``{``/``}`` and then ``[``/``]`` counts.

    Missing closers are appended; missing openers are prepended. Brackets
    inside string literals are not counted.

    Examples:
        >>> BracketBalanceRule().apply('{"a": [1, 2')
        ('{"a": [1, 2}]', ['Added 1 closing braces', 'Added 1 closing brackets'])
        >>> BracketBalanceRule().apply('{"a": "{"}')
        ('{"a": "{"}', [])
    """

    name = "bracket_balance"
    pairs: Tuple[Tuple[str, str, str], ...] = (("{", "}", "braces"), ("[", "]", "brackets"))

    def apply(self, text: str) -> RuleOutput:
        changes: List[str] = []
        for opener, closer, label in self.pairs:
            bare = _STRING_RE.sub("", text)
            missing = bare.count(opener) - bare.count(closer)
            if missing > 0:
                text += closer * missing
                changes.append(f"Added {missing} closing {label}")
            elif missing < 0:
                text = opener * -missing + text
                changes.append(f"Added {-missing} opening {label}")
        return text, changes


class UnquotedKeyRule(RepairRule):
    """Quote identifier keys that follow ``{`` or ``,``.

    Examples:
        >>> UnquotedKeyRule().apply('{a: 1, b_2 : 2}')
        ('{"a": 1, "b_2": 2}', ['Quoted unquoted key: a', 'Quoted unquoted key: b_2'])
    """

    name = "unquoted_keys"
    pattern: Pattern[str] = re.compile(r"([{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)\s*:")

    def apply(self, text: str) -> RuleOutput:
        changes: List[str] = []

        def _quote(match: Match[str]) -> str:
            changes.append(f"Quoted unquoted key: {match.group(2)}")
            return f'{match.group(1)}"{match.group(2)}":'

        return self.pattern.sub(_quote, text), changes


class SingleQuotedKeyRule(RepairRule):
    """Turn ``'key':`` into ``"key":``.

    Examples:
        >>> SingleQuotedKeyRule().apply("{'a': 1}")
        ('{"a": 1}', ['Converted single-quoted key to double quotes: a'])
    """

    name = "single_quoted_keys"
    pattern: Pattern[str] = re.compile(r"'([^']*)'(\s*:)")

    def apply(self, text: str) -> RuleOutput:
        changes: List[str] = []

        def _requote(match: Match[str]) -> str:
            changes.append(f"Converted single-quoted key to double quotes: {match.group(1)}")
            return f'"{match.group(1)}"{match.group(2)}'

        return self.pattern.sub(_requote, text), changes


class LiteralValueRule(RepairRule):
    """Quote bare ``true``/``false``/``null`` object values.

    Only values directly followed by ``,`` or ``}`` are rewritten.

    Examples:
        >>> LiteralValueRule().apply('{"a": true, "b":null}')
        ('{"a": "true", "b":"null"}', ['Quoted bare primitive value: true', 'Quoted bare primitive value: null'])
    """

    name = "literal_values"
    pattern: Pattern[str] = re.compile(r'([{,]\s*"[^"]*"\s*:\s*)(true|false|null)(?=[},])')

    def apply(self, text: str) -> RuleOutput:
        changes: List[str] = []

        def _quote(match: Match[str]) -> str:
            changes.append(f"Quoted bare primitive value: {match.group(2)}")
            return f'{match.group(1)}"{match.group(2)}"'

        return self.pattern.sub(_quote, text), changes
