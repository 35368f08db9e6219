# -*- coding: utf-8 -*-
"""Location: ./toongateway/repair/pipeline.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Ordered repair pipelines.

``FULL_PIPELINE`` runs all eight rules and collects a change log;
``NORMALIZE_PIPELINE`` runs the structural subset used before TOON encoding.

Examples:
    >>> result = repair('{"name": "John", "age": 30,}')
    >>> result.text
    '{"name": "John", "age": 30}'
    >>> result.changes
    ['Removed comma before }']
    >>> normalize("  {a: 1,, }  ")
    '{"a": 1}'
"""

# Standard
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

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


@dataclass(frozen=True)
class RepairResult:
    """Corrected text plus the ordered change log."""

    text: str
    changes: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether any rule rewrote the text.

        Returns:
            True if the change log is non-empty.
        """
        return bool(self.changes)


class RepairPipeline:
    """Run rules in order over a piece of text.

    The pipeline keeps no state between calls and can be shared across threads.

    Examples:
        >>> pipeline = RepairPipeline([TrailingCommaRule()])
        >>> pipeline.rules
        (TrailingCommaRule(),)
        >>> pipeline.run(" [1,] ").text
        '[1]'
    """

    def __init__(self, rules: Sequence[RepairRule]):
        """Initialize the pipeline.

        Args:
            rules: Rules to apply, in order.
        """
        self.rules: Tuple[RepairRule, ...] = tuple(rules)

    def run(self, text: str) -> RepairResult:
        """Trim ``text`` and apply every rule in order.

        Args:
            text: Raw input.

        Returns:
            The rewritten text and the concatenated change logs.
        """
        text = text.strip()
        changes: List[str] = []
        for rule in self.rules:
            text, rule_changes = rule.apply(text)
            changes.extend(rule_changes)
        return RepairResult(text=text, changes=changes)


FULL_PIPELINE = RepairPipeline(
    [
        CommentRule(),
        DuplicateCommaRule(),
        TrailingCommaRule(),
        MissingCommaRule(),
        BracketBalanceRule(),
        UnquotedKeyRule(),
        SingleQuotedKeyRule(),
        LiteralValueRule(),
    ]
)

NORMALIZE_PIPELINE = RepairPipeline(
    [
        DuplicateCommaRule(),
        TrailingCommaRule(),
        MissingCommaRule(),
        BracketBalanceRule(),
        UnquotedKeyRule(),
    ]
)


def repair(text: str) -> RepairResult:
    """Apply the full rule set and report every change.

    Args:
        text: Possibly malformed JSON text.

    Returns:
        RepairResult. The text is not guaranteed to be valid JSON.
    """
    return FULL_PIPELINE.run(text)


def normalize(text: str) -> str:
    """Apply the structural rules without a change log.

    Args:
        text: Possibly malformed JSON text.

    Returns:
        The normalized text.
    """
    return NORMALIZE_PIPELINE.run(text).text
