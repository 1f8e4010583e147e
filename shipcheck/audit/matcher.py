"""Pattern Matcher: textual detection over raw file content.

Each rule's compiled pattern is searched with a fresh `finditer` per call,
so no cursor state is ever shared between concurrent agents. Match offsets
become line numbers through a LineIndex built once per file.
"""

import re
from bisect import bisect_left
from dataclasses import dataclass

from shipcheck.audit.rules import Rule
from shipcheck.models import SourceFile

_NEWLINE = re.compile("\n")
MAX_DETAIL_LENGTH = 80


class LineIndex:
    """Sorted newline offsets of one text, for offset -> line lookups."""

    def __init__(self, text: str):
        self._newlines = [m.start() for m in _NEWLINE.finditer(text)]

    @property
    def line_count(self) -> int:
        return len(self._newlines) + 1

    def line_of(self, offset: int) -> int:
        """1-based line containing the character at `offset`."""
        return bisect_left(self._newlines, offset) + 1


@dataclass(frozen=True)
class PatternMatch:
    """One textual match of a rule."""

    rule: Rule
    line: int
    detail: str


def match_detail(match: re.Match[str]) -> str:
    """Text used for a description's {detail} placeholder."""
    detail = match.groupdict().get("detail")
    if not detail:
        detail = match.group(0).strip().rstrip("(").strip()
    return detail[:MAX_DETAIL_LENGTH]


class PatternMatcher:
    """Evaluates textual rules and structural-rule fallbacks."""

    def match(
        self,
        source: SourceFile,
        rules: list[Rule],
        structural: frozenset[str] = frozenset(),
        index: LineIndex | None = None,
    ) -> list[PatternMatch]:
        """Search every applicable pattern over the file.

        Args:
            source: File to search
            rules: Applicable rules; rules without a text pattern are skipped
            structural: Ids already evaluated structurally for this file;
                their fallback patterns are suppressed
            index: Pre-built line index for `source`, built here if omitted

        Returns:
            Matches grouped by rule (registry order), in document order
        """
        index = index or LineIndex(source.content)
        matches: list[PatternMatch] = []

        for rule in rules:
            if rule.rule_id in structural:
                continue
            text_pattern = rule.text_pattern
            if text_pattern is None:
                continue
            for m in text_pattern.pattern.finditer(source.content):
                matches.append(PatternMatch(
                    rule=rule,
                    line=index.line_of(m.start()),
                    detail=match_detail(m),
                ))

        return matches
