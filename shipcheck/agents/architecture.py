"""Architecture agent: oversized modules, client-side DB access, unguarded network calls."""

from shipcheck.agents.base import CategoryAgent
from shipcheck.audit.matcher import LineIndex
from shipcheck.audit.rules import FileCheckKind, Rule
from shipcheck.models import Category, Finding, SourceFile


class ArchitectureAgent(CategoryAgent):
    category = Category.ARCHITECTURE

    def check_file(self, rule: Rule, source: SourceFile, index: LineIndex) -> list[Finding]:
        check = rule.matcher
        if check.kind != FileCheckKind.LINE_COUNT:
            return super().check_file(rule, source, index)

        if index.line_count > check.threshold:
            return [self.make_finding(rule, source, 1, str(index.line_count))]
        return []
