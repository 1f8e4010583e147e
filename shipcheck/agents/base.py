"""Base class for the category agents.

Each agent owns one rule category and scans the whole file list with the
rules of that category only:

1. Classify the file and select the applicable rules
2. Run the Syntax-Tree Analyzer for structural rules
3. Run the Pattern Matcher for textual rules, plus the fallbacks of
   structural rules the analyzer could not cover
4. Evaluate whole-file checks

Agents hold no mutable state, so one instance may scan concurrently with
the others.
"""

from abc import ABC

import structlog

from shipcheck.audit.analyzer import SyntaxTreeAnalyzer
from shipcheck.audit.classifier import FileClassifier
from shipcheck.audit.matcher import LineIndex, PatternMatcher
from shipcheck.audit.rules import FileCheck, Rule, RuleRegistry
from shipcheck.models import Category, Finding, SourceFile

logger = structlog.get_logger()


class CategoryAgent(ABC):
    """Scans files with the rules of a single category."""

    category: Category

    def __init__(
        self,
        classifier: FileClassifier | None = None,
        analyzer: SyntaxTreeAnalyzer | None = None,
        matcher: PatternMatcher | None = None,
    ):
        self.classifier = classifier or FileClassifier()
        self.analyzer = analyzer or SyntaxTreeAnalyzer()
        self.matcher = matcher or PatternMatcher()
        self._logger = logger.bind(agent=self.name)

    @property
    def name(self) -> str:
        return self.category.value

    def scan(self, files: list[SourceFile], registry: RuleRegistry) -> list[Finding]:
        """Findings for every file, in file order then registry order."""
        rules = registry.for_category(self.category)
        findings: list[Finding] = []
        for source in files:
            findings.extend(self.scan_file(source, rules))
        return findings

    async def run(self, files: list[SourceFile], registry: RuleRegistry) -> list[Finding]:
        """Scan as a coroutine, for use as a concurrent graph node."""
        await self._logger.ainfo("Agent scan started", file_count=len(files))
        findings = self.scan(files, registry)
        await self._logger.ainfo("Agent scan completed", finding_count=len(findings))
        return findings

    def scan_file(self, source: SourceFile, rules: list[Rule]) -> list[Finding]:
        classification = self.classifier.classify_source(source)
        applicable = self.classifier.applicable(classification, rules)
        if not applicable:
            return []

        index = LineIndex(source.content)
        findings: list[Finding] = []

        structural = self.analyzer.analyze(source, classification, applicable)
        covered: frozenset[str] = frozenset()
        if structural is not None:
            # Tree available: structural rules are judged by the tree alone
            covered = frozenset(r.rule_id for r in applicable if r.is_structural)
            findings.extend(
                self.make_finding(m.rule, source, m.line, m.detail) for m in structural
            )

        for m in self.matcher.match(source, applicable, structural=covered, index=index):
            findings.append(self.make_finding(m.rule, source, m.line, m.detail))

        for rule in applicable:
            if isinstance(rule.matcher, FileCheck):
                findings.extend(self.check_file(rule, source, index))

        return findings

    def check_file(self, rule: Rule, source: SourceFile, index: LineIndex) -> list[Finding]:
        """Evaluate a whole-file check. Agents owning FileCheck rules override this.

        Kinds the agent does not handle produce no findings.
        """
        self._logger.warning(
            "Unsupported file check skipped",
            rule_id=rule.rule_id,
            kind=rule.matcher.kind.value,
            file=source.path,
        )
        return []

    @staticmethod
    def make_finding(rule: Rule, source: SourceFile, line: int, detail: str = "") -> Finding:
        return Finding(
            rule_id=rule.rule_id,
            file_path=source.path,
            line_number=line,
            title=rule.title,
            severity=rule.severity,
            description=rule.describe(detail),
            remediation=rule.remediation,
            category=rule.category,
        )
