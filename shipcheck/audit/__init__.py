"""Audit core: rule registry, classification, detection, scoring, reporting.

- Rule Registry: the single catalog of detection rules
- File Classifier: role, language and rule applicability per path
- Syntax-Tree Analyzer: tree-sitter based structural matching
- Pattern Matcher: regex matching over raw content
- Manifest parsing: package.json / requirements.txt
- Scoring Engine: score and GO / NO-GO decision
- Report Generator: text, JSON, Markdown and SARIF output
"""

from .rules import (
    FileCheck,
    FileCheckKind,
    NodeShape,
    Rule,
    RuleRegistry,
    TextPattern,
    default_registry,
)
from .classifier import Classification, FileClassifier
from .analyzer import StructuralMatch, SyntaxTreeAnalyzer
from .matcher import LineIndex, PatternMatch, PatternMatcher
from .manifest import DeclaredDependency, Manifest, parse_manifest
from .scoring import ScoreCard, build_report, score_findings
from .reporter import ReportFormat, ReportGenerator

__all__ = [
    # Rules
    "FileCheck",
    "FileCheckKind",
    "NodeShape",
    "Rule",
    "RuleRegistry",
    "TextPattern",
    "default_registry",
    # Classifier
    "Classification",
    "FileClassifier",
    # Analyzer
    "StructuralMatch",
    "SyntaxTreeAnalyzer",
    # Matcher
    "LineIndex",
    "PatternMatch",
    "PatternMatcher",
    # Manifest
    "DeclaredDependency",
    "Manifest",
    "parse_manifest",
    # Scoring
    "ScoreCard",
    "build_report",
    "score_findings",
    # Reporter
    "ReportFormat",
    "ReportGenerator",
]
