"""Data models for the shipcheck audit core."""

from .finding import (
    CANONICAL_ORDER,
    Category,
    Finding,
    FindingKey,
    Severity,
)
from .report import (
    AgentFailure,
    AuditReport,
    Decision,
    SeverityCounts,
)
from .source import FileRole, SourceFile, detect_language

__all__ = [
    # Source
    "FileRole",
    "SourceFile",
    "detect_language",
    # Findings
    "CANONICAL_ORDER",
    "Category",
    "Finding",
    "FindingKey",
    "Severity",
    # Report
    "AgentFailure",
    "AuditReport",
    "Decision",
    "SeverityCounts",
]
