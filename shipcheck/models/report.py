"""Audit report: the single value produced by one scan call."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .finding import Category, Finding, Severity


class Decision(str, Enum):
    """Deployment verdict."""

    GO = "GO"
    NO_GO = "NO-GO"


@dataclass(frozen=True)
class SeverityCounts:
    """Per-severity finding counts."""

    error: int = 0
    warning: int = 0
    info: int = 0

    @property
    def total(self) -> int:
        return self.error + self.warning + self.info

    @classmethod
    def of(cls, findings: list[Finding]) -> "SeverityCounts":
        error = warning = info = 0
        for finding in findings:
            match finding.severity:
                case Severity.ERROR:
                    error += 1
                case Severity.WARNING:
                    warning += 1
                case Severity.INFO:
                    info += 1
        return cls(error=error, warning=warning, info=info)

    def to_dict(self) -> dict[str, int]:
        return {"error": self.error, "warning": self.warning, "info": self.info}


@dataclass(frozen=True)
class AgentFailure:
    """Marker for an agent whose evaluation raised during a scan."""

    agent: str
    category: Category
    error: str

    def to_dict(self) -> dict[str, str]:
        return {
            "agent": self.agent,
            "category": self.category.value,
            "error": self.error,
        }


@dataclass(frozen=True)
class AuditReport:
    """Deduplicated findings plus score and GO/NO-GO decision."""

    findings: tuple[Finding, ...]
    counts: SeverityCounts
    score: int
    decision: Decision
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    failures: tuple[AgentFailure, ...] = ()

    @property
    def partial(self) -> bool:
        """True when at least one agent failed and its findings are missing."""
        return bool(self.failures)

    @property
    def error_count(self) -> int:
        return self.counts.error

    @property
    def warning_count(self) -> int:
        return self.counts.warning

    @property
    def info_count(self) -> int:
        return self.counts.info

    def findings_for(self, file_path: str) -> list[Finding]:
        return [f for f in self.findings if f.file_path == file_path]

    def to_dict(self) -> dict[str, Any]:
        return {
            "findings": [f.to_dict() for f in self.findings],
            "counts": {**self.counts.to_dict(), "total": self.counts.total},
            "score": self.score,
            "decision": self.decision.value,
            "generated_at": self.generated_at.isoformat(),
            "partial": self.partial,
            "failures": [f.to_dict() for f in self.failures],
        }
