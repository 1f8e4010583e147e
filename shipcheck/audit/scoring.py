"""Scoring Engine: findings -> score and GO/NO-GO decision.

score = clamp(100 - 25*errors - 10*warnings - 2*info, 0, 100)
decision = NO-GO if errors > 0 or score < 50, else GO
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from shipcheck.models import (
    AgentFailure,
    AuditReport,
    Decision,
    Finding,
    SeverityCounts,
)

MAX_SCORE = 100
ERROR_PENALTY = 25
WARNING_PENALTY = 10
INFO_PENALTY = 2
GO_THRESHOLD = 50


@dataclass(frozen=True)
class ScoreCard:
    """Score and decision for a set of findings."""

    counts: SeverityCounts
    score: int
    decision: Decision

    @property
    def error_count(self) -> int:
        return self.counts.error

    @property
    def warning_count(self) -> int:
        return self.counts.warning

    @property
    def info_count(self) -> int:
        return self.counts.info


def compute_score(counts: SeverityCounts) -> int:
    raw = (
        MAX_SCORE
        - ERROR_PENALTY * counts.error
        - WARNING_PENALTY * counts.warning
        - INFO_PENALTY * counts.info
    )
    return max(0, min(MAX_SCORE, raw))


def decide(counts: SeverityCounts, score: int) -> Decision:
    # Any error blocks deployment regardless of score
    if counts.error > 0 or score < GO_THRESHOLD:
        return Decision.NO_GO
    return Decision.GO


def score_findings(findings: list[Finding]) -> ScoreCard:
    """Total function: defined for every finding list, including empty."""
    counts = SeverityCounts.of(findings)
    score = compute_score(counts)
    return ScoreCard(counts=counts, score=score, decision=decide(counts, score))


def build_report(
    findings: list[Finding],
    failures: list[AgentFailure] | None = None,
    generated_at: datetime | None = None,
) -> AuditReport:
    """Wrap deduplicated findings into an AuditReport."""
    card = score_findings(findings)
    return AuditReport(
        findings=tuple(findings),
        counts=card.counts,
        score=card.score,
        decision=card.decision,
        generated_at=generated_at or datetime.now(timezone.utc),
        failures=tuple(failures or ()),
    )
