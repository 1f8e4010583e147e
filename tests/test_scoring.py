"""Tests for the Scoring Engine."""

from datetime import datetime, timezone

import pytest

from shipcheck.audit.scoring import build_report, compute_score, decide, score_findings
from shipcheck.models import AgentFailure, Category, Decision, Severity, SeverityCounts


def _findings(make_finding, errors: int = 0, warnings: int = 0, infos: int = 0):
    findings = []
    for severity, count in ((Severity.ERROR, errors), (Severity.WARNING, warnings), (Severity.INFO, infos)):
        for i in range(count):
            findings.append(make_finding(rule_id=f"{severity.value}-{i}", severity=severity))
    return findings


class TestScoring:
    """Score formula and decision gates."""

    @pytest.mark.parametrize(
        ("errors", "warnings", "infos", "score", "decision"),
        [
            (2, 1, 3, 34, Decision.NO_GO),
            (0, 0, 0, 100, Decision.GO),
            (0, 6, 0, 40, Decision.NO_GO),
            (1, 0, 0, 75, Decision.NO_GO),
            (0, 5, 0, 50, Decision.GO),
            (0, 0, 60, 0, Decision.NO_GO),
        ],
    )
    def test_examples(self, make_finding, errors, warnings, infos, score, decision):
        card = score_findings(_findings(make_finding, errors, warnings, infos))
        assert (card.error_count, card.warning_count, card.info_count) == (errors, warnings, infos)
        assert card.score == score
        assert card.decision == decision

    def test_score_is_clamped(self):
        assert compute_score(SeverityCounts(error=10)) == 0
        assert compute_score(SeverityCounts()) == 100

    def test_error_gate_overrides_score(self):
        assert decide(SeverityCounts(error=1), 100) == Decision.NO_GO

    def test_monotonic(self, make_finding):
        findings = []
        previous = score_findings(findings)
        for severity in [Severity.INFO, Severity.WARNING, Severity.ERROR, Severity.INFO, Severity.WARNING]:
            findings.append(make_finding(rule_id=f"r{len(findings)}", severity=severity))
            card = score_findings(findings)
            assert card.score <= previous.score
            if previous.decision == Decision.NO_GO:
                assert card.decision == Decision.NO_GO
            previous = card


class TestBuildReport:
    """Report assembly."""

    def test_build_report(self, make_finding):
        findings = _findings(make_finding, errors=1, infos=1)
        failure = AgentFailure(agent="ai_risk", category=Category.AI_RISK, error="boom")
        stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)

        report = build_report(findings, [failure], generated_at=stamp)

        assert report.findings == tuple(findings)
        assert report.score == 73
        assert report.decision == Decision.NO_GO
        assert report.partial
        assert report.generated_at == stamp

        data = report.to_dict()
        assert data["counts"] == {"error": 1, "warning": 0, "info": 1, "total": 2}
        assert data["decision"] == "NO-GO"
        assert data["failures"] == [{"agent": "ai_risk", "category": "ai_risk", "error": "boom"}]

    def test_timestamp_is_utc(self):
        report = build_report([])
        assert report.generated_at.tzinfo == timezone.utc
        assert not report.partial
