"""Report Generator for audit reports.

Renders an AuditReport in human-readable and machine-readable formats.
Findings are always listed errors first, then warnings, then info, and
within a tier by file path and line so readers can jump straight to them.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import structlog

from shipcheck import __version__
from shipcheck.audit.rules import RuleRegistry, default_registry
from shipcheck.models import AuditReport, Decision, Finding, Severity

logger = structlog.get_logger()


class ReportFormat(str, Enum):
    """Output format for reports."""

    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"
    SARIF = "sarif"  # Static Analysis Results Interchange Format


SARIF_LEVELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
}


def sort_findings(findings: list[Finding] | tuple[Finding, ...]) -> list[Finding]:
    """Order findings by severity tier, then file, line and rule."""
    return sorted(
        findings,
        key=lambda f: (f.severity.rank, f.file_path, f.line_number, f.rule_id),
    )


@dataclass
class ReportSummary:
    """Summary statistics derived from a report."""

    total_files: int = 0
    by_rule: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)

    @classmethod
    def of(cls, report: AuditReport) -> "ReportSummary":
        summary = cls(total_files=len({f.file_path for f in report.findings}))
        for finding in report.findings:
            summary.by_rule[finding.rule_id] = summary.by_rule.get(finding.rule_id, 0) + 1
            category = finding.category.value
            summary.by_category[category] = summary.by_category.get(category, 0) + 1
        return summary


class ReportGenerator:
    """Generates audit reports in various formats."""

    def __init__(self, registry: RuleRegistry | None = None):
        self.registry = registry or default_registry()
        self._logger = logger.bind(component="ReportGenerator")

    def generate(
        self,
        report: AuditReport,
        format: ReportFormat = ReportFormat.TEXT,
    ) -> str:
        """Render a report.

        Args:
            report: The audit report
            format: Output format

        Returns:
            Formatted report string
        """
        match format:
            case ReportFormat.TEXT:
                return self._format_text(report)
            case ReportFormat.JSON:
                return self._format_json(report)
            case ReportFormat.MARKDOWN:
                return self._format_markdown(report)
            case ReportFormat.SARIF:
                return self._format_sarif(report)
            case _:
                return self._format_text(report)

    def _format_text(self, report: AuditReport) -> str:
        """Format as plain text."""
        lines = []
        summary = ReportSummary.of(report)

        # Header
        lines.append("=" * 60)
        lines.append("DEPLOYMENT READINESS REPORT")
        lines.append("=" * 60)
        lines.append(f"Generated: {report.generated_at.isoformat()}")
        lines.append("")

        # Verdict
        lines.append("VERDICT")
        lines.append("-" * 40)
        lines.append(f"Decision:          {report.decision.value}")
        lines.append(f"Score:             {report.score}/100")
        lines.append(f"Files With Issues: {summary.total_files}")
        lines.append(f"Total Findings:    {report.counts.total}")
        lines.append(f"  - Errors:        {report.error_count}")
        lines.append(f"  - Warnings:      {report.warning_count}")
        lines.append(f"  - Info:          {report.info_count}")
        lines.append("")

        if report.partial:
            lines.append("INCOMPLETE SCAN")
            lines.append("-" * 40)
            for failure in report.failures:
                lines.append(f"  {failure.agent}: {failure.error}")
            lines.append("")

        if summary.by_rule:
            lines.append("FINDINGS BY RULE")
            lines.append("-" * 40)
            for rule_id, count in sorted(summary.by_rule.items()):
                lines.append(f"  {rule_id}: {count}")
            lines.append("")

        lines.append("DETAILED FINDINGS")
        lines.append("-" * 40)
        for f in sort_findings(report.findings):
            lines.append(f"[{f.severity.value}] {f.file_path}:{f.line_number} {f.rule_id}: {f.title}")
            lines.append(f"         {f.description}")
            if f.remediation:
                lines.append(f"         Fix: {f.remediation}")
        if not report.findings:
            lines.append("No findings.")

        lines.append("")
        lines.append("=" * 60)

        return "\n".join(lines)

    def _format_json(self, report: AuditReport) -> str:
        """Format as JSON."""
        data = report.to_dict()
        data["findings"] = [f.to_dict() for f in sort_findings(report.findings)]
        return json.dumps(data, indent=2)

    def _format_markdown(self, report: AuditReport) -> str:
        """Format as Markdown."""
        lines = []
        verdict = "✅ GO" if report.decision == Decision.GO else "❌ NO-GO"

        lines.append("# Deployment Readiness Report")
        lines.append("")
        lines.append(f"**Generated:** {report.generated_at.isoformat()}")
        lines.append("")
        lines.append(f"## {verdict} (score {report.score}/100)")
        lines.append("")

        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")
        lines.append(f"| Errors | {report.error_count} |")
        lines.append(f"| Warnings | {report.warning_count} |")
        lines.append(f"| Info | {report.info_count} |")
        lines.append("")

        if report.partial:
            lines.append("> **Incomplete scan:** " + ", ".join(f.agent for f in report.failures) + " failed.")
            lines.append("")

        lines.append("## Findings")
        lines.append("")

        if report.findings:
            lines.append("| Severity | Rule | Location | Description |")
            lines.append("|----------|------|----------|-------------|")
            icons = {Severity.ERROR: "🔴", Severity.WARNING: "🟡", Severity.INFO: "🔵"}
            for f in sort_findings(report.findings):
                lines.append(
                    f"| {icons[f.severity]} {f.severity.value} | {f.rule_id} "
                    f"| `{f.file_path}:{f.line_number}` | {f.description} |"
                )
            lines.append("")
        else:
            lines.append("No findings.")
            lines.append("")

        return "\n".join(lines)

    def _format_sarif(self, report: AuditReport) -> str:
        """Format as SARIF 2.1.0 for code-scanning integrations."""
        sarif = {
            "$schema": "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json",
            "version": "2.1.0",
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": "shipcheck",
                            "version": __version__,
                            "rules": self._sarif_rules(report),
                        }
                    },
                    "results": self._sarif_results(report),
                }
            ],
        }

        return json.dumps(sarif, indent=2)

    def _sarif_rules(self, report: AuditReport) -> list[dict[str, Any]]:
        """SARIF rule definitions, taken from the registry."""
        rules: dict[str, dict[str, Any]] = {}

        for f in sort_findings(report.findings):
            if f.rule_id in rules:
                continue
            rule = self.registry.get(f.rule_id)
            rules[f.rule_id] = {
                "id": f.rule_id,
                "name": rule.title if rule else f.title,
                "shortDescription": {"text": rule.title if rule else f.title},
                "help": {"text": rule.remediation if rule else f.remediation},
                "defaultConfiguration": {"level": SARIF_LEVELS[f.severity]},
                "properties": {"category": f.category.value},
            }

        return list(rules.values())

    def _sarif_results(self, report: AuditReport) -> list[dict[str, Any]]:
        return [
            {
                "ruleId": f.rule_id,
                "level": SARIF_LEVELS[f.severity],
                "message": {"text": f.description},
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {"uri": f.file_path},
                            "region": {"startLine": f.line_number},
                        }
                    }
                ],
                "fixes": [{"description": {"text": f.remediation}}] if f.remediation else [],
            }
            for f in sort_findings(report.findings)
        ]

    def save_report(
        self,
        report: AuditReport,
        output_path: str | Path,
        format: ReportFormat | None = None,
    ) -> None:
        """Render and write a report, inferring the format from the extension."""
        path = Path(output_path)

        if format is None:
            format = {
                ".txt": ReportFormat.TEXT,
                ".json": ReportFormat.JSON,
                ".md": ReportFormat.MARKDOWN,
                ".sarif": ReportFormat.SARIF,
            }.get(path.suffix.lower(), ReportFormat.TEXT)

        path.write_text(self.generate(report, format), encoding="utf-8")

        self._logger.info(
            "Report saved",
            path=str(path),
            format=format.value,
        )
