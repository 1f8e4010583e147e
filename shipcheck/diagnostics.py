"""Editor diagnostics.

Maps report findings onto editor ranges against the files' current text.
A finding computed on an older revision may point past the end of the file;
such findings are skipped, or clamped to the last line when requested.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from shipcheck.models import AuditReport, Finding, Severity

DIAGNOSTIC_LEVELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "information",
}


@dataclass(frozen=True)
class Diagnostic:
    """A finding placed on a 0-based editor line, spanning the line's text."""

    file_path: str
    line: int
    start_column: int
    end_column: int
    level: str
    message: str
    code: str
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "range": {
                "start": {"line": self.line, "character": self.start_column},
                "end": {"line": self.line, "character": self.end_column},
            },
            "severity": self.level,
            "message": self.message,
            "code": self.code,
            "source": self.source,
        }


def to_diagnostics(
    report: AuditReport,
    documents: Mapping[str, str],
    clamp: bool = False,
) -> list[Diagnostic]:
    """Diagnostics for every finding whose file is in `documents`.

    Args:
        report: The audit report
        documents: Current text per file path
        clamp: Move out-of-range findings to the last line instead of
            dropping them
    """
    diagnostics: list[Diagnostic] = []
    lines_by_path: dict[str, list[str]] = {}

    for finding in report.findings:
        text = documents.get(finding.file_path)
        if text is None:
            continue
        lines = lines_by_path.setdefault(finding.file_path, text.split("\n"))

        index = finding.line_number - 1
        if index >= len(lines):
            if not clamp:
                continue
            index = len(lines) - 1

        line_text = lines[index].rstrip("\r")
        diagnostics.append(Diagnostic(
            file_path=finding.file_path,
            line=index,
            start_column=0,
            end_column=len(line_text) or 1,
            level=DIAGNOSTIC_LEVELS[finding.severity],
            message=_message(finding),
            code=finding.rule_id,
            source=f"shipcheck [{finding.agent_source}]",
        ))

    return diagnostics


def _message(finding: Finding) -> str:
    message = f"[{finding.title}] {finding.description}"
    if finding.remediation:
        message += f"\nFix: {finding.remediation}"
    return message

