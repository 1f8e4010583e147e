"""Tests for editor diagnostics mapping."""

from shipcheck.audit.scoring import build_report
from shipcheck.diagnostics import to_diagnostics
from shipcheck.models import Category, Severity


class TestDiagnostics:
    """Finding -> editor range conversion."""

    def test_maps_line_and_range(self, make_finding):
        report = build_report([make_finding(file_path="a.js", line_number=2)])
        diagnostics = to_diagnostics(report, {"a.js": "const a = 1;\nconst b = eval(x);\n"})

        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.line == 1
        assert (diagnostic.start_column, diagnostic.end_column) == (0, len("const b = eval(x);"))
        assert diagnostic.level == "error"
        assert diagnostic.code == "eval-usage"
        assert diagnostic.source == "shipcheck [security_agent]"
        assert diagnostic.message.startswith("[eval-usage title] eval-usage description")
        assert "Fix: eval-usage remediation" in diagnostic.message

    def test_empty_line_gets_minimum_width(self, make_finding):
        report = build_report([make_finding(file_path="a.js", line_number=2)])
        diagnostic = to_diagnostics(report, {"a.js": "x\n\ny\n"})[0]
        assert diagnostic.end_column == 1

    def test_stale_line_skipped(self, make_finding):
        report = build_report([make_finding(file_path="a.js", line_number=5)])
        assert to_diagnostics(report, {"a.js": "one\ntwo"}) == []

    def test_stale_line_clamped(self, make_finding):
        report = build_report([make_finding(file_path="a.js", line_number=5)])
        diagnostics = to_diagnostics(report, {"a.js": "one\ntwo"}, clamp=True)
        assert [d.line for d in diagnostics] == [1]

    def test_files_without_document_skipped(self, make_finding):
        report = build_report([
            make_finding(file_path="a.js"),
            make_finding(
                rule_id="observability-failure",
                file_path="b.py",
                severity=Severity.INFO,
                category=Category.COMPLIANCE,
            ),
        ])
        diagnostics = to_diagnostics(report, {"b.py": "print(1)\n"})
        assert [(d.file_path, d.level) for d in diagnostics] == [("b.py", "information")]

    def test_to_dict(self, make_finding):
        report = build_report([make_finding(file_path="a.js", line_number=1)])
        data = to_diagnostics(report, {"a.js": "eval(x)\r\n"})[0].to_dict()
        assert data["range"] == {
            "start": {"line": 0, "character": 0},
            "end": {"line": 0, "character": 7},
        }
