"""shipcheck - deployment-readiness auditing for source workspaces.

Scans a set of source files with security, compliance, architecture,
dependency and AI-risk rules, and reduces the findings to a 0-100 score
with a GO / NO-GO decision.
"""

__version__ = "0.1.0"

from shipcheck.agents.orchestrator import AuditOrchestrator, run_audit  # noqa: E402
from shipcheck.models import AuditReport, Decision, Finding, Severity, SourceFile  # noqa: E402

__all__ = [
    "AuditOrchestrator",
    "AuditReport",
    "Decision",
    "Finding",
    "Severity",
    "SourceFile",
    "run_audit",
]
