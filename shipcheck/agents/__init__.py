"""Category agents and the orchestrator that runs them concurrently."""

from .base import CategoryAgent
from .security import SecurityAgent
from .compliance import ComplianceAgent
from .architecture import ArchitectureAgent
from .dependency import DependencyAgent
from .ai_risk import AiRiskAgent
from .orchestrator import (
    AuditOrchestrator,
    ScanState,
    deduplicate,
    default_agents,
    run_audit,
)

__all__ = [
    # Base
    "CategoryAgent",
    # Agents
    "SecurityAgent",
    "ComplianceAgent",
    "ArchitectureAgent",
    "DependencyAgent",
    "AiRiskAgent",
    # Orchestrator
    "AuditOrchestrator",
    "ScanState",
    "deduplicate",
    "default_agents",
    "run_audit",
]
