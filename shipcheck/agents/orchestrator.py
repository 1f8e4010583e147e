"""Audit Orchestrator.

Runs the category agents over one file list and turns their findings into a
single AuditReport:

    START -> security ---------\
          -> compliance -------|
          -> architecture -----+-> aggregate -> score -> END
          -> dependency -------|
          -> ai_risk ----------/

The agent nodes execute in the same LangGraph superstep; `aggregate` only
runs once every one of them has finished. Aggregation walks the agents in
canonical order, so the report never depends on which agent finished first.
"""

import asyncio
import operator
from typing import Annotated, TypedDict

import structlog
from langgraph.graph import END, START, StateGraph

from shipcheck.agents.ai_risk import AiRiskAgent
from shipcheck.agents.architecture import ArchitectureAgent
from shipcheck.agents.base import CategoryAgent
from shipcheck.agents.compliance import ComplianceAgent
from shipcheck.agents.dependency import DependencyAgent
from shipcheck.agents.security import SecurityAgent
from shipcheck.audit.rules import RuleRegistry, default_registry
from shipcheck.audit.scoring import build_report
from shipcheck.config import AuditSettings, get_settings
from shipcheck.exceptions import AgentExecutionError
from shipcheck.models import (
    CANONICAL_ORDER,
    AgentFailure,
    AuditReport,
    Finding,
    FindingKey,
    SourceFile,
)

logger = structlog.get_logger()


def merge_results(
    left: dict[str, list[Finding]], right: dict[str, list[Finding]]
) -> dict[str, list[Finding]]:
    """Reducer for per-agent results written by parallel nodes."""
    return {**left, **right}


class ScanState(TypedDict, total=False):
    """State flowing through the audit graph."""

    files: list[SourceFile]
    results: Annotated[dict[str, list[Finding]], merge_results]
    failures: Annotated[list[AgentFailure], operator.add]
    findings: list[Finding]
    report: AuditReport


def deduplicate(findings: list[Finding]) -> list[Finding]:
    """Keep the first finding per (rule_id, file_path, line_number).

    Idempotent, and order-preserving for the findings it keeps.
    """
    seen: set[FindingKey] = set()
    unique: list[Finding] = []
    for finding in findings:
        if finding.key in seen:
            continue
        seen.add(finding.key)
        unique.append(finding)
    return unique


def default_agents() -> list[CategoryAgent]:
    return [
        SecurityAgent(),
        ComplianceAgent(),
        ArchitectureAgent(),
        DependencyAgent(),
        AiRiskAgent(),
    ]


class AuditOrchestrator:
    """Fans a file list out to the category agents and joins their findings."""

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        agents: list[CategoryAgent] | None = None,
        settings: AuditSettings | None = None,
    ):
        self.registry = registry or default_registry()
        self.settings = settings or get_settings()

        disabled = set(self.settings.disabled_agents)
        candidates = agents if agents is not None else default_agents()
        self.agents = sorted(
            (a for a in candidates if a.category not in disabled),
            key=lambda a: CANONICAL_ORDER.index(a.category),
        )

        self._logger = logger.bind(component="AuditOrchestrator")
        self._app = self.create_workflow_graph().compile()

    def create_workflow_graph(self) -> StateGraph:
        """Build the fan-out/fan-in audit graph."""
        workflow = StateGraph(ScanState)

        for agent in self.agents:
            workflow.add_node(agent.name, self._agent_node(agent))
        workflow.add_node("aggregate", self._aggregate_node)
        workflow.add_node("score", self._score_node)

        if self.agents:
            names = [agent.name for agent in self.agents]
            for name in names:
                workflow.add_edge(START, name)
            # Join: aggregate waits for every agent node
            workflow.add_edge(names, "aggregate")
        else:
            workflow.add_edge(START, "aggregate")

        workflow.add_edge("aggregate", "score")
        workflow.add_edge("score", END)

        return workflow

    def _agent_node(self, agent: CategoryAgent):
        """LangGraph node wrapper enforcing the agent fault policy."""

        async def node(state: ScanState) -> ScanState:
            try:
                findings = await agent.run(state["files"], self.registry)
            except Exception as e:
                await self._logger.aerror("Agent failed", agent=agent.name, error=str(e))
                if not self.settings.isolate_agent_failures:
                    raise AgentExecutionError(agent.name, e) from e
                failure = AgentFailure(agent=agent.name, category=agent.category, error=str(e))
                return {"failures": [failure]}
            return {"results": {agent.name: findings}}

        return node

    async def _aggregate_node(self, state: ScanState) -> ScanState:
        """Concatenate in canonical category order, then deduplicate."""
        results = state.get("results", {})
        combined: list[Finding] = []
        for agent in self.agents:
            combined.extend(results.get(agent.name, []))
        return {"findings": deduplicate(combined)}

    async def _score_node(self, state: ScanState) -> ScanState:
        failures = sorted(
            state.get("failures", []),
            key=lambda f: CANONICAL_ORDER.index(f.category),
        )
        return {"report": build_report(state.get("findings", []), failures)}

    async def run(self, files: list[SourceFile]) -> AuditReport:
        """Audit one file list.

        Args:
            files: Files to scan; their order only affects which duplicate
                finding is kept

        Returns:
            The scored report

        Raises:
            AgentExecutionError: An agent failed and failures are not isolated
        """
        await self._logger.ainfo(
            "Audit started",
            file_count=len(files),
            agents=[agent.name for agent in self.agents],
        )

        result = await self._app.ainvoke({"files": list(files), "results": {}, "failures": []})
        report: AuditReport = result["report"]

        await self._logger.ainfo(
            "Audit completed",
            score=report.score,
            decision=report.decision.value,
            errors=report.error_count,
            warnings=report.warning_count,
            info=report.info_count,
            partial=report.partial,
        )
        return report


def run_audit(
    files: list[SourceFile],
    registry: RuleRegistry | None = None,
    settings: AuditSettings | None = None,
) -> AuditReport:
    """Synchronous entry point: one audit over `files`."""
    return asyncio.run(AuditOrchestrator(registry=registry, settings=settings).run(files))

