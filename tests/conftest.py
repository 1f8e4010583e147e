"""Pytest configuration and shared fixtures."""

from typing import Callable

import pytest
import structlog

from shipcheck.audit.rules import RuleRegistry, default_registry
from shipcheck.config import AuditSettings
from shipcheck.models import Category, Finding, Severity, SourceFile


@pytest.fixture
def registry() -> RuleRegistry:
    """The frozen standard registry."""
    return default_registry()


@pytest.fixture
def settings() -> AuditSettings:
    """Settings independent of the caller's environment."""
    return AuditSettings(
        log_level="WARNING",
        isolate_agent_failures=True,
        disabled_agents=[],
        extra_ignores=[],
    )


@pytest.fixture
def make_finding() -> Callable[..., Finding]:
    """Factory for findings with sensible defaults."""

    def _make(
        rule_id: str = "eval-usage",
        file_path: str = "app.js",
        line_number: int = 1,
        severity: Severity = Severity.ERROR,
        category: Category = Category.SECURITY,
    ) -> Finding:
        return Finding(
            rule_id=rule_id,
            file_path=file_path,
            line_number=line_number,
            title=f"{rule_id} title",
            severity=severity,
            description=f"{rule_id} description",
            remediation=f"{rule_id} remediation",
            category=category,
        )

    return _make


@pytest.fixture
def eval_js() -> SourceFile:
    """A parseable script with one eval call."""
    return SourceFile(
        path="src/app.js",
        content='const a = 1;\nconst result = eval("2 + 2");\nexport default result;\n',
    )


@pytest.fixture
def clean_py() -> SourceFile:
    """Python module that triggers no rule."""
    return SourceFile(
        path="service/math_utils.py",
        content=(
            "def add(a: int, b: int) -> int:\n"
            "    return a + b\n"
            "\n"
            "\n"
            "def mul(a: int, b: int) -> int:\n"
            "    return a * b\n"
        ),
    )


@pytest.fixture
def risky_component() -> SourceFile:
    """React component mixing several problems."""
    return SourceFile(
        path="src/components/Profile.tsx",
        content=(
            "import { Pool } from 'pg';\n"
            "\n"
            "export function Profile({ html, user }: Props) {\n"
            "  console.log('user profile', user.email);\n"
            "  return <div dangerouslySetInnerHTML={{ __html: html }} />;\n"
            "}\n"
        ),
    )


@pytest.fixture
def package_json() -> SourceFile:
    """npm manifest with two blacklisted dependencies."""
    return SourceFile(
        path="package.json",
        content=(
            "{\n"
            '  "name": "demo",\n'
            '  "dependencies": {\n'
            '    "request": "^2.88.0",\n'
            '    "left-pad": "1.3.0",\n'
            '    "express": "^4.18.0"\n'
            "  }\n"
            "}\n"
        ),
    )


@pytest.fixture
def broken_package_json() -> SourceFile:
    """npm manifest with a trailing comma."""
    return SourceFile(
        path="package.json",
        content='{\n  "dependencies": {\n    "a": "1",\n  }\n}\n',
    )


@pytest.fixture
def ai_service_py() -> SourceFile:
    """Python service calling a model in a loop."""
    return SourceFile(
        path="ai/summarize.py",
        content=(
            "async def summarize(client, prompts):\n"
            "    results = []\n"
            "    for p in prompts:\n"
            "        results.append(client.chat.completions.create(model='m', messages=[p]))\n"
            "    return results\n"
        ),
    )


@pytest.fixture
def workspace_files(
    eval_js: SourceFile,
    clean_py: SourceFile,
    risky_component: SourceFile,
    package_json: SourceFile,
    ai_service_py: SourceFile,
) -> list[SourceFile]:
    """A small mixed workspace."""
    return [eval_js, clean_py, risky_component, package_json, ai_service_py]


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test (or the CLI) applied."""
    yield
    structlog.reset_defaults()
