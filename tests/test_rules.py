"""Tests for the detection rule registry."""

import re

import pytest

from shipcheck.audit.rules import (
    STANDARD_RULES,
    FileCheck,
    FileCheckKind,
    NodeShape,
    Rule,
    RuleRegistry,
    TextPattern,
    default_registry,
)
from shipcheck.exceptions import RegistryError
from shipcheck.models import Category, Severity


def _rule(rule_id: str = "custom", category: Category = Category.SECURITY) -> Rule:
    return Rule(
        rule_id=rule_id,
        title="Custom",
        severity=Severity.WARNING,
        category=category,
        description="Found {detail} here",
        remediation="Remove it",
        matcher=TextPattern.of(r"forbidden"),
    )


class TestRuleRegistry:
    """Tests for registry behaviour."""

    def test_default_registry_is_frozen(self, registry: RuleRegistry):
        assert registry.frozen
        with pytest.raises(RegistryError):
            registry.add(_rule())

    def test_default_registry_is_shared(self):
        assert default_registry() is default_registry()

    def test_duplicate_id_rejected(self):
        registry = RuleRegistry([_rule("a")])
        with pytest.raises(RegistryError, match="Duplicate"):
            registry.add(_rule("a"))

    def test_iteration_follows_registration_order(self, registry: RuleRegistry):
        assert [r.rule_id for r in registry] == [r.rule_id for r in STANDARD_RULES]

    def test_rule_ids_unique(self, registry: RuleRegistry):
        ids = [r.rule_id for r in registry]
        assert len(ids) == len(set(ids)) == len(registry)

    def test_every_category_has_rules(self, registry: RuleRegistry):
        for category in Category:
            assert registry.for_category(category), category

    def test_for_category(self, registry: RuleRegistry):
        ids = [r.rule_id for r in registry.for_category(Category.DEPENDENCY)]
        assert ids == ["blacklisted-dependency", "malformed-manifest"]

    def test_get_and_contains(self, registry: RuleRegistry):
        assert "eval-usage" in registry
        assert registry.get("eval-usage").severity == Severity.ERROR
        assert registry.get("no-such-rule") is None


class TestRule:
    """Tests for rule metadata helpers."""

    def test_text_pattern_of_structural_rule_is_fallback(self, registry: RuleRegistry):
        rule = registry.get("eval-usage")
        assert rule.is_structural
        assert isinstance(rule.matcher, NodeShape)
        assert rule.text_pattern is rule.matcher.fallback

    def test_file_check_has_no_text_pattern(self, registry: RuleRegistry):
        rule = registry.get("architecture-fragility")
        assert isinstance(rule.matcher, FileCheck)
        assert rule.matcher.kind == FileCheckKind.LINE_COUNT
        assert rule.text_pattern is None

    def test_describe_fills_detail(self):
        assert _rule().describe("x") == "Found x here"

    def test_to_dict(self, registry: RuleRegistry):
        data = registry.get("dangerously-set-inner-html").to_dict()
        assert data["matcher"] == "NodeShape"
        assert data["roles"] == ["component"]
        assert data["severity"] == "ERROR"


class TestStandardPatterns:
    """Spot checks of the textual detectors."""

    @staticmethod
    def _search(registry: RuleRegistry, rule_id: str, text: str) -> re.Match | None:
        return registry.get(rule_id).text_pattern.pattern.search(text)

    def test_hardcoded_secret(self, registry: RuleRegistry):
        assert self._search(registry, "env-isolation", 'const API_KEY = "sk-live-123456";')
        assert self._search(registry, "env-isolation", "DB_PASSWORD=hunter2hunter2")

    def test_secret_read_from_environment_not_flagged(self, registry: RuleRegistry):
        assert not self._search(registry, "env-isolation", "const token = process.env.TOKEN;")
        assert not self._search(registry, "env-isolation", "api_key = os.environ['API_KEY']")

    def test_http_url_skips_localhost(self, registry: RuleRegistry):
        assert not self._search(registry, "http-url", "fetch('http://localhost:3000/api')")
        match = self._search(registry, "http-url", "fetch('http://api.example.com/v1')")
        assert match.group("detail") == "http://api.example.com/v1"

    def test_open_cors(self, registry: RuleRegistry):
        assert self._search(registry, "open-cors", "res.setHeader('Access-Control-Allow-Origin', '*')")
        assert self._search(registry, "open-cors", 'app.add_middleware(CORSMiddleware, allow_origins=["*"])')
        assert not self._search(registry, "open-cors", "cors({ origin: 'https://app.example.com' })")

    def test_sql_concatenation(self, registry: RuleRegistry):
        text = "db.query(\"SELECT * FROM users WHERE id = '\" + userId)"
        assert self._search(registry, "sql-injection", text)

    def test_frontend_db_import_detail(self, registry: RuleRegistry):
        match = self._search(registry, "architecture-fragility-db", "import { PrismaClient } from '@prisma/client';")
        assert match.group("detail") == "@prisma/client"
