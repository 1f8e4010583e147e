"""Tests for the File Classifier."""

import pytest

from shipcheck.audit.classifier import FileClassifier
from shipcheck.audit.rules import RuleRegistry
from shipcheck.models import Category, FileRole, detect_language


class TestFileClassifier:
    """Tests for roles, languages and grammars."""

    @pytest.mark.parametrize(
        ("path", "role"),
        [
            ("package.json", FileRole.MANIFEST),
            ("web/package.json", FileRole.MANIFEST),
            ("requirements.txt", FileRole.MANIFEST),
            ("requirements-dev.txt", FileRole.MANIFEST),
            (".env", FileRole.ENV),
            ("config/.env.production", FileRole.ENV),
            ("src/App.tsx", FileRole.COMPONENT),
            ("src\\Button.jsx", FileRole.COMPONENT),
            ("server/main.py", FileRole.CODE),
            ("styles/site.css", FileRole.CODE),
            ("tsconfig.json", FileRole.CODE),
            ("README.md", FileRole.OTHER),
            ("notes.txt", FileRole.OTHER),
            ("Makefile", FileRole.OTHER),
        ],
    )
    def test_roles(self, path: str, role: FileRole):
        assert FileClassifier().classify(path).role == role

    def test_grammar_availability(self):
        classifier = FileClassifier()
        assert classifier.classify("a.py").grammar == "python"
        assert classifier.classify("a.mjs").grammar == "javascript"
        assert classifier.classify("a.jsx").grammar == "javascript"
        assert classifier.classify("a.ts").grammar == "typescript"
        assert classifier.classify("a.tsx").grammar == "tsx"
        assert not classifier.classify("a.go").structural

    def test_extension_is_lowercased(self):
        classification = FileClassifier().classify("LEGACY/APP.JS")
        assert classification.extension == ".js"
        assert classification.language == "javascript"

    def test_detect_language(self):
        assert detect_language(".env.local") == "dotenv"
        assert detect_language("x.rb") == "ruby"
        assert detect_language("x.unknownext") == "unknown"


class TestRuleApplicability:
    """Tests for rule selection by extension and role."""

    def _ids(self, registry: RuleRegistry, path: str, category: Category) -> list[str]:
        classifier = FileClassifier()
        return [
            r.rule_id
            for r in classifier.applicable(classifier.classify(path), registry.for_category(category))
        ]

    def test_manifest_rules_only_for_manifests(self, registry: RuleRegistry):
        assert self._ids(registry, "package.json", Category.DEPENDENCY) == [
            "blacklisted-dependency",
            "malformed-manifest",
        ]
        assert self._ids(registry, "src/index.js", Category.DEPENDENCY) == []

    def test_component_rules_only_for_components(self, registry: RuleRegistry):
        assert "architecture-fragility-db" in self._ids(registry, "App.jsx", Category.ARCHITECTURE)
        assert "architecture-fragility-db" not in self._ids(registry, "server.ts", Category.ARCHITECTURE)

    def test_script_rules_skip_other_languages(self, registry: RuleRegistry):
        assert "dangerously-set-inner-html" in self._ids(registry, "App.tsx", Category.SECURITY)
        assert "dangerously-set-inner-html" in self._ids(registry, "Profile.js", Category.SECURITY)
        assert "dangerously-set-inner-html" not in self._ids(registry, "views.py", Category.SECURITY)
        assert "eval-usage" in self._ids(registry, "run.py", Category.SECURITY)
        assert "eval-usage" not in self._ids(registry, "page.html", Category.SECURITY)

    def test_unscannable_file_gets_no_rules(self, registry: RuleRegistry):
        assert self._ids(registry, "README.md", Category.SECURITY) == []
