"""File Classifier.

Maps a path to its role, language, scan eligibility and grammar
availability, and selects the rules applicable to it. Everything is driven
by the tables below; no rule is special-cased.
"""

import re
from dataclasses import dataclass

from shipcheck.audit.rules import Rule
from shipcheck.models import FileRole, SourceFile, detect_language
from shipcheck.models.source import file_extension, file_name

# Language tag -> tree-sitter grammar name
GRAMMAR_BY_LANGUAGE: dict[str, str] = {
    "python": "python",
    "javascript": "javascript",
    "typescript": "typescript",
    "tsx": "tsx",
}

COMPONENT_EXTENSIONS = frozenset({".jsx", ".tsx"})

# File names (case-insensitive) that declare dependencies
MANIFEST_NAMES = re.compile(r"package\.json|requirements(?:[-_.][\w.-]*)?\.txt", re.IGNORECASE)

# Languages scanned as code; anything else is only scanned for a special role
CODE_LANGUAGES = frozenset({
    "python", "javascript", "typescript", "tsx", "json",
    "html", "css", "java", "c", "cpp", "go", "ruby", "php",
})


@dataclass(frozen=True)
class Classification:
    """Classifier verdict for one path."""

    path: str
    language: str
    extension: str
    role: FileRole
    grammar: str | None

    @property
    def scannable(self) -> bool:
        return self.role != FileRole.OTHER

    @property
    def structural(self) -> bool:
        """True when a grammar exists for this file's language."""
        return self.grammar is not None


class FileClassifier:
    """Classifies files and filters rules by extension and role."""

    def classify(self, path: str) -> Classification:
        language = detect_language(path)
        extension = file_extension(path)
        return Classification(
            path=path,
            language=language,
            extension=extension,
            role=self._role(path, language, extension),
            grammar=GRAMMAR_BY_LANGUAGE.get(language),
        )

    def classify_source(self, source: SourceFile) -> Classification:
        return self.classify(source.path)

    def applicable(self, classification: Classification, rules: list[Rule]) -> list[Rule]:
        """Rules that apply to a classified file, in registry order."""
        if not classification.scannable:
            return []
        return [
            rule for rule in rules
            if (not rule.extensions or classification.extension in rule.extensions)
            and (not rule.roles or classification.role in rule.roles)
        ]

    def _role(self, path: str, language: str, extension: str) -> FileRole:
        if MANIFEST_NAMES.fullmatch(file_name(path)):
            return FileRole.MANIFEST
        if language == "dotenv":
            return FileRole.ENV
        if extension in COMPONENT_EXTENSIONS:
            return FileRole.COMPONENT
        if language in CODE_LANGUAGES:
            return FileRole.CODE
        return FileRole.OTHER
