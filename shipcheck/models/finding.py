"""Finding model: one reported issue tied to a rule, a file and a line."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Ordinal risk tier of a rule."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        """0 for the most severe tier."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


class Category(str, Enum):
    """Rule categories, one per category agent.

    Declaration order is the canonical agent order used to break ties
    when two agents report the same dedup key.
    """

    SECURITY = "security"
    COMPLIANCE = "compliance"
    ARCHITECTURE = "architecture"
    DEPENDENCY = "dependency"
    AI_RISK = "ai_risk"


CANONICAL_ORDER: tuple[Category, ...] = tuple(Category)

FindingKey = tuple[str, str, int]


@dataclass(frozen=True)
class Finding:
    """A single issue instance.

    `category` tags which agent produced the finding; together with the
    closed `severity` enum it makes every finding exhaustively classifiable.
    """

    rule_id: str
    file_path: str
    line_number: int
    title: str
    severity: Severity
    description: str
    remediation: str
    category: Category

    def __post_init__(self) -> None:
        if self.line_number < 1:
            raise ValueError(f"line_number is 1-based, got {self.line_number}")

    @property
    def key(self) -> FindingKey:
        """Dedup key: (rule_id, file_path, line_number)."""
        return (self.rule_id, self.file_path, self.line_number)

    @property
    def agent_source(self) -> str:
        return f"{self.category.value}_agent"

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "file_path": self.file_path,
            "line_number": self.line_number,
            "title": self.title,
            "severity": self.severity.value,
            "description": self.description,
            "remediation": self.remediation,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        return cls(
            rule_id=data["rule_id"],
            file_path=data["file_path"],
            line_number=int(data["line_number"]),
            title=data["title"],
            severity=Severity(data["severity"]),
            description=data["description"],
            remediation=data["remediation"],
            category=Category(data["category"]),
        )
