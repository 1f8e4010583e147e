"""Detection Rule Registry.

The registry is the single catalog of detection rules consumed by every
surface (category agents, report rendering, the CLI). It holds data only:
each Rule pairs its metadata with a matcher, which is one of

1. TextPattern: a regular expression searched over raw file content
2. NodeShape: a structural predicate over syntax-tree nodes, with an
   optional textual fallback for files that cannot be parsed
3. FileCheck: a whole-file check (size threshold, manifest contents)

Rules carry no state, so one frozen registry is shared by all agents.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Iterator

import structlog

from shipcheck.exceptions import RegistryError
from shipcheck.models import Category, FileRole, Severity

logger = structlog.get_logger()


@dataclass(frozen=True)
class TextPattern:
    """Textual detector evaluated with a non-overlapping global search."""

    pattern: re.Pattern[str]

    @classmethod
    def of(cls, regex: str, flags: int = 0) -> "TextPattern":
        return cls(re.compile(regex, flags))


@dataclass(frozen=True)
class NodeShape:
    """Structural predicate over syntax-tree nodes.

    A node matches when its type is in `node_types`, its name (callee text,
    attribute name, or awaited callee) fully matches `name`, it has an
    ancestor in `within` (when given) and no ancestor in `outside`.
    """

    node_types: frozenset[str]
    name: re.Pattern[str]
    within: frozenset[str] = frozenset()
    outside: frozenset[str] = frozenset()
    fallback: TextPattern | None = None


class FileCheckKind(str, Enum):
    """Kinds of whole-file checks."""

    LINE_COUNT = "line_count"
    DEPENDENCY_BLACKLIST = "dependency_blacklist"
    MANIFEST_SYNTAX = "manifest_syntax"


@dataclass(frozen=True)
class FileCheck:
    """Whole-file check parameters."""

    kind: FileCheckKind
    threshold: int = 0
    names: frozenset[str] = frozenset()


Matcher = TextPattern | NodeShape | FileCheck


@dataclass(frozen=True)
class Rule:
    """A named declarative detector plus remediation text.

    `extensions` and `roles` restrict which files the rule applies to;
    an empty set means no restriction. `description` may contain a
    `{detail}` placeholder filled from the matched text.
    """

    rule_id: str
    title: str
    severity: Severity
    category: Category
    description: str
    remediation: str
    matcher: Matcher
    extensions: frozenset[str] = frozenset()
    roles: frozenset[FileRole] = frozenset()

    @property
    def is_structural(self) -> bool:
        return isinstance(self.matcher, NodeShape)

    @property
    def text_pattern(self) -> TextPattern | None:
        """Pattern used by the textual pass (a structural rule's fallback)."""
        match self.matcher:
            case TextPattern():
                return self.matcher
            case NodeShape(fallback=fallback):
                return fallback
            case _:
                return None

    def describe(self, detail: str = "") -> str:
        return self.description.replace("{detail}", detail)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "title": self.title,
            "severity": self.severity.value,
            "category": self.category.value,
            "description": self.description,
            "remediation": self.remediation,
            "matcher": type(self.matcher).__name__,
            "extensions": sorted(self.extensions),
            "roles": sorted(r.value for r in self.roles),
        }


class RuleRegistry:
    """Read-only catalog of rules once frozen.

    Iteration order is registration order, which keeps evaluation and
    therefore finding order deterministic.
    """

    def __init__(self, rules: list[Rule] | None = None):
        self._rules: dict[str, Rule] = {}
        self._frozen = False
        for rule in rules or []:
            self.add(rule)

    def add(self, rule: Rule) -> None:
        """Register a rule."""
        if self._frozen:
            raise RegistryError("Cannot modify frozen registry")
        if rule.rule_id in self._rules:
            raise RegistryError(f"Duplicate rule id: {rule.rule_id}")
        self._rules[rule.rule_id] = rule

    def freeze(self) -> "RuleRegistry":
        """Freeze the registry, preventing further modifications."""
        self._frozen = True
        logger.debug("Rule registry frozen", rule_count=len(self._rules))
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def all(self) -> list[Rule]:
        return list(self._rules.values())

    def for_category(self, category: Category) -> list[Rule]:
        """Rules owned by one category agent."""
        return [r for r in self._rules.values() if r.category == category]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules


# --- Standard catalog -------------------------------------------------------

SCRIPT_EXTENSIONS = frozenset({".js", ".mjs", ".cjs", ".jsx", ".ts", ".mts", ".cts", ".tsx"})
PYTHON_EXTENSIONS = frozenset({".py"})
PROGRAM_EXTENSIONS = SCRIPT_EXTENSIONS | PYTHON_EXTENSIONS

CODE_ROLES = frozenset({FileRole.CODE, FileRole.COMPONENT})
SOURCE_ROLES = CODE_ROLES | {FileRole.ENV}

CALL_NODES = frozenset({"call", "call_expression"})
AWAIT_NODES = frozenset({"await", "await_expression"})
LOOP_NODES = frozenset({
    "for_statement",
    "for_in_statement",
    "while_statement",
    "do_statement",
    "list_comprehension",
    "set_comprehension",
    "dictionary_comprehension",
    "generator_expression",
})
TRY_NODES = frozenset({"try_statement"})

BLACKLISTED_DEPENDENCIES = frozenset({
    "request",
    "left-pad",
    "crypto-js",
    "event-stream",
    "node-uuid",
    "pycrypto",
})

MAX_FILE_LINES = 1000


STANDARD_RULES: list[Rule] = [
    # Security
    Rule(
        rule_id="env-isolation",
        title="Hardcoded Secret Key",
        severity=Severity.ERROR,
        category=Category.SECURITY,
        description="Potential production key, API token, or secret hardcoded directly into source file.",
        remediation="Move credentials into ignored environment files and read them at runtime (process.env, os.environ).",
        matcher=TextPattern.of(
            r"""(?<![A-Za-z0-9_])[A-Za-z0-9_]{0,64}(?:password|passwd|secret|api_?key|apikey|token|auth_?key)[A-Za-z0-9_]{0,64}["']?\s*[:=]\s*"""
            r"""(?:["'`][^"'`\r\n]+["'`]|(?!(?:true|false|null|none|undefined|process|string|number|boolean)\b)[a-zA-Z0-9_\-]{5,}(?![\w.(\[]))""",
            re.IGNORECASE,
        ),
    ),
    Rule(
        rule_id="eval-usage",
        title="Unsafe eval() Execution",
        severity=Severity.ERROR,
        category=Category.SECURITY,
        description="Usage of eval() detected, which makes your application susceptible to remote code execution (RCE).",
        remediation="Replace eval() with safe parsers like JSON.parse() / json.loads() or dedicated formatters.",
        matcher=NodeShape(
            node_types=CALL_NODES,
            name=re.compile(r"eval"),
            fallback=TextPattern.of(r"(?<![\w.])eval\s*\("),
        ),
        extensions=PROGRAM_EXTENSIONS,
    ),
    Rule(
        rule_id="dangerously-set-inner-html",
        title="XSS Vector: dangerouslySetInnerHTML",
        severity=Severity.ERROR,
        category=Category.SECURITY,
        description="Found dangerouslySetInnerHTML rendering unfiltered raw HTML to the DOM.",
        remediation="Use standard React properties or sanitize the markup with DOMPurify before injecting it.",
        matcher=NodeShape(
            node_types=frozenset({"jsx_attribute"}),
            name=re.compile(r"dangerouslySetInnerHTML"),
            fallback=TextPattern.of(r"\bdangerouslySetInnerHTML\b"),
        ),
        extensions=SCRIPT_EXTENSIONS,
    ),
    Rule(
        rule_id="sql-injection",
        title="Injection Vulnerability: SQL Concatenation",
        severity=Severity.ERROR,
        category=Category.SECURITY,
        description="Potential SQL injection: query text is concatenated with runtime values.",
        remediation="Use parameterized queries or a query builder instead of string concatenation.",
        matcher=TextPattern.of(
            r"""(?:'|")SELECT\s+.*\s+FROM\s+.*\s+WHERE\s+.*(?:'|")\s*(?:\+|%)""",
            re.IGNORECASE,
        ),
        roles=CODE_ROLES,
    ),
    Rule(
        rule_id="sql-injection-template",
        title="Injection Vulnerability: SQL Interpolation",
        severity=Severity.ERROR,
        category=Category.SECURITY,
        description="Potential SQL injection: unsanitized variable interpolated into a SQL query.",
        remediation="Bind values as query parameters instead of interpolating them into the SQL text.",
        matcher=TextPattern.of(r"SELECT\s.*FROM\s.*WHERE\s.*=.*\{[^}]*\}"),
        roles=CODE_ROLES,
    ),
    Rule(
        rule_id="insecure-random",
        title="Insecure Randomness",
        severity=Severity.INFO,
        category=Category.SECURITY,
        description="{detail} is not cryptographically secure.",
        remediation="Use crypto.getRandomValues() / crypto.randomUUID() or Python's secrets module for security-sensitive values.",
        matcher=TextPattern.of(
            r"\b(?P<detail>Math\.random|random\.(?:random|randint|randrange|choice|uniform|getrandbits))\s*\("
        ),
        extensions=PROGRAM_EXTENSIONS,
    ),
    Rule(
        rule_id="http-url",
        title="Network Exposure: Plaintext HTTP",
        severity=Severity.WARNING,
        category=Category.SECURITY,
        description="Insecure HTTP URL {detail} used instead of HTTPS.",
        remediation="Switch the endpoint to https:// or read it from configuration.",
        matcher=TextPattern.of(
            r"""(?P<detail>http://(?!localhost|127\.0\.0\.1|0\.0\.0\.0|\[::1\]|www\.w3\.org)[^\s"'<>`]+)""",
            re.IGNORECASE,
        ),
        roles=SOURCE_ROLES,
    ),
    Rule(
        rule_id="open-cors",
        title="Network Exposure: Open CORS Policy",
        severity=Severity.WARNING,
        category=Category.SECURITY,
        description="Wildcard (*) CORS origin allows any site to call this API.",
        remediation="Restrict allowed origins to an explicit list of trusted domains.",
        matcher=TextPattern.of(
            r"""Access-Control-Allow-Origin['"]?\s*[:,=]\s*['"]?\*"""
            r"""|\ballow_origins\s*=\s*\[\s*['"]\*['"]"""
            r"""|\borigin\s*:\s*['"]\*['"]""",
            re.IGNORECASE,
        ),
        roles=CODE_ROLES,
    ),
    Rule(
        rule_id="debug-exposure",
        title="Data Leak (Debug Mode)",
        severity=Severity.WARNING,
        category=Category.SECURITY,
        description="Identified explicitly exposed debug endpoints or unsafe logging of sensitive tokens.",
        remediation="Remove development debug toggles and internal test routes before shipping.",
        matcher=TextPattern.of(
            r"""console\.log\s*\(\s*(?:token|password|secret|key)\s*\)|\bdebug\s*=\s*true\b|/test-route""",
            re.IGNORECASE,
        ),
        roles=SOURCE_ROLES,
    ),
    Rule(
        rule_id="dev-config-prod",
        title="Environment Isolation: Dev Branch In Production Path",
        severity=Severity.WARNING,
        category=Category.SECURITY,
        description="Development-only configuration is reachable from production code paths.",
        remediation="Drive environment-specific behaviour from explicit configuration instead of NODE_ENV checks.",
        matcher=TextPattern.of(r"""process\.env\.NODE_ENV\s*(?:===|==)\s*['"]development['"]"""),
        extensions=SCRIPT_EXTENSIONS,
    ),
    # Compliance
    Rule(
        rule_id="pii-leakage",
        title="Compliance: PII Data Logging",
        severity=Severity.ERROR,
        category=Category.COMPLIANCE,
        description="Logging Personally Identifiable Information (PII) to console output violates GDPR and SOC2 compliance.",
        remediation="Mask or hash sensitive fields before logging them.",
        matcher=TextPattern.of(
            r"""\b(?:console\.(?:log|info|warn|error|debug)|logger\.(?:debug|info|warn|warning|error)"""
            r"""|logging\.(?:debug|info|warning|error)|print)\s*\("""
            r"""[^)]*\b(?:user|email|phone|ssn|social_?security|credit_?card|passport|aadhaar|dob)\b[^)]*\)""",
            re.IGNORECASE,
        ),
        roles=CODE_ROLES,
    ),
    Rule(
        rule_id="pii-storage",
        title="Compliance: Unencrypted PII Storage",
        severity=Severity.WARNING,
        category=Category.COMPLIANCE,
        description="Sensitive data appears to be persisted without hashing or encryption.",
        remediation="Hash passwords and encrypt regulated identifiers before storing them.",
        matcher=TextPattern.of(
            r"""\b(?:save|store|insert|update)\s*\([^)]*\b(?:password|ssn|aadhaar|credit_?card)\b[^)]*\)""",
            re.IGNORECASE,
        ),
        roles=CODE_ROLES,
    ),
    Rule(
        rule_id="observability-failure",
        title="Operational Visibility Risk",
        severity=Severity.INFO,
        category=Category.COMPLIANCE,
        description="Raw usage of {detail}() is not reliable for scalable tracing in production.",
        remediation="Use a dedicated logging/monitoring framework (e.g. Winston, Sentry, structlog) instead of raw stdout.",
        matcher=TextPattern.of(
            r"""\bconsole\.(?:log|error|info|warn|debug)\s*\(|^[ \t]*print\s*\(""",
            re.IGNORECASE | re.MULTILINE,
        ),
        roles=CODE_ROLES,
    ),
    # Architecture
    Rule(
        rule_id="architecture-fragility",
        title="Architecture Fragility: God Object",
        severity=Severity.WARNING,
        category=Category.ARCHITECTURE,
        description=f"Massive monolithic file detected ({{detail}} lines, limit {MAX_FILE_LINES}).",
        remediation="Break this module down into smaller, composable units for testing and maintainability.",
        matcher=FileCheck(kind=FileCheckKind.LINE_COUNT, threshold=MAX_FILE_LINES),
    ),
    Rule(
        rule_id="architecture-fragility-db",
        title="Severe Anti-Pattern: Frontend DB Access",
        severity=Severity.ERROR,
        category=Category.ARCHITECTURE,
        description="Client UI file directly imports server-side DB client '{detail}'.",
        remediation="Move this logic into a backend API route or a server component/action layer.",
        matcher=TextPattern.of(
            r"""(?:\bimport\b|\brequire\s*\()[^\n]*?['"](?P<detail>pg|mysql2?|sqlite3|sequelize|typeorm|mongoose|knex|@prisma/client)['"]""",
            re.IGNORECASE,
        ),
        roles=frozenset({FileRole.COMPONENT}),
    ),
    Rule(
        rule_id="missing-error-handling",
        title="Reliability Risk: Unguarded Network Call",
        severity=Severity.WARNING,
        category=Category.ARCHITECTURE,
        description="Awaited network call {detail} is not wrapped in error handling.",
        remediation="Wrap the call in try/catch (try/except) and add retry or fallback logic.",
        matcher=NodeShape(
            node_types=AWAIT_NODES,
            name=re.compile(
                r"fetch|axios(?:\.(?:get|post|put|patch|delete|request))?|callOpenAI"
                r"|(?:\w+\.)*(?:client|session|http)\.(?:get|post|put|patch|delete|request)"
            ),
            outside=TRY_NODES,
            fallback=TextPattern.of(r"""await\s+(?P<detail>fetch|axios\.(?:get|post|put|delete)|callOpenAI)\b"""),
        ),
        extensions=PROGRAM_EXTENSIONS,
    ),
    # Dependency manifests
    Rule(
        rule_id="blacklisted-dependency",
        title="Deprecated / Unsafe Dependency",
        severity=Severity.WARNING,
        category=Category.DEPENDENCY,
        description="The package '{detail}' is blacklisted due to known vulnerabilities, deprecation, or poor maintenance.",
        remediation="Remove the package and migrate to a maintained alternative (e.g. native fetch, axios, pycryptodome).",
        matcher=FileCheck(kind=FileCheckKind.DEPENDENCY_BLACKLIST, names=BLACKLISTED_DEPENDENCIES),
        roles=frozenset({FileRole.MANIFEST}),
    ),
    Rule(
        rule_id="malformed-manifest",
        title="Malformed Dependency Manifest",
        severity=Severity.INFO,
        category=Category.DEPENDENCY,
        description="The dependency manifest could not be parsed: {detail}",
        remediation="Fix the manifest syntax so package managers and scanners can read it.",
        matcher=FileCheck(kind=FileCheckKind.MANIFEST_SYNTAX),
        roles=frozenset({FileRole.MANIFEST}),
    ),
    # AI risk
    Rule(
        rule_id="ai-prompt-injection",
        title="AI Code Risk: Prompt Injection",
        severity=Severity.WARNING,
        category=Category.AI_RISK,
        description="Raw user input is appended or interpolated directly into an LLM prompt.",
        remediation="Sanitize input, keep it out of system instructions, and prefer structured tool/function calling.",
        matcher=TextPattern.of(
            r"""\b(?:messages|prompt)[\s:={\[]+[^\n]*?(?:\$\{|\{|\+\s*)\s*(?:input|user_?input|query|message|user_?message)\b""",
            re.IGNORECASE,
        ),
        extensions=PROGRAM_EXTENSIONS,
    ),
    Rule(
        rule_id="ai-loop",
        title="Unbounded AI Cost Risk",
        severity=Severity.WARNING,
        category=Category.AI_RISK,
        description="LLM/API call {detail} inside a loop without obvious limits or caching.",
        remediation="Batch requests, cache responses, or cap the number of iterations that call the model.",
        matcher=NodeShape(
            node_types=CALL_NODES,
            name=re.compile(
                r"fetch|(?i:.*(?:openai|anthropic|completions|messages\.create|callOpenAI"
                r"|generateText|streamText|generate_content).*)"
            ),
            within=LOOP_NODES,
            fallback=TextPattern.of(
                r"""\b(?:for|while|foreach)\s*\([^)]*\)\s*\{[^}]*(?:callOpenAI|openai|anthropic|fetch|generateText)[^}]*\}""",
                re.IGNORECASE,
            ),
        ),
        extensions=PROGRAM_EXTENSIONS,
    ),
    Rule(
        rule_id="ai-data-leakage",
        title="Sensitive Context Leakage",
        severity=Severity.WARNING,
        category=Category.AI_RISK,
        description="Prompt context may expose database schema, logs, or PII to the model provider.",
        remediation="Strip internal schema, logs and personal data from prompts; send only the minimum context needed.",
        matcher=TextPattern.of(
            r"""\b(?:prompt|messages|system_?prompt)\b[^\n]*?\b(?:schema|logs|user_?data|pii|database_?url)\b""",
            re.IGNORECASE,
        ),
        extensions=PROGRAM_EXTENSIONS,
    ),
]


@lru_cache(maxsize=1)
def default_registry() -> RuleRegistry:
    """Build (once) the frozen standard registry."""
    return RuleRegistry(STANDARD_RULES).freeze()
