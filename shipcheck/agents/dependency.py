"""Dependency agent: blacklisted packages and malformed manifests."""

from dataclasses import dataclass
from functools import lru_cache

import structlog

from shipcheck.agents.base import CategoryAgent
from shipcheck.audit.manifest import Manifest, normalize_name, parse_manifest
from shipcheck.audit.matcher import LineIndex
from shipcheck.audit.rules import FileCheckKind, Rule
from shipcheck.exceptions import ManifestError
from shipcheck.models import Category, Finding, SourceFile

logger = structlog.get_logger()


@dataclass(frozen=True)
class ManifestProblem:
    """Why a manifest could not be parsed."""

    message: str
    line: int


@lru_cache(maxsize=64)
def load_manifest(source: SourceFile) -> Manifest | ManifestProblem:
    """Parse a manifest once for all manifest rules; a parse error is returned as a ManifestProblem."""
    try:
        return parse_manifest(source)
    except ManifestError as e:
        logger.debug("Malformed manifest", file=source.path, line=e.line, error=str(e))
        return ManifestProblem(message=str(e), line=e.line)


class DependencyAgent(CategoryAgent):
    category = Category.DEPENDENCY

    def check_file(self, rule: Rule, source: SourceFile, index: LineIndex) -> list[Finding]:
        check = rule.matcher
        parsed = load_manifest(source)

        match check.kind:
            case FileCheckKind.MANIFEST_SYNTAX:
                if isinstance(parsed, ManifestProblem):
                    return [self.make_finding(rule, source, parsed.line, parsed.message)]
                return []
            case FileCheckKind.DEPENDENCY_BLACKLIST:
                if isinstance(parsed, ManifestProblem):
                    return []
                blacklist = {normalize_name(name) for name in check.names}
                return [
                    self.make_finding(rule, source, dep.line, dep.name)
                    for dep in parsed.dependencies
                    if dep.normalized in blacklist
                ]
            case _:
                return super().check_file(rule, source, index)
