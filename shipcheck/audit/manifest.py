"""Dependency manifest parsing.

Supports npm `package.json` and pip `requirements*.txt`. Parsing is pure:
it takes a SourceFile and returns the declared dependencies with the line
each one is declared on, or raises ManifestError with the offending line.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from shipcheck.audit.matcher import LineIndex
from shipcheck.exceptions import ManifestError
from shipcheck.models import SourceFile

_REQUIREMENT = re.compile(
    r"""(?P<name>[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)\s*"""
    r"""(?:\[[^\]]*\])?\s*"""
    r"""(?:(?:===|[<>=!~]=|[<>])\s*[^;,\s]+(?:\s*,\s*(?:===|[<>=!~]=|[<>])\s*[^;,\s]+)*)?\s*"""
    r"""(?:@\s*\S+)?\s*"""
    r"""(?:;.*)?"""
)
_COMMENT = re.compile(r"(?:^|\s)#.*$")
_OPTION = re.compile(r"\s+--[A-Za-z][\w-]*(?:[=\s]\s*[^\s-]\S*)?")
_NAME_AT_URL = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*\s*(?:\[[^\]]*\])?\s*@")
_URL_OR_PATH = re.compile(r"[\\/]|^\.+$|\.(?:whl|zip|tar\.gz|tgz|tar\.bz2)$", re.IGNORECASE)


class PackageManifest(BaseModel):
    """The subset of package.json the dependency checks read."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    dependencies: dict[str, Any] = Field(default_factory=dict)
    dev_dependencies: dict[str, Any] = Field(default_factory=dict, alias="devDependencies")
    peer_dependencies: dict[str, Any] = Field(default_factory=dict, alias="peerDependencies")
    optional_dependencies: dict[str, Any] = Field(default_factory=dict, alias="optionalDependencies")

    def all_names(self) -> list[str]:
        names: list[str] = []
        for group in (
            self.dependencies,
            self.dev_dependencies,
            self.peer_dependencies,
            self.optional_dependencies,
        ):
            names.extend(name for name in group if name not in names)
        return names


@dataclass(frozen=True)
class DeclaredDependency:
    """One dependency declaration."""

    name: str
    line: int

    @property
    def normalized(self) -> str:
        return normalize_name(self.name)


@dataclass(frozen=True)
class Manifest:
    """Parsed manifest."""

    path: str
    ecosystem: str
    dependencies: tuple[DeclaredDependency, ...]


def normalize_name(name: str) -> str:
    """PEP 503 style normalization (also harmless for npm names)."""
    return re.sub(r"[-_.]+", "-", name).lower()


def parse_manifest(source: SourceFile) -> Manifest:
    """Parse a dependency manifest.

    Raises:
        ManifestError: The manifest is not well-formed
    """
    if source.name.lower() == "package.json":
        return _parse_package_json(source)
    return _parse_requirements(source)


def _parse_package_json(source: SourceFile) -> Manifest:
    try:
        data = json.loads(source.content)
    except json.JSONDecodeError as e:
        raise ManifestError(f"{e.msg} (line {e.lineno}, column {e.colno})", line=e.lineno) from e

    try:
        manifest = PackageManifest.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise ManifestError(f"{location}: {first['msg']}") from e

    index = LineIndex(source.content)
    dependencies = tuple(
        DeclaredDependency(name=name, line=_key_line(source.content, name, index))
        for name in manifest.all_names()
    )
    return Manifest(path=source.path, ecosystem="npm", dependencies=dependencies)


def _key_line(content: str, key: str, index: LineIndex) -> int:
    """Line of the first `"key":` occurrence (1 when not found)."""
    match = re.search(r'"' + re.escape(key) + r'"\s*:', content)
    return index.line_of(match.start()) if match else 1


def _parse_requirements(source: SourceFile) -> Manifest:
    dependencies: list[DeclaredDependency] = []

    for lineno, raw in enumerate(source.content.splitlines(), start=1):
        line = _COMMENT.sub("", raw).strip().rstrip("\\").strip()
        if not line or line.startswith("-"):
            continue
        line = _OPTION.sub("", line)
        if not _NAME_AT_URL.match(line) and _URL_OR_PATH.search(line.split(";")[0].strip()):
            # URL, VCS or local path requirement: no declared name to check
            continue
        match = _REQUIREMENT.fullmatch(line)
        if match is None:
            raise ManifestError(f"Invalid requirement: {line!r}", line=lineno)
        dependencies.append(DeclaredDependency(name=match.group("name"), line=lineno))

    return Manifest(path=source.path, ecosystem="pip", dependencies=tuple(dependencies))
