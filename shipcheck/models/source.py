"""Source file records handed to the audit core.

A SourceFile is supplied fresh for every scan call. The core never reads
from disk and never mutates these records.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath


class FileRole(str, Enum):
    """What a file is for, independent of its language."""

    MANIFEST = "manifest"  # dependency manifests (package.json, requirements.txt)
    COMPONENT = "component"  # UI component files (.jsx, .tsx)
    ENV = "env"  # dotenv files
    CODE = "code"
    OTHER = "other"


# Extension -> language tag
LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".json": "json",
    ".html": "html",
    ".css": "css",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".go": "go",
    ".rb": "ruby",
    ".php": "php",
    ".txt": "text",
}


def file_name(path: str) -> str:
    """Return the final path component, accepting both separators."""
    return PurePosixPath(path.replace("\\", "/")).name


def file_extension(path: str) -> str:
    """Return the lowercased extension of a path ("" when none)."""
    return PurePosixPath(file_name(path)).suffix.lower()


def detect_language(path: str) -> str:
    """Derive the language tag for a path."""
    name = file_name(path).lower()
    if name == ".env" or name.startswith(".env."):
        return "dotenv"
    return LANGUAGE_BY_EXTENSION.get(file_extension(path), "unknown")


@dataclass(frozen=True)
class SourceFile:
    """One in-scope file: its path and full text."""

    path: str
    content: str

    @property
    def language(self) -> str:
        return detect_language(self.path)

    @property
    def name(self) -> str:
        return file_name(self.path)

    @property
    def extension(self) -> str:
        return file_extension(self.path)
