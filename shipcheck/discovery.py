"""Workspace discovery.

Walks a workspace root and yields the files worth auditing as SourceFiles,
with paths relative to the root in POSIX form. Skipped:

- Hard ignores (dependency folders, VCS metadata, build output, logs)
- Glob patterns from the root `.gitignore` and `.shipcheckignore`
- Caller-supplied patterns
- Binary, undecodable, oversized or unreadable files
- Files the classifier would not scan anyway

Ignore patterns use fnmatch globs with gitignore-like anchoring: a pattern
without `/` matches any path component, a pattern with `/` matches the
relative path (or one of its parent directories). Negated patterns (`!`)
are not supported and are skipped.
"""

import fnmatch
import os
from pathlib import Path
from typing import Iterator

import structlog

from shipcheck.audit.classifier import FileClassifier
from shipcheck.exceptions import DiscoveryError
from shipcheck.models import SourceFile

logger = structlog.get_logger()

# Hard default ignores (always skipped)
DEFAULT_IGNORES: tuple[str, ...] = (
    "node_modules",
    ".git",
    "out",
    "dist",
    "build",
    "coverage",
    ".vscode",
    ".vscode-test",
    "__pycache__",
    ".venv",
    "venv",
    ".mypy_cache",
    ".pytest_cache",
    "*.vsix",
    "*.log",
    "*.min.js",
)

IGNORE_FILES = (".gitignore", ".shipcheckignore")
MAX_FILE_BYTES = 1_000_000
_SNIFF_BYTES = 8192


def load_ignore_patterns(root: Path) -> list[str]:
    """Glob patterns from the ignore files at the workspace root."""
    patterns: list[str] = []
    for name in IGNORE_FILES:
        ignore_file = root / name
        if not ignore_file.is_file():
            continue
        try:
            text = ignore_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot read ignore file", file=str(ignore_file), error=str(e))
            continue
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or line.startswith("!"):
                continue
            patterns.append(line)
    return patterns


def is_ignored(posix_rel: str, patterns: list[str] | tuple[str, ...]) -> bool:
    """True when a root-relative POSIX path is matched by any pattern."""
    parts = posix_rel.split("/")
    for raw in patterns:
        pattern = raw.rstrip("/")
        if not pattern:
            continue
        if "/" not in pattern:
            if any(fnmatch.fnmatch(part, pattern) for part in parts):
                return True
            continue
        pattern = pattern.lstrip("/")
        prefixes = ("/".join(parts[:i]) for i in range(1, len(parts) + 1))
        if any(fnmatch.fnmatch(prefix, pattern) for prefix in prefixes):
            return True
    return False


def read_text_file(path: Path, max_bytes: int = MAX_FILE_BYTES) -> str | None:
    """Decoded UTF-8 text, or None for binary, oversized or unreadable files."""
    try:
        if path.stat().st_size > max_bytes:
            return None
        data = path.read_bytes()
    except OSError as e:
        logger.debug("Unreadable file skipped", file=str(path), error=str(e))
        return None

    if b"\x00" in data[:_SNIFF_BYTES]:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def discover(
    root: str | Path,
    extra_ignores: list[str] | None = None,
    classifier: FileClassifier | None = None,
    max_bytes: int = MAX_FILE_BYTES,
) -> Iterator[SourceFile]:
    """Yield the auditable files under `root`, in sorted path order.

    Raises:
        DiscoveryError: `root` is not a readable directory
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise DiscoveryError(f"Not a directory: {root_path}")

    classifier = classifier or FileClassifier()
    patterns = [*DEFAULT_IGNORES, *load_ignore_patterns(root_path), *(extra_ignores or [])]

    def on_error(error: OSError) -> None:
        if Path(error.filename or "") == root_path:
            raise DiscoveryError(f"Cannot read workspace root {root_path}: {error}") from error
        logger.debug("Directory skipped", path=error.filename, error=str(error))

    for dirpath, dirnames, filenames in os.walk(root_path, onerror=on_error):
        rel_dir = Path(dirpath).relative_to(root_path)
        # Prune ignored directories in place so os.walk never descends into them
        dirnames[:] = sorted(
            d for d in dirnames
            if not is_ignored((rel_dir / d).as_posix(), patterns)
        )

        for filename in sorted(filenames):
            rel = (rel_dir / filename).as_posix()
            if is_ignored(rel, patterns):
                continue
            if not classifier.classify(rel).scannable:
                continue
            content = read_text_file(Path(dirpath) / filename, max_bytes)
            if content is None:
                continue
            yield SourceFile(path=rel, content=content)
