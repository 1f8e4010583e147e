"""Syntax-Tree Analyzer using tree-sitter.

Matches structural rules (NodeShape) against node shape rather than raw
text, so formatting, whitespace and string-literal content can neither hide
nor fake a match:
- Call expressions by callee (e.g. `eval(...)`)
- JSX attributes by name (e.g. `dangerouslySetInnerHTML`)
- Awaited calls by callee, optionally outside try blocks
- Calls nested inside loops

Files that fail to parse (no grammar, parser error, or a tree containing
syntax errors) yield no structural result; the caller then relies on the
Pattern Matcher for the whole file.
"""

from dataclasses import dataclass
from functools import lru_cache

import structlog
from tree_sitter import Language, Node, Parser, Tree

from shipcheck.audit.classifier import Classification
from shipcheck.audit.rules import NodeShape, Rule
from shipcheck.models import SourceFile

logger = structlog.get_logger()


@dataclass(frozen=True)
class StructuralMatch:
    """A node that satisfied a rule's NodeShape."""

    rule: Rule
    line: int
    detail: str


@lru_cache(maxsize=None)
def load_language(grammar: str) -> Language:
    """Load (once per process) the tree-sitter grammar for a language."""
    match grammar:
        case "python":
            import tree_sitter_python as ts_python

            return Language(ts_python.language())
        case "javascript":
            import tree_sitter_javascript as ts_javascript

            return Language(ts_javascript.language())
        case "typescript":
            import tree_sitter_typescript as ts_typescript

            return Language(ts_typescript.language_typescript())
        case "tsx":
            import tree_sitter_typescript as ts_typescript

            return Language(ts_typescript.language_tsx())
        case _:
            raise ValueError(f"No tree-sitter grammar for '{grammar}'")


class SyntaxTreeAnalyzer:
    """Walks a file's syntax tree once and evaluates every NodeShape rule."""

    def __init__(self):
        self._logger = logger.bind(component="SyntaxTreeAnalyzer")

    def parse(self, source: SourceFile, grammar: str) -> Tree | None:
        """Parse a file, returning None instead of raising on any failure."""
        try:
            parser = Parser(load_language(grammar))
            tree = parser.parse(source.content.encode("utf-8"))
        except Exception as e:
            self._logger.debug("Parse failed", file=source.path, error=str(e))
            return None

        if tree.root_node.has_error:
            self._logger.debug("Syntax errors, structural analysis skipped", file=source.path)
            return None

        return tree

    def analyze(
        self,
        source: SourceFile,
        classification: Classification,
        rules: list[Rule],
    ) -> list[StructuralMatch] | None:
        """Evaluate the structural rules among `rules` against one file.

        Returns:
            The matches in document order, or None when structural analysis
            is unavailable for this file (the textual pass must cover it).
        """
        shapes = [r for r in rules if isinstance(r.matcher, NodeShape)]
        if not shapes or classification.grammar is None:
            return None

        tree = self.parse(source, classification.grammar)
        if tree is None:
            return None

        code = source.content.encode("utf-8")
        wanted = frozenset().union(*(r.matcher.node_types for r in shapes))
        matches: list[StructuralMatch] = []

        for node in self._walk(tree):
            if node.type not in wanted:
                continue
            name = self._node_name(node, code)
            for rule in shapes:
                shape = rule.matcher
                if node.type in shape.node_types and self._satisfies(node, name, shape):
                    matches.append(StructuralMatch(
                        rule=rule,
                        line=node.start_point[0] + 1,  # 1-indexed
                        detail=name,
                    ))

        return matches

    def _walk(self, tree: Tree):
        """Pre-order traversal with a tree cursor (no recursion)."""
        cursor = tree.walk()
        while True:
            yield cursor.node
            if cursor.goto_first_child():
                continue
            while not cursor.goto_next_sibling():
                if not cursor.goto_parent():
                    return

    def _satisfies(self, node: Node, name: str, shape: NodeShape) -> bool:
        if not shape.name.fullmatch(name):
            return False
        if shape.within and not self._has_ancestor(node, shape.within):
            return False
        if shape.outside and self._has_ancestor(node, shape.outside):
            return False
        return True

    def _has_ancestor(self, node: Node, types: frozenset[str]) -> bool:
        parent = node.parent
        while parent is not None:
            if parent.type in types:
                return True
            parent = parent.parent
        return False

    def _node_name(self, node: Node, code: bytes) -> str:
        """Callee text for calls and awaits, attribute name for JSX attributes."""
        if node.type in ("await", "await_expression"):
            inner = node.named_children[0] if node.named_children else None
            return self._node_name(inner, code) if inner is not None else ""

        func_node = node.child_by_field_name("function")
        if func_node is not None:
            return self._node_text(func_node, code)

        if node.type == "jsx_attribute" and node.child_count > 0:
            return self._node_text(node.children[0], code)

        return self._node_text(node, code)

    def _node_text(self, node: Node, code: bytes) -> str:
        return code[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
