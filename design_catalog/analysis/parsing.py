"""tree-sitter parsing for JavaScript and TypeScript component sources."""

import hashlib
from collections.abc import Iterator
from dataclasses import dataclass
from functools import cache
from pathlib import Path
from typing import Any

from tree_sitter import Language, Node, Parser, Tree

TSX_EXTENSIONS = (".tsx",)
TS_EXTENSIONS = (".ts", ".mts", ".cts")
JS_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs")
SUPPORTED_EXTENSIONS = TSX_EXTENSIONS + TS_EXTENSIONS + JS_EXTENSIONS

FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "arrow_function",
        "generator_function_declaration",
        "method_definition",
    }
)


@cache
def _language(grammar: str) -> Language:
    if grammar == "tsx":
        import tree_sitter_typescript as tsts

        return Language(tsts.language_tsx())
    if grammar == "typescript":
        import tree_sitter_typescript as tsts

        return Language(tsts.language_typescript())

    import tree_sitter_javascript as tsjs

    return Language(tsjs.language())


def grammar_for(path: str | Path) -> str:
    """Pick the grammar for a file by its suffix."""
    suffix = Path(path).suffix.lower()
    if suffix in TSX_EXTENSIONS:
        return "tsx"
    if suffix in TS_EXTENSIONS:
        return "typescript"
    return "javascript"


def compute_fingerprint(content: bytes) -> str:
    """SHA256 over the raw file bytes."""
    return hashlib.sha256(content).hexdigest()


@dataclass
class ParsedSource:
    """A parsed source file with byte-accurate text helpers."""

    path: str
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        """True when the tree contains ERROR or missing nodes."""
        return self.root.has_error

    def text(self, node: Node | None) -> str:
        """Extract the source text covered by a node."""
        if node is None:
            return ""
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def walk(self, node: Node | None = None) -> Iterator[Node]:
        """Pre-order traversal in document order."""
        stack = [node or self.root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def find(self, node_types: set[str] | frozenset[str], root: Node | None = None) -> list[Node]:
        """Find all nodes of the given types below ``root``."""
        return [node for node in self.walk(root) if node.type in node_types]

    def error_location(self) -> tuple[int, int] | None:
        """1-based (line, column) of the first syntax error, if any."""
        for node in self.walk():
            if node.type == "ERROR" or node.is_missing:
                row, column = node.start_point
                return row + 1, column + 1
        return None


class SourceParser:
    """Parses component sources with the grammar matching their suffix.

    A new ``Parser`` is created per call so one instance can be shared
    between worker threads; compiled ``Language`` objects are cached.
    """

    def can_parse(self, path: str | Path) -> bool:
        return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS

    def parse(self, path: str | Path, content: bytes | str) -> ParsedSource:
        source = content.encode("utf-8") if isinstance(content, str) else content
        parser = Parser(_language(grammar_for(path)))
        return ParsedSource(path=str(path), source=source, tree=parser.parse(source))


# Helpers shared by the extractors.


def unwrap(node: Node | None) -> Node | None:
    """Strip parentheses and TypeScript ``as``/``satisfies``/``!`` wrappers."""
    while node is not None and node.type in (
        "parenthesized_expression",
        "as_expression",
        "satisfies_expression",
        "non_null_expression",
        "type_assertion",
    ):
        inner = [child for child in node.named_children if child.type != "comment"]
        if not inner:
            return node
        node = inner[0] if node.type != "type_assertion" else inner[-1]
    return node


def string_value(parsed: ParsedSource, node: Node) -> str:
    """Value of a string literal without its quotes."""
    text = parsed.text(node)
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def property_key(parsed: ParsedSource, node: Node | None) -> str | None:
    """Static name of an object key, or None for computed keys."""
    if node is None:
        return None
    if node.type == "string":
        return string_value(parsed, node)
    if node.type in ("property_identifier", "identifier", "number", "private_property_identifier"):
        return parsed.text(node)
    return None


def call_name(parsed: ParsedSource, node: Node) -> str:
    """Dotted callee name of a call expression, e.g. ``StyleSheet.create``."""
    function = node.child_by_field_name("function")
    return parsed.text(function) if function is not None else ""


def literal_value(parsed: ParsedSource, node: Node) -> Any:
    """Python value of a simple literal node; raises ValueError otherwise."""
    if node.type == "string":
        return string_value(parsed, node)
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.children):
            raise ValueError("template literal with substitutions")
        return string_value(parsed, node)
    if node.type == "number":
        text = parsed.text(node).replace("_", "")
        try:
            return int(text, 0)
        except ValueError:
            return float(text)
    if node.type == "true":
        return True
    if node.type == "false":
        return False
    if node.type in ("null", "undefined"):
        return None
    if node.type == "unary_expression" and parsed.text(node).startswith("-"):
        argument = node.child_by_field_name("argument")
        if argument is not None and argument.type == "number":
            return -literal_value(parsed, argument)
    raise ValueError(f"unsupported literal: {node.type}")
