"""Style-object (React Native ``StyleSheet.create``) extraction.

Each top-level key of the object passed to the create call is a rule. Its
property/value pairs are flattened into tokens named
``rule.property:value``; nested objects flatten to dotted properties.
Object literals in JSX ``style={...}`` attributes use the rule ``inline``.
"""

import re
from collections.abc import Iterable

from tree_sitter import Node

from ..analysis.parsing import ParsedSource, call_name, literal_value, property_key, unwrap
from .base import StyleExtraction, StyleExtractor, StyleToken, ValidationIssue, ValidationResult

CREATE_CALLS = frozenset({"StyleSheet.create"})
INLINE_RULE = "inline"

UNSUPPORTED_PROPERTIES = frozenset({"boxShadow", "textShadow", "cursor", "userSelect", "float"})
DEPRECATED_PROPERTIES = frozenset({"tintColor"})

TOKEN_PATTERN = re.compile(r"^(?P<rule>[^.]+)\.(?P<property>[^:]+):(?P<value>.*)$")


def token_name(rule: str, prop: str, value: str) -> str:
    return f"{rule}.{prop}:{value}"


class StyleObjectExtractor(StyleExtractor):
    """Flattens style tables passed to ``StyleSheet.create`` and inline styles."""

    def __init__(self, create_calls: Iterable[str] = CREATE_CALLS):
        self.create_calls = frozenset(create_calls)

    @property
    def style_system(self) -> str:
        return "style-object"

    def extract(self, parsed: ParsedSource) -> StyleExtraction:
        extraction = StyleExtraction()
        sheets: set[str] = set()
        for call in parsed.find({"call_expression"}):
            if call_name(parsed, call) not in self.create_calls:
                continue
            declarator = call.parent
            if declarator is not None and declarator.type == "variable_declarator":
                sheets.add(parsed.text(declarator.child_by_field_name("name")))
            arguments = call.child_by_field_name("arguments")
            table = unwrap(arguments.named_children[0]) if arguments and arguments.named_children else None
            if table is None or table.type != "object":
                extraction.note(f"dynamic, unresolved: {parsed.text(call)[:80]}")
                continue

            for rule_node in table.named_children:
                if rule_node.type != "pair":
                    continue
                rule = property_key(parsed, rule_node.child_by_field_name("key"))
                body = unwrap(rule_node.child_by_field_name("value"))
                if rule is None or body is None or body.type != "object":
                    extraction.note(f"dynamic, unresolved: {parsed.text(rule_node)[:80]}")
                    continue
                self._flatten(parsed, rule, body, "", extraction)

        for attribute in parsed.find({"jsx_attribute"}):
            parts = attribute.named_children
            if len(parts) < 2 or parsed.text(parts[0]) != "style":
                continue
            value = parts[-1]
            if value.type == "jsx_expression":
                inner = [n for n in value.named_children if n.type != "comment"]
                value = unwrap(inner[0]) if inner else None
            if value is not None:
                self._inline(parsed, value, sheets, extraction)
        return extraction

    def _inline(
        self,
        parsed: ParsedSource,
        node: Node,
        sheets: set[str],
        extraction: StyleExtraction,
        conditional: bool = False,
    ) -> None:
        """Walk a ``style={...}`` value; object literals become ``inline`` rule tokens."""
        node = unwrap(node)
        if node is None or node.type in ("null", "undefined", "false", "true", "comment"):
            return
        if node.type == "object":
            self._flatten(parsed, INLINE_RULE, node, "", extraction, conditional)
        elif node.type == "array":
            for element in node.named_children:
                self._inline(parsed, element, sheets, extraction, conditional)
        elif node.type == "ternary_expression":
            for field_name in ("consequence", "alternative"):
                branch = node.child_by_field_name(field_name)
                if branch is not None:
                    self._inline(parsed, branch, sheets, extraction, True)
        elif node.type == "binary_expression" and parsed.text(
            node.child_by_field_name("operator")
        ) in ("&&", "||", "??"):
            right = node.child_by_field_name("right")
            if right is not None:
                self._inline(parsed, right, sheets, extraction, True)
        elif node.type == "member_expression" and parsed.text(
            node.child_by_field_name("object")
        ) in sheets:
            return
        else:
            extraction.note(f"dynamic, unresolved: style={{{parsed.text(node)[:60]}}}")

    def _flatten(
        self,
        parsed: ParsedSource,
        rule: str,
        body: Node,
        prefix: str,
        extraction: StyleExtraction,
        conditional: bool = False,
    ) -> None:
        for pair in body.named_children:
            if pair.type != "pair":
                if pair.type != "comment":
                    extraction.note(f"dynamic, unresolved: {rule}: {parsed.text(pair)[:60]}")
                continue
            key = property_key(parsed, pair.child_by_field_name("key"))
            value = unwrap(pair.child_by_field_name("value"))
            if key is None or value is None:
                continue
            prop = f"{prefix}{key}"

            if value.type == "object":
                self._flatten(parsed, rule, value, f"{prop}.", extraction, conditional)
                continue

            try:
                rendered = str(literal_value(parsed, value))
            except ValueError:
                rendered = parsed.text(value)
                extraction.note(f"dynamic, unresolved: {rule}.{prop} = {rendered[:60]}")

            extraction.add(
                StyleToken(
                    name=token_name(rule, prop, rendered),
                    rule=rule,
                    property=prop,
                    value=rendered,
                    conditional=conditional,
                )
            )

    def validate(self, tokens: Iterable[str]) -> ValidationResult:
        result = ValidationResult()
        for token in tokens:
            match = TOKEN_PATTERN.match(token)
            if not match:
                result.issues.append(
                    ValidationIssue(
                        token=token,
                        message=f"'{token}' is not a rule.property:value token",
                        code="MALFORMED_TOKEN",
                    )
                )
                continue

            prop = match.group("property").split(".")[0]
            if prop in UNSUPPORTED_PROPERTIES:
                result.issues.append(
                    ValidationIssue(
                        token=token,
                        message=f"StyleSheet property '{prop}' is not supported in React Native",
                        severity="error",
                        code="UNSUPPORTED_PROPERTY",
                    )
                )
            elif prop in DEPRECATED_PROPERTIES:
                result.issues.append(
                    ValidationIssue(
                        token=token,
                        message=f"StyleSheet property '{prop}' is deprecated in React Native",
                        code="DEPRECATED_PROPERTY",
                    )
                )
        return result
