"""Shallow JSX structure of a component's returned expression."""

import html

from tree_sitter import Node

from ..models import JSXNode
from .parsing import ParsedSource, call_name, string_value, unwrap

ELEMENT_TYPES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})
CREATE_ELEMENT_CALLS = frozenset({"React.createElement", "createElement"})
EXPRESSION_PLACEHOLDER = "{...}"
FRAGMENT_TAG = "Fragment"


def is_element_like(parsed: ParsedSource, node: Node | None) -> bool:
    """True for JSX elements and conditional/logical wrappers around them."""
    node = unwrap(node)
    if node is None:
        return False
    if node.type in ELEMENT_TYPES:
        return True
    if node.type == "ternary_expression":
        return is_element_like(parsed, node.child_by_field_name("consequence")) or is_element_like(
            parsed, node.child_by_field_name("alternative")
        )
    if node.type == "binary_expression":
        operator = node.child_by_field_name("operator")
        if operator is not None and parsed.text(operator) in ("&&", "||", "??"):
            return is_element_like(parsed, node.child_by_field_name("right")) or is_element_like(
                parsed, node.child_by_field_name("left")
            )
        return False
    if node.type == "call_expression":
        return call_name(parsed, node) in CREATE_ELEMENT_CALLS
    return False


class JSXStructureExtractor:
    """Builds a ``JSXNode`` tree from a returned expression.

    Conditional wrappers resolve to their first element-like branch. Only
    string attribute values are kept; every other attribute is recorded by
    name.
    """

    def __init__(self, parsed: ParsedSource, max_depth: int = 32):
        self.parsed = parsed
        self.max_depth = max_depth

    def build(self, node: Node | None, depth: int = 0) -> JSXNode | None:
        node = unwrap(node)
        if node is None or depth > self.max_depth:
            return None
        kind = node.type

        if kind == "jsx_element":
            open_tag = node.child_by_field_name("open_tag")
            tag = self._tag(open_tag)
            attributes, dynamic = self._attributes(open_tag)
            return JSXNode(
                tag=tag,
                attributes=attributes,
                dynamic_attributes=dynamic,
                children=self._children(node, depth),
            )
        if kind == "jsx_self_closing_element":
            attributes, dynamic = self._attributes(node)
            return JSXNode(tag=self._tag(node), attributes=attributes, dynamic_attributes=dynamic)
        if kind == "jsx_fragment":
            return JSXNode(tag=FRAGMENT_TAG, children=self._children(node, depth))
        if kind == "ternary_expression":
            for field_name in ("consequence", "alternative"):
                branch = node.child_by_field_name(field_name)
                if is_element_like(self.parsed, branch):
                    return self.build(branch, depth)
            return None
        if kind == "binary_expression":
            for field_name in ("right", "left"):
                side = node.child_by_field_name(field_name)
                if is_element_like(self.parsed, side):
                    return self.build(side, depth)
            return None
        if kind == "call_expression" and is_element_like(self.parsed, node):
            return self._create_element(node)
        return None

    def _tag(self, element: Node | None) -> str:
        if element is None:
            return FRAGMENT_TAG
        name = element.child_by_field_name("name")
        return self.parsed.text(name) if name is not None else FRAGMENT_TAG

    def _attributes(self, element: Node | None) -> tuple[dict[str, str | bool], tuple[str, ...]]:
        static: dict[str, str | bool] = {}
        dynamic: list[str] = []
        if element is None:
            return static, ()

        name_node = element.child_by_field_name("name")
        for child in element.named_children:
            if name_node is not None and child.id == name_node.id:
                continue
            if child.type == "jsx_expression":
                inner = [n for n in child.named_children if n.type != "comment"]
                argument = inner[0] if inner else None
                if argument is not None and argument.type == "spread_element":
                    dynamic.append(self.parsed.text(argument))
                else:
                    dynamic.append("...spread")
                continue
            if child.type != "jsx_attribute":
                continue

            parts = child.named_children
            if not parts:
                continue
            attr_name = self.parsed.text(parts[0])
            if len(parts) == 1:
                static[attr_name] = True
            elif parts[-1].type == "string":
                static[attr_name] = string_value(self.parsed, parts[-1])
            else:
                dynamic.append(attr_name)
        return static, tuple(dynamic)

    def _children(self, element: Node, depth: int) -> tuple[JSXNode | str, ...]:
        children: list[JSXNode | str] = []
        text_run: list[Node] = []

        def flush_text() -> None:
            if text_run:
                # Entities are separate nodes; decode the whole span as one text child.
                span = self.parsed.source[text_run[0].start_byte : text_run[-1].end_byte]
                text = " ".join(html.unescape(span.decode("utf-8", errors="replace")).split())
                if text:
                    children.append(text)
            text_run.clear()

        for child in element.named_children:
            kind = child.type
            if kind in ("jsx_opening_element", "jsx_closing_element"):
                continue
            if kind in ("jsx_text", "html_character_reference"):
                text_run.append(child)
                continue
            flush_text()
            if kind in ELEMENT_TYPES:
                built = self.build(child, depth + 1)
                if built is not None:
                    children.append(built)
            elif kind == "jsx_expression":
                inner = [n for n in child.named_children if n.type != "comment"]
                if not inner:
                    continue
                if is_element_like(self.parsed, inner[0]):
                    built = self.build(inner[0], depth + 1)
                    if built is not None:
                        children.append(built)
                        continue
                children.append(EXPRESSION_PLACEHOLDER)
        flush_text()
        return tuple(children)

    def _create_element(self, call: Node) -> JSXNode:
        arguments = call.child_by_field_name("arguments")
        first = arguments.named_children[0] if arguments and arguments.named_children else None
        if first is None:
            return JSXNode(tag=FRAGMENT_TAG)
        if first.type == "string":
            return JSXNode(tag=string_value(self.parsed, first))
        return JSXNode(tag=self.parsed.text(first))
