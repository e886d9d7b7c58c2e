"""Utility-class (Tailwind style) extraction and validation.

Tokens come from ``className``/``class`` attribute values and from calls to
class-merging helpers such as ``cn()`` or ``clsx()``. Branches of
conditional expressions and keys of object-literal variants are tagged as
conditional. Interpolated template segments cannot be resolved statically
and are recorded as notes instead of tokens.
"""

import re
from collections.abc import Iterable

from tree_sitter import Node

from ..analysis.parsing import ParsedSource, call_name, property_key, string_value, unwrap
from .base import StyleExtraction, StyleExtractor, StyleToken, ValidationIssue, ValidationResult

CLASS_ATTRIBUTES = frozenset({"className", "class"})
CLASS_HELPERS = frozenset({"cn", "clsx", "classnames", "classNames", "twMerge", "twJoin", "cx"})

_NOTE_LIMIT = 80
_SENTINEL = re.compile("\x00(\\d+)\x00")

VARIANT_PATTERN = re.compile(
    r"^(?:(?:sm|md|lg|xl|2xl|max-sm|max-md|max-lg|max-xl|max-2xl|dark|print|motion-safe|"
    r"motion-reduce|portrait|landscape|rtl|ltr|hover|focus|focus-visible|focus-within|"
    r"active|visited|target|disabled|enabled|checked|indeterminate|required|invalid|"
    r"placeholder-shown|read-only|empty|open|first|last|only|odd|even|first-of-type|"
    r"last-of-type|before|after|placeholder|file|marker|selection|first-line|first-letter|"
    r"(?:group|peer)(?:-[a-z-]+)?(?:/[\w-]+)?|(?:aria|data|supports)-[\w\[\]=\"'-]+|"
    r"\[[^\]\s]+\]):)+"
)

UTILITY_PREFIXES = (
    "p|px|py|pt|pr|pb|pl|ps|pe|m|mx|my|mt|mr|mb|ml|ms|me|"
    "w|h|size|min-w|min-h|max-w|max-h|"
    "space-x|space-y|gap|gap-x|gap-y|inset|inset-x|inset-y|top|right|bottom|left|start|end|"
    "z|order|basis|grow|shrink|flex|grid-cols|grid-rows|grid-flow|col|col-span|col-start|"
    "col-end|row|row-span|row-start|row-end|auto-cols|auto-rows|justify|justify-items|"
    "justify-self|items|content|self|place-content|place-items|place-self|"
    "bg|from|via|to|text|font|leading|tracking|align|decoration|underline-offset|"
    "whitespace|break|list|indent|line-clamp|hyphens|"
    "border|border-x|border-y|border-t|border-r|border-b|border-l|border-s|border-e|"
    "divide|divide-x|divide-y|outline|outline-offset|ring|ring-offset|rounded|"
    "shadow|opacity|blur|brightness|contrast|drop-shadow|grayscale|hue-rotate|invert|"
    "saturate|sepia|backdrop|mix-blend|bg-blend|"
    "animate|transition|duration|delay|ease|scale|scale-x|scale-y|rotate|translate-x|"
    "translate-y|skew-x|skew-y|origin|"
    "cursor|select|resize|appearance|pointer-events|scroll|snap|touch|will-change|"
    "fill|stroke|float|clear|object|overflow|overflow-x|overflow-y|overscroll|aspect|"
    "columns|accent|caret|placeholder|sr|box|table|caption|isolation|visible"
)
_SUFFIX = r"(?:[a-z0-9]+(?:[-./][a-z0-9]+)*|\[[^\]\s]+\])(?:/(?:\d+|\[[^\]\s]+\]))?"
UTILITY_PATTERN = re.compile(rf"^(?:{UTILITY_PREFIXES})-{_SUFFIX}$")

STANDALONE_UTILITIES = frozenset(
    {
        "flex", "grid", "block", "inline", "inline-block", "inline-flex", "inline-grid",
        "table", "hidden", "contents", "flow-root", "list-item", "sr-only", "not-sr-only",
        "visible", "invisible", "collapse", "static", "fixed", "absolute", "relative",
        "sticky", "truncate", "antialiased", "subpixel-antialiased", "italic",
        "not-italic", "uppercase", "lowercase", "capitalize", "normal-case", "underline",
        "overline", "line-through", "no-underline", "rounded", "border", "shadow", "ring",
        "outline", "transition", "transform", "container", "grow", "shrink", "isolate",
        "blur", "filter", "group", "peer", "prose", "ordinal", "slashed-zero",
        "tabular-nums", "proportional-nums", "lining-nums", "oldstyle-nums",
    }
)

CATEGORY_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("animations", re.compile(r"^(animate|transition|duration|delay|ease)(-|$)")),
    ("layout", re.compile(r"^(flex|grid|block|inline|hidden|absolute|relative|fixed|sticky|static|float|clear|container|z-|overflow|object|order|col|row|justify|items|content|self|place)")),
    ("spacing", re.compile(r"^(p[xytrblse]?|m[xytrblse]?|space-[xy]|gap|inset|top|right|bottom|left)-")),
    ("sizing", re.compile(r"^(w|h|size|min-w|min-h|max-w|max-h|basis|aspect)-")),
    ("typography", re.compile(r"^(font|leading|tracking|align|whitespace|break|list|indent|line-clamp|italic|uppercase|lowercase|capitalize|underline|truncate|text-(xs|sm|base|lg|[0-9]?xl|left|center|right|justify|start|end))")),
    ("colors", re.compile(r"^(bg|text|fill|stroke|from|via|to|accent|caret|placeholder|decoration)-")),
    ("borders", re.compile(r"^(border|rounded|ring|outline|divide)(-|$)")),
    ("effects", re.compile(r"^(shadow|opacity|blur|brightness|contrast|drop-shadow|grayscale|hue-rotate|invert|saturate|sepia|backdrop|mix-blend|bg-blend)(-|$)")),
    ("interactivity", re.compile(r"^(cursor|select|resize|appearance|pointer-events|scroll|snap|touch|will-change)-")),
    ("transforms", re.compile(r"^(scale|rotate|translate|skew|origin|transform)(-|$)")),
]

RESPONSIVE_PATTERN = re.compile(r"^(?:max-)?(sm|md|lg|xl|2xl):")
STATE_PATTERN = re.compile(r"^(hover|focus|active|disabled|dark|group-hover|peer-[a-z-]+|focus-visible|focus-within|visited|first|last|odd|even):")


def strip_variants(token: str) -> str:
    """Remove variant prefixes, the important marker and a negative sign."""
    base = VARIANT_PATTERN.sub("", token)
    base = base.removeprefix("!")
    if base.startswith("-") and len(base) > 1:
        base = base[1:]
    return base


def categorize_utility(token: str) -> str:
    """Coarse documentation group for a utility class."""
    if RESPONSIVE_PATTERN.match(token):
        return "responsive"
    if STATE_PATTERN.match(token):
        return "states"
    base = strip_variants(token)
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.match(base):
            return category
    return "other"


def group_utilities(tokens: Iterable[str]) -> dict[str, list[str]]:
    """Group tokens by ``categorize_utility``, keeping input order in each group."""
    groups: dict[str, list[str]] = {}
    for token in tokens:
        groups.setdefault(categorize_utility(token), []).append(token)
    return groups


def _truncate(text: str) -> str:
    text = " ".join(text.split())
    return text if len(text) <= _NOTE_LIMIT else text[: _NOTE_LIMIT - 3] + "..."


class UtilityClassExtractor(StyleExtractor):
    """Extracts utility classes from class attributes and helper calls."""

    def __init__(
        self,
        class_attributes: Iterable[str] = CLASS_ATTRIBUTES,
        class_helpers: Iterable[str] = CLASS_HELPERS,
    ):
        self.class_attributes = frozenset(class_attributes)
        self.class_helpers = frozenset(class_helpers)

    @property
    def style_system(self) -> str:
        return "utility"

    def extract(self, parsed: ParsedSource) -> StyleExtraction:
        extraction = StyleExtraction()
        stack: list[Node] = [parsed.root]
        while stack:
            node = stack.pop()
            if node.type == "jsx_attribute":
                named = node.named_children
                if named and parsed.text(named[0]) in self.class_attributes:
                    if len(named) > 1:
                        self._collect(parsed, named[-1], extraction, False)
                    continue
            elif node.type == "call_expression" and self._is_helper(parsed, node):
                self._collect_arguments(parsed, node, extraction, False)
                continue
            stack.extend(reversed(node.children))
        return extraction

    def _is_helper(self, parsed: ParsedSource, node: Node) -> bool:
        return call_name(parsed, node).split(".")[-1] in self.class_helpers

    def _collect_arguments(
        self, parsed: ParsedSource, call: Node, extraction: StyleExtraction, conditional: bool
    ) -> None:
        arguments = call.child_by_field_name("arguments")
        if arguments is None:
            return
        for argument in arguments.named_children:
            self._collect(parsed, argument, extraction, conditional)

    def _collect(
        self, parsed: ParsedSource, node: Node | None, extraction: StyleExtraction, conditional: bool
    ) -> None:
        node = unwrap(node)
        if node is None or node.type == "comment":
            return
        kind = node.type

        if kind == "string":
            self._add_words(string_value(parsed, node), extraction, conditional)
        elif kind == "template_string":
            self._collect_template(parsed, node, extraction, conditional)
        elif kind == "jsx_expression":
            for child in node.named_children:
                self._collect(parsed, child, extraction, conditional)
        elif kind == "ternary_expression":
            self._collect(parsed, node.child_by_field_name("consequence"), extraction, True)
            self._collect(parsed, node.child_by_field_name("alternative"), extraction, True)
        elif kind == "binary_expression":
            self._collect_binary(parsed, node, extraction, conditional)
        elif kind == "object":
            self._collect_object(parsed, node, extraction)
        elif kind == "array":
            for element in node.named_children:
                self._collect(parsed, element, extraction, conditional)
        elif kind == "call_expression" and self._is_helper(parsed, node):
            self._collect_arguments(parsed, node, extraction, conditional)
        elif kind in ("true", "false", "null", "undefined", "number"):
            return
        else:
            extraction.note(f"dynamic, unresolved: {_truncate(parsed.text(node))}")

    def _collect_binary(
        self, parsed: ParsedSource, node: Node, extraction: StyleExtraction, conditional: bool
    ) -> None:
        operator = node.child_by_field_name("operator")
        op = parsed.text(operator) if operator is not None else ""
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if op == "&&":
            self._collect(parsed, right, extraction, True)
        elif op in ("||", "??"):
            self._collect(parsed, left, extraction, True)
            self._collect(parsed, right, extraction, True)
        elif op == "+":
            self._collect(parsed, left, extraction, conditional)
            self._collect(parsed, right, extraction, conditional)
        else:
            extraction.note(f"dynamic, unresolved: {_truncate(parsed.text(node))}")

    def _collect_object(
        self, parsed: ParsedSource, node: Node, extraction: StyleExtraction
    ) -> None:
        for child in node.named_children:
            if child.type == "pair":
                key = property_key(parsed, child.child_by_field_name("key"))
                if key is None:
                    extraction.note(f"dynamic, unresolved: {_truncate(parsed.text(child))}")
                else:
                    self._add_words(key, extraction, True)
            elif child.type == "shorthand_property_identifier":
                self._add_words(parsed.text(child), extraction, True)
            elif child.type != "comment":
                extraction.note(f"dynamic, unresolved: {_truncate(parsed.text(child))}")

    def _collect_template(
        self, parsed: ParsedSource, node: Node, extraction: StyleExtraction, conditional: bool
    ) -> None:
        pieces: list[str] = []
        substitutions: list[str] = []
        cursor = node.start_byte + 1
        for child in node.children:
            if child.type == "template_substitution":
                pieces.append(parsed.source[cursor : child.start_byte].decode("utf-8", errors="replace"))
                pieces.append(f"\x00{len(substitutions)}\x00")
                substitutions.append(parsed.text(child))
                cursor = child.end_byte
        pieces.append(parsed.source[cursor : node.end_byte - 1].decode("utf-8", errors="replace"))

        for word in "".join(pieces).split():
            if "\x00" in word:
                rendered = _SENTINEL.sub(lambda m: substitutions[int(m.group(1))], word)
                extraction.note(f"dynamic, unresolved: {_truncate(rendered)}")
            else:
                extraction.add(StyleToken(name=word, conditional=conditional))

    @staticmethod
    def _add_words(text: str, extraction: StyleExtraction, conditional: bool) -> None:
        for word in text.split():
            extraction.add(StyleToken(name=word, conditional=conditional))

    def validate(self, tokens: Iterable[str]) -> ValidationResult:
        result = ValidationResult()
        for token in tokens:
            issue = self.check_token(token)
            if issue is not None:
                result.issues.append(issue)
        return result

    def check_token(self, token: str) -> ValidationIssue | None:
        """Return a warning for tokens outside the utility grammar."""
        if token.endswith(("-", "_", ":")):
            return ValidationIssue(
                token=token,
                message=f"Incomplete utility class '{token}'",
                code="INCOMPLETE_TOKEN",
            )
        base = strip_variants(token)
        if base in STANDALONE_UTILITIES or UTILITY_PATTERN.match(base):
            return None
        if base[:1].isupper() or "component" in base.lower():
            message = f"'{token}' looks like a custom class, not a utility"
        else:
            message = f"Unrecognized utility class '{token}'"
        return ValidationIssue(token=token, message=message, code="UNRECOGNIZED_UTILITY")
