"""Component detection and descriptor extraction for one source file.

A file defines a component when it exports a capitalized function that
returns JSX. Names are resolved in this order:

1. ``function Button() { return <button/> }``
2. ``const Button = () => <button/>`` (also through ``memo``/``forwardRef``)
3. ``export default () => <div/>``, named after the file

Files that fail to parse or define no component are skipped, never raised.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node

from ..catalog_logging import LogCategory, get_category_logger
from ..categories import CategoryTable
from ..models import ComponentDescriptor
from ..styles.base import StyleExtractor, create_style_extractor
from .jsx_structure import JSXStructureExtractor, is_element_like
from .parsing import FUNCTION_TYPES, ParsedSource, SourceParser, compute_fingerprint, string_value, unwrap
from .props import PropExtractor

logger = get_category_logger(LogCategory.ANALYSIS)

SKIP_PARSE_ERROR = "parse-error"
SKIP_NOT_COMPONENT = "not-a-component"
SKIP_UNSUPPORTED = "unsupported-file-type"
SKIP_READ_ERROR = "read-error"

LOCAL_IMPORT_PREFIXES = (".", "/", "@/", "~/")
INLINE_FUNCTION_TYPES = frozenset({"arrow_function", "function_expression", "function"})


@dataclass(frozen=True)
class ComponentDeclaration:
    """The declaration a component name was resolved from."""

    name: str
    function: Node
    strategy: str  # "function", "variable" or "default-export"
    declarator: Node | None = None
    wrapper_call: Node | None = None


@dataclass(frozen=True)
class FileAnalysis:
    """Outcome of analyzing one file: a descriptor or a skip reason."""

    file_path: str
    fingerprint: str
    descriptor: ComponentDescriptor | None = None
    skip_reason: str | None = None
    message: str | None = None

    @property
    def is_component(self) -> bool:
        return self.descriptor is not None

    @property
    def is_error(self) -> bool:
        """Parse and read failures are warnings; non-components are not."""
        return self.skip_reason in (SKIP_PARSE_ERROR, SKIP_READ_ERROR)


class ComponentAnalyzer:
    """Turns one source file into a ComponentDescriptor."""

    def __init__(
        self,
        style_extractor: StyleExtractor | None = None,
        categories: Mapping[str, str] | None = None,
        parser: SourceParser | None = None,
        local_import_prefixes: tuple[str, ...] = LOCAL_IMPORT_PREFIXES,
    ):
        self.style_extractor = style_extractor or create_style_extractor("tailwind")
        self.categories = (
            categories if isinstance(categories, CategoryTable) else CategoryTable(categories)
        )
        self.parser = parser or SourceParser()
        self.local_import_prefixes = local_import_prefixes

    def analyze(self, file_path: str | Path, content: bytes | str) -> FileAnalysis:
        """Analyze one file.

        Args:
            file_path: Path used for grammar selection and naming.
            content: Raw file content.

        Returns:
            FileAnalysis with either a descriptor or a skip reason.
        """
        path = str(file_path)
        raw = content.encode("utf-8") if isinstance(content, str) else content
        fingerprint = compute_fingerprint(raw)

        if not self.parser.can_parse(path):
            return FileAnalysis(path, fingerprint, skip_reason=SKIP_UNSUPPORTED)

        parsed = self.parser.parse(path, raw)
        if parsed.has_errors:
            location = parsed.error_location()
            where = f" at line {location[0]}, column {location[1]}" if location else ""
            return FileAnalysis(
                path, fingerprint, skip_reason=SKIP_PARSE_ERROR, message=f"Syntax error{where}"
            )

        declaration = self.resolve_component(parsed)
        if declaration is None:
            logger.debug(f"No component found in {path}")
            return FileAnalysis(path, fingerprint, skip_reason=SKIP_NOT_COMPONENT)

        returned = self.returned_expression(parsed, declaration.function)
        props = PropExtractor(parsed).extract(
            declaration.function, declaration.declarator, declaration.wrapper_call
        )
        structure = JSXStructureExtractor(parsed).build(returned)
        styles = self.style_extractor.extract(parsed)
        validation = self.style_extractor.validate(styles.names)

        descriptor = ComponentDescriptor(
            name=declaration.name,
            category=self.categories.category_for(declaration.name, path),
            file_path=path,
            fingerprint=fingerprint,
            props=tuple(props),
            style_tokens=tuple(styles.names),
            conditional_tokens=tuple(styles.conditional_names),
            structure=structure,
            dependencies=tuple(self.dependencies(parsed, returned)),
            style_notes=tuple(styles.notes),
            style_issues=tuple(validation.issues),
        )
        return FileAnalysis(path, fingerprint, descriptor=descriptor)

    # Name resolution

    def resolve_component(self, parsed: ParsedSource) -> ComponentDeclaration | None:
        """Find the exported component declaration, trying each strategy in order."""
        exported = self._exported_names(parsed)
        statements: list[tuple[Node, bool]] = []
        default_values: list[Node] = []
        for node in parsed.root.named_children:
            if node.type == "export_statement":
                inner = node.child_by_field_name("declaration")
                if inner is not None:
                    statements.append((inner, True))
                value = node.child_by_field_name("value")
                if value is not None:
                    default_values.append(value)
            else:
                statements.append((node, False))

        for node, direct in statements:
            if node.type != "function_declaration":
                continue
            name = self._identifier(parsed, node)
            if name and name[0].isupper() and (direct or name in exported):
                if self.returned_expression(parsed, node) is not None:
                    return ComponentDeclaration(name=name, function=node, strategy="function")

        for value in default_values:
            value = unwrap(value)
            if value is not None and value.type in ("function_expression", "function"):
                name = self._identifier(parsed, value)
                if name and name[0].isupper() and self.returned_expression(parsed, value):
                    return ComponentDeclaration(name=name, function=value, strategy="function")

        for node, direct in statements:
            if node.type not in ("lexical_declaration", "variable_declaration"):
                continue
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = self._identifier(parsed, declarator)
                if not name or not name[0].isupper() or not (direct or name in exported):
                    continue
                function, wrapper = self._component_function(
                    parsed, declarator.child_by_field_name("value")
                )
                if function is not None and self.returned_expression(parsed, function) is not None:
                    return ComponentDeclaration(
                        name=name,
                        function=function,
                        strategy="variable",
                        declarator=declarator,
                        wrapper_call=wrapper,
                    )

        for value in default_values:
            function, wrapper = self._component_function(parsed, value)
            if function is None or self._identifier(parsed, function):
                continue
            if self.returned_expression(parsed, function) is not None:
                return ComponentDeclaration(
                    name=self._name_from_path(parsed.path),
                    function=function,
                    strategy="default-export",
                    wrapper_call=wrapper,
                )
        return None

    @staticmethod
    def _identifier(parsed: ParsedSource, node: Node) -> str | None:
        name = node.child_by_field_name("name")
        if name is None or name.type != "identifier":
            return None
        return parsed.text(name)

    def _component_function(
        self, parsed: ParsedSource, value: Node | None
    ) -> tuple[Node | None, Node | None]:
        """Unwrap ``memo(...)``/``forwardRef(...)`` to the inline function."""
        value = unwrap(value)
        if value is None:
            return None, None
        if value.type in INLINE_FUNCTION_TYPES:
            return value, None
        if value.type == "call_expression":
            arguments = value.child_by_field_name("arguments")
            for argument in arguments.named_children if arguments else []:
                function, inner_wrapper = self._component_function(parsed, argument)
                if function is not None:
                    return function, inner_wrapper or value
        return None, None

    def _exported_names(self, parsed: ParsedSource) -> set[str]:
        names: set[str] = set()
        for node in parsed.root.named_children:
            if node.type != "export_statement":
                continue
            value = unwrap(node.child_by_field_name("value"))
            while value is not None and value.type == "call_expression":
                arguments = value.child_by_field_name("arguments")
                value = unwrap(arguments.named_children[0]) if arguments and arguments.named_children else None
            if value is not None and value.type == "identifier":
                names.add(parsed.text(value))
            for clause in node.named_children:
                if clause.type != "export_clause":
                    continue
                for specifier in clause.named_children:
                    local = specifier.child_by_field_name("name")
                    if local is not None:
                        names.add(parsed.text(local))
        return names

    @staticmethod
    def _name_from_path(path: str) -> str:
        file_path = Path(path)
        stem = file_path.name.split(".")[0]
        if stem == "index" and file_path.parent.name:
            return file_path.parent.name
        return stem

    # Returned expression

    def returned_expression(self, parsed: ParsedSource, function: Node) -> Node | None:
        """The element-like expression the function returns.

        Prefers a return statement directly in the function body (the
        component's main render) over early returns nested in blocks.
        """
        body = function.child_by_field_name("body")
        if body is None:
            return None
        if body.type != "statement_block":
            return body if is_element_like(parsed, body) else None

        top_level = None
        for statement in body.named_children:
            if statement.type == "return_statement":
                argument = self._return_argument(statement)
                if is_element_like(parsed, argument):
                    top_level = argument
        if top_level is not None:
            return top_level

        for statement in self._nested_returns(body):
            argument = self._return_argument(statement)
            if is_element_like(parsed, argument):
                return argument
        return None

    @staticmethod
    def _return_argument(statement: Node) -> Node | None:
        arguments = [child for child in statement.named_children if child.type != "comment"]
        return arguments[0] if arguments else None

    @staticmethod
    def _nested_returns(body: Node) -> list[Node]:
        """Return statements of this function, skipping nested functions."""
        found: list[Node] = []
        stack = list(reversed(body.named_children))
        while stack:
            node = stack.pop()
            if node.type == "return_statement":
                found.append(node)
                continue
            if node.type in FUNCTION_TYPES or node.type in ("class_declaration", "class"):
                continue
            stack.extend(reversed(node.named_children))
        return found

    # Dependencies

    def dependencies(self, parsed: ParsedSource, returned: Node | None) -> list[str]:
        """Local imports referenced inside the returned expression, sorted."""
        if returned is None:
            return []
        local_imports = self.local_imports(parsed)
        if not local_imports:
            return []
        referenced = {
            parsed.text(node)
            for node in parsed.walk(returned)
            if node.type == "identifier"
        }
        return sorted(name for name in local_imports if name in referenced)

    def local_imports(self, parsed: ParsedSource) -> dict[str, str]:
        """Map of locally bound import names to their module specifier."""
        imports: dict[str, str] = {}
        for statement in parsed.root.named_children:
            if statement.type != "import_statement":
                continue
            if any(child.type == "type" for child in statement.children):
                continue
            source_node = statement.child_by_field_name("source")
            if source_node is None:
                continue
            source = string_value(parsed, source_node)
            if not source.startswith(self.local_import_prefixes):
                continue
            for clause in statement.named_children:
                if clause.type != "import_clause":
                    continue
                for name in self._bound_names(parsed, clause):
                    imports[name] = source
        return imports

    @staticmethod
    def _bound_names(parsed: ParsedSource, clause: Node) -> list[str]:
        names: list[str] = []
        for child in clause.named_children:
            if child.type == "identifier":
                names.append(parsed.text(child))
            elif child.type == "namespace_import":
                names.extend(parsed.text(n) for n in child.named_children if n.type == "identifier")
            elif child.type == "named_imports":
                for specifier in child.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    if any(token.type == "type" for token in specifier.children):
                        continue
                    bound = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                    if bound is not None:
                        names.append(parsed.text(bound))
        return names
