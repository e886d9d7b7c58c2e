"""Static evaluation of configuration modules.

Theme and catalog configs are usually JavaScript modules. Instead of
executing them, the exported object literal is evaluated from the syntax
tree: literals, arrays, objects, object spreads and references to
top-level constants are supported. Values that need execution (function
calls, ``require``) are skipped.
"""

import json
from pathlib import Path
from typing import Any

from tree_sitter import Node

from .analysis.parsing import ParsedSource, SourceParser, call_name, literal_value, property_key, unwrap
from .catalog_logging import get_logger
from .errors import ConfigEvaluationError

logger = get_logger()

JS_CONFIG_EXTENSIONS = (".js", ".cjs", ".mjs", ".ts", ".cts", ".mts")
EXPORT_TARGETS = frozenset({"module.exports", "exports.default"})
# Identity wrappers commonly used around config objects.
CONFIG_WRAPPERS = frozenset({"defineConfig", "withTV", "withMT"})
MAX_DEPTH = 64


class UnsupportedValue(ValueError):
    """A value that cannot be evaluated without running code."""


class ConfigModuleEvaluator:
    """Evaluates the exported object of one parsed module."""

    def __init__(self, parsed: ParsedSource):
        self.parsed = parsed
        self.bindings = self._top_level_bindings()

    def _top_level_bindings(self) -> dict[str, Node]:
        bindings: dict[str, Node] = {}
        for statement in self.parsed.root.named_children:
            if statement.type == "export_statement":
                statement = statement.child_by_field_name("declaration") or statement
            if statement.type not in ("lexical_declaration", "variable_declaration"):
                continue
            for declarator in statement.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                value = declarator.child_by_field_name("value")
                if name is not None and name.type == "identifier" and value is not None:
                    bindings[self.parsed.text(name)] = value
        return bindings

    def exported_node(self) -> Node | None:
        for statement in self.parsed.root.named_children:
            if statement.type == "expression_statement" and statement.named_children:
                expression = statement.named_children[0]
                if expression.type == "assignment_expression":
                    left = expression.child_by_field_name("left")
                    if self.parsed.text(left) in EXPORT_TARGETS:
                        return expression.child_by_field_name("right")
            if statement.type == "export_statement":
                value = statement.child_by_field_name("value")
                if value is not None:
                    return value
        return None

    def evaluate_export(self) -> dict[str, Any]:
        """Evaluate the module's exported configuration object.

        Raises:
            ConfigEvaluationError: If there is no export or it is not an object.
        """
        node = self.exported_node()
        if node is None:
            raise ConfigEvaluationError(
                "No 'module.exports' or 'export default' found", config_file=self.parsed.path
            )
        try:
            value = self.evaluate(node)
        except UnsupportedValue as e:
            raise ConfigEvaluationError(
                f"Exported configuration cannot be evaluated statically: {e}",
                config_file=self.parsed.path,
            ) from e
        if not isinstance(value, dict):
            raise ConfigEvaluationError(
                "Exported configuration is not an object", config_file=self.parsed.path
            )
        return value

    def evaluate(self, node: Node | None, depth: int = 0) -> Any:
        node = unwrap(node)
        if node is None:
            raise UnsupportedValue("empty expression")
        if depth > MAX_DEPTH:
            raise UnsupportedValue("nesting too deep")

        kind = node.type
        if kind == "object":
            return self._object(node, depth)
        if kind == "array":
            items = []
            for element in node.named_children:
                if element.type == "comment":
                    continue
                try:
                    items.append(self.evaluate(element, depth + 1))
                except UnsupportedValue as e:
                    logger.debug(f"Skipping array element in {self.parsed.path}: {e}")
            return items
        if kind in ("identifier", "shorthand_property_identifier"):
            name = self.parsed.text(node)
            if name in self.bindings:
                return self.evaluate(self.bindings[name], depth + 1)
            if name == "undefined":
                return None
            raise UnsupportedValue(f"unresolved identifier '{name}'")
        if kind == "call_expression" and call_name(self.parsed, node) in CONFIG_WRAPPERS:
            arguments = node.child_by_field_name("arguments")
            if arguments is not None and arguments.named_children:
                return self.evaluate(arguments.named_children[0], depth + 1)
        try:
            return literal_value(self.parsed, node)
        except ValueError as e:
            raise UnsupportedValue(f"{kind} at line {node.start_point[0] + 1}") from e

    def _object(self, node: Node, depth: int) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for child in node.named_children:
            try:
                if child.type == "pair":
                    key = property_key(self.parsed, child.child_by_field_name("key"))
                    if key is None:
                        raise UnsupportedValue("computed key")
                    result[key] = self.evaluate(child.child_by_field_name("value"), depth + 1)
                elif child.type == "shorthand_property_identifier":
                    result[self.parsed.text(child)] = self.evaluate(child, depth + 1)
                elif child.type == "spread_element":
                    spread = self.evaluate(child.named_children[0], depth + 1)
                    if not isinstance(spread, dict):
                        raise UnsupportedValue("spread of a non-object")
                    result.update(spread)
            except UnsupportedValue as e:
                logger.debug(f"Skipping config entry in {self.parsed.path}: {e}")
        return result


def evaluate_config_source(path: str | Path, content: str | bytes) -> dict[str, Any]:
    """Evaluate the exported object of JavaScript/TypeScript config source."""
    parsed = SourceParser().parse(path, content)
    if parsed.has_errors:
        location = parsed.error_location()
        where = f" at line {location[0]}" if location else ""
        raise ConfigEvaluationError(f"Syntax error{where}", config_file=str(path))
    return ConfigModuleEvaluator(parsed).evaluate_export()


def read_config_value(path: Path) -> dict[str, Any]:
    """Read a JSON or JavaScript configuration file into a dict.

    Raises:
        ConfigEvaluationError: If the file cannot be read or evaluated.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigEvaluationError(f"Cannot read {path}: {e}", config_file=str(path)) from e

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigEvaluationError(f"Invalid JSON: {e}", config_file=str(path)) from e
        if not isinstance(data, dict):
            raise ConfigEvaluationError("Configuration is not an object", config_file=str(path))
        return data

    if path.suffix.lower() in JS_CONFIG_EXTENSIONS:
        return evaluate_config_source(path, content)

    raise ConfigEvaluationError(
        f"Unsupported configuration file type: {path.suffix}", config_file=str(path)
    )
