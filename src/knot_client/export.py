"""Example documents and text rendering for parameter trees."""

from collections.abc import Sequence
from typing import Any

from knot_client.i18n import Translator
from knot_client.models import ParameterNode
from knot_client.tree import iter_nodes

PRIMITIVES = ("string", "number", "boolean")


def generate_example_json(nodes: Sequence[ParameterNode]) -> dict[str, Any]:
    """Build an example JSON object whose keys mirror the parameter tree."""
    return {node.name: _example_value(node) for node in nodes}


def _example_value(node: ParameterNode) -> Any:
    if node.type in PRIMITIVES:
        return _primitive_value(node)
    if node.type == "object":
        return generate_example_json(node.children) if node.children else {}
    if node.type == "array":
        if not node.children:
            return []
        # A single primitive child describes the item type of the array
        if len(node.children) == 1 and node.children[0].type in PRIMITIVES:
            return [_primitive_value(node.children[0])]
        return [generate_example_json(node.children)]
    return None


def _primitive_value(node: ParameterNode) -> Any:
    if node.type == "string":
        return node.description or "string"
    if node.type == "number":
        return 0
    return False


def format_parameter_tree(nodes: Sequence[ParameterNode], translator: Translator) -> list[str]:
    """Render a parameter forest as indented lines, one per parameter."""
    if not nodes:
        return [translator("param.noParameters")]

    lines = []
    for node, depth in iter_nodes(nodes):
        prefix = " " * (depth * 4) + ("└─ " if depth else "")
        label = translator("param.required" if node.required else "param.optional")
        lines.append(f"{prefix}{node.name}  {node.type}  {label}  {node.description or '-'}")
    return lines
