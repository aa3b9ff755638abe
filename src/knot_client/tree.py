"""Flat parameter list -> request/response parameter trees.

The backend stores parameters flat, each with an optional ``parent_id``.
``build_parameter_trees`` partitions them by category and links every node
under its parent in a single pass. Anything that cannot be placed is
reported in ``dropped`` together with the reason, never raised.
"""

import logging
from collections.abc import Iterable, Iterator

from knot_client.models import DroppedParameter, KnotModel, Parameter, ParameterNode

logger = logging.getLogger(__name__)

CATEGORIES = ("request", "response")


class ParameterTrees(KnotModel):
    request: list[ParameterNode] = []
    response: list[ParameterNode] = []
    dropped: list[DroppedParameter] = []


def build_parameter_trees(parameters: Iterable[Parameter]) -> ParameterTrees:
    """Build the request and response forests for one API's parameters.

    Root and child order follow input order. Input records are not modified;
    every call allocates fresh nodes.
    """
    buckets: dict[str, list[Parameter]] = {category: [] for category in CATEGORIES}
    dropped: list[DroppedParameter] = []

    for param in parameters:
        if param.param_type in buckets:
            buckets[param.param_type].append(param)
        else:
            dropped.append(DroppedParameter(parameter=param, reason="unknown_category"))

    request = _build_forest(buckets["request"], dropped)
    response = _build_forest(buckets["response"], dropped)

    for item in dropped:
        logger.debug(
            "Dropped parameter %s (%s): %s", item.parameter.id, item.parameter.name, item.reason
        )
    return ParameterTrees(request=request, response=response, dropped=dropped)


def _build_forest(params: list[Parameter], dropped: list[DroppedParameter]) -> list[ParameterNode]:
    nodes: dict[int, ParameterNode] = {}
    placed: list[Parameter] = []
    for param in params:
        if param.id in nodes:
            dropped.append(DroppedParameter(parameter=param, reason="duplicate_id"))
            continue
        nodes[param.id] = ParameterNode(**param.model_dump(include=set(Parameter.model_fields)))
        placed.append(param)

    roots: list[ParameterNode] = []
    linked: list[Parameter] = []
    for param in placed:
        node = nodes[param.id]
        if param.parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(param.parent_id)
        if parent is None:
            dropped.append(DroppedParameter(parameter=param, reason="dangling_parent"))
            continue
        parent.children.append(node)
        linked.append(param)

    reached = {node.id for node, _ in iter_nodes(roots)}
    parents = {param.id: param.parent_id for param in placed}
    for param in linked:
        if param.id in reached:
            continue
        reason = "cycle" if _leads_to_cycle(param.id, parents) else "orphaned_ancestor"
        dropped.append(DroppedParameter(parameter=param, reason=reason))

    return roots


def _leads_to_cycle(param_id: int, parents: dict[int, int | None]) -> bool:
    """Follow parent links upwards; True if the chain comes back on itself.

    A chain that ends instead (at an id outside ``parents``) sits under a
    dangling ancestor.
    """
    seen: set[int] = set()
    current: int | None = param_id
    while current is not None and current in parents:
        if current in seen:
            return True
        seen.add(current)
        current = parents[current]
    return False


def iter_nodes(forest: Iterable[ParameterNode]) -> Iterator[tuple[ParameterNode, int]]:
    """Yield ``(node, depth)`` depth-first, pre-order.

    A node that is reached a second time is skipped along with its subtree,
    so malformed forests containing cycles still terminate.
    """
    seen: set[int] = set()
    stack = [(node, 0) for node in reversed(list(forest))]
    while stack:
        node, depth = stack.pop()
        if id(node) in seen:
            logger.debug("Skipping revisited parameter node %s", node.id)
            continue
        seen.add(id(node))
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(node.children))


def count_nodes(forest: Iterable[ParameterNode]) -> int:
    return sum(1 for _ in iter_nodes(forest))
