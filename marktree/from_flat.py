"""Convert a flat-mark (ProseMirror-shaped) tree into a nested-mark tree.

Children of each container are grouped into runs of adjacent leaves sharing
the same leading mark. Each run peels that mark into one wrapper node and
recurses over the remaining marks, so formatting shared by neighbours
collapses into a single wrapper.
"""

import sys
from collections.abc import Mapping, Sequence
from typing import NamedTuple

from loguru import logger

from marktree.config import Settings, get_settings
from marktree.dispatch import AttrsGetter, DepthGuard, Dispatcher, MarkHandler, NodeHandler, NodeResult, as_nodes
from marktree.exceptions import ConversionDepthError, StructuralAssertionError
from marktree.models import Mark, Node
from marktree.schema import Schema

ROOT = "root"


class FlatLeaf(NamedTuple):
    node: Node
    marks: tuple[Mark, ...]


def partition_runs(leaves: Sequence[FlatLeaf]) -> list[list[FlatLeaf]]:
    """Split leaves into maximal runs of neighbours that share a leading mark.

    Two adjacent leaves belong to the same run when neither has marks, or
    both have marks and their first marks are equal. Leaves with the same mark
    that are not adjacent never share a run.
    """
    runs: list[list[FlatLeaf]] = []
    for leaf in leaves:
        if runs:
            last = runs[-1][-1]
            if (not leaf.marks and not last.marks) or (
                leaf.marks and last.marks and leaf.marks[0] == last.marks[0]
            ):
                runs[-1].append(leaf)
                continue
        runs.append([leaf])
    return runs


class FromFlatState:
    """Conversion state for one flat → nested call."""

    def __init__(
        self,
        schema: Schema,
        node_handlers: Mapping[str, NodeHandler],
        mark_handlers: Mapping[str, MarkHandler],
        settings: Settings,
    ):
        self.schema = schema
        self.settings = settings
        self.mark_handlers = dict(mark_handlers)
        defaults: dict[str, NodeHandler] = {schema.top_node: _root, schema.text_node: _text}
        self._dispatch = Dispatcher(node_handlers, defaults)
        self._guard = DepthGuard(settings.max_depth)

    def one(self, node: Node, parent: Node | None = None) -> NodeResult:
        with self._guard.descend():
            return self._dispatch(node, parent, self)

    def all(self, parent: Node) -> list[Node]:
        leaves = [
            FlatLeaf(child, tuple(child.marks) if isinstance(child, Node) else ())
            for child in parent.children or []
        ]
        return self.hydrate(leaves, parent)

    def hydrate(self, leaves: Sequence[FlatLeaf], parent: Node) -> list[Node]:
        results: list[Node] = []
        for run in partition_runs(leaves):
            results.extend(as_nodes(self._convert_run(run, parent)))
        return results

    def _convert_run(self, run: list[FlatLeaf], parent: Node) -> NodeResult:
        lead = run[0].marks[0] if run[0].marks else None
        if lead is None:
            return [self.one(leaf.node, parent) for leaf in run]

        children = self.hydrate([FlatLeaf(leaf.node, leaf.marks[1:]) for leaf in run], parent)
        handler = self.mark_handlers.get(lead.type)
        if handler is None:
            logger.debug(f"No handler for mark {lead.type!r}, emitting its content unwrapped")
            return children
        return handler(lead, parent, children, self)


# === DEFAULT HANDLERS ===


def _root(node: Node, parent: Node | None, state: FromFlatState) -> Node:
    children = state.all(node)
    if any(child.type == ROOT for child in children):
        raise StructuralAssertionError("Expected non-root nodes inside the root")
    return Node(type=ROOT, children=children)


def _text(node: Node, parent: Node | None, state: FromFlatState) -> Node:
    return Node(type="text", value=node.value or "")


# === HANDLER FACTORIES ===


def from_flat_node(node_type: str, get_attrs: AttrsGetter | None = None) -> NodeHandler:
    """Handler that builds a nested node of `node_type` over the converted children."""

    def handler(node: Node, parent: Node | None, state: FromFlatState) -> Node:
        attrs = (get_attrs(node) if get_attrs else None) or {}
        children = None if node.is_leaf else state.all(node)
        return Node(type=node_type, attrs=attrs, children=children)

    return handler


def from_flat_mark(node_type: str, get_attrs: AttrsGetter | None = None) -> MarkHandler:
    """Mark handler that wraps the peeled children in a node of `node_type`."""

    def handler(mark: Mark, parent: Node, children: list[Node], state: FromFlatState) -> Node:
        attrs = (get_attrs(mark) if get_attrs else None) or {}
        return Node(type=node_type, attrs=attrs, children=children)

    return handler


def from_flat(
    doc: Node,
    schema: Schema,
    node_handlers: Mapping[str, NodeHandler],
    mark_handlers: Mapping[str, MarkHandler],
    settings: Settings | None = None,
) -> Node:
    """Convert a flat-mark document into a nested-mark tree rooted at `root`."""
    settings = settings or get_settings()
    state = FromFlatState(schema, node_handlers, mark_handlers, settings)
    try:
        result = as_nodes(state.one(doc))
    except RecursionError as e:
        raise ConversionDepthError(
            settings.max_depth or sys.getrecursionlimit(),
            message="Tree nesting exceeds the interpreter recursion limit",
        ) from e
    if len(result) != 1 or result[0].type != ROOT:
        raise StructuralAssertionError("Expected a single 'root' node from the top node handler")
    return result[0]
