"""Node catalogue and canonical mark order for flat-mark trees."""

from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, Field

from marktree.exceptions import SchemaError
from marktree.models import Mark, Node


class NodeSpec(BaseModel):
    inline: bool = False
    leaf: bool = False  # no children (text, images, breaks)


class Schema(BaseModel):
    """Describes the node and mark types a flat-mark tree may contain.

    The position of a mark type in `marks` is its rank: marks on a leaf are
    always kept sorted by rank, whatever order they were applied in.
    """

    nodes: dict[str, NodeSpec]
    marks: list[str] = Field(default_factory=list)
    top_node: str = "doc"
    text_node: str = "text"

    def spec(self, node_type: str) -> NodeSpec:
        try:
            return self.nodes[node_type]
        except KeyError:
            raise SchemaError(f"Schema has no node type {node_type!r}") from None

    def is_inline(self, node: Node) -> bool:
        if node.type == self.text_node:
            return True
        spec = self.nodes.get(node.type)
        return spec is not None and spec.inline

    def mark_rank(self, mark_type: str) -> int:
        try:
            return self.marks.index(mark_type)
        except ValueError:
            raise SchemaError(f"Schema has no mark type {mark_type!r}") from None

    # === FACTORIES ===

    def mark(self, mark_type: str, attrs: dict[str, Any] | None = None) -> Mark:
        self.mark_rank(mark_type)
        return Mark(type=mark_type, attrs=attrs or {})

    def text(self, value: str, marks: Iterable[Mark] = ()) -> Node:
        if not value:
            raise SchemaError("Empty text nodes are not allowed")
        return Node(type=self.text_node, value=value, marks=list(marks))

    def node(
        self,
        node_type: str,
        attrs: dict[str, Any] | None = None,
        children: Sequence[Node] | None = None,
        marks: Iterable[Mark] = (),
    ) -> Node:
        """Create a non-text node. Leaf types ignore `children`."""
        if node_type == self.text_node:
            raise SchemaError("Use Schema.text() to create text nodes")
        spec = self.spec(node_type)
        content = None if spec.leaf else _join_text(children or [])
        return Node(type=node_type, attrs=attrs or {}, children=content, marks=list(marks))

    # === MARK SETS ===

    def add_mark_to_set(self, mark: Mark, marks: Sequence[Mark]) -> list[Mark]:
        """Return `marks` with `mark` added at its rank.

        An equal mark already in the set leaves it unchanged; a mark of the
        same type with different attrs is replaced.
        """
        rank = self.mark_rank(mark.type)
        result: list[Mark] = []
        placed = False
        for other in marks:
            if other == mark:
                return list(marks)
            if other.type == mark.type:
                continue
            if not placed and self.mark_rank(other.type) > rank:
                result.append(mark)
                placed = True
            result.append(other)
        if not placed:
            result.append(mark)
        return result

    def add_mark(self, node: Node, mark: Mark) -> Node:
        return node.model_copy(update={"marks": self.add_mark_to_set(mark, node.marks)})


def _join_text(children: Sequence[Node]) -> list[Node]:
    """Merge adjacent text leaves that carry the same marks."""
    joined: list[Node] = []
    for child in children:
        prev = joined[-1] if joined else None
        if (
            prev is not None
            and prev.value is not None
            and child.value is not None
            and prev.type == child.type
            and prev.marks == child.marks
        ):
            joined[-1] = prev.model_copy(update={"value": prev.value + child.value})
        else:
            joined.append(child)
    return joined
