"""Index of link and footnote definitions in a nested-mark tree."""

from collections.abc import Iterator
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from marktree.models import Node

DEFINITION = "definition"
FOOTNOTE_DEFINITION = "footnoteDefinition"


def normalize_identifier(identifier: Any) -> str:
    return str(identifier).upper()


class Definition(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    label: str | None = None
    url: str = ""
    title: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_node(cls, node: Node) -> "Definition":
        return cls(
            identifier=normalize_identifier(node.attrs.get("identifier", "")),
            label=node.attrs.get("label"),
            url=node.attrs.get("url") or "",
            title=node.attrs.get("title"),
            data=node.attrs.get("data") or {},
        )


def walk(root: Node) -> Iterator[Node]:
    """Yield every node of the tree in pre-order, without recursion."""
    stack: list[Any] = [root]
    while stack:
        node = stack.pop()
        if not isinstance(node, Node):
            continue
        yield node
        if node.children:
            stack.extend(reversed(node.children))


class DefinitionTable:
    """Definitions found in one tree, built once per conversion.

    On duplicate identifiers the first definition in document order wins,
    matching CommonMark link reference definitions.
    """

    def __init__(self) -> None:
        self.definitions: dict[str, Definition] = {}
        self.footnotes: dict[str, Node] = {}
        self.footnote_counts: dict[str, int] = {}
        self.footnote_order: list[str] = []

    @classmethod
    def from_tree(cls, root: Node) -> "DefinitionTable":
        table = cls()
        for node in walk(root):
            if node.type == DEFINITION:
                table._add_definition(node)
            elif node.type == FOOTNOTE_DEFINITION:
                table._add_footnote(node)
        return table

    def _add_definition(self, node: Node) -> None:
        definition = Definition.from_node(node)
        if definition.identifier in self.definitions:
            logger.debug(f"Ignoring duplicate definition {definition.identifier!r}")
            return
        self.definitions[definition.identifier] = definition

    def _add_footnote(self, node: Node) -> None:
        id_ = normalize_identifier(node.attrs.get("identifier", ""))
        if id_ in self.footnotes:
            logger.debug(f"Ignoring duplicate footnote definition {id_!r}")
            return
        self.footnotes[id_] = node

    def definition(self, identifier: Any) -> Definition | None:
        return self.definitions.get(normalize_identifier(identifier))

    def footnote(self, identifier: Any) -> Node | None:
        return self.footnotes.get(normalize_identifier(identifier))

    def use_footnote(self, identifier: Any) -> tuple[int, int]:
        """Record one use of a footnote.

        Returns (index, count): the 1-based position of the footnote in
        first-use order and how many times it has been referenced so far.
        """
        id_ = normalize_identifier(identifier)
        if id_ not in self.footnote_counts:
            self.footnote_order.append(id_)
        count = self.footnote_counts.get(id_, 0) + 1
        self.footnote_counts[id_] = count
        return self.footnote_order.index(id_) + 1, count
