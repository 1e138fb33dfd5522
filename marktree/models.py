"""Data models shared by both tree shapes.

A nested-mark tree (mdast-shaped) expresses formatting as wrapper nodes; a
flat-mark tree (ProseMirror-shaped) attaches an ordered list of marks to each
leaf. Both use the same `Node` model: nested trees simply leave `marks` empty.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ReferenceType(StrEnum):
    SHORTCUT = "shortcut"
    COLLAPSED = "collapsed"
    FULL = "full"


class Mark(BaseModel):
    """A formatting annotation. Equal when type and attrs are structurally equal."""

    model_config = ConfigDict(frozen=True)

    type: str
    attrs: dict[str, Any] = Field(default_factory=dict)


class Node(BaseModel):
    type: str
    attrs: dict[str, Any] = Field(default_factory=dict)
    children: list["Node"] | None = None
    value: str | None = None  # text-like leaves only
    marks: list[Mark] = Field(default_factory=list)  # flat-mark trees only

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def text_content(self) -> str:
        """Concatenated text of this node and all its descendants."""
        if self.value is not None:
            return self.value
        if not self.children:
            return ""
        return "".join(child.text_content for child in self.children)

    @property
    def first_child(self) -> "Node | None":
        return self.children[0] if self.children else None

    @property
    def last_child(self) -> "Node | None":
        return self.children[-1] if self.children else None


Node.model_rebuild()
