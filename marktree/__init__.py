"""Lossless conversion between nested-mark and flat-mark document trees."""

from marktree.config import Settings, get_settings
from marktree.definitions import Definition, DefinitionTable
from marktree.exceptions import (
    ConversionDepthError,
    ConversionError,
    InvalidNodeError,
    MalformedMarkupError,
    SchemaError,
    StructuralAssertionError,
    UnknownNodeTypeError,
)
from marktree.from_flat import FlatLeaf, FromFlatState, from_flat, from_flat_mark, from_flat_node, partition_runs
from marktree.models import Mark, Node, ReferenceType
from marktree.parser import parse_markdown
from marktree.schema import NodeSpec, Schema
from marktree.to_flat import ToFlatState, to_flat, to_flat_mark, to_flat_node

__all__ = [
    # Conversion
    "to_flat",
    "to_flat_node",
    "to_flat_mark",
    "ToFlatState",
    "from_flat",
    "from_flat_node",
    "from_flat_mark",
    "FromFlatState",
    "FlatLeaf",
    "partition_runs",
    # Parser
    "parse_markdown",
    # Models
    "Node",
    "Mark",
    "ReferenceType",
    "Schema",
    "NodeSpec",
    "Definition",
    "DefinitionTable",
    # Config
    "Settings",
    "get_settings",
    # Errors
    "ConversionError",
    "UnknownNodeTypeError",
    "InvalidNodeError",
    "StructuralAssertionError",
    "ConversionDepthError",
    "MalformedMarkupError",
    "SchemaError",
]
