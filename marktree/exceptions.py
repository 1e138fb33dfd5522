from typing import Any


class ConversionError(Exception):
    """Base exception for all tree conversion errors."""

    def __init__(self, message: str):
        super().__init__(message)


class UnknownNodeTypeError(ConversionError):
    """Raised when a node type has no handler and no built-in default."""

    def __init__(self, node_type: str, *, message: str | None = None):
        super().__init__(message or f"Unknown node type {node_type!r}")
        self.node_type = node_type


class InvalidNodeError(ConversionError):
    """Raised when a tree position holds something other than a Node."""

    def __init__(self, value: Any, *, message: str | None = None):
        super().__init__(message or f"Expected node, not {value!r}")
        self.value = value


class StructuralAssertionError(ConversionError):
    """Raised when a converted root does not have the shape the destination model expects."""


class ConversionDepthError(ConversionError):
    """Raised when the input tree nests deeper than the configured limit."""

    def __init__(self, limit: int, *, message: str | None = None):
        super().__init__(message or f"Tree nesting exceeds max depth {limit}")
        self.limit = limit


class MalformedMarkupError(ConversionError):
    """Raised when embedded raw markup cannot be turned into an element.

    Always recovered by the HTML bridge, which emits the raw text instead.
    """

    def __init__(self, value: str, *, message: str | None = None):
        super().__init__(message or f"Could not parse embedded markup {value!r}")
        self.value = value


class SchemaError(ConversionError, ValueError):
    """Raised for node or mark types the schema does not define, or invalid node content."""
