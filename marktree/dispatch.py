"""Type-tag dispatch shared by both conversion directions."""

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from marktree.exceptions import ConversionDepthError, InvalidNodeError, UnknownNodeTypeError
from marktree.models import Mark, Node

# A handler may return one node, any (nested) list of nodes, or nothing
NodeResult = Node | list[Any] | None


NodeHandler = Callable[[Node, Node | None, Any], NodeResult]
MarkHandler = Callable[[Mark, Node, list[Node], Any], NodeResult]
AttrsGetter = Callable[[Any], dict[str, Any] | None]


def as_nodes(result: NodeResult) -> list[Node]:
    """Flatten a handler result into a list of nodes, dropping empty results."""
    if result is None:
        return []
    if not isinstance(result, list):
        return [result]
    nodes: list[Node] = []
    for item in result:
        nodes.extend(as_nodes(item))
    return nodes


class Dispatcher:
    """Maps node type tags to handlers.

    Caller handlers win over built-in defaults; types in `ignored` convert to
    nothing unless a handler claims them; anything else is an error.
    """

    def __init__(
        self,
        handlers: Mapping[str, NodeHandler],
        defaults: Mapping[str, NodeHandler] | None = None,
        ignored: frozenset[str] = frozenset(),
    ):
        self.handlers = dict(handlers)
        self.defaults = dict(defaults or {})
        self.ignored = ignored

    def lookup(self, node_type: str) -> NodeHandler | None:
        return self.handlers.get(node_type) or self.defaults.get(node_type)

    def __call__(self, node: Any, parent: Node | None, state: Any) -> NodeResult:
        if not isinstance(node, Node):
            raise InvalidNodeError(node)

        handler = self.lookup(node.type)
        if handler is not None:
            return handler(node, parent, state)

        if node.type in self.ignored:
            return None

        raise UnknownNodeTypeError(node.type)


class DepthGuard:
    """Counts active `one` calls for a single conversion."""

    def __init__(self, limit: int | None):
        self.limit = limit
        self.depth = 0

    @contextmanager
    def descend(self) -> Iterator[None]:
        self.depth += 1
        try:
            if self.limit is not None and self.depth > self.limit:
                raise ConversionDepthError(self.limit)
            yield
        finally:
            self.depth -= 1
