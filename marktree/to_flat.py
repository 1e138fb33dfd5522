"""Convert a nested-mark (mdast-shaped) tree into a flat-mark tree.

Wrapper nodes registered with `to_flat_mark` become marks on every leaf they
contain. Marks in scope travel down the recursion as an immutable
accumulator on the state, and are merged into each converted leaf on the way
back up using the schema's canonical mark order.
"""

import copy
import re
import sys
from collections.abc import Mapping

from loguru import logger

from marktree.config import Settings, get_settings
from marktree.definitions import DEFINITION, FOOTNOTE_DEFINITION, DefinitionTable
from marktree.dispatch import AttrsGetter, DepthGuard, Dispatcher, NodeHandler, NodeResult, as_nodes
from marktree.exceptions import ConversionDepthError, MalformedMarkupError, StructuralAssertionError
from marktree.models import Mark, Node, ReferenceType
from marktree.raw_html import parse_element
from marktree.schema import Schema

IGNORED_TYPES = frozenset({DEFINITION, FOOTNOTE_DEFINITION, "yaml", "toml"})

_LINE_ENDING = re.compile(r"[ \t]*(\r?\n|\r)[ \t]*")
_SINGLE_NEWLINE = re.compile(r"\n([^\n])")


def trim_lines(value: str) -> str:
    """Remove spaces and tabs around line endings."""
    return _LINE_ENDING.sub(r"\1", value)


def replace_newlines(value: str) -> str:
    return _SINGLE_NEWLINE.sub(r" \1", value)


def trim_markdown_space_start(value: str) -> str:
    return value.lstrip(" \t")


class ToFlatState:
    """Conversion state for one nested → flat call.

    Handlers receive this object and recurse with `one`/`all`. `marks` holds
    the marks of every enclosing wrapper, in canonical order.
    """

    def __init__(
        self,
        schema: Schema,
        handlers: Mapping[str, NodeHandler],
        html_handlers: Mapping[str, NodeHandler],
        definitions: DefinitionTable,
        settings: Settings,
    ):
        self.schema = schema
        self.definitions = definitions
        self.settings = settings
        self.marks: tuple[Mark, ...] = ()
        self._dispatch = Dispatcher(handlers, _DEFAULT_HANDLERS, IGNORED_TYPES)
        self._html_dispatch = Dispatcher(html_handlers)
        self._guard = DepthGuard(settings.max_depth)

    def with_mark(self, mark: Mark) -> "ToFlatState":
        """Derived state with `mark` added to the accumulator."""
        derived = copy.copy(self)
        derived.marks = tuple(self.schema.add_mark_to_set(mark, self.marks))
        return derived

    def text(self, value: str) -> Node:
        """Text leaf carrying the marks currently in scope."""
        return self.schema.text(value, self.marks)

    def one(self, node: Node, parent: Node | None = None) -> NodeResult:
        with self._guard.descend():
            return self._dispatch(node, parent, self)

    def all(self, parent: Node) -> list[Node]:
        values: list[Node] = []
        children = parent.children or []
        for index, child in enumerate(children):
            result = self.one(child, parent)
            if result is None:
                continue
            nodes = as_nodes(result)
            prev = children[index - 1] if index else None
            if isinstance(prev, Node) and prev.type == "break":
                nodes = self._trim_after_break(nodes)
            values.extend(nodes)
        return values

    def handle_html(self, element: Node, parent: Node | None) -> NodeResult:
        handler = self._html_dispatch.lookup(element.attrs["tag_name"])
        if handler is None:
            return None
        return handler(element, parent, self)

    def _trim_after_break(self, nodes: list[Node]) -> list[Node]:
        if not nodes:
            return nodes
        result, rest = nodes[0], nodes[1:]
        if result.type == self.schema.text_node:
            value = trim_markdown_space_start(result.value or "")
            return [result.model_copy(update={"value": value}), *rest] if value else rest

        head = result.first_child
        if head is None or head.type != self.schema.text_node:
            return nodes
        value = trim_markdown_space_start(head.value or "")
        children = result.children[1:]
        if value:
            children = [head.model_copy(update={"value": value}), *children]
        return [result.model_copy(update={"children": children}), *rest]


# === DEFAULT HANDLERS ===


def _root(node: Node, parent: Node | None, state: ToFlatState) -> Node:
    schema = state.schema
    children = state.all(node)
    for child in children:
        if child.type == schema.top_node or schema.is_inline(child):
            raise StructuralAssertionError(
                f"Expected block content in {schema.top_node!r}, got {child.type!r}"
            )
    return schema.node(schema.top_node, children=children)


def _text(node: Node, parent: Node | None, state: ToFlatState) -> Node | None:
    value = replace_newlines(trim_lines(node.value or ""))
    return state.text(value) if value else None


def convert_html(node: Node, parent: Node | None, state: ToFlatState) -> NodeResult:
    """Bridge an embedded HTML node through the HTML handlers, or emit it as text."""
    value = node.value or ""
    if not value:
        return None
    try:
        element = parse_element(value, state.settings.html_parser)
    except MalformedMarkupError:
        logger.debug(f"Embedding raw HTML as text: {value!r}")
        return state.text(value)
    result = state.handle_html(element, parent)
    if result is not None:
        return result
    return state.text(value)


def _merged_data(definition_data: dict, node: Node) -> dict:
    return {**definition_data, **(node.attrs.get("data") or {})}


def _reference_suffix(node: Node) -> str:
    reference_type = node.attrs.get("referenceType", ReferenceType.SHORTCUT)
    if reference_type == ReferenceType.COLLAPSED:
        return "][]"
    if reference_type == ReferenceType.FULL:
        return "][" + str(node.attrs.get("label") or node.attrs.get("identifier", "")) + "]"
    return "]"


def revert(node: Node, state: ToFlatState) -> list[Node]:
    """Rebuild the literal bracket syntax of an unresolved reference."""
    suffix = _reference_suffix(node)

    if node.type == "imageReference":
        return [state.text("![" + str(node.attrs.get("alt") or "") + suffix)]

    contents = state.all(node)
    text_node = state.schema.text_node

    head = contents[0] if contents else None
    if head is not None and head.type == text_node and tuple(head.marks) == state.marks:
        contents[0] = head.model_copy(update={"value": "[" + (head.value or "")})
    else:
        contents.insert(0, state.text("["))

    tail = contents[-1]
    if tail.type == text_node and tuple(tail.marks) == state.marks:
        contents[-1] = tail.model_copy(update={"value": (tail.value or "") + suffix})
    else:
        contents.append(state.text(suffix))

    return contents


def _link_reference(node: Node, parent: Node | None, state: ToFlatState) -> NodeResult:
    definition = state.definitions.definition(node.attrs.get("identifier", ""))
    if definition is None:
        return revert(node, state)
    link = Node(
        type="link",
        attrs={
            "url": definition.url,
            "title": definition.title,
            "data": _merged_data(definition.data, node),
        },
        children=node.children or [],
    )
    return state.one(link, parent)


def _image_reference(node: Node, parent: Node | None, state: ToFlatState) -> NodeResult:
    definition = state.definitions.definition(node.attrs.get("identifier", ""))
    if definition is None:
        return revert(node, state)
    image = Node(
        type="image",
        attrs={
            "url": definition.url,
            "title": definition.title,
            "alt": node.attrs.get("alt"),
            "data": _merged_data(definition.data, node),
        },
    )
    return state.one(image, parent)


def _footnote_reference(node: Node, parent: Node | None, state: ToFlatState) -> NodeResult:
    identifier = node.attrs.get("identifier", "")
    definition = state.definitions.footnote(identifier)
    if definition is None:
        return state.text("[^" + str(node.attrs.get("label") or identifier) + "]")

    index, count = state.definitions.use_footnote(identifier)
    footnote = Node(
        type="footnote",
        attrs={
            "identifier": identifier,
            "label": node.attrs.get("label"),
            "index": index,
            "count": count,
            "data": _merged_data(definition.attrs.get("data") or {}, node),
        },
        children=definition.children or [],
    )
    return state.one(footnote, parent)


_DEFAULT_HANDLERS: dict[str, NodeHandler] = {
    "root": _root,
    "text": _text,
    "html": convert_html,
    "linkReference": _link_reference,
    "imageReference": _image_reference,
    "footnoteReference": _footnote_reference,
}


# === HANDLER FACTORIES ===


def to_flat_node(node_type: str, get_attrs: AttrsGetter | None = None) -> NodeHandler:
    """Handler that builds a schema node of `node_type` over the converted children."""

    def handler(node: Node, parent: Node | None, state: ToFlatState) -> Node:
        children = state.all(node)
        attrs = get_attrs(node) if get_attrs else None
        return state.schema.node(node_type, attrs, children)

    return handler


def to_flat_mark(mark_type: str, get_attrs: AttrsGetter | None = None) -> NodeHandler:
    """Handler that turns a wrapper node into a mark on every converted child."""

    def handler(node: Node, parent: Node | None, state: ToFlatState) -> list[Node]:
        attrs = get_attrs(node) if get_attrs else None
        mark = state.schema.mark(mark_type, attrs)
        children = state.with_mark(mark).all(node)
        return [state.schema.add_mark(child, mark) for child in children]

    return handler


def to_flat(
    tree: Node,
    schema: Schema,
    handlers: Mapping[str, NodeHandler],
    html_handlers: Mapping[str, NodeHandler] | None = None,
    settings: Settings | None = None,
) -> Node:
    """Convert a nested-mark tree into a flat-mark document.

    Args:
        tree: Root of the nested-mark tree
        schema: Catalogue of the destination node and mark types
        handlers: Node handlers keyed by source node type
        html_handlers: Handlers for embedded HTML, keyed by tag name
        settings: Conversion settings, defaults to `get_settings()`

    Returns:
        The top node of the flat-mark document
    """
    settings = settings or get_settings()
    definitions = DefinitionTable.from_tree(tree) if isinstance(tree, Node) else DefinitionTable()
    state = ToFlatState(schema, handlers, html_handlers or {}, definitions, settings)

    try:
        result = as_nodes(state.one(tree))
    except RecursionError as e:
        raise ConversionDepthError(
            settings.max_depth or sys.getrecursionlimit(),
            message="Tree nesting exceeds the interpreter recursion limit",
        ) from e
    if len(result) != 1 or result[0].type != schema.top_node:
        raise StructuralAssertionError(f"Expected a single {schema.top_node!r} node from the root handler")
    logger.debug(
        f"Converted tree to flat {schema.top_node!r} with {len(result[0].children or [])} top-level nodes"
    )
    return result[0]
