"""A basic flat-mark schema and handler sets for the nodes `parse_markdown` emits.

Mirrors the usual ProseMirror basic schema (plus lists, tables, strikethrough
and math), so markdown can go to a flat document and back without any
caller-supplied handlers.
"""

from marktree.config import Settings
from marktree.dispatch import MarkHandler, NodeHandler, NodeResult, as_nodes
from marktree.from_flat import FromFlatState, from_flat, from_flat_mark, from_flat_node
from marktree.models import Mark, Node
from marktree.parser import parse_markdown
from marktree.schema import NodeSpec, Schema
from marktree.to_flat import ToFlatState, convert_html, to_flat, to_flat_mark, to_flat_node

basic_schema = Schema(
    nodes={
        "doc": NodeSpec(),
        "paragraph": NodeSpec(),
        "blockquote": NodeSpec(),
        "heading": NodeSpec(),
        "horizontal_rule": NodeSpec(leaf=True),
        "code_block": NodeSpec(),
        "math_block": NodeSpec(),
        "bullet_list": NodeSpec(),
        "ordered_list": NodeSpec(),
        "list_item": NodeSpec(),
        "table": NodeSpec(),
        "table_row": NodeSpec(),
        "table_cell": NodeSpec(),
        "text": NodeSpec(inline=True, leaf=True),
        "image": NodeSpec(inline=True, leaf=True),
        "hard_break": NodeSpec(inline=True, leaf=True),
        "math_inline": NodeSpec(inline=True, leaf=True),
    },
    marks=["link", "em", "strong", "strikethrough", "code"],
)


# === NESTED → FLAT ===


def _code_block(node: Node, parent: Node | None, state: ToFlatState) -> Node:
    children = [state.schema.text(node.value)] if node.value else []
    return state.schema.node("code_block", {"language": node.attrs.get("lang")}, children)


def _math_block(node: Node, parent: Node | None, state: ToFlatState) -> Node:
    children = [state.schema.text(node.value)] if node.value else []
    return state.schema.node("math_block", children=children)


def _inline_code(node: Node, parent: Node | None, state: ToFlatState) -> Node | None:
    if not node.value:
        return None
    code = state.schema.mark("code")
    return state.with_mark(code).text(node.value)


def _inline_math(node: Node, parent: Node | None, state: ToFlatState) -> Node:
    return state.schema.node("math_inline", {"tex": node.value or ""}, marks=state.marks)


def _image(node: Node, parent: Node | None, state: ToFlatState) -> Node:
    attrs = {"src": node.attrs.get("url"), "alt": node.attrs.get("alt"), "title": node.attrs.get("title")}
    return state.schema.node("image", attrs, marks=state.marks)


def _hard_break(node: Node, parent: Node | None, state: ToFlatState) -> Node:
    return state.schema.node("hard_break", marks=state.marks)


def _html(node: Node, parent: Node | None, state: ToFlatState) -> NodeResult:
    # Raw HTML directly under the root may come back as inline content
    result = as_nodes(convert_html(node, parent, state))
    if parent is not None and parent.type == "root" and any(state.schema.is_inline(n) for n in result):
        return state.schema.node("paragraph", children=result)
    return result


def _list(node: Node, parent: Node | None, state: ToFlatState) -> Node:
    children = state.all(node)
    if node.attrs.get("ordered"):
        start = node.attrs.get("start")
        return state.schema.node("ordered_list", {"order": 1 if start is None else start}, children)
    return state.schema.node("bullet_list", children=children)


MARKDOWN_HANDLERS: dict[str, NodeHandler] = {
    "paragraph": to_flat_node("paragraph"),
    "blockquote": to_flat_node("blockquote"),
    "heading": to_flat_node("heading", lambda node: {"level": node.attrs.get("depth", 1)}),
    "thematicBreak": to_flat_node("horizontal_rule"),
    "code": _code_block,
    "math": _math_block,
    "list": _list,
    "listItem": to_flat_node("list_item"),
    "table": to_flat_node("table", lambda node: {"align": node.attrs.get("align", [])}),
    "tableRow": to_flat_node("table_row"),
    "tableCell": to_flat_node("table_cell"),
    "image": _image,
    "break": _hard_break,
    "html": _html,
    "inlineMath": _inline_math,
    "inlineCode": _inline_code,
    "emphasis": to_flat_mark("em"),
    "strong": to_flat_mark("strong"),
    "delete": to_flat_mark("strikethrough"),
    "link": to_flat_mark("link", lambda node: {"href": node.attrs.get("url"), "title": node.attrs.get("title")}),
}


def _html_img(element: Node, parent: Node | None, state: ToFlatState) -> Node:
    props = element.attrs["properties"]
    attrs = {"src": props.get("src"), "alt": props.get("alt"), "title": props.get("title")}
    return state.schema.node("image", attrs, marks=state.marks)


HTML_HANDLERS: dict[str, NodeHandler] = {
    "img": _html_img,
    "br": lambda element, parent, state: state.schema.node("hard_break", marks=state.marks),
}


# === FLAT → NESTED ===


def _code(node: Node, parent: Node | None, state: FromFlatState) -> Node:
    return Node(type="code", attrs={"lang": node.attrs.get("language")}, value=node.text_content)


def _math(node: Node, parent: Node | None, state: FromFlatState) -> Node:
    return Node(type="math", value=node.text_content)


def _inline_code_mark(mark: Mark, parent: Node, children: list[Node], state: FromFlatState) -> list[Node]:
    # inlineCode only holds a string; anything else under the mark stays as it is
    nodes: list[Node] = []
    for child in children:
        if child.type != "text":
            nodes.append(child)
        elif nodes and nodes[-1].type == "inlineCode":
            nodes[-1] = Node(type="inlineCode", value=(nodes[-1].value or "") + (child.value or ""))
        else:
            nodes.append(Node(type="inlineCode", value=child.value or ""))
    return nodes


FLAT_NODE_HANDLERS: dict[str, NodeHandler] = {
    "paragraph": from_flat_node("paragraph"),
    "blockquote": from_flat_node("blockquote"),
    "heading": from_flat_node("heading", lambda node: {"depth": node.attrs.get("level", 1)}),
    "horizontal_rule": from_flat_node("thematicBreak"),
    "code_block": _code,
    "math_block": _math,
    "bullet_list": from_flat_node("list", lambda node: {"ordered": False, "start": None}),
    "ordered_list": from_flat_node("list", lambda node: {"ordered": True, "start": node.attrs.get("order", 1)}),
    "list_item": from_flat_node("listItem"),
    "table": from_flat_node("table", lambda node: {"align": node.attrs.get("align", [])}),
    "table_row": from_flat_node("tableRow"),
    "table_cell": from_flat_node("tableCell"),
    "image": from_flat_node(
        "image",
        lambda node: {"url": node.attrs.get("src"), "alt": node.attrs.get("alt"), "title": node.attrs.get("title")},
    ),
    "hard_break": from_flat_node("break"),
    "math_inline": lambda node, parent, state: Node(type="inlineMath", value=node.attrs.get("tex", "")),
}

FLAT_MARK_HANDLERS: dict[str, MarkHandler] = {
    "em": from_flat_mark("emphasis"),
    "strong": from_flat_mark("strong"),
    "strikethrough": from_flat_mark("delete"),
    "code": _inline_code_mark,
    "link": from_flat_mark("link", lambda mark: {"url": mark.attrs.get("href"), "title": mark.attrs.get("title")}),
}


def markdown_to_flat(text: str, settings: Settings | None = None) -> Node:
    """Parse markdown and convert it to a `basic_schema` document."""
    return to_flat(parse_markdown(text), basic_schema, MARKDOWN_HANDLERS, HTML_HANDLERS, settings=settings)


def flat_to_markdown_tree(doc: Node, settings: Settings | None = None) -> Node:
    """Convert a `basic_schema` document back into an mdast-shaped tree."""
    return from_flat(doc, basic_schema, FLAT_NODE_HANDLERS, FLAT_MARK_HANDLERS, settings=settings)
