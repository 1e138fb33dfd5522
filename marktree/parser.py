"""Markdown parsing using markdown-it-py.

Configures markdown-it with the plugins we need:
- CommonMark base
- GFM tables and strikethrough
- Dollar math ($inline$ and $$display$$)

and maps its syntax tree onto mdast-shaped nested-mark nodes.
"""

from loguru import logger
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.dollarmath import dollarmath_plugin

from marktree.models import Node


def create_parser() -> MarkdownIt:
    """Create configured markdown-it parser."""
    md = MarkdownIt("commonmark")
    md.enable("table")
    md.enable("strikethrough")
    dollarmath_plugin(md)
    return md


# Singleton parser instance
_parser: MarkdownIt | None = None


def get_parser() -> MarkdownIt:
    """Get or create the singleton parser instance."""
    global _parser
    if _parser is None:
        _parser = create_parser()
    return _parser


def parse_markdown(text: str) -> Node:
    """Parse markdown text into a nested-mark tree.

    Args:
        text: Markdown text to parse

    Returns:
        Node of type "root"
    """
    parser = get_parser()
    tokens = parser.parse(text)
    return Node(type="root", children=_convert_children(SyntaxTreeNode(tokens)))


# Wrapper types whose children convert one-to-one
_CONTAINERS = {
    "paragraph": "paragraph",
    "blockquote": "blockquote",
    "list_item": "listItem",
    "tr": "tableRow",
    "th": "tableCell",
    "td": "tableCell",
    "em": "emphasis",
    "strong": "strong",
    "s": "delete",
}


def _convert_children(node: SyntaxTreeNode) -> list[Node]:
    converted: list[Node] = []
    for child in node.children:
        if child.type == "inline":
            converted.extend(_convert_children(child))
        else:
            converted.extend(_convert_node(child))
    return _merge_text(converted)


def _merge_text(nodes: list[Node]) -> list[Node]:
    """Join adjacent text nodes (markdown-it splits text at soft breaks)."""
    merged: list[Node] = []
    for node in nodes:
        if merged and node.type == "text" and merged[-1].type == "text":
            merged[-1] = Node(type="text", value=(merged[-1].value or "") + (node.value or ""))
        else:
            merged.append(node)
    return merged


def _convert_node(node: SyntaxTreeNode) -> list[Node]:
    if node.type in _CONTAINERS:
        return [Node(type=_CONTAINERS[node.type], children=_convert_children(node))]

    if node.type == "heading":
        return [Node(type="heading", attrs={"depth": int(node.tag[1])}, children=_convert_children(node))]
    elif node.type in ("bullet_list", "ordered_list"):
        ordered = node.type == "ordered_list"
        start = int(node.attrs.get("start", 1)) if ordered else None
        return [
            Node(type="list", attrs={"ordered": ordered, "start": start}, children=_convert_children(node))
        ]
    elif node.type in ("fence", "code_block"):
        info = (node.info or "").strip()
        lang = info.split()[0] if info else None
        return [Node(type="code", attrs={"lang": lang}, value=(node.content or "").rstrip("\n"))]
    elif node.type == "hr":
        return [Node(type="thematicBreak")]
    elif node.type in ("html_block", "html_inline"):
        return [Node(type="html", value=(node.content or "").rstrip("\n"))]
    elif node.type == "math_block":
        return [Node(type="math", value=(node.content or "").strip())]
    elif node.type == "math_inline":
        return [Node(type="inlineMath", value=node.content or "")]
    elif node.type == "table":
        return [_convert_table(node)]
    elif node.type == "text":
        return [Node(type="text", value=node.content or "")]
    elif node.type == "softbreak":
        return [Node(type="text", value="\n")]
    elif node.type == "hardbreak":
        return [Node(type="break")]
    elif node.type == "code_inline":
        return [Node(type="inlineCode", value=node.content or "")]
    elif node.type == "link":
        title = node.attrs.get("title")
        return [
            Node(
                type="link",
                attrs={"url": str(node.attrs.get("href", "")), "title": str(title) if title else None},
                children=_convert_children(node),
            )
        ]
    elif node.type == "image":
        # Alt text is in node.content, not attrs['alt']
        title = node.attrs.get("title")
        return [
            Node(
                type="image",
                attrs={
                    "url": str(node.attrs.get("src", "")),
                    "alt": node.content or "",
                    "title": str(title) if title else None,
                },
            )
        ]

    logger.debug(f"Unmapped markdown-it node {node.type!r}")
    if node.content:
        return [Node(type="text", value=node.content)]
    return []


def _convert_table(node: SyntaxTreeNode) -> Node:
    rows: list[Node] = []
    align: list[str | None] = []
    for section in node.children:  # thead, tbody
        for tr in section.children:
            if section.type == "thead":
                align = [_cell_align(th) for th in tr.children]
            rows.extend(_convert_node(tr))
    return Node(type="table", attrs={"align": align}, children=rows)


def _cell_align(cell: SyntaxTreeNode) -> str | None:
    style = str(cell.attrs.get("style", ""))
    if style.startswith("text-align:"):
        return style.removeprefix("text-align:")
    return None
