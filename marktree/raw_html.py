"""Bridge from raw HTML embedded in markdown to handler-driven nodes.

The raw value is parsed with BeautifulSoup and its leading element becomes a
small `element` node tree, dispatched by tag name through the caller's HTML
handlers.
"""

from bs4 import BeautifulSoup, Comment, NavigableString, ParserRejectedMarkup, Tag

from marktree.exceptions import MalformedMarkupError
from marktree.models import Node

ELEMENT = "element"


def _convert(tag: Tag) -> Node:
    children: list[Node] = []
    for child in tag.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, Tag):
            children.append(_convert(child))
        elif isinstance(child, NavigableString) and str(child):
            children.append(Node(type="text", value=str(child)))
    return Node(
        type=ELEMENT,
        attrs={"tag_name": tag.name, "properties": dict(tag.attrs)},
        children=children,
    )


def parse_element(value: str, parser: str = "html.parser") -> Node:
    """Parse `value` and return its leading element as an `element` node.

    Raises:
        MalformedMarkupError: if the markup is rejected or does not start
            with an element.
    """
    try:
        soup = BeautifulSoup(value, parser)
    except ParserRejectedMarkup as e:
        raise MalformedMarkupError(value) from e

    first = next(iter(soup.contents), None)
    if not isinstance(first, Tag):
        raise MalformedMarkupError(value)
    return _convert(first)
