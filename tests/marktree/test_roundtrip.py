"""Markdown → flat document → nested tree should give back the parsed tree."""

import pytest

from marktree.models import Node
from marktree.parser import parse_markdown
from marktree.presets import flat_to_markdown_tree, markdown_to_flat


@pytest.mark.parametrize(
    "markdown",
    [
        "This is a document.\n\nIt has two paragraphs.",
        "This *is a **document.***",
        "# Title\n\n> quoted *text*\n\n- one\n- two",
        "1. first\n2. second",
        "3. third\n4. fourth",
        "Run `ls -la` and see [the docs](https://example.com \"Docs\").",
        "```python\nprint('hi')\n```",
        "Before\n\n---\n\nAfter",
        "![A cat](cat.png \"Cat\")",
        "Some ~~old~~ text",
        "Line one  \nLine two",
        "| a | b |\n|:--|--:|\n| 1 | 2 |",
        "Inline $x^2$ math",
        "$$\nE = mc^2\n$$",
    ],
)
def test_roundtrip(markdown):
    tree = parse_markdown(markdown)
    assert flat_to_markdown_tree(markdown_to_flat(markdown)) == tree


def test_mark_order_is_canonicalized():
    # strong outside em flattens to [em, strong], which nests back em-outermost
    tree = flat_to_markdown_tree(markdown_to_flat("**_x_**"))
    assert tree == Node(
        type="root",
        children=[
            Node(
                type="paragraph",
                children=[
                    Node(type="emphasis", children=[Node(type="strong", children=[Node(type="text", value="x")])])
                ],
            )
        ],
    )


def test_flat_document_is_stable():
    doc = markdown_to_flat("A *b* **c** [d](https://d)")
    assert markdown_to_flat("A *b* **c** [d](https://d)") == doc
