"""Tests for mapping markdown-it output onto nested-mark nodes."""

from marktree.models import Node
from marktree.parser import get_parser, parse_markdown

# === HELPER FUNCTIONS ===


def first_block(markdown: str) -> Node:
    return parse_markdown(markdown).first_child


def inline(markdown: str) -> list[Node]:
    """Children of the first paragraph."""
    return first_block(markdown).children


class TestBlocks:
    def test_root(self):
        root = parse_markdown("one\n\ntwo")
        assert root.type == "root"
        assert [child.type for child in root.children] == ["paragraph", "paragraph"]

    def test_empty(self):
        assert parse_markdown("") == Node(type="root", children=[])

    def test_heading_depth(self):
        heading = first_block("### Third")
        assert heading.type == "heading"
        assert heading.attrs == {"depth": 3}
        assert heading.text_content == "Third"

    def test_blockquote(self):
        quote = first_block("> quoted")
        assert quote.type == "blockquote"
        assert quote.first_child.type == "paragraph"

    def test_bullet_list(self):
        lst = first_block("- a\n- b")
        assert lst.attrs == {"ordered": False, "start": None}
        assert [item.type for item in lst.children] == ["listItem", "listItem"]
        assert lst.children[1].text_content == "b"

    def test_ordered_list_start(self):
        assert first_block("1. a").attrs == {"ordered": True, "start": 1}
        assert first_block("7. a").attrs == {"ordered": True, "start": 7}

    def test_fenced_code(self):
        code = first_block("```js\nlet x = 1;\n```")
        assert code == Node(type="code", attrs={"lang": "js"}, value="let x = 1;")

    def test_indented_code(self):
        code = first_block("    indented")
        assert code.type == "code"
        assert code.attrs == {"lang": None}
        assert code.value == "indented"

    def test_thematic_break(self):
        assert first_block("***") == Node(type="thematicBreak")

    def test_math_block(self):
        assert first_block("$$\na + b\n$$") == Node(type="math", value="a + b")

    def test_html_block(self):
        assert first_block("<div>hi</div>\n") == Node(type="html", value="<div>hi</div>")

    def test_table(self):
        table = first_block("| a | b | c |\n|:-:|---|--:|\n| 1 | 2 | 3 |")
        assert table.type == "table"
        assert table.attrs == {"align": ["center", None, "right"]}
        assert [row.type for row in table.children] == ["tableRow", "tableRow"]
        assert [cell.text_content for cell in table.children[1].children] == ["1", "2", "3"]


class TestInline:
    def test_text_merged_across_soft_breaks(self):
        assert inline("one\ntwo") == [Node(type="text", value="one\ntwo")]

    def test_emphasis_and_strong(self):
        children = inline("*a* **b** ~~c~~")
        assert [child.type for child in children] == ["emphasis", "text", "strong", "text", "delete"]

    def test_hard_break(self):
        children = inline("one\\\ntwo")
        assert [child.type for child in children] == ["text", "break", "text"]

    def test_inline_code(self):
        assert inline("`x`") == [Node(type="inlineCode", value="x")]

    def test_inline_math(self):
        assert inline("$e^x$") == [Node(type="inlineMath", value="e^x")]

    def test_link(self):
        link = inline("[go](https://go.dev)")[0]
        assert link.attrs == {"url": "https://go.dev", "title": None}
        assert link.children == [Node(type="text", value="go")]

    def test_image_alt_from_content(self):
        image = inline('![a fancy cat](cat.png "Title")')[0]
        assert image.type == "image"
        assert image.attrs == {"url": "cat.png", "alt": "a fancy cat", "title": "Title"}
        assert image.children is None

    def test_inline_html(self):
        children = inline("a <b>bold</b> move")
        assert [child.type for child in children] == ["text", "html", "text", "html", "text"]
        assert children[1].value == "<b>"


def test_parser_is_singleton():
    assert get_parser() is get_parser()
