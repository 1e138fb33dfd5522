"""Tests for the definition table built before nested → flat conversion."""

from marktree.definitions import DefinitionTable, walk
from marktree.models import Node


def definition(identifier: str, url: str, **attrs) -> Node:
    return Node(type="definition", attrs={"identifier": identifier, "url": url, **attrs})


def footnote_definition(identifier: str, text: str) -> Node:
    return Node(
        type="footnoteDefinition",
        attrs={"identifier": identifier},
        children=[Node(type="paragraph", children=[Node(type="text", value=text)])],
    )


class TestDefinitionTable:
    def test_lookup_is_case_insensitive(self):
        root = Node(type="root", children=[definition("Docs", "https://docs")])
        table = DefinitionTable.from_tree(root)
        assert table.definition("docs").url == "https://docs"
        assert table.definition("DOCS").url == "https://docs"

    def test_first_definition_wins(self):
        root = Node(
            type="root",
            children=[definition("docs", "https://first"), definition("DOCS", "https://second")],
        )
        table = DefinitionTable.from_tree(root)
        assert table.definition("docs").url == "https://first"

    def test_first_in_document_order_wins_across_depth(self):
        quote = Node(type="blockquote", children=[definition("x", "https://nested")])
        root = Node(type="root", children=[quote, definition("x", "https://later")])
        assert DefinitionTable.from_tree(root).definition("x").url == "https://nested"

    def test_link_and_footnote_tables_are_separate(self):
        root = Node(type="root", children=[definition("1", "https://link"), footnote_definition("1", "Note")])
        table = DefinitionTable.from_tree(root)
        assert table.definition("1").url == "https://link"
        assert table.footnote("1").text_content == "Note"

    def test_missing(self):
        table = DefinitionTable.from_tree(Node(type="root", children=[]))
        assert table.definition("nope") is None
        assert table.footnote("nope") is None

    def test_definition_data_kept(self):
        root = Node(type="root", children=[definition("d", "https://d", title="T", data={"k": 1})])
        found = DefinitionTable.from_tree(root).definition("d")
        assert found.title == "T"
        assert found.data == {"k": 1}


class TestFootnoteUsage:
    def test_index_follows_first_use(self):
        table = DefinitionTable()
        assert table.use_footnote("b") == (1, 1)
        assert table.use_footnote("a") == (2, 1)
        assert table.use_footnote("B") == (1, 2)
        assert table.footnote_order == ["B", "A"]
        assert table.footnote_counts == {"B": 2, "A": 1}


def test_walk_is_preorder():
    root = Node(
        type="root",
        children=[
            Node(type="paragraph", children=[Node(type="text", value="a")]),
            Node(type="text", value="b"),
        ],
    )
    assert [n.value or n.type for n in walk(root)] == ["root", "paragraph", "a", "b"]
