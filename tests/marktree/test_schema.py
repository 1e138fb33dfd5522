"""Tests for mark equality and the schema's canonical mark order."""

import pytest

from marktree.exceptions import SchemaError
from marktree.models import Mark, Node
from marktree.presets import basic_schema as schema


class TestMarkEquality:
    def test_attrs_order_does_not_matter(self):
        a = Mark(type="link", attrs={"href": "https://a", "title": None})
        b = Mark(type="link", attrs={"title": None, "href": "https://a"})
        assert a == b

    def test_nested_attrs_compared_deeply(self):
        a = Mark(type="link", attrs={"data": {"x": [1, 2]}})
        assert a == Mark(type="link", attrs={"data": {"x": [1, 2]}})
        assert a != Mark(type="link", attrs={"data": {"x": [2, 1]}})

    def test_type_matters(self):
        assert Mark(type="em") != Mark(type="strong")


class TestAddMarkToSet:
    def test_sorted_by_rank_regardless_of_insertion_order(self):
        em, strong = schema.mark("em"), schema.mark("strong")
        assert schema.add_mark_to_set(em, [strong]) == [em, strong]
        assert schema.add_mark_to_set(strong, [em]) == [em, strong]

    def test_equal_mark_is_noop(self):
        em = schema.mark("em")
        assert schema.add_mark_to_set(schema.mark("em"), [em]) == [em]

    def test_same_type_replaced(self):
        old = schema.mark("link", {"href": "a"})
        new = schema.mark("link", {"href": "b"})
        em = schema.mark("em")
        assert schema.add_mark_to_set(new, [old, em]) == [new, em]

    def test_unknown_mark_type(self):
        with pytest.raises(SchemaError):
            schema.mark("underline")


class TestNodeFactories:
    def test_empty_text_rejected(self):
        with pytest.raises(SchemaError):
            schema.text("")

    def test_unknown_node_type(self):
        with pytest.raises(SchemaError):
            schema.node("aside")

    def test_leaf_has_no_children(self):
        assert schema.node("hard_break").children is None
        assert schema.node("paragraph").children == []

    def test_adjacent_text_with_same_marks_joined(self):
        em = schema.mark("em")
        para = schema.node(
            "paragraph",
            children=[schema.text("a"), schema.text("b"), schema.text("c", [em]), schema.text("d", [em])],
        )
        assert [(c.value, c.marks) for c in para.children] == [("ab", []), ("cd", [em])]

    def test_text_content(self):
        para = Node(type="paragraph", children=[schema.text("one "), schema.node("hard_break"), schema.text("two")])
        assert para.text_content == "one two"
