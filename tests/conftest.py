import pytest

from marktree.config import Settings
from marktree.schema import NodeSpec, Schema


@pytest.fixture
def settings() -> Settings:
    return Settings(max_depth=100, html_parser="html.parser")


@pytest.fixture
def note_schema() -> Schema:
    """Small schema with an inline footnote marker, for reference tests."""
    return Schema(
        nodes={
            "doc": NodeSpec(),
            "paragraph": NodeSpec(),
            "text": NodeSpec(inline=True, leaf=True),
            "footnote_ref": NodeSpec(inline=True, leaf=True),
        },
        marks=["link", "em"],
    )
