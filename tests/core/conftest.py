"""Shared fixtures for core module tests."""

import pytest

from bibdoc.core.bibliography import Bibliography
from bibdoc.core.elements import (
    Comment,
    Entry,
    MetaComment,
    Preamble,
    StringConstant,
)
from bibdoc.core.values import Symbol, Value


@pytest.fixture
def article() -> Entry:
    """A complete, valid article."""
    return Entry(
        "article",
        "knuth1984",
        {
            "author": "Donald E. Knuth",
            "title": "The {TeX}book",
            "journal": "Computers & Typesetting",
            "year": "1984",
        },
    )


@pytest.fixture
def incomplete_article() -> Entry:
    """An article without journal and year."""
    return Entry("article", "draft2024", {"author": "A. Writer", "title": "Draft"})


@pytest.fixture
def world_string() -> StringConstant:
    return StringConstant("W", Value("World"))


@pytest.fixture
def hello_entry() -> Entry:
    """Entry whose title references the ``W`` constant."""
    return Entry("misc", "hello", {"title": Value("Hello, ", Symbol("W"))})


@pytest.fixture
def mixed_bibliography(article, world_string, hello_entry) -> Bibliography:
    """Bibliography with one element of every kind, in a known order."""
    return Bibliography(
        [
            MetaComment("% generated"),
            world_string,
            Preamble(Value("\\providecommand{\\url}[1]{#1}")),
            article,
            Comment("first comment"),
            hello_entry,
            Comment("second comment"),
        ]
    )
