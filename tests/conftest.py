"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and configuration for each test.

    Configuration is looked up in the working directory and in
    XDG_CONFIG_HOME, so both point into a fresh temporary directory.
    """
    original_env = os.environ.copy()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("BIBDOC_FORMAT", raising=False)
    monkeypatch.delenv("BIBDOC_STRICT", raising=False)
    monkeypatch.chdir(tmp_path)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def sample_bibtex() -> str:
    """Sample BibTeX content for testing."""
    return """\
% Sample bibliography
@string{ACM = "ACM Press"}
@string{acmsig = ACM # " SIG"}

@preamble{ "\\newcommand{\\noop}[1]{}" }

@article{smith2024neural,
    author = {John Smith and Jane Doe},
    title = {Neural Networks for {NLP}},
    journal = {Machine Learning Review},
    year = 2024,
    volume = {42},
    pages = {123--145}
}

@book{knuth1984tex,
    author = {Donald E. Knuth},
    title = {The {TeX}book},
    publisher = ACM,
    year = {1984}
}

@comment{This is a block comment}

@inproceedings{lee2023attention,
    author = "Lee, S. and Park, K.",
    title = "Attention is All You Need: " # "Revisited",
    booktitle = acmsig # " Proceedings",
    year = 2023
}
"""


@pytest.fixture
def malformed_bibtex() -> str:
    """BibTeX with one broken object between two good ones."""
    return """\
@article{good1,
    author = "Good Author",
    title = "Good Title",
    journal = "Journal",
    year = 2024
}

@article{missing_comma,
    author = "Missing Comma"
    title = "No Comma Between Fields"
}

@article{good2,
    author = "Another Good",
    title = "Should Parse",
    journal = "Journal",
    year = 2024
}
"""


@pytest.fixture
def bib_file(tmp_path, sample_bibtex):
    """Sample bibliography written to disk."""
    path = tmp_path / "sample.bib"
    path.write_text(sample_bibtex, encoding="utf-8")
    return path


@pytest.fixture
def malformed_bib_file(tmp_path, malformed_bibtex):
    """Malformed bibliography written to disk."""
    path = tmp_path / "malformed.bib"
    path.write_text(malformed_bibtex, encoding="utf-8")
    return path
