"""Pytest configuration and fixtures for CLI tests."""

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    """Click CLI test runner that invokes the bibdoc group by default."""

    class BibdocCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            from bibdoc.cli.main import cli

            if isinstance(args, list):
                return super().invoke(cli, args, **kwargs)
            return super().invoke(args, **kwargs)

    return BibdocCliRunner()


@pytest.fixture
def invalid_entry_file(tmp_path):
    """Bibliography with an article that lacks required fields."""
    path = tmp_path / "invalid.bib"
    path.write_text(
        "@article{draft2024,\n  author = {A. Writer},\n  title = {Draft}\n}\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def config_file(tmp_path):
    """Write a configuration file and return its path."""

    def _write(content: str):
        path = tmp_path / "custom.yaml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write
