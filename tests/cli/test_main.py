"""Tests for main CLI entry point and commands.

This module tests:
- Global options, version and help
- Configuration loading errors
- convert in every output format
- check exit codes and reports
- show for present and missing keys
"""

import json
from xml.etree import ElementTree

import yaml

from bibdoc.cli.main import render, setup_logging
from bibdoc.core.bibliography import Bibliography


class TestCLIEntryPoint:
    """Test the main CLI entry point."""

    def test_help_flag(self, cli_runner):
        result = cli_runner.invoke(["--help"])

        assert result.exit_code == 0
        assert "BibTeX document tool" in result.output
        assert "convert" in result.output

    def test_version_flag(self, cli_runner):
        result = cli_runner.invoke(["--version"])

        assert result.exit_code == 0
        assert "bibdoc version 0.1.0" in result.output

    def test_invalid_config_file(self, cli_runner, config_file, bib_file):
        bad_config = config_file("invalid: yaml: content:")

        args = ["--config", str(bad_config), "check", str(bib_file)]
        result = cli_runner.invoke(args)

        assert result.exit_code == 1
        assert "Error loading configuration" in result.output

    def test_invalid_parser_option(self, cli_runner, config_file, bib_file):
        bad_config = config_file("parser:\n  strict: sometimes\n")

        args = ["--config", str(bad_config), "check", str(bib_file)]
        result = cli_runner.invoke(args)

        assert result.exit_code == 1
        assert "Invalid parser configuration" in result.output

    def test_missing_source(self, cli_runner, tmp_path):
        result = cli_runner.invoke(["convert", str(tmp_path / "nope.bib")])

        assert result.exit_code == 2
        assert "does not exist" in result.output


class TestConvertCommand:
    """Test the convert command."""

    def test_bibtex_round_trip(self, cli_runner, bib_file):
        result = cli_runner.invoke(["convert", str(bib_file)])

        assert result.exit_code == 0
        assert result.output == Bibliography.open(bib_file).to_s()

    def test_json(self, cli_runner, bib_file):
        result = cli_runner.invoke(["convert", str(bib_file), "-f", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [item["key"] for item in data] == [
            "smith2024neural",
            "knuth1984tex",
            "lee2023attention",
        ]
        assert data[0]["type"] == "article"

    def test_yaml(self, cli_runner, bib_file):
        result = cli_runner.invoke(["convert", str(bib_file), "--format", "yaml"])

        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data[1]["title"] == "The {TeX}book"

    def test_xml(self, cli_runner, bib_file):
        result = cli_runner.invoke(["convert", str(bib_file), "-f", "xml"])

        assert result.exit_code == 0
        root = ElementTree.fromstring(result.output.encode("utf-8"))
        assert root.tag == "bibliography"
        assert [child.get("key") for child in root] == [
            "smith2024neural",
            "knuth1984tex",
            "lee2023attention",
        ]

    def test_format_from_config(self, cli_runner, config_file, bib_file):
        config = config_file("format: json\n")

        result = cli_runner.invoke(["--config", str(config), "convert", str(bib_file)])

        assert result.exit_code == 0
        assert json.loads(result.output)[0]["key"] == "smith2024neural"

    def test_format_from_environment(self, cli_runner, bib_file, monkeypatch):
        monkeypatch.setenv("BIBDOC_FORMAT", "yaml")

        result = cli_runner.invoke(["convert", str(bib_file)])

        assert result.exit_code == 0
        assert yaml.safe_load(result.output)[0]["key"] == "smith2024neural"

    def test_replace_and_join(self, cli_runner, bib_file):
        result = cli_runner.invoke(
            [
                "convert",
                str(bib_file),
                "-f",
                "json",
                "--replace-strings",
                "--join-strings",
            ]
        )

        assert result.exit_code == 0
        data = {item["key"]: item for item in json.loads(result.output)}
        assert data["knuth1984tex"]["publisher"] == "ACM Press"
        assert data["lee2023attention"]["booktitle"] == "ACM Press SIG Proceedings"

    def test_unresolved_symbols_stay_bibtex(self, cli_runner, bib_file):
        result = cli_runner.invoke(["convert", str(bib_file), "-f", "json"])

        data = {item["key"]: item for item in json.loads(result.output)}
        assert data["knuth1984tex"]["publisher"] == "ACM"
        assert data["lee2023attention"]["booktitle"] == "acmsig # { Proceedings}"

    def test_output_file(self, cli_runner, bib_file, tmp_path):
        target = tmp_path / "out.bib"

        result = cli_runner.invoke(
            ["convert", str(bib_file), "--replace-strings", "-o", str(target)]
        )

        assert result.exit_code == 0
        assert "Wrote" in result.output
        text = target.read_text(encoding="utf-8")
        assert "publisher = {ACM Press}" in text

    def test_malformed_source_is_retained(self, cli_runner, malformed_bib_file):
        result = cli_runner.invoke(["convert", str(malformed_bib_file)])

        assert result.exit_code == 0
        assert "@article{missing_comma," in result.output

    def test_strict_environment_fails(
        self, cli_runner, malformed_bib_file, monkeypatch
    ):
        monkeypatch.setenv("BIBDOC_STRICT", "1")

        result = cli_runner.invoke(["convert", str(malformed_bib_file)])

        assert result.exit_code == 1
        assert "Line 10" in result.output


class TestCheckCommand:
    """Test the check command."""

    def test_valid_bibliography(self, cli_runner, bib_file):
        result = cli_runner.invoke(["check", str(bib_file)])

        assert result.exit_code == 0
        assert "3 entries, 2 strings, 0 errors" in result.output
        assert "Bibliography is valid" in result.output

    def test_parse_errors(self, cli_runner, malformed_bib_file):
        result = cli_runner.invoke(["check", str(malformed_bib_file)])

        assert result.exit_code == 1
        assert "Parse errors" in result.output
        assert "Expected comma or closing delimiter" in result.output
        assert "2 entries, 0 strings, 1 errors" in result.output
        assert "Bibliography is not valid" in result.output

    def test_invalid_entries(self, cli_runner, invalid_entry_file):
        result = cli_runner.invoke(["check", str(invalid_entry_file)])

        assert result.exit_code == 1
        assert "Invalid entries" in result.output
        assert "draft2024" in result.output
        assert "journal, year" in result.output


class TestShowCommand:
    """Test the show command."""

    def test_show_entry(self, cli_runner, bib_file):
        result = cli_runner.invoke(["show", str(bib_file), "knuth1984tex"])

        assert result.exit_code == 0
        assert result.output.startswith("@book{knuth1984tex,\n")
        assert "  publisher = ACM" in result.output

    def test_show_missing_entry(self, cli_runner, bib_file):
        result = cli_runner.invoke(["show", str(bib_file), "nobody2000"])

        assert result.exit_code == 1
        assert "Entry not found" in result.output


class TestHelpers:
    """Test module level helpers."""

    def test_render_bibtex(self, sample_bibtex):
        bibliography = Bibliography.parse(sample_bibtex)

        assert render(bibliography, "bibtex") == bibliography.to_s()

    def test_render_json_ends_with_newline(self, sample_bibtex):
        assert render(Bibliography.parse(sample_bibtex), "json").endswith("]\n")

    def test_setup_logging_does_not_raise(self):
        setup_logging(verbose=True)
        setup_logging(quiet=True)
