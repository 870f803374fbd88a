"""Command line interface for bibdoc.

Built with Click and Rich.
"""

from bibdoc.cli.main import cli

__all__ = ["cli"]
