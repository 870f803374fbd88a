"""Reading BibTeX source into bibliographies."""

from bibdoc.storage.parser import (
    BibtexParser,
    BibtexScanner,
    ParseError,
    ParserOptions,
)

__all__ = [
    "BibtexParser",
    "BibtexScanner",
    "ParseError",
    "ParserOptions",
]
