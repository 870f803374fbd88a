"""In-memory BibTeX documents: parse, resolve strings and export."""

from bibdoc.core import (
    Bibliography,
    BibliographyError,
    Comment,
    Element,
    ElementTypeError,
    Entry,
    Error,
    Literal,
    MetaComment,
    Preamble,
    StringConstant,
    Symbol,
    Value,
)

__version__ = "0.1.0"

__all__ = [
    "Bibliography",
    "BibliographyError",
    "Comment",
    "Element",
    "ElementTypeError",
    "Entry",
    "Error",
    "Literal",
    "MetaComment",
    "Preamble",
    "StringConstant",
    "Symbol",
    "Value",
    "__version__",
]
