"""Core document model: values, elements and the bibliography container."""

# Values
from bibdoc.core.values import (
    Fragment,
    Literal,
    Symbol,
    Value,
)

# Elements
from bibdoc.core.elements import (
    Comment,
    Element,
    Entry,
    Error,
    MetaComment,
    Preamble,
    Replaceable,
    StringConstant,
    normalize_key,
)

# Container
from bibdoc.core.bibliography import Bibliography
from bibdoc.core.index import BibliographyIndex, CaseInsensitiveDict

# Fields and entry types
from bibdoc.core.fields import EntryType, FieldRequirements

# Errors
from bibdoc.core.exceptions import (
    BibliographyError,
    ElementTypeError,
    FragmentTypeError,
)

__all__ = [
    # Values
    "Fragment",
    "Literal",
    "Symbol",
    "Value",
    # Elements
    "Element",
    "Replaceable",
    "Entry",
    "StringConstant",
    "Preamble",
    "Comment",
    "MetaComment",
    "Error",
    "normalize_key",
    # Container
    "Bibliography",
    "BibliographyIndex",
    "CaseInsensitiveDict",
    # Fields and types
    "EntryType",
    "FieldRequirements",
    # Errors
    "BibliographyError",
    "ElementTypeError",
    "FragmentTypeError",
]
