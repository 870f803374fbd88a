"""BibTeX entry types and their required fields."""

from collections.abc import Collection
from enum import Enum, unique


@unique
class EntryType(Enum):
    """Standard BibTeX entry types (TameTheBeast section 2.2)."""

    ARTICLE = "article"
    BOOK = "book"
    BOOKLET = "booklet"
    INBOOK = "inbook"
    INCOLLECTION = "incollection"
    INPROCEEDINGS = "inproceedings"
    CONFERENCE = "conference"  # Alias for inproceedings
    MANUAL = "manual"
    MASTERSTHESIS = "mastersthesis"
    MISC = "misc"
    PHDTHESIS = "phdthesis"
    PROCEEDINGS = "proceedings"
    TECHREPORT = "techreport"
    UNPUBLISHED = "unpublished"

    # Modern types
    ONLINE = "online"


class FieldRequirements:
    """Required fields for each entry type.

    Alternatives are written as ``author|editor``: any one of them
    satisfies the requirement. Types not listed here have no
    requirements, so unknown entry types are always valid.
    """

    REQUIRED = {
        EntryType.ARTICLE: ("author", "title", "journal", "year"),
        EntryType.BOOK: ("author|editor", "title", "publisher", "year"),
        EntryType.BOOKLET: ("title",),
        EntryType.INBOOK: (
            "author|editor",
            "title",
            "chapter|pages",
            "publisher",
            "year",
        ),
        EntryType.INCOLLECTION: ("author", "title", "booktitle", "publisher", "year"),
        EntryType.INPROCEEDINGS: ("author", "title", "booktitle", "year"),
        EntryType.MANUAL: ("title",),
        EntryType.MASTERSTHESIS: ("author", "title", "school", "year"),
        EntryType.MISC: (),
        EntryType.PHDTHESIS: ("author", "title", "school", "year"),
        EntryType.PROCEEDINGS: ("title", "year"),
        EntryType.TECHREPORT: ("author", "title", "institution", "year"),
        EntryType.UNPUBLISHED: ("author", "title", "note"),
        EntryType.ONLINE: ("author|editor", "title", "url", "year"),
    }

    @classmethod
    def get_required(cls, entry_type: str) -> tuple[str, ...]:
        """Get the required field specifications for an entry type name."""
        try:
            kind = EntryType(entry_type.lower())
        except ValueError:
            return ()
        # Handle conference as alias for inproceedings
        if kind == EntryType.CONFERENCE:
            kind = EntryType.INPROCEEDINGS
        return cls.REQUIRED.get(kind, ())

    @classmethod
    def missing(cls, entry_type: str, present: Collection[str]) -> list[str]:
        """List the requirements not satisfied by the ``present`` field names."""
        return [
            requirement
            for requirement in cls.get_required(entry_type)
            if not any(name in present for name in requirement.split("|"))
        ]
