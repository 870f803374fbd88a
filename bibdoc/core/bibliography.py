"""In-memory BibTeX bibliography.

A ``Bibliography`` typically corresponds to one ``.bib`` file. It keeps
its elements in source order, which matters: string constants are
resolved in a single pass over that order and ``to_s`` reproduces it.

Entries and string constants are additionally indexed for lookup by key
and name. The index is filled by the elements' own lifecycle hooks; the
bibliography passes its ``BibliographyIndex`` to them on every append
and delete.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree

import msgspec
import yaml

from .elements import (
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
from .exceptions import BibliographyError, ElementTypeError
from .index import BibliographyIndex, CaseInsensitiveDict

if TYPE_CHECKING:
    from bibdoc.storage.parser import ParserOptions

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE: tuple[type[Element], ...] = (StringConstant, Preamble, Entry)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


class Bibliography:
    """Ordered collection of BibTeX elements with key and string indexes."""

    def __init__(
        self,
        data: Element | Iterable[Element] = (),
        path: str | Path | None = None,
    ):
        """Create a bibliography; empty unless ``data`` is given."""
        self.path = Path(path) if path is not None else None
        self.elements: list[Element] = []
        self._index = BibliographyIndex()
        self.add(data)

    @classmethod
    def open(
        cls,
        path: str | Path,
        options: "ParserOptions | None" = None,
        log: logging.Logger | None = None,
    ) -> "Bibliography":
        """Open and parse the ``.bib`` file at ``path``.

        Read errors propagate unchanged. Malformed objects do not raise;
        they are retained in ``errors`` (see ``ParserOptions``).
        """
        log = log or logger
        log.debug("Opening file %s", path)
        with open(path, encoding="utf-8") as f:
            text = f.read()
        bibliography = cls.parse(text, options=options, log=log)
        bibliography.path = Path(path)
        return bibliography

    @classmethod
    def parse(
        cls,
        text: str,
        options: "ParserOptions | None" = None,
        log: logging.Logger | None = None,
    ) -> "Bibliography":
        """Parse BibTeX source text into a new bibliography."""
        from bibdoc.storage.parser import BibtexParser

        return BibtexParser(options, log=log).parse(text)

    @property
    def entries(self) -> dict[str, Entry]:
        return self._index.entries

    @property
    def strings(self) -> CaseInsensitiveDict:
        return self._index.strings

    @property
    def errors(self) -> list[Error]:
        """Objects which could not be parsed, in the order they were found."""
        return self._index.errors

    def add(self, data: Element | Iterable[Element]) -> "Bibliography":
        """Add an element, or an iterable of elements.

        Every item is type-checked before the first one is added.

        Returns:
            The bibliography, for chaining.

        Raises:
            ElementTypeError: If ``data`` is neither an element nor an
                iterable of elements.
        """
        if isinstance(data, Element):
            return self.append(data)

        if isinstance(data, str | bytes) or not isinstance(data, Iterable):
            raise ElementTypeError(data, "Elements or iterables of Elements")

        items = list(data)
        for item in items:
            if not isinstance(item, Element):
                raise ElementTypeError(item)

        for item in items:
            self.append(item)
        return self

    def append(self, obj: Element) -> "Bibliography":
        """Add a single element; the element's hook decides what gets stored."""
        if not isinstance(obj, Element):
            raise ElementTypeError(obj)
        self.elements.append(obj.added_to_bibliography(self, self._index))
        return self

    def delete(self, obj: Element) -> Element | None:
        """Delete the first element equal to ``obj``.

        Returns:
            The removed element, or None if no element matched.
        """
        for position, element in enumerate(self.elements):
            if element == obj:
                del self.elements[position]
                return element.removed_from_bibliography(self, self._index)
        return None

    def detach(self, obj: Element) -> Element | None:
        """Remove ``obj`` itself, not an element equal to it.

        Returns:
            The removed element, or None if ``obj`` is not in this bibliography.
        """
        for position, element in enumerate(self.elements):
            if element is obj:
                del self.elements[position]
                return element.removed_from_bibliography(self, self._index)
        return None

    def delete_all(self) -> None:
        for element in self.elements:
            element.removed_from_bibliography(self, self._index)
        self.elements = []
        self._index.clear()

    def save(self) -> None:
        """Save the bibliography to its current path."""
        if self.path is None:
            raise BibliographyError("Bibliography has no path; use save_to()")
        self.save_to(self.path)

    def save_to(self, path: str | Path) -> None:
        """Write the BibTeX rendering to ``path``, overwriting it."""
        logger.debug("Saving bibliography to %s", path)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_s())
        self.path = Path(path)

    @property
    def preambles(self) -> list[Preamble]:
        return self._find_by_type(Preamble)

    @property
    def comments(self) -> list[Comment]:
        return self._find_by_type(Comment)

    @property
    def meta_comments(self) -> list[MetaComment]:
        """All text outside of BibTeX objects."""
        return self._find_by_type(MetaComment)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def valid(self) -> bool:
        """Check for parse errors and invalid entries.

        Only entries are validated; comments, preambles and other
        elements are ignored.
        """
        return not self.has_errors() and all(
            entry.valid() for entry in self.entries.values()
        )

    def replace_strings(
        self, include: Iterable[type[Element]] | None = None
    ) -> "Bibliography":
        """Replace string constants defined in the bibliography.

        By default constants are replaced in ``@string``, ``@preamble`` and
        entries; ``include`` names other element classes instead. An empty
        ``include`` leaves every element untouched.

        Constants are replaced in the order in which elements occur: a
        constant sees the value another constant has at that point of
        the pass, so only definitions that come first are fully resolved.
        """
        targets = self._find_by_type(DEFAULT_INCLUDE if include is None else include)
        logger.debug("Replacing strings in %d elements", len(targets))
        for element in targets:
            if isinstance(element, Replaceable):
                element.replace(self.strings)
        return self

    def join_strings(
        self, include: Iterable[type[Element]] | None = None
    ) -> "Bibliography":
        """Join the literal fragments of values; see ``replace_strings``."""
        for element in self._find_by_type(
            DEFAULT_INCLUDE if include is None else include
        ):
            if isinstance(element, Replaceable):
                element.join()
        return self

    def empty(self) -> bool:
        return not self.elements

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def __contains__(self, obj: object) -> bool:
        return obj in self.elements

    def __getitem__(self, key: Any) -> Entry | None:
        """Return the entry registered under ``key``, or None."""
        return self.entries.get(normalize_key(key))

    def get(self, key: Any) -> Entry | None:
        return self[key]

    def __repr__(self) -> str:
        return (
            f"Bibliography(elements={len(self.elements)}, "
            f"entries={len(self.entries)}, errors={len(self.errors)})"
        )

    def to_a(self) -> list[Element]:
        """The live list of elements."""
        return self.elements

    def to_s(self) -> str:
        """Render the bibliography as BibTeX source."""
        return "".join(element.to_s() for element in self.elements)

    def __str__(self) -> str:
        return self.to_s()

    def to_hash(self) -> list[dict[str, str]]:
        """Entries as a list of dictionaries; other elements are not exported."""
        return [entry.to_hash() for entry in self.entries.values()]

    def to_json(self) -> str:
        return msgspec.json.encode(self.to_hash()).decode("utf-8")

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.to_hash(),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )

    def to_xml(self) -> str:
        """Render entries as an XML document with a ``bibliography`` root."""
        root = ElementTree.Element("bibliography")
        for entry in self.entries.values():
            root.append(entry.to_xml())
        return XML_DECLARATION + ElementTree.tostring(root, encoding="unicode")

    def _find_by_type(
        self, types: type[Element] | Iterable[type[Element]]
    ) -> list[Any]:
        """Elements whose class is exactly one of ``types``, in order."""
        if isinstance(types, type):
            types = (types,)
        wanted = tuple(types)
        return [element for element in self.elements if type(element) in wanted]

    def _find_entry(self, key: Any) -> Entry | None:
        key = normalize_key(key)
        for entry in self.entries.values():
            if entry.key == key:
                return entry
        return None
