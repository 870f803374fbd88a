"""Document elements a bibliography is made of.

Every object in a ``.bib`` file becomes one element: regular entries,
``@string`` constants, ``@preamble`` and ``@comment`` blocks, free text
between objects and, when the parser could not make sense of an object,
a retained ``Error``. The variant set is closed; the bibliography filters
elements by their exact class.

Elements that own values (entries, constants and preambles) also
implement ``Replaceable``, the capability used by string resolution.

Each element keeps a weak reference to the bibliography it belongs to.
The bibliography sets and clears it through the ``added_to_bibliography``
and ``removed_from_bibliography`` hooks, which also register the element
in the index handle they receive.
"""

import re
import weakref
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree

from .fields import FieldRequirements
from .index import BibliographyIndex
from .values import Fragment, Value

if TYPE_CHECKING:
    from .bibliography import Bibliography

# Entry types and field names usable as XML tag names as they are
XML_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_.-]*\Z")


def normalize_key(key: Any) -> str:
    """Normalize a citation key for index lookups."""
    return str(key).strip()


@dataclass
class Element:
    """Base class for everything a bibliography can contain."""

    _bibliography: weakref.ref | None = field(
        default=None, init=False, repr=False, compare=False
    )

    @property
    def bibliography(self) -> "Bibliography | None":
        """The bibliography this element is attached to, if it is still alive."""
        if self._bibliography is None:
            return None
        return self._bibliography()

    def added_to_bibliography(
        self, bibliography: "Bibliography", index: BibliographyIndex
    ) -> "Element":
        """Attach to ``bibliography`` and return the element to store.

        An element attached elsewhere is first detached from its previous
        bibliography so that it is indexed by one bibliography at a time.
        """
        current = self.bibliography
        if current is not None and current is not bibliography:
            current.detach(self)
        self._bibliography = weakref.ref(bibliography)
        return self

    def removed_from_bibliography(
        self, bibliography: "Bibliography", index: BibliographyIndex
    ) -> "Element":
        self._bibliography = None
        return self

    def to_s(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_s()


class Replaceable:
    """Capability of elements whose values may reference string constants."""

    def resolvable_values(self) -> Iterable[Value]:
        raise NotImplementedError

    def replace(self, strings: Mapping[str, "StringConstant"]) -> "Replaceable":
        """Replace symbols defined in ``strings`` with their current values."""

        def lookup(name: str) -> Value | None:
            constant = strings.get(name)
            return constant.value if constant is not None else None

        for value in self.resolvable_values():
            value.replace(lookup)
        return self

    def join(self) -> "Replaceable":
        """Merge adjacent literal fragments of every value."""
        for value in self.resolvable_values():
            value.join()
        return self


@dataclass(repr=False)
class Entry(Replaceable, Element):
    """Bibliography entry such as ``@article{key, ...}``.

    Field names are normalized to lower case and keep their insertion
    order. Plain strings assigned to fields are wrapped into values.
    """

    type: str = "misc"
    key: str = ""
    fields: dict[str, Value] = field(default_factory=dict)

    def __post_init__(self):
        self.type = self.type.lower()
        self.key = normalize_key(self.key)
        self.fields = {
            name.lower(): Value.coerce(value) for name, value in self.fields.items()
        }

    def __repr__(self) -> str:
        return f"Entry(type={self.type!r}, key={self.key!r}, fields={self.fields!r})"

    def __getitem__(self, name: str) -> Value:
        return self.fields[name.lower()]

    def __setitem__(self, name: str, value: "str | Fragment | Value") -> None:
        self.fields[name.lower()] = Value.coerce(value)

    def __delitem__(self, name: str) -> None:
        del self.fields[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def get(self, name: str, default: Value | None = None) -> Value | None:
        return self.fields.get(name.lower(), default)

    def missing_fields(self) -> list[str]:
        """Required fields (or alternatives such as ``author|editor``) not set."""
        return FieldRequirements.missing(self.type, self.fields)

    def valid(self) -> bool:
        """Check that every field required by the entry type is present."""
        return not self.missing_fields()

    def resolvable_values(self) -> Iterable[Value]:
        return self.fields.values()

    def added_to_bibliography(
        self, bibliography: "Bibliography", index: BibliographyIndex
    ) -> "Entry":
        super().added_to_bibliography(bibliography, index)
        index.register_entry(self)
        return self

    def removed_from_bibliography(
        self, bibliography: "Bibliography", index: BibliographyIndex
    ) -> "Entry":
        index.unregister_entry(self)
        super().removed_from_bibliography(bibliography, index)
        return self

    def to_s(self) -> str:
        lines = [
            f"  {name} = {value.to_bibtex()}" for name, value in self.fields.items()
        ]
        body = ",\n".join(lines)
        if body:
            return f"@{self.type}{{{self.key},\n{body}\n}}\n"
        return f"@{self.type}{{{self.key},\n}}\n"

    def to_hash(self) -> dict[str, str]:
        """Convert to a flat dictionary of strings."""
        data = {"key": self.key, "type": self.type}
        for name, value in self.fields.items():
            data[name] = str(value)
        return data

    def to_xml(self) -> ElementTree.Element:
        """Convert to an XML element named after the entry type.

        Types and field names that are not valid XML names fall back to
        ``<entry type="...">`` and ``<field name="...">``.
        """
        if XML_NAME.match(self.type):
            element = ElementTree.Element(self.type, {"key": self.key})
        else:
            element = ElementTree.Element("entry", {"type": self.type, "key": self.key})
        for name, value in self.fields.items():
            if XML_NAME.match(name):
                child = ElementTree.SubElement(element, name)
            else:
                child = ElementTree.SubElement(element, "field", {"name": name})
            child.text = str(value)
        return element


@dataclass(repr=False)
class StringConstant(Replaceable, Element):
    """``@string{name = value}`` macro definition."""

    name: str = ""
    value: Value = field(default_factory=Value)

    def __post_init__(self):
        self.name = self.name.strip()
        self.value = Value.coerce(self.value)

    def __repr__(self) -> str:
        return f"StringConstant(name={self.name!r}, value={self.value!r})"

    def resolvable_values(self) -> Iterable[Value]:
        return (self.value,)

    def added_to_bibliography(
        self, bibliography: "Bibliography", index: BibliographyIndex
    ) -> "StringConstant":
        super().added_to_bibliography(bibliography, index)
        index.register_string(self)
        return self

    def removed_from_bibliography(
        self, bibliography: "Bibliography", index: BibliographyIndex
    ) -> "StringConstant":
        index.unregister_string(self)
        super().removed_from_bibliography(bibliography, index)
        return self

    def to_s(self) -> str:
        return f"@string{{ {self.name} = {self.value.to_bibtex()} }}\n"


@dataclass(repr=False)
class Preamble(Replaceable, Element):
    """``@preamble{...}`` block."""

    value: Value = field(default_factory=Value)

    def __post_init__(self):
        self.value = Value.coerce(self.value)

    def __repr__(self) -> str:
        return f"Preamble(value={self.value!r})"

    def resolvable_values(self) -> Iterable[Value]:
        return (self.value,)

    def to_s(self) -> str:
        return f"@preamble{{ {self.value.to_bibtex()} }}\n"


@dataclass(repr=False)
class Comment(Element):
    """``@comment{...}`` block."""

    text: str = ""

    def __repr__(self) -> str:
        return f"Comment(text={self.text!r})"

    def to_s(self) -> str:
        return f"@comment{{{self.text}}}\n"


@dataclass(repr=False)
class MetaComment(Element):
    """Free text between BibTeX objects."""

    text: str = ""

    def __repr__(self) -> str:
        return f"MetaComment(text={self.text!r})"

    def to_s(self) -> str:
        return f"{self.text}\n"


@dataclass(repr=False)
class Error(Element):
    """Source fragment the parser could not understand.

    Errors register themselves in the bibliography's error list. The list
    is append-only: deleting the element leaves the record in place.
    """

    content: str = ""
    message: str = ""
    line: int = 0

    def __repr__(self) -> str:
        return f"Error(line={self.line}, message={self.message!r})"

    def added_to_bibliography(
        self, bibliography: "Bibliography", index: BibliographyIndex
    ) -> "Error":
        super().added_to_bibliography(bibliography, index)
        index.register_error(self)
        return self

    def to_s(self) -> str:
        return f"{self.content}\n"
