"""Lookup tables owned by a bibliography.

Elements register themselves into a ``BibliographyIndex`` from their
lifecycle hooks; the bibliography only hands the index over and never
writes entry or string mappings itself.
"""

from collections.abc import Iterator, MutableMapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .elements import Entry, Error, StringConstant


class CaseInsensitiveDict(MutableMapping):
    """A dictionary with case-insensitive keys.

    BibTeX macro names are case-insensitive, so ``ACM`` and ``acm``
    refer to the same ``@string``. Keys are stored lower-cased.
    """

    def __init__(self, initial_data=None):
        self._data: dict[str, Any] = {}
        if initial_data:
            for key, value in initial_data.items():
                self[key] = value

    def __setitem__(self, key, value):
        """Set item with case-insensitive key."""
        self._data[key.lower()] = value

    def __getitem__(self, key):
        """Get item with case-insensitive key."""
        return self._data[key.lower()]

    def __delitem__(self, key):
        del self._data[key.lower()]

    def __contains__(self, key):
        """Check if key exists (case-insensitive)."""
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


class BibliographyIndex:
    """Mutable index handle passed to element hooks.

    Attributes:
        entries: Normalized citation key to entry; last registration wins.
        strings: Constant name to string constant, case-insensitive.
        errors: Retained parse errors in the order they were added.
    """

    def __init__(self):
        self.entries: dict[str, "Entry"] = {}
        self.strings: CaseInsensitiveDict = CaseInsensitiveDict()
        self.errors: list["Error"] = []

    def register_entry(self, entry: "Entry") -> None:
        self.entries[entry.key] = entry

    def unregister_entry(self, entry: "Entry") -> None:
        """Remove the mapping for ``entry`` if it still points to it."""
        if self.entries.get(entry.key) is entry:
            del self.entries[entry.key]

    def register_string(self, constant: "StringConstant") -> None:
        self.strings[constant.name] = constant

    def unregister_string(self, constant: "StringConstant") -> None:
        if self.strings.get(constant.name) is constant:
            del self.strings[constant.name]

    def register_error(self, error: "Error") -> None:
        self.errors.append(error)

    def clear(self) -> None:
        """Drop entry and string mappings; errors are kept."""
        self.entries.clear()
        self.strings.clear()
