"""Field values made of literal text and macro references.

A BibTeX value such as ``"Proc. of " # acm # " conference"`` is an ordered
sequence of fragments: quoted or braced text becomes a ``Literal`` and a
bare word becomes a ``Symbol`` that names an ``@string`` macro.

Key components:
- Literal: Immutable piece of text
- Symbol: Immutable reference to a string constant
- Value: Mutable, ordered sequence of fragments with replace/join passes
"""

from collections.abc import Callable, Iterator

import msgspec

from .exceptions import FragmentTypeError


class Literal(msgspec.Struct, frozen=True, tag=True):
    """Plain text fragment."""

    text: str

    def to_bibtex(self) -> str:
        return f"{{{self.text}}}"


class Symbol(msgspec.Struct, frozen=True, tag=True):
    """Reference to a string constant by name."""

    name: str

    def to_bibtex(self) -> str:
        return self.name


Fragment = Literal | Symbol


class Value:
    """Ordered sequence of literal and symbol fragments.

    Values are mutated in place by ``replace`` and ``join``; they are
    shared with the element that owns them, so a constant that has
    already been resolved hands its resolved fragments to later users.
    """

    def __init__(self, *fragments: "str | Fragment | Value"):
        self.fragments: list[Fragment] = []
        for fragment in fragments:
            if isinstance(fragment, Value):
                self.fragments.extend(fragment.fragments)
            elif isinstance(fragment, str):
                self.fragments.append(Literal(fragment))
            elif isinstance(fragment, Literal | Symbol):
                self.fragments.append(fragment)
            else:
                raise FragmentTypeError(fragment)

    @classmethod
    def coerce(cls, value: "str | Fragment | Value") -> "Value":
        """Return ``value`` itself if it is a Value, otherwise wrap it."""
        if isinstance(value, Value):
            return value
        return cls(value)

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Value):
            return self.fragments == other.fragments
        if isinstance(other, str):
            return self.is_literal() and str(self) == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Value({', '.join(repr(f) for f in self.fragments)})"

    def __str__(self) -> str:
        if self.is_literal():
            return "".join(f.text for f in self.fragments)
        return self.to_bibtex()

    def is_literal(self) -> bool:
        """Check whether the value contains no symbols."""
        return all(isinstance(f, Literal) for f in self.fragments)

    def is_atomic(self) -> bool:
        """Check whether the value consists of at most one fragment."""
        return len(self.fragments) <= 1

    @property
    def symbols(self) -> list[str]:
        """Names of all symbols referenced by this value, in order."""
        return [f.name for f in self.fragments if isinstance(f, Symbol)]

    def replace(self, lookup: Callable[[str], "Value | None"]) -> "Value":
        """Substitute every resolvable symbol with the fragments of its value.

        Args:
            lookup: Returns the current value of a constant, or None when
                the name is not defined.

        Returns:
            This value, for chaining.
        """
        result: list[Fragment] = []
        for fragment in self.fragments:
            if isinstance(fragment, Symbol):
                value = lookup(fragment.name)
                if value is not None:
                    result.extend(value.fragments)
                    continue
            result.append(fragment)
        self.fragments = result
        return self

    def join(self) -> "Value":
        """Merge adjacent literal fragments into one.

        A fully resolved value collapses into a single literal; any
        symbols that are left keep their position.
        """
        result: list[Fragment] = []
        for fragment in self.fragments:
            if (
                isinstance(fragment, Literal)
                and result
                and isinstance(result[-1], Literal)
            ):
                result[-1] = Literal(result[-1].text + fragment.text)
            else:
                result.append(fragment)
        self.fragments = result
        return self

    def to_bibtex(self) -> str:
        """Render the value as BibTeX source."""
        if not self.fragments:
            return "{}"
        return " # ".join(f.to_bibtex() for f in self.fragments)
