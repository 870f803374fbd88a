"""BibTeX parser producing bibliography elements.

Features:
- ``@string``, ``@preamble``, ``@comment`` and regular entries
- Brace or parenthesis delimited objects
- Quoted, braced, numeric and macro values joined with ``#``
- Free text between objects kept as meta comments
- Error recovery: malformed objects are retained as ``Error`` elements

The parser only ever feeds elements to a ``Bibliography`` through ``add``;
indexing is left to the elements' own hooks.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import msgspec

from bibdoc.core.bibliography import Bibliography
from bibdoc.core.elements import (
    Comment,
    Element,
    Entry,
    Error,
    MetaComment,
    Preamble,
    StringConstant,
)
from bibdoc.core.exceptions import BibliographyError
from bibdoc.core.values import Fragment, Literal, Symbol, Value

logger = logging.getLogger(__name__)

# A new object starts at an @ that opens a line
OBJECT_START = re.compile(r"^[ \t]*@", re.MULTILINE)

IDENTIFIER_CHARS = "_-:./+'"
KEY_TERMINATORS = ",{}()=\"#"


class ParserOptions(msgspec.Struct, frozen=True, kw_only=True):
    """Options controlling what the parser keeps.

    Attributes:
        meta_comments: Keep text outside of objects as ``MetaComment``.
        errors: Keep malformed objects as ``Error`` elements; when false
            they are logged and dropped.
        strict: Raise ``ParseError`` on the first malformed object.
    """

    meta_comments: bool = True
    errors: bool = True
    strict: bool = False


@dataclass
class ParseError(BibliographyError):
    """Parse error with detailed location."""

    message: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"Line {self.line}, column {self.column}: {self.message}"


class BibtexScanner:
    """Character-level reader over BibTeX source text."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def current_char(self) -> str | None:
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def advance(self, count: int = 1) -> str:
        result = self.text[self.pos : self.pos + count]
        self.pos = min(self.pos + count, len(self.text))
        return result

    def seek(self, pos: int) -> None:
        self.pos = max(0, min(pos, len(self.text)))

    def location(self, pos: int | None = None) -> tuple[int, int]:
        """Line and column (both 1-based) of ``pos``, default the current one."""
        if pos is None:
            pos = self.pos
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def read_until(self, predicate) -> str:
        start = self.pos
        while self.current_char() and predicate(self.current_char()):
            self.advance()
        return self.text[start : self.pos]

    def skip_whitespace(self) -> None:
        """Skip whitespace and ``%`` line comments."""
        while True:
            self.read_until(str.isspace)
            if self.current_char() != "%":
                break
            self.read_until(lambda c: c != "\n")

    def read_identifier(self) -> str:
        return self.read_until(lambda c: c.isalnum() or c in IDENTIFIER_CHARS)

    def read_number(self) -> str:
        return self.read_until(str.isdigit)

    def read_quoted_string(self) -> str | None:
        """Read a quoted string; quotes inside braces do not terminate it.

        Returns:
            The content without the quotes, or None if it is unterminated.
        """
        self.advance()  # Opening quote
        start = self.pos
        depth = 0

        while (char := self.current_char()) is not None:
            if char == "\\":
                self.advance(2)
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            elif char == '"' and depth <= 0:
                value = self.text[start : self.pos]
                self.advance()
                return value
            self.advance()

        return None

    def read_braced_string(self, opening: str = "{", closing: str = "}") -> str | None:
        """Read balanced delimiters, returning the content without the outer pair.

        Returns:
            The content, or None if the delimiters are unbalanced.
        """
        self.advance()  # Opening delimiter
        start = self.pos
        depth = 1

        while (char := self.current_char()) is not None:
            if char == "\\":
                self.advance(2)
                continue
            if char == opening:
                depth += 1
            elif char == closing:
                depth -= 1
                if depth == 0:
                    value = self.text[start : self.pos]
                    self.advance()
                    return value
            self.advance()

        return None


class BibtexParser:
    """BibTeX parser with error recovery."""

    def __init__(
        self, options: ParserOptions | None = None, log: logging.Logger | None = None
    ):
        self.options = options or ParserOptions()
        self.log = log or logger
        self.scanner = BibtexScanner("")

    def parse(self, text: str) -> Bibliography:
        """Parse BibTeX text into a new bibliography."""
        bibliography = Bibliography()
        self.scanner = BibtexScanner(text)

        while not self.scanner.at_end():
            if self.scanner.current_char() == "@":
                element = self.parse_object()
            else:
                element = self.parse_meta_comment()
            if element is not None:
                bibliography.add(element)

        self.log.debug(
            "Parsed %d elements (%d entries, %d errors)",
            len(bibliography),
            len(bibliography.entries),
            len(bibliography.errors),
        )
        return bibliography

    def error(self, message: str) -> ParseError:
        line, column = self.scanner.location()
        return ParseError(message, line, column)

    def parse_meta_comment(self) -> MetaComment | None:
        text = self.scanner.read_until(lambda c: c != "@").strip()
        if text and self.options.meta_comments:
            return MetaComment(text)
        return None

    def parse_object(self) -> Element | None:
        """Parse an @ object, recovering from malformed input."""
        start = self.scanner.pos
        try:
            return self.parse_at_command()
        except ParseError as e:
            if self.options.strict:
                raise
            self.recover(start)
            content = self.scanner.text[start : self.scanner.pos].rstrip()
            self.log.warning("Skipping malformed BibTeX object: %s", e)
            if self.options.errors:
                line, _ = self.scanner.location(start)
                return Error(content=content, message=e.message, line=line)
            return None

    def recover(self, start: int) -> None:
        """Skip to the next line that starts with an @."""
        match = OBJECT_START.search(self.scanner.text, start + 1)
        self.scanner.seek(match.start() if match else len(self.scanner.text))

    def parse_at_command(self) -> Element:
        """Parse @ command (entry, string, comment, preamble)."""
        self.scanner.advance()  # Skip @
        self.scanner.skip_whitespace()

        kind = self.scanner.read_identifier().lower()
        if not kind:
            raise self.error("Expected object type after @")

        self.scanner.skip_whitespace()
        opening = self.scanner.current_char()
        if opening not in ("{", "("):
            raise self.error(f"Expected {{ or ( after @{kind}")
        closing = "}" if opening == "{" else ")"

        if kind == "comment":
            return self.parse_comment(opening, closing)

        self.scanner.advance()
        if kind == "string":
            return self.parse_string_def(closing)
        if kind == "preamble":
            return self.parse_preamble(closing)
        return self.parse_entry(kind, closing)

    def parse_comment(self, opening: str, closing: str) -> Comment:
        text = self.scanner.read_braced_string(opening, closing)
        if text is None:
            raise self.error("Unbalanced delimiters in @comment")
        return Comment(text)

    def parse_preamble(self, closing: str) -> Preamble:
        value = self.parse_value()
        self.expect(closing)
        return Preamble(value)

    def parse_string_def(self, closing: str) -> StringConstant:
        self.scanner.skip_whitespace()
        name = self.scanner.read_identifier()
        if not name:
            raise self.error("Expected string name")

        self.scanner.skip_whitespace()
        self.expect("=")
        value = self.parse_value()
        self.expect(closing)
        return StringConstant(name, value)

    def parse_entry(self, entry_type: str, closing: str) -> Entry:
        """Parse bibliography entry fields up to ``closing``."""
        self.scanner.skip_whitespace()
        key = self.scanner.read_until(
            lambda c: c not in KEY_TERMINATORS and not c.isspace()
        )
        if not key:
            raise self.error("Expected citation key")

        entry = Entry(entry_type, key)

        self.scanner.skip_whitespace()
        char = self.scanner.current_char()
        if char == closing:
            self.scanner.advance()
            return entry
        if char != ",":
            raise self.error("Expected comma after citation key")
        self.scanner.advance()

        while True:
            self.scanner.skip_whitespace()
            char = self.scanner.current_char()

            if char == closing:
                self.scanner.advance()
                return entry
            if char is None:
                raise self.error("Unexpected end of input in entry")

            name = self.scanner.read_identifier()
            if not name:
                raise self.error(f"Expected field name, got {char!r}")

            self.scanner.skip_whitespace()
            self.expect("=")
            entry[name] = self.parse_value()

            self.scanner.skip_whitespace()
            char = self.scanner.current_char()
            if char == ",":
                self.scanner.advance()
            elif char != closing:
                raise self.error("Expected comma or closing delimiter")

    def parse_value(self) -> Value:
        """Parse a field value with ``#`` concatenation."""
        fragments: list[Fragment] = []

        while True:
            self.scanner.skip_whitespace()
            char = self.scanner.current_char()

            if char == '"':
                text = self.scanner.read_quoted_string()
                if text is None:
                    raise self.error("Unterminated quoted string")
                fragments.append(Literal(text))
            elif char == "{":
                text = self.scanner.read_braced_string()
                if text is None:
                    raise self.error("Unbalanced braces in value")
                fragments.append(Literal(text))
            elif char is not None and char.isdigit():
                fragments.append(Literal(self.scanner.read_number()))
            elif char is not None and (char.isalpha() or char == "_"):
                fragments.append(Symbol(self.scanner.read_identifier()))
            else:
                raise self.error("Expected value")

            self.scanner.skip_whitespace()
            if self.scanner.current_char() != "#":
                return Value(*fragments)
            self.scanner.advance()

    def expect(self, char: str) -> None:
        self.scanner.skip_whitespace()
        if self.scanner.current_char() != char:
            raise self.error(f"Expected {char!r}")
        self.scanner.advance()
