"""Exception classes for the bibliography core."""


class BibliographyError(Exception):
    """Base exception for bibliography errors."""

    pass


class ElementTypeError(BibliographyError, TypeError):
    """Raised when something other than an element is added to a bibliography."""

    def __init__(self, obj: object, expected: str = "a bibdoc Element"):
        """Initialize with the rejected object."""
        self.obj = obj
        super().__init__(
            f"Bibliography can only contain {expected}; was: {type(obj).__name__}"
        )


class FragmentTypeError(BibliographyError, TypeError):
    """Raised when a value is built from something other than text or symbols."""

    def __init__(self, obj: object):
        self.obj = obj
        super().__init__(
            f"Value fragments must be str, Literal or Symbol; "
            f"was: {type(obj).__name__}"
        )
