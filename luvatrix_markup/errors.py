from __future__ import annotations


class MarkupError(ValueError):
    """Base class for every failure raised while reading or building markup.

    `element_path` locates the element being processed (for example
    `Column/Row[1]/Label[0]`); the builder fills it in when the error is raised
    from deeper code that does not know where it is in the document.
    """

    def __init__(self, reason: str, *, element_path: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.element_path = element_path

    def with_path(self, element_path: str) -> "MarkupError":
        if self.element_path is None:
            self.element_path = element_path
        return self

    def __str__(self) -> str:
        if self.element_path:
            return f"{self.element_path}: {self.reason}"
        return self.reason


class ParseSyntaxError(MarkupError):
    pass


class UnexpectedTextError(ParseSyntaxError):
    pass


class IncludeCycleError(ParseSyntaxError):
    pass


class UnknownElementError(MarkupError):
    pass


class UnknownPropertyError(MarkupError):
    pass


class UnknownOutletError(MarkupError):
    pass


class DecodeError(MarkupError):
    pass


class TooManyChildrenError(MarkupError):
    pass


class RootTypeMismatchError(MarkupError):
    pass


class ResourceNotFoundError(MarkupError):
    pass


class UnsupportedInstructionError(MarkupError):
    pass


class BindingPathError(MarkupError):
    pass
