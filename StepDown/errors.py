from typing import Optional


class StepDownError(Exception):
    """Base class for all errors raised while ordering a compilation unit."""


class JavaParseError(StepDownError):
    """The Java source could not be tokenized or parsed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class MalformedDeclarationError(StepDownError):
    """A declaration of the top-level type could not be mapped onto the source text."""

    def __init__(self, message: str, declaration: Optional[str] = None):
        self.declaration = declaration
        super().__init__(message)


class PreferenceError(StepDownError, ValueError):
    """An unrecognised preference value."""


class UnsupportedOperationError(StepDownError):
    pass
