"""
Exception hierarchy for embtext

All errors raised by the template pipeline derive from EmbtextError so
callers can catch a single type. Errors that point into template source
carry the template filename and line number.
"""

from typing import Optional


class EmbtextError(Exception):
    """Base class for all embtext errors"""
    pass


class SourceLoadError(EmbtextError):
    """Raised when template source cannot be read or decoded"""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load template '{path}': {reason}")


class CompileError(EmbtextError):
    """
    Raised when a segment stream cannot be translated to a program

    Attributes:
        filename: Template name used in messages
        lineno: Template line where the problem was found (None if unknown)
    """

    def __init__(self, message: str, filename: str = "(embtext)",
                 lineno: Optional[int] = None) -> None:
        self.message = message
        self.filename = filename
        self.lineno = lineno
        if lineno is None:
            super().__init__(f"{filename}: {message}")
        else:
            super().__init__(f"{filename}:{lineno}: {message}")


class TemplateSyntaxError(CompileError):
    """Raised for unbalanced blocks or invalid Python inside directives"""
    pass


class EvaluationError(EmbtextError):
    """Base class for failures while running a compiled program"""
    pass


class TemplateRenderError(EvaluationError):
    """
    Raised when directive code fails during render

    The original exception is available as `cause` and is also chained
    as __cause__.
    """

    def __init__(self, filename: str, lineno: Optional[int], cause: BaseException) -> None:
        self.filename = filename
        self.lineno = lineno
        self.cause = cause
        location = filename if lineno is None else f"{filename}:{lineno}"
        super().__init__(f"{location}: {type(cause).__name__}: {cause}")
