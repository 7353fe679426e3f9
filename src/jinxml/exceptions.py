"""jinxml Exceptions

Custom exceptions raised while loading templates and converting contexts.
"""

from __future__ import annotations


class JinxmlError(Exception):
    """Base exception for all jinxml errors."""

    pass


class TemplateParseError(JinxmlError):
    """Raised when a template cannot be read, parsed or classified."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{message} (at '{path}')"
        super().__init__(message)


class ExpressionError(JinxmlError):
    """Raised when an expression cannot be compiled or evaluated."""

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Cannot evaluate expression {expression!r}: {reason}")


class ContextShapeError(JinxmlError):
    """Raised when the context does not have the shape the template expects."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)


class StreamClosedError(JinxmlError):
    """Raised when writing to a stream that has ended or failed."""

    def __init__(self):
        super().__init__("Stream is closed")
