"""
Exceptions - Error types raised while parsing command lines.

Every error carries the offset in the (substituted) line where the
problem was detected, so callers can point at it.
"""

from typing import Optional


class CommandFormatError(Exception):
    """Base exception for all command line parsing errors."""

    def __init__(self, message: str, offset: int = -1, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.offset = offset
        self.cause = cause


class ArgumentValueNotFinishedError(CommandFormatError):
    """Raised when a quote or bracket is still open at the end of the line."""

    def __init__(self, message: str, offset: int = -1, delimiter: str = ''):
        super().__init__(message, offset)
        self.delimiter = delimiter


class UnresolvedExpressionError(CommandFormatError):
    """Raised when a ${...} expression can't be resolved."""

    def __init__(self, expression: str, message: str, offset: int = -1):
        super().__init__(message, offset)
        self.expression = expression


class UnresolvedVariableError(UnresolvedExpressionError):
    """Raised when a $variable is not defined."""


class OperationFormatError(CommandFormatError):
    """Raised when the address or operation part is malformed."""


class NestingTooDeepError(CommandFormatError):
    """Raised when nested states exceed the configured maximum depth."""
