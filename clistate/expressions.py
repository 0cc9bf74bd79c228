"""
Expressions - ${...} property expressions and $variable substitution.

Substitutions happen in place while the line is being parsed, so the
parser keeps a record of them to translate offsets between the line the
user typed and the line that was actually parsed.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

from .exceptions import UnresolvedExpressionError, UnresolvedVariableError


ENV_PREFIX = 'env.'


@dataclass(frozen=True)
class Substitution:
    """One replaced fragment of the line."""

    original: str
    replacement: str
    substituted_index: int
    original_index: int


@dataclass
class SubstitutedLine:
    """
    The line as it was parsed, with the substitutions that produced it.

    Attributes:
        original: The line before any substitution
        substituted: The line after all substitutions
        substitutions: Substitutions in the order they were applied
    """

    original: str
    substituted: str = ''
    substitutions: List[Substitution] = field(default_factory=list)

    def __post_init__(self):
        if not self.substituted:
            self.substituted = self.original

    def add(self, original: str, replacement: str, location: int) -> None:
        """Record a substitution made at a location of the substituted line."""
        shift = sum(len(s.replacement) - len(s.original) for s in self.substitutions)
        self.substitutions.append(
            Substitution(original, replacement, location, location - shift)
        )

    def original_offset(self, substituted_offset: int) -> int:
        """Translate an offset in the substituted line to the original line."""
        delta = 0
        for sub in self.substitutions:
            if sub.substituted_index > substituted_offset:
                break
            delta += len(sub.original) - len(sub.replacement)
        return substituted_offset + delta

    def substituted_offset(self, original_offset: int) -> int:
        """Translate an offset in the original line to the substituted line."""
        delta = 0
        for sub in self.substitutions:
            if sub.original_index > original_offset:
                break
            delta += len(sub.replacement) - len(sub.original)
        return original_offset + delta

    def __str__(self) -> str:
        return self.substituted


class ExpressionResolver:
    """
    Resolves ${...} expressions and $variables.

    Expression syntax: ${name}, ${name1,name2} (first defined wins),
    ${name:default} and ${env.NAME} for environment variables. Defaults
    may contain expressions themselves.
    """

    def __init__(
        self,
        properties: Optional[Mapping[str, str]] = None,
        variables: Optional[Mapping[str, str]] = None,
    ):
        self.properties = properties if properties is not None else {}
        self.variables = variables

    # ========================================================================
    # ${...} EXPRESSIONS
    # ========================================================================

    def resolve_property(self, text: str, start: int, strict: bool) -> Optional[Tuple[str, str]]:
        """
        Resolve the expression starting at text[start] ('$' followed by '{').

        Returns (original, replacement) or None when it stays as is.
        """
        end = self._closing_brace(text, start + 2)
        if end < 0:
            if strict:
                raise UnresolvedExpressionError(
                    text[start:], f"Closing }} is missing for {text[start:start + 10]}...", start
                )
            return None

        original = text[start:end + 1]
        value = self._evaluate(original[2:-1], strict, start)
        if value is None:
            if strict:
                raise UnresolvedExpressionError(
                    original, f"Cannot resolve expression '{original}'", start
                )
            return None
        return original, value

    def _evaluate(self, body: str, strict: bool, offset: int) -> Optional[str]:
        names, sep, default = body.partition(':')
        for name in names.split(','):
            value = self._lookup(name.strip())
            if value is not None:
                return value
        if sep:
            return self.resolve_text(default, strict, offset)
        return None

    def _lookup(self, name: str) -> Optional[str]:
        if not name:
            return None
        if name.startswith(ENV_PREFIX):
            return os.environ.get(name[len(ENV_PREFIX):])
        return self.properties.get(name)

    def resolve_text(self, text: str, strict: bool, offset: int = 0) -> Optional[str]:
        """Resolve every expression in a fragment of text (used for defaults)."""
        result = []
        i = 0
        while i < len(text):
            if text.startswith('${', i):
                resolved = self.resolve_property(text, i, strict)
                if resolved is None:
                    return None
                original, value = resolved
                result.append(value)
                i += len(original)
            else:
                result.append(text[i])
                i += 1
        return ''.join(result)

    @staticmethod
    def _closing_brace(text: str, start: int) -> int:
        depth = 1
        for i in range(start, len(text)):
            if text[i] == '{':
                depth += 1
            elif text[i] == '}':
                depth -= 1
                if depth == 0:
                    return i
        return -1

    # ========================================================================
    # $VARIABLES
    # ========================================================================

    def resolve_variable(self, text: str, start: int, strict: bool) -> Optional[Tuple[str, str]]:
        """
        Resolve the variable starting at text[start] ('$').

        Returns (original, replacement) or None when it stays as is.
        Nothing is resolved when no variables were configured.
        """
        if self.variables is None:
            return None
        end = start + 1
        if end >= len(text) or not (text[end].isalpha() or text[end] == '_'):
            return None
        while end < len(text) and (text[end].isalnum() or text[end] == '_'):
            end += 1

        name = text[start + 1:end]
        value = self.variables.get(name)
        if value is None:
            if strict:
                raise UnresolvedVariableError(name, f"Unrecognized variable {name}", start)
            return None
        return '$' + name, value
