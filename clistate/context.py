"""
Parsing Context - The mutable cursor of a single parse.

The context holds the line being parsed, the current location, the stack
of active states and the per-scope switches for escapes and expressions.
A context is created for one parse and never shared.
"""

import logging
from typing import TYPE_CHECKING, Optional

from .exceptions import CommandFormatError
from .expressions import ExpressionResolver, SubstitutedLine
from .stack_tracker import DEFAULT_MAX_DEPTH, Frame, StackTracker
from .state import ParsingState

if TYPE_CHECKING:
    from .callback import StateCallback


logger = logging.getLogger(__name__)


class ParsingContext:
    """
    Holds the per-parse state: input, cursor, state stack and value index.

    The value index is the offset where the current value started. Once a
    state with lock_value_index is entered it stays frozen until that state
    is left, so separators met inside a quoted or bracketed value don't
    move it.
    """

    def __init__(
        self,
        input: str,
        callback: 'StateCallback',
        *,
        strict: bool = True,
        resolver: Optional[ExpressionResolver] = None,
        resolve_system_properties: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self._input = input
        self._line = SubstitutedLine(input)
        self._location = 0
        self._callback = callback
        self._stack = StackTracker(max_depth)
        self._strict = strict
        self._error: Optional[CommandFormatError] = None

        self._value_index = 0
        self._lock_depth: Optional[int] = None

        self._resolver = resolver or ExpressionResolver()
        self._resolve_system_properties = resolve_system_properties

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def input(self) -> str:
        """The line being parsed, with substitutions applied so far."""
        return self._input

    @property
    def line(self) -> SubstitutedLine:
        return self._line

    @property
    def location(self) -> int:
        return self._location

    @property
    def character(self) -> str:
        """The current character, or '' at the end of content."""
        if self._location < len(self._input):
            return self._input[self._location]
        return ''

    @property
    def callback(self) -> 'StateCallback':
        return self._callback

    @property
    def state(self) -> ParsingState:
        """The innermost active state."""
        frame = self._stack.peek()
        assert frame is not None, "No active state"
        return frame.state

    @property
    def stack(self) -> StackTracker:
        return self._stack

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def error(self) -> Optional[CommandFormatError]:
        return self._error

    @property
    def value_index(self) -> int:
        return self._value_index

    @property
    def value_index_locked(self) -> bool:
        return self._lock_depth is not None

    @property
    def escapes_enabled(self) -> bool:
        frame = self._stack.peek()
        return frame.escapes if frame else True

    @property
    def expressions_enabled(self) -> bool:
        frame = self._stack.peek()
        return frame.expressions if frame else True

    @property
    def resolve_system_properties(self) -> bool:
        return self._resolve_system_properties

    def is_end_of_content(self) -> bool:
        return self._location >= len(self._input)

    def set_error(self, error: CommandFormatError) -> None:
        """Remember an error to report later. Only the first one is kept."""
        if self._error is None:
            self._error = error

    # ========================================================================
    # CURSOR
    # ========================================================================

    def advance_location(self) -> None:
        """Move the cursor to the next character."""
        assert not self.is_end_of_content(), (
            f"Location {self._location} is past the end of {len(self._input)} characters"
        )
        self._location += 1

    # ========================================================================
    # STATE STACK
    # ========================================================================

    def enter_state(self, state: ParsingState) -> None:
        """Push a state, then run its enter handler."""
        parent = self._stack.peek()
        escapes = state.escapes
        if escapes is None:
            escapes = parent.escapes if parent else True
        expressions = state.expressions
        if expressions is None:
            expressions = parent.expressions if parent else True

        self._stack.push(Frame(state, self._location, escapes, expressions))

        if self._lock_depth is None and state.update_value_index:
            self._value_index = self._location
            if state.lock_value_index:
                self._lock_depth = len(self._stack)

        logger.debug("Entered %s at %d", state.id, self._location)
        self._callback.entered_state(self)
        state.enter_handler.handle(self)

    def leave_state(self) -> ParsingState:
        """Pop the current state and run the return handler of its parent."""
        frame = self._stack.peek()
        assert frame is not None, "Leaving a state with an empty stack"

        frame.state.leave_handler.handle(self)
        self._callback.leaving_state(self)
        self._stack.pop()
        logger.debug("Left %s at %d", frame.state.id, self._location)

        if self._lock_depth is not None and self._lock_depth > len(self._stack):
            self._lock_depth = None

        if self._stack:
            self.state.return_handler.handle(self)
        return frame.state

    def entered_at(self) -> int:
        """The location where the current state was entered."""
        frame = self._stack.peek()
        assert frame is not None, "No active state"
        return frame.location

    # ========================================================================
    # ESCAPES AND EXPRESSIONS
    # ========================================================================

    def configure_resolution(self, escapes: Optional[bool] = None, expressions: Optional[bool] = None) -> None:
        """
        Switch escapes and/or expressions for the current state's scope.

        The previous setting comes back when the state is left.
        """
        frame = self._stack.peek()
        assert frame is not None, "No active state"
        self._stack.frames[-1] = frame._replace(
            escapes=frame.escapes if escapes is None else escapes,
            expressions=frame.expressions if expressions is None else expressions,
        )

    def resolve_expression(self) -> None:
        """
        Substitute the expression or variable at the cursor, if any.

        A substitution that yields an empty string exposes the next
        character, which may start another expression.
        """
        while self._location < len(self._input) - 1 and self._input[self._location] == '$':
            if self._input[self._location + 1] == '{':
                if not self._resolve_system_properties:
                    return
                resolved = self._resolver.resolve_property(self._input, self._location, self._strict)
            else:
                resolved = self._resolver.resolve_variable(self._input, self._location, self._strict)
            if resolved is None:
                return

            original, replacement = resolved
            self._input = (
                self._input[:self._location] + replacement + self._input[self._location + len(original):]
            )
            self._line.add(original, replacement, self._location)
            self._line.substituted = self._input
            logger.debug("Substituted %r with %r at %d", original, replacement, self._location)
            if replacement:
                return
