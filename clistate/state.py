"""
Parsing State - A named node of the parsing transition graph.

A state maps characters to handlers and declares what happens when it is
entered, left, returned to from a child state, and when the line ends.
States are configured while a grammar is being built and frozen
afterwards; a frozen state is shared read-only by every parse.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .character_handlers import (
    CharacterHandler,
    EnterStateHandler,
    LEAVE_STATE,
    NOOP,
)


WHITESPACE = ' \t\n\r\f\v'


def is_whitespace(char: str) -> bool:
    return char != '' and char in WHITESPACE


class ParsingState:
    """
    A node of the parsing state graph.

    Attributes:
        id: Unique name of the state, reported to callbacks
        ignore_whitespace: Whitespace is skipped instead of dispatched
        leave_on_whitespace: Whitespace leaves the state
        update_value_index: Entering the state records the value start offset
        lock_value_index: Entering the state freezes the value start offset
            until the state is left
        escapes: Enables/disables backslash escapes for the state's scope,
            None inherits the parent's setting
        expressions: Enables/disables $ substitution for the state's scope,
            None inherits the parent's setting
    """

    def __init__(
        self,
        id: str,
        *,
        ignore_whitespace: bool = False,
        leave_on_whitespace: bool = False,
        update_value_index: bool = False,
        lock_value_index: bool = False,
        escapes: Optional[bool] = None,
        expressions: Optional[bool] = None,
    ):
        self._id = id
        self._frozen = False

        self._ignore_whitespace = ignore_whitespace
        self._leave_on_whitespace = leave_on_whitespace
        self._update_value_index = update_value_index
        self._lock_value_index = lock_value_index
        self._escapes = escapes
        self._expressions = expressions

        self._transitions: Dict[str, CharacterHandler] = {}
        self._enter_handler: CharacterHandler = NOOP
        self._default_handler: CharacterHandler = NOOP
        self._whitespace_handler: Optional[CharacterHandler] = None
        self._return_handler: CharacterHandler = NOOP
        self._leave_handler: CharacterHandler = NOOP
        self._end_content_handler: CharacterHandler = NOOP

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def id(self) -> str:
        return self._id

    @property
    def ignore_whitespace(self) -> bool:
        return self._ignore_whitespace

    @property
    def leave_on_whitespace(self) -> bool:
        return self._leave_on_whitespace

    @property
    def update_value_index(self) -> bool:
        return self._update_value_index

    @property
    def lock_value_index(self) -> bool:
        return self._lock_value_index

    @property
    def escapes(self) -> Optional[bool]:
        return self._escapes

    @property
    def expressions(self) -> Optional[bool]:
        return self._expressions

    @property
    def transitions(self) -> Mapping[str, CharacterHandler]:
        """Read-only view of the per-character handlers."""
        return MappingProxyType(self._transitions)

    @property
    def enter_handler(self) -> CharacterHandler:
        return self._enter_handler

    @property
    def default_handler(self) -> CharacterHandler:
        return self._default_handler

    @property
    def whitespace_handler(self) -> Optional[CharacterHandler]:
        return self._whitespace_handler

    @property
    def return_handler(self) -> CharacterHandler:
        return self._return_handler

    @property
    def leave_handler(self) -> CharacterHandler:
        return self._leave_handler

    @property
    def end_content_handler(self) -> CharacterHandler:
        return self._end_content_handler

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ========================================================================
    # DISPATCH
    # ========================================================================

    def get_handler(self, char: str) -> CharacterHandler:
        """
        Return the handler for a character.

        Priority: explicit transition, then (for whitespace) the whitespace
        handler, leave_on_whitespace and ignore_whitespace, then the default.
        """
        handler = self._transitions.get(char)
        if handler is not None:
            return handler
        if is_whitespace(char):
            if self._whitespace_handler is not None:
                return self._whitespace_handler
            if self._leave_on_whitespace:
                return LEAVE_STATE
            if self._ignore_whitespace:
                return NOOP
        return self._default_handler

    # ========================================================================
    # CONFIGURATION (before freeze)
    # ========================================================================

    def _check_not_frozen(self) -> None:
        if self._frozen:
            raise RuntimeError(f"State {self._id} is frozen and can't be modified")

    def enter_state_on(self, char: str, state: 'ParsingState') -> None:
        """Enter the given state when the character is met."""
        self.put_handler(char, EnterStateHandler(state))

    def put_handler(self, char: str, handler: CharacterHandler) -> None:
        self._check_not_frozen()
        self._transitions[char] = handler

    def set_enter_handler(self, handler: CharacterHandler) -> None:
        self._check_not_frozen()
        self._enter_handler = handler

    def set_default_handler(self, handler: CharacterHandler) -> None:
        self._check_not_frozen()
        self._default_handler = handler

    def set_whitespace_handler(self, handler: CharacterHandler) -> None:
        self._check_not_frozen()
        self._whitespace_handler = handler

    def set_return_handler(self, handler: CharacterHandler) -> None:
        self._check_not_frozen()
        self._return_handler = handler

    def set_leave_handler(self, handler: CharacterHandler) -> None:
        self._check_not_frozen()
        self._leave_handler = handler

    def set_end_content_handler(self, handler: CharacterHandler) -> None:
        self._check_not_frozen()
        self._end_content_handler = handler

    def freeze(self) -> 'ParsingState':
        """Make the state read-only. Returns the state for chaining."""
        self._frozen = True
        return self

    def __repr__(self) -> str:
        return f'ParsingState({self._id})'
