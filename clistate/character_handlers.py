"""
Character Handlers - What to do with the character under the cursor.

A handler looks at the parsing context and either appends the current
character to the token, enters a child state, leaves the current state
or does nothing. Handlers keep no state of their own, so the instances
below are shared by every state and every parse.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import ParsingContext
    from .state import ParsingState


class CharacterHandler:
    """Base class for character handlers."""

    def handle(self, ctx: 'ParsingContext') -> None:
        """Handle the current character. Subclasses must implement."""
        raise NotImplementedError


class _NoopHandler(CharacterHandler):

    def handle(self, ctx: 'ParsingContext') -> None:
        pass

    def __repr__(self) -> str:
        return 'NOOP'


class _ContentHandler(CharacterHandler):
    """Appends the current character to the token being collected."""

    def handle(self, ctx: 'ParsingContext') -> None:
        ctx.callback.character(ctx)

    def __repr__(self) -> str:
        return 'CONTENT'


class _LeaveStateHandler(CharacterHandler):

    def handle(self, ctx: 'ParsingContext') -> None:
        ctx.leave_state()

    def __repr__(self) -> str:
        return 'LEAVE_STATE'


class _ContentAndLeaveHandler(CharacterHandler):
    """Appends the current character, then leaves (closing delimiters)."""

    def handle(self, ctx: 'ParsingContext') -> None:
        ctx.callback.character(ctx)
        ctx.leave_state()

    def __repr__(self) -> str:
        return 'CONTENT_AND_LEAVE'


class _DispatchCurrentHandler(CharacterHandler):
    """
    Re-dispatches the current character to the current state.

    Used as an enter handler, so the character that triggered a transition
    is handled by the state it led to.
    """

    def handle(self, ctx: 'ParsingContext') -> None:
        ctx.state.get_handler(ctx.character).handle(ctx)

    def __repr__(self) -> str:
        return 'DISPATCH_CURRENT'


class EnterStateHandler(CharacterHandler):
    """Enters the given state."""

    def __init__(self, state: 'ParsingState'):
        self.state = state

    def handle(self, ctx: 'ParsingContext') -> None:
        ctx.enter_state(self.state)

    def __repr__(self) -> str:
        return f'EnterStateHandler({self.state.id})'


class EscapeHandler(CharacterHandler):
    r"""
    Enters the escape state on '\' when escapes are enabled in the
    current scope, otherwise treats the backslash as content.
    """

    def __init__(self, escape_state: 'ParsingState'):
        self.escape_state = escape_state

    def handle(self, ctx: 'ParsingContext') -> None:
        if ctx.escapes_enabled:
            ctx.enter_state(self.escape_state)
        else:
            ctx.callback.character(ctx)

    def __repr__(self) -> str:
        return f'EscapeHandler({self.escape_state.id})'


class ChainHandler(CharacterHandler):
    """Runs several handlers one after another."""

    def __init__(self, *handlers: CharacterHandler):
        self.handlers = handlers

    def handle(self, ctx: 'ParsingContext') -> None:
        for handler in self.handlers:
            handler.handle(ctx)

    def __repr__(self) -> str:
        return f'ChainHandler{self.handlers!r}'


NOOP = _NoopHandler()
CONTENT = _ContentHandler()
LEAVE_STATE = _LeaveStateHandler()
CONTENT_AND_LEAVE = _ContentAndLeaveHandler()
DISPATCH_CURRENT = _DispatchCurrentHandler()
