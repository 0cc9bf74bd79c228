"""
Partial Values - Parse the value being typed, the way completion sees it.

Completion works on a value the user hasn't finished: quotes may still
be open. The text of the value is what the candidates are matched
against, the offset is where in the typed text the candidates go.
"""

from dataclasses import dataclass

from .callback import StateCallback
from .character_handlers import CONTENT, DISPATCH_CURRENT, EnterStateHandler, EscapeHandler
from .parser import StateParser
from .state import ParsingState
from .states import ESCAPE_STATE, quotes_state


PARTIAL_VALUE_INITIAL_ID = 'PARTIAL_VALUE_INITIAL'
PARTIAL_VALUE_ID = 'PARTIAL_VALUE'
PARTIAL_QUOTES_ID = 'PARTIAL_QUOTES'
PARTIAL_BACK_QUOTES_ID = 'PARTIAL_BACK_QUOTES'


@dataclass(frozen=True)
class PartialValue:
    """
    Attributes:
        content: The value with quotes dropped and escapes kept
        offset: Number of typed characters that are not part of content
    """

    content: str
    offset: int


class _ContentCallback(StateCallback):

    def __init__(self):
        self.content = ''

    def character(self, ctx) -> None:
        self.content += ctx.character


def _build_partial_value_states():
    value = ParsingState(PARTIAL_VALUE_ID, update_value_index=True)
    value.set_enter_handler(DISPATCH_CURRENT)
    value.enter_state_on('"', quotes_state(
        PARTIAL_QUOTES_ID, '"', ESCAPE_STATE, keep_quotes=False, end_required=False))
    value.enter_state_on('`', quotes_state(
        PARTIAL_BACK_QUOTES_ID, '`', ESCAPE_STATE, keep_quotes=False, end_required=False))
    value.put_handler('\\', EscapeHandler(ESCAPE_STATE))
    value.set_default_handler(CONTENT)
    value.freeze()

    initial = ParsingState(PARTIAL_VALUE_INITIAL_ID, ignore_whitespace=True)
    initial.set_default_handler(EnterStateHandler(value))
    return initial.freeze()


PARTIAL_VALUE_STATE = _build_partial_value_states()

_parser = StateParser()


def parse_partial_value(text: str) -> PartialValue:
    """
    Parse a possibly unfinished value.

    Leading whitespace is skipped, quotes are dropped, escapes and any
    other whitespace are kept. Never raises for unclosed quotes.
    """
    callback = _ContentCallback()
    _parser.parse(text, callback, PARTIAL_VALUE_STATE, strict=False)
    return PartialValue(callback.content, len(text or '') - len(callback.content))
