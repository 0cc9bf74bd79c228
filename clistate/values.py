"""
Argument Values - Turn the text of an argument value into Python data.

    a,b           -> ['a', 'b']
    [a,b]         -> ['a', 'b']
    a=1,b=2       -> {'a': '1', 'b': '2'}
    {a=1,b=[x]}   -> {'a': '1', 'b': ['x']}
    [a=1,b=2]     -> [('a', '1'), ('b', '2')]
    "a, b"        -> 'a, b'
    bytes{1,0x2}  -> b'\\x01\\x02'

Brackets, braces and quotes are structural only where a value starts;
elsewhere they are ordinary characters. A closing bracket or brace only
ends the innermost open one.
"""

from typing import Any, List, Optional, Tuple

from .callback import StateCallback
from .character_handlers import CONTENT, CharacterHandler, EscapeHandler, LEAVE_STATE
from .exceptions import CommandFormatError
from .parser import StateParser
from .state import ParsingState
from .states import ValueNotFinishedHandler, escape_state, quotes_state


VALUE_ID = 'VALUE'
LIST_ID = 'LIST'
OBJECT_ID = 'OBJECT'
BYTES_ID = 'BYTES'
VALUE_QUOTES_ID = 'VALUE_QUOTES'
VALUE_ESCAPE_ID = 'VALUE_ESCAPE'

BYTES_PREFIX = 'bytes'


# ========================================================================
# TREE BUILDING
# ========================================================================

class _Container:
    """An open list, object or the top level, with the item being parsed."""

    def __init__(self, kind: str):
        self.kind = kind
        self.items: List[Tuple[Optional[str], Any]] = []
        self._reset()

    def _reset(self) -> None:
        self.name: Optional[str] = None
        self.buffer = ''
        self.value: Any = None
        self.quoted = False
        self.quoted_end = -1

    def at_value_start(self) -> bool:
        return self.value is None and not self.quoted and not self.buffer.strip()

    def finish_item(self) -> None:
        if self.value is not None:
            value = self.value
        elif self.quoted:
            end = self.quoted_end if self.quoted_end >= 0 else len(self.buffer)
            value = self.buffer[:end] + self.buffer[end:].rstrip()
        else:
            value = self.buffer.strip()
            if not value and self.name is None:
                self._reset()
                return
        self.items.append((self.name, value))
        self._reset()

    def result(self) -> Any:
        if self.kind == OBJECT_ID:
            for name, value in self.items:
                if name is None:
                    raise CommandFormatError(f"Missing name for '{value}' in an object value")
            return dict(self.items)

        named = [name is not None for name, _ in self.items]
        if self.kind == VALUE_ID:
            if not self.items:
                return None
            if len(self.items) == 1 and not named[0]:
                return self.items[0][1]
            if all(named):
                return dict(self.items)
        return [value if name is None else (name, value) for name, value in self.items]


class ValueTreeCallback(StateCallback):
    """Builds the value out of the states of the value grammar."""

    def __init__(self):
        self._containers: List[_Container] = []
        self.result: Any = None

    @property
    def current(self) -> _Container:
        return self._containers[-1]

    def at_value_start(self) -> bool:
        return self.current.at_value_start()

    def at_bytes_prefix(self) -> bool:
        current = self.current
        return current.value is None and not current.quoted and current.buffer.strip() == BYTES_PREFIX

    def character(self, ctx) -> None:
        current = self.current
        if (current.value is not None or current.quoted_end >= 0) and not ctx.character.isspace():
            error = CommandFormatError(
                f"Unexpected '{ctx.character}' after the value at index {ctx.location}", ctx.location
            )
            if ctx.strict:
                raise error
            ctx.set_error(error)
            return
        current.buffer += ctx.character

    def item_separator(self, ctx) -> None:
        self.current.finish_item()

    def name_separator(self, ctx) -> None:
        current = self.current
        name = current.buffer.strip()
        if current.name is None and current.value is None and not current.quoted and name:
            current.name = name
            current.buffer = ''
        else:
            self.character(ctx)

    def entered_state(self, ctx) -> None:
        state_id = ctx.state.id
        if state_id in (VALUE_ID, LIST_ID, OBJECT_ID):
            self._containers.append(_Container(state_id))
        elif state_id == VALUE_QUOTES_ID:
            self.current.buffer = ''
            self.current.quoted = True
        elif state_id == BYTES_ID:
            self.current.buffer = ''

    def leaving_state(self, ctx) -> None:
        state_id = ctx.state.id
        if state_id in (VALUE_ID, LIST_ID, OBJECT_ID):
            container = self._containers.pop()
            container.finish_item()
            value = container.result()
            if self._containers:
                self.current.value = value
            else:
                self.result = value
        elif state_id == VALUE_QUOTES_ID:
            self.current.quoted_end = len(self.current.buffer)
        elif state_id == BYTES_ID:
            current = self.current
            current.value = to_bytes(current.buffer, ctx.entered_at())
            current.buffer = ''


def to_bytes(text: str, offset: int = -1) -> bytes:
    """
    Convert a comma separated list of bytes.

    Decimal values go from -128 to 127, hexadecimal ones from 0x0 to 0xff.
    """
    result = bytearray()
    for token in text.split(','):
        token = token.strip()
        if not token:
            continue
        try:
            if token.lower().startswith('0x'):
                number = int(token, 16)
                valid = 0 <= number <= 0xff
            else:
                number = int(token, 10)
                valid = -128 <= number <= 127
        except ValueError as e:
            raise CommandFormatError(f"Invalid byte '{token}'", offset, e) from e
        if not valid:
            raise CommandFormatError(f"Byte '{token}' is out of range", offset)
        result.append(number & 0xff)
    return bytes(result)


# ========================================================================
# THE VALUE GRAMMAR
# ========================================================================

class _ValueStartHandler(CharacterHandler):
    """Enters a state only where a value starts, otherwise takes the character."""

    def __init__(self, state: ParsingState):
        self.state = state

    def handle(self, ctx) -> None:
        if ctx.callback.at_value_start():
            ctx.enter_state(self.state)
        else:
            ctx.callback.character(ctx)


class _BraceHandler(CharacterHandler):
    """'{' starts an object where a value starts, or bytes after 'bytes'."""

    def __init__(self, object_state: ParsingState, bytes_state: ParsingState):
        self.object_state = object_state
        self.bytes_state = bytes_state

    def handle(self, ctx) -> None:
        if ctx.callback.at_value_start():
            ctx.enter_state(self.object_state)
        elif ctx.callback.at_bytes_prefix():
            ctx.enter_state(self.bytes_state)
        else:
            ctx.callback.character(ctx)


class _ItemSeparatorHandler(CharacterHandler):

    def handle(self, ctx) -> None:
        ctx.callback.item_separator(ctx)


class _NameSeparatorHandler(CharacterHandler):

    def handle(self, ctx) -> None:
        ctx.callback.name_separator(ctx)


def _build_value_states():
    value_escape = escape_state(VALUE_ESCAPE_ID, keep_escape=False)
    value_quotes = quotes_state(VALUE_QUOTES_ID, '"', value_escape, keep_quotes=False)

    bytes_state = ParsingState(BYTES_ID)
    bytes_state.put_handler('}', LEAVE_STATE)
    bytes_state.set_default_handler(CONTENT)
    bytes_state.set_end_content_handler(ValueNotFinishedHandler('}'))
    bytes_state.freeze()

    top = ParsingState(VALUE_ID)
    list_state = ParsingState(LIST_ID)
    object_state = ParsingState(OBJECT_ID)

    for state in (top, list_state, object_state):
        state.put_handler('[', _ValueStartHandler(list_state))
        state.put_handler('{', _BraceHandler(object_state, bytes_state))
        state.put_handler('"', _ValueStartHandler(value_quotes))
        state.put_handler(',', _ItemSeparatorHandler())
        state.put_handler('=', _NameSeparatorHandler())
        state.put_handler('\\', EscapeHandler(value_escape))
        state.set_default_handler(CONTENT)

    list_state.put_handler(']', LEAVE_STATE)
    list_state.set_end_content_handler(ValueNotFinishedHandler(']'))
    object_state.put_handler('}', LEAVE_STATE)
    object_state.set_end_content_handler(ValueNotFinishedHandler('}'))

    list_state.freeze()
    object_state.freeze()
    return top.freeze()


VALUE_STATE = _build_value_states()

_parser = StateParser()


def parse_value(text: str, strict: bool = True) -> Any:
    """
    Parse the text of an argument value into strings, lists, dicts and bytes.

    Returns None for an empty value. In strict mode an unclosed bracket,
    brace or quote raises ArgumentValueNotFinishedError; otherwise what
    was parsed so far is returned.
    """
    callback = ValueTreeCallback()
    _parser.parse(text, callback, VALUE_STATE, strict)
    return callback.result
