"""
Command Grammar States - The state graph for management command lines.

    [address][:operation[(name=value,...)][{header=value;...}]] [-name[=value] | value]... [> file]

The address is a '/'-separated list of type=name nodes; whitespace next
to its separators is ignored. Argument values may contain "quoted",
`back-quoted`, [bracketed], (parenthesized) and {braced} parts which keep
whitespace and separators inside them.

All states are built once at import time and frozen.
"""

from typing import Optional

from .character_handlers import (
    CharacterHandler,
    ChainHandler,
    CONTENT,
    CONTENT_AND_LEAVE,
    DISPATCH_CURRENT,
    EnterStateHandler,
    EscapeHandler,
    LEAVE_STATE,
    NOOP,
)
from .exceptions import ArgumentValueNotFinishedError
from .state import ParsingState, is_whitespace


COMMAND_ID = 'COMMAND'
ADDRESS_ID = 'ADDRESS'
NODE_ID = 'NODE'
NODE_SEPARATOR_ID = 'NODE_SEPARATOR'
ADDRESS_OPERATION_SEPARATOR_ID = 'ADDRESS_OPERATION_SEPARATOR'
COMMAND_NAME_ID = 'COMMAND_NAME'
OPERATION_NAME_ID = 'OPERATION_NAME'
PROPERTY_LIST_ID = 'PROPERTY_LIST'
PROPERTY_ID = 'PROPERTY'
PROPERTY_VALUE_ID = 'PROPERTY_VALUE'
HEADERS_ID = 'HEADERS'
HEADER_LIST_ID = 'HEADER_LIST'
HEADER_ID = 'HEADER'
HEADER_VALUE_ID = 'HEADER_VALUE'
OUTPUT_TARGET_ID = 'OUTPUT_TARGET'
ARGUMENT_LIST_ID = 'ARGUMENT_LIST'
ARGUMENT_ID = 'ARGUMENT'
NAME_VALUE_SEPARATOR_ID = 'NAME_VALUE_SEPARATOR'
ARGUMENT_VALUE_ID = 'ARGUMENT_VALUE'
BRACKETS_ID = 'BRACKETS'
PARENTHESIS_ID = 'PARENTHESIS'
BRACES_ID = 'BRACES'
QUOTES_ID = 'QUOTES'
BACK_QUOTES_ID = 'BACK_QUOTES'
ESCAPE_ID = 'ESCAPE'
NODE_QUOTES_ID = 'NODE_QUOTES'
NODE_ESCAPE_ID = 'NODE_ESCAPE'


# ========================================================================
# GRAMMAR-SPECIFIC HANDLERS
# ========================================================================

class ValueNotFinishedHandler(CharacterHandler):
    """
    End-of-content handler for states that need a closing delimiter.

    Raises in strict mode; otherwise the error is recorded on the context
    and parsing of the incomplete line goes on.
    """

    def __init__(self, delimiter: str):
        self.delimiter = delimiter

    def handle(self, ctx) -> None:
        offset = ctx.entered_at()
        error = ArgumentValueNotFinishedError(
            f"Closing {self.delimiter} is missing for the value starting at index {offset}",
            offset,
            self.delimiter,
        )
        if ctx.strict:
            raise error
        ctx.set_error(error)


class _LeaveOnWhitespaceReturn(CharacterHandler):
    """Return handler: leave when the child was left on whitespace."""

    def handle(self, ctx) -> None:
        if not ctx.is_end_of_content() and is_whitespace(ctx.character):
            ctx.leave_state()


class _LeaveOnReturn(CharacterHandler):
    """Return handler: leave when the child was left on one of the characters."""

    def __init__(self, chars: str):
        self.chars = chars

    def handle(self, ctx) -> None:
        if not ctx.is_end_of_content() and ctx.character in self.chars:
            ctx.leave_state()


class _EnterUnlessEndOfContent(CharacterHandler):

    def __init__(self, state: ParsingState):
        self.state = state

    def handle(self, ctx) -> None:
        if not ctx.is_end_of_content():
            ctx.enter_state(self.state)


class SeparatorWhitespaceHandler(CharacterHandler):
    """
    Whitespace handler for parts where whitespace may surround separators.

    Whitespace is skipped when the next non-whitespace character is one of
    `following` or the previous one is one of `preceding`. Any other
    whitespace is passed to `otherwise`, which leaves the state by default.
    """

    def __init__(self, following: str, preceding: str = '', otherwise: CharacterHandler = LEAVE_STATE):
        self.following = following
        self.preceding = preceding
        self.otherwise = otherwise

    def handle(self, ctx) -> None:
        text = ctx.input
        index = ctx.location + 1
        while index < len(text) and is_whitespace(text[index]):
            index += 1
        if index < len(text) and text[index] in self.following:
            return

        index = ctx.location - 1
        while index >= 0 and is_whitespace(text[index]):
            index -= 1
        if index >= 0 and text[index] in self.preceding:
            return

        self.otherwise.handle(ctx)


# ========================================================================
# REUSABLE STATE BUILDERS
# ========================================================================

def escape_state(id: str, keep_escape: bool = True) -> ParsingState:
    r"""
    The state after '\': the next character is taken as is.

    With keep_escape the backslash itself stays in the token.
    """
    state = ParsingState(id, escapes=False, expressions=False)
    state.set_enter_handler(CONTENT if keep_escape else NOOP)
    state.set_default_handler(CONTENT_AND_LEAVE)
    return state.freeze()


def quotes_state(
    id: str,
    quote: str,
    escape: ParsingState,
    keep_quotes: bool = True,
    end_required: bool = True,
    expressions: Optional[bool] = None,
) -> ParsingState:
    """
    A quoted string. Whitespace and separators inside are content.

    With end_required a missing closing quote is an error (deferred or
    raised depending on strict mode).
    """
    state = ParsingState(
        id,
        update_value_index=True,
        lock_value_index=True,
        escapes=True,
        expressions=expressions,
    )
    state.set_enter_handler(CONTENT if keep_quotes else NOOP)
    state.put_handler(quote, CONTENT_AND_LEAVE if keep_quotes else LEAVE_STATE)
    state.put_handler('\\', EscapeHandler(escape))
    state.set_default_handler(CONTENT)
    if end_required:
        state.set_end_content_handler(ValueNotFinishedHandler(quote))
    return state.freeze()


def delimited_state(id: str, closing: str) -> ParsingState:
    """
    A bracketed part of a value: [...], (...) or {...}.

    Nested delimiters and quotes are wired in by the caller before the
    state is frozen.
    """
    state = ParsingState(id, update_value_index=True, lock_value_index=True)
    state.set_enter_handler(CONTENT)
    state.put_handler(closing, CONTENT_AND_LEAVE)
    state.set_default_handler(CONTENT)
    state.set_end_content_handler(ValueNotFinishedHandler(closing))
    return state


def _wire_value_syntax(state: ParsingState, brackets, parenthesis, braces, quotes, back_quotes, escape) -> None:
    state.enter_state_on('[', brackets)
    state.enter_state_on('(', parenthesis)
    state.enter_state_on('{', braces)
    state.enter_state_on('"', quotes)
    state.enter_state_on('`', back_quotes)
    state.put_handler('\\', EscapeHandler(escape))


# ========================================================================
# THE COMMAND GRAMMAR
# ========================================================================

ESCAPE_STATE = escape_state(ESCAPE_ID)
QUOTES_STATE = quotes_state(QUOTES_ID, '"', ESCAPE_STATE)
BACK_QUOTES_STATE = quotes_state(BACK_QUOTES_ID, '`', ESCAPE_STATE, expressions=False)


def _build_value_states():
    brackets = delimited_state(BRACKETS_ID, ']')
    parenthesis = delimited_state(PARENTHESIS_ID, ')')
    braces = delimited_state(BRACES_ID, '}')
    for state in (brackets, parenthesis, braces):
        _wire_value_syntax(state, brackets, parenthesis, braces,
                           QUOTES_STATE, BACK_QUOTES_STATE, ESCAPE_STATE)

    value = ParsingState(
        ARGUMENT_VALUE_ID,
        leave_on_whitespace=True,
        update_value_index=True,
        lock_value_index=True,
    )
    value.set_enter_handler(DISPATCH_CURRENT)
    _wire_value_syntax(value, brackets, parenthesis, braces,
                       QUOTES_STATE, BACK_QUOTES_STATE, ESCAPE_STATE)
    value.set_default_handler(CONTENT)

    for state in (brackets, parenthesis, braces, value):
        state.freeze()
    return brackets, parenthesis, braces, value


BRACKETS_STATE, PARENTHESIS_STATE, BRACES_STATE, ARGUMENT_VALUE_STATE = _build_value_states()


def _build_argument_states():
    name_value_separator = ParsingState(NAME_VALUE_SEPARATOR_ID, leave_on_whitespace=True)
    name_value_separator.set_default_handler(EnterStateHandler(ARGUMENT_VALUE_STATE))
    name_value_separator.set_return_handler(LEAVE_STATE)
    name_value_separator.freeze()

    argument = ParsingState(
        ARGUMENT_ID,
        leave_on_whitespace=True,
        update_value_index=True,
        lock_value_index=True,
    )
    argument.set_enter_handler(CONTENT)
    argument.enter_state_on('=', name_value_separator)
    argument.set_default_handler(CONTENT)
    argument.set_return_handler(LEAVE_STATE)
    argument.freeze()

    # '> file' takes the rest of the line
    output_target = ParsingState(OUTPUT_TARGET_ID)
    output_target.set_default_handler(CONTENT)
    output_target.freeze()

    argument_list = ParsingState(ARGUMENT_LIST_ID, ignore_whitespace=True)
    argument_list.enter_state_on('-', argument)
    argument_list.enter_state_on('>', output_target)
    argument_list.set_default_handler(EnterStateHandler(ARGUMENT_VALUE_STATE))
    argument_list.freeze()

    return name_value_separator, argument, output_target, argument_list


(
    NAME_VALUE_SEPARATOR_STATE,
    ARGUMENT_STATE,
    OUTPUT_TARGET_STATE,
    ARGUMENT_LIST_STATE,
) = _build_argument_states()


def _build_property_states():
    """
    The property list of an operation: (name=value, flag, !flag).

    Whitespace around ',' and '=' is not part of names or values.
    """
    value = ParsingState(PROPERTY_VALUE_ID)
    _wire_value_syntax(value, BRACKETS_STATE, PARENTHESIS_STATE, BRACES_STATE,
                       QUOTES_STATE, BACK_QUOTES_STATE, ESCAPE_STATE)
    value.put_handler(',', LEAVE_STATE)
    value.put_handler(')', LEAVE_STATE)
    value.set_default_handler(CONTENT)
    value.freeze()

    prop = ParsingState(PROPERTY_ID, update_value_index=True, lock_value_index=True)
    prop.set_enter_handler(DISPATCH_CURRENT)
    prop.enter_state_on('=', value)
    prop.put_handler(',', LEAVE_STATE)
    prop.put_handler(')', LEAVE_STATE)
    prop.put_handler('\\', EscapeHandler(ESCAPE_STATE))
    prop.set_default_handler(CONTENT)
    prop.set_return_handler(_LeaveOnReturn(',)'))
    prop.freeze()

    property_list = ParsingState(PROPERTY_LIST_ID, ignore_whitespace=True)
    property_list.put_handler(',', NOOP)
    property_list.put_handler(')', LEAVE_STATE)
    property_list.set_default_handler(EnterStateHandler(prop))
    property_list.set_return_handler(_LeaveOnReturn(')'))
    property_list.set_end_content_handler(ValueNotFinishedHandler(')'))
    property_list.freeze()

    return value, prop, property_list


PROPERTY_VALUE_STATE, PROPERTY_STATE, PROPERTY_LIST_STATE = _build_property_states()


def _build_header_states():
    """
    The header list of an operation: {name=value; rollout plan}.

    A header value follows either '=' or whitespace after the name and
    runs up to the next ';' or the closing '}'.
    """
    value = ParsingState(HEADER_VALUE_ID)
    _wire_value_syntax(value, BRACKETS_STATE, PARENTHESIS_STATE, BRACES_STATE,
                       QUOTES_STATE, BACK_QUOTES_STATE, ESCAPE_STATE)
    value.put_handler(';', LEAVE_STATE)
    value.put_handler('}', LEAVE_STATE)
    value.set_default_handler(CONTENT)
    value.freeze()

    header = ParsingState(HEADER_ID, update_value_index=True, lock_value_index=True)
    header.set_enter_handler(DISPATCH_CURRENT)
    header.enter_state_on('=', value)
    header.put_handler(';', LEAVE_STATE)
    header.put_handler('}', LEAVE_STATE)
    header.set_whitespace_handler(SeparatorWhitespaceHandler('=;}', otherwise=EnterStateHandler(value)))
    header.set_default_handler(CONTENT)
    header.set_return_handler(_LeaveOnReturn(';}'))
    header.freeze()

    header_list = ParsingState(HEADER_LIST_ID, ignore_whitespace=True)
    # The '{' that opened the list is dispatched again by the enter handler
    header_list.set_enter_handler(DISPATCH_CURRENT)
    header_list.put_handler('{', NOOP)
    header_list.put_handler(';', NOOP)
    header_list.put_handler('}', LEAVE_STATE)
    header_list.set_default_handler(EnterStateHandler(header))
    header_list.set_return_handler(_LeaveOnReturn('}'))
    header_list.set_end_content_handler(ValueNotFinishedHandler('}'))
    header_list.freeze()

    headers = ParsingState(HEADERS_ID, ignore_whitespace=True)
    headers.set_default_handler(EnterStateHandler(header_list))
    headers.freeze()

    return value, header, header_list, headers


HEADER_VALUE_STATE, HEADER_STATE, HEADER_LIST_STATE, HEADERS_STATE = _build_header_states()


def _build_command_states():
    command_name = ParsingState(
        COMMAND_NAME_ID,
        leave_on_whitespace=True,
        update_value_index=True,
        lock_value_index=True,
    )
    command_name.set_enter_handler(CONTENT)
    command_name.set_default_handler(CONTENT)
    command_name.freeze()

    # Properties and headers are entered once the operation name is left
    operation_name = ParsingState(OPERATION_NAME_ID, update_value_index=True, lock_value_index=True)
    operation_name.set_enter_handler(CONTENT)
    operation_name.put_handler('(', ChainHandler(LEAVE_STATE, EnterStateHandler(PROPERTY_LIST_STATE)))
    operation_name.put_handler('{', ChainHandler(LEAVE_STATE, EnterStateHandler(HEADER_LIST_STATE)))
    operation_name.set_whitespace_handler(SeparatorWhitespaceHandler('({'))
    operation_name.set_default_handler(CONTENT)
    operation_name.freeze()

    address_operation_separator = ParsingState(ADDRESS_OPERATION_SEPARATOR_ID, ignore_whitespace=True)
    address_operation_separator.set_default_handler(EnterStateHandler(operation_name))
    address_operation_separator.set_return_handler(LEAVE_STATE)
    address_operation_separator.freeze()

    node_separator = ParsingState(NODE_SEPARATOR_ID)
    node_separator.set_enter_handler(LEAVE_STATE)
    node_separator.freeze()

    node_escape = escape_state(NODE_ESCAPE_ID, keep_escape=False)
    node_quotes = quotes_state(NODE_QUOTES_ID, '"', node_escape, keep_quotes=False)

    node = ParsingState(NODE_ID, update_value_index=True, lock_value_index=True)
    node.set_enter_handler(DISPATCH_CURRENT)
    node.put_handler('=', LEAVE_STATE)
    node.put_handler('/', ChainHandler(LEAVE_STATE, EnterStateHandler(node_separator)))
    node.put_handler(':', ChainHandler(LEAVE_STATE, EnterStateHandler(address_operation_separator)))
    node.enter_state_on('"', node_quotes)
    node.put_handler('\\', EscapeHandler(node_escape))
    node.set_whitespace_handler(SeparatorWhitespaceHandler('=/:'))
    node.set_default_handler(CONTENT)
    node.freeze()

    address = ParsingState(ADDRESS_ID)
    address.set_enter_handler(DISPATCH_CURRENT)
    address.enter_state_on('/', node_separator)
    address.enter_state_on(':', address_operation_separator)
    address.enter_state_on('{', HEADER_LIST_STATE)
    address.set_whitespace_handler(SeparatorWhitespaceHandler('/=:{', preceding='/='))
    address.set_default_handler(EnterStateHandler(node))
    address.set_return_handler(_LeaveOnWhitespaceReturn())
    address.freeze()

    command = ParsingState(COMMAND_ID, ignore_whitespace=True)
    for char in '/:.':
        command.enter_state_on(char, address)
    command.set_default_handler(EnterStateHandler(command_name))
    command.set_return_handler(_EnterUnlessEndOfContent(ARGUMENT_LIST_STATE))
    command.freeze()

    return command, address, node, node_separator, address_operation_separator, operation_name, command_name


(
    COMMAND_STATE,
    ADDRESS_STATE,
    NODE_STATE,
    NODE_SEPARATOR_STATE,
    ADDRESS_OPERATION_SEPARATOR_STATE,
    OPERATION_NAME_STATE,
    COMMAND_NAME_STATE,
) = _build_command_states()
