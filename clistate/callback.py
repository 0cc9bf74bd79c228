"""
State Callbacks - Low level events fired by the parsing context.

A StateCallback is told when states are entered and left and when a
character is taken as content. CommandStateCallback turns these into the
high level events of a CommandParserHandler.
"""

from .buffers import Buffers
from .exceptions import ArgumentValueNotFinishedError, OperationFormatError
from .format import COMMAND_FORMAT, CommandFormat
from .handler import CommandParserHandler
from .state import is_whitespace
from .states import (
    ADDRESS_ID,
    ADDRESS_OPERATION_SEPARATOR_ID,
    ARGUMENT_ID,
    ARGUMENT_LIST_ID,
    ARGUMENT_VALUE_ID,
    COMMAND_ID,
    COMMAND_NAME_ID,
    HEADER_ID,
    HEADER_LIST_ID,
    HEADER_VALUE_ID,
    NAME_VALUE_SEPARATOR_ID,
    NODE_ID,
    NODE_SEPARATOR_ID,
    OPERATION_NAME_ID,
    OUTPUT_TARGET_ID,
    PROPERTY_ID,
    PROPERTY_LIST_ID,
    PROPERTY_VALUE_ID,
)


# States whose characters make up a single token
_TOKEN_STATES = (
    NODE_ID,
    COMMAND_NAME_ID,
    OPERATION_NAME_ID,
    ARGUMENT_ID,
    PROPERTY_ID,
    HEADER_ID,
    OUTPUT_TARGET_ID,
)


class StateCallback:
    """
    Base class for state level events.
    Subclasses override the methods they need.
    """

    def entered_state(self, ctx) -> None:
        """Called after a state was pushed, before its enter handler runs."""
        pass

    def leaving_state(self, ctx) -> None:
        """Called before the current state is popped."""
        pass

    def character(self, ctx) -> None:
        """Called when the current character is part of a token."""
        pass


class CommandStateCallback(StateCallback):
    """
    Collects tokens of the command grammar and reports them to a handler.

    Node, operation name and argument tokens are accumulated in a buffer
    from the moment their state is entered until it is left.
    """

    def __init__(self, handler: CommandParserHandler, format: CommandFormat = COMMAND_FORMAT):
        self.handler = handler
        self.format = format
        self.buffers = Buffers()
        self._address_start = -1
        self._expect_node_name = False

    def character(self, ctx) -> None:
        self.buffers.append(ctx.character)

    # ========================================================================
    # STATE EVENTS
    # ========================================================================

    def entered_state(self, ctx) -> None:
        state_id = ctx.state.id
        location = ctx.location

        if state_id == COMMAND_ID:
            self.handler.on_format(self.format)

        elif state_id == ADDRESS_ID:
            self._address_start = location

        elif state_id == NODE_SEPARATOR_ID:
            self._expect_node_name = False
            if location == self._address_start:
                self.handler.on_root_node(location)
            else:
                self.handler.on_node_separator(location)

        elif state_id == ADDRESS_OPERATION_SEPARATOR_ID:
            self._expect_node_name = False
            self.handler.on_address_operation_separator(location)

        elif state_id in _TOKEN_STATES:
            self._start_token(location)

        elif state_id == ARGUMENT_LIST_ID:
            # Entered after the command name or address, on whitespace
            if len(ctx.stack) > 1:
                self.handler.on_argument_separator(location)

        elif state_id in (NAME_VALUE_SEPARATOR_ID, PROPERTY_VALUE_ID, HEADER_VALUE_ID):
            self.buffers.name = self.buffers.take().strip()
            self.buffers.name_value_separator = location

        elif state_id == ARGUMENT_VALUE_ID:
            if self._is_positional(ctx):
                self._start_token(location)
            self.buffers.value_start = location

        elif state_id == PROPERTY_LIST_ID:
            self.handler.on_property_list_start(location)

        elif state_id == HEADER_LIST_ID:
            self.handler.on_header_list_start(location)

    def leaving_state(self, ctx) -> None:
        state_id = ctx.state.id

        if state_id == NODE_ID:
            self._node_done(ctx)

        elif state_id in (COMMAND_NAME_ID, OPERATION_NAME_ID):
            name = self.buffers.take()
            if name:
                self.handler.on_operation_name(self.buffers.start_index, name)

        elif state_id == ARGUMENT_ID:
            self._argument_done(ctx)

        elif state_id == ARGUMENT_VALUE_ID and self._is_positional(ctx):
            value = self.buffers.take()
            self.handler.on_argument(None, value, self.buffers.start_index, ctx.location)
            self._argument_separator(ctx)
            self.buffers.clear_all()

        elif state_id == PROPERTY_ID:
            self._property_done(ctx)

        elif state_id == HEADER_ID:
            self._header_done(ctx)

        elif state_id == PROPERTY_LIST_ID:
            if not ctx.is_end_of_content():
                self.handler.on_property_list_end(ctx.location)

        elif state_id == HEADER_LIST_ID:
            if not ctx.is_end_of_content():
                self.handler.on_header_list_end(ctx.location)

        elif state_id == OUTPUT_TARGET_ID:
            self.handler.on_output_target(self.buffers.start_index, self.buffers.take().strip())
            self.buffers.clear_all()

    # ========================================================================
    # TOKENS
    # ========================================================================

    def _start_token(self, location: int) -> None:
        self.buffers.clear_all()
        self.buffers.start_index = location

    @staticmethod
    def _is_positional(ctx) -> bool:
        frames = ctx.stack.frames
        return len(frames) < 2 or frames[-2].state.id != NAME_VALUE_SEPARATOR_ID

    def _value(self, ctx) -> str:
        value = self.buffers.take()
        if ctx.is_end_of_content() and isinstance(ctx.error, ArgumentValueNotFinishedError):
            # Trailing whitespace belongs to a value that is still open
            return value.lstrip()
        return value.strip()

    def _node_done(self, ctx) -> None:
        value = self.buffers.take()
        start = self.buffers.start_index

        if not ctx.is_end_of_content() and ctx.character == '=':
            self.handler.on_node_type(start, value)
            self.handler.on_node_type_name_separator(ctx.location)
            self._expect_node_name = True
            return

        if self._expect_node_name:
            self._expect_node_name = False
            if value or not ctx.is_end_of_content():
                self.handler.on_node_name(start, value)
        elif value == '..':
            self.handler.on_parent_node(start)
        elif value and value != '.':
            self.handler.on_node_type_or_name(start, value)

    def _argument_done(self, ctx) -> None:
        buffers = self.buffers
        start = buffers.start_index

        if buffers.name is None:
            self.handler.on_argument_name(start, buffers.take())
        elif buffers.value_start >= 0:
            self.handler.on_argument(buffers.name, buffers.take(), start, ctx.location)
        else:
            self.handler.on_argument_name(start, buffers.name)
            self.handler.on_name_value_separator(buffers.name_value_separator)

        self._argument_separator(ctx)
        buffers.clear_all()

    def _argument_separator(self, ctx) -> None:
        if not ctx.is_end_of_content() and is_whitespace(ctx.character):
            self.handler.on_argument_separator(ctx.location)

    def _property_done(self, ctx) -> None:
        """A property without a value is a flag: 'name' is true, '!name' is false."""
        buffers = self.buffers
        start = buffers.start_index

        if buffers.name is None:
            name = buffers.take().strip()
            value = 'true'
            if name.startswith('!'):
                name = name[1:].lstrip()
                value = 'false'
                if name.startswith('!'):
                    raise OperationFormatError(f"Property name at index {start} can't start with '!!'", start)
            if name:
                self.handler.on_argument(name, value, start, ctx.location)
        elif not buffers.name:
            raise OperationFormatError(f"Property name is missing at index {start}", start)
        else:
            value = self._value(ctx)
            if value:
                self.handler.on_argument(buffers.name, value, start, ctx.location)
            else:
                self.handler.on_argument_name(start, buffers.name)
                self.handler.on_name_value_separator(buffers.name_value_separator)

        if not ctx.is_end_of_content() and ctx.character == ',':
            self.handler.on_argument_separator(ctx.location)
        buffers.clear_all()

    def _header_done(self, ctx) -> None:
        buffers = self.buffers
        start = buffers.start_index

        if buffers.name is None:
            name, value = buffers.take().strip(), ''
        else:
            name, value = buffers.name, self._value(ctx)

        if not name:
            raise OperationFormatError(f"Header name is missing at index {start}", start)
        if value:
            self.handler.on_header(name, value, start)
        else:
            self.handler.on_header_name(start, name)

        if not ctx.is_end_of_content() and ctx.character == ';':
            self.handler.on_header_separator(ctx.location)
        buffers.clear_all()
