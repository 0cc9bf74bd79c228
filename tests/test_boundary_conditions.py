"""Test boundary conditions and stress scenarios."""

import pytest

from clistate import (
    ArgumentValueNotFinishedError,
    CommandFormatError,
    CommandStateCallback,
    NestingTooDeepError,
    ParsedCommand,
    ParsingContext,
    StateCallback,
    StateParser,
    parse_command,
)
from clistate.stack_tracker import Frame, StackTracker
from clistate.states import ARGUMENT_LIST_STATE, ARGUMENT_VALUE_STATE, COMMAND_STATE

LINE = '/a=b/c="d e":op -x=[1, (2)] "q \\" r" `t` \\ z'


def test_cursor_advances_over_each_index_once(monkeypatch):
    """
    The cursor advances over each index exactly once.

    A state entered with DISPATCH_CURRENT handles the character it was
    entered on again, without moving the cursor.
    """
    visited = []
    advance = ParsingContext.advance_location

    def recording_advance(self):
        visited.append(self.location)
        advance(self)

    monkeypatch.setattr(ParsingContext, 'advance_location', recording_advance)
    parse_command(LINE)
    assert visited == list(range(len(LINE)))


def test_cursor_advances_over_each_index_once_with_unfinished_value(monkeypatch):
    visited = []
    advance = ParsingContext.advance_location

    def recording_advance(self):
        visited.append(self.location)
        advance(self)

    monkeypatch.setattr(ParsingContext, 'advance_location', recording_advance)
    line = 'ls -a=[x, "y'
    parse_command(line, strict=False)
    assert visited == list(range(len(line)))


def test_cursor_advances_over_each_index_once_in_operation_lists(monkeypatch):
    visited = []
    advance = ParsingContext.advance_location

    def recording_advance(self):
        visited.append(self.location)
        advance(self)

    monkeypatch.setattr(ParsingContext, 'advance_location', recording_advance)
    line = '/ a = b : op( x=1 , !y ){rollout main; c=d} > out'
    parse_command(line)
    assert visited == list(range(len(line)))


def test_parsing_is_idempotent():
    first = parse_command(LINE)
    second = parse_command(LINE)
    assert first.address == second.address
    assert first.operation_name == second.operation_name
    assert first.arguments == second.arguments
    assert first.value_index == second.value_index
    assert first.last_chunk_index == second.last_chunk_index


def test_complex_line():
    command = parse_command(LINE)
    assert [(node.type, node.name) for node in command.address] == [('a', 'b'), ('c', 'd e')]
    assert command.operation_name == 'op'
    assert command.named_arguments() == {'-x': '[1, (2)]'}
    assert command.positional_arguments() == ['"q \\" r"', '`t`', '\\ z']


class TestStrictAndLenient:
    """Unfinished values fail a complete parse and pass a partial one."""

    @pytest.mark.parametrize('line, offset, delimiter', [
        ('ls "abc', 3, '"'),
        ('ls [a, b', 3, ']'),
        ('ls -a=(x', 6, ')'),
        ('ls {a=[b}', 6, ']'),
        ('ls `abc', 3, '`'),
        ('/a="b:op', 3, '"'),
    ])
    def test_strict_raises_with_offset(self, line, offset, delimiter):
        with pytest.raises(ArgumentValueNotFinishedError) as exc_info:
            parse_command(line)
        assert exc_info.value.offset == offset
        assert exc_info.value.delimiter == delimiter

    def test_lenient_returns_partial_value(self):
        command = parse_command('ls "abc', strict=False)
        assert command.positional_arguments() == ['"abc']
        assert isinstance(command.error, ArgumentValueNotFinishedError)
        assert command.error.offset == 3

    def test_lenient_keeps_first_error(self):
        command = parse_command('ls [a, "b', strict=False)
        assert command.error.offset == 7
        assert command.positional_arguments() == ['[a, "b']

    def test_lenient_named_argument(self):
        command = parse_command('ls -a=[x, y', strict=False)
        assert command.named_arguments() == {'-a': '[x, y'}

    def test_complete_line_has_no_error(self):
        command = parse_command('ls "abc"', strict=False)
        assert command.error is None


class TestNestingDepth:

    def test_deep_brackets_raise(self):
        with pytest.raises(NestingTooDeepError):
            parse_command('ls ' + '[' * 10000)

    def test_depth_limit_offset(self):
        parser = StateParser(max_depth=10)
        with pytest.raises(NestingTooDeepError) as exc_info:
            parser.parse('ls ' + '[' * 20, CommandStateCallback(ParsedCommand()))
        assert exc_info.value.offset == 10

    def test_depth_within_limit(self):
        parser = StateParser(max_depth=10)
        result = parser.parse('ls [[[x]]]', CommandStateCallback(ParsedCommand()))
        assert result.error is None

    def test_stack_tracker_limit(self):
        tracker = StackTracker(max_depth=1)
        tracker.push(Frame(COMMAND_STATE, 0, True, True))
        with pytest.raises(NestingTooDeepError):
            tracker.push(Frame(ARGUMENT_VALUE_STATE, 1, True, True))
        assert tracker.state_ids() == ['COMMAND']
        assert tracker.pop().state is COMMAND_STATE
        assert tracker.peek() is None
        assert not tracker


class TestParsingContext:

    def test_cursor(self):
        ctx = ParsingContext('ab', StateCallback())
        ctx.enter_state(ARGUMENT_VALUE_STATE)
        assert ctx.character == 'a'
        ctx.advance_location()
        ctx.advance_location()
        assert ctx.is_end_of_content()
        assert ctx.character == ''

    def test_cursor_never_passes_end(self):
        ctx = ParsingContext('a', StateCallback())
        ctx.advance_location()
        with pytest.raises(AssertionError):
            ctx.advance_location()

    def test_first_error_kept(self):
        ctx = ParsingContext('a', StateCallback())
        first = CommandFormatError('first')
        ctx.set_error(first)
        ctx.set_error(CommandFormatError('second'))
        assert ctx.error is first

    def test_value_index_lock_released_on_leave(self):
        ctx = ParsingContext('abc', StateCallback())
        ctx.enter_state(ARGUMENT_LIST_STATE)
        ctx.advance_location()
        ctx.enter_state(ARGUMENT_VALUE_STATE)
        assert ctx.value_index == 1
        assert ctx.value_index_locked
        ctx.leave_state()
        assert not ctx.value_index_locked
        assert ctx.state is ARGUMENT_LIST_STATE
