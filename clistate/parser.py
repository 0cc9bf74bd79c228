"""
State Parser - Drives a state graph over a line, one character at a time.

The parser feeds every character of the line to the handler the current
state picks for it. When the line is exhausted the active states are
unwound, each getting a chance to react to the end of content.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .callback import CommandStateCallback, StateCallback
from .command import ParsedCommand
from .context import ParsingContext
from .exceptions import CommandFormatError
from .expressions import ExpressionResolver, SubstitutedLine
from .handler import CommandParserHandler
from .stack_tracker import DEFAULT_MAX_DEPTH
from .state import ParsingState
from .states import ARGUMENT_LIST_STATE, COMMAND_STATE, HEADERS_STATE


logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """
    The outcome of a parse.

    Attributes:
        line: The parsed line with the substitutions made in it
        value_index: Offset where the last value started
        error: The first error met in lenient mode, None otherwise
    """

    line: SubstitutedLine
    value_index: int = 0
    error: Optional[CommandFormatError] = None


class StateParser:
    """
    Parses lines with a state graph.

    Args:
        resolve_system_properties: Substitute ${...} expressions
        properties: Values for ${...} expressions
        variables: Values for $name variables; variables are left alone
            when not given
        max_depth: Maximum number of nested states
    """

    def __init__(
        self,
        resolve_system_properties: bool = False,
        properties: Optional[Mapping[str, str]] = None,
        variables: Optional[Mapping[str, str]] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.resolve_system_properties = resolve_system_properties
        self.resolver = ExpressionResolver(properties, variables)
        self.max_depth = max_depth

    def parse(
        self,
        line: str,
        callback: StateCallback,
        initial_state: ParsingState = COMMAND_STATE,
        strict: bool = True,
    ) -> ParseResult:
        """
        Parse a line starting in the given state.

        In strict mode a value left unfinished raises an error; otherwise
        the error is returned in the result and the partial line is still
        reported to the callback.
        """
        if line is None or not line.strip():
            return ParseResult(SubstitutedLine(line or ''))

        logger.debug("Parsing %r from %s (strict=%s)", line, initial_state.id, strict)
        ctx = ParsingContext(
            line,
            callback,
            strict=strict,
            resolver=self.resolver,
            resolve_system_properties=self.resolve_system_properties,
            max_depth=self.max_depth,
        )
        try:
            self._run(ctx, initial_state)
        except (CommandFormatError, AssertionError):
            raise
        except Exception as e:
            raise CommandFormatError(f"Failed to parse '{line}'", cause=e) from e

        logger.debug("Parsed %r, value index %d", ctx.input, ctx.value_index)
        return ParseResult(ctx.line, ctx.value_index, ctx.error)

    def _run(self, ctx: ParsingContext, initial_state: ParsingState) -> None:
        ctx.enter_state(initial_state)

        while not ctx.is_end_of_content():
            if ctx.expressions_enabled:
                ctx.resolve_expression()
                if ctx.is_end_of_content():
                    break
            ctx.state.get_handler(ctx.character).handle(ctx)
            ctx.advance_location()

        self._end_content(ctx)

    @staticmethod
    def _end_content(ctx: ParsingContext) -> None:
        """Unwind the stack, letting every state react to the end of content."""
        while len(ctx.stack) > 1:
            ctx.state.end_content_handler.handle(ctx)
            if len(ctx.stack) > 1:
                ctx.leave_state()

        if ctx.stack:
            ctx.state.end_content_handler.handle(ctx)
        if ctx.stack:
            ctx.leave_state()


# ========================================================================
# CONVENIENCE FUNCTIONS
# ========================================================================

def parse_command(
    line: str,
    handler: Optional[CommandParserHandler] = None,
    strict: bool = True,
    **options,
) -> CommandParserHandler:
    """
    Parse a command line and return the handler that collected it.

    Without a handler a ParsedCommand is created. Options are passed to
    the StateParser.
    """
    handler = handler or ParsedCommand()
    result = StateParser(**options).parse(line, CommandStateCallback(handler), COMMAND_STATE, strict)
    handler.on_parsed(result)
    return handler


def parse_arguments(
    line: str,
    handler: Optional[CommandParserHandler] = None,
    strict: bool = True,
    **options,
) -> CommandParserHandler:
    """Parse a line holding arguments only, without a command name."""
    handler = handler or ParsedCommand()
    result = StateParser(**options).parse(line, CommandStateCallback(handler), ARGUMENT_LIST_STATE, strict)
    handler.on_parsed(result)
    return handler


def parse_headers(
    line: str,
    handler: Optional[CommandParserHandler] = None,
    strict: bool = True,
    **options,
) -> CommandParserHandler:
    """Parse an operation header list such as '{rollout main-group; blocking-timeout=5}'."""
    handler = handler or ParsedCommand()
    result = StateParser(**options).parse(line, CommandStateCallback(handler), HEADERS_STATE, strict)
    handler.on_parsed(result)
    return handler
