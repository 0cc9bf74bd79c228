"""
clistate - A character-at-a-time state machine parser for management command lines.
"""

from .callback import CommandStateCallback, StateCallback
from .command import AddressNode, ParsedArgument, ParsedCommand, Separator
from .completion import PartialValue, parse_partial_value
from .context import ParsingContext
from .exceptions import (
    ArgumentValueNotFinishedError,
    CommandFormatError,
    NestingTooDeepError,
    OperationFormatError,
    UnresolvedExpressionError,
    UnresolvedVariableError,
)
from .expressions import ExpressionResolver, SubstitutedLine
from .format import COMMAND_FORMAT, CommandFormat
from .handler import CommandParserHandler
from .parser import ParseResult, StateParser, parse_arguments, parse_command, parse_headers
from .state import ParsingState
from .values import parse_value

__all__ = [
    'StateParser',
    'ParseResult',
    'ParsingState',
    'ParsingContext',
    'StateCallback',
    'CommandStateCallback',
    'CommandParserHandler',
    'ParsedCommand',
    'ParsedArgument',
    'AddressNode',
    'Separator',
    'CommandFormat',
    'COMMAND_FORMAT',
    'ExpressionResolver',
    'SubstitutedLine',
    'PartialValue',
    'parse_command',
    'parse_arguments',
    'parse_headers',
    'parse_partial_value',
    'parse_value',
    'CommandFormatError',
    'ArgumentValueNotFinishedError',
    'UnresolvedExpressionError',
    'UnresolvedVariableError',
    'OperationFormatError',
    'NestingTooDeepError',
]
__version__ = '0.1.0'
