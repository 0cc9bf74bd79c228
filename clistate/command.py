"""
Parsed Command - The default handler, collecting a command line into an object.

Besides the address, operation name and arguments it remembers the last
separator and chunk seen, which is what tab-completion needs to decide
what to suggest for a partial line.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .exceptions import CommandFormatError, OperationFormatError
from .expressions import SubstitutedLine
from .format import COMMAND_FORMAT, CommandFormat
from .handler import CommandParserHandler


class Separator(Enum):
    NONE = 'none'
    NODE = 'node'
    NODE_TYPE_NAME = 'node-type-name'
    ADDRESS_OPERATION = 'address-operation'
    NAME_VALUE = 'name-value'
    ARGUMENT = 'argument'
    PROPERTY_LIST_START = 'property-list-start'
    PROPERTY_LIST_END = 'property-list-end'
    HEADER_LIST_START = 'header-list-start'
    HEADER = 'header'


@dataclass
class AddressNode:
    """A type=name pair of an address. The name is None until it is parsed."""

    type: str
    name: Optional[str] = None


@dataclass
class ParsedArgument:
    """
    An argument of the command line.

    Attributes:
        name: The name including its dashes, None for positional arguments
        value: The raw value, None for flags without '='
        start: Offset where the argument starts
        end: Offset just past the argument
        index: Position of the argument on the line
        in_property_list: The argument came from an operation's (...) list
    """

    name: Optional[str]
    value: Optional[str]
    start: int
    end: int
    index: int
    in_property_list: bool = False

    @property
    def is_positional(self) -> bool:
        return self.name is None

    @property
    def value_start(self) -> int:
        """Offset where the value starts."""
        if self.name is None:
            return self.start
        return self.start + len(self.name) + 1


class ParsedCommand(CommandParserHandler):
    """
    Collects the events of a command line.

    Args:
        prefix: Address the parsed address is relative to. A line starting
            with '/' replaces it.
    """

    def __init__(self, prefix: Optional[List[AddressNode]] = None):
        self.prefix: List[AddressNode] = [AddressNode(n.type, n.name) for n in prefix or []]
        self.address: List[AddressNode] = [AddressNode(n.type, n.name) for n in self.prefix]
        self.format: Optional[CommandFormat] = None

        self.operation_name: Optional[str] = None
        self.operation_name_index = -1
        self.arguments: List[ParsedArgument] = []

        self.last_separator = Separator.NONE
        self.last_separator_index = -1
        self.last_chunk_index = 0
        self._operation = False

        self._property_list = False
        self._in_property_list = False
        self.headers: Dict[str, str] = {}
        self.last_header_name: Optional[str] = None
        self.output_target: Optional[str] = None
        self._request_complete = False

        self.line: Optional[SubstitutedLine] = None
        self.value_index = 0
        self.error: Optional[CommandFormatError] = None

    # ========================================================================
    # ADDRESS EVENTS
    # ========================================================================

    def on_format(self, format: CommandFormat) -> None:
        self.format = format

    def on_root_node(self, index: int) -> None:
        self._operation = True
        self.address.clear()
        self._separator(Separator.NODE, index)

    def on_parent_node(self, index: int) -> None:
        self._operation = True
        if not self.address:
            raise OperationFormatError(f"Can't go to the parent of the root node at index {index}", index)
        self.address.pop()
        self._chunk(index)

    def on_node_type(self, index: int, node_type: str) -> None:
        self._operation = True
        if not node_type:
            raise OperationFormatError(f"Node type is missing at index {index}", index)
        self._check_complete(node_type, index)
        self.address.append(AddressNode(node_type))
        self._chunk(index)

    def on_node_type_name_separator(self, index: int) -> None:
        self._separator(Separator.NODE_TYPE_NAME, index)

    def on_node_name(self, index: int, node_name: str) -> None:
        if not node_name:
            raise OperationFormatError(f"Node name is missing at index {index}", index)
        if not self.address or self.address[-1].name is not None:
            raise OperationFormatError(f"Node name '{node_name}' at index {index} has no node type", index)
        self.address[-1].name = node_name
        self._chunk(index)

    def on_node_type_or_name(self, index: int, type_or_name: str) -> None:
        self._operation = True
        if self.ends_on_type():
            self.address[-1].name = type_or_name
        else:
            self.address.append(AddressNode(type_or_name))
        self._chunk(index)

    def on_node_separator(self, index: int) -> None:
        self._operation = True
        self._separator(Separator.NODE, index)

    def on_address_operation_separator(self, index: int) -> None:
        self._operation = True
        if self.ends_on_type():
            raise OperationFormatError(
                f"The node name for '{self.address[-1].type}' must be specified "
                f"before the operation at index {index}",
                index,
            )
        self._separator(Separator.ADDRESS_OPERATION, index)

    def _check_complete(self, node_type: str, index: int) -> None:
        if self.ends_on_type():
            raise OperationFormatError(
                f"Can't proceed with node type '{node_type}' until the node name "
                f"for '{self.address[-1].type}' is specified",
                index,
            )

    # ========================================================================
    # OPERATION AND ARGUMENT EVENTS
    # ========================================================================

    def on_operation_name(self, index: int, operation_name: str) -> None:
        self.operation_name = operation_name
        self.operation_name_index = index
        self._chunk(index)

    def on_argument_name(self, index: int, name: str) -> None:
        self.arguments.append(ParsedArgument(
            name, None, index, index + len(name), len(self.arguments), self._in_property_list,
        ))
        self._chunk(index)

    def on_name_value_separator(self, index: int) -> None:
        if self.arguments:
            argument = self.arguments[-1]
            argument.value = ''
            argument.end = index + 1
        self._separator(Separator.NAME_VALUE, index)

    def on_argument(self, name: Optional[str], value: str, start: int, end: int) -> None:
        argument = ParsedArgument(name, value, start, end, len(self.arguments), self._in_property_list)
        self.arguments.append(argument)
        self._chunk(argument.value_start)

    def on_argument_separator(self, index: int) -> None:
        self._separator(Separator.ARGUMENT, index)

    def on_property_list_start(self, index: int) -> None:
        self._property_list = True
        self._in_property_list = True
        self._separator(Separator.PROPERTY_LIST_START, index)

    def on_property_list_end(self, index: int) -> None:
        self._in_property_list = False
        self._separator(Separator.PROPERTY_LIST_END, index)

    def on_output_target(self, index: int, target: str) -> None:
        self.output_target = target
        self._chunk(index)

    # ========================================================================
    # HEADER EVENTS
    # ========================================================================

    def on_header_list_start(self, index: int) -> None:
        self._separator(Separator.HEADER_LIST_START, index)

    def on_header_list_end(self, index: int) -> None:
        self._request_complete = True
        self._separator(Separator.NONE, index)

    def on_header_name(self, index: int, name: str) -> None:
        self.last_header_name = name
        self._chunk(index)

    def on_header(self, name: str, value: str, index: int) -> None:
        self.headers[name] = value
        self.last_header_name = None
        self._chunk(index)

    def on_header_separator(self, index: int) -> None:
        self._separator(Separator.HEADER, index)

    def on_parsed(self, result) -> None:
        self.line = result.line
        self.value_index = result.value_index
        self.error = result.error

    def _separator(self, separator: Separator, index: int) -> None:
        self.last_separator = separator
        self.last_separator_index = index

    def _chunk(self, index: int) -> None:
        self.last_separator = Separator.NONE
        self.last_chunk_index = index

    # ========================================================================
    # QUERIES
    # ========================================================================

    @property
    def original_line(self) -> Optional[str]:
        return self.line.original if self.line else None

    @property
    def substituted_line(self) -> Optional[str]:
        return self.line.substituted if self.line else None

    def is_operation(self) -> bool:
        """True when the line used the address:operation syntax."""
        return self._operation

    def has_address(self) -> bool:
        return bool(self.address)

    def has_operation_name(self) -> bool:
        return self.operation_name is not None

    def has_arguments(self) -> bool:
        return bool(self.arguments)

    def ends_on_type(self) -> bool:
        """True when the last address node has a type but no name."""
        return bool(self.address) and self.address[-1].name is None

    def ends_on_separator(self) -> bool:
        return self.last_separator is not Separator.NONE

    def ends_on_node_separator(self) -> bool:
        return self.last_separator is Separator.NODE

    def ends_on_node_type_name_separator(self) -> bool:
        return self.last_separator is Separator.NODE_TYPE_NAME

    def ends_on_address_operation_separator(self) -> bool:
        return self.last_separator is Separator.ADDRESS_OPERATION

    def ends_on_name_value_separator(self) -> bool:
        return self.last_separator is Separator.NAME_VALUE

    def ends_on_argument_separator(self) -> bool:
        return self.last_separator is Separator.ARGUMENT

    def ends_on_property_list_start(self) -> bool:
        return self.last_separator is Separator.PROPERTY_LIST_START

    def ends_on_property_list_end(self) -> bool:
        return self.last_separator is Separator.PROPERTY_LIST_END

    def ends_on_header_list_start(self) -> bool:
        return self.last_separator is Separator.HEADER_LIST_START

    def ends_on_header_separator(self) -> bool:
        return self.last_separator is Separator.HEADER

    def has_property_list(self) -> bool:
        """True when the operation name was followed by '('."""
        return self._property_list

    def has_headers(self) -> bool:
        return bool(self.headers) or self.last_header_name is not None

    def has_header(self, name: str) -> bool:
        return name in self.headers

    def is_request_complete(self) -> bool:
        """True once the header list, which ends an operation request, is closed."""
        return self._request_complete

    def positional_arguments(self) -> List[str]:
        return [arg.value for arg in self.arguments if arg.is_positional]

    def named_arguments(self) -> Dict[str, Optional[str]]:
        return {arg.name: arg.value for arg in self.arguments if not arg.is_positional}

    def get_argument(self, name: str) -> Optional[ParsedArgument]:
        for argument in self.arguments:
            if argument.name == name:
                return argument
        return None

    def has_argument(self, name: str) -> bool:
        return self.get_argument(name) is not None

    def to_line(self) -> str:
        """Write the command back as a line."""
        return (self.format or COMMAND_FORMAT).format(self)

    def __repr__(self) -> str:
        return (
            f"ParsedCommand(address={self.address!r}, operation_name={self.operation_name!r}, "
            f"arguments={self.arguments!r}, headers={self.headers!r})"
        )
