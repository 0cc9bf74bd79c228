"""
Command Format - How a parsed command is written back as text.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .command import ParsedArgument, ParsedCommand


# Characters that can't appear bare in a node type or name
_NODE_SPECIAL = ' \t/:="\\'


@dataclass(frozen=True)
class CommandFormat:
    """The separators of the management command syntax."""

    property_sep: str = ' '
    node_sep: str = '/'
    address_operation_sep: str = ':'
    name_value_sep: str = '='
    argument_prefix_str: str = '-'

    def property_separator(self) -> str:
        return self.property_sep

    def node_separator(self) -> str:
        return self.node_sep

    def address_operation_separator(self) -> str:
        return self.address_operation_sep

    def name_value_separator(self) -> str:
        return self.name_value_sep

    def argument_prefix(self) -> str:
        return self.argument_prefix_str

    def is_property_separator(self, char: str) -> bool:
        return char != '' and char in ' \t\n\r\f\v'

    def format_node(self, text: str) -> str:
        """Quote a node type or name when it contains separators."""
        if text and not any(char in _NODE_SPECIAL for char in text):
            return text
        escaped = text.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'

    def format(self, command: 'ParsedCommand') -> str:
        """
        Write a command back as a line.

        The line is operation-equivalent to the one that was parsed:
        separators are normalized, values are kept as they were typed.
        """
        parts = []
        head = ''
        if command.address:
            for node in command.address:
                head += self.node_sep + self.format_node(node.type)
                if node.name is not None:
                    head += self.name_value_sep + self.format_node(node.name)
        if command.operation_name:
            if command.is_operation():
                head += self.address_operation_sep
            head += command.operation_name

        properties = [self.format_argument(a) for a in command.arguments if a.in_property_list]
        if properties or command.has_property_list():
            head += '(' + ','.join(properties) + ')'
        if command.headers:
            head += '{' + '; '.join(name + self.name_value_sep + value
                                    for name, value in command.headers.items()) + '}'
        if head:
            parts.append(head)

        parts.extend(self.format_argument(a) for a in command.arguments if not a.in_property_list)
        if command.output_target:
            parts.append('> ' + command.output_target)
        return self.property_sep.join(parts)

    def format_argument(self, argument: 'ParsedArgument') -> str:
        if argument.name is None:
            return argument.value
        if argument.value is None:
            return argument.name
        return argument.name + self.name_value_sep + argument.value


COMMAND_FORMAT = CommandFormat()
