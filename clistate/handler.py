"""
Command Parser Handler - Base handler class for command line parsing events.

Clients should subclass this and override the methods they need.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .format import CommandFormat
    from .parser import ParseResult


class CommandParserHandler:
    """
    Base handler class for command line parsing events.
    Clients should subclass this and override the methods they need.

    Every index is an offset in the line as it was parsed, that is after
    expressions and variables were substituted.
    """

    def on_format(self, format: 'CommandFormat') -> None:
        """Called once when a command line starts, with its format."""
        pass

    # ========================================================================
    # ADDRESS
    # ========================================================================

    def on_root_node(self, index: int) -> None:
        """
        Called for the '/' that starts an absolute address.

        Args:
            index: Offset of the '/'
        """
        pass

    def on_parent_node(self, index: int) -> None:
        """Called for a '..' node."""
        pass

    def on_node_type(self, index: int, node_type: str) -> None:
        """
        Called for a node type, i.e. a node followed by '='.

        Args:
            index: Offset where the node type starts
            node_type: The node type
        """
        pass

    def on_node_type_name_separator(self, index: int) -> None:
        """Called for the '=' between a node type and a node name."""
        pass

    def on_node_name(self, index: int, node_name: str) -> None:
        """Called for the node name following a node type."""
        pass

    def on_node_type_or_name(self, index: int, type_or_name: str) -> None:
        """
        Called for a node that is not followed by '='.

        Whether it is a type or a name depends on what came before it,
        which is up to the handler to decide.
        """
        pass

    def on_node_separator(self, index: int) -> None:
        """Called for a '/' between two nodes."""
        pass

    def on_address_operation_separator(self, index: int) -> None:
        """Called for the ':' ending the address."""
        pass

    # ========================================================================
    # OPERATION AND ARGUMENTS
    # ========================================================================

    def on_operation_name(self, index: int, operation_name: str) -> None:
        """Called for the operation (or command) name."""
        pass

    def on_argument_name(self, index: int, name: str) -> None:
        """
        Called for an argument name that has no value (yet).

        Args:
            index: Offset where the name starts
            name: The name, including its leading dashes
        """
        pass

    def on_name_value_separator(self, index: int) -> None:
        """Called for a '=' that is not followed by a value."""
        pass

    def on_argument(self, name: Optional[str], value: str, start: int, end: int) -> None:
        """
        Called when an argument with a value is complete.

        Args:
            name: The argument name including dashes, or None for a
                positional argument
            value: The raw value text, quotes and escapes preserved
            start: Offset where the argument starts
            end: Offset just past the end of the argument
        """
        pass

    def on_argument_separator(self, index: int) -> None:
        """Called for the whitespace ending an argument, or a ',' in a property list."""
        pass

    def on_property_list_start(self, index: int) -> None:
        """Called for the '(' opening the property list of an operation."""
        pass

    def on_property_list_end(self, index: int) -> None:
        """Called for the ')' closing the property list."""
        pass

    def on_output_target(self, index: int, target: str) -> None:
        """
        Called for '> file' at the end of a line.

        Args:
            index: Offset of the '>'
            target: The rest of the line, trimmed
        """
        pass

    # ========================================================================
    # HEADERS
    # ========================================================================

    def on_header_list_start(self, index: int) -> None:
        """Called for the '{' opening the header list."""
        pass

    def on_header_list_end(self, index: int) -> None:
        """Called for the '}' closing the header list."""
        pass

    def on_header_name(self, index: int, name: str) -> None:
        """Called for a header name that has no value (yet)."""
        pass

    def on_header(self, name: str, value: str, index: int) -> None:
        """
        Called when a header with a value is complete.

        Args:
            name: The header name
            value: The raw value text, trimmed
            index: Offset where the header starts
        """
        pass

    def on_header_separator(self, index: int) -> None:
        """Called for a ';' between headers."""
        pass

    def on_parsed(self, result: 'ParseResult') -> None:
        """Called once the whole line has been parsed."""
        pass
