"""
Buffers - Manages the token buffers of the command callback.

Characters of the token being parsed are accumulated here together with
where the token started and, for name=value arguments, the name and the
location of the '=' separator.
"""

from typing import Optional


class Buffers:
    """
    Manages token buffers.

    The buffer accumulates the characters of the current token. The name
    is set once a name=value separator has been met, value_start is the
    location where the value of the current argument began.
    """

    def __init__(self):
        self._buffer: str = ""
        self.start_index: int = 0
        self.name: Optional[str] = None
        self.name_value_separator: int = -1
        self.value_start: int = -1

    @property
    def buffer(self) -> str:
        """Get the main parsing buffer."""
        return self._buffer

    def append(self, char: str) -> None:
        """Add a character to the buffer."""
        self._buffer += char

    def take(self) -> str:
        """Return the buffer content and clear the buffer."""
        content = self._buffer
        self._buffer = ""
        return content

    def clear_all(self) -> None:
        """Clear the buffer and the argument bookkeeping."""
        self._buffer = ""
        self.name = None
        self.name_value_separator = -1
        self.value_start = -1
