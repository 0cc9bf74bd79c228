"""
Stack Tracker - Manages the stack of active parsing states.

Nested states (quotes inside brackets inside a value...) are kept on an
explicit list rather than on the Python call stack, so the nesting depth
can be bounded and deep input fails with an error instead of a crash.
"""

from typing import List, NamedTuple, Optional

from .exceptions import NestingTooDeepError
from .state import ParsingState


DEFAULT_MAX_DEPTH = 256


class Frame(NamedTuple):
    """An active state together with the scope it was entered with."""

    state: ParsingState
    location: int
    escapes: bool
    expressions: bool


class StackTracker:
    """
    Manages the state stack during parsing.

    The first frame is the initial state of the parse and stays there
    until the end of the line; the last frame is the innermost (current)
    state.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self._frames: List[Frame] = []
        self._max_depth = max_depth

    @property
    def frames(self) -> List[Frame]:
        """Get the frames (for direct access)."""
        return self._frames

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def push(self, frame: Frame) -> None:
        """Push a frame, enforcing the depth limit."""
        if len(self._frames) >= self._max_depth:
            raise NestingTooDeepError(
                f"Nesting depth exceeds {self._max_depth} at index {frame.location}",
                frame.location,
            )
        self._frames.append(frame)

    def pop(self) -> Frame:
        """Pop and return the innermost frame."""
        return self._frames.pop()

    def peek(self) -> Optional[Frame]:
        """Return the innermost frame without popping."""
        return self._frames[-1] if self._frames else None

    def state_ids(self) -> List[str]:
        """Ids of the active states, outermost first."""
        return [frame.state.id for frame in self._frames]

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)
