"""
Undo log for single-byte writes.

A ChangeTracker sits between a caller and a mutable byte buffer. Every write
goes through record_and_write(); the first time a position is touched its
current value is remembered. restore() puts all remembered values back and
empties the log so the tracker can be reused.
"""

import logging
import operator
from typing import Dict

from .errors import EmptyBufferError, OutOfBoundsError

logger = logging.getLogger(__name__)


def _check_position(buffer, position: int) -> None:
    if position < 0 or position >= len(buffer):
        raise OutOfBoundsError(f"offset {position} is out of bounds for buffer of length {len(buffer)}")


class ChangeTracker:
    """Records the original byte at every position written since the last restore."""

    def __init__(self):
        self._offsets: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._offsets)

    def __contains__(self, position) -> bool:
        return position in self._offsets

    def __repr__(self) -> str:
        return f"ChangeTracker(tracked={len(self._offsets)})"

    @property
    def records(self) -> Dict[int, int]:
        """Copy of the position -> original byte mapping."""
        return dict(self._offsets)

    @property
    def is_empty(self) -> bool:
        return not self._offsets

    def original_value(self, position: int) -> int:
        """Return the recorded pre-write value at position (KeyError if untracked)."""
        return self._offsets[position]

    def record_and_write(self, buffer, position: int, new_value: int) -> None:
        """
        Write new_value into buffer[position], remembering the old value.

        Only the value present before the first write to a position is kept;
        later writes to the same position leave the record alone.

        Raises:
            OutOfBoundsError: position is not in [0, len(buffer)). The buffer
                is not modified.
            ValueError: new_value is not a byte.
            TypeError: position or new_value is not an integer.
        """
        position = operator.index(position)
        _check_position(buffer, position)
        new_value = operator.index(new_value)
        if not 0 <= new_value <= 255:
            raise ValueError(f"value {new_value} does not fit in a byte")

        if position not in self._offsets:
            self._offsets[position] = int(buffer[position])

        buffer[position] = new_value

    def restore(self, buffer) -> None:
        """
        Write every recorded original value back into buffer and clear the log.

        All recorded positions are checked against the buffer before anything
        is written, so a failed restore leaves both the buffer and the log as
        they were.

        Raises:
            EmptyBufferError: buffer has zero length.
            OutOfBoundsError: a recorded position no longer fits the buffer.
        """
        if len(buffer) == 0:
            raise EmptyBufferError("mem block is empty")

        for offset in self._offsets:
            _check_position(buffer, offset)

        for offset, original in self._offsets.items():
            buffer[offset] = original

        logger.debug("Restored %d tracked offsets", len(self._offsets))
        self._offsets = {}

    def clear(self) -> None:
        """Forget all records without touching any buffer."""
        self._offsets = {}
