"""Glue between the permutation engine and the change tracker."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .errors import ScrambleError
from .permutation import (
    RandomSource,
    apply,
    as_byte_array,
    element_count,
    flat_view,
    generate_permutation,
    restore_via_inverse,
)
from .tracker import ChangeTracker

logger = logging.getLogger(__name__)


@dataclass
class ScrambleResult:
    scrambled: object
    permutation: np.ndarray
    item_size: int = 4
    tracker: Optional[ChangeTracker] = None

    @property
    def element_count(self) -> int:
        return int(self.permutation.size)


def scramble(buffer, rng: RandomSource = None, item_size: int = 4,
             track: bool = False, in_place: bool = False) -> ScrambleResult:
    """
    Shuffle the elements of buffer with a fresh random permutation.

    With in_place=True the caller's buffer is overwritten; combined with
    track=True the tracker then holds every original byte and undo() brings
    the buffer back. With track=True alone, writes go to a zeroed output
    buffer, so undo() resets that output to zeros.
    """
    if in_place and isinstance(buffer, bytes):
        raise ValueError("in-place scramble needs a mutable buffer")

    n = element_count(as_byte_array(buffer).size, item_size)
    permutation = generate_permutation(n, rng)
    tracker = ChangeTracker() if track else None
    out = buffer if in_place else None

    scrambled = apply(buffer, permutation, item_size=item_size, out=out, tracker=tracker)
    logger.debug("Scrambled %d elements of %d bytes", n, item_size)
    return ScrambleResult(scrambled, permutation, item_size, tracker)


def restore(result: ScrambleResult) -> np.ndarray:
    """Rebuild the original content from the scrambled buffer and the permutation."""
    return restore_via_inverse(result.scrambled, result.permutation, item_size=result.item_size)


def undo(result: ScrambleResult):
    """Replay the tracker onto result.scrambled and return it."""
    if result.tracker is None:
        raise ScrambleError("scramble was not tracked; restore via the inverse permutation instead")
    result.tracker.restore(flat_view(result.scrambled))
    return result.scrambled

# ---------- Inspection ----------

def moved_pixels(result: ScrambleResult, width: int, count: int = 5) -> List[Tuple[Tuple[int, int], Tuple[int, int]]]:
    """First count moves as ((x, y), (x', y')) pairs for an image of the given width."""
    moves = []
    for i, dest in enumerate(result.permutation[:count].tolist()):
        moves.append(((i % width, i // width), (dest % width, dest // width)))
    return moves


def values_preserved(original, result: ScrambleResult, count: int) -> List[bool]:
    """For the first count elements, whether element i of original equals element perm[i] of the scramble."""
    size = result.item_size
    src = as_byte_array(original).reshape(-1, size)
    dst = as_byte_array(result.scrambled).reshape(-1, size)
    return [bool(np.array_equal(src[i], dst[dest]))
            for i, dest in enumerate(result.permutation[:count].tolist())]


def count_matching(a, b, item_size: int = 4, limit: Optional[int] = None) -> int:
    """Number of equal elements between two buffers, optionally over the first limit only."""
    left = as_byte_array(a).reshape(-1, item_size)
    right = as_byte_array(b).reshape(-1, item_size)
    if left.shape != right.shape:
        raise ScrambleError(f"buffers differ in size: {left.size} vs {right.size} bytes")
    if limit is not None:
        left, right = left[:limit], right[:limit]
    return int(np.all(left == right, axis=1).sum())
