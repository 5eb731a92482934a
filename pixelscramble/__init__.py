"""
pixelscramble: reversible pixel shuffling with an undo log.

The permutation engine shuffles fixed-size buffers and undoes the shuffle
with the inverse permutation; the change tracker records first-touched
bytes so any sequence of single-byte writes can be rolled back.
"""

import logging

from .errors import (
    EmptyBufferError,
    InvalidPermutationError,
    OutOfBoundsError,
    ScrambleError,
    UnsupportedFormatError,
)
from .permutation import apply, generate_permutation, invert, key_to_seed, restore_via_inverse
from .pipeline import ScrambleResult, restore, scramble, undo
from .tracker import ChangeTracker

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'ChangeTracker',
    'ScrambleResult',
    'apply',
    'generate_permutation',
    'invert',
    'key_to_seed',
    'restore_via_inverse',
    'scramble',
    'restore',
    'undo',
    'ScrambleError',
    'OutOfBoundsError',
    'EmptyBufferError',
    'InvalidPermutationError',
    'UnsupportedFormatError',
]
