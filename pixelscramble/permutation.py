"""
Reversible random permutations over fixed-size byte buffers.

A permutation is a 1-D integer array where perm[i] is the destination of
element i. Elements are item_size consecutive bytes: 1 to shuffle raw bytes,
4 to shuffle RGBA pixels.
"""

import hashlib
import logging
from typing import Optional, Union

import numpy as np

from .errors import InvalidPermutationError, OutOfBoundsError

logger = logging.getLogger(__name__)

RandomSource = Union[None, int, np.random.Generator]

# ---------- Helpers ----------

def make_rng(seed: RandomSource = None) -> np.random.Generator:
    """Return seed unchanged if it already is a Generator, else build one (None -> OS entropy)."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def key_to_seed(key: str, w: int, h: int) -> int:
    # Tie the seed to image size so permutations are consistent per (key, w, h)
    s = f"{key}|{w}x{h}".encode("utf-8")
    return int.from_bytes(hashlib.sha256(s).digest()[:8], "big", signed=False)


def _checked_bytes(arr: np.ndarray) -> np.ndarray:
    if arr.dtype == np.uint8:
        return arr
    if arr.size and (not np.issubdtype(arr.dtype, np.integer) or arr.min() < 0 or arr.max() > 255):
        raise ValueError(f"buffer of dtype {arr.dtype} holds values that are not bytes in 0..255")
    return arr.astype(np.uint8)


def as_byte_array(buffer) -> np.ndarray:
    """
    View any byte buffer as a flat uint8 array (no copy where avoidable).

    Arrays and sequences of another integer type are copied to uint8 only when
    every value already fits in a byte; anything else raises ValueError.
    """
    if isinstance(buffer, np.ndarray):
        return _checked_bytes(buffer.reshape(-1))
    if isinstance(buffer, (bytes, bytearray)):
        return np.frombuffer(buffer, dtype=np.uint8)
    if isinstance(buffer, memoryview):
        if buffer.format != "B":
            raise ValueError(f"memoryview must have format 'B', got {buffer.format!r}")
        return np.frombuffer(buffer, dtype=np.uint8)
    return _checked_bytes(np.asarray(buffer).reshape(-1))


def element_count(length: int, item_size: int) -> int:
    if item_size < 1:
        raise OutOfBoundsError(f"item_size must be positive, got {item_size}")
    if length % item_size:
        raise OutOfBoundsError(f"buffer length {length} is not a multiple of item_size {item_size}")
    return length // item_size


def flat_view(out):
    """Flat, writable handle on out: a view for arrays, out itself for sequences."""
    if isinstance(out, np.ndarray):
        if out.dtype != np.uint8 or not (out.flags.c_contiguous and out.flags.writeable):
            raise ValueError("out must be a writable C-contiguous uint8 array")
        return out.reshape(-1)
    if isinstance(out, (bytes, str, tuple)):
        raise TypeError(f"out must be mutable, got {type(out).__name__}")
    if isinstance(out, memoryview) and (out.readonly or out.format != "B"):
        raise ValueError("out memoryview must be writable with format 'B'")
    return out


def validate_permutation(permutation, n: Optional[int] = None) -> np.ndarray:
    """
    Check that permutation is a bijection of [0, n) and return it as an intp array.

    Raises:
        InvalidPermutationError: wrong length, values out of range, duplicates
            or omissions.
    """
    perm = np.asarray(permutation)
    if perm.ndim != 1:
        raise InvalidPermutationError("permutation must be one-dimensional")
    if n is None:
        n = perm.size
    if perm.size != n:
        raise InvalidPermutationError(f"permutation has {perm.size} entries, expected {n}")
    if n == 0:
        return np.empty(0, dtype=np.intp)
    if not np.issubdtype(perm.dtype, np.integer):
        raise InvalidPermutationError("permutation entries must be integers")

    perm = perm.astype(np.intp, copy=False)
    if perm.min() < 0 or perm.max() >= n:
        raise InvalidPermutationError(f"permutation entries must lie in [0, {n})")
    seen = np.zeros(n, dtype=bool)
    seen[perm] = True
    if not seen.all():
        raise InvalidPermutationError("permutation contains duplicate entries")
    return perm

# ---------- Core operations ----------

def generate_permutation(n: int, rng: RandomSource = None) -> np.ndarray:
    """
    Uniformly random permutation of [0, n).

    Generator.shuffle is a Fisher-Yates shuffle: it walks from the last index
    down to 1, swapping each slot with a uniform pick from [0, i].
    """
    if n < 0:
        raise OutOfBoundsError(f"cannot permute a negative number of positions ({n})")
    rng = make_rng(rng)
    perm = np.arange(n, dtype=np.intp)
    rng.shuffle(perm)
    logger.debug("Generated permutation over %d positions", n)
    return perm


def invert(permutation) -> np.ndarray:
    perm = validate_permutation(permutation)
    inv = np.empty_like(perm)
    inv[perm] = np.arange(perm.size, dtype=np.intp)
    return inv


def apply(buffer, permutation, item_size: int = 1, out=None, tracker=None):
    """
    Move element i of buffer to element permutation[i] of the output.

    Args:
        buffer: source bytes. It is copied before any write, so out may be
            buffer itself for an in-place scramble.
        permutation: bijection over len(buffer) // item_size elements.
        item_size: bytes per element.
        out: optional mutable destination of the same length.
        tracker: optional ChangeTracker; every byte write is routed through
            tracker.record_and_write(). out defaults to a zeroed bytearray.

    Returns:
        out if given (or created for the tracker), else a new uint8 array.
    """
    src = as_byte_array(buffer).copy()
    n = element_count(src.size, item_size)
    perm = validate_permutation(permutation, n)
    elements = src.reshape(n, item_size)

    if out is None and tracker is None:
        result = np.empty_like(elements)
        result[perm] = elements
        return result.reshape(-1)

    if out is None:
        out = bytearray(src.size)
    target = flat_view(out)
    if len(target) != src.size:
        raise OutOfBoundsError(f"output length {len(target)} does not match input length {src.size}")

    if tracker is None:
        if isinstance(target, (np.ndarray, bytearray, memoryview)):
            as_byte_array(target).reshape(n, item_size)[perm] = elements
            return out
        # plain sequences (lists and the like) have no shared memory to scatter into
        scattered = np.empty_like(elements)
        scattered[perm] = elements
        values = scattered.reshape(-1).tolist()
        if isinstance(target, list):
            target[:] = values
        else:
            for i, value in enumerate(values):
                target[i] = value
        return out

    for i, dest in enumerate(perm.tolist()):
        offset = dest * item_size
        for k, value in enumerate(elements[i].tolist()):
            tracker.record_and_write(target, offset + k, value)
    logger.debug("Tracked %d byte writes while permuting", src.size)
    return out


def restore_via_inverse(scrambled, permutation, item_size: int = 1):
    """Undo apply() by applying the inverse permutation."""
    return apply(scrambled, invert(permutation), item_size=item_size)
