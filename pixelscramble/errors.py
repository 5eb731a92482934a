"""Exception types raised by pixelscramble."""


class ScrambleError(Exception):
    """Base exception for pixelscramble."""


class OutOfBoundsError(ScrambleError, IndexError):
    """A position or buffer length falls outside the required range."""


class EmptyBufferError(ScrambleError, ValueError):
    """A zero-length buffer was supplied where content is required."""


class InvalidPermutationError(ScrambleError, ValueError):
    """A sequence is not a bijection of [0, n)."""


class UnsupportedFormatError(ScrambleError, ValueError):
    """The codec was asked to read or write a format other than PNG or JPEG."""
