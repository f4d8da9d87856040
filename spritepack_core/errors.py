"""
Error types for SpritePack.
"""

import threading
from typing import List


class SpritePackError(Exception):
    """Base class for all SpritePack errors."""


class PlacementError(SpritePackError):
    """A batch of rectangles could not be placed in the bin."""


class InvalidConfigurationError(SpritePackError, ValueError):
    """Malformed parameters or inputs, detected before any packing work."""


class UnsupportedOperationError(SpritePackError, NotImplementedError):
    """A requested feature is not implemented (e.g. extrusion wider than 1)."""


class FrameDecodeError(SpritePackError):
    """A frame source could not be decoded as a PNG image."""


class AggregateError(SpritePackError):
    """Several independent failures reported together."""

    def __init__(self, errors: List[Exception]):
        self.errors = list(errors)
        super().__init__("\n".join(str(error) for error in self.errors))


class ErrorGroup:
    """
    Thread-safe collector of errors raised by parallel workers.

    Workers call add(); once every worker has finished, the owner checks
    empty() and raises collect().
    """

    def __init__(self):
        self._errors: List[Exception] = []
        self._lock = threading.Lock()

    def add(self, error: Exception) -> None:
        with self._lock:
            self._errors.append(error)

    def empty(self) -> bool:
        with self._lock:
            return not self._errors

    def collect(self) -> AggregateError:
        """Merge every collected error into a single AggregateError."""
        with self._lock:
            return AggregateError(self._errors)

    def reset(self) -> None:
        with self._lock:
            self._errors = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)
