from __future__ import annotations


class IdSheetError(Exception):
    """Base class for every error raised by idsheet."""


class ConfigurationError(IdSheetError, ValueError):
    """
    A numeric setting is out of range (negative radius, threshold outside [0, 1],
    non-positive dimensions, bad color) or a named preset/mode does not exist.

    Raised before any pixel is touched. Values are never clamped into range.
    """


class DimensionMismatchError(IdSheetError, ValueError):
    """Alpha mask and source image do not have the same width/height."""

    def __init__(self, expected: tuple[int, int], actual: tuple[int, int]):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"alpha mask is {actual[0]}x{actual[1]} but source image is {expected[0]}x{expected[1]}"
        )


class SegmentationError(IdSheetError, RuntimeError):
    """A segmentation backend could not produce a confidence mask."""
