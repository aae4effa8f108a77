from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from idsheet.core.errors import ConfigurationError

RGB = Tuple[int, int, int]


def _frozen_copy(arr: np.ndarray) -> np.ndarray:
    """Own a private, read-only copy so no later stage can alias or mutate it."""
    out = np.array(arr, dtype=np.uint8, copy=True, order="C")
    out.flags.writeable = False
    return out


def _check_dims(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"image dimensions must be > 0, got {width}x{height}")


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """
    Owned RGBA image: uint8 array of shape (height, width, 4), row-major,
    top-left origin.

    The array is copied on construction and marked read-only, so a buffer can
    be handed from stage to stage without any of them changing it.
    """
    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.pixels)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"expected an (H, W, 4) RGBA array, got shape {arr.shape}")
        if arr.dtype != np.uint8:
            raise ValueError(f"expected uint8 pixels, got {arr.dtype}")
        _check_dims(arr.shape[1], arr.shape[0])
        object.__setattr__(self, "pixels", _frozen_copy(arr))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    @staticmethod
    def filled(width: int, height: int, color: RGB) -> "ImageBuffer":
        """Opaque image of a single color."""
        _check_dims(width, height)
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[:, :, :3] = color
        arr[:, :, 3] = 255
        return ImageBuffer(arr)

    @staticmethod
    def from_rgb(rgb: np.ndarray) -> "ImageBuffer":
        """(H, W, 3) uint8 array -> opaque ImageBuffer."""
        rgb = np.asarray(rgb)
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise ValueError(f"expected an (H, W, 3) RGB array, got shape {rgb.shape}")
        alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
        return ImageBuffer(np.concatenate([rgb.astype(np.uint8), alpha], axis=2))

    @staticmethod
    def from_pil(img: Image.Image) -> "ImageBuffer":
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return ImageBuffer(np.asarray(img))

    def to_pil(self, mode: str = "RGBA") -> Image.Image:
        img = Image.fromarray(np.ascontiguousarray(self.pixels), "RGBA")
        return img if mode == "RGBA" else img.convert(mode)


@dataclass(frozen=True, eq=False)
class _Grid:
    values: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.values)
        if arr.ndim != 2:
            raise ValueError(f"expected a 2D array, got shape {arr.shape}")
        if arr.dtype != np.uint8:
            raise ValueError(f"expected uint8 values, got {arr.dtype}")
        _check_dims(arr.shape[1], arr.shape[0])
        object.__setattr__(self, "values", _frozen_copy(arr))

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


class ConfidenceMask(_Grid):
    """
    Per-pixel foreground confidence from a segmenter:
    0 = definitely background, 255 = definitely foreground.

    May have different dimensions from the source image.
    """

    @staticmethod
    def from_probabilities(probs: np.ndarray) -> "ConfidenceMask":
        """Normalized [0, 1] scores (as many models emit) -> 0..255 confidences."""
        probs = np.asarray(probs, dtype=np.float32)
        if probs.ndim == 3 and probs.shape[2] == 1:
            probs = probs[:, :, 0]
        return ConfidenceMask(np.rint(np.clip(probs, 0.0, 1.0) * 255.0).astype(np.uint8))

    @staticmethod
    def from_pil(img: Image.Image) -> "ConfidenceMask":
        # An RGBA cutout carries its confidence in the alpha band.
        if img.mode in ("RGBA", "LA"):
            img = img.getchannel("A")
        elif img.mode != "L":
            img = img.convert("L")
        return ConfidenceMask(np.asarray(img))


class AlphaMask(_Grid):
    """Per-pixel opacity (0 = background, 255 = subject), aligned with the image it is applied to."""

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.values), "L")
