"""Segmentation collaborators: anything that turns an image into a confidence mask."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from PIL import Image, ImageOps

from idsheet.core.buffers import ConfidenceMask, ImageBuffer
from idsheet.core.errors import SegmentationError

logger = logging.getLogger(__name__)


class Segmenter(ABC):
    """Abstract interface for background segmenters."""

    name: str = "segmenter"

    @abstractmethod
    def segment(self, image: ImageBuffer) -> ConfidenceMask:
        """
        Estimate per-pixel foreground confidence for `image`.

        The returned mask may have any size; the refiner resamples it.
        Implementations raise SegmentationError when they cannot produce a mask.
        """


class FallbackSegmenter(Segmenter):
    """
    Try `primary`; if it raises SegmentationError, run `fallback` on the same image.

    Typical use is a light model first and a heavier, more robust one second.
    """

    def __init__(self, primary: Segmenter, fallback: Segmenter):
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}|{fallback.name}"

    def segment(self, image: ImageBuffer) -> ConfidenceMask:
        try:
            return self.primary.segment(image)
        except SegmentationError as e:
            logger.warning("Primary segmenter %s failed (%s); falling back to %s",
                           self.primary.name, e, self.fallback.name)
        return self.fallback.segment(image)


class MaskFileSegmenter(Segmenter):
    """
    Serves a precomputed mask from disk (grayscale, or RGBA with the mask in alpha).
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.name = f"file:{self.path.name}"

    def segment(self, image: ImageBuffer) -> ConfidenceMask:
        try:
            with Image.open(self.path) as img:
                img = ImageOps.exif_transpose(img)
                mask = ConfidenceMask.from_pil(img)
        except OSError as e:
            raise SegmentationError(f"could not read mask {self.path}: {e}") from e
        logger.debug("Loaded mask %s (%dx%d) for %dx%d image",
                     self.path, mask.width, mask.height, image.width, image.height)
        return mask
