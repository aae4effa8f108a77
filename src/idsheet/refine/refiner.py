"""
Confidence mask -> alpha mask.

The boundary is pulled in by blurring and then cutting high, rather than by a
morphological erosion: a blur spreads the low values outside the subject over
its edge, so after a strict threshold the kept region ends a little inside the
original boundary. A second blur after the cut feathers the edge again.

Every call starts again from the caller's mask, so results never drift across
repeated calls.
"""

from __future__ import annotations

import cv2
import numpy as np

from idsheet.core.buffers import AlphaMask, ConfidenceMask
from idsheet.core.errors import ConfigurationError
from idsheet.core.models import RefinementConfig


def _resample(values: np.ndarray, width: int, height: int) -> np.ndarray:
    """Bilinear resample of a float32 grid to exactly width x height."""
    h, w = values.shape[:2]
    if (w, h) == (width, height):
        return values.copy()
    return cv2.resize(values, (width, height), interpolation=cv2.INTER_LINEAR)


def _blur(values: np.ndarray, radius: float) -> np.ndarray:
    """Separable Gaussian blur, sigma = radius px. Edges replicate so a uniform grid stays uniform."""
    return cv2.GaussianBlur(values, (0, 0), sigmaX=float(radius), sigmaY=float(radius),
                            borderType=cv2.BORDER_REPLICATE)


def _to_u8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def refine_mask(
    mask: ConfidenceMask,
    target_width: int,
    target_height: int,
    config: RefinementConfig,
) -> AlphaMask:
    """
    Turn a segmenter's confidence mask into an alpha mask of exactly
    target_width x target_height.

    Steps, in this order:
      1. bilinear resample to the target size (so radii are in output pixels)
      2. shrink blur (skipped when shrink_radius == 0)
      3. hard cut at cut_threshold * 255 -> strictly 0 or 255
      4. soften blur (skipped when soften_radius == 0)

    Raises ConfigurationError for an invalid config or target size.
    """
    config.validate()
    if target_width <= 0 or target_height <= 0:
        raise ConfigurationError(f"target size must be > 0, got {target_width}x{target_height}")

    confidence = _resample(mask.values.astype(np.float32), target_width, target_height)

    shrunk = _blur(confidence, config.shrink_radius) if config.shrink_radius > 0 else confidence

    cut = np.where(shrunk > config.cut_threshold * 255.0, 255.0, 0.0).astype(np.float32)

    if config.soften_radius > 0:
        if config.feather_source == "confidence":
            # Edge gradient from the model, bounded by the cut so the shrink survives.
            alpha = np.minimum(cut, _blur(confidence, config.soften_radius))
        else:
            alpha = _blur(cut, config.soften_radius)
    else:
        alpha = cut

    return AlphaMask(_to_u8(alpha))
