from __future__ import annotations

import numpy as np

from idsheet.core.buffers import RGB, AlphaMask, ImageBuffer
from idsheet.core.errors import DimensionMismatchError


def blend_over(rgb: np.ndarray, alpha: np.ndarray, background: RGB) -> np.ndarray:
    """
    Source-over blend of an RGB array onto a solid color.

    rgb: (H, W, 3) uint8, alpha: (H, W) uint8. Returns a new (H, W, 3) uint8 array.
    """
    a = alpha.astype(np.float64)[:, :, None] / 255.0
    bg = np.asarray(background, dtype=np.float64).reshape(1, 1, 3)
    out = rgb.astype(np.float64) * a + bg * (1.0 - a)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def composite(source: ImageBuffer, alpha: AlphaMask, background: RGB) -> ImageBuffer:
    """
    Put the subject of `source` (selected by `alpha`) on a solid background.

    The result is flattened: every pixel is fully opaque, whatever the source
    alpha channel held. The alpha mask must match the source size exactly;
    nothing is stretched to fit.
    """
    if alpha.size != source.size:
        raise DimensionMismatchError(expected=source.size, actual=alpha.size)
    return ImageBuffer.from_rgb(blend_over(source.rgb, alpha.values, background))
