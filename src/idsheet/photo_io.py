"""
File-side helpers: load a photo, crop it to the document aspect ratio, and
encode the finished canvas.
"""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

import cv2
import numpy as np
from PIL import Image, ImageOps

from idsheet.core.buffers import ImageBuffer
from idsheet.core.errors import ConfigurationError


def load_image_rgb(path: str | Path) -> Image.Image:
    """Load an image, apply EXIF orientation, return RGB PIL Image."""
    img = Image.open(path)
    img = ImageOps.exif_transpose(img)
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def center_crop_box(width: int, height: int, aspect: float) -> Tuple[int, int, int, int]:
    """
    Largest (left, top, right, bottom) box of the given width/height aspect
    centered in a width x height image.
    """
    if aspect <= 0:
        raise ConfigurationError(f"aspect ratio must be > 0, got {aspect}")
    if width / height > aspect:
        crop_w = max(1, int(round(height * aspect)))
        left = (width - crop_w) // 2
        return left, 0, left + crop_w, height
    crop_h = max(1, int(round(width / aspect)))
    top = (height - crop_h) // 2
    return 0, top, width, top + crop_h


def fit_within(rgb: np.ndarray, max_side: int) -> np.ndarray:
    """Downscale so the longest side is at most max_side. Never upscales."""
    if max_side <= 0:
        raise ConfigurationError(f"max_side must be > 0, got {max_side}")
    h, w = rgb.shape[:2]
    scale = max_side / float(max(h, w))
    if scale >= 1.0:
        return rgb
    new_w = max(1, int(round(w * scale)))
    new_h = max(1, int(round(h * scale)))
    return cv2.resize(rgb, (new_w, new_h), interpolation=cv2.INTER_AREA)


def prepare_source(img: Image.Image, aspect: float | None, max_side: int = 1024) -> ImageBuffer:
    """
    Crop to `aspect` (skipped when None) and bound the size before segmentation.

    Stands in for the interactive cropper: the crop is always centered.
    """
    if img.mode != "RGB":
        img = img.convert("RGB")
    if aspect is not None:
        img = img.crop(center_crop_box(img.width, img.height, aspect))
    rgb = fit_within(np.array(img), max_side)
    return ImageBuffer.from_rgb(rgb)


def save_image(image: ImageBuffer, output_path: str | Path) -> None:
    """JPEG at quality 95 for .jpg/.jpeg, otherwise whatever the extension implies."""
    out = Path(output_path)
    pil = image.to_pil("RGB")
    if out.suffix.lower() in (".jpg", ".jpeg"):
        pil.save(out, format="JPEG", quality=95, optimize=True)
    else:
        pil.save(out)
