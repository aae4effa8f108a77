from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from idsheet.compose.compositor import blend_over
from idsheet.core.buffers import RGB, ImageBuffer
from idsheet.core.models import LayoutConfig, LayoutMode


@dataclass(frozen=True)
class SheetPlan:
    """
    Where tiles go on the canvas.

    tiles holds the top-left corner (x, y) of every placed cell, in row-major
    order. margin_x/margin_y are the exact offsets that center the full
    cols x rows block, so 2 * margin_x + cols * cell_width == canvas_width. They
    are half-pixel values when the leftover space is odd; tile origins floor them.
    """
    canvas_width: int
    canvas_height: int
    cell_width: int
    cell_height: int
    cols: int
    rows: int
    margin_x: float
    margin_y: float
    tiles: Tuple[Tuple[int, int], ...]

    @property
    def capacity(self) -> int:
        return self.cols * self.rows

    @property
    def count(self) -> int:
        return len(self.tiles)


def plan_sheet(config: LayoutConfig) -> SheetPlan:
    """
    Grid geometry for `config`.

    The tile count is min(requested_count, capacity); a request that does not
    fit is truncated, and a request <= 0 or a cell larger than the sheet gives
    no tiles at all.
    """
    config.validate()
    cw, ch = config.cell_width, config.cell_height

    if config.mode is LayoutMode.SINGLE:
        return SheetPlan(cw, ch, cw, ch, cols=1, rows=1, margin_x=0.0, margin_y=0.0, tiles=((0, 0),))

    sw, sh = config.sheet_width, config.sheet_height
    cols = sw // cw
    rows = sh // ch
    count = max(0, min(config.requested_count, cols * rows))

    margin_x = (sw - cols * cw) / 2
    margin_y = (sh - rows * ch) / 2
    left = int(margin_x)
    top = int(margin_y)

    tiles = tuple(
        (left + (i % cols) * cw, top + (i // cols) * ch)
        for i in range(count)
    )
    return SheetPlan(sw, sh, cw, ch, cols=cols, rows=rows, margin_x=margin_x, margin_y=margin_y, tiles=tiles)


def _scale_to_cell(subject: ImageBuffer, width: int, height: int) -> np.ndarray:
    """Stretch the subject to exactly width x height (aspect is fixed upstream by the crop)."""
    pixels = subject.pixels.copy()
    if subject.size == (width, height):
        return pixels
    shrinking = width <= subject.width and height <= subject.height
    interp = cv2.INTER_AREA if shrinking else cv2.INTER_LANCZOS4
    return cv2.resize(pixels, (width, height), interpolation=interp)


def _stroke_cell(canvas: np.ndarray, x: int, y: int, w: int, h: int, thickness: int, color: RGB) -> None:
    """Rectangle outline drawn inside the cell, so it never reaches a neighbour."""
    ty = min(thickness, h)
    tx = min(thickness, w)
    cell = canvas[y:y + h, x:x + w, :3]
    cell[:ty, :] = color
    cell[h - ty:, :] = color
    cell[:, :tx] = color
    cell[:, w - tx:] = color


def layout(subject: ImageBuffer, config: LayoutConfig) -> ImageBuffer:
    """
    Render the output canvas: one photo (SINGLE) or a centered grid of copies
    with optional cutting guides (SHEET).

    Any transparency left in `subject` is flattened onto background_color, so
    the returned canvas is fully opaque.
    """
    plan = plan_sheet(config)

    canvas = np.empty((plan.canvas_height, plan.canvas_width, 4), dtype=np.uint8)
    canvas[:, :, :3] = config.background_color
    canvas[:, :, 3] = 255

    if plan.count == 0:
        return ImageBuffer(canvas)

    scaled = _scale_to_cell(subject, plan.cell_width, plan.cell_height)
    tile = blend_over(scaled[:, :, :3], scaled[:, :, 3], config.background_color)

    draw_guides = config.mode is LayoutMode.SHEET and config.guide_thickness > 0
    for x, y in plan.tiles:
        canvas[y:y + plan.cell_height, x:x + plan.cell_width, :3] = tile
        if draw_guides:
            _stroke_cell(canvas, x, y, plan.cell_width, plan.cell_height,
                         config.guide_thickness, config.guide_color)

    return ImageBuffer(canvas)
