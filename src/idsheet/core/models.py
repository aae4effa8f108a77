from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from idsheet.core.errors import ConfigurationError

RGB = Tuple[int, int, int]

WHITE: RGB = (255, 255, 255)
GUIDE_GRAY: RGB = (229, 231, 235)  # #e5e7eb

FEATHER_SOURCES = ("binary", "confidence")


def _check_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _check_color(name: str, color: RGB) -> None:
    if len(color) != 3 or not all(isinstance(c, int) and 0 <= c <= 255 for c in color):
        raise ConfigurationError(f"{name} must be three integers in 0..255, got {color!r}")


@dataclass(frozen=True)
class RefinementConfig:
    """
    Controls how a raw confidence mask becomes an alpha mask.

    shrink_radius:
        Blur radius (px, output units) applied before the hard cut. Pulls the
        subject boundary inward; 0 skips the pass.
    soften_radius:
        Blur radius (px) applied after the hard cut to feather the edge; 0 keeps
        the mask strictly binary.
    cut_threshold:
        Fraction of full confidence (0.0-1.0) a pixel must exceed to count as subject.
    feather_source:
        "binary" blurs the thresholded mask. "confidence" takes the edge gradient
        from the blurred model confidence, never outside the thresholded region.
    """
    shrink_radius: float = 2.0
    soften_radius: float = 1.0
    cut_threshold: float = 0.5
    feather_source: str = "binary"

    def validate(self) -> None:
        if self.shrink_radius < 0:
            raise ConfigurationError(f"shrink_radius must be >= 0, got {self.shrink_radius}")
        if self.soften_radius < 0:
            raise ConfigurationError(f"soften_radius must be >= 0, got {self.soften_radius}")
        if not (0.0 <= self.cut_threshold <= 1.0):
            raise ConfigurationError(f"cut_threshold must be within [0, 1], got {self.cut_threshold}")
        if self.feather_source not in FEATHER_SOURCES:
            raise ConfigurationError(
                f"feather_source must be one of {', '.join(FEATHER_SOURCES)}, got {self.feather_source!r}"
            )


class LayoutMode(str, Enum):
    SINGLE = "single"
    SHEET = "sheet"


@dataclass(frozen=True)
class LayoutConfig:
    """
    Output canvas settings.

    In SINGLE mode the canvas is one cell (cell_width x cell_height). In SHEET
    mode it is sheet_width x sheet_height holding up to requested_count cells.
    Defaults are a 4x6 inch sheet at 300 dpi with 2x2 inch cells.
    """
    mode: LayoutMode = LayoutMode.SINGLE
    sheet_width: int = 1800
    sheet_height: int = 1200
    cell_width: int = 600
    cell_height: int = 600
    requested_count: int = 6
    background_color: RGB = WHITE
    guide_color: RGB = GUIDE_GRAY
    guide_thickness: int = 2

    def validate(self) -> None:
        if not isinstance(self.mode, LayoutMode):
            raise ConfigurationError(f"unknown layout mode {self.mode!r}")
        for name in ("sheet_width", "sheet_height", "cell_width", "cell_height", "requested_count", "guide_thickness"):
            _check_int(name, getattr(self, name))
        for name in ("sheet_width", "sheet_height", "cell_width", "cell_height"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be > 0, got {value}")
        if self.guide_thickness < 0:
            raise ConfigurationError(f"guide_thickness must be >= 0, got {self.guide_thickness}")
        _check_color("background_color", self.background_color)
        _check_color("guide_color", self.guide_color)

    @property
    def canvas_size(self) -> Tuple[int, int]:
        if self.mode is LayoutMode.SINGLE:
            return self.cell_width, self.cell_height
        return self.sheet_width, self.sheet_height


@dataclass(frozen=True)
class ProcessingParams:
    """
    Everything one run needs besides the pixels.

    max_side:
        Longest side (px) the cropped source is reduced to before segmentation.
    crop_aspect:
        If True, center-crop the source to the cell aspect ratio first.
    """
    refinement: RefinementConfig = field(default_factory=RefinementConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    max_side: int = 1024
    crop_aspect: bool = True

    def validate(self) -> None:
        self.refinement.validate()
        self.layout.validate()
        _check_int("max_side", self.max_side)
        if self.max_side <= 0:
            raise ConfigurationError(f"max_side must be > 0, got {self.max_side}")
