from __future__ import annotations

from dataclasses import dataclass

from idsheet.compose.compositor import composite
from idsheet.core.buffers import AlphaMask, ConfidenceMask, ImageBuffer
from idsheet.core.models import LayoutConfig, RefinementConfig
from idsheet.layout.sheet import layout
from idsheet.refine.refiner import refine_mask
from idsheet.segmentation.base import Segmenter


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """
    alpha:
        Refined alpha mask, same size as the source.
    subject:
        Source flattened onto the background color.
    canvas:
        Final printable image (single photo or sheet).
    """
    alpha: AlphaMask
    subject: ImageBuffer
    canvas: ImageBuffer


def build_id_photo(
    source: ImageBuffer,
    mask: ConfidenceMask,
    refinement: RefinementConfig,
    layout_config: LayoutConfig,
) -> PipelineResult:
    """
    Refine -> composite -> lay out.

    Both configs are checked before any pixel work. Errors from any stage
    propagate unchanged and nothing partial is returned.
    """
    refinement.validate()
    layout_config.validate()

    alpha = refine_mask(mask, source.width, source.height, refinement)
    subject = composite(source, alpha, layout_config.background_color)
    canvas = layout(subject, layout_config)
    return PipelineResult(alpha=alpha, subject=subject, canvas=canvas)


def process_photo(
    source: ImageBuffer,
    segmenter: Segmenter,
    refinement: RefinementConfig,
    layout_config: LayoutConfig,
) -> PipelineResult:
    """Segment `source` with `segmenter`, then run build_id_photo."""
    refinement.validate()
    layout_config.validate()

    mask = segmenter.segment(source)
    return build_id_photo(source, mask, refinement, layout_config)
