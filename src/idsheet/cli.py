"""
idsheet command line.

Make an ID photo with a solid background, or a printable sheet of them:
- Crops the photo to the document's aspect ratio (centered)
- Segments the subject (rembg, or a mask you supply)
- Refines the mask, flattens the subject onto --bg
- Writes one photo, or a 4x6" sheet with cutting guides

Usage:
  idsheet --input in.jpg --output out.jpg --document eu
  idsheet -i in.jpg -o sheet.jpg --mode sheet --count 6 --bg "#dbeafe"
  idsheet -i in.jpg -o out.png --mask in_mask.png --shrink 0 --soften 0
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional

from idsheet.core.errors import IdSheetError
from idsheet.core.models import LayoutMode, ProcessingParams, RefinementConfig
from idsheet.core.presets import DOCUMENTS, SHEET_4X6, layout_for_document, parse_color
from idsheet.photo_io import load_image_rgb, prepare_source, save_image
from idsheet.pipeline import process_photo
from idsheet.segmentation.base import FallbackSegmenter, MaskFileSegmenter, Segmenter
from idsheet.segmentation.rembg_segmenter import DEFAULT_MODEL, FALLBACK_MODEL, RembgSegmenter
from idsheet.validation.report import ValidationReport
from idsheet.validation.validator import check_output, format_report_text

logger = logging.getLogger(__name__)


def process_id_photo(
    input_path: str,
    output_path: str,
    params: ProcessingParams,
    segmenter: Segmenter,
) -> ValidationReport:
    """
    Load `input_path`, build the photo or sheet described by `params`, save it
    to `output_path` and return the output check report.
    """
    params.validate()
    layout_config = params.layout

    aspect = layout_config.cell_width / layout_config.cell_height if params.crop_aspect else None

    pil = load_image_rgb(input_path)
    source = prepare_source(pil, aspect=aspect, max_side=params.max_side)
    logger.info("Source %dx%d -> %dx%d", pil.width, pil.height, source.width, source.height)

    result = process_photo(source, segmenter, params.refinement, layout_config)
    save_image(result.canvas, output_path)
    logger.info("Wrote %dx%d %s to %s", result.canvas.width, result.canvas.height,
                layout_config.mode.value, output_path)

    return check_output(result.canvas, layout_config)


def build_params(args: argparse.Namespace) -> ProcessingParams:
    layout_config = layout_for_document(args.document)
    layout_config = replace(
        layout_config,
        mode=LayoutMode(args.mode),
        sheet_width=args.sheet_width,
        sheet_height=args.sheet_height,
        requested_count=args.count,
        background_color=parse_color(args.bg),
        guide_color=parse_color(args.guide_color),
        guide_thickness=0 if args.no_guides else args.guide_thickness,
    )
    refinement = RefinementConfig(
        shrink_radius=args.shrink,
        soften_radius=args.soften,
        cut_threshold=args.threshold,
        feather_source=args.feather_source,
    )
    return ProcessingParams(
        refinement=refinement,
        layout=layout_config,
        max_side=args.max_side,
        crop_aspect=not args.no_crop,
    )


def build_segmenter(args: argparse.Namespace) -> Segmenter:
    if args.mask:
        return MaskFileSegmenter(args.mask)
    primary = RembgSegmenter(args.model)
    if args.fallback_model and args.fallback_model != args.model:
        return FallbackSegmenter(primary, RembgSegmenter(args.fallback_model))
    return primary


def _build_arg_parser() -> argparse.ArgumentParser:
    defaults = RefinementConfig()
    p = argparse.ArgumentParser(description="Generate an ID photo (or a print sheet of them) with a solid background.")
    p.add_argument("--input", "-i", required=True, help="Path to input image (jpg/png)")
    p.add_argument("--output", "-o", required=True, help="Path to output image (jpg/png)")
    p.add_argument("--document", "-d", default="us", choices=sorted(DOCUMENTS), help="Document size preset (default: us)")
    p.add_argument("--mode", choices=[m.value for m in LayoutMode], default="single", help="single photo or print sheet")
    p.add_argument("--count", type=int, default=6, help="Photos on the sheet (capped by what fits; default: 6)")
    p.add_argument("--sheet-width", type=int, default=SHEET_4X6[0], help="Sheet width in px (default: 1800)")
    p.add_argument("--sheet-height", type=int, default=SHEET_4X6[1], help="Sheet height in px (default: 1200)")
    p.add_argument("--bg", default="#ffffff", help="Background color: #rrggbb, name or r,g,b (default: white)")
    p.add_argument("--guide-color", default="#e5e7eb", help="Cutting guide color (default: #e5e7eb)")
    p.add_argument("--guide-thickness", type=int, default=2, help="Cutting guide thickness in px (default: 2)")
    p.add_argument("--no-guides", action="store_true", help="Do not draw cutting guides")
    p.add_argument("--shrink", type=float, default=defaults.shrink_radius, help="Shrink blur radius before the cut (px)")
    p.add_argument("--soften", type=float, default=defaults.soften_radius, help="Edge feather radius after the cut (px)")
    p.add_argument("--threshold", type=float, default=defaults.cut_threshold, help="Cut threshold, 0.0-1.0")
    p.add_argument("--feather-source", choices=["binary", "confidence"], default=defaults.feather_source,
                   help="Feather the binary cut or the model confidence (default: binary)")
    p.add_argument("--mask", help="Use this mask image instead of running a segmentation model")
    p.add_argument("--model", default=DEFAULT_MODEL, help=f"rembg model (default: {DEFAULT_MODEL})")
    p.add_argument("--fallback-model", default=FALLBACK_MODEL,
                   help=f"rembg model to retry with if the first fails (default: {FALLBACK_MODEL}; empty to disable)")
    p.add_argument("--max-side", type=int, default=1024, help="Longest side before segmentation (default: 1024)")
    p.add_argument("--no-crop", action="store_true", help="Do not crop to the document aspect ratio")
    p.add_argument("--report", action="store_true", help="Print the output check report")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        params = build_params(args)
        report = process_id_photo(
            input_path=args.input,
            output_path=args.output,
            params=params,
            segmenter=build_segmenter(args),
        )
    except (IdSheetError, OSError) as e:
        logger.debug("Run failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    for r in report.failed():
        logger.warning("Output check %s failed: %s", r.rule_id, r.message)
    if args.report:
        print(format_report_text(report))
    print(f"Saved: {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
