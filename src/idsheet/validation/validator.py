from __future__ import annotations

from typing import List

import numpy as np

from idsheet.core.buffers import ImageBuffer
from idsheet.core.models import LayoutConfig, LayoutMode
from idsheet.validation.report import RuleResult, ValidationReport


def check_output(canvas: ImageBuffer, config: LayoutConfig) -> ValidationReport:
    """
    Check a rendered canvas before it is encoded.

    Only pixel dimensions and opacity are checked. This is not a check of any
    document authority's photo rules.
    """
    results: List[RuleResult] = []

    # Rule: Size
    w, h = canvas.size
    ew, eh = config.canvas_size
    size_ok = (w, h) == (ew, eh)
    what = "sheet" if config.mode is LayoutMode.SHEET else "photo"
    results.append(
        RuleResult(
            rule_id="Size",
            passed=size_ok,
            message=f"{w}x{h} pixels (expected {ew}x{eh} {what}).",
            metrics={"width": w, "height": h, "expected": [ew, eh]},
        )
    )

    # Rule: Opaque (print formats have no alpha; leftovers render differently per codec)
    transparent = int(np.count_nonzero(canvas.alpha != 255))
    opaque_ok = transparent == 0
    msg = "All pixels opaque." if opaque_ok else f"{transparent} pixels are not fully opaque."
    results.append(
        RuleResult(
            rule_id="Opaque",
            passed=opaque_ok,
            message=msg,
            metrics={"transparent_px": transparent},
        )
    )

    passed = all(r.passed for r in results)
    return ValidationReport(passed=passed, results=results, canvas_size=(w, h), layout=config.mode.value)


def format_report_text(report: ValidationReport) -> str:
    lines: List[str] = []
    lines.append("idsheet Output Report")
    lines.append("-" * 21)
    lines.append(f"Overall: {'PASS' if report.passed else 'FAIL'}")
    lines.append(f"Canvas: {report.canvas_size[0]}x{report.canvas_size[1]} ({report.layout})")
    lines.append("")
    for r in report.results:
        mark = "✅" if r.passed else "❌"
        lines.append(f"{mark} {r.rule_id}: {r.message}")
    return "\n".join(lines)
