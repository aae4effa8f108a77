from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class RuleResult:
    """
    Result of a single output check.
    """
    rule_id: str
    passed: bool
    message: str
    metrics: dict[str, Any] | None = None


@dataclass(frozen=True)
class ValidationReport:
    """
    All output checks for one rendered canvas.

    canvas_size is the (width, height) that was checked; layout names the
    mode it was rendered in ("single" or "sheet").
    """
    passed: bool
    results: list[RuleResult]
    canvas_size: Tuple[int, int]
    layout: str

    def failed(self) -> list[RuleResult]:
        return [r for r in self.results if not r.passed]

    def find(self, rule_id: str) -> Optional[RuleResult]:
        for r in self.results:
            if r.rule_id == rule_id:
                return r
        return None
