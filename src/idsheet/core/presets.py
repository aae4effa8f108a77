from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict

from PIL import ImageColor

from idsheet.core.errors import ConfigurationError
from idsheet.core.models import RGB, LayoutConfig


@dataclass(frozen=True)
class DocumentPreset:
    """Target photo size in pixels at 300 dpi."""
    key: str
    label: str
    width: int
    height: int

    @property
    def aspect(self) -> float:
        return self.width / self.height


DOCUMENTS: Dict[str, DocumentPreset] = {
    p.key: p
    for p in (
        DocumentPreset("us", "United States, 2x2 in", 600, 600),
        DocumentPreset("eu", "EU, 35x45 mm", 413, 531),
        DocumentPreset("uk", "UK, 35x45 mm", 413, 531),
        DocumentPreset("india", "India, 35x45 mm", 413, 531),
    )
}

# 4x6 inch print at 300 dpi
SHEET_4X6 = (1800, 1200)


def get_document(key: str) -> DocumentPreset:
    try:
        return DOCUMENTS[key.lower()]
    except KeyError:
        known = ", ".join(sorted(DOCUMENTS))
        raise ConfigurationError(f"unknown document type {key!r} (known: {known})") from None


def layout_for_document(key: str, base: LayoutConfig | None = None) -> LayoutConfig:
    """Copy of `base` (or the defaults) with the cell size taken from a document preset."""
    doc = get_document(key)
    return replace(base or LayoutConfig(), cell_width=doc.width, cell_height=doc.height)


def parse_color(value: str) -> RGB:
    """
    Accepts "#rrggbb", CSS names ("white") or "r,g,b".
    """
    text = value.strip()
    if "," in text:
        parts = text.split(",")
        try:
            rgb = tuple(int(p) for p in parts)
        except ValueError:
            raise ConfigurationError(f"invalid color {value!r}") from None
        if len(rgb) != 3 or not all(0 <= c <= 255 for c in rgb):
            raise ConfigurationError(f"invalid color {value!r}")
        return rgb  # type: ignore[return-value]
    try:
        color = ImageColor.getrgb(text)
    except ValueError:
        raise ConfigurationError(f"invalid color {value!r}") from None
    return color[0], color[1], color[2]
