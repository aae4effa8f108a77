from __future__ import annotations

import logging
from typing import Any, Optional

from idsheet.core.buffers import ConfidenceMask, ImageBuffer
from idsheet.core.errors import SegmentationError
from idsheet.segmentation.base import Segmenter

logger = logging.getLogger(__name__)

# Models shipped with rembg that work for portraits:
#   - "u2net_human_seg" (people)
#   - "u2net"           (general, heavier fallback)
#   - "isnet-general-use"
DEFAULT_MODEL = "u2net_human_seg"
FALLBACK_MODEL = "u2net"


class RembgSegmenter(Segmenter):
    """
    Confidence mask from a rembg model.

    The ONNX session is created on first use and kept by this instance only;
    the mask itself is computed fresh on every call.
    """

    def __init__(self, model_name: str = DEFAULT_MODEL):
        self.model_name = model_name
        self.name = f"rembg:{model_name}"
        self._session: Optional[Any] = None

    def _get_session(self) -> Any:
        if self._session is None:
            try:
                from rembg import new_session  # type: ignore
            except ImportError as e:
                raise SegmentationError("rembg is not installed (pip install 'idsheet[segment]')") from e
            logger.info("Loading rembg model %s", self.model_name)
            try:
                self._session = new_session(self.model_name)
            except Exception as e:
                raise SegmentationError(f"could not load rembg model {self.model_name}: {e}") from e
        return self._session

    def segment(self, image: ImageBuffer) -> ConfidenceMask:
        session = self._get_session()
        from rembg import remove  # type: ignore

        try:
            mask = remove(image.to_pil("RGB"), session=session, only_mask=True)
        except Exception as e:
            raise SegmentationError(f"{self.name} failed: {e}") from e
        return ConfidenceMask.from_pil(mask)
