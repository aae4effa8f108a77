import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from PIL import Image

from tests._test_path import SRC  # noqa: F401

from idsheet import cli
from idsheet.core.models import LayoutMode
from idsheet.segmentation.base import FallbackSegmenter, MaskFileSegmenter
from idsheet.segmentation.rembg_segmenter import RembgSegmenter


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.input = self.tmp / "in.jpg"
        self.mask = self.tmp / "mask.png"
        Image.new("RGB", (120, 160), (90, 60, 30)).save(self.input)
        Image.new("L", (50, 50), 255).save(self.mask)

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_single_photo(self):
        output = self.tmp / "single.png"
        code, out, _ = self._run("-i", str(self.input), "-o", str(output), "--mask", str(self.mask),
                                 "--document", "eu", "--report")
        self.assertEqual(code, 0)
        self.assertIn("Saved:", out)
        self.assertIn("Overall: PASS", out)
        with Image.open(output) as img:
            self.assertEqual(img.size, (413, 531))

    def test_sheet(self):
        output = self.tmp / "sheet.jpg"
        code, _, _ = self._run("-i", str(self.input), "-o", str(output), "--mask", str(self.mask),
                               "--mode", "sheet", "--count", "4", "--bg", "#dbeafe")
        self.assertEqual(code, 0)
        with Image.open(output) as img:
            self.assertEqual(img.size, (1800, 1200))
            self.assertEqual(img.format, "JPEG")

    def test_bad_threshold_exits_2(self):
        code, _, err = self._run("-i", str(self.input), "-o", str(self.tmp / "x.png"),
                                 "--mask", str(self.mask), "--threshold", "2")
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)

    def test_missing_input_exits_2(self):
        code, _, err = self._run("-i", str(self.tmp / "missing.jpg"), "-o", str(self.tmp / "x.png"),
                                 "--mask", str(self.mask))
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)

    def test_build_params_and_segmenter(self):
        args = cli._build_arg_parser().parse_args(
            ["-i", "a.jpg", "-o", "b.jpg", "--mode", "sheet", "--no-guides", "--document", "india"]
        )
        params = cli.build_params(args)
        self.assertIs(params.layout.mode, LayoutMode.SHEET)
        self.assertEqual(params.layout.guide_thickness, 0)
        self.assertEqual((params.layout.cell_width, params.layout.cell_height), (413, 531))

        seg = cli.build_segmenter(args)
        self.assertIsInstance(seg, FallbackSegmenter)
        self.assertIsInstance(seg.primary, RembgSegmenter)

        args.mask = "m.png"
        self.assertIsInstance(cli.build_segmenter(args), MaskFileSegmenter)

        args.mask = None
        args.fallback_model = ""
        self.assertIsInstance(cli.build_segmenter(args), RembgSegmenter)
