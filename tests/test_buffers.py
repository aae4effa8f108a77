import unittest

import numpy as np
from PIL import Image

from tests._test_path import SRC  # noqa: F401

from idsheet.core.buffers import AlphaMask, ConfidenceMask, ImageBuffer
from idsheet.core.errors import ConfigurationError


class TestImageBuffer(unittest.TestCase):
    def test_filled_is_opaque_color(self):
        img = ImageBuffer.filled(4, 3, (10, 20, 30))
        self.assertEqual(img.size, (4, 3))
        self.assertEqual(img.pixels.shape, (3, 4, 4))
        self.assertEqual(img.pixels.size, 4 * 3 * 4)
        self.assertTrue((img.rgb == np.array([10, 20, 30])).all())
        self.assertTrue((img.alpha == 255).all())

    def test_buffer_is_a_private_read_only_copy(self):
        arr = np.zeros((2, 2, 4), dtype=np.uint8)
        img = ImageBuffer(arr)
        arr[0, 0] = 99
        self.assertEqual(int(img.pixels[0, 0, 0]), 0)
        with self.assertRaises(ValueError):
            img.pixels[0, 0, 0] = 1

    def test_rejects_bad_shapes(self):
        with self.assertRaises(ValueError):
            ImageBuffer(np.zeros((2, 2, 3), dtype=np.uint8))
        with self.assertRaises(ValueError):
            ImageBuffer(np.zeros((2, 2, 4), dtype=np.float32))
        with self.assertRaises(ConfigurationError):
            ImageBuffer(np.zeros((0, 2, 4), dtype=np.uint8))

    def test_pil_roundtrip(self):
        pil = Image.fromarray(np.array([[[10, 20, 30], [40, 50, 60]]], dtype=np.uint8), "RGB")
        img = ImageBuffer.from_pil(pil)
        self.assertEqual(img.size, (2, 1))
        self.assertTrue((img.alpha == 255).all())
        back = img.to_pil("RGB")
        self.assertEqual(back.mode, "RGB")
        self.assertTrue(np.array_equal(np.asarray(back), np.asarray(pil)))


class TestMasks(unittest.TestCase):
    def test_from_probabilities(self):
        m = ConfidenceMask.from_probabilities(np.array([[0.0, 0.5, 1.0, 1.7]]))
        self.assertEqual(m.values.tolist(), [[0, 128, 255, 255]])

    def test_from_pil_uses_alpha_of_cutouts(self):
        rgba = np.zeros((2, 3, 4), dtype=np.uint8)
        rgba[:, :, 3] = 200
        m = ConfidenceMask.from_pil(Image.fromarray(rgba, "RGBA"))
        self.assertEqual(m.size, (3, 2))
        self.assertTrue((m.values == 200).all())

    def test_from_pil_grayscale(self):
        m = ConfidenceMask.from_pil(Image.new("L", (5, 4), 77))
        self.assertEqual(m.size, (5, 4))
        self.assertTrue((m.values == 77).all())

    def test_alpha_mask_is_read_only(self):
        a = AlphaMask(np.full((2, 2), 255, dtype=np.uint8))
        with self.assertRaises(ValueError):
            a.values[0, 0] = 0
        self.assertEqual(a.to_pil().mode, "L")
