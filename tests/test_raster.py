"""Tests for raster decoding and Qt conversion."""

import cv2
import numpy as np
import pytest
from PySide6.QtGui import QImage

from conftest import solid_raster
from core.errors import InvalidImage
from core.raster import Raster, decode_raster, load_raster, raster_from_qimage, raster_to_qimage


def encode_png(bgr_or_bgra):
    ok, buffer = cv2.imencode(".png", bgr_or_bgra)
    assert ok
    return buffer.tobytes()


class TestRaster:
    def test_pixels_are_read_only_copy(self):
        source = np.zeros((2, 3, 4), dtype=np.uint8)
        raster = Raster(source)
        source[0, 0] = 255
        assert raster.pixels[0, 0, 0] == 0
        assert raster.size == (3, 2)
        with pytest.raises(ValueError):
            raster.pixels[0, 0, 0] = 1

    def test_writable_copy_is_independent(self):
        raster = solid_raster(2, 2, (1, 2, 3, 4))
        copy = raster.writable_copy()
        copy[:] = 0
        assert raster == solid_raster(2, 2, (1, 2, 3, 4))

    @pytest.mark.parametrize("shape", [(0, 4, 4), (4, 0, 4)])
    def test_empty_dimension(self, shape):
        with pytest.raises(InvalidImage):
            Raster(np.zeros(shape, dtype=np.uint8))

    def test_wrong_channel_count(self):
        with pytest.raises(InvalidImage):
            Raster(np.zeros((2, 2, 3), dtype=np.uint8))


class TestDecode:
    def test_bgr_png_becomes_opaque_rgba(self):
        bgr = np.zeros((4, 6, 3), dtype=np.uint8)
        bgr[:, :] = (255, 0, 0)  # blue in BGR order
        raster = decode_raster(encode_png(bgr))
        assert raster.size == (6, 4)
        assert (raster.pixels == (0, 0, 255, 255)).all()

    def test_alpha_is_preserved(self):
        bgra = np.zeros((3, 3, 4), dtype=np.uint8)
        bgra[:, :] = (0, 255, 0, 128)
        raster = decode_raster(encode_png(bgra))
        assert (raster.pixels == (0, 255, 0, 128)).all()

    def test_grayscale(self):
        gray = np.full((2, 2), 90, dtype=np.uint8)
        raster = decode_raster(encode_png(gray))
        assert (raster.pixels == (90, 90, 90, 255)).all()

    def test_sixteen_bit(self):
        gray = np.full((2, 2), 65535, dtype=np.uint16)
        raster = decode_raster(encode_png(gray))
        assert (raster.pixels == (255, 255, 255, 255)).all()

    @pytest.mark.parametrize("data", [b"", b"definitely not an image"])
    def test_undecodable(self, data):
        with pytest.raises(InvalidImage):
            decode_raster(data)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_raster(tmp_path / "missing.png")


class TestQtConversion:
    def test_qimage_round_trip_keeps_straight_alpha(self, qapp):
        pixels = np.zeros((5, 7, 4), dtype=np.uint8)
        pixels[:, :] = (200, 100, 50, 255)
        pixels[0, 0] = (0, 0, 0, 0)
        raster = Raster(pixels)
        image = raster_to_qimage(raster)
        assert (image.width(), image.height()) == (7, 5)
        assert raster_from_qimage(image) == raster

    def test_null_qimage(self, qapp):
        with pytest.raises(InvalidImage):
            raster_from_qimage(QImage())
