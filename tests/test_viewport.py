"""Tests for letterbox fitting and edit/intrinsic coordinate mapping."""

import itertools

import pytest

from core.errors import InvalidTransform
from core.viewport import fit


class TestFit:
    def test_wide_image_in_square_container(self):
        t = fit(100, 50, 200, 200)
        assert t.displayed_width == 200
        assert t.displayed_height == 100
        assert t.offset_x == 0
        assert t.offset_y == 50
        assert t.scale_x == 0.5
        assert t.scale_y == 0.5

    def test_tall_image_letterboxed_horizontally(self):
        t = fit(50, 100, 200, 100)
        assert t.displayed_height == 100
        assert t.displayed_width == 50
        assert t.offset_y == 0
        assert t.offset_x == 75
        assert t.scale_x == 1.0
        assert t.scale_y == 1.0

    def test_equal_aspect_has_no_offsets(self):
        t = fit(400, 300, 200, 150)
        assert (t.offset_x, t.offset_y) == pytest.approx((0, 0))
        assert (t.displayed_width, t.displayed_height) == pytest.approx((200, 150))
        assert (t.scale_x, t.scale_y) == pytest.approx((2.0, 2.0))

    @pytest.mark.parametrize(
        "iw,ih,cw,ch",
        list(itertools.product([1, 37, 640, 4000], [1, 29, 480, 3000], [1, 120, 799], [1, 90, 601])),
    )
    def test_letterbox_totality(self, iw, ih, cw, ch):
        t = fit(iw, ih, cw, ch)
        eps = 1e-9
        assert t.displayed_width <= cw + eps
        assert t.displayed_height <= ch + eps
        assert abs(t.displayed_width - cw) < eps or abs(t.displayed_height - ch) < eps
        assert t.offset_x >= 0 and t.offset_y >= 0

    @pytest.mark.parametrize("container", [(0, 100), (100, 0), (0, 0), (-5, 10)])
    def test_zero_area_container(self, container):
        with pytest.raises(InvalidTransform):
            fit(100, 50, *container)

    def test_zero_area_image(self):
        with pytest.raises(InvalidTransform):
            fit(0, 50, 100, 100)


class TestMapping:
    def test_concrete_point(self):
        t = fit(100, 50, 200, 200)
        assert t.to_intrinsic(60, 80) == (30, 15)

    def test_round_trip(self):
        t = fit(1920, 1080, 733, 517)
        x0, y0, w, h = t.displayed_rect()
        for fx, fy in itertools.product([0.0, 0.13, 0.5, 0.99, 1.0], repeat=2):
            point = (x0 + fx * w, y0 + fy * h)
            back = t.to_edit(*t.to_intrinsic(*point))
            assert back[0] == pytest.approx(point[0], abs=1e-6)
            assert back[1] == pytest.approx(point[1], abs=1e-6)

    def test_displayed_corners_map_to_image_corners(self):
        t = fit(300, 200, 500, 500)
        x0, y0, w, h = t.displayed_rect()
        assert t.to_intrinsic(x0, y0) == pytest.approx((0, 0))
        assert t.to_intrinsic(x0 + w, y0 + h) == pytest.approx((300, 200))

    def test_contains(self):
        t = fit(100, 50, 200, 200)
        assert t.contains(100, 100)
        assert not t.contains(100, 10)
