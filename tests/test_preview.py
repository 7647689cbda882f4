"""Tests for the preview module.

This module tests the preview/export and preview/display functionality including:
- Rasterising a fan with its shapes
- PNG export
- Hit fraction

Note: show_preview is exercised with the non-interactive Agg backend so no
window is opened.
"""

import math
import os
import tempfile

import numpy as np
import pytest
from PIL import Image as PILImage


def _fan():
    """One ray hitting at (2, 0) and one ray missing straight up."""
    from src.caster import Intersection, Ray

    return [
        Ray(x=0.0, y=0.0, angle=0.0, max_length=10.0, intersection=Intersection(x=2.0, y=0.0, len=2.0)),
        Ray(x=0.0, y=0.0, angle=math.pi / 2.0, max_length=3.0),
    ]


class TestRenderFanImage:
    """Test rasterising a fan."""

    def test_output_shape_and_dtype(self):
        """Test the image is (height, width, 3) uint8."""
        from src.caster.preview.export import render_fan_image

        image = render_fan_image(_fan(), width=64, height=32)
        assert image.shape == (32, 64, 3)
        assert image.dtype == np.uint8

    def test_empty_fan_is_background(self):
        """Test an empty fan with no shapes leaves only the background."""
        from src.caster.preview.export import BACKGROUND_COLOR, render_fan_image

        image = render_fan_image([], width=16, height=16)
        assert np.all(image == np.array(BACKGROUND_COLOR, dtype=np.uint8))

    def test_markers_and_shapes_are_drawn(self):
        """Test hit marker, origin, segment and missed ray land on the right pixels."""
        from src.caster.preview.export import (
            HIT_COLOR,
            ORIGIN_COLOR,
            RAY_COLOR,
            SHAPE_COLOR,
            render_fan_image,
        )

        image = render_fan_image(
            _fan(),
            segments=[(4.0, -2.0, 4.0, 2.0)],
            circles=[(-3.0, 0.0, 1.0)],
            width=100,
            height=100,
            scale=10.0,
        )
        # Origin (0, 0) maps to the image center
        assert tuple(image[50, 50]) == ORIGIN_COLOR
        # Hit at (2, 0) is 20 pixels right of center
        assert tuple(image[50, 70]) == HIT_COLOR
        # Segment at x = 4 runs vertically around column 90 (2 pixels wide)
        assert SHAPE_COLOR in [tuple(pixel) for pixel in image[40, 88:93]]
        # Missed ray points up (+y) which is towards row 0
        assert tuple(image[25, 50]) == RAY_COLOR

    def test_custom_center(self):
        """Test the center argument shifts the view."""
        from src.caster.preview.export import HIT_COLOR, render_fan_image

        image = render_fan_image(_fan(), width=100, height=100, scale=10.0, center=(2.0, 0.0))
        assert tuple(image[50, 50]) == HIT_COLOR

    @pytest.mark.parametrize("width, height, scale", [(0, 10, 1.0), (10, -1, 1.0), (10, 10, 0.0)])
    def test_invalid_dimensions_raise(self, width, height, scale):
        """Test non-positive sizes are rejected."""
        from src.caster.errors import InvalidInputError
        from src.caster.preview.export import render_fan_image

        with pytest.raises(InvalidInputError):
            render_fan_image(_fan(), width=width, height=height, scale=scale)


class TestSavePng:
    """Test PNG export functionality."""

    def test_save_png_creates_file(self):
        """Test that save_png creates a valid PNG file."""
        from src.caster.preview.export import save_png

        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            filepath = f.name

        try:
            save_png(_fan(), filepath, segments=[(4.0, -2.0, 4.0, 2.0)], width=48, height=24)

            assert os.path.exists(filepath)

            img = PILImage.open(filepath)
            assert img.size == (48, 24)  # PIL size is (width, height)
            assert img.mode == "RGB"
        finally:
            if os.path.exists(filepath):
                os.remove(filepath)

    def test_save_png_from_cast_fan(self, caster):
        """Test exporting a fan produced by the caster."""
        from src.caster.preview.export import render_fan_image, save_png

        segments = [(5.0, -5.0, 5.0, 5.0)]
        circles = [(3.0, 2.0, 0.5)]
        rays = caster.cast_fan(0.0, 1.0, 16, 0.0, 0.0, 20.0, segments, circles, 0.01)

        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            filepath = f.name

        try:
            save_png(rays, filepath, segments=segments, circles=circles, width=64, height=64)
            saved = np.asarray(PILImage.open(filepath))
            expected = render_fan_image(rays, segments=segments, circles=circles, width=64, height=64)
            assert np.array_equal(saved, expected)
        finally:
            if os.path.exists(filepath):
                os.remove(filepath)


class TestHitFraction:
    """Test hit_fraction."""

    def test_half_hit(self):
        from src.caster.preview.export import hit_fraction

        assert hit_fraction(_fan()) == 0.5

    def test_empty_fan(self):
        from src.caster.preview.export import hit_fraction

        assert hit_fraction([]) == 0.0


class TestShowPreview:
    """Test the matplotlib preview without opening a window."""

    def test_show_preview_sets_title(self, monkeypatch):
        matplotlib = pytest.importorskip("matplotlib")
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from src.caster.preview.display import show_preview

        monkeypatch.setattr(plt, "show", lambda block=True: None)
        show_preview(_fan(), width=32, height=32, block=False)
        assert plt.gca().get_title() == "2 rays - 50% hit"
        plt.close("all")


class TestModuleExports:
    """Test that module exports are correct."""

    def test_preview_exports(self):
        """Test preview package exports."""
        from src.caster import preview

        assert hasattr(preview, "render_fan_image")
        assert hasattr(preview, "save_png")
        assert hasattr(preview, "hit_fraction")
        assert hasattr(preview, "show_preview")
