"""Shared synthetic images for the CaptureQC test suite"""

import cv2
import numpy as np
import pytest

from image_source import PixelGrid


def make_uniform(width, height, rgb):
    """Solid-colour grid"""
    array = np.empty((height, width, 3), dtype=np.uint8)
    array[...] = rgb
    return PixelGrid.from_array(array, color_order="RGB")


def make_checkerboard(size=100, block=10, light=200, dark=80):
    """Gray checkerboard of size x size pixels with block x block squares"""
    ys, xs = np.mgrid[0:size, 0:size]
    is_light = ((xs // block) + (ys // block)) % 2 == 0
    gray = np.where(is_light, light, dark).astype(np.uint8)
    return PixelGrid.from_array(gray)


def encode_png(grid):
    """PNG bytes for a grid"""
    bgra = cv2.cvtColor(grid.pixels.copy(), cv2.COLOR_RGBA2BGRA)
    ok, buffer = cv2.imencode(".png", bgra)
    assert ok
    return buffer.tobytes()


@pytest.fixture
def checkerboard():
    return make_checkerboard()


@pytest.fixture
def dark_image():
    return make_uniform(50, 50, (10, 10, 10))


@pytest.fixture
def bright_image():
    return make_uniform(50, 50, (250, 250, 250))


@pytest.fixture
def gray_image():
    return make_uniform(50, 50, (128, 128, 128))
