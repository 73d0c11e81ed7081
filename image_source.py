"""
CaptureQC - Image Source and Luminance

Decoded pixel access shared by every analyzer:
- PixelGrid: read-only RGBA pixel grid
- Luminance weighting (ITU-R BT.601 coefficients)
- Decoding of encoded bytes (PNG/JPEG/...) through OpenCV

Author: CaptureQC Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Tuple, Union

import cv2
import numpy as np

from exceptions import InvalidImageError

logger = logging.getLogger(__name__)

# Luminance weights (R, G, B); alpha does not contribute
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

SUPPORTED_COLOR_ORDERS = ("BGR", "RGB")


def luminance(r: float, g: float, b: float, a: float = 255) -> float:
    """
    Perceptual brightness of a single pixel

    Args:
        r, g, b: Channel values (0-255)
        a: Alpha channel, ignored

    Returns:
        Luminance in [0, 255]
    """
    return LUMA_R * r + LUMA_G * g + LUMA_B * b


@dataclass(frozen=True, eq=False)
class PixelGrid:
    """Decoded image as an immutable (height, width, 4) RGBA uint8 array"""
    pixels: np.ndarray

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidImageError(
                f"PixelGrid expects an (H, W, 4) uint8 array, got "
                f"shape={pixels.shape} dtype={pixels.dtype}"
            )
        pixels = pixels.copy()
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """Return the (R, G, B, A) channels at column x, row y"""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} grid")
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    @classmethod
    def from_array(cls, array: np.ndarray, color_order: str = "BGR") -> 'PixelGrid':
        """
        Build a grid from a numpy image

        Args:
            array: uint8 image, either (H, W) grayscale or (H, W, C) with
                C in {1, 3, 4}
            color_order: "BGR" (OpenCV convention) or "RGB"

        Returns:
            PixelGrid in RGBA order
        """
        if color_order not in SUPPORTED_COLOR_ORDERS:
            raise ValueError(
                f"Unknown color order {color_order!r}, expected one of {SUPPORTED_COLOR_ORDERS}"
            )

        array = np.asarray(array)
        if array.dtype != np.uint8:
            raise InvalidImageError(f"Unsupported pixel dtype {array.dtype}, expected uint8")

        if array.ndim == 3 and array.shape[2] == 1:
            array = array[..., 0]

        if array.ndim == 2:
            height, width = array.shape
            rgba = np.full((height, width, 4), 255, dtype=np.uint8)
            rgba[..., :3] = array[..., np.newaxis]
            return cls(rgba)

        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidImageError(f"Unsupported image shape {array.shape}")

        height, width, channels = array.shape
        color = array[..., :3]
        if color_order == "BGR":
            color = color[..., ::-1]

        rgba = np.full((height, width, 4), 255, dtype=np.uint8)
        rgba[..., :3] = color
        if channels == 4:
            rgba[..., 3] = array[..., 3]
        return cls(rgba)


ImageInput = Union[bytes, bytearray, memoryview, np.ndarray, PixelGrid]


def luminance_plane(grid: PixelGrid) -> np.ndarray:
    """
    Per-pixel luminance of the whole grid

    Evaluates the same expression as luminance(), so scalar and
    vectorised values agree exactly.

    Returns:
        float64 array of shape (height, width)
    """
    rgb = grid.pixels[..., :3].astype(np.float64)
    return LUMA_R * rgb[..., 0] + LUMA_G * rgb[..., 1] + LUMA_B * rgb[..., 2]


def decode_image(data: Union[bytes, bytearray, memoryview]) -> PixelGrid:
    """
    Decode PNG/JPEG/... bytes into a PixelGrid

    Raises:
        InvalidImageError: If OpenCV cannot produce an image from the bytes
    """
    buffer = np.frombuffer(bytes(data), dtype=np.uint8)
    if buffer.size == 0:
        logger.error("Cannot decode image: empty buffer")
        raise InvalidImageError("Cannot decode image from empty bytes")

    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        logger.error(f"Image decoding failed: {str(e)}")
        raise InvalidImageError(f"Cannot decode image from provided bytes: {str(e)}") from e

    if image is None:
        logger.error(f"Cannot decode image from {buffer.size} bytes")
        raise InvalidImageError("Cannot decode image from provided bytes")

    # 16-bit PNG/TIFF come back unscaled
    if image.dtype == np.uint16:
        image = (image / 257.0).round().astype(np.uint8)

    grid = PixelGrid.from_array(image, color_order="BGR")
    logger.debug(f"Decoded {grid.width}x{grid.height} image from {buffer.size} bytes")
    return grid


def as_pixel_grid(image: ImageInput) -> PixelGrid:
    """Decode bytes or wrap an OpenCV array; grids pass through untouched"""
    if isinstance(image, PixelGrid):
        return image
    if isinstance(image, (bytes, bytearray, memoryview)):
        return decode_image(image)
    if isinstance(image, np.ndarray):
        return PixelGrid.from_array(image)
    raise TypeError(
        f"Expected encoded bytes, numpy array or PixelGrid, got {type(image).__name__}"
    )
