"""
CaptureQC - Image Quality Analytics Engine

Independent quality analyzers over a decoded pixel grid:
- Blur detection (Laplacian variance)
- Brightness / exposure classification (mean luminance)
- Contrast estimation (luminance standard deviation)

Every analyzer derives luminance with the same weighting
(0.299 R + 0.587 G + 0.114 B) so the three metrics stay consistent.

Author: CaptureQC Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict

import cv2
import numpy as np

from exceptions import ConfigError
from image_source import ImageInput, PixelGrid, as_pixel_grid, luminance_plane

logger = logging.getLogger(__name__)

# 4-neighbour discrete Laplacian
LAPLACIAN_KERNEL = np.array(
    [[0, 1, 0],
     [1, -4, 1],
     [0, 1, 0]],
    dtype=np.float64
)


class BrightnessLevel(Enum):
    """Exposure classification"""
    TOO_DARK = "too_dark"
    OPTIMAL = "optimal"
    TOO_BRIGHT = "too_bright"


@dataclass(frozen=True)
class BlurResult:
    """Result of blur detection"""
    is_blurry: bool
    variance: float  # Laplacian variance, higher = sharper
    confidence: float  # 0.5-1.0, certainty of the verdict
    threshold: float

    @property
    def message(self) -> str:
        if self.is_blurry:
            return (
                f"Image is blurry. Variance: {self.variance:.2f} "
                f"(threshold: {self.threshold:.2f})"
            )
        return f"Image is sharp. Variance: {self.variance:.2f}"

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return asdict(self)


@dataclass(frozen=True)
class BrightnessResult:
    """Result of brightness analysis"""
    level: BrightnessLevel
    average_brightness: float  # 0-255
    min_threshold: float
    max_threshold: float

    @property
    def is_optimal(self) -> bool:
        return self.level == BrightnessLevel.OPTIMAL

    @property
    def message(self) -> str:
        if self.level == BrightnessLevel.TOO_DARK:
            return (
                f"Image is too dark. Brightness: {self.average_brightness:.2f} "
                f"(min: {self.min_threshold:.2f})"
            )
        if self.level == BrightnessLevel.TOO_BRIGHT:
            return (
                f"Image is too bright. Brightness: {self.average_brightness:.2f} "
                f"(max: {self.max_threshold:.2f})"
            )
        return f"Image brightness is optimal. Brightness: {self.average_brightness:.2f}"

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        data = asdict(self)
        data['level'] = self.level.value
        return data


@dataclass(frozen=True)
class ContrastResult:
    """Result of contrast analysis"""
    has_good_contrast: bool
    contrast_score: float  # Luminance standard deviation
    threshold: float

    @property
    def message(self) -> str:
        if self.has_good_contrast:
            return f"Image has good contrast. Score: {self.contrast_score:.2f}"
        return (
            f"Image has low contrast. Score: {self.contrast_score:.2f} "
            f"(threshold: {self.threshold:.2f})"
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return asdict(self)


class BlurDetector:
    """
    Blur detection using the variance of the Laplacian

    Sharp images have many strong edges and therefore a widely spread
    Laplacian response; blur smooths edges and collapses the variance.
    """

    def __init__(self, threshold: float = 100.0):
        """
        Initialize blur detector

        Args:
            threshold: Laplacian variance below which an image is blurry

        Raises:
            ConfigError: If threshold is not positive
        """
        if not threshold > 0:
            raise ConfigError(["threshold must be positive"])
        self.threshold = threshold

    def detect(self, image: ImageInput) -> BlurResult:
        """
        Detect blur in encoded bytes, an OpenCV array or a PixelGrid

        Raises:
            InvalidImageError: If bytes cannot be decoded
        """
        return self.detect_from_grid(as_pixel_grid(image))

    def detect_from_grid(self, grid: PixelGrid) -> BlurResult:
        """Detect blur in an already decoded image"""
        variance = self.laplacian_variance(luminance_plane(grid))
        confidence = self._calculate_confidence(variance)

        logger.debug(
            f"Blur: variance={variance:.2f}, threshold={self.threshold:.2f}, "
            f"confidence={confidence:.3f}"
        )

        return BlurResult(
            is_blurry=variance < self.threshold,
            variance=variance,
            confidence=confidence,
            threshold=self.threshold
        )

    @staticmethod
    def laplacian_variance(gray: np.ndarray) -> float:
        """
        Population variance of the Laplacian over interior pixels

        Border rows and columns are not evaluated; images smaller than
        3x3 have no interior and score 0.

        Args:
            gray: float64 luminance plane

        Returns:
            Variance (>= 0)
        """
        height, width = gray.shape
        if height < 3 or width < 3:
            return 0.0

        laplacian = cv2.filter2D(gray, cv2.CV_64F, LAPLACIAN_KERNEL)
        interior = laplacian[1:-1, 1:-1]
        return float(np.var(interior - interior.flat[0]))

    def _calculate_confidence(self, variance: float) -> float:
        """Certainty of the verdict from distance to threshold, in [0.5, 1.0]"""
        distance = abs(variance - self.threshold)
        max_distance = self.threshold * 2
        if np.isinf(max_distance):
            # Limit of distance / max_distance as threshold grows
            normalized = 0.5
        else:
            normalized = min(distance / max_distance, 1.0)
        return 0.5 + normalized * 0.5


class BrightnessAnalyzer:
    """Exposure classification from mean luminance"""

    def __init__(self, min_brightness: float = 40.0, max_brightness: float = 220.0):
        self.min_brightness = min_brightness
        self.max_brightness = max_brightness

    def analyze(self, image: ImageInput) -> BrightnessResult:
        """
        Analyze brightness of encoded bytes, an OpenCV array or a PixelGrid

        Raises:
            InvalidImageError: If bytes cannot be decoded
        """
        return self.analyze_from_grid(as_pixel_grid(image))

    def analyze_from_grid(self, grid: PixelGrid) -> BrightnessResult:
        """Analyze brightness of an already decoded image"""
        average = self.average_brightness(luminance_plane(grid))
        level = self._classify(average)

        logger.debug(f"Brightness: mean={average:.2f}, level={level.value}")

        return BrightnessResult(
            level=level,
            average_brightness=average,
            min_threshold=self.min_brightness,
            max_threshold=self.max_brightness
        )

    @staticmethod
    def average_brightness(gray: np.ndarray) -> float:
        if gray.size == 0:
            return 0.0
        return float(np.mean(gray))

    def _classify(self, brightness: float) -> BrightnessLevel:
        # Values equal to either bound are optimal
        if brightness < self.min_brightness:
            return BrightnessLevel.TOO_DARK
        elif brightness > self.max_brightness:
            return BrightnessLevel.TOO_BRIGHT
        return BrightnessLevel.OPTIMAL


class ContrastAnalyzer:
    """
    Contrast estimation from the spread of luminance values

    A flat histogram (uniform image) has zero standard deviation; a wide
    spread between dark and light regions scores high.
    """

    def __init__(self, min_contrast: float = 50.0):
        self.min_contrast = min_contrast

    def analyze(self, image: ImageInput) -> ContrastResult:
        """
        Analyze contrast of encoded bytes, an OpenCV array or a PixelGrid

        Raises:
            InvalidImageError: If bytes cannot be decoded
        """
        return self.analyze_from_grid(as_pixel_grid(image))

    def analyze_from_grid(self, grid: PixelGrid) -> ContrastResult:
        """Analyze contrast of an already decoded image"""
        score = self.contrast_score(luminance_plane(grid))

        logger.debug(f"Contrast: std={score:.2f}, threshold={self.min_contrast:.2f}")

        return ContrastResult(
            has_good_contrast=score >= self.min_contrast,
            contrast_score=score,
            threshold=self.min_contrast
        )

    @staticmethod
    def contrast_score(gray: np.ndarray) -> float:
        """Population standard deviation of luminance (0 for empty images)"""
        if gray.size == 0:
            return 0.0
        # Shifting by one sample keeps the spread and makes flat images exactly 0
        return float(np.std(gray - gray.flat[0]))
