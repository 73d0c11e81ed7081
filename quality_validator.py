"""
CaptureQC - Image Quality Validator

Single entry point combining blur, brightness and contrast checks
into one pass/fail verdict with:
- Ordered issue list
- Human-readable summary and report
- Individual metric checks sharing the same analyzers

Author: CaptureQC Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from analytics_engine import (
    BlurDetector, BlurResult,
    BrightnessAnalyzer, BrightnessResult,
    ContrastAnalyzer, ContrastResult
)
from exceptions import InvalidImageError
from image_source import ImageInput, PixelGrid, as_pixel_grid
from quality_config import QualityConfig, QualityPreset

logger = logging.getLogger(__name__)

BLUR_ISSUE = "Image is blurry"
LOW_CONTRAST_ISSUE = "Image has low contrast"
ACCEPTABLE_SUMMARY = "Image quality is acceptable"


@dataclass(frozen=True)
class QualityResult:
    """Combined result of all quality checks"""
    is_valid: bool
    blur_result: BlurResult
    brightness_result: BrightnessResult
    contrast_result: ContrastResult

    @property
    def issues(self) -> List[str]:
        """Detected issues, always in blur, brightness, contrast order"""
        issues = []

        if self.blur_result.is_blurry:
            issues.append(BLUR_ISSUE)

        if not self.brightness_result.is_optimal:
            issues.append(self.brightness_result.message)

        if not self.contrast_result.has_good_contrast:
            issues.append(LOW_CONTRAST_ISSUE)

        return issues

    @property
    def error_message(self) -> Optional[str]:
        """Primary issue, or None when the image passed"""
        if self.is_valid:
            return None
        issues = self.issues
        return issues[0] if issues else None

    @property
    def summary(self) -> str:
        if self.is_valid:
            return ACCEPTABLE_SUMMARY
        return f"Image quality issues detected: {', '.join(self.issues)}"

    def get_user_message(self) -> str:
        """Get user-friendly validation report"""
        if self.is_valid:
            return (
                f"✓ Image PASSED validation "
                f"(sharpness: {self.blur_result.variance:.1f}, "
                f"brightness: {self.brightness_result.average_brightness:.1f}, "
                f"contrast: {self.contrast_result.contrast_score:.1f})"
            )

        msg = "✗ Image REJECTED\n"
        msg += f"\nIssues ({len(self.issues)}):\n"
        for issue in self.issues:
            msg += f"  • {issue}\n"

        msg += "\nDetails:\n"
        msg += f"  - {self.blur_result.message} (confidence: {self.blur_result.confidence:.2f})\n"
        msg += f"  - {self.brightness_result.message}\n"
        msg += f"  - {self.contrast_result.message}\n"
        return msg

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return {
            'is_valid': self.is_valid,
            'issues': self.issues,
            'summary': self.summary,
            'blur_result': self.blur_result.to_dict(),
            'brightness_result': self.brightness_result.to_dict(),
            'contrast_result': self.contrast_result.to_dict()
        }


class ImageQualityValidator:
    """
    Image quality validator for capture pipelines

    Builds its blur detector, brightness analyzer and contrast analyzer
    once from the config; validate() and the check_* methods all reuse
    them. Instances hold no per-call state and can be shared across
    threads.
    """

    def __init__(self, config: Optional[QualityConfig] = None):
        """
        Initialize validator

        Args:
            config: Quality thresholds. Uses defaults if None.
        """
        self.config = config or QualityConfig()

        self._blur_detector = BlurDetector(threshold=self.config.blur_threshold)
        self._brightness_analyzer = BrightnessAnalyzer(
            min_brightness=self.config.min_brightness,
            max_brightness=self.config.max_brightness
        )
        self._contrast_analyzer = ContrastAnalyzer(min_contrast=self.config.min_contrast)

        logger.debug(f"Initialized ImageQualityValidator with {self.config}")

    def validate(self, image: ImageInput) -> QualityResult:
        """
        Run all quality checks

        Args:
            image: Encoded bytes (decoded once), OpenCV array or PixelGrid

        Returns:
            QualityResult with all sub-results

        Raises:
            InvalidImageError: If bytes cannot be decoded
        """
        return self.validate_from_grid(as_pixel_grid(image))

    def validate_from_grid(self, grid: PixelGrid) -> QualityResult:
        """Run all quality checks on an already decoded image"""
        blur_result = self._blur_detector.detect_from_grid(grid)
        brightness_result = self._brightness_analyzer.analyze_from_grid(grid)
        contrast_result = self._contrast_analyzer.analyze_from_grid(grid)

        is_valid = (
            not blur_result.is_blurry
            and brightness_result.is_optimal
            and contrast_result.has_good_contrast
        )

        result = QualityResult(
            is_valid=is_valid,
            blur_result=blur_result,
            brightness_result=brightness_result,
            contrast_result=contrast_result
        )

        logger.info(
            f"Validation complete: {grid.width}x{grid.height}, Valid={is_valid}, "
            f"Variance={blur_result.variance:.1f}, "
            f"Brightness={brightness_result.average_brightness:.1f}, "
            f"Contrast={contrast_result.contrast_score:.1f}"
        )
        if not is_valid:
            logger.warning(f"Quality check failed: {'; '.join(result.issues)}")

        return result

    def check_blur(self, image: ImageInput) -> BlurResult:
        """Blur check only"""
        return self._blur_detector.detect(image)

    def check_blur_from_grid(self, grid: PixelGrid) -> BlurResult:
        return self._blur_detector.detect_from_grid(grid)

    def check_brightness(self, image: ImageInput) -> BrightnessResult:
        """Brightness check only"""
        return self._brightness_analyzer.analyze(image)

    def check_brightness_from_grid(self, grid: PixelGrid) -> BrightnessResult:
        return self._brightness_analyzer.analyze_from_grid(grid)

    def check_contrast(self, image: ImageInput) -> ContrastResult:
        """Contrast check only"""
        return self._contrast_analyzer.analyze(image)

    def check_contrast_from_grid(self, grid: PixelGrid) -> ContrastResult:
        return self._contrast_analyzer.analyze_from_grid(grid)


# Convenience functions
def quick_validate(
    image: ImageInput,
    preset: Optional[Union[QualityPreset, str]] = None
) -> bool:
    """
    Quick validation (returns True/False only)

    Args:
        image: Encoded bytes, OpenCV array or PixelGrid
        preset: Optional preset name; defaults apply if None

    Returns:
        True if valid, False otherwise
    """
    config = QualityConfig.from_preset(preset) if preset is not None else None
    validator = ImageQualityValidator(config)
    return validator.validate(image).is_valid


def validate_with_report(
    image: ImageInput,
    config: Optional[QualityConfig] = None
) -> Tuple[bool, str]:
    """
    Validate and get user-friendly report

    Returns:
        Tuple of (is_valid, message)
    """
    validator = ImageQualityValidator(config)
    result = validator.validate(image)
    return result.is_valid, result.get_user_message()


def main(argv: List[str]) -> int:
    """Validate one image file; exit code 0 = pass, 1 = rejected, 2 = unreadable"""
    if len(argv) < 2:
        print("Usage: python quality_validator.py <image_path> [preset]")
        return 2

    image_path = argv[1]
    config = QualityConfig.from_preset(argv[2]) if len(argv) > 2 else None

    try:
        with open(image_path, 'rb') as f:
            data = f.read()
    except OSError as e:
        print(f"Error: Could not read {image_path}: {e}")
        return 2

    try:
        result = ImageQualityValidator(config).validate(data)
    except InvalidImageError as e:
        print(f"Error: Could not load image from {image_path}: {e}")
        return 2

    print(result.get_user_message())
    return 0 if result.is_valid else 1


if __name__ == "__main__":
    import sys

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    sys.exit(main(sys.argv))
