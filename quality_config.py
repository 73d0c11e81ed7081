"""
CaptureQC - Quality Configuration

Threshold bundle for blur, brightness and contrast checks with
presets for common capture scenarios:
- Card scanning (ID cards, credit cards)
- Document scanning
- Photo capture
- Relaxed / strict

Author: CaptureQC Team
Version: 1.0.0
"""

from dataclasses import dataclass, asdict, fields, replace
from enum import Enum
from typing import Dict, List, Union

from exceptions import ConfigError


class QualityPreset(Enum):
    """Named threshold presets"""
    DEFAULT = "default"
    CARD_SCANNING = "card_scanning"  # Handheld card capture
    DOCUMENT_SCANNING = "document_scanning"  # Text documents
    PHOTO_CAPTURE = "photo_capture"  # Stricter sharpness
    RELAXED = "relaxed"  # Low-quality cameras, poor lighting
    STRICT = "strict"  # High quality required


@dataclass(frozen=True)
class QualityConfig:
    """Thresholds for image quality validation"""
    # Laplacian variance below this = blurry (typical range 50-500)
    blur_threshold: float = 100.0

    # Mean luminance range (0-255)
    min_brightness: float = 40.0
    max_brightness: float = 220.0

    # Luminance standard deviation below this = low contrast
    min_contrast: float = 50.0

    def __post_init__(self):
        errors = self.validate()
        if errors:
            raise ConfigError(errors)

    def validate(self) -> List[str]:
        """
        Check threshold invariants

        Returns:
            List of violated rules (empty when valid)
        """
        errors = []

        if not self.blur_threshold > 0:
            errors.append("blur_threshold must be positive")

        if not 0 <= self.min_brightness <= 255:
            errors.append("min_brightness must be between 0 and 255")
        if not 0 <= self.max_brightness <= 255:
            errors.append("max_brightness must be between 0 and 255")
        if not self.min_brightness < self.max_brightness:
            errors.append("min_brightness must be less than max_brightness")

        if not self.min_contrast >= 0:
            errors.append("min_contrast must be non-negative")

        return errors

    def copy_with(self, **overrides) -> 'QualityConfig':
        """Create a new config with the given thresholds replaced"""
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise TypeError(f"Unknown QualityConfig fields: {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'QualityConfig':
        """Create from dictionary"""
        return cls(**data)

    @classmethod
    def from_preset(cls, preset: Union[QualityPreset, str]) -> 'QualityConfig':
        """Look up a preset by enum member or name"""
        if isinstance(preset, str):
            try:
                preset = QualityPreset(preset.lower())
            except ValueError:
                names = ", ".join(p.value for p in QualityPreset)
                raise ValueError(f"Unknown preset {preset!r}. Available: {names}") from None
        return PRESETS[preset]

    def __str__(self) -> str:
        return (
            f"QualityConfig(blur_threshold={self.blur_threshold}, "
            f"brightness={self.min_brightness}-{self.max_brightness}, "
            f"min_contrast={self.min_contrast})"
        )


DEFAULT = QualityConfig()

CARD_SCANNING = QualityConfig(
    blur_threshold=80.0,
    min_brightness=35.0,
    max_brightness=230.0,
    min_contrast=40.0,
)

DOCUMENT_SCANNING = QualityConfig(
    blur_threshold=120.0,
    min_brightness=45.0,
    max_brightness=215.0,
    min_contrast=55.0,
)

PHOTO_CAPTURE = QualityConfig(
    blur_threshold=200.0,
    min_brightness=30.0,
    max_brightness=235.0,
    min_contrast=45.0,
)

RELAXED = QualityConfig(
    blur_threshold=50.0,
    min_brightness=25.0,
    max_brightness=240.0,
    min_contrast=30.0,
)

STRICT = QualityConfig(
    blur_threshold=250.0,
    min_brightness=50.0,
    max_brightness=200.0,
    min_contrast=65.0,
)

PRESETS: Dict[QualityPreset, QualityConfig] = {
    QualityPreset.DEFAULT: DEFAULT,
    QualityPreset.CARD_SCANNING: CARD_SCANNING,
    QualityPreset.DOCUMENT_SCANNING: DOCUMENT_SCANNING,
    QualityPreset.PHOTO_CAPTURE: PHOTO_CAPTURE,
    QualityPreset.RELAXED: RELAXED,
    QualityPreset.STRICT: STRICT,
}
