"""
CaptureQC - Error Types

Author: CaptureQC Team
Version: 1.0.0
"""

from typing import List, Optional


class ImageQualityError(Exception):
    """Base class for all CaptureQC errors"""


class InvalidImageError(ImageQualityError, ValueError):
    """Raised when encoded bytes cannot be turned into a pixel grid"""


class ConfigError(ImageQualityError, ValueError):
    """Raised when a QualityConfig violates one of its invariants"""

    def __init__(self, errors: List[str], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or "Invalid quality config: " + "; ".join(self.errors))
