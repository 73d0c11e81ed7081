"""Tests for ImageQualityValidator and its convenience functions"""

import numpy as np
import pytest

import image_source
import quality_config
from analytics_engine import BrightnessLevel
from conftest import encode_png, make_uniform
from exceptions import InvalidImageError
from quality_config import QualityConfig
from quality_validator import (
    ImageQualityValidator,
    main,
    quick_validate,
    validate_with_report,
)


@pytest.fixture
def validator():
    return ImageQualityValidator()


class TestConstruction:
    def test_default_config(self, validator):
        assert validator.config == QualityConfig()

    def test_preset_thresholds_reach_analyzers(self, gray_image):
        validator = ImageQualityValidator(quality_config.CARD_SCANNING)

        assert validator.check_blur(gray_image).threshold == 80.0
        brightness = validator.check_brightness(gray_image)
        assert (brightness.min_threshold, brightness.max_threshold) == (35.0, 230.0)
        assert validator.check_contrast(gray_image).threshold == 40.0


class TestScenarios:
    def test_sharp_checkerboard_passes(self, validator, checkerboard):
        result = validator.validate(checkerboard)

        assert not result.blur_result.is_blurry
        assert result.brightness_result.level == BrightnessLevel.OPTIMAL
        assert result.contrast_result.has_good_contrast
        assert result.is_valid
        assert result.issues == []
        assert result.summary == "Image quality is acceptable"
        assert result.error_message is None

    def test_dark_image(self, validator, dark_image):
        result = validator.validate(dark_image)

        assert result.brightness_result.level == BrightnessLevel.TOO_DARK
        assert not result.is_valid
        assert any("dark" in issue for issue in result.issues)

    def test_bright_image(self, validator, bright_image):
        result = validator.validate(bright_image)

        assert result.brightness_result.level == BrightnessLevel.TOO_BRIGHT
        assert not result.is_valid
        assert any("bright" in issue for issue in result.issues)

    def test_flat_gray_image(self, validator, gray_image):
        result = validator.validate(gray_image)

        assert result.contrast_result.contrast_score == 0.0
        assert not result.contrast_result.has_good_contrast
        assert not result.is_valid
        assert "Image has low contrast" in result.issues


class TestIssues:
    def test_fixed_order(self, validator, dark_image):
        result = validator.validate(dark_image)

        assert result.issues == [
            "Image is blurry",
            result.brightness_result.message,
            "Image has low contrast",
        ]
        assert result.error_message == "Image is blurry"

    def test_summary_joins_issues(self, validator, gray_image):
        result = validator.validate(gray_image)

        assert result.summary == (
            "Image quality issues detected: Image is blurry, Image has low contrast"
        )

    def test_only_brightness_issue(self, checkerboard):
        validator = ImageQualityValidator(QualityConfig(min_brightness=150.0, max_brightness=200.0))

        result = validator.validate(checkerboard)

        assert result.issues == [result.brightness_result.message]
        assert result.error_message.startswith("Image is too dark")

    def test_is_valid_requires_all_three(self, checkerboard):
        strict_blur = ImageQualityValidator(QualityConfig(blur_threshold=1e9))
        strict_contrast = ImageQualityValidator(QualityConfig(min_contrast=61.0))

        assert not strict_blur.validate(checkerboard).is_valid
        assert not strict_contrast.validate(checkerboard).is_valid


class TestInputs:
    def test_bytes_match_grid(self, validator, checkerboard):
        assert validator.validate(encode_png(checkerboard)) == validator.validate_from_grid(checkerboard)

    def test_numpy_array(self, validator):
        array = np.full((20, 20, 3), 128, dtype=np.uint8)
        assert validator.validate(array).brightness_result.is_optimal

    def test_bytes_decoded_once(self, validator, checkerboard, monkeypatch):
        calls = []
        real_decode = image_source.decode_image

        def counting_decode(data):
            calls.append(len(data))
            return real_decode(data)

        monkeypatch.setattr(image_source, "decode_image", counting_decode)

        validator.validate(encode_png(checkerboard))

        assert len(calls) == 1

    def test_invalid_bytes(self, validator):
        with pytest.raises(InvalidImageError):
            validator.validate(b"not an image")

    def test_check_methods_match_validate(self, validator, checkerboard):
        result = validator.validate(checkerboard)
        data = encode_png(checkerboard)

        assert validator.check_blur(data) == result.blur_result
        assert validator.check_brightness(data) == result.brightness_result
        assert validator.check_contrast(data) == result.contrast_result
        assert validator.check_blur_from_grid(checkerboard) == result.blur_result
        assert validator.check_brightness_from_grid(checkerboard) == result.brightness_result
        assert validator.check_contrast_from_grid(checkerboard) == result.contrast_result

    def test_repeated_calls_are_independent(self, validator, checkerboard, dark_image):
        first = validator.validate(checkerboard)
        validator.validate(dark_image)

        assert validator.validate(checkerboard) == first


class TestReporting:
    def test_to_dict(self, validator, dark_image):
        data = validator.validate(dark_image).to_dict()

        assert data["is_valid"] is False
        assert data["brightness_result"]["level"] == "too_dark"
        assert set(data["blur_result"]) == {"is_blurry", "variance", "confidence", "threshold"}
        assert set(data["contrast_result"]) == {"has_good_contrast", "contrast_score", "threshold"}
        assert data["issues"][0] == "Image is blurry"

    def test_user_message(self, validator, checkerboard, gray_image):
        assert validator.validate(checkerboard).get_user_message().startswith("✓ Image PASSED")

        message = validator.validate(gray_image).get_user_message()
        assert message.startswith("✗ Image REJECTED")
        assert "Issues (2)" in message
        assert "Image has low contrast" in message


class TestConvenience:
    def test_quick_validate(self, checkerboard, gray_image):
        assert quick_validate(checkerboard)
        assert not quick_validate(gray_image, preset="relaxed")

    def test_quick_validate_unknown_preset(self, checkerboard):
        with pytest.raises(ValueError):
            quick_validate(checkerboard, preset="nope")

    def test_validate_with_report(self, dark_image):
        is_valid, message = validate_with_report(dark_image, quality_config.RELAXED)

        assert not is_valid
        assert "too dark" in message


class TestMain:
    def test_passing_image(self, tmp_path, checkerboard, capsys):
        path = tmp_path / "board.png"
        path.write_bytes(encode_png(checkerboard))

        assert main(["quality_validator.py", str(path)]) == 0
        assert "PASSED" in capsys.readouterr().out

    def test_rejected_image_with_preset(self, tmp_path):
        path = tmp_path / "flat.png"
        path.write_bytes(encode_png(make_uniform(20, 20, (128, 128, 128))))

        assert main(["quality_validator.py", str(path), "strict"]) == 1

    def test_unreadable_image(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"garbage")

        assert main(["quality_validator.py", str(path)]) == 2

    def test_missing_file(self, tmp_path):
        assert main(["quality_validator.py", str(tmp_path / "missing.png")]) == 2

    def test_usage(self, capsys):
        assert main(["quality_validator.py"]) == 2
        assert "Usage" in capsys.readouterr().out
