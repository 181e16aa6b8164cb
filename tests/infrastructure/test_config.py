"""Tests for configuration dataclasses and loading."""

from __future__ import annotations

import json

import pytest

from quality_gates.domain.enums import Category
from quality_gates.infrastructure.config import (
    CategoryThresholds,
    CorrectionStrategies,
    LoopConfiguration,
    ValidationConfig,
    load_config,
)


class TestCategoryThresholds:

    def test_defaults(self) -> None:
        t = CategoryThresholds()
        assert t.for_category(Category.STRUCTURAL_COMPLIANCE) == 85
        assert t.for_category(Category.BRAND_CONSISTENCY) == 90
        assert t.for_category(Category.ACCESSIBILITY) == 85
        assert t.for_category(Category.PERFORMANCE) == 80
        assert t.for_category(Category.CODE_QUALITY) == 85
        assert t.overall == 85

    def test_out_of_range_rejected(self) -> None:
        with pytest.raises(ValueError, match="accessibility"):
            CategoryThresholds(accessibility=120).validate()

    def test_from_dict_ignores_unknown_keys(self) -> None:
        t = CategoryThresholds.from_dict({"performance": 70, "bogus": 1})
        assert t.performance == 70.0


class TestValidationConfig:

    def test_defaults_validate(self) -> None:
        ValidationConfig().validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_duration": 0},
            {"discovery_limit": 0},
            {"hard_coded_limit": 0},
            {"bundle_limit_mb": -1},
            {"command_timeout": 0},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            ValidationConfig(**kwargs).validate()

    def test_dict_round_trip(self) -> None:
        cfg = ValidationConfig(urls=("/", "/pricing"), thresholds=CategoryThresholds(overall=90))
        restored = ValidationConfig.from_dict(cfg.to_dict())
        assert restored == cfg
        assert cfg.to_dict()["urls"] == ["/", "/pricing"]


class TestLoopConfiguration:

    def test_defaults(self) -> None:
        cfg = LoopConfiguration()
        assert cfg.max_iterations == 3
        assert cfg.correction_strategies == CorrectionStrategies()
        cfg.validate()

    def test_zero_iterations_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_iterations"):
            LoopConfiguration(max_iterations=0).validate()

    def test_from_dict_nested(self) -> None:
        cfg = LoopConfiguration.from_dict(
            {
                "max_iterations": 5,
                "success_thresholds": {"overall": 95},
                "correction_strategies": {"auto_fix": False},
            }
        )
        assert cfg.max_iterations == 5
        assert cfg.success_thresholds.overall == 95
        assert cfg.correction_strategies.auto_fix is False
        assert cfg.correction_strategies.generate_suggestions is True


class TestLoadConfig:

    def test_json_sections(self, tmp_path) -> None:
        path = tmp_path / "quality.json"
        path.write_text(
            json.dumps(
                {
                    "validation": {"skip_screenshots": True, "urls": ["/"]},
                    "loop": {"max_iterations": 2},
                }
            )
        )
        validation, loop = load_config(path)
        assert validation.skip_screenshots is True
        assert validation.urls == ("/",)
        assert loop.max_iterations == 2

    def test_missing_sections_use_defaults(self, tmp_path) -> None:
        path = tmp_path / "quality.json"
        path.write_text("{}")
        validation, loop = load_config(path)
        assert validation == ValidationConfig()
        assert loop == LoopConfiguration()

    def test_yaml(self, tmp_path) -> None:
        pytest.importorskip("yaml")
        path = tmp_path / "quality.yaml"
        path.write_text("loop:\n  max_iterations: 4\n  timeout: 30\n")
        _, loop = load_config(path)
        assert loop.max_iterations == 4
        assert loop.timeout == 30

    def test_non_mapping_rejected(self, tmp_path) -> None:
        path = tmp_path / "quality.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_invalid_value_rejected(self, tmp_path) -> None:
        path = tmp_path / "quality.json"
        path.write_text(json.dumps({"validation": {"max_duration": -5}}))
        with pytest.raises(ValueError, match="max_duration"):
            load_config(path)
