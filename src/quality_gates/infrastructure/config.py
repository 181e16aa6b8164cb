"""Configuration dataclasses for the quality-gate pipeline.

Each config is a plain ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid combinations, plus ``to_dict()`` / ``from_dict()``
helpers.  Configs are **frozen**: they are supplied at construction and never
mutated during a run.

All durations are in seconds.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from quality_gates.domain.enums import Category

try:
    import yaml as _yaml  # type: ignore[import-untyped]

    _HAS_YAML = True
except ImportError:  # pragma: no cover
    _yaml = None  # type: ignore[assignment]
    _HAS_YAML = False


def _check_score(name: str, value: float) -> None:
    if not (0 <= value <= 100):
        raise ValueError(f"{name} must be in [0, 100], got {value}")


# ===================================================================== #
#  Thresholds                                                            #
# ===================================================================== #

@dataclass(frozen=True)
class CategoryThresholds:
    """Minimum passing score per category plus the overall threshold."""

    structural_compliance: float = 85
    brand_consistency: float = 90
    accessibility: float = 85
    performance: float = 80
    code_quality: float = 85
    overall: float = 85

    def for_category(self, category: Category) -> float:
        """Return the threshold configured for *category*."""
        return getattr(self, category.name.lower())

    def validate(self) -> None:
        for f in fields(self):
            _check_score(f.name, getattr(self, f.name))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CategoryThresholds:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: float(v) for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Validation Configuration                                              #
# ===================================================================== #

_DEFAULT_FORBIDDEN_TERMS = ("revolutionary", "game-changing", "magical", "disruptive")


@dataclass(frozen=True)
class ValidationConfig:
    """Policy for one :class:`ValidationPipeline` run.

    Attributes
    ----------
    thresholds:
        Per-category and overall pass thresholds.
    urls, base_url, themes, viewports:
        What the visual/audit collaborator is asked to check.
    skip_screenshots:
        If ``True`` the audit collaborator is never called and validators
        only perform static text inspection.
    max_duration:
        Wall-clock budget for the whole run.
    source_root, source_extensions, discovery_limit:
        Bounded discovery scan used when no changed files are supplied.
    token_prefix:
        CSS custom-property prefix that marks design-token usage.
    forbidden_terms:
        Brand-voice vocabulary that must not appear in copy.
    hard_coded_limit:
        Number of hard-coded values in one file at which the file is
        reported as non-compliant.
    lint_command, typecheck_command, bundle_command:
        External processes.  ``{dist}`` in ``bundle_command`` is replaced by
        ``dist_dir``.
    bundle_limit_mb:
        Built-artifact size above which a performance issue is raised.
    run_static_analysis:
        Disable to skip lint/type-check/bundle processes entirely.
    command_timeout:
        Budget for each external process.
    reports_dir:
        Where validation reports are persisted.
    """

    thresholds: CategoryThresholds = field(default_factory=CategoryThresholds)
    urls: tuple[str, ...] = ("/", "/services", "/work", "/about", "/contact")
    base_url: str = "http://localhost:3000"
    themes: tuple[str, ...] = ("light", "dark", "minimal", "maximal")
    viewports: tuple[str, ...] = ("desktop", "tablet", "mobile")
    skip_screenshots: bool = False
    max_duration: float = 300.0
    source_root: str = "src"
    source_extensions: tuple[str, ...] = (".tsx", ".ts", ".jsx", ".js", ".css")
    discovery_limit: int = 10
    token_prefix: str = "--lss-"
    forbidden_terms: tuple[str, ...] = _DEFAULT_FORBIDDEN_TERMS
    hard_coded_limit: int = 5
    lint_command: str = "npx eslint . --format json"
    typecheck_command: str = "npx tsc --noEmit --pretty false"
    bundle_command: str = "du -sk {dist}"
    dist_dir: str = "dist"
    bundle_limit_mb: float = 5.0
    run_static_analysis: bool = True
    command_timeout: float = 120.0
    reports_dir: str = "validation-reports"
    environment: str = "development"
    version: str = "1.0.0"

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        self.thresholds.validate()
        if self.max_duration <= 0:
            raise ValueError(f"max_duration must be > 0, got {self.max_duration}")
        if self.discovery_limit < 1:
            raise ValueError(
                f"discovery_limit must be >= 1, got {self.discovery_limit}"
            )
        if self.hard_coded_limit < 1:
            raise ValueError(
                f"hard_coded_limit must be >= 1, got {self.hard_coded_limit}"
            )
        if self.bundle_limit_mb <= 0:
            raise ValueError(
                f"bundle_limit_mb must be > 0, got {self.bundle_limit_mb}"
            )
        if self.command_timeout <= 0:
            raise ValueError(
                f"command_timeout must be > 0, got {self.command_timeout}"
            )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidationConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered: dict[str, Any] = {}
        for key, value in data.items():
            if key not in valid_keys:
                continue
            if key == "thresholds":
                value = CategoryThresholds.from_dict(value)
            elif isinstance(value, list):
                value = tuple(value)
            filtered[key] = value
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Loop Configuration                                                    #
# ===================================================================== #

@dataclass(frozen=True)
class CorrectionStrategies:
    """Correction strategy flags.

    Attributes
    ----------
    auto_fix:
        Apply automated, high-confidence corrections between iterations.
    generate_suggestions:
        List corrections that were not applied automatically in the final
        recommendations of an escalated loop.
    escalate_complex:
        Mention the number of corrections needing manual review in the
        escalation reason.
    """

    auto_fix: bool = True
    generate_suggestions: bool = True
    escalate_complex: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CorrectionStrategies:
        valid_keys = {f.name for f in fields(cls)}
        return cls(**{k: bool(v) for k, v in data.items() if k in valid_keys})


@dataclass(frozen=True)
class LoopConfiguration:
    """Policy for one :class:`IterativeAgenticLoop` invocation.

    Attributes
    ----------
    max_iterations:
        Hard upper limit on generate/validate/correct cycles.
    success_thresholds:
        Every category threshold **and** the overall threshold must be met
        for an iteration to succeed.
    correction_strategies:
        See :class:`CorrectionStrategies`.
    timeout:
        Wall-clock budget for the whole loop.
    results_dir:
        Where loop results are persisted.
    """

    max_iterations: int = 3
    success_thresholds: CategoryThresholds = field(default_factory=CategoryThresholds)
    correction_strategies: CorrectionStrategies = field(default_factory=CorrectionStrategies)
    timeout: float = 600.0
    results_dir: str = "agentic-loop-results"

    def validate(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        self.success_thresholds.validate()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoopConfiguration:
        valid_keys = {f.name for f in fields(cls)}
        filtered: dict[str, Any] = {}
        for key, value in data.items():
            if key not in valid_keys:
                continue
            if key == "success_thresholds":
                value = CategoryThresholds.from_dict(value)
            elif key == "correction_strategies":
                value = CorrectionStrategies.from_dict(value)
            filtered[key] = value
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Loading                                                               #
# ===================================================================== #

def load_config(path: str | Path) -> tuple[ValidationConfig, LoopConfiguration]:
    """Load validation and loop configuration from a JSON or YAML file.

    The file holds two optional top-level sections, ``validation`` and
    ``loop``; missing sections fall back to defaults.

    Raises
    ------
    RuntimeError
        If a YAML file is given and PyYAML is not installed.
    ValueError
        If the file contents are invalid.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        if not _HAS_YAML:
            raise RuntimeError(
                "PyYAML is not installed. Install it with: pip install pyyaml"
            )
        data = _yaml.safe_load(text) or {}
    else:
        data = json.loads(text)

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")

    validation = ValidationConfig.from_dict(data.get("validation", {}))
    loop = LoopConfiguration.from_dict(data.get("loop", {}))
    return validation, loop
