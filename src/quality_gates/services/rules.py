"""Pluggable content rules for the category validators.

A :class:`ContentRule` pairs a *finder* (text -> matched fragments) with the
penalty and issue template to apply when it matches.  Validators run a list
of rules over every source file; swapping or extending the list changes the
checks without touching the validators themselves.

Default rule sets are built per category by :func:`default_rules`.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePath

from quality_gates.domain.enums import Category, Severity
from quality_gates.domain.values import ValidationIssue, make_issue_id
from quality_gates.infrastructure.config import ValidationConfig

Finder = Callable[[str], list[str]]

_SCRIPT_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js")
_MARKUP_EXTENSIONS = (".tsx", ".jsx")


@dataclass(frozen=True)
class ContentRule:
    """One static text check.

    Attributes
    ----------
    rule_id:
        Stable identifier, also used as the issue ``rule``.
    category, severity, penalty, priority:
        Applied to every issue the rule produces.
    message:
        ``str.format`` template; receives ``name`` (file base name),
        ``path``, ``evidence`` (first or current match) and ``count``.
    fix:
        Suggested fix text.
    finder:
        Returns the matched fragments in *content*; an empty list means the
        rule does not fire.
    extensions:
        File suffixes the rule inspects.
    per_match:
        If ``True`` one issue is produced per distinct fragment, otherwise
        one issue per file.
    """

    rule_id: str
    category: Category
    severity: Severity
    penalty: float
    message: str
    fix: str
    finder: Finder
    priority: int = 2
    extensions: tuple[str, ...] = _SCRIPT_EXTENSIONS
    per_match: bool = False

    def applies_to(self, path: str) -> bool:
        return PurePath(path).suffix in self.extensions

    def check(self, path: str, content: str) -> list[ValidationIssue]:
        """Run the rule over one file and return the issues it raises."""
        matches = self.finder(content)
        if not matches:
            return []
        name = PurePath(path).name
        fragments = list(dict.fromkeys(matches)) if self.per_match else [matches[0]]
        return [
            ValidationIssue(
                issue_id=make_issue_id(self.category, self.rule_id, path, evidence),
                severity=self.severity,
                category=self.category,
                message=self.message.format(
                    name=name, path=path, evidence=evidence, count=len(matches)
                ),
                location=path,
                rule=self.rule_id,
                fix=self.fix,
                priority=self.priority,
                evidence=evidence,
            )
            for evidence in fragments
        ]


# ===================================================================== #
#  Finders                                                               #
# ===================================================================== #

HARD_CODED_PATTERN = re.compile(
    r"#(?:[0-9a-fA-F]{8}|[0-9a-fA-F]{6}|[0-9a-fA-F]{3,4})\b"
    r"|rgba?\([^)]*\)"
    r"|(?<![\w.-])\d+(?:\.\d+)?(?:px|rem)\b"
)


def find_hard_coded(content: str) -> list[str]:
    """Literal colours and lengths (``#ff6f61``, ``rgb(...)``, ``16px``, ``1.5rem``)."""
    return HARD_CODED_PATTERN.findall(content)


def find_tags_missing(tag: str, *required: str) -> Finder:
    """Finder for ``<tag ...>`` elements carrying none of *required*."""
    pattern = re.compile(rf"<{tag}\b[^>]*>", re.IGNORECASE)

    def finder(content: str) -> list[str]:
        return [
            m.group(0)
            for m in pattern.finditer(content)
            if not any(attr in m.group(0) for attr in required)
        ]

    return finder


def find_literal(*needles: str) -> Finder:
    """Finder matching any of *needles* verbatim."""

    def finder(content: str) -> list[str]:
        return [n for n in needles if n in content]

    return finder


def _find_wildcard_import(content: str) -> list[str]:
    return re.findall(r"import\s+\*\s+as\s+\w+", content)


def _find_unreleased_interval(content: str) -> list[str]:
    if "setInterval" in content and "clearInterval" not in content:
        return ["setInterval"]
    return []


def _find_untyped_any(content: str) -> list[str]:
    if "// @ts-" in content:
        return []
    return re.findall(r":\s*any\b", content)


# ===================================================================== #
#  Default rule sets                                                     #
# ===================================================================== #


def structural_rules(config: ValidationConfig) -> list[ContentRule]:
    limit = config.hard_coded_limit
    styled = (".tsx", ".ts", ".jsx", ".css")

    def dense(content: str) -> list[str]:
        found = find_hard_coded(content)
        return found if len(found) >= limit else []

    return [
        ContentRule(
            rule_id="hard-coded-value",
            category=Category.STRUCTURAL_COMPLIANCE,
            severity=Severity.WARNING,
            penalty=5,
            message="Hard-coded value found: {evidence}",
            fix="Replace with a design system token",
            finder=find_hard_coded,
            extensions=styled,
            per_match=True,
        ),
        ContentRule(
            rule_id="token-density",
            category=Category.STRUCTURAL_COMPLIANCE,
            severity=Severity.ERROR,
            penalty=15,
            message="Design system compliance below threshold in {name}: {count} literal values",
            fix="Move colours and spacing into design system tokens",
            finder=dense,
            priority=1,
            extensions=styled,
        ),
    ]


def brand_rules(config: ValidationConfig) -> list[ContentRule]:
    prefix = config.token_prefix
    terms = tuple(t.lower() for t in config.forbidden_terms)

    def missing_tokens(content: str) -> list[str]:
        return [] if prefix in content else [prefix]

    def forbidden(content: str) -> list[str]:
        lowered = content.lower()
        return [t for t in terms if t in lowered]

    return [
        ContentRule(
            rule_id="design-tokens-missing",
            category=Category.BRAND_CONSISTENCY,
            severity=Severity.WARNING,
            penalty=10,
            message="Design tokens ({evidence}) not found in {name}",
            fix="Apply the brand design tokens",
            finder=missing_tokens,
            extensions=(".tsx", ".ts", ".css"),
        ),
        ContentRule(
            rule_id="brand-voice",
            category=Category.BRAND_CONSISTENCY,
            severity=Severity.ERROR,
            penalty=15,
            message='Brand voice violation: "{evidence}" found in {name}',
            fix="Use approved brand terminology",
            finder=forbidden,
            priority=1,
            extensions=(".tsx", ".ts", ".jsx", ".css", ".md", ".json"),
            per_match=True,
        ),
    ]


def accessibility_rules(config: ValidationConfig) -> list[ContentRule]:
    return [
        ContentRule(
            rule_id="img-alt",
            category=Category.ACCESSIBILITY,
            severity=Severity.ERROR,
            penalty=15,
            message="Image missing alt text in {name}",
            fix="Add a descriptive alt attribute",
            finder=find_tags_missing("img", "alt="),
            priority=1,
            extensions=_MARKUP_EXTENSIONS,
        ),
        ContentRule(
            rule_id="button-aria",
            category=Category.ACCESSIBILITY,
            severity=Severity.WARNING,
            penalty=8,
            message="Button missing ARIA attributes in {name}",
            fix="Add aria-label or aria-describedby",
            finder=find_tags_missing("button", "aria-"),
            extensions=_MARKUP_EXTENSIONS,
        ),
        ContentRule(
            rule_id="input-label",
            category=Category.ACCESSIBILITY,
            severity=Severity.ERROR,
            penalty=12,
            message="Form input missing label in {name}",
            fix="Add a proper label or aria-label",
            finder=find_tags_missing("input", "aria-label", "id="),
            priority=1,
            extensions=_MARKUP_EXTENSIONS,
        ),
    ]


def performance_rules(config: ValidationConfig) -> list[ContentRule]:
    return [
        ContentRule(
            rule_id="wildcard-import",
            category=Category.PERFORMANCE,
            severity=Severity.WARNING,
            penalty=8,
            message="Wildcard import (import *) detected in {name}",
            fix="Import only the exports you need",
            finder=_find_wildcard_import,
        ),
        ContentRule(
            rule_id="unreleased-interval",
            category=Category.PERFORMANCE,
            severity=Severity.ERROR,
            penalty=25,
            message="Potential memory leak in {name}: setInterval without clearInterval",
            fix="Clear the interval in the effect cleanup function",
            finder=_find_unreleased_interval,
            priority=1,
        ),
    ]


def code_quality_rules(config: ValidationConfig) -> list[ContentRule]:
    return [
        ContentRule(
            rule_id="todo-comment",
            category=Category.CODE_QUALITY,
            severity=Severity.INFO,
            penalty=0,
            message="TODO/FIXME comments in {name}",
            fix="Address TODO/FIXME items",
            finder=find_literal("TODO", "FIXME"),
            priority=3,
        ),
        ContentRule(
            rule_id="any-type",
            category=Category.CODE_QUALITY,
            severity=Severity.WARNING,
            penalty=5,
            message='"any" type usage in {name}',
            fix="Replace with specific types",
            finder=_find_untyped_any,
        ),
    ]


_RULE_FACTORIES: dict[Category, Callable[[ValidationConfig], list[ContentRule]]] = {
    Category.STRUCTURAL_COMPLIANCE: structural_rules,
    Category.BRAND_CONSISTENCY: brand_rules,
    Category.ACCESSIBILITY: accessibility_rules,
    Category.PERFORMANCE: performance_rules,
    Category.CODE_QUALITY: code_quality_rules,
}


def default_rules(category: Category, config: ValidationConfig) -> list[ContentRule]:
    """Return the built-in rule set for *category*."""
    return _RULE_FACTORIES[category](config)
