"""Tests for content rules and finders."""

from __future__ import annotations

from quality_gates.domain.enums import Category, Severity
from quality_gates.infrastructure.config import ValidationConfig
from quality_gates.services.rules import (
    default_rules,
    find_hard_coded,
    find_literal,
    find_tags_missing,
)


def _rule(category: Category, rule_id: str, config: ValidationConfig | None = None):
    rules = default_rules(category, config or ValidationConfig())
    return next(r for r in rules if r.rule_id == rule_id)


class TestFinders:

    def test_hard_coded_values(self) -> None:
        content = 'color: "#FF6F61"; margin: 16px; gap: 1.5rem; bg: rgba(0, 0, 0, 0.5);'
        assert find_hard_coded(content) == ["#FF6F61", "16px", "1.5rem", "rgba(0, 0, 0, 0.5)"]

    def test_token_references_are_not_hard_coded(self) -> None:
        assert find_hard_coded('color: "var(--lss-sunset-coral)"') == []

    def test_tags_missing_attribute(self) -> None:
        finder = find_tags_missing("img", "alt=")
        content = '<img src="a.png" alt="A"><IMG src="b.png">'
        assert finder(content) == ['<IMG src="b.png">']

    def test_literal(self) -> None:
        assert find_literal("TODO", "FIXME")("// FIXME later") == ["FIXME"]


class TestContentRule:

    def test_per_match_issues_are_distinct(self) -> None:
        rule = _rule(Category.STRUCTURAL_COMPLIANCE, "hard-coded-value")
        issues = rule.check("src/Hero.tsx", "a: 16px; b: 16px; c: #fff;")
        assert [i.evidence for i in issues] == ["16px", "#fff"]
        assert issues[0].message == "Hard-coded value found: 16px"
        assert issues[0].location == "src/Hero.tsx"
        assert issues[0].severity == Severity.WARNING

    def test_density_rule_uses_limit(self) -> None:
        config = ValidationConfig(hard_coded_limit=3)
        rule = _rule(Category.STRUCTURAL_COMPLIANCE, "token-density", config)
        assert rule.check("a.css", "1px 2px") == []
        issues = rule.check("a.css", "1px 2px 3px")
        assert len(issues) == 1
        assert issues[0].message == (
            "Design system compliance below threshold in a.css: 3 literal values"
        )

    def test_applies_to_extension(self) -> None:
        rule = _rule(Category.ACCESSIBILITY, "img-alt")
        assert rule.applies_to("src/Hero.tsx")
        assert not rule.applies_to("src/theme.css")

    def test_issue_ids_stable(self) -> None:
        rule = _rule(Category.ACCESSIBILITY, "img-alt")
        first = rule.check("Hero.tsx", '<img src="a.png">')
        second = rule.check("Hero.tsx", '<img src="a.png">')
        assert first == second


class TestDefaultRules:

    def test_brand_voice_case_insensitive(self) -> None:
        rule = _rule(Category.BRAND_CONSISTENCY, "brand-voice")
        issues = rule.check("Copy.tsx", "A Revolutionary, MAGICAL launch")
        assert [i.evidence for i in issues] == ["revolutionary", "magical"]

    def test_missing_tokens(self) -> None:
        rule = _rule(Category.BRAND_CONSISTENCY, "design-tokens-missing")
        assert rule.check("a.css", "color: var(--lss-ion-blue);") == []
        [issue] = rule.check("a.css", "color: blue;")
        assert issue.message == "Design tokens (--lss-) not found in a.css"

    def test_input_label_accepts_id(self) -> None:
        rule = _rule(Category.ACCESSIBILITY, "input-label")
        assert rule.check("F.tsx", '<input id="email" />') == []
        assert rule.check("F.tsx", '<input aria-label="Email" />') == []
        assert len(rule.check("F.tsx", '<input type="text" />')) == 1

    def test_interval_without_clear(self) -> None:
        rule = _rule(Category.PERFORMANCE, "unreleased-interval")
        assert len(rule.check("T.ts", "setInterval(tick, 1000)")) == 1
        assert rule.check("T.ts", "const id = setInterval(tick); clearInterval(id)") == []

    def test_wildcard_import(self) -> None:
        rule = _rule(Category.PERFORMANCE, "wildcard-import")
        assert len(rule.check("a.ts", "import * as icons from 'icons'")) == 1

    def test_any_type_suppressed_by_ts_directive(self) -> None:
        rule = _rule(Category.CODE_QUALITY, "any-type")
        assert len(rule.check("a.ts", "let x: any = 1")) == 1
        assert rule.check("a.ts", "// @ts-expect-error\nlet x: any = 1") == []

    def test_todo_is_info_without_penalty(self) -> None:
        rule = _rule(Category.CODE_QUALITY, "todo-comment")
        assert rule.severity == Severity.INFO
        assert rule.penalty == 0
