"""Correction planning and application.

:class:`CorrectionPlanner` maps validation issues to confidence-scored
:class:`~quality_gates.domain.values.CorrectionAction` objects through a list
of :class:`CorrectionRule` objects.  :class:`CorrectionApplier` writes the
automated, high-confidence ones to disk.  The applier is the only component
that mutates the workspace.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from quality_gates.domain.aggregates import ValidationReport
from quality_gates.domain.enums import Category, CorrectionType
from quality_gates.domain.exceptions import CorrectionError
from quality_gates.domain.values import CorrectionAction, ValidationIssue

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Token suggestions                                                     #
# ===================================================================== #

_COLOR_TOKENS = {
    "#FF6F61": "var(--lss-sunset-coral)",
    "#55C2FF": "var(--lss-ion-blue)",
    "#FAF9F6": "var(--lss-soft-white)",
    "#0B0F1A": "var(--lss-rich-black)",
}
_DEFAULT_COLOR_TOKEN = "var(--md-sys-color-primary)"

_SPACING_TOKENS = (
    (8, "var(--md-sys-spacing-small)"),
    (16, "var(--md-sys-spacing-medium)"),
    (24, "var(--md-sys-spacing-large)"),
)
_DEFAULT_SPACING_TOKEN = "var(--md-sys-spacing-xl)"


def suggest_token(value: str) -> str:
    """Suggest a design token for a hard-coded *value*.

    Known brand colours map to their tokens, other hex colours to the
    primary colour token, pixel lengths to the nearest spacing step.
    Anything else is returned unchanged.
    """
    if value.startswith("#"):
        return _COLOR_TOKENS.get(value.upper(), _DEFAULT_COLOR_TOKEN)
    match = re.fullmatch(r"(\d+(?:\.\d+)?)px", value)
    if match:
        pixels = float(match.group(1))
        for limit, token in _SPACING_TOKENS:
            if pixels <= limit:
                return token
        return _DEFAULT_SPACING_TOKEN
    return value


def add_alt_attribute(tag: str, text: str = "Descriptive text") -> str:
    """Insert an ``alt`` attribute right after the tag name of ``<img ...>``."""
    return re.sub(r"^<img\b", f'<img alt="{text}"', tag, count=1, flags=re.IGNORECASE)


def substitute(content: str, action: CorrectionAction) -> str:
    """Replace every occurrence of ``action.before`` in *content*.

    Token replacements only match whole literals, with the same boundaries
    the hard-coded value finder uses, so ``8px`` leaves ``18px`` alone and
    ``#fff`` leaves ``#ffffff`` alone.
    """
    if action.type != CorrectionType.TOKEN_REPLACEMENT:
        return content.replace(action.before, action.after)
    pattern = rf"(?<![\w.-]){re.escape(action.before)}(?![\w-])"
    return re.sub(pattern, lambda _: action.after, content)


# ===================================================================== #
#  Rules                                                                 #
# ===================================================================== #

Fragments = Callable[[ValidationIssue], tuple[str, str]]


@dataclass(frozen=True)
class CorrectionRule:
    """Maps matching issues to one kind of correction.

    Attributes
    ----------
    name:
        Identifier used to override :attr:`confidence`.
    category:
        Only issues of this category are considered.
    pattern:
        Regular expression searched case-insensitively in the issue message.
    type:
        Correction type produced.
    description:
        ``str.format`` template receiving ``message``, ``before``, ``after``.
    confidence, automated:
        Copied onto every produced action.
    fragments:
        Derives ``(before, after)`` from the issue.  ``None`` produces an
        action without a concrete substitution.
    """

    name: str
    category: Category
    pattern: str
    type: CorrectionType
    description: str
    confidence: float
    automated: bool
    fragments: Fragments | None = None

    def matches(self, issue: ValidationIssue) -> bool:
        return issue.category == self.category and bool(
            re.search(self.pattern, issue.message, re.IGNORECASE)
        )

    def build(self, issue: ValidationIssue, file_path: str) -> CorrectionAction:
        before, after = self.fragments(issue) if self.fragments else ("", "")
        return CorrectionAction(
            type=self.type,
            file_path=file_path,
            description=self.description.format(
                message=issue.message, before=before, after=after
            ),
            before=before,
            after=after,
            confidence=self.confidence,
            automated=self.automated,
            issue_id=issue.issue_id,
        )


DEFAULT_CONFIDENCE: Mapping[str, float] = {
    "hard-coded-value": 0.8,
    "missing-alt-text": 0.9,
    "missing-design-tokens": 0.7,
    "wildcard-import": 0.6,
    "any-type": 0.5,
}


def default_correction_rules(
    confidence: Mapping[str, float] | None = None,
) -> list[CorrectionRule]:
    """Built-in correction rules.

    Parameters
    ----------
    confidence:
        Per-rule overrides of :data:`DEFAULT_CONFIDENCE`, keyed by rule name.
    """
    conf = {**DEFAULT_CONFIDENCE, **(confidence or {})}
    return [
        CorrectionRule(
            name="hard-coded-value",
            category=Category.STRUCTURAL_COMPLIANCE,
            pattern=r"hard-coded",
            type=CorrectionType.TOKEN_REPLACEMENT,
            description="Replace hard-coded value {before} with {after}",
            confidence=conf["hard-coded-value"],
            automated=True,
            fragments=lambda i: (i.evidence, suggest_token(i.evidence)),
        ),
        CorrectionRule(
            name="missing-alt-text",
            category=Category.ACCESSIBILITY,
            pattern=r"alt text",
            type=CorrectionType.ACCESSIBILITY_ADD,
            description="Add alt text to image",
            confidence=conf["missing-alt-text"],
            automated=True,
            fragments=lambda i: (i.evidence, add_alt_attribute(i.evidence)),
        ),
        CorrectionRule(
            name="missing-design-tokens",
            category=Category.BRAND_CONSISTENCY,
            pattern=r"design tokens",
            type=CorrectionType.TOKEN_REPLACEMENT,
            description="Apply brand design tokens",
            confidence=conf["missing-design-tokens"],
            automated=True,
        ),
        CorrectionRule(
            name="wildcard-import",
            category=Category.PERFORMANCE,
            pattern=r"import \*",
            type=CorrectionType.FILE_EDIT,
            description="Replace wildcard import with specific imports",
            confidence=conf["wildcard-import"],
            automated=False,
            fragments=lambda i: ("import *", "import { specific }"),
        ),
        CorrectionRule(
            name="any-type",
            category=Category.CODE_QUALITY,
            pattern=r'"any" type',
            type=CorrectionType.STRUCTURE_FIX,
            description="Replace 'any' types with specific types",
            confidence=conf["any-type"],
            automated=False,
        ),
    ]


# ===================================================================== #
#  Planner                                                               #
# ===================================================================== #


class CorrectionPlanner:
    """Turn a report's issues into ordered correction actions.

    Parameters
    ----------
    rules:
        Correction rules, tried in order; the first match wins.
    """

    def __init__(self, rules: Sequence[CorrectionRule] | None = None) -> None:
        self._rules = list(rules) if rules is not None else default_correction_rules()

    def plan_issue(
        self, issue: ValidationIssue, changed_files: Sequence[str]
    ) -> CorrectionAction | None:
        """Return the correction for *issue*, or ``None`` if no rule applies."""
        target = issue.location or (changed_files[0] if changed_files else "")
        if not target:
            return None
        for rule in self._rules:
            if rule.matches(issue):
                return rule.build(issue, target)
        return None

    def generate_corrections(
        self,
        report: ValidationReport,
        changed_files: Sequence[str] = (),
    ) -> list[CorrectionAction]:
        """Plan corrections for every issue in *report*.

        Ordered by confidence (highest first), automated before manual at
        equal confidence, and otherwise in issue order.
        """
        actions = [
            action
            for issue in report.all_issues()
            if (action := self.plan_issue(issue, changed_files)) is not None
        ]
        actions.sort(key=lambda a: (-a.confidence, not a.automated))
        logger.debug(
            "CorrectionPlanner: %d actions for %d issues",
            len(actions),
            len(report.all_issues()),
        )
        return actions


# ===================================================================== #
#  Applier                                                               #
# ===================================================================== #


class CorrectionApplier:
    """Apply automated corrections by text substitution, one at a time.

    Actions that are manual or below :attr:`ACCEPTANCE_FLOOR` are never
    applied; they are collected in :attr:`deferred` for human review.
    """

    ACCEPTANCE_FLOOR = 0.7

    def __init__(self) -> None:
        self.deferred: list[CorrectionAction] = []
        self.failed: list[CorrectionAction] = []

    def accepts(self, action: CorrectionAction) -> bool:
        return action.automated and action.confidence >= self.ACCEPTANCE_FLOOR

    def apply_corrections(self, actions: Sequence[CorrectionAction]) -> list[CorrectionAction]:
        """Apply *actions* in order and return the ones that changed a file."""
        self.deferred = []
        self.failed = []
        applied: list[CorrectionAction] = []

        for action in actions:
            if not self.accepts(action):
                logger.info(
                    "CorrectionApplier: deferring %s on %s (confidence=%.2f automated=%s)",
                    action.type.value,
                    action.file_path,
                    action.confidence,
                    action.automated,
                )
                self.deferred.append(action)
                continue
            try:
                changed = self._apply(action)
            except CorrectionError as exc:
                logger.warning("CorrectionApplier: %s (%s)", exc, exc.file_path)
                self.failed.append(action)
                continue
            except Exception:
                logger.exception(
                    "CorrectionApplier: %s on %s failed", action.type.value, action.file_path
                )
                self.failed.append(action)
                continue
            if changed:
                applied.append(action)

        logger.info(
            "CorrectionApplier: applied %d of %d actions (%d deferred, %d failed)",
            len(applied),
            len(actions),
            len(self.deferred),
            len(self.failed),
        )
        return applied

    def _apply(self, action: CorrectionAction) -> bool:
        if not action.has_substitution:
            logger.debug("CorrectionApplier: %r has no substitution", action.description)
            return False

        path = Path(action.file_path)
        if not path.is_file():
            raise CorrectionError("target file not found", file_path=action.file_path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeError) as exc:
            raise CorrectionError(f"cannot read: {exc}", file_path=action.file_path) from exc

        updated = substitute(content, action)
        if updated == content:
            logger.debug("CorrectionApplier: %r not found in %s", action.before, path)
            return False
        try:
            path.write_text(updated, encoding="utf-8")
        except (OSError, UnicodeError) as exc:
            raise CorrectionError(f"cannot write: {exc}", file_path=action.file_path) from exc
        logger.debug("CorrectionApplier: %s: %r -> %r", path, action.before, action.after)
        return True
