"""Adapters for the lint, type-check and bundle-size collaborators.

Each external tool is invoked through a
:class:`~quality_gates.infrastructure.commands.CommandRunner` and its output
turned into a small structured result.  ESLint output is read from its JSON
reporter, with a fallback for the default "stylish" format; ``tsc``
diagnostics are parsed line by line.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from quality_gates.domain.exceptions import CommandError
from quality_gates.infrastructure.commands import CommandRunner
from quality_gates.infrastructure.config import ValidationConfig

logger = logging.getLogger(__name__)


# ===================================================================== #
#  ESLint                                                                #
# ===================================================================== #


class _EslintMessage(BaseModel):
    ruleId: str | None = None
    severity: int = 1
    message: str = ""
    line: int | None = None
    column: int | None = None


class _EslintFileResult(BaseModel):
    filePath: str
    messages: list[_EslintMessage] = Field(default_factory=list)
    errorCount: int = 0
    warningCount: int = 0


_ESLINT_JSON = TypeAdapter(list[_EslintFileResult])
_STYLISH_LINE = re.compile(r"^\s*\d+:\d+\s+(error|warning)\s+", re.MULTILINE)


@dataclass(frozen=True)
class LintSummary:
    """Error and warning counts from one lint run."""

    errors: int = 0
    warnings: int = 0
    files: tuple[str, ...] = ()


def parse_eslint_output(output: str) -> LintSummary:
    """Count ESLint errors and warnings.

    The JSON reporter is preferred.  If *output* is not a JSON report, each
    ``line:col  error|warning`` row of the stylish format is counted.
    """
    text = output.strip()
    if text.startswith("["):
        try:
            results = _ESLINT_JSON.validate_json(text)
        except ValidationError:
            logger.debug("parse_eslint_output: not a JSON report, using line format")
        else:
            return LintSummary(
                errors=sum(r.errorCount for r in results),
                warnings=sum(r.warningCount for r in results),
                files=tuple(r.filePath for r in results if r.errorCount or r.warningCount),
            )

    kinds = _STYLISH_LINE.findall(output)
    return LintSummary(errors=kinds.count("error"), warnings=kinds.count("warning"))


# ===================================================================== #
#  TypeScript                                                            #
# ===================================================================== #

_TSC_LINE = re.compile(r"^(.+)\((\d+),(\d+)\): error (TS\d+): (.+)$", re.MULTILINE)


@dataclass(frozen=True)
class TypeDiagnostic:
    """One ``tsc`` compiler error."""

    file: str
    line: int
    column: int
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column} {self.code} {self.message}"


def parse_tsc_output(output: str) -> list[TypeDiagnostic]:
    """Parse ``tsc --pretty false`` output into diagnostics."""
    return [
        TypeDiagnostic(
            file=m.group(1).strip(),
            line=int(m.group(2)),
            column=int(m.group(3)),
            code=m.group(4),
            message=m.group(5).strip(),
        )
        for m in _TSC_LINE.finditer(output)
    ]


# ===================================================================== #
#  Analyzer                                                              #
# ===================================================================== #


@dataclass
class TypeCheckResult:
    diagnostics: list[TypeDiagnostic] = field(default_factory=list)
    returncode: int = 0


class StaticAnalyzer:
    """Runs the configured lint, type-check and bundle-size commands.

    Parameters
    ----------
    config:
        Supplies the command lines and the dist directory.
    runner:
        Process runner; defaults to a :class:`CommandRunner` using
        ``config.command_timeout``.
    """

    def __init__(self, config: ValidationConfig, runner: CommandRunner | None = None) -> None:
        self._config = config
        self._runner = runner or CommandRunner(timeout=config.command_timeout)

    async def lint(self) -> LintSummary:
        """Run the lint command.

        Raises
        ------
        CommandError
            If the command cannot be run.
        """
        result = await self._runner.run(self._config.lint_command)
        summary = parse_eslint_output(result.stdout or result.output)
        logger.debug(
            "StaticAnalyzer.lint: %d errors, %d warnings", summary.errors, summary.warnings
        )
        return summary

    async def typecheck(self) -> TypeCheckResult:
        """Run the type-check command and parse its diagnostics."""
        result = await self._runner.run(self._config.typecheck_command)
        diagnostics = parse_tsc_output(result.output)
        if result.returncode != 0 and not diagnostics:
            logger.warning(
                "StaticAnalyzer.typecheck: exit %d with no parseable diagnostics",
                result.returncode,
            )
        return TypeCheckResult(diagnostics=diagnostics, returncode=result.returncode)

    async def bundle_size_mb(self) -> float:
        """Size of the built artifacts in megabytes.

        The bundle command must print a size in kilobytes as its first
        token (``du -sk`` style).

        Raises
        ------
        CommandError
            If the command fails or prints something unparseable.
        """
        command = self._config.bundle_command.format(dist=self._config.dist_dir)
        result = await self._runner.run(command)
        if result.returncode != 0:
            raise CommandError(
                f"exited with status {result.returncode}: {result.stderr.strip()}",
                command=command,
            )
        first = result.stdout.split()[0] if result.stdout.split() else ""
        try:
            kilobytes = float(first)
        except ValueError as exc:
            raise CommandError(f"unexpected output {result.stdout!r}", command=command) from exc
        return kilobytes / 1024.0
