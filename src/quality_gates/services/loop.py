"""Iterative agentic loop: generate, validate, correct, repeat.

:class:`IterativeAgenticLoop` drives the compiled correction graph from
:mod:`quality_gates.graph` under a wall-clock budget and turns the recorded
iteration history into a :class:`~quality_gates.domain.aggregates.LoopResult`.

The loop terminates on the first of:

* an iteration meeting every success threshold (``succeeded``),
* ``max_iterations`` reached (``exhausted``),
* the loop ``timeout`` firing (``timeout``).

The two non-success outcomes carry an escalation reason for human review.
The result is persisted in every case.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from quality_gates.domain.aggregates import IterationResult, LoopResult
from quality_gates.domain.enums import Severity, StopReason
from quality_gates.domain.values import CorrectionAction
from quality_gates.infrastructure.audit import BaseVisualAuditor
from quality_gates.infrastructure.commands import CommandRunner
from quality_gates.infrastructure.config import LoopConfiguration, ValidationConfig
from quality_gates.infrastructure.report_store import ReportStore, new_id
from quality_gates.services.corrections import CorrectionApplier, CorrectionPlanner
from quality_gates.services.evaluation import failing_categories
from quality_gates.services.generation import BaseGenerator, TemplateGenerator
from quality_gates.services.pipeline import ValidationPipeline

logger = logging.getLogger(__name__)

EXHAUSTED_REASON = "Maximum iterations reached without meeting success criteria"
MAX_ADDRESSED_ISSUES = 3
MAX_SUGGESTIONS = 5


def collect_deferred(iterations: Sequence[IterationResult]) -> list[CorrectionAction]:
    """Corrections never applied automatically, most recent iteration first.

    Identical suggestions (same file and description) are listed once.
    """
    seen: set[tuple[str, str]] = set()
    deferred: list[CorrectionAction] = []
    for iteration in reversed(iterations):
        for action in iteration.deferred_corrections:
            key = (action.file_path, action.description)
            if key not in seen:
                seen.add(key)
                deferred.append(action)
    return deferred


class IterativeAgenticLoop:
    """Run the correction loop for one change request at a time.

    Parameters
    ----------
    config:
        Loop policy.  Defaults to :class:`LoopConfiguration`.
    validation_config:
        Policy for the pipeline built by the loop.  Its thresholds are
        replaced by ``config.success_thresholds``.  Ignored when *pipeline*
        is given.
    pipeline:
        Use this pipeline instead of building one.
    generator:
        Implementation generator.  Defaults to :class:`TemplateGenerator`.
    planner, applier:
        Correction collaborators.
    auditor, command_runner:
        Passed to the pipeline built by the loop.
    store:
        Where loop results are persisted.  Defaults to a
        :class:`ReportStore` on ``config.results_dir``.
    persist:
        Set to ``False`` to skip persistence of loop results.
    """

    def __init__(
        self,
        config: LoopConfiguration | None = None,
        validation_config: ValidationConfig | None = None,
        pipeline: ValidationPipeline | None = None,
        generator: BaseGenerator | None = None,
        planner: CorrectionPlanner | None = None,
        applier: CorrectionApplier | None = None,
        auditor: BaseVisualAuditor | None = None,
        command_runner: CommandRunner | None = None,
        store: ReportStore | None = None,
        persist: bool = True,
    ) -> None:
        self._config = config or LoopConfiguration()
        self._config.validate()
        if pipeline is None:
            pipeline = ValidationPipeline(
                replace(
                    validation_config or ValidationConfig(),
                    thresholds=self._config.success_thresholds,
                ),
                auditor=auditor,
                command_runner=command_runner,
            )
        self._pipeline = pipeline
        self._generator = generator or TemplateGenerator()
        self._planner = planner or CorrectionPlanner()
        self._applier = applier or CorrectionApplier()
        self._store = store if store is not None else ReportStore(self._config.results_dir)
        self._persist = persist

    @property
    def config(self) -> LoopConfiguration:
        return self._config

    @property
    def pipeline(self) -> ValidationPipeline:
        return self._pipeline

    async def execute_loop(
        self,
        request: str,
        changed_files: Sequence[str] | None = None,
        initial_implementation: str | None = None,
    ) -> LoopResult:
        """Iterate until success, exhaustion or timeout.

        Parameters
        ----------
        request:
            Description of the change being implemented.
        changed_files:
            Initial working file set; empty means discovery by the pipeline.
        initial_implementation:
            Artifact to validate in iteration 1 instead of generating one.

        Returns
        -------
        LoopResult
            Always a complete result; failures are expressed through
            ``success``, ``stop_reason`` and ``escalation_reason``.
        """
        # deferred import: the graph package depends on this package's modules
        from quality_gates.graph.graph import build_correction_graph, recursion_limit

        loop_id = new_id("loop")
        started = time.monotonic()
        cfg = self._config
        app = build_correction_graph(
            generator=self._generator,
            pipeline=self._pipeline,
            thresholds=cfg.success_thresholds,
            planner=self._planner,
            applier=self._applier,
            auto_fix=cfg.correction_strategies.auto_fix,
            initial_implementation=initial_implementation,
        )
        initial: dict[str, Any] = {
            "request": request,
            "iteration": 0,
            "max_iterations": cfg.max_iterations,
            "stop_reason": "",
            "files": list(changed_files or []),
            "iterations": [],
            "metadata": {},
        }
        latest: dict[str, Any] = dict(initial)

        async def drive() -> None:
            async for snapshot in app.astream(
                initial,
                stream_mode="values",
                config={"recursion_limit": recursion_limit(cfg.max_iterations)},
            ):
                latest.clear()
                latest.update(snapshot)

        logger.info("IterativeAgenticLoop: %s started for %r", loop_id, request)
        timed_out = False
        try:
            await asyncio.wait_for(drive(), timeout=cfg.timeout)
        except asyncio.TimeoutError:
            timed_out = True
            logger.warning(
                "IterativeAgenticLoop: %s timed out after %.1fs", loop_id, cfg.timeout
            )

        result = self._finalize(
            loop_id, request, latest, time.monotonic() - started, timed_out
        )
        logger.info(
            "IterativeAgenticLoop: %s finished: %s after %d iteration(s), score %d",
            loop_id,
            result.stop_reason.value,
            result.total_iterations,
            result.final_score,
        )
        if self._persist:
            try:
                self._store.save_loop_result(result)
            except OSError:
                logger.exception("IterativeAgenticLoop: could not persist %s", loop_id)
        return result

    # -- result assembly -----------------------------------------------------

    def _finalize(
        self,
        loop_id: str,
        request: str,
        state: dict[str, Any],
        duration: float,
        timed_out: bool,
    ) -> LoopResult:
        iterations: tuple[IterationResult, ...] = tuple(state.get("iterations", []))
        last = iterations[-1] if iterations else None
        success = last is not None and last.success
        deferred = collect_deferred(iterations)

        if success:
            stop_reason = StopReason.SUCCEEDED
            escalation = None
        elif timed_out:
            stop_reason = StopReason.TIMEOUT
            escalation = (
                f"Loop timeout exceeded ({self._config.timeout:g}s) "
                f"after {len(iterations)} iteration(s)"
            )
        else:
            stop_reason = StopReason.EXHAUSTED
            escalation = EXHAUSTED_REASON
            if self._config.correction_strategies.escalate_complex and deferred:
                escalation += f"; {len(deferred)} correction(s) need manual review"

        return LoopResult(
            loop_id=loop_id,
            request=request,
            success=success,
            final_score=last.score if last is not None else 0,
            total_iterations=len(iterations),
            total_duration=round(duration, 3),
            iterations=iterations,
            final_recommendations=tuple(self._recommendations(success, last, deferred)),
            escalation_reason=escalation,
            stop_reason=stop_reason,
            metadata={
                "max_iterations": self._config.max_iterations,
                "implementation": state.get("implementation", ""),
                "files": list(state.get("files", [])),
            },
        )

    def _recommendations(
        self,
        success: bool,
        last: IterationResult | None,
        deferred: list[CorrectionAction],
    ) -> list[str]:
        if success:
            return [
                "Implementation meets all quality standards",
                "Consider running full test suite before deployment",
            ]

        recommendations = ["Manual review and corrections needed"]
        if last is not None:
            below = failing_categories(last.validation_report, self._config.success_thresholds)
            if below:
                recommendations.append(
                    "Below threshold: " + ", ".join(c.label for c in below)
                )
            errors = last.validation_report.issues_with(Severity.ERROR)
            recommendations.extend(
                f"Address: {issue.message}" for issue in errors[:MAX_ADDRESSED_ISSUES]
            )
        if self._config.correction_strategies.generate_suggestions:
            recommendations.extend(
                f"Suggested: {action.description} ({action.file_path})"
                for action in deferred[:MAX_SUGGESTIONS]
            )
        return recommendations
