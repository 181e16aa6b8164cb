"""LangGraph state definition for the correction loop.

Defines ``CorrectionLoopState``, a ``TypedDict`` that flows through the
LangGraph ``StateGraph``.  The ``iterations`` channel uses
``Annotated[list, operator.add]`` so the record node appends one
:class:`IterationResult` per cycle without overwriting earlier ones.

Note: We intentionally do NOT use ``from __future__ import annotations`` because
LangGraph needs to resolve type hints at runtime via ``get_type_hints()``.
"""

import operator
from typing import Annotated, Any, TypedDict

from quality_gates.domain.aggregates import ValidationReport
from quality_gates.domain.values import CorrectionAction


class CorrectionLoopState(TypedDict, total=False):
    """State flowing through the correction-loop graph.

    Fields are grouped into:

    * **Loop control** -- iteration counter, limit, termination info.
    * **Request** -- what is being implemented and the working file set.
    * **Current iteration** -- written by generate/validate/correct, read by record.
    * **Accumulation channel** -- the append-only iteration history.
    """

    # -- Loop control --------------------------------------------------------
    iteration: int
    max_iterations: int
    stop_reason: str
    iteration_started: float

    # -- Request -------------------------------------------------------------
    request: str
    files: list[str]
    implementation: str

    # -- Current iteration ---------------------------------------------------
    report: ValidationReport | None
    success: bool
    corrections: list[CorrectionAction]
    applied_corrections: list[CorrectionAction]

    # -- Accumulation channel ------------------------------------------------
    iterations: Annotated[list, operator.add]

    # -- Extensibility -------------------------------------------------------
    metadata: dict[str, Any]
