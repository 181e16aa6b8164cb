"""quality-gates.

Iterative quality-gate pipeline for UI changesets: five category validators,
a weighted validation report, and a LangGraph correction loop that
regenerates and patches a changeset until it clears the thresholds or
escalates to a human.
"""

__version__ = "1.0.0"

from quality_gates.graph import CorrectionLoopState, build_correction_graph
from quality_gates.services import IterativeAgenticLoop, ValidationPipeline

__all__ = [
    "CorrectionLoopState",
    "IterativeAgenticLoop",
    "ValidationPipeline",
    "build_correction_graph",
]
