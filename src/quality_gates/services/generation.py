"""Implementation generators for the correction loop.

The loop treats the implementation artifact as opaque text.  A generator is
called once per iteration with the original request, the iteration number
and the previous iterations, from which it extracts "learnings" that bias the
next output.

Classes
-------
BaseGenerator
    Abstract base class for generation strategies.
TemplateGenerator
    Deterministic generator; the default.
LLMGenerator
    LangChain chat-model generator.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from quality_gates.domain.aggregates import IterationResult
from quality_gates.domain.enums import Severity

logger = logging.getLogger(__name__)

MAX_LEARNINGS = 5


def extract_learnings(previous_iterations: Sequence[IterationResult]) -> str:
    """Summarise the last iteration as ``Avoid: ...`` / ``Apply: ...`` lines.

    Returns an empty string when there is nothing to learn from.
    """
    if not previous_iterations:
        return ""
    last = previous_iterations[-1]
    avoid = [i.message for i in last.validation_report.issues_with(Severity.ERROR)]
    apply = [c.description for c in last.corrections]

    lines: list[str] = []
    if avoid:
        lines.append("Avoid: " + "; ".join(dict.fromkeys(avoid[:MAX_LEARNINGS])))
    if apply:
        lines.append("Apply: " + "; ".join(dict.fromkeys(apply[:MAX_LEARNINGS])))
    return "\n".join(lines)


# ===================================================================== #
#  Base Generator (ABC)                                                  #
# ===================================================================== #


class BaseGenerator(ABC):
    """Abstract base class for implementation generators."""

    @abstractmethod
    async def generate(
        self,
        request: str,
        iteration: int,
        previous_iterations: Sequence[IterationResult],
    ) -> str:
        """Produce the implementation artifact for *iteration*.

        Parameters
        ----------
        request:
            The original change request.
        iteration:
            1-based iteration number.
        previous_iterations:
            Results of the iterations already recorded, oldest first.
        """


# ===================================================================== #
#  Template Generator                                                    #
# ===================================================================== #


class TemplateGenerator(BaseGenerator):
    """Render a fixed text template; identical inputs give identical output."""

    TEMPLATE = "Implementation for: {request}\nIteration: {iteration}\n{learnings}"

    async def generate(self, request, iteration, previous_iterations):
        learnings = extract_learnings(previous_iterations)
        return self.TEMPLATE.format(
            request=request, iteration=iteration, learnings=learnings
        ).rstrip() + "\n"


# ===================================================================== #
#  LLM Generator                                                         #
# ===================================================================== #

_GENERATION_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You implement UI changes for a design-system based web application. "
            "Use design tokens instead of literal colours and spacing, keep markup "
            "accessible (alt text, labels, ARIA attributes), and avoid patterns "
            "that hurt performance.",
        ),
        (
            "human",
            "Request:\n{request}\n\n"
            "Iteration: {iteration}\n\n"
            "Learnings from the previous iteration:\n{learnings}\n\n"
            "Return the updated implementation.",
        ),
    ]
)


class LLMGenerator(BaseGenerator):
    """Generate the implementation with a LangChain chat model.

    Parameters
    ----------
    model:
        Any ``BaseChatModel``.
    prompt:
        Optional custom ``ChatPromptTemplate``; it receives ``request``,
        ``iteration`` and ``learnings``.
    fallback:
        Used when the model call fails.  Defaults to
        :class:`TemplateGenerator`.
    """

    def __init__(
        self,
        model: BaseChatModel,
        prompt: ChatPromptTemplate | None = None,
        fallback: BaseGenerator | None = None,
    ) -> None:
        self.model = model
        self._prompt = prompt or _GENERATION_PROMPT
        self._fallback = fallback or TemplateGenerator()
        self._chain: Any = self._prompt | self.model | StrOutputParser()

    async def generate(self, request, iteration, previous_iterations):
        learnings = extract_learnings(previous_iterations) or "None (first iteration)"
        try:
            return await self._chain.ainvoke(
                {"request": request, "iteration": iteration, "learnings": learnings}
            )
        except Exception as exc:
            logger.warning("LLMGenerator: generation failed, using fallback: %s", exc)
            return await self._fallback.generate(request, iteration, previous_iterations)
