"""Public testing utilities for quality-gates.

Provides a mock chat model and deterministic collaborators for writing
self-contained examples and tests without a browser, linters or API keys.
"""

from quality_gates.testing.fakes import StaticVisualAuditor, StubCommandRunner
from quality_gates.testing.mock_llm import MockChatModel

__all__ = ["MockChatModel", "StaticVisualAuditor", "StubCommandRunner"]
