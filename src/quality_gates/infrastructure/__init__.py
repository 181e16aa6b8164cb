"""Infrastructure layer: configuration, persistence and external collaborators.

Re-exports the public API surface for convenience::

    from quality_gates.infrastructure import (
        ValidationConfig, LoopConfiguration, ReportStore, CommandRunner,
    )
"""

from quality_gates.infrastructure.audit import (
    AuditDocument,
    AuditSession,
    BaseVisualAuditor,
    JsonFileAuditor,
)
from quality_gates.infrastructure.commands import CommandResult, CommandRunner
from quality_gates.infrastructure.config import (
    CategoryThresholds,
    CorrectionStrategies,
    LoopConfiguration,
    ValidationConfig,
    load_config,
)
from quality_gates.infrastructure.report_store import ReportStore, new_id
from quality_gates.infrastructure.serialization import (
    deserialize,
    from_json,
    from_yaml,
    serialize,
    to_json,
    to_yaml,
)

__all__ = [
    # audit
    "AuditDocument",
    "AuditSession",
    "BaseVisualAuditor",
    "JsonFileAuditor",
    # commands
    "CommandResult",
    "CommandRunner",
    # config
    "CategoryThresholds",
    "CorrectionStrategies",
    "LoopConfiguration",
    "ValidationConfig",
    "load_config",
    # persistence
    "ReportStore",
    "new_id",
    # serialization
    "deserialize",
    "from_json",
    "from_yaml",
    "serialize",
    "to_json",
    "to_yaml",
]
