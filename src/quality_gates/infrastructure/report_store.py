"""Durable storage for validation reports and loop results.

Every :class:`ValidationReport` and :class:`LoopResult` is written as one
JSON document named ``<id>.json`` inside a results directory.  Identifiers
are derived from the UTC timestamp and are strictly increasing within a
process, so lexical order of file names matches creation order.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

from quality_gates.domain.aggregates import LoopResult, ValidationReport
from quality_gates.infrastructure.serialization import from_json, to_json

logger = logging.getLogger(__name__)

_ID_FORMAT = "%Y%m%dT%H%M%S%fZ"
_last_id_lock = threading.Lock()
_last_id: dict[str, str] = {}


def new_id(prefix: str) -> str:
    """Return a unique, timestamp-derived identifier such as
    ``validation-20260101T120000123456Z``.

    Two calls within the same microsecond get distinct ids: the second one
    is suffixed with a counter.
    """
    stamp = datetime.now(timezone.utc).strftime(_ID_FORMAT)
    candidate = f"{prefix}-{stamp}"
    with _last_id_lock:
        previous = _last_id.get(prefix)
        if previous is not None and candidate <= previous:
            base, _, counter = previous.partition("+")
            n = int(counter) + 1 if counter else 1
            candidate = f"{base}+{n:03d}"
        _last_id[prefix] = candidate
    return candidate


class ReportStore:
    """JSON-file store rooted at *directory*.

    The directory is created lazily on first write.

    Parameters
    ----------
    directory:
        Where documents are written.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _write(self, identifier: str, payload: str) -> Path:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._directory / f"{identifier}.json"
        path.write_text(payload, encoding="utf-8")
        logger.info("ReportStore: wrote %s", path)
        return path

    def save_report(self, report: ValidationReport) -> Path:
        """Persist *report* as ``<run_id>.json``.

        Raises
        ------
        OSError
            If the file cannot be written.
        """
        return self._write(report.run_id, to_json(report))

    def save_loop_result(self, result: LoopResult) -> Path:
        """Persist *result* as ``<loop_id>.json``."""
        return self._write(result.loop_id, to_json(result))

    def load_report(self, identifier: str) -> ValidationReport:
        path = self._directory / f"{identifier}.json"
        return from_json(path.read_text(encoding="utf-8"), ValidationReport)

    def load_loop_result(self, identifier: str) -> LoopResult:
        path = self._directory / f"{identifier}.json"
        return from_json(path.read_text(encoding="utf-8"), LoopResult)

    def list_ids(self, prefix: str = "") -> list[str]:
        """Identifiers of stored documents, oldest first."""
        if not self._directory.is_dir():
            return []
        return sorted(
            p.stem for p in self._directory.glob("*.json") if p.stem.startswith(prefix)
        )
