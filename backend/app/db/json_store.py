"""JSON file persistence - the decision list as one blob under a fixed key."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from backend.app.models.decision import Decision

logger = logging.getLogger(__name__)

_decision_list = TypeAdapter(list[Decision])


class JsonFileDecisionRepository:
    """File-backed DecisionRepository.

    The file holds a JSON object; the decision list lives under `key`
    (default "signal_decisions"). Other keys in the file are preserved.
    Writes go to a temp file in the same directory and are swapped in with
    os.replace, so readers never see a half-written file.
    """

    def __init__(self, path: str | Path, key: str = "signal_decisions") -> None:
        self._path = Path(path)
        self._key = key

    def load(self) -> list[Decision]:
        """Load all decisions, or an empty list if the file or key is absent."""
        document = self._read_document()
        raw = document.get(self._key)
        if raw is None:
            return []
        return _decision_list.validate_python(raw)

    def save(self, decisions: list[Decision]) -> None:
        """Rewrite the stored list in full."""
        document = self._read_document()
        document[self._key] = _decision_list.dump_python(
            decisions, mode="json", by_alias=True, exclude_none=True
        )

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.replace(tmp_path, self._path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {len(decisions)} decision(s) to {self._path}")

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        with self._path.open(encoding="utf-8") as f:
            document = json.load(f)
        if not isinstance(document, dict):
            raise ValueError(f"{self._path} does not contain a JSON object")
        return document
