"""
Evaluation persistence

Stores recorded interactions and judge evaluations. The CSV implementation
keeps one row per record in interactions.csv / evaluations.csv inside a data
directory; nested fields are JSON-encoded.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Protocol

import pandas as pd

from casejudge_core.domain.constants import CORE_DIMENSIONS
from casejudge_core.domain.entities import (
    EvaluationMetadata,
    EvaluationReasoning,
    EvaluationResult,
    EvaluationScores,
    Interaction,
)

logger = logging.getLogger(__name__)

INTERACTION_COLUMNS = [
    "id", "case_id", "operation", "prompt", "response", "model", "duration_ms",
    "success", "tokens_used", "cost", "error", "timestamp", "step_context",
    "prompt_template", "prompt_version",
]

EVALUATION_COLUMNS = [
    "id", "interaction_id", "evaluation_model", "evaluated_at",
    "overall", *CORE_DIMENSIONS, "task_specific_scores", "reasoning",
    "confidence", "flags", "evaluation_duration_ms", "evaluation_cost", "evaluation_tokens",
]


class EvaluationRepository(Protocol):
    """Persistence collaborator of the judge pipeline"""

    def get_interaction(self, interaction_id: str) -> Interaction | None: ...

    def save_interaction(self, interaction: Interaction) -> None: ...

    def save_evaluation(self, result: EvaluationResult) -> None: ...

    def get_evaluation(self, evaluation_id: str) -> EvaluationResult | None: ...

    def list_evaluations(self, interaction_id: str | None = None) -> list[EvaluationResult]: ...


class InMemoryRepository:
    """Dictionary-backed repository"""

    def __init__(
        self,
        interactions: list[Interaction] | None = None,
        evaluations: list[EvaluationResult] | None = None,
    ):
        self._interactions = {i.id: i for i in interactions or []}
        self._evaluations = {e.id: e for e in evaluations or []}

    def get_interaction(self, interaction_id: str) -> Interaction | None:
        return self._interactions.get(interaction_id)

    def save_interaction(self, interaction: Interaction) -> None:
        self._interactions[interaction.id] = interaction

    def save_evaluation(self, result: EvaluationResult) -> None:
        self._evaluations[result.id] = result

    def get_evaluation(self, evaluation_id: str) -> EvaluationResult | None:
        return self._evaluations.get(evaluation_id)

    def list_evaluations(self, interaction_id: str | None = None) -> list[EvaluationResult]:
        return [
            e for e in self._evaluations.values()
            if interaction_id is None or e.interaction_id == interaction_id
        ]


def _optional_int(value: str) -> int | None:
    return int(float(value)) if value != "" else None


def _optional_float(value: str) -> float | None:
    return float(value) if value != "" else None


def _optional_str(value: str) -> str | None:
    return value if value != "" else None


def _interaction_to_row(interaction: Interaction) -> dict:
    row = asdict(interaction)
    row["timestamp"] = interaction.timestamp.isoformat()
    return row


def _row_to_interaction(row: dict) -> Interaction:
    return Interaction(
        id=row["id"],
        case_id=row["case_id"],
        operation=row["operation"],
        prompt=row["prompt"],
        response=row["response"],
        model=row["model"],
        duration_ms=_optional_int(row["duration_ms"]) or 0,
        success=row["success"].lower() == "true",
        tokens_used=_optional_int(row["tokens_used"]),
        cost=_optional_float(row["cost"]),
        error=_optional_str(row["error"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
        step_context=_optional_str(row["step_context"]),
        prompt_template=_optional_str(row["prompt_template"]),
        prompt_version=_optional_str(row["prompt_version"]),
    )


def _evaluation_to_row(result: EvaluationResult) -> dict:
    scores = result.scores
    metadata = result.metadata
    row = {
        "id": result.id,
        "interaction_id": result.interaction_id,
        "evaluation_model": result.evaluation_model,
        "evaluated_at": metadata.evaluated_at.isoformat(),
        "overall": scores.overall,
        **scores.core(),
        "task_specific_scores": json.dumps(scores.task_specific, ensure_ascii=False),
        "reasoning": json.dumps(asdict(result.reasoning), ensure_ascii=False),
        "confidence": metadata.confidence,
        "flags": json.dumps(list(metadata.flags)),
        "evaluation_duration_ms": metadata.evaluation_duration_ms,
        "evaluation_cost": metadata.evaluation_cost,
        "evaluation_tokens": metadata.evaluation_tokens,
    }
    return row


def _row_to_evaluation(row: dict) -> EvaluationResult:
    scores = EvaluationScores(
        overall=float(row["overall"]),
        task_specific=json.loads(row["task_specific_scores"] or "{}"),
        **{name: float(row[name]) for name in CORE_DIMENSIONS},
    )
    metadata = EvaluationMetadata(
        evaluated_at=datetime.fromisoformat(row["evaluated_at"]),
        evaluation_duration_ms=_optional_int(row["evaluation_duration_ms"]) or 0,
        confidence=float(row["confidence"]),
        flags=tuple(json.loads(row["flags"] or "[]")),
        evaluation_cost=_optional_float(row["evaluation_cost"]),
        evaluation_tokens=_optional_int(row["evaluation_tokens"]),
    )
    return EvaluationResult(
        id=row["id"],
        interaction_id=row["interaction_id"],
        evaluation_model=row["evaluation_model"],
        scores=scores,
        reasoning=EvaluationReasoning(**json.loads(row["reasoning"])),
        metadata=metadata,
    )


class CsvRepository:
    """
    CSV-file repository backed by pandas.

    Saving a record whose id already exists replaces the stored row.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.interactions_path = self.data_dir / "interactions.csv"
        self.evaluations_path = self.data_dir / "evaluations.csv"
        self._lock = threading.Lock()

    def _read(self, path: Path, columns: list[str]) -> pd.DataFrame:
        if not path.exists():
            return pd.DataFrame(columns=columns)
        try:
            return pd.read_csv(path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return pd.DataFrame(columns=columns)

    def _upsert(self, path: Path, columns: list[str], row: dict) -> None:
        with self._lock:
            df = self._read(path, columns)
            df = df[df["id"] != row["id"]]
            new_row = pd.DataFrame([row], columns=columns)
            df = new_row if df.empty else pd.concat([df, new_row], ignore_index=True)
            path.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(path, index=False)

    def _find(self, path: Path, columns: list[str], record_id: str) -> dict | None:
        df = self._read(path, columns)
        matches = df[df["id"] == record_id]
        if matches.empty:
            return None
        return matches.iloc[-1].to_dict()

    def get_interaction(self, interaction_id: str) -> Interaction | None:
        row = self._find(self.interactions_path, INTERACTION_COLUMNS, interaction_id)
        return _row_to_interaction(row) if row is not None else None

    def save_interaction(self, interaction: Interaction) -> None:
        self._upsert(self.interactions_path, INTERACTION_COLUMNS, _interaction_to_row(interaction))

    def list_interactions(self) -> list[Interaction]:
        df = self._read(self.interactions_path, INTERACTION_COLUMNS)
        return [_row_to_interaction(row) for row in df.to_dict("records")]

    def save_evaluation(self, result: EvaluationResult) -> None:
        self._upsert(self.evaluations_path, EVALUATION_COLUMNS, _evaluation_to_row(result))
        logger.debug("Saved evaluation %s to %s", result.id, self.evaluations_path)

    def get_evaluation(self, evaluation_id: str) -> EvaluationResult | None:
        row = self._find(self.evaluations_path, EVALUATION_COLUMNS, evaluation_id)
        return _row_to_evaluation(row) if row is not None else None

    def list_evaluations(self, interaction_id: str | None = None) -> list[EvaluationResult]:
        df = self._read(self.evaluations_path, EVALUATION_COLUMNS)
        if interaction_id is not None:
            df = df[df["interaction_id"] == interaction_id]
        return [_row_to_evaluation(row) for row in df.to_dict("records")]
