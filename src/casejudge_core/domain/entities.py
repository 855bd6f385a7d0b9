"""
Domain Entities

Defines the primary data structures used by the prompt registry and the judge pipeline.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from casejudge_core.domain.constants import (
    CORE_DIMENSIONS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_MS,
    SCORE_MAX,
    SCORE_MIN,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PromptTemplate:
    """Named, versioned prompt template with its expected reply schema"""
    id: str
    name: str
    version: str
    operation: str
    body: str
    output_schema: type  # pydantic model class
    default_parameters: dict = field(default_factory=dict)
    description: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass
class Interaction:
    """A recorded AI call (the subject of a judge evaluation)"""
    id: str
    case_id: str
    operation: str
    prompt: str
    response: str
    model: str
    duration_ms: int = 0
    success: bool = True
    tokens_used: int | None = None
    cost: float | None = None
    error: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    step_context: str | None = None
    prompt_template: str | None = None
    prompt_version: str | None = None


@dataclass(frozen=True)
class FewShotExample:
    """Scored reference example used to anchor the judge"""
    input: str
    output: str
    score: float
    reasoning: str

    def __post_init__(self):
        if not SCORE_MIN <= self.score <= SCORE_MAX:
            raise ValueError(f"Few-shot score must be between {SCORE_MIN} and {SCORE_MAX}: {self.score}")


@dataclass(frozen=True)
class EvaluationOptions:
    """Options for a single judge evaluation"""
    include_chain_of_thought: bool = True
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")


@dataclass(frozen=True)
class EvaluationRequest:
    """Request to score a previously recorded interaction"""
    interaction_id: str
    evaluation_model: str
    custom_criteria: dict[str, str] | None = None
    few_shot_examples: list[FewShotExample] | None = None
    options: EvaluationOptions = field(default_factory=EvaluationOptions)

    def __post_init__(self):
        if not self.interaction_id:
            raise ValueError("interaction_id is required")
        if not self.evaluation_model:
            raise ValueError("evaluation_model is required")


@dataclass(frozen=True)
class EvaluationScores:
    """Judge scores on the 1-10 scale"""
    overall: float
    faithfulness: float
    completeness: float
    relevance: float
    clarity: float
    task_specific: dict[str, float] = field(default_factory=dict)

    def core(self) -> dict[str, float]:
        """The four core dimensions keyed by name"""
        return {name: getattr(self, name) for name in CORE_DIMENSIONS}


@dataclass(frozen=True)
class EvaluationReasoning:
    """Free-text explanation per scored dimension"""
    overall: str
    faithfulness: str
    completeness: str
    relevance: str
    clarity: str
    task_specific: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EvaluationMetadata:
    """Timing, cost and derived quality information for an evaluation"""
    evaluated_at: datetime
    evaluation_duration_ms: int
    confidence: float
    flags: tuple[str, ...] = ()
    evaluation_cost: float | None = None
    evaluation_tokens: int | None = None


@dataclass(frozen=True)
class EvaluationResult:
    """Persisted judge evaluation of one interaction"""
    id: str
    interaction_id: str
    evaluation_model: str
    scores: EvaluationScores
    reasoning: EvaluationReasoning
    metadata: EvaluationMetadata

    def __post_init__(self):
        """Post-initialization validation"""
        for name, value in [("overall", self.scores.overall), *self.scores.core().items()]:
            if not SCORE_MIN <= value <= SCORE_MAX:
                raise ValueError(f"scores.{name} must be between {SCORE_MIN} and {SCORE_MAX}: {value}")
        for name in ("overall", *CORE_DIMENSIONS):
            if not getattr(self.reasoning, name):
                raise ValueError(f"reasoning.{name} is required")
        if not 0.0 <= self.metadata.confidence <= 1.0:
            raise ValueError(f"confidence must be between 0 and 1: {self.metadata.confidence}")
        if self.metadata.evaluation_duration_ms < 0:
            raise ValueError("evaluation_duration_ms must be non-negative")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary"""
        data = asdict(self)
        data["metadata"]["evaluated_at"] = self.metadata.evaluated_at.isoformat()
        data["metadata"]["flags"] = list(self.metadata.flags)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "EvaluationResult":
        """Create from the dictionary produced by to_dict()"""
        metadata = dict(data["metadata"])
        metadata["evaluated_at"] = datetime.fromisoformat(metadata["evaluated_at"])
        metadata["flags"] = tuple(metadata.get("flags", ()))
        return cls(
            id=data["id"],
            interaction_id=data["interaction_id"],
            evaluation_model=data["evaluation_model"],
            scores=EvaluationScores(**data["scores"]),
            reasoning=EvaluationReasoning(**data["reasoning"]),
            metadata=EvaluationMetadata(**metadata),
        )


@dataclass(frozen=True)
class HealthCheckResult:
    """Health check result"""
    model_name: str
    success: bool
    latency_ms: int | None
    error: str | None


@dataclass(frozen=True)
class EvaluationModelInfo:
    """A model that can act as judge"""
    id: str
    name: str
    provider: str
    description: str = ""
    cost_per_1k_tokens: float | None = None
    max_tokens: int | None = None
    supported_criteria: tuple[str, ...] = CORE_DIMENSIONS
    recommended: bool = False
