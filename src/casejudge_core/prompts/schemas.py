"""
Reply schemas - the structured output each template expects back.

These schemas define the contract between:
- The model (what it returns, camelCase JSON keys)
- The registry (what validate() accepts)
- The pipeline stages that consume the validated data
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from casejudge_core.domain.constants import SCORE_MAX, SCORE_MIN

# Judge scores must be real numbers on the 1-10 scale ("9" is rejected)
Score = Annotated[float, Field(strict=True, ge=SCORE_MIN, le=SCORE_MAX)]
Reason = Annotated[str, Field(min_length=1)]
Confidence = Annotated[float, Field(strict=True, ge=0, le=1)]


class ReplyModel(BaseModel):
    """Base for reply schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# JUDGE REPLY
# ---------------------------------------------------------------------------


class JudgeScores(ReplyModel):
    overall: Score | None = None
    faithfulness: Score
    completeness: Score
    relevance: Score
    clarity: Score
    task_specific: dict[str, Score] | None = None


class JudgeReasoning(ReplyModel):
    overall: Reason
    faithfulness: Reason
    completeness: Reason
    relevance: Reason
    clarity: Reason
    task_specific: dict[str, str] | None = None


class JudgeReply(ReplyModel):
    """Structured output from the judge model."""

    scores: JudgeScores
    reasoning: JudgeReasoning

    @model_validator(mode="after")
    def _task_specific_reasoning(self) -> "JudgeReply":
        scored = set(self.scores.task_specific or {})
        explained = set(self.reasoning.task_specific or {})
        missing = sorted(scored - explained)
        if missing:
            raise ValueError(f"missing task-specific reasoning for: {', '.join(missing)}")
        return self


# ---------------------------------------------------------------------------
# CASE OPERATION REPLIES
# ---------------------------------------------------------------------------


class OverallSummaryReply(ReplyModel):
    content: str = Field(min_length=10, description="Detailed case summary")
    recommendations: list[str] = Field(min_length=1)
    confidence: Confidence


class StepRecommendationReply(ReplyModel):
    recommendations: list[str] = Field(min_length=1)
    priority: Literal["low", "medium", "high"]
    confidence: Confidence


class ApplicationAnalysisReply(ReplyModel):
    summary: str = Field(min_length=10)
    key_points: list[str]
    potential_issues: list[str]
    recommended_actions: list[str]
    priority_level: Literal["low", "medium", "high", "urgent"]
    estimated_processing_time: str = Field(min_length=1)
    required_documents: list[str]


class FinalSummaryReply(ReplyModel):
    overall_summary: str = Field(min_length=20)
    key_decisions: list[str]
    outcomes: list[str]
    process_history: list[str]
    recommended_decision: Literal["approved", "denied", "requires_additional_info"]
    supporting_rationale: list[str] = Field(min_length=1)


class CompletenessValidationReply(ReplyModel):
    is_complete: bool
    missing_steps: list[str]
    missing_documents: list[str]
    recommendations: list[str]
    confidence: Confidence


class MissingField(ReplyModel):
    field_name: str = Field(min_length=1)
    field_type: str = Field(min_length=1)
    importance: Literal["required", "recommended", "optional"]
    suggested_action: str = Field(min_length=1)


class MissingFieldsReply(ReplyModel):
    missing_fields: list[MissingField]
    completeness_score: float = Field(strict=True, ge=0, le=100)
    priority_actions: list[str]
    estimated_completion_time: str = Field(min_length=1)
