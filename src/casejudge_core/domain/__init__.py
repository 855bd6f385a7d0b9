"""
Domain Layer

Defines constants, entities, and value objects that form the core of the pipeline.
Has no dependencies on provider SDKs.
"""

from casejudge_core.domain.constants import (
    CORE_DIMENSIONS,
    DEFAULT_EVALUATION_MODELS,
    DIMENSION_FLAGS,
    JUDGE_COT_TEMPLATE_ID,
    JUDGE_TEMPLATE_ID,
    MODEL_PRICING,
)
from casejudge_core.domain.entities import (
    EvaluationMetadata,
    EvaluationModelInfo,
    EvaluationOptions,
    EvaluationReasoning,
    EvaluationRequest,
    EvaluationResult,
    EvaluationScores,
    FewShotExample,
    HealthCheckResult,
    Interaction,
    PromptTemplate,
)
from casejudge_core.domain.value_objects import (
    CallParameters,
    CostMetrics,
    DerivedMetrics,
    ModelResponse,
    QualityThresholds,
    RenderedPrompt,
    ValidationOutcome,
)

__all__ = [
    # constants
    "CORE_DIMENSIONS",
    "DEFAULT_EVALUATION_MODELS",
    "DIMENSION_FLAGS",
    "JUDGE_COT_TEMPLATE_ID",
    "JUDGE_TEMPLATE_ID",
    "MODEL_PRICING",
    # entities
    "EvaluationMetadata",
    "EvaluationModelInfo",
    "EvaluationOptions",
    "EvaluationReasoning",
    "EvaluationRequest",
    "EvaluationResult",
    "EvaluationScores",
    "FewShotExample",
    "HealthCheckResult",
    "Interaction",
    "PromptTemplate",
    # value objects
    "CallParameters",
    "CostMetrics",
    "DerivedMetrics",
    "ModelResponse",
    "QualityThresholds",
    "RenderedPrompt",
    "ValidationOutcome",
]
