"""
Use Cases Layer

Aggregates pipeline logic and provides use cases called from the runner.
"""

from casejudge_core.use_cases.evaluation_models import (
    extract_provider,
    list_evaluation_models,
)
from casejudge_core.use_cases.health_check import (
    HEALTH_CHECK_PROMPT,
    health_check_model,
    run_health_check,
    run_judge_health_check,
)
from casejudge_core.use_cases.judge_evaluation import (
    EvaluationFailedError,
    InteractionNotFoundError,
    JudgeEvaluator,
    evaluate_batch,
)
from casejudge_core.use_cases.reporting import (
    evaluations_to_frame,
    summarize_evaluations,
)
from casejudge_core.use_cases.scoring import (
    ScoreDerivationError,
    derive_confidence,
    derive_metrics,
    derive_overall_score,
    derive_quality_flags,
)
from casejudge_core.use_cases.structured_generation import (
    GenerationFailedError,
    GenerationResult,
    StructuredGenerator,
)

__all__ = [
    # evaluation_models
    "extract_provider",
    "list_evaluation_models",
    # health_check
    "HEALTH_CHECK_PROMPT",
    "health_check_model",
    "run_health_check",
    "run_judge_health_check",
    # judge_evaluation
    "EvaluationFailedError",
    "InteractionNotFoundError",
    "JudgeEvaluator",
    "evaluate_batch",
    # reporting
    "evaluations_to_frame",
    "summarize_evaluations",
    # scoring
    "ScoreDerivationError",
    "derive_confidence",
    "derive_metrics",
    "derive_overall_score",
    "derive_quality_flags",
    # structured_generation
    "GenerationFailedError",
    "GenerationResult",
    "StructuredGenerator",
]
