"""
Evaluation model catalogue

Lists models suitable to act as judge, from the gateway's model listing when
available and from a built-in list otherwise.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from casejudge_core.domain.constants import DEFAULT_EVALUATION_MODELS
from casejudge_core.domain.entities import EvaluationModelInfo

logger = logging.getLogger(__name__)

# Model id fragments of families considered capable judges
JUDGE_MODEL_FAMILIES = ("gpt-4", "claude", "grok", "llama")

_PROVIDERS = (
    ("gpt", "OpenAI"),
    ("claude", "Anthropic"),
    ("grok", "xAI"),
    ("llama", "Meta"),
)


def extract_provider(model_id: str) -> str:
    """Provider name inferred from a model id"""
    for fragment, provider in _PROVIDERS:
        if fragment in model_id:
            return provider
    return "Unknown"


def _price_per_1k(model: dict[str, Any]) -> float | None:
    prompt_price = (model.get("pricing") or {}).get("prompt")
    if prompt_price in (None, ""):
        return None
    try:
        return float(prompt_price)
    except (TypeError, ValueError):
        return None


def to_evaluation_model(model: dict[str, Any]) -> EvaluationModelInfo:
    """Convert one gateway model listing entry"""
    model_id = model["id"]
    name = model.get("name") or model_id
    return EvaluationModelInfo(
        id=model_id,
        name=name,
        provider=extract_provider(model_id),
        description=f"{name} - Suitable for AI output evaluation",
        cost_per_1k_tokens=_price_per_1k(model),
        max_tokens=model.get("context_length") or None,
        recommended="gpt-4" in model_id or "claude-3" in model_id,
    )


def default_evaluation_models() -> list[EvaluationModelInfo]:
    return [EvaluationModelInfo(**entry) for entry in DEFAULT_EVALUATION_MODELS]


def list_evaluation_models(
    list_models_fn: Callable[[], list[dict[str, Any]]] | None,
    provider: str | None = None,
    recommended_only: bool = False,
) -> list[EvaluationModelInfo]:
    """
    Models available for judge evaluation

    Args:
        list_models_fn: Returns the gateway's model listing (None uses the built-in list)
        provider: Keep only models of this provider (case-insensitive)
        recommended_only: Keep only recommended models

    Returns:
        list[EvaluationModelInfo]: Matching models
    """
    models = None
    if list_models_fn is not None:
        try:
            models = [
                to_evaluation_model(m)
                for m in list_models_fn()
                if any(family in m.get("id", "") for family in JUDGE_MODEL_FAMILIES)
            ]
        except Exception as e:
            logger.warning("Model listing failed, using default evaluation models: %s", e)
    if models is None:
        models = default_evaluation_models()

    if provider:
        models = [m for m in models if m.provider.lower() == provider.lower()]
    if recommended_only:
        models = [m for m in models if m.recommended]
    return models
