"""
Domain Value Objects

Defines immutable data structures representing values such as model responses,
call parameters, validation outcomes, derivation thresholds, and cost metrics.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, TypeVar

from casejudge_core.domain.constants import (
    CONFIDENCE_STDDEV_NORMALIZER,
    CONSISTENT_STDDEV,
    HIGH_QUALITY_MEAN,
    INCONSISTENT_STDDEV,
    LOW_DIMENSION_SCORE,
    LOW_QUALITY_MEAN,
)

T = TypeVar("T")


@dataclass(frozen=True)
class ModelResponse:
    """Model response"""
    text: str
    model_id: str
    latency_ms: int
    tokens_in: int = 0
    tokens_out: int = 0
    cost_estimate: float | None = None

    @property
    def total_tokens(self) -> int:
        return self.tokens_in + self.tokens_out


@dataclass(frozen=True)
class CallParameters:
    """Call-tuning values sent with a prompt"""
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    timeout_seconds: float | None = None

    @classmethod
    def from_mapping(
        cls,
        params: Mapping[str, Any],
        timeout_seconds: float | None = None,
    ) -> "CallParameters":
        """Create from a template's default parameters (unknown keys are ignored)"""
        return cls(
            temperature=params.get("temperature"),
            max_tokens=params.get("max_tokens"),
            top_p=params.get("top_p"),
            timeout_seconds=timeout_seconds if timeout_seconds is not None else params.get("timeout_seconds"),
        )


@dataclass(frozen=True)
class RenderedPrompt:
    """Final prompt text plus the resolved parameter set"""
    text: str
    parameters: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationOutcome(Generic[T]):
    """Result of validating a model reply against a template schema"""
    is_valid: bool
    data: T | None = None
    errors: list[str] | None = None


@dataclass(frozen=True)
class QualityThresholds:
    """Constants used to derive confidence and quality flags"""
    confidence_normalizer: float = CONFIDENCE_STDDEV_NORMALIZER
    high_quality_mean: float = HIGH_QUALITY_MEAN
    low_quality_mean: float = LOW_QUALITY_MEAN
    low_dimension_score: float = LOW_DIMENSION_SCORE
    inconsistent_std_dev: float = INCONSISTENT_STDDEV
    consistent_std_dev: float = CONSISTENT_STDDEV

    def __post_init__(self):
        if self.confidence_normalizer <= 0:
            raise ValueError("confidence_normalizer must be positive")


@dataclass(frozen=True)
class DerivedMetrics:
    """Secondary metrics derived from the core dimension scores"""
    overall: int
    confidence: float
    flags: tuple[str, ...] = ()


@dataclass
class CostMetrics:
    """Cost calculation metrics"""
    input_tokens: int
    output_tokens: int

    # Pricing (USD per 1M tokens)
    input_price_per_m: float = 0.0
    output_price_per_m: float = 0.0

    def __post_init__(self):
        if self.input_tokens < 0:
            raise ValueError("input_tokens must be non-negative")
        if self.output_tokens < 0:
            raise ValueError("output_tokens must be non-negative")

    @property
    def total_cost(self) -> float:
        """Token cost in USD"""
        return (
            (self.input_tokens / 1_000_000) * self.input_price_per_m +
            (self.output_tokens / 1_000_000) * self.output_price_per_m
        )
