"""
Domain Constants

Centrally manages constants shared across the prompt and judge pipeline.
"""

# Core scoring dimensions (always present in a judge reply)
CORE_DIMENSIONS = ("faithfulness", "completeness", "relevance", "clarity")

# Judge score scale
SCORE_MIN = 1
SCORE_MAX = 10

# Derivation constants (tunable, see QualityThresholds)
CONFIDENCE_STDDEV_NORMALIZER = 4.5  # approx. max spread of scores on a 1-10 scale
HIGH_QUALITY_MEAN = 8.0
LOW_QUALITY_MEAN = 4.0
LOW_DIMENSION_SCORE = 3.0
INCONSISTENT_STDDEV = 2.0
CONSISTENT_STDDEV = 0.5

# Flag raised when a single core dimension scores at or below LOW_DIMENSION_SCORE
DIMENSION_FLAGS = {
    "faithfulness": "potential_hallucination",
    "completeness": "incomplete_response",
    "relevance": "off_topic",
    "clarity": "unclear_response",
}

# Judge templates
JUDGE_TEMPLATE_ID = "judge_evaluation_v1"
JUDGE_COT_TEMPLATE_ID = "judge_evaluation_cot_v1"

# Evaluation defaults
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_BASE_DELAY_SECONDS = 1.0
MAX_BACKOFF_SECONDS = 30.0

DEFAULT_JUDGE_MODEL = "openai/gpt-4o"

# Model pricing (USD / 1M tokens)
MODEL_PRICING = {
    "openai/gpt-4o": {"input": 2.50, "output": 10.0},
    "openai/gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "openai/gpt-4": {"input": 30.0, "output": 60.0},
    "openai/gpt-3.5-turbo": {"input": 0.50, "output": 1.50},
    "anthropic/claude-3-opus": {"input": 15.0, "output": 75.0},
    "x-ai/grok-beta": {"input": 5.0, "output": 15.0},
    "gemini-2.5-flash": {"input": 0.075, "output": 0.30},
    "gemini-2.5-pro": {"input": 1.25, "output": 5.0},
    "claude-sonnet-4-5-20250929": {"input": 3.0, "output": 15.0},
    "claude-haiku-4-5-20251001": {"input": 0.80, "output": 4.0},
}

# Judge models offered when the gateway model listing is unavailable
DEFAULT_EVALUATION_MODELS = [
    {
        "id": "openai/gpt-4",
        "name": "GPT-4",
        "provider": "OpenAI",
        "description": "Advanced language model excellent for evaluation tasks",
        "cost_per_1k_tokens": 0.03,
        "max_tokens": 8192,
        "recommended": True,
    },
    {
        "id": "anthropic/claude-3-opus",
        "name": "Claude 3 Opus",
        "provider": "Anthropic",
        "description": "Highly capable model with strong reasoning abilities",
        "cost_per_1k_tokens": 0.015,
        "max_tokens": 4096,
        "recommended": True,
    },
    {
        "id": "openai/gpt-3.5-turbo",
        "name": "GPT-3.5 Turbo",
        "provider": "OpenAI",
        "description": "Cost-effective model suitable for basic evaluation tasks",
        "cost_per_1k_tokens": 0.001,
        "max_tokens": 4096,
        "recommended": False,
    },
]
