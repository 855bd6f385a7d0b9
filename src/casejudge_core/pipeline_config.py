"""
Pipeline Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import asdict, dataclass, field

from casejudge_core.domain.constants import (
    CONFIDENCE_STDDEV_NORMALIZER,
    CONSISTENT_STDDEV,
    DEFAULT_BASE_DELAY_SECONDS,
    DEFAULT_JUDGE_MODEL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_MS,
    HIGH_QUALITY_MEAN,
    INCONSISTENT_STDDEV,
    LOW_DIMENSION_SCORE,
    LOW_QUALITY_MEAN,
    MAX_BACKOFF_SECONDS,
)
from casejudge_core.domain.value_objects import QualityThresholds


def _env_bool(key: str, default: bool) -> bool:
    """Convert an environment variable to bool"""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


@dataclass
class GatewayConfig:
    """Model gateway configuration"""
    base_url: str = "https://openrouter.ai/api/v1"
    api_key: str = ""
    site_url: str = "http://localhost:3001"
    app_name: str = "casejudge-core"
    default_model: str = DEFAULT_JUDGE_MODEL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    gcp_project_id: str = ""
    anthropic_api_key: str = ""

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@dataclass
class RetryConfig:
    """Backoff retry configuration"""
    max_attempts: int = DEFAULT_MAX_RETRIES
    base_delay_seconds: float = DEFAULT_BASE_DELAY_SECONDS
    max_delay_seconds: float = MAX_BACKOFF_SECONDS


@dataclass
class JudgeConfig:
    """Judge evaluation configuration"""
    model: str = DEFAULT_JUDGE_MODEL
    chain_of_thought: bool = True
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    confidence_normalizer: float = CONFIDENCE_STDDEV_NORMALIZER
    high_quality_mean: float = HIGH_QUALITY_MEAN
    low_quality_mean: float = LOW_QUALITY_MEAN
    low_dimension_score: float = LOW_DIMENSION_SCORE
    inconsistent_std_dev: float = INCONSISTENT_STDDEV
    consistent_std_dev: float = CONSISTENT_STDDEV

    def thresholds(self) -> QualityThresholds:
        """Derivation thresholds as a value object"""
        return QualityThresholds(
            confidence_normalizer=self.confidence_normalizer,
            high_quality_mean=self.high_quality_mean,
            low_quality_mean=self.low_quality_mean,
            low_dimension_score=self.low_dimension_score,
            inconsistent_std_dev=self.inconsistent_std_dev,
            consistent_std_dev=self.consistent_std_dev,
        )


@dataclass
class StorageConfig:
    """Evaluation storage configuration"""
    data_dir: str = "data"


@dataclass
class PipelineConfig:
    """Overall pipeline configuration"""
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    judge: JudgeConfig = field(default_factory=JudgeConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format (API keys are left out)"""
        data = asdict(self)
        data["gateway"].pop("api_key")
        data["gateway"].pop("anthropic_api_key")
        return {"pipeline_config": data}

    @classmethod
    def from_dict(cls, data: dict) -> "PipelineConfig":
        """Create from dictionary (handles presence/absence of pipeline_config key)"""
        config_data = data.get("pipeline_config", data)
        return cls(
            gateway=GatewayConfig(**config_data.get("gateway", {})),
            retry=RetryConfig(**config_data.get("retry", {})),
            judge=JudgeConfig(**config_data.get("judge", {})),
            storage=StorageConfig(**config_data.get("storage", {})),
        )


def load_config() -> PipelineConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        PipelineConfig
    """
    gateway = GatewayConfig(
        base_url=_env_str("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
        api_key=_env_str("OPENROUTER_API_KEY", ""),
        site_url=_env_str("OPENROUTER_SITE_URL", "http://localhost:3001"),
        app_name=_env_str("OPENROUTER_APP_NAME", "casejudge-core"),
        default_model=_env_str("DEFAULT_MODEL", DEFAULT_JUDGE_MODEL),
        timeout_ms=_env_int("REQUEST_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
        gcp_project_id=_env_str("GCP_PROJECT_ID", ""),
        anthropic_api_key=_env_str("ANTHROPIC_API_KEY", ""),
    )
    retry = RetryConfig(
        max_attempts=_env_int("MAX_RETRY_ATTEMPTS", DEFAULT_MAX_RETRIES),
        base_delay_seconds=_env_float("RETRY_BASE_DELAY_SECONDS", DEFAULT_BASE_DELAY_SECONDS),
        max_delay_seconds=_env_float("RETRY_MAX_DELAY_SECONDS", MAX_BACKOFF_SECONDS),
    )
    judge = JudgeConfig(
        model=_env_str("JUDGE_MODEL", DEFAULT_JUDGE_MODEL),
        chain_of_thought=_env_bool("JUDGE_CHAIN_OF_THOUGHT", True),
        timeout_ms=_env_int("JUDGE_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
        confidence_normalizer=_env_float("JUDGE_CONFIDENCE_NORMALIZER", CONFIDENCE_STDDEV_NORMALIZER),
        high_quality_mean=_env_float("JUDGE_HIGH_QUALITY_MEAN", HIGH_QUALITY_MEAN),
        low_quality_mean=_env_float("JUDGE_LOW_QUALITY_MEAN", LOW_QUALITY_MEAN),
        low_dimension_score=_env_float("JUDGE_LOW_DIMENSION_SCORE", LOW_DIMENSION_SCORE),
        inconsistent_std_dev=_env_float("JUDGE_INCONSISTENT_STDDEV", INCONSISTENT_STDDEV),
        consistent_std_dev=_env_float("JUDGE_CONSISTENT_STDDEV", CONSISTENT_STDDEV),
    )
    storage = StorageConfig(
        data_dir=_env_str("CASEJUDGE_DATA_DIR", "data"),
    )
    return PipelineConfig(gateway=gateway, retry=retry, judge=judge, storage=storage)
