"""
Model client base class and gateway errors

Defines the abstract base class inherited by all model clients and the
error taxonomy the retry controller uses to tell transient failures from
terminal ones.
"""

from abc import ABC, abstractmethod

from casejudge_core.domain.constants import MODEL_PRICING
from casejudge_core.domain.value_objects import CallParameters, CostMetrics, ModelResponse


class GatewayError(Exception):
    """Failure talking to a model endpoint (transient unless a subclass says otherwise)"""

    retryable = True

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(GatewayError):
    """The endpoint is throttling requests"""


class GatewayTimeoutError(GatewayError):
    """The request did not complete in time"""


class GatewayConnectionError(GatewayError):
    """The connection failed or was reset"""


class EmptyResponseError(GatewayError):
    """The endpoint answered without any content"""


class BadRequestError(GatewayError):
    """The request was rejected as malformed"""

    retryable = False


class AuthenticationError(GatewayError):
    """The credentials were missing, invalid, or lack permission"""

    retryable = False


def error_for_status(status_code: int | None, message: str) -> GatewayError:
    """
    Map an HTTP status code to the matching gateway error

    Args:
        status_code: HTTP status code (None if unknown)
        message: Error message

    Returns:
        GatewayError subclass instance
    """
    if status_code == 429:
        return RateLimitError(message, status_code)
    if status_code in (401, 403):
        return AuthenticationError(message, status_code)
    if status_code in (408, 504):
        return GatewayTimeoutError(message, status_code)
    if status_code is not None and 400 <= status_code < 500:
        return BadRequestError(message, status_code)
    return GatewayError(message, status_code)


def estimate_cost(model_name: str, tokens_in: int, tokens_out: int) -> float | None:
    """Estimate the USD cost of a call from MODEL_PRICING (None for unknown models)"""
    pricing = MODEL_PRICING.get(model_name)
    if pricing is None:
        return None
    return CostMetrics(
        input_tokens=tokens_in,
        output_tokens=tokens_out,
        input_price_per_m=pricing["input"],
        output_price_per_m=pricing["output"],
    ).total_cost


class ModelClient(ABC):
    """Abstract base class for model clients"""

    model_name: str

    @abstractmethod
    def generate(self, prompt: str, parameters: CallParameters | None = None) -> ModelResponse:
        """
        Send a prompt and retrieve the response (a single attempt)

        Raises:
            GatewayError: On any transport or provider failure
        """
        pass
