"""
Model gateway clients

Single-attempt transports to hosted LLM endpoints. Retries are applied by the
caller through casejudge_core.infrastructure.retry.
"""

from casejudge_core.infrastructure.model_clients.base import (
    AuthenticationError,
    BadRequestError,
    EmptyResponseError,
    GatewayConnectionError,
    GatewayError,
    GatewayTimeoutError,
    ModelClient,
    RateLimitError,
    error_for_status,
    estimate_cost,
)
from casejudge_core.infrastructure.model_clients.factory import create_client

__all__ = [
    "AuthenticationError",
    "BadRequestError",
    "EmptyResponseError",
    "GatewayConnectionError",
    "GatewayError",
    "GatewayTimeoutError",
    "ModelClient",
    "RateLimitError",
    "create_client",
    "error_for_status",
    "estimate_cost",
]
