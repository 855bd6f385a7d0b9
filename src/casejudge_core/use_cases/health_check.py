"""
Gateway health check

Sends a minimal prompt through the model gateway to confirm that a generation
or judge model is reachable with the configured credentials.
"""

import logging
from typing import Callable

from casejudge_core.domain.entities import HealthCheckResult
from casejudge_core.domain.value_objects import CallParameters
from casejudge_core.infrastructure.model_clients.base import ModelClient
from casejudge_core.infrastructure.retry import is_retryable

logger = logging.getLogger(__name__)

HEALTH_CHECK_PROMPT = "Reply with only 'OK' if you can read this message."

# Keeps the connection test cheap
HEALTH_CHECK_PARAMETERS = CallParameters(temperature=0.0, max_tokens=10)

_TROUBLESHOOTING = (
    "Troubleshooting:\n"
    "- OpenRouter models: set OPENROUTER_API_KEY\n"
    "- claude-* models: set ANTHROPIC_API_KEY\n"
    "- gemini-* models: set GCP_PROJECT_ID and run `gcloud auth application-default login`"
)


def health_check_model(
    model_name: str,
    create_client_fn: Callable[[str], ModelClient],
) -> HealthCheckResult:
    """
    Probe one model with HEALTH_CHECK_PROMPT.

    Client construction errors (missing credentials) count as failures too.
    """
    try:
        client = create_client_fn(model_name)
        response = client.generate(HEALTH_CHECK_PROMPT, HEALTH_CHECK_PARAMETERS)
    except Exception as e:
        logger.warning(
            "Health check of %s failed (%s): %s",
            model_name,
            "transient" if is_retryable(e) else "terminal",
            e,
        )
        return HealthCheckResult(model_name=model_name, success=False, latency_ms=None, error=str(e))
    return HealthCheckResult(model_name=model_name, success=True, latency_ms=response.latency_ms, error=None)


def run_health_check(
    models: list[str],
    create_client_fn: Callable[[str], ModelClient] | None = None,
) -> tuple[list[str], list[HealthCheckResult]]:
    """
    Probe every model in order and print one status line each.

    Args:
        models: Model names to check
        create_client_fn: Client factory (create_client when not specified)

    Returns:
        tuple: (names of reachable models, all results)
    """
    create_client_fn = create_client_fn or _default_create_client

    print("=== Model Health Check ===\n")
    results = [health_check_model(name, create_client_fn) for name in models]
    for result in results:
        if result.success:
            print(f"  {result.model_name}... OK ({result.latency_ms}ms)")
        else:
            print(f"  {result.model_name}... FAILED")
            print(f"    Error: {(result.error or 'Unknown error')[:100]}")

    available_models = [r.model_name for r in results if r.success]
    print(f"\n  {len(available_models)}/{len(results)} model(s) available\n")
    return available_models, results


def run_judge_health_check(
    judge_model: str,
    create_client_fn: Callable[[str], ModelClient] | None = None,
) -> tuple[bool, str | None]:
    """Check the judge model before a batch.

    Returns:
        (success, error_message): (True, None) when reachable
    """
    result = health_check_model(judge_model, create_client_fn or _default_create_client)
    if result.success:
        return True, None
    return False, (
        f"Judge ({judge_model}) health check failed.\n"
        f"Error: {(result.error or 'Unknown error')[:200]}\n\n"
        f"{_TROUBLESHOOTING}"
    )


def _default_create_client(model_name: str) -> ModelClient:
    from casejudge_core.infrastructure.model_clients.factory import create_client
    return create_client(model_name)
