"""
OpenRouter (OpenAI-compatible API) model client
"""

import os
import time

import openai
from openai import OpenAI

from casejudge_core.domain.value_objects import CallParameters, ModelResponse
from casejudge_core.infrastructure.model_clients.base import (
    EmptyResponseError,
    GatewayConnectionError,
    GatewayTimeoutError,
    ModelClient,
    error_for_status,
    estimate_cost,
)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterClient(ModelClient):
    """Client using OpenRouter through the OpenAI SDK"""

    def __init__(
        self,
        model_name: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float = 30,
        max_tokens: int = 4000,
        temperature: float = 0.7,
        site_url: str | None = None,
        app_name: str | None = None,
    ):
        """
        Args:
            model_name: Model name (e.g. openai/gpt-4o, x-ai/grok-beta)
            base_url: API endpoint (falls back to OPENROUTER_BASE_URL env var if not specified)
            api_key: API key (falls back to OPENROUTER_API_KEY env var if not specified)
            timeout_seconds: Default request timeout (default: 30)
            max_tokens: Default maximum number of output tokens (default: 4000)
            temperature: Default sampling temperature (default: 0.7)
            site_url: Value of the HTTP-Referer header
            app_name: Value of the X-Title header
        """
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds

        # Configuration priority: argument > environment variable > default value
        self.base_url = base_url or os.environ.get("OPENROUTER_BASE_URL", DEFAULT_BASE_URL)
        api_key = api_key or os.environ.get("OPENROUTER_API_KEY")
        if not api_key:
            raise ValueError("OPENROUTER_API_KEY is not set")

        headers = {
            "HTTP-Referer": site_url or os.environ.get("OPENROUTER_SITE_URL", "http://localhost:3001"),
            "X-Title": app_name or os.environ.get("OPENROUTER_APP_NAME", "casejudge-core"),
        }
        # Retries are owned by the pipeline's retry controller
        self.client = OpenAI(
            base_url=self.base_url,
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
            default_headers=headers,
        )

    def generate(self, prompt: str, parameters: CallParameters | None = None) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Input prompt
            parameters: Call-tuning values (client defaults are used for missing ones)

        Returns:
            ModelResponse: The model's response

        Raises:
            GatewayError: On transport or provider failure
        """
        params = parameters or CallParameters()
        request = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": params.temperature if params.temperature is not None else self.temperature,
            "max_tokens": params.max_tokens or self.max_tokens,
            "timeout": params.timeout_seconds or self.timeout_seconds,
        }
        if params.top_p is not None:
            request["top_p"] = params.top_p

        start_time = time.time()
        try:
            response = self.client.chat.completions.create(**request)
        except openai.APITimeoutError as e:
            raise GatewayTimeoutError(f"Request timed out: {e}") from e
        except openai.APIConnectionError as e:
            raise GatewayConnectionError(f"Connection error: {e}") from e
        except openai.APIStatusError as e:
            raise error_for_status(e.status_code, str(e)) from e
        end_time = time.time()

        if not response.choices:
            raise EmptyResponseError("No choices returned from OpenRouter API")
        content = response.choices[0].message.content
        if not content:
            raise EmptyResponseError("No content in response from OpenRouter API")

        # Retrieve token usage
        tokens_in = 0
        tokens_out = 0
        if response.usage:
            tokens_in = response.usage.prompt_tokens or 0
            tokens_out = response.usage.completion_tokens or 0

        model_id = response.model or self.model_name
        return ModelResponse(
            text=content.strip(),
            model_id=model_id,
            latency_ms=int((end_time - start_time) * 1000),
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            cost_estimate=estimate_cost(self.model_name, tokens_in, tokens_out),
        )

    def list_models(self) -> list[dict]:
        """
        Fetch the models offered by the endpoint

        Returns:
            list[dict]: One dictionary per model (id, name, pricing, context_length, ...)

        Raises:
            GatewayError: On transport or provider failure
        """
        try:
            page = self.client.models.list()
        except openai.APITimeoutError as e:
            raise GatewayTimeoutError(f"Request timed out: {e}") from e
        except openai.APIConnectionError as e:
            raise GatewayConnectionError(f"Connection error: {e}") from e
        except openai.APIStatusError as e:
            raise error_for_status(e.status_code, str(e)) from e
        return [model.model_dump() for model in page.data]
