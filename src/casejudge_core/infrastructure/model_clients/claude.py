"""
Anthropic Claude model client
"""

import os
import time

import anthropic
from anthropic import Anthropic

from casejudge_core.domain.value_objects import CallParameters, ModelResponse
from casejudge_core.infrastructure.model_clients.base import (
    EmptyResponseError,
    GatewayConnectionError,
    GatewayTimeoutError,
    ModelClient,
    error_for_status,
    estimate_cost,
)


class ClaudeClient(ModelClient):
    """Claude client using the Anthropic API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        timeout_seconds: float = 30,
        max_tokens: int = 4000,
        temperature: float = 0.7,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-sonnet-4-5-20250929)
            api_key: Anthropic API key (falls back to environment variable if not specified)
            timeout_seconds: Default request timeout (default: 30)
            max_tokens: Default maximum number of output tokens (default: 4000)
            temperature: Default sampling temperature (default: 0.7)
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature

        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        # SDK retries disabled: the pipeline's retry controller decides
        self.client = Anthropic(api_key=self.api_key, timeout=timeout_seconds, max_retries=0)

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
            "max_tokens": params.max_tokens or self.max_tokens,
            "temperature": params.temperature if params.temperature is not None else self.temperature,
            "messages": [{"role": "user", "content": prompt}],
            "timeout": params.timeout_seconds or self.timeout_seconds,
        }
        if params.top_p is not None:
            request["top_p"] = params.top_p

        start_time = time.time()
        try:
            response = self.client.messages.create(**request)
        except anthropic.APITimeoutError as e:
            raise GatewayTimeoutError(f"Request timed out: {e}") from e
        except anthropic.APIConnectionError as e:
            raise GatewayConnectionError(f"Connection error: {e}") from e
        except anthropic.APIStatusError as e:
            raise error_for_status(e.status_code, str(e)) from e
        end_time = time.time()

        text_blocks = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        output = "".join(text_blocks).strip()
        if not output:
            raise EmptyResponseError("No content in response from Anthropic API")

        # Retrieve token usage
        input_tokens = getattr(response.usage, "input_tokens", 0) or 0
        output_tokens = getattr(response.usage, "output_tokens", 0) or 0

        return ModelResponse(
            text=output,
            model_id=getattr(response, "model", None) or self.model_name,
            latency_ms=int((end_time - start_time) * 1000),
            tokens_in=input_tokens,
            tokens_out=output_tokens,
            cost_estimate=estimate_cost(self.model_name, input_tokens, output_tokens),
        )
