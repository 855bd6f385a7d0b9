"""
Vertex AI (Google GenAI SDK) model client
"""

import os
import time

from google import genai
from google.api_core import exceptions as google_exceptions
from google.genai import errors as genai_errors
from google.genai.types import GenerateContentConfig, HttpOptions

from casejudge_core.domain.value_objects import CallParameters, ModelResponse
from casejudge_core.infrastructure.model_clients.base import (
    AuthenticationError,
    BadRequestError,
    EmptyResponseError,
    GatewayError,
    GatewayTimeoutError,
    ModelClient,
    RateLimitError,
    error_for_status,
    estimate_cost,
)


def _translate_google_error(error: Exception) -> GatewayError:
    """Map a Google SDK exception to the gateway error taxonomy"""
    if isinstance(error, genai_errors.APIError):
        return error_for_status(error.code, str(error))
    if isinstance(error, google_exceptions.ResourceExhausted):
        return RateLimitError(str(error), 429)
    if isinstance(error, google_exceptions.DeadlineExceeded):
        return GatewayTimeoutError(str(error), 504)
    if isinstance(error, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
        return AuthenticationError(str(error), getattr(error, "code", None))
    if isinstance(error, google_exceptions.InvalidArgument):
        return BadRequestError(str(error), 400)
    return GatewayError(str(error), getattr(error, "code", None))


class VertexAIClient(ModelClient):
    """Model client using Google GenAI SDK (via Vertex AI)"""

    def __init__(
        self,
        model_name: str,
        project_id: str | None = None,
        location: str | None = None,
        timeout_seconds: float = 30,
        max_tokens: int = 4000,
        temperature: float = 0.7,
    ):
        """
        Args:
            model_name: Model name (e.g. gemini-2.5-pro, gemini-2.5-flash)
            project_id: GCP project ID (falls back to environment variable if not specified)
            location: Region (falls back to GCP_LOCATION, then "global")
            timeout_seconds: Default request timeout (default: 30)
            max_tokens: Default maximum number of output tokens (default: 4000)
            temperature: Default sampling temperature (default: 0.7)
        """
        self.model_name = model_name
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or os.environ.get("GCP_LOCATION", "global")
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature

        if not self.project_id:
            raise ValueError("GCP_PROJECT_ID is not set")

        # Timeout is configured via HttpOptions (milliseconds)
        self.client = genai.Client(
            vertexai=True,
            project=self.project_id,
            location=self.location,
            http_options=HttpOptions(timeout=int(timeout_seconds * 1000)),
        )

    def _build_config(self, params: CallParameters) -> GenerateContentConfig:
        timeout_seconds = params.timeout_seconds or self.timeout_seconds
        return GenerateContentConfig(
            temperature=params.temperature if params.temperature is not None else self.temperature,
            max_output_tokens=params.max_tokens or self.max_tokens,
            top_p=params.top_p,
            http_options=HttpOptions(timeout=int(timeout_seconds * 1000)),
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
        config = self._build_config(parameters or CallParameters())

        start_time = time.time()
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=config,
            )
        except (genai_errors.APIError, google_exceptions.GoogleAPICallError) as e:
            raise _translate_google_error(e) from e
        end_time = time.time()

        text = response.text
        if not text:
            raise EmptyResponseError("No content in response from Vertex AI")

        # Retrieve token usage
        input_tokens = 0
        output_tokens = 0
        if getattr(response, "usage_metadata", None):
            input_tokens = getattr(response.usage_metadata, "prompt_token_count", 0) or 0
            output_tokens = getattr(response.usage_metadata, "candidates_token_count", 0) or 0

        return ModelResponse(
            text=text.strip(),
            model_id=self.model_name,
            latency_ms=int((end_time - start_time) * 1000),
            tokens_in=input_tokens,
            tokens_out=output_tokens,
            cost_estimate=estimate_cost(self.model_name, input_tokens, output_tokens),
        )
