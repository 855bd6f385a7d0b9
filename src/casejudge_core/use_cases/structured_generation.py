"""
Structured generation

Shared render -> retried model call -> validate path for the case
operations. Every call is recorded as an Interaction, successful or not,
so the judge pipeline can score it later.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import BaseModel

from casejudge_core.domain.constants import DEFAULT_BASE_DELAY_SECONDS, DEFAULT_MAX_RETRIES, MAX_BACKOFF_SECONDS
from casejudge_core.domain.entities import Interaction
from casejudge_core.domain.value_objects import CallParameters
from casejudge_core.infrastructure.model_clients.base import ModelClient
from casejudge_core.infrastructure.repository import EvaluationRepository
from casejudge_core.infrastructure.retry import with_retry
from casejudge_core.prompts.registry import TemplateRegistry

logger = logging.getLogger(__name__)

# Wording used in failure messages ("Failed to <action>: ...")
OPERATION_ACTIONS = {
    "generate_summary": "generate overall summary",
    "generate_recommendation": "generate step recommendation",
    "analyze_application": "analyze application",
    "generate_final_summary": "generate final summary",
    "validate_completeness": "validate case completeness",
    "detect_missing_fields": "detect missing fields",
}


class GenerationFailedError(Exception):
    """Raised when a structured generation fails at any stage (cause chained)"""

    def __init__(self, action: str, cause: BaseException):
        self.action = action
        self.cause = cause
        super().__init__(f"Failed to {action}: {cause}")


@dataclass(frozen=True)
class GenerationResult:
    """Validated reply plus the interaction that produced it"""
    data: BaseModel
    interaction: Interaction


def action_for(operation: str) -> str:
    """Human-readable action name of an operation"""
    return OPERATION_ACTIONS.get(operation, operation.replace("_", " "))


class StructuredGenerator:
    """Runs template-driven generations against one model client"""

    def __init__(
        self,
        registry: TemplateRegistry,
        client: ModelClient,
        repository: EvaluationRepository,
        *,
        max_attempts: int = DEFAULT_MAX_RETRIES,
        base_delay_seconds: float = DEFAULT_BASE_DELAY_SECONDS,
        max_delay_seconds: float = MAX_BACKOFF_SECONDS,
        timeout_seconds: float | None = None,
    ) -> None:
        self._registry = registry
        self._client = client
        self._repository = repository
        self._max_attempts = max_attempts
        self._base_delay = base_delay_seconds
        self._max_delay = max_delay_seconds
        self._timeout_seconds = timeout_seconds

    def generate(
        self,
        template_id: str,
        data: Mapping[str, Any],
        *,
        case_id: str,
        step_context: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> GenerationResult:
        """
        Render a template, call the model and validate its reply

        Args:
            template_id: Template to use
            data: Placeholder values
            case_id: Case the generation belongs to
            step_context: Process step the generation was made for
            cancel_event: When set, pending retries are abandoned

        Returns:
            GenerationResult: Validated reply and the recorded interaction

        Raises:
            GenerationFailedError: On any failure (cause chained)
        """
        start_time = time.time()
        template = self._registry.find(template_id)
        operation = template.operation if template else template_id
        interaction = Interaction(
            id=str(uuid.uuid4()),
            case_id=case_id,
            operation=operation,
            prompt="",
            response="",
            model=self._client.model_name,
            step_context=step_context,
            prompt_template=template_id,
            prompt_version=template.version if template else None,
        )

        try:
            rendered = self._registry.render_prompt(template_id, data)
            interaction.prompt = rendered.text
            parameters = CallParameters.from_mapping(rendered.parameters, self._timeout_seconds)
            response = with_retry(
                lambda: self._client.generate(rendered.text, parameters),
                max_attempts=self._max_attempts,
                base_delay=self._base_delay,
                max_delay=self._max_delay,
                cancel_event=cancel_event,
            )
            interaction.response = response.text
            interaction.model = response.model_id
            interaction.tokens_used = response.total_tokens
            interaction.cost = response.cost_estimate
            reply = self._registry.parse(template_id, response.text)
        except Exception as e:
            interaction.success = False
            interaction.error = str(e)
            interaction.duration_ms = int((time.time() - start_time) * 1000)
            self._log_interaction(interaction)
            raise GenerationFailedError(action_for(operation), e) from e

        interaction.duration_ms = int((time.time() - start_time) * 1000)
        self._log_interaction(interaction)
        return GenerationResult(data=reply, interaction=interaction)

    def _log_interaction(self, interaction: Interaction) -> None:
        # Recording is secondary to the generation itself
        try:
            self._repository.save_interaction(interaction)
        except Exception as e:
            logger.warning("Failed to log AI interaction %s: %s", interaction.id, e)
