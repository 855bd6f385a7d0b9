"""
Judge evaluation

Scores a recorded interaction with an LLM judge: resolve the interaction,
render the judge prompt, call the judge model with backoff retry, validate
the reply, derive overall score / confidence / flags, and persist one
EvaluationResult.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from casejudge_core.domain.constants import (
    DEFAULT_BASE_DELAY_SECONDS,
    JUDGE_COT_TEMPLATE_ID,
    JUDGE_TEMPLATE_ID,
    MAX_BACKOFF_SECONDS,
)
from casejudge_core.domain.entities import (
    EvaluationMetadata,
    EvaluationReasoning,
    EvaluationRequest,
    EvaluationResult,
    EvaluationScores,
    Interaction,
)
from casejudge_core.domain.value_objects import CallParameters, ModelResponse, QualityThresholds
from casejudge_core.infrastructure.model_clients.base import ModelClient
from casejudge_core.infrastructure.repository import EvaluationRepository
from casejudge_core.infrastructure.retry import with_retry
from casejudge_core.prompts.judge_templates import format_custom_criteria, format_few_shot_examples
from casejudge_core.prompts.registry import TemplateRegistry
from casejudge_core.prompts.schemas import JudgeReply
from casejudge_core.use_cases.scoring import derive_metrics

logger = logging.getLogger(__name__)


class InteractionNotFoundError(LookupError):
    """Raised when the interaction to evaluate does not exist"""

    def __init__(self, interaction_id: str):
        self.interaction_id = interaction_id
        super().__init__(f"AI interaction with ID {interaction_id} not found")


class EvaluationFailedError(Exception):
    """Raised for any failure of an evaluation (the root cause is chained)"""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Failed to evaluate output: {cause}")


class JudgeEvaluator:
    """
    LLM-as-a-judge evaluation pipeline

    One evaluate() call runs render -> retried judge call -> validate ->
    derive -> persist in order. A failure at any stage leaves nothing
    persisted.
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        create_client_fn: Callable[[str], ModelClient],
        repository: EvaluationRepository,
        *,
        thresholds: QualityThresholds | None = None,
        base_delay_seconds: float = DEFAULT_BASE_DELAY_SECONDS,
        max_delay_seconds: float = MAX_BACKOFF_SECONDS,
    ) -> None:
        """
        Args:
            registry: Template registry holding the judge templates
            create_client_fn: Function to create a model client for the judge model
            repository: Source of interactions and sink of evaluations
            thresholds: Derivation thresholds (defaults when not specified)
            base_delay_seconds: Delay after the first failed judge call
            max_delay_seconds: Cap on a single retry delay
        """
        self._registry = registry
        self._create_client = create_client_fn
        self._repository = repository
        self._thresholds = thresholds or QualityThresholds()
        self._base_delay = base_delay_seconds
        self._max_delay = max_delay_seconds

    def evaluate(
        self,
        request: EvaluationRequest,
        cancel_event: threading.Event | None = None,
    ) -> EvaluationResult:
        """
        Evaluate one interaction

        Args:
            request: Evaluation request
            cancel_event: When set, pending judge retries are abandoned

        Returns:
            EvaluationResult: The persisted evaluation

        Raises:
            EvaluationFailedError: On any failure (cause chained)
        """
        start_time = time.time()
        try:
            return self._evaluate(request, start_time, cancel_event)
        except Exception as e:
            logger.error("Evaluation of interaction %s failed: %s", request.interaction_id, e)
            raise EvaluationFailedError(e) from e

    def _evaluate(
        self,
        request: EvaluationRequest,
        start_time: float,
        cancel_event: threading.Event | None,
    ) -> EvaluationResult:
        interaction = self._repository.get_interaction(request.interaction_id)
        if interaction is None:
            raise InteractionNotFoundError(request.interaction_id)

        options = request.options
        template_id = JUDGE_COT_TEMPLATE_ID if options.include_chain_of_thought else JUDGE_TEMPLATE_ID
        rendered = self._registry.render_prompt(template_id, self._template_data(interaction, request))
        parameters = CallParameters.from_mapping(
            rendered.parameters,
            timeout_seconds=options.timeout_ms / 1000,
        )

        client = self._create_client(request.evaluation_model)
        response: ModelResponse = with_retry(
            lambda: client.generate(rendered.text, parameters),
            max_attempts=options.max_retries,
            base_delay=self._base_delay,
            max_delay=self._max_delay,
            cancel_event=cancel_event,
        )

        reply: JudgeReply = self._registry.parse(template_id, response.text)

        result = self._build_result(request, reply, response, start_time)
        self._repository.save_evaluation(result)
        logger.info(
            "Evaluated interaction %s with %s: overall=%s confidence=%.2f flags=%s",
            request.interaction_id,
            request.evaluation_model,
            result.scores.overall,
            result.metadata.confidence,
            ",".join(result.metadata.flags) or "-",
        )
        return result

    @staticmethod
    def _template_data(interaction: Interaction, request: EvaluationRequest) -> dict:
        return {
            "original_input": interaction.prompt,
            "ai_response": interaction.response,
            "custom_criteria": format_custom_criteria(request.custom_criteria),
            "few_shot_examples": format_few_shot_examples(request.few_shot_examples),
        }

    def _build_result(
        self,
        request: EvaluationRequest,
        reply: JudgeReply,
        response: ModelResponse,
        start_time: float,
    ) -> EvaluationResult:
        raw_scores = reply.scores.model_dump()
        metrics = derive_metrics(raw_scores, self._thresholds)
        overall = reply.scores.overall if reply.scores.overall is not None else metrics.overall

        scores = EvaluationScores(
            overall=overall,
            faithfulness=reply.scores.faithfulness,
            completeness=reply.scores.completeness,
            relevance=reply.scores.relevance,
            clarity=reply.scores.clarity,
            task_specific=dict(reply.scores.task_specific or {}),
        )
        reasoning = EvaluationReasoning(
            overall=reply.reasoning.overall,
            faithfulness=reply.reasoning.faithfulness,
            completeness=reply.reasoning.completeness,
            relevance=reply.reasoning.relevance,
            clarity=reply.reasoning.clarity,
            task_specific=dict(reply.reasoning.task_specific or {}),
        )
        metadata = EvaluationMetadata(
            evaluated_at=datetime.now(timezone.utc),
            evaluation_duration_ms=int((time.time() - start_time) * 1000),
            confidence=metrics.confidence,
            flags=metrics.flags,
            evaluation_cost=response.cost_estimate,
            evaluation_tokens=response.total_tokens or None,
        )
        return EvaluationResult(
            id=str(uuid.uuid4()),
            interaction_id=request.interaction_id,
            evaluation_model=request.evaluation_model,
            scores=scores,
            reasoning=reasoning,
            metadata=metadata,
        )


def evaluate_batch(
    evaluator: JudgeEvaluator,
    requests: list[EvaluationRequest],
    delay_seconds: float = 0.0,
    cancel_event: threading.Event | None = None,
) -> tuple[list[EvaluationResult], list[tuple[str, str]]]:
    """
    Evaluate requests one after another.

    A failed request is reported and skipped; the rest continue.

    Args:
        evaluator: Judge evaluator
        requests: Requests to evaluate, in order
        delay_seconds: Pause between consecutive requests
        cancel_event: When set, remaining requests are not started

    Returns:
        tuple: (successful results, list of (interaction_id, error message))
    """
    results = []
    failures = []
    for index, request in enumerate(requests):
        if cancel_event is not None and cancel_event.is_set():
            break
        if index > 0 and delay_seconds > 0:
            time.sleep(delay_seconds)

        print(f"  [{index + 1}/{len(requests)}] {request.interaction_id}... ", end="", flush=True)
        try:
            result = evaluator.evaluate(request, cancel_event=cancel_event)
        except EvaluationFailedError as e:
            print("FAILED")
            print(f"    Error: {str(e)[:200]}")
            failures.append((request.interaction_id, str(e)))
            continue
        print(f"overall={result.scores.overall:g} confidence={result.metadata.confidence:.2f}")
        results.append(result)
    return results, failures
