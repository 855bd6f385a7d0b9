"""
Structured generation tests

Each generation is recorded as an interaction, whether it succeeds or not.
"""

import json

import pytest
from unittest.mock import MagicMock, patch

from casejudge_core.domain.value_objects import ModelResponse
from casejudge_core.infrastructure.model_clients.base import BadRequestError, RateLimitError
from casejudge_core.infrastructure.repository import InMemoryRepository
from casejudge_core.prompts import build_default_registry
from casejudge_core.prompts.schemas import StepRecommendationReply
from casejudge_core.use_cases.structured_generation import (
    GenerationFailedError,
    StructuredGenerator,
    action_for,
)

RECOMMENDATION = json.dumps({
    "recommendations": ["Request the two most recent payslips", "Verify the lease"],
    "priority": "medium",
    "confidence": 0.8,
})

CASE_DATA = {
    "step": "document_review",
    "case_id": "C-42",
    "status": "in_review",
    "application_type": "housing_benefit",
    "applicant_name": "Ada Example",
    "recent_summaries": ["Applicant submitted lease", "Income unclear"],
    "recent_notes": None,
}


def _client(*side_effects, model_name="openai/gpt-4o-mini"):
    client = MagicMock()
    client.model_name = model_name
    responses = [
        effect if isinstance(effect, Exception) else ModelResponse(
            text=effect, model_id=model_name, latency_ms=120, tokens_in=400, tokens_out=60, cost_estimate=0.0001,
        )
        for effect in side_effects
    ]
    client.generate.side_effect = responses
    return client


def _generator(client, repository=None, **kwargs):
    repository = repository if repository is not None else InMemoryRepository()
    return StructuredGenerator(build_default_registry(), client, repository, **kwargs), repository


class TestActionFor:
    def test_known_operation(self):
        assert action_for("generate_recommendation") == "generate step recommendation"

    def test_unknown_operation(self):
        assert action_for("triage_case") == "triage case"


class TestStructuredGenerator:
    def test_success_records_interaction(self):
        client = _client(RECOMMENDATION)
        generator, repository = _generator(client)

        result = generator.generate("step_recommendation_v1", CASE_DATA, case_id="C-42", step_context="document_review")

        assert isinstance(result.data, StepRecommendationReply)
        assert result.data.priority == "medium"
        interaction = repository.get_interaction(result.interaction.id)
        assert interaction is result.interaction
        assert interaction.success is True
        assert interaction.operation == "generate_recommendation"
        assert interaction.prompt_template == "step_recommendation_v1"
        assert interaction.prompt_version == "1.0"
        assert interaction.step_context == "document_review"
        assert interaction.tokens_used == 460
        assert interaction.response == RECOMMENDATION
        assert 'For step "document_review"' in interaction.prompt
        assert "{{" not in interaction.prompt

    def test_uses_template_parameters(self):
        client = _client(RECOMMENDATION)
        generator, _ = _generator(client, timeout_seconds=20)

        generator.generate("step_recommendation_v1", CASE_DATA, case_id="C-42")

        parameters = client.generate.call_args.args[1]
        assert parameters.timeout_seconds == 20
        assert parameters.temperature is not None

    def test_invalid_reply_recorded_as_failure(self):
        client = _client("I cannot help with that")
        generator, repository = _generator(client)

        with pytest.raises(GenerationFailedError, match="Failed to generate step recommendation") as exc_info:
            generator.generate("step_recommendation_v1", CASE_DATA, case_id="C-42")

        interactions = list(repository._interactions.values())
        assert len(interactions) == 1
        assert interactions[0].success is False
        assert interactions[0].response == "I cannot help with that"
        assert "Invalid AI response format" in interactions[0].error
        assert exc_info.value.action == "generate step recommendation"

    def test_unknown_template(self):
        client = _client(RECOMMENDATION)
        generator, repository = _generator(client)

        with pytest.raises(GenerationFailedError, match="Template not found: nope"):
            generator.generate("nope", {}, case_id="C-42")

        client.generate.assert_not_called()
        interactions = list(repository._interactions.values())
        assert interactions[0].success is False

    @patch("casejudge_core.infrastructure.retry.time.sleep")
    def test_retries_transient_errors(self, mock_sleep):
        client = _client(RateLimitError("slow down", 429), RECOMMENDATION)
        generator, _ = _generator(client, max_attempts=3)

        result = generator.generate("step_recommendation_v1", CASE_DATA, case_id="C-42")

        assert client.generate.call_count == 2
        assert result.interaction.success is True

    @patch("casejudge_core.infrastructure.retry.time.sleep")
    def test_terminal_error_not_retried(self, mock_sleep):
        client = _client(BadRequestError("400 Bad Request", 400))
        generator, _ = _generator(client, max_attempts=3)

        with pytest.raises(GenerationFailedError):
            generator.generate("step_recommendation_v1", CASE_DATA, case_id="C-42")

        assert client.generate.call_count == 1

    def test_logging_failure_does_not_fail_generation(self):
        client = _client(RECOMMENDATION)
        repository = MagicMock()
        repository.save_interaction.side_effect = OSError("disk full")
        generator, _ = _generator(client, repository=repository)

        result = generator.generate("step_recommendation_v1", CASE_DATA, case_id="C-42")

        assert result.data.priority == "medium"
        repository.save_interaction.assert_called_once()
