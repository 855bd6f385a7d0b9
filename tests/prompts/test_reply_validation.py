"""
Reply validation tests

Model replies are parsed (with code-fence stripping) and checked against the
template's pydantic schema.
"""

import json

import pytest

from casejudge_core.prompts import build_default_registry
from casejudge_core.prompts.registry import ReplyValidationError, TemplateNotFoundError, strip_code_fences
from casejudge_core.prompts.schemas import JudgeReply, MissingFieldsReply

JUDGE_REPLY = {
    "scores": {"overall": 8, "faithfulness": 9, "completeness": 7, "relevance": 8, "clarity": 6},
    "reasoning": {
        "overall": "Good answer",
        "faithfulness": "No hallucinations",
        "completeness": "Misses the fee schedule",
        "relevance": "On topic",
        "clarity": "Dense but readable",
    },
}


@pytest.fixture
def registry():
    return build_default_registry()


class TestStripCodeFences:
    def test_plain_json_unchanged(self):
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_fence_inside_prose(self):
        raw = 'Here is my evaluation:\n```json\n{"a": 1}\n```\nHope this helps.'
        assert strip_code_fences(raw) == '{"a": 1}'

    def test_surrounding_whitespace(self):
        assert strip_code_fences('  \n{"a": 1}\n ') == '{"a": 1}'


class TestValidate:
    def test_valid_reply(self, registry):
        outcome = registry.validate("judge_evaluation_v1", json.dumps(JUDGE_REPLY))

        assert outcome.is_valid is True
        assert isinstance(outcome.data, JudgeReply)
        assert outcome.data.scores.faithfulness == 9
        assert outcome.errors is None

    def test_fenced_reply(self, registry):
        outcome = registry.validate("judge_evaluation_v1", "```json\n" + json.dumps(JUDGE_REPLY) + "\n```")
        assert outcome.is_valid is True

    def test_not_json(self, registry):
        outcome = registry.validate("judge_evaluation_v1", "not json")

        assert outcome.is_valid is False
        assert outcome.errors[0].startswith("Invalid JSON response:")

    def test_score_out_of_range(self, registry):
        reply = json.loads(json.dumps(JUDGE_REPLY))
        reply["scores"]["clarity"] = 11

        outcome = registry.validate("judge_evaluation_v1", json.dumps(reply))

        assert outcome.is_valid is False
        assert any(error.startswith("scores.clarity:") for error in outcome.errors)

    def test_string_score_rejected(self, registry):
        reply = json.loads(json.dumps(JUDGE_REPLY))
        reply["scores"]["relevance"] = "8"

        assert registry.validate("judge_evaluation_v1", json.dumps(reply)).is_valid is False

    def test_missing_reasoning(self, registry):
        reply = json.loads(json.dumps(JUDGE_REPLY))
        del reply["reasoning"]["clarity"]

        outcome = registry.validate("judge_evaluation_v1", json.dumps(reply))

        assert outcome.is_valid is False
        assert any("reasoning.clarity" in error for error in outcome.errors)

    def test_overall_optional(self, registry):
        reply = json.loads(json.dumps(JUDGE_REPLY))
        del reply["scores"]["overall"]

        outcome = registry.validate("judge_evaluation_v1", json.dumps(reply))

        assert outcome.is_valid is True
        assert outcome.data.scores.overall is None

    def test_task_specific_needs_reasoning(self, registry):
        reply = json.loads(json.dumps(JUDGE_REPLY))
        reply["scores"]["taskSpecific"] = {"compliance": 7}

        outcome = registry.validate("judge_evaluation_v1", json.dumps(reply))

        assert outcome.is_valid is False
        assert "missing task-specific reasoning for: compliance" in outcome.errors[0]

    def test_task_specific_with_reasoning(self, registry):
        reply = json.loads(json.dumps(JUDGE_REPLY))
        reply["scores"]["taskSpecific"] = {"compliance": 7}
        reply["reasoning"]["taskSpecific"] = {"compliance": "Cites the rule"}

        outcome = registry.validate("judge_evaluation_v1", json.dumps(reply))

        assert outcome.is_valid is True
        assert outcome.data.scores.task_specific == {"compliance": 7}

    @pytest.mark.parametrize("task_specific", [None, {"compliance": 7.5}])
    def test_serialized_reply_validates_back(self, registry, task_specific):
        reply = JudgeReply.model_validate(JUDGE_REPLY)
        if task_specific:
            reply.scores.task_specific = task_specific
            reply.reasoning.task_specific = {"compliance": "Cites the rule"}

        outcome = registry.validate("judge_evaluation_v1", reply.model_dump_json(by_alias=True))

        assert outcome.is_valid is True
        assert outcome.data == reply

    def test_unknown_template(self, registry):
        with pytest.raises(TemplateNotFoundError):
            registry.validate("nope", "{}")


class TestParse:
    def test_returns_model(self, registry):
        reply = registry.parse("judge_evaluation_cot_v1", json.dumps(JUDGE_REPLY))
        assert reply.reasoning.relevance == "On topic"

    def test_invalid_raises(self, registry):
        with pytest.raises(ReplyValidationError, match="Invalid AI response format") as exc_info:
            registry.parse("judge_evaluation_v1", "{}")
        assert exc_info.value.errors


class TestCaseReplySchemas:
    def test_step_recommendation(self, registry):
        reply = registry.parse("step_recommendation_v1", json.dumps({
            "recommendations": ["Request payslips"],
            "priority": "high",
            "confidence": 0.8,
        }))
        assert reply.priority == "high"

    def test_step_recommendation_bad_priority(self, registry):
        outcome = registry.validate("step_recommendation_v1", json.dumps({
            "recommendations": ["Request payslips"],
            "priority": "critical",
            "confidence": 0.8,
        }))
        assert outcome.is_valid is False

    def test_missing_fields_camel_case(self):
        reply = MissingFieldsReply.model_validate({
            "missingFields": [{
                "fieldName": "income",
                "fieldType": "number",
                "importance": "required",
                "suggestedAction": "Ask for the latest payslip",
            }],
            "completenessScore": 70,
            "priorityActions": ["Collect income"],
            "estimatedCompletionTime": "2 days",
        })
        assert reply.missing_fields[0].field_name == "income"
        assert reply.completeness_score == 70

    def test_completeness_score_bounds(self):
        with pytest.raises(ValueError):
            MissingFieldsReply.model_validate({
                "missingFields": [],
                "completenessScore": 120,
                "priorityActions": [],
                "estimatedCompletionTime": "now",
            })
