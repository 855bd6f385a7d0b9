"""
Request Loader

Loads evaluation inputs (custom criteria, few-shot examples, configuration
files, interaction imports) from JSON files and writes the starter templates
for them.
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from casejudge_core.domain.constants import CORE_DIMENSIONS, DEFAULT_EVALUATION_MODELS
from casejudge_core.domain.entities import EvaluationOptions, FewShotExample, Interaction

# Option keys accepted in configuration files (camelCase as written by
# config-template, snake_case also accepted)
_OPTION_KEYS = {
    "includeChainOfThought": "include_chain_of_thought",
    "include_chain_of_thought": "include_chain_of_thought",
    "maxRetries": "max_retries",
    "max_retries": "max_retries",
    "timeoutMs": "timeout_ms",
    "timeout_ms": "timeout_ms",
}


@dataclass
class EvaluationFileConfig:
    """Contents of an evaluation configuration file"""
    options: dict[str, Any] = field(default_factory=dict)
    default_model: str | None = None
    custom_criteria: dict[str, str] | None = None
    few_shot_examples: list[FewShotExample] | None = None


def _read_json(file_path: str | Path) -> Any:
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json(data: Any, file_path: str | Path) -> Path:
    """Write data as indented JSON, creating parent directories"""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return path


def parse_custom_criteria(data: Any) -> dict[str, str]:
    """
    Validate a custom-criteria mapping (criterion name -> description)

    Raises:
        ValueError: If data is not a mapping of strings to strings
    """
    if not isinstance(data, dict):
        raise ValueError("Custom criteria must be a JSON object of name -> description")
    for name, description in data.items():
        if not isinstance(description, str) or not description.strip():
            raise ValueError(f"Custom criterion '{name}' needs a non-empty description")
    return dict(data)


def parse_few_shot_examples(data: Any) -> list[FewShotExample]:
    """
    Create FewShotExample objects from a list of dictionaries

    Raises:
        ValueError: If data is not a list or a score is outside 1-10
        KeyError: If a required field is missing
    """
    if not isinstance(data, list):
        raise ValueError("Few-shot examples must be a JSON array")
    examples = []
    for index, item in enumerate(data):
        for required in ("input", "output", "score", "reasoning"):
            if required not in item:
                raise KeyError(f"Required field '{required}' is missing in few-shot example {index}")
        examples.append(FewShotExample(
            input=item["input"],
            output=item["output"],
            score=float(item["score"]),
            reasoning=item["reasoning"],
        ))
    return examples


def load_custom_criteria(file_path: str) -> dict[str, str]:
    """Load custom criteria from a JSON file"""
    return parse_custom_criteria(_read_json(file_path))


def load_few_shot_examples(file_path: str) -> list[FewShotExample]:
    """Load few-shot examples from a JSON file"""
    return parse_few_shot_examples(_read_json(file_path))


def load_evaluation_config(file_path: str) -> EvaluationFileConfig:
    """
    Load an evaluation configuration file (as produced by config-template)

    Args:
        file_path: Path to the configuration JSON file

    Returns:
        EvaluationFileConfig: Parsed configuration (unknown option keys are ignored)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a section has the wrong shape
    """
    data = _read_json(file_path)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a JSON object: {file_path}")

    options = {
        _OPTION_KEYS[key]: value
        for key, value in (data.get("options") or {}).items()
        if key in _OPTION_KEYS
    }
    custom = data.get("customCriteria", data.get("custom_criteria"))
    few_shot = data.get("fewShotExamples", data.get("few_shot_examples"))
    return EvaluationFileConfig(
        options=options,
        default_model=data.get("defaultModel", data.get("default_model")),
        custom_criteria=parse_custom_criteria(custom) if custom else None,
        few_shot_examples=parse_few_shot_examples(few_shot) if few_shot else None,
    )


def apply_options(base: EvaluationOptions, overrides: dict[str, Any]) -> EvaluationOptions:
    """Return base with the given option values replaced"""
    return replace(base, **overrides) if overrides else base


def _parse_timestamp(value: Any) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _pick(item: dict, snake: str, camel: str, default: Any = None) -> Any:
    if snake in item:
        return item[snake]
    return item.get(camel, default)


def parse_interactions(data: Any) -> list[Interaction]:
    """
    Create Interaction objects from a list of dictionaries (snake_case or camelCase keys)

    Raises:
        ValueError: If data is not a list
        KeyError: If a required field is missing
    """
    if not isinstance(data, list):
        raise ValueError("Interactions must be a JSON array")
    interactions = []
    for index, item in enumerate(data):
        for required in ("id", "prompt", "response"):
            if required not in item:
                raise KeyError(f"Required field '{required}' is missing in interaction {index}")
        interactions.append(Interaction(
            id=str(item["id"]),
            case_id=str(_pick(item, "case_id", "caseId", "")),
            operation=item.get("operation", "unknown"),
            prompt=item["prompt"],
            response=item["response"],
            model=item.get("model", "unknown"),
            duration_ms=int(_pick(item, "duration_ms", "duration", 0) or 0),
            success=bool(item.get("success", True)),
            tokens_used=_pick(item, "tokens_used", "tokensUsed"),
            cost=item.get("cost"),
            error=item.get("error"),
            timestamp=_parse_timestamp(item.get("timestamp")),
            step_context=_pick(item, "step_context", "stepContext"),
            prompt_template=_pick(item, "prompt_template", "promptTemplate"),
            prompt_version=_pick(item, "prompt_version", "promptVersion"),
        ))
    return interactions


def load_interactions(file_path: str) -> list[Interaction]:
    """Load recorded interactions from a JSON file"""
    return parse_interactions(_read_json(file_path))


def load_interaction_ids(file_path: str) -> list[str]:
    """Load a JSON array of interaction ids (or of objects with an "id" field)"""
    data = _read_json(file_path)
    if not isinstance(data, list):
        raise ValueError("Interaction id file must contain a JSON array")
    return [str(item["id"]) if isinstance(item, dict) else str(item) for item in data]


def criteria_template() -> dict[str, str]:
    """Starter custom-criteria file"""
    return {
        "technical_accuracy": "How technically accurate and factually correct is the response?",
        "user_friendliness": "How user-friendly and accessible is the response for the target audience?",
        "actionability": "How actionable and practical are the recommendations provided?",
        "compliance": "How well does the response adhere to relevant regulations and standards?",
        "efficiency": "How efficiently does the response address the core requirements?",
    }


def few_shot_template() -> list[dict]:
    """Starter few-shot examples file"""
    return [
        {
            "input": "Generate a summary for this case",
            "output": (
                "This is a comprehensive summary that covers all the key points of the case, "
                "including the applicant information, submission details, and current status. "
                "The summary is well-structured and provides clear next steps."
            ),
            "score": 9,
            "reasoning": (
                "Excellent coverage of all key points with clear structure and actionable next steps. "
                "Very high quality response."
            ),
        },
        {
            "input": "Analyze application completeness",
            "output": (
                "The application appears to be missing several required documents including proof of "
                "identity and supporting documentation. Please request these from the applicant."
            ),
            "score": 8,
            "reasoning": "Accurate identification of missing elements with clear action items. Good practical response.",
        },
        {
            "input": "Provide recommendations for this case",
            "output": (
                "Based on the case details, I recommend proceeding with standard processing workflow. "
                "The application meets basic requirements."
            ),
            "score": 6,
            "reasoning": (
                "Provides basic recommendation but lacks detail and specific reasoning. "
                "Could be more comprehensive."
            ),
        },
    ]


def config_template() -> dict:
    """Starter evaluation configuration file"""
    return {
        "options": {
            "includeChainOfThought": True,
            "maxRetries": 3,
            "timeoutMs": 30000,
        },
        "defaultModel": DEFAULT_EVALUATION_MODELS[0]["id"],
        "defaultCriteria": list(CORE_DIMENSIONS),
        "customCriteria": {
            "technical_accuracy": "How technically accurate and correct is the response?",
            "user_friendliness": "How user-friendly and accessible is the response?",
        },
        "fewShotExamples": few_shot_template()[:2],
    }
