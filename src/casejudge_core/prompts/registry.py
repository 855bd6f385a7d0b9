"""
Prompt template registry

Holds the mapping from template id to render/validate behavior so that every
caller shares one substitution and reply-extraction algorithm.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import re
import threading
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ValidationError

from casejudge_core.domain.entities import PromptTemplate
from casejudge_core.domain.value_objects import RenderedPrompt, ValidationOutcome

logger = logging.getLogger(__name__)

CIRCULAR_MARKER = "[Circular Reference]"

# Any {{...}} token in a template body; cannot span other braces
_TOKEN = re.compile(r"\{\{([^{}]*)\}\}")
_KEY = re.compile(r"[A-Za-z_][\w.]*")
_DOUBLE_OPEN = re.compile(r"\{(?=\{)")
_DOUBLE_CLOSE = re.compile(r"\}(?=\})")

# A reply that is entirely one fenced block, or a fenced block inside prose
_WHOLE_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)
_INNER_FENCE = re.compile(r"```[\w-]*[ \t]*\n(.*?)\n[ \t]*```", re.DOTALL)


class TemplateNotFoundError(LookupError):
    """Raised when a template id is not registered"""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class ReplyValidationError(ValueError):
    """Raised when a model reply is not valid JSON or breaks the template schema"""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"Invalid AI response format: {'; '.join(self.errors)}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        return value.isoformat(timespec="milliseconds")
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _json_default(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return _format_datetime(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        # Shallow so the encoder's own cycle check sees nested references
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    return str(obj)


def format_value(value: Any, _seen: frozenset[int] = frozenset()) -> str:
    """
    Format a value for placeholder substitution.

    None renders as an empty string, datetimes as ISO-8601 timestamps,
    sequences as their formatted items joined with ", ", and mappings,
    dataclasses and pydantic models as indented JSON. A structure that
    contains itself renders as "[Circular Reference]".
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        if id(value) in _seen:
            return CIRCULAR_MARKER
        seen = _seen | {id(value)}
        return ", ".join(format_value(item, seen) for item in value)
    if isinstance(value, (Mapping, BaseModel)) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    ):
        if id(value) in _seen:
            return CIRCULAR_MARKER
        try:
            return json.dumps(value, indent=2, ensure_ascii=False, default=_json_default)
        except (ValueError, RecursionError):
            return CIRCULAR_MARKER
        except TypeError:
            # Keys json cannot encode (tuples, dates, enums)
            return json.dumps(_with_string_keys(value, frozenset()), indent=2,
                              ensure_ascii=False, default=_json_default)
    return str(value)


def _with_string_keys(value: Any, seen: frozenset[int]) -> Any:
    """Copy of value whose mapping keys are all JSON-encodable"""
    is_dataclass = dataclasses.is_dataclass(value) and not isinstance(value, type)
    if not (isinstance(value, (Mapping, list, tuple, set, frozenset, BaseModel)) or is_dataclass):
        return value
    if id(value) in seen:
        return CIRCULAR_MARKER
    seen = seen | {id(value)}
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True)
    elif is_dataclass:
        value = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {
            key if isinstance(key, (str, int, float, bool)) or key is None else str(key):
                _with_string_keys(item, seen)
            for key, item in value.items()
        }
    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    return [_with_string_keys(item, seen) for item in value]


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    """Resolve a placeholder key, following dots into nested mappings and attributes"""
    if key in data:
        return data[key]
    current: Any = data
    for part in key.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
        if current is None:
            return None
    return current


def render_template(body: str, data: Mapping[str, Any]) -> str:
    """
    Substitute {{key}} placeholders in body.

    Placeholders without a value and other {{...}} tokens of the body are
    dropped. Double braces that remain afterwards, including ones carried in
    by substituted values, are split ("{{" -> "{ {") so no token survives
    and no substituted text is lost.
    """
    def replace(match: re.Match) -> str:
        key = match.group(1).strip()
        if not _KEY.fullmatch(key):
            return ""
        return format_value(_lookup(data, key))

    text = _TOKEN.sub(replace, body)
    text = _DOUBLE_OPEN.sub("{ ", text)
    return _DOUBLE_CLOSE.sub("} ", text)


def strip_code_fences(raw: str) -> str:
    """Remove markdown code-fence wrapping around a JSON reply (best effort)"""
    text = raw.strip()
    match = _WHOLE_FENCE.match(text)
    if match:
        return match.group(1).strip()
    match = _INNER_FENCE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _format_errors(error: ValidationError) -> list[str]:
    errors = []
    for issue in error.errors():
        path = ".".join(str(part) for part in issue["loc"]) or "root"
        errors.append(f"{path}: {issue['msg']}")
    return errors


class TemplateRegistry:
    """
    Registry of prompt templates keyed by id.

    Writers hold a single lock and swap in a new mapping; readers use whichever
    mapping is current and never block.
    """

    def __init__(self, templates: list[PromptTemplate] | None = None):
        self._templates: dict[str, PromptTemplate] = {}
        self._lock = threading.Lock()
        for template in templates or []:
            self.register(template)

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def _store(self, template: PromptTemplate) -> None:
        with self._lock:
            templates = dict(self._templates)
            templates[template.id] = template
            self._templates = templates

    def register(self, template: PromptTemplate) -> PromptTemplate:
        """Insert or overwrite a template by id (updated_at is set to now)"""
        stored = dataclasses.replace(template, updated_at=_utcnow())
        self._store(stored)
        logger.debug("Registered template %s (%s)", stored.id, stored.version)
        return stored

    def find(self, template_id: str) -> PromptTemplate | None:
        return self._templates.get(template_id)

    def get(self, template_id: str) -> PromptTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def list_templates(self) -> list[PromptTemplate]:
        return list(self._templates.values())

    def templates_by_operation(self, operation: str) -> list[PromptTemplate]:
        return [t for t in self._templates.values() if t.operation == operation]

    def latest_by_name(self, name: str) -> PromptTemplate | None:
        """The most recently updated template with the given name"""
        candidates = [t for t in self._templates.values() if t.name == name]
        if not candidates:
            return None
        return max(candidates, key=lambda t: (t.updated_at, t.created_at))

    def update(self, template_id: str, **changes: Any) -> PromptTemplate:
        """
        Replace fields of a registered template

        Args:
            template_id: Template to update (the id itself never changes)
            **changes: PromptTemplate fields to replace

        Returns:
            PromptTemplate: The stored template

        Raises:
            TemplateNotFoundError: If the id is unknown
        """
        changes.pop("id", None)
        with self._lock:
            existing = self._templates.get(template_id)
            if existing is None:
                raise TemplateNotFoundError(template_id)
            updated = dataclasses.replace(existing, **changes, updated_at=_utcnow())
            templates = dict(self._templates)
            templates[template_id] = updated
            self._templates = templates
        return updated

    def delete(self, template_id: str) -> bool:
        with self._lock:
            if template_id not in self._templates:
                return False
            templates = dict(self._templates)
            del templates[template_id]
            self._templates = templates
        return True

    def render(self, template_id: str, data: Mapping[str, Any]) -> str:
        """
        Render a template with data

        Raises:
            TemplateNotFoundError: If the id is unknown
        """
        return render_template(self.get(template_id).body, data)

    def render_prompt(self, template_id: str, data: Mapping[str, Any]) -> RenderedPrompt:
        """Render a template together with its default call parameters"""
        template = self.get(template_id)
        return RenderedPrompt(
            text=render_template(template.body, data),
            parameters=dict(template.default_parameters),
        )

    def parameters(self, template_id: str) -> dict:
        """Default call parameters of a template ({} when the id is unknown)"""
        template = self._templates.get(template_id)
        return dict(template.default_parameters) if template else {}

    def validate(self, template_id: str, raw_reply: str) -> ValidationOutcome:
        """
        Parse a model reply and check it against the template's schema

        Args:
            template_id: Template whose output_schema applies
            raw_reply: Raw text returned by the model

        Returns:
            ValidationOutcome: Validated pydantic instance, or error strings

        Raises:
            TemplateNotFoundError: If the id is unknown
        """
        template = self.get(template_id)
        try:
            parsed = json.loads(strip_code_fences(raw_reply))
        except json.JSONDecodeError as e:
            return ValidationOutcome(is_valid=False, errors=[f"Invalid JSON response: {e}"])

        try:
            data = template.output_schema.model_validate(parsed)
        except ValidationError as e:
            return ValidationOutcome(is_valid=False, errors=_format_errors(e))
        return ValidationOutcome(is_valid=True, data=data)

    def parse(self, template_id: str, raw_reply: str) -> BaseModel:
        """
        Validate a reply and return the schema instance

        Raises:
            TemplateNotFoundError: If the id is unknown
            ReplyValidationError: If the reply is invalid
        """
        outcome = self.validate(template_id, raw_reply)
        if not outcome.is_valid:
            raise ReplyValidationError(outcome.errors or ["Validation failed"])
        return outcome.data
