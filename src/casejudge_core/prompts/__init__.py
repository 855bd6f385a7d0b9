"""
Prompt templates

Registry, reply schemas, and the built-in judge and case templates.
"""

from casejudge_core.prompts.case_templates import case_templates
from casejudge_core.prompts.judge_templates import judge_templates
from casejudge_core.prompts.registry import (
    ReplyValidationError,
    TemplateNotFoundError,
    TemplateRegistry,
    format_value,
    render_template,
    strip_code_fences,
)


def build_default_registry() -> TemplateRegistry:
    """Create a registry holding the built-in judge and case templates"""
    return TemplateRegistry(judge_templates() + case_templates())


__all__ = [
    "ReplyValidationError",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "build_default_registry",
    "case_templates",
    "format_value",
    "judge_templates",
    "render_template",
    "strip_code_fences",
]
