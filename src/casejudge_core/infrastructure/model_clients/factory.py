"""
Model client factory

Creates the appropriate client instance based on the model name.
"""

from __future__ import annotations

from casejudge_core.infrastructure.model_clients.base import ModelClient
from casejudge_core.infrastructure.model_clients.claude import ClaudeClient
from casejudge_core.infrastructure.model_clients.openrouter import OpenRouterClient
from casejudge_core.infrastructure.model_clients.vertex_ai import VertexAIClient
from casejudge_core.pipeline_config import PipelineConfig, load_config


def create_client(model_name: str, config: PipelineConfig | None = None) -> ModelClient:
    """
    Create the appropriate client based on the model name

    Args:
        model_name: Model name
        config: PipelineConfig (loads from env if not provided)

    Returns:
        ModelClient: The appropriate client instance
    """
    if config is None:
        config = load_config()

    gateway = config.gateway
    timeout = gateway.timeout_seconds

    if model_name.startswith("claude"):
        return ClaudeClient(
            model_name,
            api_key=gateway.anthropic_api_key or None,
            timeout_seconds=timeout,
        )
    elif model_name.startswith("gemini"):
        return VertexAIClient(
            model_name,
            project_id=gateway.gcp_project_id or None,
            timeout_seconds=timeout,
        )
    else:
        return OpenRouterClient(
            model_name,
            base_url=gateway.base_url,
            api_key=gateway.api_key or None,
            timeout_seconds=timeout,
            site_url=gateway.site_url,
            app_name=gateway.app_name,
        )
