"""
casejudge-core CLI Runner

Command-line access to the judge pipeline.

Usage:
    python -m casejudge_core.runner import-interactions --input data/interactions.json
    python -m casejudge_core.runner evaluate --interaction <id> --model openai/gpt-4o --detailed
    python -m casejudge_core.runner batch --interactions id1,id2 --delay 1.0
    python -m casejudge_core.runner report --output results/report.csv
    python -m casejudge_core.runner models --recommended-only
    python -m casejudge_core.runner health --models openai/gpt-4o,claude-haiku-4-5-20251001

Template files for evaluate options:
    python -m casejudge_core.runner criteria-template -o criteria.json
    python -m casejudge_core.runner few-shot-template -o few_shot.json
    python -m casejudge_core.runner config-template -o judge_config.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict
from functools import partial
from pathlib import Path
from typing import Callable

from dotenv import load_dotenv

from casejudge_core.domain.constants import CORE_DIMENSIONS
from casejudge_core.domain.entities import EvaluationOptions, EvaluationRequest, EvaluationResult
from casejudge_core.infrastructure.model_clients.factory import create_client
from casejudge_core.infrastructure.model_clients.openrouter import OpenRouterClient
from casejudge_core.infrastructure.repository import CsvRepository
from casejudge_core.pipeline_config import PipelineConfig, load_config
from casejudge_core.prompts import build_default_registry
from casejudge_core.request_loader import (
    EvaluationFileConfig,
    apply_options,
    config_template,
    criteria_template,
    few_shot_template,
    load_custom_criteria,
    load_evaluation_config,
    load_few_shot_examples,
    load_interaction_ids,
    load_interactions,
    write_json,
)
from casejudge_core.use_cases.evaluation_models import list_evaluation_models
from casejudge_core.use_cases.health_check import run_health_check, run_judge_health_check
from casejudge_core.use_cases.judge_evaluation import (
    EvaluationFailedError,
    JudgeEvaluator,
    evaluate_batch,
)
from casejudge_core.use_cases.reporting import summarize_evaluations

logger = logging.getLogger(__name__)


def _add_evaluation_options(parser: argparse.ArgumentParser) -> None:
    """Options shared by evaluate and batch"""
    parser.add_argument("-m", "--model", default=None, help="Judge model (default: JUDGE_MODEL from .env)")
    parser.add_argument("--custom-criteria", default=None, help="JSON file with custom criteria definitions")
    parser.add_argument("--few-shot", default=None, help="JSON file with few-shot examples")
    parser.add_argument("--config", default=None, help="Evaluation configuration file (see config-template)")
    parser.add_argument(
        "--chain-of-thought",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use the chain-of-thought judge template (default: JUDGE_CHAIN_OF_THOUGHT from .env)",
    )
    parser.add_argument("--max-retries", type=int, default=None, help="Maximum number of judge call attempts")
    parser.add_argument("--timeout", type=int, default=None, help="Per-attempt timeout in milliseconds")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="casejudge-core: LLM-as-a-judge evaluation of recorded AI interactions",
    )
    parser.add_argument("--data-dir", default=None, help="Data directory (default: CASEJUDGE_DATA_DIR from .env)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate = subparsers.add_parser("evaluate", help="Evaluate one AI interaction")
    evaluate.add_argument("-i", "--interaction", required=True, help="AI interaction ID to evaluate")
    _add_evaluation_options(evaluate)
    evaluate.add_argument("-o", "--output", default=None, help="Save result to JSON file")
    evaluate.add_argument("--detailed", action="store_true", help="Show detailed reasoning in output")

    batch = subparsers.add_parser("batch", help="Evaluate several AI interactions one after another")
    source = batch.add_mutually_exclusive_group(required=True)
    source.add_argument("--interactions", default=None, help="Comma-separated interaction IDs")
    source.add_argument("--interaction-file", default=None, help="JSON file with an array of interaction IDs")
    _add_evaluation_options(batch)
    batch.add_argument("--delay", type=float, default=0.0, help="Seconds to wait between evaluations")

    report = subparsers.add_parser("report", help="Summarize stored evaluations per judge model")
    report.add_argument("-o", "--output", default=None, help="Save the summary to a CSV file")

    models = subparsers.add_parser("models", help="List available evaluation models")
    models.add_argument("--recommended-only", action="store_true", help="Show only recommended models")
    models.add_argument("--provider", default=None, help="Filter by provider")
    models.add_argument("-o", "--output", default=None, help="Save models list to JSON file")

    health = subparsers.add_parser("health", help="Check connectivity to models")
    health.add_argument("--models", default=None, help="Comma-separated model names (default: judge model)")

    imports = subparsers.add_parser("import-interactions", help="Import recorded AI interactions from JSON")
    imports.add_argument("--input", required=True, help="JSON file with an array of interactions")

    for name, help_text in (
        ("criteria-template", "Generate a custom criteria template file"),
        ("few-shot-template", "Generate a few-shot examples template file"),
        ("config-template", "Generate a configuration template file"),
    ):
        template_parser = subparsers.add_parser(name, help=help_text)
        template_parser.add_argument("-o", "--output", required=True, help="Output file path")

    return parser.parse_args(argv)


def _print_result(result: EvaluationResult, detailed: bool = False) -> None:
    metadata = result.metadata
    print("\n=== Evaluation Result ===\n")
    print(f"  ID:             {result.id}")
    print(f"  Interaction ID: {result.interaction_id}")
    print(f"  Model:          {result.evaluation_model}")
    print(f"  Evaluated at:   {metadata.evaluated_at.isoformat()}")
    print(f"  Duration:       {metadata.evaluation_duration_ms}ms")
    print(f"  Confidence:     {metadata.confidence * 100:.1f}%")
    if metadata.evaluation_cost:
        print(f"  Cost:           ${metadata.evaluation_cost:.4f}")
    if metadata.evaluation_tokens:
        print(f"  Tokens:         {metadata.evaluation_tokens}")

    print("\n  Scores:")
    print(f"    {'overall':<20} {result.scores.overall:g}/10")
    for name, score in result.scores.core().items():
        print(f"    {name:<20} {score:g}/10")
    for name, score in result.scores.task_specific.items():
        print(f"    {name:<20} {score:g}/10 (task-specific)")

    if metadata.flags:
        print(f"\n  Flags: {', '.join(metadata.flags)}")

    if detailed:
        print("\n  Reasoning:")
        print(f"    overall: {result.reasoning.overall}")
        for name in CORE_DIMENSIONS:
            print(f"    {name}: {getattr(result.reasoning, name)}")
        for name, text in result.reasoning.task_specific.items():
            print(f"    {name}: {text}")
    print()


def _file_config(args: argparse.Namespace) -> EvaluationFileConfig:
    if not args.config:
        return EvaluationFileConfig()
    return load_evaluation_config(args.config)


def _build_requests(
    args: argparse.Namespace,
    config: PipelineConfig,
    interaction_ids: list[str],
) -> list[EvaluationRequest]:
    """Merge .env defaults, the configuration file and command-line flags"""
    file_config = _file_config(args)

    options = EvaluationOptions(
        include_chain_of_thought=config.judge.chain_of_thought,
        max_retries=config.retry.max_attempts,
        timeout_ms=config.judge.timeout_ms,
    )
    options = apply_options(options, file_config.options)
    overrides = {}
    if args.chain_of_thought is not None:
        overrides["include_chain_of_thought"] = args.chain_of_thought
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if args.timeout is not None:
        overrides["timeout_ms"] = args.timeout
    options = apply_options(options, overrides)

    custom_criteria = file_config.custom_criteria
    if args.custom_criteria:
        custom_criteria = load_custom_criteria(args.custom_criteria)
    few_shot_examples = file_config.few_shot_examples
    if args.few_shot:
        few_shot_examples = load_few_shot_examples(args.few_shot)

    model = args.model or file_config.default_model or config.judge.model
    return [
        EvaluationRequest(
            interaction_id=interaction_id,
            evaluation_model=model,
            custom_criteria=custom_criteria,
            few_shot_examples=few_shot_examples,
            options=options,
        )
        for interaction_id in interaction_ids
    ]


def _build_evaluator(
    config: PipelineConfig,
    repository: CsvRepository,
) -> JudgeEvaluator:
    return JudgeEvaluator(
        build_default_registry(),
        partial(create_client, config=config),
        repository,
        thresholds=config.judge.thresholds(),
        base_delay_seconds=config.retry.base_delay_seconds,
        max_delay_seconds=config.retry.max_delay_seconds,
    )


def _model_listing(config: PipelineConfig) -> Callable[[], list[dict]] | None:
    gateway = config.gateway
    try:
        client = OpenRouterClient(
            gateway.default_model,
            base_url=gateway.base_url,
            api_key=gateway.api_key or None,
            timeout_seconds=gateway.timeout_seconds,
            site_url=gateway.site_url,
            app_name=gateway.app_name,
        )
    except ValueError as e:
        logger.warning("Model listing unavailable: %s", e)
        return None
    return client.list_models


def cmd_evaluate(args: argparse.Namespace, config: PipelineConfig, repository: CsvRepository) -> int:
    request = _build_requests(args, config, [args.interaction])[0]
    evaluator = _build_evaluator(config, repository)

    print(f"\n=== Evaluating interaction {request.interaction_id} with {request.evaluation_model} ===")
    try:
        result = evaluator.evaluate(request)
    except EvaluationFailedError as e:
        print(f"ERROR: {e}")
        return 1

    _print_result(result, args.detailed)
    if args.output:
        path = write_json(result.to_dict(), args.output)
        print(f"  Result saved to: {path}")
    return 0


def cmd_batch(args: argparse.Namespace, config: PipelineConfig, repository: CsvRepository) -> int:
    if args.interaction_file:
        interaction_ids = load_interaction_ids(args.interaction_file)
    else:
        interaction_ids = [i.strip() for i in args.interactions.split(",") if i.strip()]
    requests = _build_requests(args, config, interaction_ids)
    evaluator = _build_evaluator(config, repository)

    if requests:
        judge_ok, judge_error = run_judge_health_check(
            requests[0].evaluation_model,
            partial(create_client, config=config),
        )
        if not judge_ok:
            print(f"ERROR: {judge_error}")
            return 1

    print(f"\n=== Running Evaluations ({len(requests)} total) ===\n")
    results, failures = evaluate_batch(evaluator, requests, delay_seconds=args.delay)
    print(f"\n  Succeeded: {len(results)}")
    print(f"  Failed:    {len(failures)}")
    print()
    return 1 if failures and not results else 0


def cmd_report(args: argparse.Namespace, config: PipelineConfig, repository: CsvRepository) -> int:
    summary_df = summarize_evaluations(repository.list_evaluations())
    if summary_df.empty:
        print("No evaluations found.")
        return 0

    print("\n=== Evaluation Summary ===\n")
    print(f"  {'Model':<40} {'count':>6} {'overall':>8} {'confidence':>11}")
    print(f"  {'-'*40} {'-'*6} {'-'*8} {'-'*11}")
    for _, row in summary_df.iterrows():
        print(
            f"  {row['evaluation_model']:<40} "
            f"{row['num_evaluations']:>6} "
            f"{row['mean_overall']:>8.2f} "
            f"{row['mean_confidence']:>11.2f}"
        )
    print()

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        summary_df.to_csv(output_path, index=False)
        print(f"  Summary: {output_path}\n")
    return 0


def cmd_models(args: argparse.Namespace, config: PipelineConfig, repository: CsvRepository) -> int:
    models = list_evaluation_models(
        _model_listing(config),
        provider=args.provider,
        recommended_only=args.recommended_only,
    )
    if not models:
        print("No models found matching the criteria.")
        return 0

    print(f"\n=== {len(models)} evaluation model(s) ===\n")
    for model in models:
        print(f"  {model.name} ({model.id})")
        print(f"    Provider:    {model.provider}")
        print(f"    Recommended: {'yes' if model.recommended else 'no'}")
        if model.cost_per_1k_tokens:
            print(f"    Cost per 1k tokens: ${model.cost_per_1k_tokens:.4f}")
        if model.max_tokens:
            print(f"    Max tokens:  {model.max_tokens:,}")
    print()

    if args.output:
        path = write_json(
            [asdict(model) for model in models],
            args.output,
        )
        print(f"  Models list saved to: {path}")
    return 0


def cmd_health(args: argparse.Namespace, config: PipelineConfig, repository: CsvRepository) -> int:
    if args.models:
        models = [m.strip() for m in args.models.split(",") if m.strip()]
    else:
        models = [config.judge.model]
    available_models, _ = run_health_check(models, partial(create_client, config=config))
    return 0 if len(available_models) == len(models) else 1


def cmd_import_interactions(args: argparse.Namespace, config: PipelineConfig, repository: CsvRepository) -> int:
    interactions = load_interactions(args.input)
    for interaction in interactions:
        repository.save_interaction(interaction)
    print(f"Imported {len(interactions)} interaction(s) into {repository.interactions_path}")
    return 0


def _write_template(data: object, output: str, label: str, usage_flag: str) -> int:
    path = write_json(data, output)
    print(f"{label} template created at: {path}")
    print("\nEdit the template file and use it with:")
    print(f"  python -m casejudge_core.runner evaluate {usage_flag} {path} --interaction <id> --model <model>")
    return 0


COMMANDS = {
    "evaluate": cmd_evaluate,
    "batch": cmd_batch,
    "report": cmd_report,
    "models": cmd_models,
    "health": cmd_health,
    "import-interactions": cmd_import_interactions,
}

TEMPLATES = {
    "criteria-template": (criteria_template, "Custom criteria", "--custom-criteria"),
    "few-shot-template": (few_shot_template, "Few-shot examples", "--few-shot"),
    "config-template": (config_template, "Configuration", "--config"),
}


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command in TEMPLATES:
        build, label, usage_flag = TEMPLATES[args.command]
        sys.exit(_write_template(build(), args.output, label, usage_flag))

    config = load_config()
    repository = CsvRepository(args.data_dir or config.storage.data_dir)
    try:
        exit_code = COMMANDS[args.command](args, config, repository)
    except (OSError, ValueError, KeyError) as e:
        print(f"ERROR: {e}")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
