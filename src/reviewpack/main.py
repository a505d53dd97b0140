from __future__ import annotations

import argparse
import json
import sys
import uuid
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .compose import Composer, DirectoryContentLoader
from .config import ReviewPackConfig
from .constants import ExitCode
from .errors import ConfigError, ReviewPackError
from .gate import evaluate_gate
from .logging import PackLogger
from .models import SelectionCriteria
from .packaging import plan_to_json, read_plan, read_session_file, session_to_dict, write_plan, write_session_report
from .publish import render_plan_text, render_score_report
from .registry import ModuleRegistry, build_registry, builtin_manifest, load_manifest
from .resolver import Resolver
from .scoring import FindingsAggregator
from .utils import json_dumps, write_text_file

SEVERITY_GATES = ("P0", "P1", "P2", "none")


def _split_ids(values: Optional[List[str]]) -> set[str]:
    """Accept repeated flags and comma-separated lists."""
    ids: set[str] = set()
    for value in values or []:
        ids.update(part.strip() for part in value.split(",") if part.strip())
    return ids


def load_registry(config: ReviewPackConfig) -> ModuleRegistry:
    if config.manifest_path is not None:
        manifest = load_manifest(config.manifest_path)
    else:
        manifest = builtin_manifest()
    return build_registry(manifest)


def _cmd_resolve(args: argparse.Namespace, config: ReviewPackConfig, logger: PackLogger) -> int:
    registry = load_registry(config)
    budget = args.budget if args.budget is not None else config.default_token_budget
    max_modules = args.max_modules if args.max_modules is not None else config.default_max_modules
    try:
        criteria = SelectionCriteria(
            explicit_ids=_split_ids(args.explicit),
            goal_tags=_split_ids(args.goal),
            token_budget=budget,
            max_modules=max_modules,
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid selection: {exc}") from exc
    plan = Resolver(registry, logger=logger).resolve(criteria)

    if args.plan_out:
        write_plan(Path(args.plan_out), plan)
        logger.info("plan_written", path=str(args.plan_out))

    sys.stdout.write(plan_to_json(plan) + "\n" if args.json else render_plan_text(plan))
    return ExitCode.SUCCESS


def _cmd_compose(args: argparse.Namespace, config: ReviewPackConfig, logger: PackLogger) -> int:
    registry = load_registry(config)
    plan = read_plan(Path(args.plan), registry)
    content_dir = Path(args.content_dir) if args.content_dir else config.content_dir
    composer = Composer(
        DirectoryContentLoader(content_dir, registry=registry),
        separator=config.separator,
        tolerance=config.token_tolerance,
        chars_per_token=config.chars_per_token,
        logger=logger,
    )
    artifact, manifest = composer.compose(plan)

    if args.output:
        write_text_file(Path(args.output), artifact)
        logger.info("artifact_written", path=str(args.output), measured_tokens=manifest.measured_tokens)
    else:
        sys.stdout.write(artifact)
    if args.manifest_out:
        write_text_file(Path(args.manifest_out), json_dumps(manifest.to_dict()) + "\n")
    for warning in manifest.warnings:
        logger.warning("composition_warning", detail=warning)
    return ExitCode.SUCCESS


def _cmd_score(args: argparse.Namespace, config: ReviewPackConfig, logger: PackLogger) -> int:
    registry = load_registry(config)
    session_id, findings = read_session_file(Path(args.session))

    aggregator = FindingsAggregator(registry, logger=logger)
    session = aggregator.new_session(session_id)
    for finding in findings:
        aggregator.record_finding(session, finding)
    report = aggregator.finalize(session)

    severity_gate = args.severity_gate or config.severity_gate
    gate_result = evaluate_gate(report, severity_gate) if severity_gate != "none" else None

    if args.format == "json":
        payload = session_to_dict(session, report)
        if gate_result is not None:
            payload["gate"] = {
                "status": gate_result.status.value,
                "reason": gate_result.reason,
                "block_merge": gate_result.block_merge,
            }
        sys.stdout.write(json_dumps(payload) + "\n")
    else:
        sys.stdout.write(render_score_report(report, session=session, gate_result=gate_result))

    if args.report_out:
        write_session_report(Path(args.report_out), session)

    if gate_result is not None and gate_result.block_merge:
        logger.warning("gate_blocked", reason=gate_result.reason)
        return ExitCode.BLOCKED
    return ExitCode.SUCCESS


def _cmd_modules(args: argparse.Namespace, config: ReviewPackConfig, logger: PackLogger) -> int:
    registry = load_registry(config)
    modules = list(registry.lookup_by_tag(args.tag)) if args.tag else registry.modules()
    if args.json:
        sys.stdout.write(json.dumps([m.to_dict() for m in modules], indent=2) + "\n")
        return ExitCode.SUCCESS
    for module in modules:
        deps = ",".join(module.dependencies) or "-"
        sys.stdout.write(
            f"{module.id}\t{module.category.value}\t{module.token_estimate}\t{deps}\n"
        )
    return ExitCode.SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reviewpack",
        description="Compose review modules under a token budget and score review findings.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Resolve a module selection into an execution plan")
    p_resolve.add_argument("--explicit", action="append", help="Module ids (comma-separated, repeatable)")
    p_resolve.add_argument("--goal", action="append", help="Goal tags (comma-separated, repeatable)")
    p_resolve.add_argument("--budget", type=int, help="Token budget")
    p_resolve.add_argument("--max-modules", type=int, help="Maximum number of modules")
    p_resolve.add_argument("--plan-out", help="Write the plan JSON to this file")
    p_resolve.add_argument("--json", action="store_true", help="Print the plan as JSON")
    p_resolve.set_defaults(handler=_cmd_resolve)

    p_compose = sub.add_parser("compose", help="Concatenate module content for a plan")
    p_compose.add_argument("--plan", required=True, help="Plan JSON written by 'resolve --plan-out'")
    p_compose.add_argument("--content-dir", help="Directory with module markdown files")
    p_compose.add_argument("--output", help="Write the artifact here instead of stdout")
    p_compose.add_argument("--manifest-out", help="Write the composition manifest JSON here")
    p_compose.set_defaults(handler=_cmd_compose)

    p_score = sub.add_parser("score", help="Finalize a review session and print its score")
    p_score.add_argument("--session", required=True, help="Session JSON with recorded findings")
    p_score.add_argument("--format", choices=("text", "json"), default="text")
    p_score.add_argument("--severity-gate", choices=SEVERITY_GATES, help="Exit 1 when findings reach this severity")
    p_score.add_argument("--report-out", help="Write the finalized session JSON here")
    p_score.set_defaults(handler=_cmd_score)

    p_modules = sub.add_parser("modules", help="List registered modules")
    p_modules.add_argument("--tag", help="Only modules carrying this tag")
    p_modules.add_argument("--json", action="store_true")
    p_modules.set_defaults(handler=_cmd_modules)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    run_id = str(uuid.uuid4())
    logger = PackLogger(run_id).bind(command=args.command)

    try:
        try:
            config = ReviewPackConfig()
        except ValidationError as exc:
            raise ConfigError(f"Configuration error: {exc}") from exc
        logger = PackLogger(run_id, level=config.log_level).bind(command=args.command)
        with logger.stage(args.command):
            return int(args.handler(args, config, logger))
    except ReviewPackError as exc:
        logger.error(str(exc), error_type=type(exc).__name__, exit_code=int(exc.exit_code))
        return int(exc.exit_code)
    except OSError as exc:
        logger.error(f"I/O error: {exc}", error_type=type(exc).__name__)
        return int(ExitCode.ERROR)


if __name__ == "__main__":
    sys.exit(main())
