from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .errors import ReviewPackError
from .models import ExecutionPlan, Finding, Location, ReviewSession, ScoreReport
from .registry import ModuleRegistry
from .scoring.fingerprint import compute_fingerprint
from .utils import json_dumps, safe_read_text, sha256_hex, write_text_file


def _read_json(path: Path, kind: str) -> Dict[str, Any]:
    if not path.exists():
        raise ReviewPackError(f"{kind} file not found: {path}")
    try:
        payload = json.loads(safe_read_text(path))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ReviewPackError(f"{kind} file corrupted ({exc})") from exc
    if not isinstance(payload, dict):
        raise ReviewPackError(f"{kind} file must contain a JSON object")
    return payload


def plan_to_json(plan: ExecutionPlan) -> str:
    return json_dumps(plan.to_dict())


def write_plan(path: Path, plan: ExecutionPlan) -> Path:
    return write_text_file(path, plan_to_json(plan) + "\n")


def read_plan(path: Path, registry: ModuleRegistry) -> ExecutionPlan:
    """
    Rebuild a plan from its JSON form against the current registry.

    Unknown ids raise UnknownModuleError. Total tokens are recomputed from
    the registry so a stale file cannot understate the declared size.
    """
    payload = _read_json(path, "Plan")
    ids = payload.get("ordered_modules")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise ReviewPackError("Plan file: ordered_modules must be a list of ids")
    modules = tuple(registry.get(module_id) for module_id in ids)
    seen: set[str] = set()
    for module in modules:
        if module.id in seen:
            raise ReviewPackError(f"Plan file: {module.id} is listed more than once")
        missing = [dep for dep in module.dependencies if dep not in seen]
        if missing:
            raise ReviewPackError(
                f"Plan file: {module.id} appears before its dependencies {missing}"
            )
        seen.add(module.id)
    warnings = [str(w) for w in payload.get("warnings") or []]
    return ExecutionPlan(
        ordered_modules=modules,
        total_tokens=sum(m.token_estimate for m in modules),
        warnings=tuple(warnings),
    )


def _parse_location(raw: Any) -> Optional[Location]:
    if not raw:
        return None
    if isinstance(raw, str):
        file_part, _, line_part = raw.partition(":")
        return Location(file=file_part, line=int(line_part) if line_part.isdigit() else None)
    if isinstance(raw, dict) and raw.get("file"):
        line = raw.get("line")
        return Location(file=str(raw["file"]), line=int(line) if line is not None else None)
    raise ReviewPackError(f"Invalid finding location: {raw!r}")


def parse_finding(raw: Dict[str, Any]) -> Finding:
    required = ("module_id", "severity", "category", "description")
    missing = [key for key in required if not raw.get(key)]
    if missing:
        raise ReviewPackError(f"Finding missing fields: {missing}")
    try:
        return Finding(
            module_id=str(raw["module_id"]),
            severity=raw["severity"],
            category=str(raw["category"]),
            description=str(raw["description"]),
            location=_parse_location(raw.get("location")),
        )
    except ValueError as exc:
        raise ReviewPackError(f"Invalid finding: {exc}") from exc


def read_session_file(path: Path) -> Tuple[Optional[str], List[Finding]]:
    """Load ``{session_id?, findings: [...]}`` as recorded by a findings source."""
    payload = _read_json(path, "Session")
    raw_findings = payload.get("findings")
    if not isinstance(raw_findings, list):
        raise ReviewPackError("Session file: findings must be a list")
    findings = []
    for idx, item in enumerate(raw_findings):
        if not isinstance(item, dict):
            raise ReviewPackError(f"Session file: finding {idx + 1} is not an object")
        findings.append(parse_finding(item))
    session_id = payload.get("session_id")
    return (str(session_id) if session_id else None), findings


def finding_to_dict(finding: Finding) -> Dict[str, Any]:
    location = None
    if finding.location:
        location = {"file": finding.location.file, "line": finding.location.line}
    return {
        "module_id": finding.module_id,
        "severity": finding.severity.value,
        "category": finding.category,
        "description": finding.description,
        "location": location,
        "fingerprint": compute_fingerprint(finding),
    }


def session_to_dict(session: ReviewSession, report: Optional[ScoreReport] = None) -> Dict[str, Any]:
    findings = [finding_to_dict(f) for f in session.findings]
    findings_blob = json_dumps(findings).encode("utf-8")
    report = report or session.report
    return {
        "schema_version": "1.0",
        "session_id": session.session_id,
        "status": session.status.value,
        "findings": findings,
        "findings_sha256": sha256_hex(findings_blob),
        "report": report.to_dict() if report else None,
    }


def write_session_report(path: Path, session: ReviewSession) -> Path:
    return write_text_file(path, json_dumps(session_to_dict(session)) + "\n")
