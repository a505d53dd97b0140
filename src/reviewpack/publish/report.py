from __future__ import annotations

from typing import List, Optional

from ..constants import SEVERITY_ACTIONS, SEVERITY_ORDER, Limits
from ..formatting import format_int, format_percentage, truncate
from ..models import ExecutionPlan, GateResult, ReviewSession, RiskLevel, ScoreReport

RISK_ICONS = {
    RiskLevel.CRITICAL: "🔴",
    RiskLevel.HIGH: "🟠",
    RiskLevel.MEDIUM: "🟡",
    RiskLevel.LOW: "🟢",
}


def render_plan_text(plan: ExecutionPlan) -> str:
    """One module id per line, then the token total and any warnings."""
    lines = list(plan.module_ids)
    lines.append(f"total_tokens={plan.total_tokens}")
    for warning in plan.warnings:
        lines.append(f"warning: {warning}")
    return "\n".join(lines) + "\n"


def render_score_report(
    report: ScoreReport,
    session: Optional[ReviewSession] = None,
    gate_result: Optional[GateResult] = None,
    top_n: int = 5,
) -> str:
    """Render a ScoreReport as structured markdown text."""
    counts = report.counts_by_severity
    icon = RISK_ICONS.get(report.risk_level, "❓")

    md: List[str] = [f"## Review Score: {icon} {report.risk_level.value.upper()}", ""]
    if session is not None:
        md.append(f"**Session:** `{session.session_id}`")
    md.extend(
        [
            f"**Risk Level:** {report.risk_level.value}",
            f"**Checklist:** {format_percentage(report.checklist_percentage)}",
        ]
    )
    if report.checklist_percentage is not None:
        md.append(
            f"**Checklist Items:** {format_int(report.checklist_items_failing)} failing "
            f"of {format_int(report.checklist_items_total)} "
            f"({', '.join(report.checklist_modules)})"
        )
    if gate_result is not None:
        md.append(f"**Gate:** {gate_result.status.value.upper()} ({gate_result.reason})")

    md.extend(
        [
            "",
            "| Severity | Count | Action |",
            "|----------|------:|--------|",
        ]
    )
    for sev in ("P0", "P1", "P2", "P3"):
        md.append(f"| {sev} | {format_int(counts.get(sev, 0))} | {SEVERITY_ACTIONS[sev]} |")
    md.append(f"| Total | {format_int(report.total_findings)} | |")
    md.append("")

    if session is not None and session.findings:
        md.append("### Top Findings")
        md.append("")
        top = sorted(
            session.findings,
            key=lambda f: (SEVERITY_ORDER.get(f.severity.value, 99), f.module_id),
        )[: max(int(top_n), 0)]
        for finding in top:
            where = f" `{finding.location}`" if finding.location else ""
            description = truncate(finding.description, Limits.MAX_DESCRIPTION_LENGTH)
            md.append(
                f"- **{finding.severity.value}** [{finding.module_id}]{where} · "
                f"**{finding.category}**: {description}"
            )
        md.append("")

    return "\n".join(md)
