from __future__ import annotations

from .models import GateResult, GateStatus, ScoreReport


def blocking_severities(severity_gate: str) -> set[str]:
    gate = (severity_gate or "none").strip().upper()
    if gate == "P0":
        return {"P0"}
    if gate == "P1":
        return {"P0", "P1"}
    if gate == "P2":
        return {"P0", "P1", "P2"}
    return set()


def evaluate_gate(report: ScoreReport, severity_gate: str) -> GateResult:
    """Decide whether a finalized report blocks at the given severity gate."""
    counts = report.counts()
    blocking = blocking_severities(severity_gate)
    block = any(report.counts_by_severity.get(sev, 0) > 0 for sev in blocking)

    if block:
        return GateResult(
            status=GateStatus.BLOCKED,
            reason=(
                f"Found {counts.p0} P0, {counts.p1} P1, {counts.p2} P2 findings "
                f"(gate={severity_gate})"
            ),
            block_merge=True,
            counts=counts,
        )
    return GateResult(
        status=GateStatus.PASSED,
        reason=f"No blocking findings (P0={counts.p0}, P1={counts.p1}, P2={counts.p2})",
        block_merge=False,
        counts=counts,
    )
