from __future__ import annotations

from reviewpack.gate import blocking_severities, evaluate_gate
from reviewpack.models import GateStatus, RiskLevel, ScoreReport


def _report(p0: int = 0, p1: int = 0, p2: int = 0, p3: int = 0) -> ScoreReport:
    return ScoreReport(
        counts_by_severity={"P0": p0, "P1": p1, "P2": p2, "P3": p3},
        risk_level=RiskLevel.LOW,
    )


def test_blocking_severities() -> None:
    assert blocking_severities("P0") == {"P0"}
    assert blocking_severities("p1") == {"P0", "P1"}
    assert blocking_severities("P2") == {"P0", "P1", "P2"}
    assert blocking_severities("none") == set()


def test_p0_blocks_on_p1_gate() -> None:
    result = evaluate_gate(_report(p0=1), "P1")
    assert result.status == GateStatus.BLOCKED
    assert result.block_merge is True
    assert result.counts.p0 == 1


def test_p1_passes_on_p0_gate() -> None:
    result = evaluate_gate(_report(p1=3), "P0")
    assert result.status == GateStatus.PASSED
    assert result.block_merge is False


def test_p3_never_blocks() -> None:
    assert evaluate_gate(_report(p3=10), "P2").block_merge is False


def test_none_gate_never_blocks() -> None:
    assert evaluate_gate(_report(p0=5), "none").status == GateStatus.PASSED
