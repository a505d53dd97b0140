from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from ..constants import Category, Severity
from ..models import Finding, RiskLevel, ScoreReport
from ..registry import ModuleRegistry

# Severities that count as a failing checklist item.
FAILING_SEVERITIES = frozenset({Severity.P0, Severity.P1, Severity.P2})


def count_by_severity(findings: Iterable[Finding]) -> Dict[str, int]:
    counts = {sev.value: 0 for sev in Severity}
    for finding in findings:
        counts[finding.severity.value] += 1
    return counts


def classify_risk(counts: Dict[str, int]) -> RiskLevel:
    """P0=fix now, P1=fix this week, P2=fix in 30 days, P3=backlog."""
    if counts.get("P0", 0) > 0:
        return RiskLevel.CRITICAL
    if counts.get("P1", 0) > 0:
        return RiskLevel.HIGH
    if counts.get("P2", 0) > 0:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def checklist_score(
    findings: Iterable[Finding],
    registry: ModuleRegistry,
) -> Tuple[Optional[float], int, int, List[str]]:
    """
    Score checklist modules referenced by the findings.

    Returns (percentage, total_items, failing_items, module_ids). Percentage
    is None when no finding touches a checklist module with an item count.
    """
    modules: Dict[str, int] = {}
    failing = 0
    for finding in findings:
        module = registry.get(finding.module_id)
        if module.category != Category.CHECKLIST or not module.checklist_items:
            continue
        modules.setdefault(module.id, module.checklist_items)
        if finding.severity in FAILING_SEVERITIES:
            failing += 1

    if not modules:
        return None, 0, 0, []

    total = sum(modules.values())
    passing = max(total - failing, 0)
    percentage = round(passing / total * 100, 1)
    return percentage, total, failing, list(modules)


def compute_score_report(findings: Iterable[Finding], registry: ModuleRegistry) -> ScoreReport:
    findings = list(findings)
    counts = count_by_severity(findings)
    percentage, total_items, failing_items, checklist_modules = checklist_score(findings, registry)
    return ScoreReport(
        counts_by_severity=counts,
        risk_level=classify_risk(counts),
        checklist_percentage=percentage,
        checklist_items_total=total_items,
        checklist_items_failing=failing_items,
        checklist_modules=tuple(checklist_modules),
    )
