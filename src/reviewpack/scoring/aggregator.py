from __future__ import annotations

from typing import Optional

from ..errors import SessionClosedError, UnknownModuleError
from ..logging import PackLogger
from ..models import Finding, ReviewSession, ScoreReport
from ..registry import ModuleRegistry
from .scorer import compute_score_report


class FindingsAggregator:
    """
    Record findings against registered modules and finalize sessions.

    The aggregator holds no per-session state. Concurrent writers on the
    same session must serialize access themselves.
    """

    def __init__(self, registry: ModuleRegistry, logger: Optional[PackLogger] = None) -> None:
        self.registry = registry
        self.logger = logger

    def new_session(self, session_id: Optional[str] = None) -> ReviewSession:
        return ReviewSession(session_id=session_id) if session_id else ReviewSession()

    def record_finding(self, session: ReviewSession, finding: Finding) -> None:
        if session.is_finalized:
            raise SessionClosedError(session.session_id)
        if finding.module_id not in self.registry:
            raise UnknownModuleError([finding.module_id])
        session.add_finding(finding)

    def finalize(self, session: ReviewSession) -> ScoreReport:
        if session.is_finalized:
            raise SessionClosedError(session.session_id)
        report = compute_score_report(session.findings, self.registry)
        session.close(report)
        if self.logger:
            self.logger.info(
                "session_finalized",
                session_id=session.session_id,
                counts=dict(report.counts_by_severity),
                risk_level=report.risk_level.value,
                checklist_percentage=report.checklist_percentage,
            )
        return report
