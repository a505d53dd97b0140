from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Literal, Mapping, Optional, Tuple

from .constants import Category, Severity
from .errors import SessionClosedError

SeverityGate = Literal["P0", "P1", "P2", "none"]
DropReason = Literal["token_budget", "max_modules"]


@dataclass(frozen=True)
class Module:
    id: str
    title: str
    category: Category
    token_estimate: int
    dependencies: Tuple[str, ...] = ()
    tags: FrozenSet[str] = frozenset()
    checklist_items: Optional[int] = None
    file: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Module id must be a non-empty string")
        if int(self.token_estimate) <= 0:
            raise ValueError(f"Module {self.id}: token_estimate must be positive")
        object.__setattr__(self, "category", Category(self.category))
        # Keep declaration order, drop repeats.
        object.__setattr__(self, "dependencies", tuple(dict.fromkeys(self.dependencies)))
        object.__setattr__(self, "tags", frozenset(self.tags))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "token_estimate": self.token_estimate,
            "dependencies": list(self.dependencies),
            "tags": sorted(self.tags),
        }
        if self.checklist_items is not None:
            payload["checklist_items"] = self.checklist_items
        if self.file is not None:
            payload["file"] = self.file
        return payload


@dataclass(frozen=True)
class SelectionCriteria:
    explicit_ids: FrozenSet[str] = frozenset()
    goal_tags: FrozenSet[str] = frozenset()
    token_budget: Optional[int] = None
    max_modules: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "explicit_ids", frozenset(self.explicit_ids))
        object.__setattr__(self, "goal_tags", frozenset(self.goal_tags))
        if self.token_budget is not None and self.token_budget < 0:
            raise ValueError("token_budget must be non-negative")
        if self.max_modules is not None and self.max_modules < 0:
            raise ValueError("max_modules must be non-negative")


@dataclass(frozen=True)
class DroppedModule:
    module_id: str
    category: Category
    token_estimate: int
    reason: DropReason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module_id": self.module_id,
            "category": self.category.value,
            "token_estimate": self.token_estimate,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ExecutionPlan:
    ordered_modules: Tuple[Module, ...]
    total_tokens: int
    dropped_modules: Tuple[DroppedModule, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def module_ids(self) -> List[str]:
        return [m.id for m in self.ordered_modules]

    @property
    def dropped_ids(self) -> List[str]:
        return [d.module_id for d in self.dropped_modules]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": "1.0",
            "ordered_modules": self.module_ids,
            "total_tokens": self.total_tokens,
            "dropped_modules": [d.to_dict() for d in self.dropped_modules],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class Location:
    file: str
    line: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.file}:{self.line}" if self.line else self.file


@dataclass(frozen=True)
class Finding:
    module_id: str
    severity: Severity
    category: str
    description: str
    location: Optional[Location] = None

    def __post_init__(self) -> None:
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, "severity", Severity(str(self.severity).strip().upper()))


class SessionStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    FINALIZED = "finalized"


class RiskLevel(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass
class Counts:
    p0: int = 0
    p1: int = 0
    p2: int = 0
    p3: int = 0

    def total(self) -> int:
        return self.p0 + self.p1 + self.p2 + self.p3

    def as_dict(self) -> Dict[str, int]:
        return {"P0": self.p0, "P1": self.p1, "P2": self.p2, "P3": self.p3}


@dataclass(frozen=True)
class ScoreReport:
    counts_by_severity: Mapping[str, int]
    risk_level: RiskLevel
    checklist_percentage: Optional[float] = None
    checklist_items_total: int = 0
    checklist_items_failing: int = 0
    checklist_modules: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "counts_by_severity", MappingProxyType(dict(self.counts_by_severity)))
        object.__setattr__(self, "checklist_modules", tuple(self.checklist_modules))

    @property
    def total_findings(self) -> int:
        return sum(self.counts_by_severity.values())

    def counts(self) -> Counts:
        c = self.counts_by_severity
        return Counts(p0=c.get("P0", 0), p1=c.get("P1", 0), p2=c.get("P2", 0), p3=c.get("P3", 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "counts_by_severity": {**self.counts_by_severity, "total": self.total_findings},
            "checklist_percentage": self.checklist_percentage,
            "checklist_items_total": self.checklist_items_total,
            "checklist_items_failing": self.checklist_items_failing,
            "checklist_modules": list(self.checklist_modules),
            "risk_level": self.risk_level.value,
        }


@dataclass
class ReviewSession:
    """Findings recorded during one review flow. Not safe for concurrent writers."""

    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: SessionStatus = SessionStatus.CREATED
    _findings: List[Finding] = field(default_factory=list, repr=False)
    report: Optional[ScoreReport] = None

    @property
    def findings(self) -> Tuple[Finding, ...]:
        return tuple(self._findings)

    @property
    def is_finalized(self) -> bool:
        return self.status == SessionStatus.FINALIZED

    def add_finding(self, finding: Finding) -> None:
        if self.is_finalized:
            raise SessionClosedError(self.session_id)
        self._findings.append(finding)
        if self.status == SessionStatus.CREATED:
            self.status = SessionStatus.IN_PROGRESS

    def close(self, report: ScoreReport) -> None:
        if self.is_finalized:
            raise SessionClosedError(self.session_id)
        self.status = SessionStatus.FINALIZED
        self.report = report


class GateStatus(str, Enum):
    PASSED = "passed"
    BLOCKED = "blocked"


@dataclass
class GateResult:
    status: GateStatus
    reason: str
    block_merge: bool
    counts: Counts
