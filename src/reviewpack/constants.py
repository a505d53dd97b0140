from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Severity levels for findings."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"


class Category(str, Enum):
    """Module categories, declared in priority order."""

    CORE = "core"
    SPECIALIZED = "specialized"
    TECH_STACK = "tech_stack"
    CHECKLIST = "checklist"


class ExitCode(int, Enum):
    """Process exit codes."""

    SUCCESS = 0
    BLOCKED = 1
    BUDGET_INFEASIBLE = 2
    INVALID_REGISTRY = 3
    UNKNOWN_MODULE = 4
    ERROR = 5


# Lower value sorts first in a plan and is dropped last under a budget.
CATEGORY_PRIORITY = {
    Category.CORE: 0,
    Category.SPECIALIZED: 1,
    Category.TECH_STACK: 2,
    Category.CHECKLIST: 3,
}

SEVERITY_ORDER = {"P0": 0, "P1": 1, "P2": 2, "P3": 3}

SEVERITY_ACTIONS = {
    "P0": "Fix now",
    "P1": "Fix this week",
    "P2": "Fix in 30 days",
    "P3": "Backlog",
}


class Limits:
    """Shared hard limits."""

    TOKEN_TOLERANCE = 0.10
    CHARS_PER_TOKEN = 4.0
    MAX_CONTENT_BYTES = 5_000_000  # 5MB per module
    MAX_DESCRIPTION_LENGTH = 200
