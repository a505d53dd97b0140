"""Module composition and review-scoring engine."""

from .compose import Composer, DirectoryContentLoader, MappingContentLoader
from .errors import (
    BudgetInfeasibleError,
    CyclicDependencyError,
    DuplicateIdError,
    InvalidDependencyError,
    RegistrySealedError,
    ReviewPackError,
    SessionClosedError,
    UnknownModuleError,
)
from .models import ExecutionPlan, Finding, Module, ReviewSession, ScoreReport, SelectionCriteria
from .registry import ModuleRegistry
from .resolver import Resolver, resolve
from .scoring import FindingsAggregator

__version__ = "0.1.0"

__all__ = [
    "BudgetInfeasibleError",
    "Composer",
    "CyclicDependencyError",
    "DirectoryContentLoader",
    "DuplicateIdError",
    "ExecutionPlan",
    "Finding",
    "FindingsAggregator",
    "InvalidDependencyError",
    "MappingContentLoader",
    "Module",
    "ModuleRegistry",
    "RegistrySealedError",
    "Resolver",
    "ReviewPackError",
    "ReviewSession",
    "ScoreReport",
    "SelectionCriteria",
    "SessionClosedError",
    "UnknownModuleError",
    "resolve",
]
