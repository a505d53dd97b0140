from __future__ import annotations

from typing import Iterable, List, Optional

from .constants import ExitCode


class ReviewPackError(Exception):
    """Base exception for all reviewpack errors."""

    exit_code: ExitCode = ExitCode.ERROR


class ConfigError(ReviewPackError):
    """Configuration validation failed."""


class ManifestError(ReviewPackError):
    """Module manifest could not be parsed or validated."""

    exit_code = ExitCode.INVALID_REGISTRY


class DuplicateIdError(ReviewPackError):
    """A module id was registered twice."""

    exit_code = ExitCode.INVALID_REGISTRY

    def __init__(self, module_id: str) -> None:
        super().__init__(f"Module already registered: {module_id}")
        self.module_id = module_id


class InvalidDependencyError(ReviewPackError):
    """A module declares a dependency that cannot be satisfied."""

    exit_code = ExitCode.INVALID_REGISTRY

    def __init__(self, module_id: str, missing: Iterable[str]) -> None:
        self.module_id = module_id
        self.missing: List[str] = list(missing)
        super().__init__(
            f"Module {module_id} has invalid dependencies: {', '.join(self.missing)}"
        )


class CyclicDependencyError(ReviewPackError):
    """Dependency graph contains a cycle."""

    exit_code = ExitCode.INVALID_REGISTRY

    def __init__(self, cycle: Iterable[str]) -> None:
        self.cycle: List[str] = list(cycle)
        super().__init__(f"Dependency cycle: {' -> '.join(self.cycle)}")


class RegistrySealedError(ReviewPackError):
    """Registry is sealed and can no longer be modified."""


class RegistryNotSealedError(ReviewPackError):
    """Registry must be sealed before it can be resolved against."""


class UnknownModuleError(ReviewPackError):
    """One or more module ids are not registered."""

    exit_code = ExitCode.UNKNOWN_MODULE

    def __init__(self, module_ids: Iterable[str]) -> None:
        self.module_ids: List[str] = list(module_ids)
        super().__init__(f"Unknown module(s): {', '.join(self.module_ids)}")


class BudgetInfeasibleError(ReviewPackError):
    """Required modules alone exceed the token budget."""

    exit_code = ExitCode.BUDGET_INFEASIBLE

    def __init__(
        self,
        minimum_tokens: int,
        budget: int,
        required_ids: Optional[Iterable[str]] = None,
    ) -> None:
        self.minimum_tokens = int(minimum_tokens)
        self.budget = int(budget)
        self.required_ids: List[str] = list(required_ids or [])
        super().__init__(
            f"Token budget {self.budget} is below the minimum feasible total "
            f"{self.minimum_tokens}"
        )


class SessionClosedError(ReviewPackError):
    """Review session is finalized and immutable."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Review session {session_id} is already finalized")
        self.session_id = session_id


class ContentLoadError(ReviewPackError):
    """Module content could not be loaded."""

    def __init__(self, module_id: str, reason: str) -> None:
        super().__init__(f"Cannot load content for {module_id}: {reason}")
        self.module_id = module_id
        self.reason = reason
