from __future__ import annotations

import heapq
from typing import Dict, List, Optional, Set, Tuple

from .constants import CATEGORY_PRIORITY, Category
from .errors import BudgetInfeasibleError, RegistryNotSealedError, UnknownModuleError
from .logging import PackLogger
from .models import DroppedModule, ExecutionPlan, Module, SelectionCriteria
from .registry import ModuleRegistry


class Resolver:
    """
    Turn selection criteria into an ordered, budget-fitting execution plan.

    The result depends only on the sealed registry and the criteria, so the
    same inputs always produce the same plan.
    """

    def __init__(self, registry: ModuleRegistry, logger: Optional[PackLogger] = None) -> None:
        if not registry.is_sealed:
            raise RegistryNotSealedError("Registry must be sealed before resolving")
        self.registry = registry
        self.logger = logger

    def resolve(self, criteria: SelectionCriteria) -> ExecutionPlan:
        warnings: List[str] = []

        seeds = self._seed(criteria, warnings)
        closure = self._closure(seeds)
        ordered = self._order(closure)

        retained, dropped = self._enforce_limits(ordered, criteria, warnings)
        total = sum(m.token_estimate for m in retained)

        plan = ExecutionPlan(
            ordered_modules=tuple(retained),
            total_tokens=total,
            dropped_modules=tuple(dropped),
            warnings=tuple(warnings),
        )
        if self.logger:
            self.logger.info(
                "plan_resolved",
                modules=plan.module_ids,
                total_tokens=total,
                dropped=plan.dropped_ids,
            )
        return plan

    def _seed(self, criteria: SelectionCriteria, warnings: List[str]) -> List[str]:
        unknown = sorted(mid for mid in criteria.explicit_ids if mid not in self.registry)
        if unknown:
            raise UnknownModuleError(unknown)

        seeds: Set[str] = set(criteria.explicit_ids)
        for tag in sorted(criteria.goal_tags):
            matched = [m.id for m in self.registry.lookup_by_tag(tag)]
            if not matched:
                warnings.append(f"Goal tag '{tag}' matched no modules")
            seeds.update(matched)
        return sorted(seeds, key=self.registry.registration_index)

    def _closure(self, seeds: List[str]) -> Set[str]:
        closure: Set[str] = set()
        for module_id in seeds:
            closure.add(module_id)
            closure.update(self.registry.dependencies_of(module_id))
        return closure

    def _sort_key(self, module_id: str) -> Tuple[int, int]:
        module = self.registry.get(module_id)
        return CATEGORY_PRIORITY[module.category], self.registry.registration_index(module_id)

    def _order(self, closure: Set[str]) -> List[Module]:
        """Topological sort; ties broken by category priority then registration order."""
        pending: Dict[str, int] = {}
        dependents: Dict[str, List[str]] = {mid: [] for mid in closure}
        for module_id in closure:
            deps = self.registry.get(module_id).dependencies
            pending[module_id] = len(deps)
            for dep in deps:
                dependents[dep].append(module_id)

        ready = [(self._sort_key(mid), mid) for mid, count in pending.items() if count == 0]
        heapq.heapify(ready)
        ordered: List[Module] = []
        while ready:
            _, module_id = heapq.heappop(ready)
            ordered.append(self.registry.get(module_id))
            for dependent in dependents[module_id]:
                pending[dependent] -= 1
                if pending[dependent] == 0:
                    heapq.heappush(ready, (self._sort_key(dependent), dependent))
        return ordered

    def _required(self, modules: List[Module]) -> Set[str]:
        """Core modules in the closure plus everything they depend on."""
        required: Set[str] = set()
        for module in modules:
            if module.category == Category.CORE:
                required.add(module.id)
                required.update(self.registry.dependencies_of(module.id))
        return required

    def _removable(self, retained: List[Module]) -> List[Module]:
        needed: Set[str] = set()
        for module in retained:
            needed.update(module.dependencies)
        return [
            m for m in retained if m.category != Category.CORE and m.id not in needed
        ]

    def _pick_drop(self, candidates: List[Module]) -> Module:
        # Lowest-priority category first, latest registration among equals.
        return max(
            candidates,
            key=lambda m: (
                CATEGORY_PRIORITY[m.category],
                self.registry.registration_index(m.id),
            ),
        )

    def _enforce_limits(
        self,
        ordered: List[Module],
        criteria: SelectionCriteria,
        warnings: List[str],
    ) -> Tuple[List[Module], List[DroppedModule]]:
        budget = criteria.token_budget
        cap = criteria.max_modules

        if budget is not None:
            required = self._required(ordered)
            minimum = sum(m.token_estimate for m in ordered if m.id in required)
            if minimum > budget:
                raise BudgetInfeasibleError(
                    minimum_tokens=minimum,
                    budget=budget,
                    required_ids=[m.id for m in ordered if m.id in required],
                )

        retained = list(ordered)
        dropped: List[DroppedModule] = []
        total = sum(m.token_estimate for m in retained)

        while True:
            over_budget = budget is not None and total > budget
            over_cap = cap is not None and len(retained) > cap
            if not (over_budget or over_cap):
                break
            candidates = self._removable(retained)
            if not candidates:
                if over_cap:
                    warnings.append(
                        f"max_modules={cap} cannot be met: {len(retained)} modules "
                        "are core or required dependencies"
                    )
                break
            victim = self._pick_drop(candidates)
            retained.remove(victim)
            total -= victim.token_estimate
            reason = "token_budget" if over_budget else "max_modules"
            dropped.append(
                DroppedModule(
                    module_id=victim.id,
                    category=victim.category,
                    token_estimate=victim.token_estimate,
                    reason=reason,
                )
            )
            limit = f"token budget {budget}" if over_budget else f"max_modules {cap}"
            warnings.append(
                f"Dropped {victim.id} ({victim.category.value}, "
                f"{victim.token_estimate} tokens) to fit {limit}"
            )
            if self.logger:
                self.logger.warning("module_dropped", module_id=victim.id, reason=reason)

        return retained, dropped


def resolve(registry: ModuleRegistry, criteria: SelectionCriteria) -> ExecutionPlan:
    """Resolve criteria against a sealed registry."""
    return Resolver(registry).resolve(criteria)
