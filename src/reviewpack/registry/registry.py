from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set

from ..errors import (
    CyclicDependencyError,
    DuplicateIdError,
    InvalidDependencyError,
    RegistrySealedError,
    UnknownModuleError,
)
from ..models import Module


class TagView:
    """Restartable view over modules carrying a tag, in registration order."""

    def __init__(self, registry: "ModuleRegistry", tag: str) -> None:
        self._registry = registry
        self.tag = tag

    def __iter__(self) -> Iterator[Module]:
        for module in self._registry.modules():
            if self.tag in module.tags:
                yield module


class ModuleRegistry:
    """Owns module metadata and validates the dependency graph on seal."""

    def __init__(self) -> None:
        self._modules: Dict[str, Module] = {}
        self._order: Dict[str, int] = {}
        self._sealed = False

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def register(self, module: Module) -> None:
        if self._sealed:
            raise RegistrySealedError(f"Cannot register {module.id}: registry is sealed")
        if module.id in self._modules:
            raise DuplicateIdError(module.id)
        if module.id in module.dependencies:
            raise InvalidDependencyError(module.id, [module.id])
        self._order[module.id] = len(self._order)
        self._modules[module.id] = module

    def register_all(self, modules: Iterable[Module]) -> None:
        for module in modules:
            self.register(module)

    def seal(self) -> None:
        """
        Validate dependencies and detect cycles, then freeze the registry.

        Raises InvalidDependencyError for unknown dependency ids and
        CyclicDependencyError with the cycle path. The registry stays
        unsealed on failure.
        """
        if self._sealed:
            return
        for module in self._modules.values():
            missing = [dep for dep in module.dependencies if dep not in self._modules]
            if missing:
                raise InvalidDependencyError(module.id, missing)

        cycle = self._find_cycle()
        if cycle:
            raise CyclicDependencyError(cycle)
        self._sealed = True

    def _find_cycle(self) -> Optional[List[str]]:
        visited: Set[str] = set()
        stack: List[str] = []
        on_stack: Set[str] = set()

        def visit(module_id: str) -> Optional[List[str]]:
            visited.add(module_id)
            stack.append(module_id)
            on_stack.add(module_id)
            for dep in self._modules[module_id].dependencies:
                if dep in on_stack:
                    start = stack.index(dep)
                    return stack[start:] + [dep]
                if dep not in visited:
                    found = visit(dep)
                    if found:
                        return found
            stack.pop()
            on_stack.discard(module_id)
            return None

        for module_id in self._modules:
            if module_id not in visited:
                found = visit(module_id)
                if found:
                    return found
        return None

    def get(self, module_id: str) -> Module:
        try:
            return self._modules[module_id]
        except KeyError:
            raise UnknownModuleError([module_id]) from None

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def modules(self) -> List[Module]:
        """All modules in registration order."""
        return list(self._modules.values())

    def registration_index(self, module_id: str) -> int:
        if module_id not in self._order:
            raise UnknownModuleError([module_id])
        return self._order[module_id]

    def lookup_by_tag(self, tag: str) -> TagView:
        return TagView(self, tag)

    def dependencies_of(self, module_id: str) -> List[str]:
        """Transitive dependencies of a module, depth-first in declaration order."""
        seen: Dict[str, None] = {}

        def walk(current: str) -> None:
            for dep in self.get(current).dependencies:
                if dep not in seen:
                    seen[dep] = None
                    walk(dep)

        walk(module_id)
        return list(seen)
