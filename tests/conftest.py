from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from reviewpack.models import Module
from reviewpack.registry import ModuleRegistry, build_registry, builtin_manifest


def _module(
    module_id: str,
    category: str,
    tokens: int,
    deps: tuple[str, ...] = (),
    tags: tuple[str, ...] = (),
    checklist_items: int | None = None,
) -> Module:
    return Module(
        id=module_id,
        title=module_id,
        category=category,
        token_estimate=tokens,
        dependencies=deps,
        tags=frozenset(tags),
        checklist_items=checklist_items,
    )


def _sealed(*modules: Module) -> ModuleRegistry:
    registry = ModuleRegistry()
    registry.register_all(modules)
    registry.seal()
    return registry


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def scenario_registry() -> ModuleRegistry:
    """A(core), B(specialized, needs A), C(checklist)."""
    return _sealed(
        _module("A", "core", 1000),
        _module("B", "specialized", 2000, deps=("A",)),
        _module("C", "checklist", 500),
    )


@pytest.fixture
def builtin_registry() -> ModuleRegistry:
    return build_registry(builtin_manifest())
