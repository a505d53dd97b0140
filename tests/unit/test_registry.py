from __future__ import annotations

import pytest

from reviewpack.errors import (
    CyclicDependencyError,
    DuplicateIdError,
    InvalidDependencyError,
    RegistrySealedError,
    UnknownModuleError,
)
from reviewpack.models import Module
from reviewpack.registry import ModuleRegistry


def _module(module_id: str, category: str = "specialized", tokens: int = 100, deps=(), tags=()) -> Module:
    return Module(
        id=module_id,
        title=module_id,
        category=category,
        token_estimate=tokens,
        dependencies=tuple(deps),
        tags=frozenset(tags),
    )


def test_register_rejects_duplicate_id() -> None:
    registry = ModuleRegistry()
    registry.register(_module("A"))
    with pytest.raises(DuplicateIdError) as exc_info:
        registry.register(_module("A"))
    assert exc_info.value.module_id == "A"


def test_register_rejects_self_dependency() -> None:
    registry = ModuleRegistry()
    with pytest.raises(InvalidDependencyError):
        registry.register(_module("A", deps=["A"]))
    assert "A" not in registry


def test_seal_rejects_unknown_dependency() -> None:
    registry = ModuleRegistry()
    registry.register(_module("A", deps=["missing"]))
    with pytest.raises(InvalidDependencyError) as exc_info:
        registry.seal()
    assert exc_info.value.missing == ["missing"]
    assert registry.is_sealed is False


def test_seal_detects_two_node_cycle() -> None:
    registry = ModuleRegistry()
    registry.register(_module("A", deps=["B"]))
    registry.register(_module("B", deps=["A"]))
    with pytest.raises(CyclicDependencyError) as exc_info:
        registry.seal()
    assert exc_info.value.cycle == ["A", "B", "A"]
    assert registry.is_sealed is False


def test_seal_reports_cycle_path_not_prefix() -> None:
    registry = ModuleRegistry()
    registry.register(_module("root", deps=["x"]))
    registry.register(_module("x", deps=["y"]))
    registry.register(_module("y", deps=["z"]))
    registry.register(_module("z", deps=["x"]))
    with pytest.raises(CyclicDependencyError) as exc_info:
        registry.seal()
    assert exc_info.value.cycle == ["x", "y", "z", "x"]


def test_register_after_seal_fails() -> None:
    registry = ModuleRegistry()
    registry.register(_module("A"))
    registry.seal()
    with pytest.raises(RegistrySealedError):
        registry.register(_module("B"))


def test_seal_is_idempotent() -> None:
    registry = ModuleRegistry()
    registry.register(_module("A"))
    registry.seal()
    registry.seal()
    assert registry.is_sealed is True


def test_diamond_graph_is_not_a_cycle() -> None:
    registry = ModuleRegistry()
    registry.register(_module("base", category="core"))
    registry.register(_module("left", deps=["base"]))
    registry.register(_module("right", deps=["base"]))
    registry.register(_module("top", deps=["left", "right"]))
    registry.seal()
    assert registry.dependencies_of("top") == ["left", "base", "right"]


def test_lookup_by_tag_is_ordered_and_restartable() -> None:
    registry = ModuleRegistry()
    registry.register(_module("b", tags=["security"]))
    registry.register(_module("a", tags=["performance"]))
    registry.register(_module("c", tags=["security", "web"]))
    registry.seal()

    view = registry.lookup_by_tag("security")
    assert [m.id for m in view] == ["b", "c"]
    assert [m.id for m in view] == ["b", "c"]
    assert list(registry.lookup_by_tag("nothing")) == []


def test_lookup_by_tag_is_lazy() -> None:
    registry = ModuleRegistry()
    registry.register(_module("a", tags=["t"]))
    view = registry.lookup_by_tag("t")
    registry.register(_module("b", tags=["t"]))
    assert [m.id for m in view] == ["a", "b"]


def test_get_unknown_module_raises() -> None:
    registry = ModuleRegistry()
    with pytest.raises(UnknownModuleError) as exc_info:
        registry.get("Z")
    assert exc_info.value.module_ids == ["Z"]


def test_module_rejects_non_positive_tokens() -> None:
    with pytest.raises(ValueError):
        _module("A", tokens=0)


def test_module_dedupes_dependencies_in_order() -> None:
    module = _module("A", deps=["y", "x", "y"])
    assert module.dependencies == ("y", "x")
