from __future__ import annotations

import json
from pathlib import Path

import pytest

from reviewpack.constants import Category
from reviewpack.errors import CyclicDependencyError, DuplicateIdError, ManifestError
from reviewpack.models import SelectionCriteria
from reviewpack.registry import GOALS, build_registry, builtin_manifest, load_manifest, parse_manifest
from reviewpack.resolver import resolve


def test_load_manifest_fixture(fixtures_dir: Path) -> None:
    manifest = load_manifest(fixtures_dir / "manifest.json")
    registry = build_registry(manifest)

    assert registry.is_sealed
    assert [m.id for m in registry.modules()] == ["base", "owasp", "react", "audit"]
    assert registry.get("owasp").token_estimate == 20
    assert registry.get("react").category == Category.TECH_STACK
    assert registry.get("audit").checklist_items == 10
    assert registry.get("base").file == "base-module.md"
    assert registry.get("owasp").title == "owasp"


def test_goals_become_tags(fixtures_dir: Path) -> None:
    registry = build_registry(load_manifest(fixtures_dir / "manifest.json"))
    assert [m.id for m in registry.lookup_by_tag("web-audit")] == ["owasp", "audit"]


def test_missing_manifest_raises(tmp_path: Path) -> None:
    with pytest.raises(ManifestError, match="not found"):
        load_manifest(tmp_path / "nope.json")


def test_corrupted_manifest_raises(tmp_path: Path) -> None:
    path = tmp_path / "manifest.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(ManifestError, match="corrupted"):
        load_manifest(path)


def test_non_utf8_manifest_raises(tmp_path: Path) -> None:
    path = tmp_path / "manifest.json"
    path.write_bytes(b'{"modules": [{"id": "\xff", "category": "core", "token_estimate": 1}]}')
    with pytest.raises(ManifestError, match="corrupted"):
        load_manifest(path)


def test_invalid_category_raises() -> None:
    with pytest.raises(ManifestError):
        parse_manifest({"modules": [{"id": "a", "category": "misc", "token_estimate": 5}]})


def test_non_positive_token_estimate_raises() -> None:
    with pytest.raises(ManifestError):
        parse_manifest({"modules": [{"id": "a", "category": "core", "token_estimate": 0}]})


def test_goal_with_unknown_module_raises() -> None:
    with pytest.raises(ManifestError, match="unknown modules"):
        parse_manifest(
            {
                "modules": [{"id": "a", "category": "core", "token_estimate": 5}],
                "goals": {"g": ["a", "b"]},
            }
        )


def test_build_registry_fails_fast_on_duplicates() -> None:
    manifest = parse_manifest(
        {
            "modules": [
                {"id": "a", "category": "core", "token_estimate": 5},
                {"id": "a", "category": "core", "token_estimate": 6},
            ]
        }
    )
    with pytest.raises(DuplicateIdError):
        build_registry(manifest)


def test_build_registry_fails_on_cycle(tmp_path: Path) -> None:
    path = tmp_path / "manifest.json"
    path.write_text(
        json.dumps(
            {
                "modules": [
                    {"id": "A", "category": "specialized", "token_estimate": 5, "dependencies": ["B"]},
                    {"id": "B", "category": "specialized", "token_estimate": 5, "dependencies": ["A"]},
                ]
            }
        ),
        encoding="utf-8",
    )
    with pytest.raises(CyclicDependencyError) as exc_info:
        build_registry(load_manifest(path))
    assert exc_info.value.cycle == ["A", "B", "A"]


def test_builtin_catalog_seals() -> None:
    registry = build_registry(builtin_manifest())
    assert registry.is_sealed
    assert len(registry) >= 10
    checklists = [m for m in registry.modules() if m.category == Category.CHECKLIST]
    assert checklists and all(m.checklist_items for m in checklists)


@pytest.mark.parametrize("goal", sorted(GOALS))
def test_every_builtin_goal_resolves(goal: str) -> None:
    registry = build_registry(builtin_manifest())
    plan = resolve(registry, SelectionCriteria(goal_tags={goal}))
    assert set(GOALS[goal]) <= set(plan.module_ids)
    assert plan.warnings == ()
