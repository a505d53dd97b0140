from __future__ import annotations

from pathlib import Path

import pytest

from reviewpack.compose import Composer, DirectoryContentLoader, MappingContentLoader, estimate_tokens
from reviewpack.errors import ContentLoadError
from reviewpack.models import SelectionCriteria
from reviewpack.registry import ModuleRegistry
from reviewpack.resolver import resolve


def _contents(size_a: int = 4000, size_b: int = 8000) -> dict[str, str]:
    return {"A": "a" * size_a, "B": "b" * size_b, "C": "c" * 2000}


def test_estimate_tokens_rounds_up() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2
    assert estimate_tokens("abcdef", chars_per_token=2.0) == 3


def test_compose_concatenates_in_plan_order(scenario_registry: ModuleRegistry) -> None:
    plan = resolve(scenario_registry, SelectionCriteria(explicit_ids={"B", "C"}))
    composer = Composer(MappingContentLoader({"A": "alpha", "B": "beta", "C": "gamma"}), separator="|")

    artifact, manifest = composer.compose(plan)

    assert artifact == "alpha|beta|gamma"
    assert [m.id for m in manifest.modules] == ["A", "B", "C"]
    assert [(m.offset, m.length) for m in manifest.modules] == [(0, 5), (6, 4), (11, 5)]
    assert artifact[manifest.modules[1].offset:][: manifest.modules[1].length] == "beta"


def test_compose_preserves_content_bytes(scenario_registry: ModuleRegistry) -> None:
    plan = resolve(scenario_registry, SelectionCriteria(explicit_ids={"A"}))
    raw = "# Title\r\n\n  ```python\nprint('x')  \n```\n\n\n"
    artifact, _ = Composer(MappingContentLoader({"A": raw})).compose(plan)
    assert artifact == raw


def test_compose_within_tolerance_has_no_warning(scenario_registry: ModuleRegistry) -> None:
    plan = resolve(scenario_registry, SelectionCriteria(explicit_ids={"B"}))
    # declared 3000 tokens; 4000 + 2 + 8000 chars is 3001 tokens, within 10%
    contents = _contents()
    _, manifest = Composer(MappingContentLoader(contents)).compose(plan)

    assert manifest.declared_tokens == 3000
    assert manifest.warnings == []


def test_compose_over_tolerance_warns_without_failing(scenario_registry: ModuleRegistry) -> None:
    plan = resolve(scenario_registry, SelectionCriteria(explicit_ids={"B"}))
    contents = _contents(size_a=6000, size_b=8000)

    artifact, manifest = Composer(MappingContentLoader(contents)).compose(plan)

    assert len(artifact) == 14002
    assert manifest.measured_tokens == 3501
    assert len(manifest.warnings) == 1
    assert "exceeding declared 3000" in manifest.warnings[0]


def test_manifest_records_hashes(scenario_registry: ModuleRegistry) -> None:
    plan = resolve(scenario_registry, SelectionCriteria(explicit_ids={"A"}))
    _, manifest = Composer(MappingContentLoader({"A": "alpha"})).compose(plan)
    payload = manifest.to_dict()

    assert len(payload["artifact_sha256"]) == 64
    assert payload["modules"][0]["sha256"] == payload["artifact_sha256"]
    assert payload["modules"][0]["declared_tokens"] == 1000


def test_missing_content_raises(scenario_registry: ModuleRegistry) -> None:
    plan = resolve(scenario_registry, SelectionCriteria(explicit_ids={"B"}))
    with pytest.raises(ContentLoadError) as exc_info:
        Composer(MappingContentLoader({"A": "alpha"})).compose(plan)
    assert exc_info.value.module_id == "B"


def test_directory_loader_reads_id_md(tmp_path: Path) -> None:
    (tmp_path / "A.md").write_text("# A\n", encoding="utf-8")
    loader = DirectoryContentLoader(tmp_path)
    assert loader.load("A") == "# A\n"
    with pytest.raises(ContentLoadError):
        loader.load("missing")


def test_directory_loader_enforces_size_limit(tmp_path: Path) -> None:
    (tmp_path / "A.md").write_text("x" * 20, encoding="utf-8")
    loader = DirectoryContentLoader(tmp_path, max_bytes=10)
    with pytest.raises(ContentLoadError, match="too large"):
        loader.load("A")


def test_directory_loader_rejects_invalid_utf8(tmp_path: Path) -> None:
    (tmp_path / "A.md").write_bytes(b"\xff\xfe bad")
    loader = DirectoryContentLoader(tmp_path)
    with pytest.raises(ContentLoadError, match="UTF-8") as exc_info:
        loader.load("A")
    assert exc_info.value.module_id == "A"
