from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, conint, field_validator, model_validator

from ..errors import ManifestError
from ..models import Module
from .registry import ModuleRegistry


class ManifestModule(BaseModel):
    """One module record as stored in the manifest."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(min_length=1)
    title: str = ""
    category: Literal["core", "specialized", "tech_stack", "checklist"]
    token_estimate: conint(gt=0) = Field(
        validation_alias=AliasChoices("token_estimate", "tokenEstimate"),
    )
    dependencies: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    checklist_items: Optional[conint(gt=0)] = Field(
        default=None,
        validation_alias=AliasChoices("checklist_items", "checklistItems"),
    )
    file: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value

    def to_module(self, extra_tags: Optional[List[str]] = None) -> Module:
        return Module(
            id=self.id,
            title=self.title or self.id,
            category=self.category,
            token_estimate=self.token_estimate,
            dependencies=tuple(self.dependencies),
            tags=frozenset([*self.tags, *(extra_tags or [])]),
            checklist_items=self.checklist_items,
            file=self.file,
        )


class ModuleManifest(BaseModel):
    """
    Ordered module records plus the goal map.

    Goals are the declarative decision tree: each goal name maps to the
    module ids recommended for it and is applied to those modules as a tag.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    schema_version: str = "1.0"
    modules: List[ManifestModule] = Field(default_factory=list)
    goals: Dict[str, List[str]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_goal_targets(self) -> "ModuleManifest":
        known = {m.id for m in self.modules}
        for goal, module_ids in self.goals.items():
            unknown = [mid for mid in module_ids if mid not in known]
            if unknown:
                raise ValueError(f"goal '{goal}' references unknown modules: {unknown}")
        return self

    def goal_tags_for(self, module_id: str) -> List[str]:
        return [goal for goal, ids in self.goals.items() if module_id in ids]


def parse_manifest(payload: dict) -> ModuleManifest:
    try:
        return ModuleManifest.model_validate(payload)
    except ValidationError as exc:
        raise ManifestError(f"Invalid module manifest: {exc}") from exc


def load_manifest(path: Path) -> ModuleManifest:
    """Load and validate a module manifest from a JSON file."""
    if not path.exists():
        raise ManifestError(f"Module manifest not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Module manifest corrupted ({exc})") from exc
    if not isinstance(payload, dict):
        raise ManifestError("Module manifest must be a JSON object")
    return parse_manifest(payload)


def build_registry(manifest: ModuleManifest) -> ModuleRegistry:
    """Register every manifest module in order and seal. Fails fast on any error."""
    registry = ModuleRegistry()
    for record in manifest.modules:
        registry.register(record.to_module(extra_tags=manifest.goal_tags_for(record.id)))
    registry.seal()
    return registry
