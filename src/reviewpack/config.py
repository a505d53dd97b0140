from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, confloat, conint, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import SeverityGate


class ReviewPackConfig(BaseSettings):
    """Configuration loaded from REVIEWPACK_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="REVIEWPACK_",
        frozen=True,
        extra="ignore",
    )

    # Module sources
    manifest_path: Optional[Path] = Field(
        default=None,
        description="Path to the module manifest JSON. Built-in catalog when unset.",
    )
    content_dir: Path = Field(
        default=Path("modules"),
        description="Directory holding module markdown files",
    )

    # Resolution defaults (CLI flags take precedence)
    default_token_budget: Optional[conint(gt=0)] = Field(default=None)
    default_max_modules: Optional[conint(gt=0)] = Field(default=None)

    # Composition
    token_tolerance: confloat(ge=0) = Field(
        default=0.10,
        description="Allowed overshoot of measured vs declared tokens before warning",
    )
    chars_per_token: confloat(gt=0) = Field(default=4.0)
    separator: str = Field(default="\n\n", description="Inserted between module blobs")

    # Scoring
    severity_gate: SeverityGate = Field(default="none")

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(default="info")

    @field_validator("severity_gate", mode="before")
    @classmethod
    def _normalize_severity_gate(cls, value: str) -> str:
        if isinstance(value, str):
            trimmed = value.strip()
            if trimmed.lower() == "none":
                return "none"
            return trimmed.upper()
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value
