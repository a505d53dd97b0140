from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..constants import Limits
from ..logging import PackLogger
from ..models import ExecutionPlan
from ..utils import sha256_hex
from .loader import ContentLoader


def estimate_tokens(text: str, chars_per_token: float = Limits.CHARS_PER_TOKEN) -> int:
    """Rough token estimation."""
    if not text:
        return 0
    return int(math.ceil(len(text) / chars_per_token))


@dataclass
class ComposedModule:
    id: str
    declared_tokens: int
    measured_tokens: int
    sha256: str
    offset: int
    length: int


@dataclass
class CompositionManifest:
    modules: List[ComposedModule]
    declared_tokens: int
    measured_tokens: int
    artifact_sha256: str
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": "1.0",
            "composed_at_utc": datetime.now(timezone.utc).isoformat(),
            "artifact_sha256": self.artifact_sha256,
            "declared_tokens": self.declared_tokens,
            "measured_tokens": self.measured_tokens,
            "modules": [
                {
                    "id": m.id,
                    "declared_tokens": m.declared_tokens,
                    "measured_tokens": m.measured_tokens,
                    "sha256": m.sha256,
                    "offset": m.offset,
                    "length": m.length,
                }
                for m in self.modules
            ],
            "warnings": list(self.warnings),
        }


class Composer:
    """Concatenate module content in plan order. Content is never altered."""

    def __init__(
        self,
        loader: ContentLoader,
        *,
        separator: str = "\n\n",
        tolerance: float = Limits.TOKEN_TOLERANCE,
        chars_per_token: float = Limits.CHARS_PER_TOKEN,
        logger: Optional[PackLogger] = None,
    ) -> None:
        self.loader = loader
        self.separator = separator
        self.tolerance = tolerance
        self.chars_per_token = chars_per_token
        self.logger = logger

    def compose(self, plan: ExecutionPlan) -> Tuple[str, CompositionManifest]:
        parts: List[str] = []
        entries: List[ComposedModule] = []
        offset = 0

        for index, module in enumerate(plan.ordered_modules):
            if index:
                parts.append(self.separator)
                offset += len(self.separator)
            content = self.loader.load(module.id)
            parts.append(content)
            entries.append(
                ComposedModule(
                    id=module.id,
                    declared_tokens=module.token_estimate,
                    measured_tokens=estimate_tokens(content, self.chars_per_token),
                    sha256=sha256_hex(content.encode("utf-8")),
                    offset=offset,
                    length=len(content),
                )
            )
            offset += len(content)

        artifact = "".join(parts)
        measured = estimate_tokens(artifact, self.chars_per_token)
        warnings: List[str] = []

        # Declared estimates are approximate; over-size is reported, not fatal.
        limit = plan.total_tokens * (1 + self.tolerance)
        if measured > limit:
            warnings.append(
                f"Composed artifact measures {measured} tokens, exceeding declared "
                f"{plan.total_tokens} by more than {self.tolerance:.0%}"
            )
            if self.logger:
                self.logger.warning(
                    "composition_oversize",
                    measured_tokens=measured,
                    declared_tokens=plan.total_tokens,
                )

        manifest = CompositionManifest(
            modules=entries,
            declared_tokens=plan.total_tokens,
            measured_tokens=measured,
            artifact_sha256=sha256_hex(artifact.encode("utf-8")),
            warnings=warnings,
        )
        return artifact, manifest
