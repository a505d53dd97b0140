from __future__ import annotations

import hashlib
import re

from ..models import Finding


def normalize_description(description: str) -> str:
    """
    Normalize a finding description for stable fingerprinting.

    Collapses whitespace, strips trailing punctuation and lowercases so
    cosmetic rewording by the reviewer does not change identity.
    """
    if not description:
        return ""
    text = re.sub(r"\s+", " ", description)
    text = text.strip().rstrip(".!;:")
    return text.lower()


def compute_fingerprint(finding: Finding, salt: str = "") -> str:
    """
    Compute stable fingerprint for a finding.

    Returns:
        32-character hex fingerprint
    """
    location = finding.location
    components = "|".join(
        [
            finding.module_id,
            finding.severity.value,
            finding.category,
            location.file if location else "",
            str(location.line or 0) if location else "0",
            normalize_description(finding.description),
            salt,
        ]
    )
    return hashlib.sha256(components.encode()).hexdigest()[:32]
