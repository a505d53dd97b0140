"""Artifact composition."""

from .composer import ComposedModule, Composer, CompositionManifest, estimate_tokens
from .loader import ContentLoader, DirectoryContentLoader, MappingContentLoader

__all__ = [
    "ComposedModule",
    "Composer",
    "CompositionManifest",
    "ContentLoader",
    "DirectoryContentLoader",
    "MappingContentLoader",
    "estimate_tokens",
]
