"""Module registry, manifest loading and the built-in catalog."""

from .catalog import GOALS, builtin_manifest
from .manifest import ManifestModule, ModuleManifest, build_registry, load_manifest, parse_manifest
from .registry import ModuleRegistry, TagView

__all__ = [
    "GOALS",
    "ManifestModule",
    "ModuleManifest",
    "ModuleRegistry",
    "TagView",
    "build_registry",
    "builtin_manifest",
    "load_manifest",
    "parse_manifest",
]
