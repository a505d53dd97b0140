from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional

from ..constants import Limits
from ..errors import ContentLoadError
from ..registry import ModuleRegistry


class ContentLoader(ABC):
    """Source of raw module text, keyed by module id."""

    @abstractmethod
    def load(self, module_id: str) -> str:
        raise NotImplementedError


class MappingContentLoader(ContentLoader):
    """Serve module content from an in-memory mapping."""

    def __init__(self, contents: Mapping[str, str]) -> None:
        self._contents = dict(contents)

    def load(self, module_id: str) -> str:
        try:
            return self._contents[module_id]
        except KeyError:
            raise ContentLoadError(module_id, "no content registered") from None


class DirectoryContentLoader(ContentLoader):
    """
    Read module markdown from a directory.

    The file name comes from the module's manifest ``file`` entry when a
    registry is given, otherwise ``<id>.md``.
    """

    def __init__(
        self,
        content_dir: Path,
        registry: Optional[ModuleRegistry] = None,
        max_bytes: int = Limits.MAX_CONTENT_BYTES,
    ) -> None:
        self.content_dir = content_dir
        self.registry = registry
        self.max_bytes = max_bytes

    def path_for(self, module_id: str) -> Path:
        file_name = None
        if self.registry is not None and module_id in self.registry:
            file_name = self.registry.get(module_id).file
        return self.content_dir / (file_name or f"{module_id}.md")

    def load(self, module_id: str) -> str:
        path = self.path_for(module_id)
        if not path.is_file():
            raise ContentLoadError(module_id, f"file not found: {path}")
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ContentLoadError(module_id, str(exc)) from exc
        if len(data) > self.max_bytes:
            raise ContentLoadError(module_id, f"file too large ({len(data)} bytes)")
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ContentLoadError(module_id, f"not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
