"""Directory handle used for frame output, logs and replay sources."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from rpi_timelapse.core.errors import FolderNotReady, NoSuchFolder, ResourceError


class ResourceFolder:
    """A folder that must be validated before paths inside it are handed out."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def exists(self) -> bool:
        return self._path.is_dir()

    def require(self) -> "ResourceFolder":
        """Create the folder (and parents) when missing."""
        if not self.exists():
            try:
                self._path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ResourceError(f"unable to create folder {self._path}: {exc}") from exc
        self._ready = True
        return self

    def require_existing(self) -> "ResourceFolder":
        if not self.exists():
            raise NoSuchFolder(f"no such folder: {self._path}")
        self._ready = True
        return self

    def path(self, name: str) -> Path:
        return self.basepath() / name

    def basepath(self) -> Path:
        if not self._ready:
            raise FolderNotReady(f"folder {self._path} used before require()")
        return self._path

    def enumerate_files(self) -> List[Path]:
        """Return the regular files in the folder sorted by name."""
        base = self.basepath()
        try:
            entries = [entry for entry in base.iterdir() if entry.is_file()]
        except OSError as exc:
            raise ResourceError(f"unable to list {base}: {exc}") from exc
        return sorted(entries, key=lambda entry: entry.name)

    def __repr__(self) -> str:
        return f"ResourceFolder({str(self._path)!r}, ready={self._ready})"


__all__ = ["ResourceFolder"]
