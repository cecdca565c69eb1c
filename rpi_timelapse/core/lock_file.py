"""Run marker backing cooperative cancellation.

The capture loop keeps running while the marker file exists. Any external
actor (cron, an operator, a shutdown script) stops it by deleting the file;
the loop notices at the end of the sample in progress.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from rpi_timelapse.core.errors import LockError

LOCK_CONTENT = b"LOCK"


class RunLock:

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def lock(self) -> None:
        if self._path.exists():
            return
        try:
            self._path.write_bytes(LOCK_CONTENT)
        except OSError as exc:
            raise LockError(f"unable to create run marker {self._path}: {exc}") from exc

    def is_locked(self) -> bool:
        return self._path.exists()

    def unlock(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise LockError(f"unable to remove run marker {self._path}: {exc}") from exc


__all__ = ["RunLock", "LOCK_CONTENT"]
