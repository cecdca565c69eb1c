"""String-keyed settings handed to capture backends."""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional

from rpi_timelapse.core.config_manager import TRUE_VALUES, stringify_value


class ConfigMap:
    """Opaque key/value lookup; typed parsing is left to the consumer."""

    def __init__(self, data: Optional[Mapping[str, object]] = None) -> None:
        self._data: Dict[str, str] = {}
        if data:
            self.update(data)

    def set(self, key: str, value: object) -> None:
        self._data[str(key)] = stringify_value(value)

    def update(self, settings: Mapping[str, object]) -> None:
        for key, value in settings.items():
            self.set(key, value)

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._data.get(key, default)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Return ``key`` as an int; a present but malformed value raises ValueError."""
        raw = self._data.get(key)
        if raw is None or raw.strip() == "":
            return default
        return int(raw.strip())

    def flag(self, key: str) -> bool:
        raw = self._data.get(key)
        if raw is None:
            return False
        return raw.strip().lower() in TRUE_VALUES

    def as_dict(self) -> Dict[str, str]:
        return dict(self._data)

    def copy(self) -> "ConfigMap":
        return ConfigMap(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ConfigMap({self._data!r})"


__all__ = ["ConfigMap"]
