"""Reader for ``key = value`` configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable

from rpi_timelapse.core.logging_utils import get_module_logger

logger = get_module_logger("ConfigManager")

TRUE_VALUES = {"1", "yes", "true"}
FALSE_VALUES = {"0", "no", "false"}


def stringify_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def parse_bool(value: Any) -> bool:
    """Interpret ``value`` as a boolean; raises ValueError for anything else."""
    text = stringify_value(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"'{value}' is not a boolean value")


def parse_config_lines(lines: Iterable[str]) -> Dict[str, str]:
    config: Dict[str, str] = {}

    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith('#'):
            continue
        if '=' not in line:
            continue

        key, value = line.split('=', 1)
        key = key.strip()
        value = value.strip()

        if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
            value = value[1:-1]
        elif '#' in value:
            value = value.split('#')[0].strip()

        config[key] = value

    return config


def read_config(config_path: Path) -> Dict[str, str]:
    """Read ``config_path``; OSError propagates to the caller."""
    with open(config_path, 'r', encoding='utf-8') as fh:
        config = parse_config_lines(fh)
    logger.debug("Loaded %d keys from %s", len(config), config_path)
    return config


__all__ = ["parse_bool", "parse_config_lines", "read_config", "stringify_value"]
