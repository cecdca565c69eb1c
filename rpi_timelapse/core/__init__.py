"""Core services: logging, configuration, scheduling and run control."""

from .config_map import ConfigMap
from .errors import ClockSyncError, LockError, ResourceError, TimelapseError
from .lock_file import RunLock
from .resource_folder import ResourceFolder
from .scheduler import ScheduleConfig, Scheduler, TimeSnapshot

__all__ = [
    "ClockSyncError",
    "ConfigMap",
    "LockError",
    "ResourceError",
    "ResourceFolder",
    "RunLock",
    "ScheduleConfig",
    "Scheduler",
    "TimeSnapshot",
    "TimelapseError",
]
