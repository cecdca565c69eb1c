"""Base error types shared across the capture pipeline."""


class TimelapseError(Exception):
    """Root of every error the capture tools raise on purpose."""


class ClockSyncError(TimelapseError):
    """The external time lookup failed."""


class LockError(TimelapseError):
    """The run marker could not be created or removed."""


class ResourceError(TimelapseError):
    """A resource folder is unusable."""


class NoSuchFolder(ResourceError):
    """A folder that must already exist is missing."""


class FolderNotReady(ResourceError):
    """A folder was used before ``require()``/``require_existing()``."""


__all__ = [
    "TimelapseError",
    "ClockSyncError",
    "LockError",
    "ResourceError",
    "NoSuchFolder",
    "FolderNotReady",
]
