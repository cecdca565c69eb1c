"""Network time lookup consumed by the scheduler at startup."""

from __future__ import annotations

from typing import Optional

import ntplib

from rpi_timelapse.core.errors import ClockSyncError
from rpi_timelapse.core.logging_utils import get_module_logger

DEFAULT_NTP_HOST = "pool.ntp.org"
DEFAULT_NTP_TIMEOUT = 5.0

logger = get_module_logger("TimeSync")


def query_ntp_seconds(
    host: str = DEFAULT_NTP_HOST,
    *,
    timeout: float = DEFAULT_NTP_TIMEOUT,
    client: Optional[ntplib.NTPClient] = None,
) -> float:
    """Return the server's transmit time in seconds since the Unix epoch."""
    client = client or ntplib.NTPClient()
    try:
        response = client.request(host, version=3, timeout=timeout)
    except (ntplib.NTPException, OSError) as exc:
        raise ClockSyncError(f"NTP lookup against {host} failed: {exc}") from exc
    logger.debug("NTP %s answered tx_time=%.3f offset=%.3fs", host, response.tx_time, response.offset)
    return response.tx_time


__all__ = ["DEFAULT_NTP_HOST", "query_ntp_seconds"]
