"""Hardware capture through libav input devices (PyAV).

Opening a device corresponds to ``ffmpeg -f BACKEND -r FPS -s WxH -i DEVICE``:
the backend is a libav input format (``v4l2``, ``avfoundation``, ``dshow``,
...). libav offers no way to introspect which combinations a device accepts,
so a wrong resolution/pixel format surfaces as DeviceFailed at open time. Use
the ffmpeg CLI to find a working combination first.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

import av

from rpi_timelapse.core.config_map import ConfigMap
from rpi_timelapse.core.logging_utils import LoggerLike
from rpi_timelapse.hardware.errors import (
    DeviceFailed,
    DeviceNoLongerAvailable,
    MissingCapability,
)
from rpi_timelapse.hardware.frame import Frame
from rpi_timelapse.hardware.pixels import PixelConverter
from rpi_timelapse.hardware.session import BackendKind, CaptureSession
from rpi_timelapse.hardware.settings import DeviceSettings


class AvCamera(CaptureSession):
    """Camera session backed by a libav input device."""

    kind = BackendKind.DEVICE

    def __init__(self, *, logger: LoggerLike = None) -> None:
        super().__init__(logger=logger)
        self.settings: Optional[DeviceSettings] = None
        self._container: Any = None
        self._stream: Any = None
        self._packets: Optional[Iterator[Any]] = None
        self._converter: Optional[PixelConverter] = None

    @property
    def converter(self) -> Optional[PixelConverter]:
        return self._converter

    def _open(self, config: ConfigMap) -> None:
        settings = DeviceSettings.from_config(config)
        self.settings = settings
        backend = settings.backend or None
        self._logger.info(
            "opening %s via %s at %s @ %d fps (pixel format %s)",
            settings.device,
            backend or "default backend",
            settings.video_size,
            settings.framerate,
            settings.pixel_format or "auto",
        )

        try:
            self._container = av.open(settings.device, format=backend, options=settings.device_options())
        except (av.error.FFmpegError, OSError, ValueError) as exc:
            raise DeviceFailed(f"unable to open {settings.device} via {backend or 'default backend'}: {exc}") from exc
        self._resources.callback(self._close_container)

        stream = next(iter(self._container.streams.video), None)
        if stream is None:
            raise MissingCapability(f"no video streams found in {settings.device}")
        if stream.codec_context is None:
            raise MissingCapability(f"no decoder available for stream {stream.index} of {settings.device}")
        self._stream = stream
        self._logger.debug("using stream %d (codec %s)", stream.index, stream.codec_context.name)

        self._packets = self._container.demux(stream)
        self._resources.callback(self._close_packets)

        width, height = settings.resolution
        # The scratch buffer registers its own release when first allocated,
        # so it is freed before the packet state and the container.
        self._converter = PixelConverter(width, height, on_allocate=self._resources.callback, logger=self._logger)

    def _read(self) -> Frame:
        while True:
            packet = self._next_packet()
            try:
                frames = packet.decode()
            except BlockingIOError:
                continue
            except av.error.FFmpegError as exc:
                raise DeviceFailed(f"decoding {self.settings.device} failed: {exc}") from exc
            if not frames:
                # Decoder wants more packets before it can emit a picture.
                continue
            return self._converter.convert(frames[0])

    def _next_packet(self) -> Any:
        while True:
            try:
                return next(self._packets)
            except StopIteration:
                raise DeviceNoLongerAvailable(f"{self.settings.device} stopped delivering packets") from None
            except BlockingIOError:
                # EAGAIN from a live device; the demux generator is finished after raising.
                self._restart_packets()
            except (av.error.FFmpegError, OSError) as exc:
                raise DeviceNoLongerAvailable(f"{self.settings.device} is no longer available: {exc}") from exc

    def _restart_packets(self) -> None:
        self._close_packets()
        self._packets = self._container.demux(self._stream)

    def _close_packets(self) -> None:
        packets, self._packets = self._packets, None
        close = getattr(packets, "close", None)
        if close is not None:
            close()

    def _close_container(self) -> None:
        container, self._container = self._container, None
        self._stream = None
        if container is not None:
            container.close()
            self._logger.debug("closed input %s", self.settings.device if self.settings else "?")


__all__ = ["AvCamera"]
