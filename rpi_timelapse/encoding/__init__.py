"""Video assembly from captured frames."""

from .exporter import EncodingError, RenderError, export_video, resolve_output_path

__all__ = ["EncodingError", "RenderError", "export_video", "resolve_output_path"]
