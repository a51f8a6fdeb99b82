"""Exception types raised by the export pipeline."""

from __future__ import annotations

from typing import Optional


class ExportError(Exception):
    """Base class for fatal export failures; ``stage`` names where it happened."""

    stage = "export"

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ConfigurationError(ExportError):
    """Missing or malformed settings detected before any network call."""

    stage = "config"


class EmptyResultError(ExportError):
    """The document walk produced no components."""

    stage = "walk"


class RemoteCallError(ExportError):
    """A request to the design-file service or the image CDN failed."""


class DownloadError(RemoteCallError):
    """Downloading or persisting a single component image failed."""

    stage = "download"

    def __init__(self, message: str, component_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.component_id = component_id
