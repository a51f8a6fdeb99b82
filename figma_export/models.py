"""Data models used throughout the export pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class ComponentRecord:
    """One exported component; ``image`` is filled in by the render stage."""

    id: str
    name: str
    filename: str
    key: str
    file_id: str
    description: str = ""
    width: Optional[float] = None
    height: Optional[float] = None
    image: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Manifest representation; ``image`` is left out until it is known."""
        payload: Dict[str, Any] = {
            "name": self.name,
            "filename": self.filename,
            "id": self.id,
            "key": self.key,
            "file": self.file_id,
            "description": self.description,
            "width": self.width,
            "height": self.height,
        }
        if self.image is not None:
            payload["image"] = self.image
        return payload


@dataclass
class DocumentResponse:
    """The parts of a file response the exporter cares about."""

    document: Dict[str, Any]
    components: Dict[str, Dict[str, Any]]
    name: Optional[str] = None


@dataclass
class DownloadFailure:
    """A component image that could not be downloaded or written."""

    component_id: str
    url: str
    error: str


@dataclass
class DownloadReport:
    """Outcome of the download stage."""

    written: List[Path] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: List[DownloadFailure] = field(default_factory=list)
    peak_in_flight: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures
