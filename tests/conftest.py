"""Shared fixtures: an in-memory Figma client and sample documents."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from figma_export.config import ExportConfig
from figma_export.errors import RemoteCallError
from figma_export.models import DocumentResponse

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 64


def component(node_id: str, name: str, width: float = 24, height: float = 24) -> dict:
    return {
        "id": node_id,
        "name": name,
        "type": "COMPONENT",
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": width, "height": height},
        "children": [{"id": f"{node_id}-vector", "type": "VECTOR", "name": "shape"}],
    }


def canvas(node_id: str, children: List[dict]) -> dict:
    return {"id": node_id, "name": f"Page {node_id}", "type": "CANVAS", "children": children}


def document(*pages: dict) -> dict:
    return {"id": "0:0", "name": "Document", "type": "DOCUMENT", "children": list(pages)}


class FakeFigmaClient:
    """Stands in for FigmaClient; methods block like the real ones."""

    def __init__(
        self,
        response: DocumentResponse,
        images: Optional[Dict[str, Optional[str]]] = None,
        bodies: Optional[Dict[str, bytes]] = None,
        fail_urls: Sequence[str] = (),
        fail_render: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.response = response
        self.images = images or {}
        self.bodies = bodies or {}
        self.fail_urls = set(fail_urls)
        self.fail_render = fail_render
        self.delay = delay
        self.document_calls: List[str] = []
        self.render_calls: List[List[str]] = []
        self.download_calls: List[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._lock = threading.Lock()

    def fetch_document(self, file_id: str) -> DocumentResponse:
        self.document_calls.append(file_id)
        return self.response

    def fetch_render_urls(self, file_id, ids, image_format, scale):
        with self._lock:
            self.render_calls.append(list(ids))
        if self.fail_render:
            raise RemoteCallError("render service unavailable", stage="render")
        return {node_id: self.images[node_id] for node_id in ids if node_id in self.images}

    def download(self, url: str, image_format: str):
        with self._lock:
            self.download_calls.append(url)
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if url in self.fail_urls:
                raise RemoteCallError(f"GET {url} failed: 500", stage="download")
            body = self.bodies.get(url, JPG_BYTES)
            if image_format == "svg":
                return body.decode("utf-8")
            return body
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def make_config(tmp_path: Path):
    def _make(**overrides) -> ExportConfig:
        values = {
            "token": "figd_test",
            "file_url": "https://www.figma.com/file/AbC123/Library",
            "file_id": "AbC123",
            "output_dir": tmp_path / "build",
        }
        values.update(overrides)
        return ExportConfig(**values)

    return _make


@pytest.fixture
def card_response() -> DocumentResponse:
    """Three components, two of them named "Card"."""
    tree = document(
        canvas("1:0", [component("1", "Card"), {"id": "f", "type": "FRAME", "children": [component("2", "Card")]}]),
        canvas("2:0", [component("3", "Button", width=120, height=40)]),
    )
    meta = {
        "1": {"key": "k1", "name": "Card", "description": "first card"},
        "2": {"key": "k2", "name": "Card", "description": ""},
        "3": {"key": "k3", "name": "Button"},
    }
    return DocumentResponse(document=tree, components=meta, name="Library")


@pytest.fixture
def card_images() -> Dict[str, str]:
    return {node_id: f"https://cdn.example.com/{node_id}.jpg" for node_id in ("1", "2", "3")}
