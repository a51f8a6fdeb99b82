"""Thin HTTP client for the Figma REST API and its image CDN."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Union

import requests

from .config import DEFAULT_TIMEOUT
from .errors import RemoteCallError
from .models import DocumentResponse

logger = logging.getLogger("figma_export")

API_BASE_URL = "https://api.figma.com/v1"

CONTENT_TYPES = {
    "svg": "image/svg+xml",
    "png": "image/png",
    "jpg": "image/jpeg",
    "pdf": "application/pdf",
}


class FigmaClient:
    """Blocking client; the pipeline runs its calls in worker threads."""

    def __init__(
        self,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = API_BASE_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"X-Figma-Token": token})

    def __enter__(self) -> "FigmaClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _get_json(self, stage: str, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as exc:
            raise RemoteCallError(f"GET {url} failed: {exc}", stage=stage) from exc
        except ValueError as exc:
            raise RemoteCallError(f"GET {url} returned invalid JSON: {exc}", stage=stage) from exc
        if not isinstance(payload, dict):
            raise RemoteCallError(f"GET {url} returned an unexpected body", stage=stage)
        return payload

    def fetch_document(self, file_id: str) -> DocumentResponse:
        """Fetch the full document tree plus the component side table."""
        payload = self._get_json("document", f"/files/{file_id}")
        document = payload.get("document")
        if not isinstance(document, dict):
            raise RemoteCallError(
                f"File {file_id} response has no document tree", stage="document"
            )
        components = payload.get("components") or {}
        return DocumentResponse(
            document=document,
            components=components,
            name=payload.get("name"),
        )

    def fetch_render_urls(
        self,
        file_id: str,
        ids: Sequence[str],
        image_format: str,
        scale: str,
    ) -> Dict[str, Optional[str]]:
        """Ask the render service for temporary image URLs for ``ids``."""
        params = {"ids": ",".join(ids), "format": image_format, "scale": scale}
        payload = self._get_json("render", f"/images/{file_id}", params=params)
        if payload.get("err"):
            raise RemoteCallError(
                f"Render request for {len(ids)} ids failed: {payload['err']}",
                stage="render",
            )
        images = payload.get("images")
        if not isinstance(images, dict):
            raise RemoteCallError("Render response has no images map", stage="render")
        return images

    def download(self, url: str, image_format: str) -> Union[str, bytes]:
        """Download a rendered image: text for SVG, raw bytes otherwise."""
        # the CDN does not need the API token
        headers: Dict[str, Optional[str]] = {"X-Figma-Token": None}
        content_type = CONTENT_TYPES.get(image_format)
        if content_type:
            headers["Content-Type"] = content_type
        try:
            resp = self.session.get(url, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise RemoteCallError(f"GET {url} failed: {exc}", stage="download") from exc
        if image_format == "svg":
            resp.encoding = resp.encoding or "utf-8"
            return resp.text
        return resp.content

