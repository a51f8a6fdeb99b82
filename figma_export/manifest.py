"""JSON manifest describing every exported component."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict

from .models import ComponentRecord

logger = logging.getLogger("figma_export")

MANIFEST_NAME = "data.json"


def write_manifest(components: Dict[str, ComponentRecord], output_dir: Path) -> Path:
    """Write ``data.json`` keyed by component id, creating ``output_dir`` if needed."""
    output_dir.mkdir(parents=True, exist_ok=True)
    payload = {node_id: record.to_dict() for node_id, record in components.items()}
    manifest_path = output_dir / MANIFEST_NAME
    manifest_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved manifest to %s", manifest_path)
    return manifest_path
