"""Document tree traversal that collects component nodes."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from .errors import EmptyResultError, ExportError
from .models import ComponentRecord
from .utils import component_filename

logger = logging.getLogger("figma_export")

COMPONENT_TYPE = "COMPONENT"


def _build_record(
    node: Mapping[str, Any],
    component_meta: Mapping[str, Mapping[str, Any]],
    file_id: str,
    image_format: str,
) -> ComponentRecord:
    node_id = node.get("id")
    if not node_id:
        raise ExportError("Component node without an id in the document", stage="walk")
    name = node.get("name", "")
    meta = component_meta.get(node_id)
    if meta is None:
        logger.warning("Component %s (%s) has no metadata entry", node_id, name)
        meta = {}
    box = node.get("absoluteBoundingBox") or {}
    return ComponentRecord(
        id=node_id,
        name=name,
        filename=component_filename(name, image_format),
        key=meta.get("key") or "",
        file_id=file_id,
        description=meta.get("description") or "",
        width=box.get("width"),
        height=box.get("height"),
    )


def walk_components(
    node: Mapping[str, Any],
    component_meta: Mapping[str, Mapping[str, Any]],
    file_id: str,
    image_format: str,
) -> Dict[str, ComponentRecord]:
    """Depth-first search below ``node``; component subtrees are not entered."""
    if node.get("type") == COMPONENT_TYPE:
        record = _build_record(node, component_meta, file_id, image_format)
        return {record.id: record}

    found: Dict[str, ComponentRecord] = {}
    for child in node.get("children") or []:
        found.update(walk_components(child, component_meta, file_id, image_format))
    return found


def collect_components(
    document: Mapping[str, Any],
    component_meta: Mapping[str, Mapping[str, Any]],
    file_id: str,
    image_format: str,
) -> Dict[str, ComponentRecord]:
    """Return every component in ``document`` keyed by node id."""
    components = walk_components(document, component_meta, file_id, image_format)
    if not components:
        raise EmptyResultError("No components found!")
    logger.info("%d components found in the figma file", len(components))
    return components
