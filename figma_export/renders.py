"""Batched lookup of rendered image URLs for component nodes."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from .batching import chunked
from .client import FigmaClient
from .config import ExportConfig
from .models import ComponentRecord

logger = logging.getLogger("figma_export")


def _count_with_image(components: Dict[str, ComponentRecord]) -> int:
    return sum(1 for record in components.values() if record.image)


def merge_render_urls(
    components: Dict[str, ComponentRecord],
    images: Dict[str, Optional[str]],
) -> int:
    """Copy URLs from one render response into the matching records."""
    merged = 0
    for node_id, url in images.items():
        record = components.get(node_id)
        if record is None:
            logger.debug("Render response contains unknown id %s", node_id)
            continue
        if not url:
            continue
        record.image = url
        merged += 1
    return merged


async def fetch_render_urls(
    client: FigmaClient,
    components: Dict[str, ComponentRecord],
    config: ExportConfig,
) -> Dict[str, ComponentRecord]:
    """Request render URLs for every component, one concurrent call per batch.

    Every batch settles before the first failure, if any, is re-raised. Ids
    the service did not return a URL for are logged and left without an image.
    """
    logger.info("Getting export urls")
    all_ids = list(components)
    logger.info("The number of components: %d", len(all_ids))
    logger.info(
        "The number of components with image: %d", _count_with_image(components)
    )

    batches: List[List[str]] = chunked(all_ids, config.chunk_size)
    logger.debug("Requesting render urls in %d batch(es)", len(batches))
    responses = await asyncio.gather(
        *(
            asyncio.to_thread(
                client.fetch_render_urls,
                config.file_id,
                ids,
                config.image_format,
                config.scale,
            )
            for ids in batches
        ),
        return_exceptions=True,
    )
    for outcome in responses:
        if isinstance(outcome, BaseException):
            raise outcome
    for images in responses:
        merge_render_urls(components, images)

    logger.info(
        "The number of components with image after request: %d",
        _count_with_image(components),
    )
    for record in components.values():
        if not record.image:
            logger.warning(
                "No render url returned for component %s (%s); it will be skipped",
                record.id,
                record.name,
            )
    return components
