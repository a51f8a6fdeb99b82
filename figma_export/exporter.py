"""High-level orchestration of a component export run."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from .client import FigmaClient
from .config import ExportConfig
from .downloader import download_components
from .errors import DownloadError, ExportError
from .manifest import write_manifest
from .models import ComponentRecord, DownloadReport
from .renders import fetch_render_urls
from .walker import collect_components

logger = logging.getLogger("figma_export")

T = TypeVar("T")


@dataclass
class StageResult(Generic[T]):
    """Outcome of one pipeline stage: a value or the error that stopped it."""

    stage: str
    value: Optional[T] = None
    error: Optional[ExportError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ExportResult:
    """Summary of a whole run, returned to the command line."""

    components: Dict[str, ComponentRecord] = field(default_factory=dict)
    manifest_path: Optional[Path] = None
    report: Optional[DownloadReport] = None
    error: Optional[ExportError] = None
    failed_stage: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _run_stage(
    stage: str,
    func: Callable[..., Awaitable[T]],
    *args: Any,
) -> StageResult[T]:
    try:
        value = await func(*args)
    except ExportError as exc:
        return StageResult(stage=stage, error=exc)
    return StageResult(stage=stage, value=value)


def _warn_filename_collisions(components: Dict[str, ComponentRecord]) -> None:
    counts = Counter(record.filename for record in components.values())
    for filename, count in sorted(counts.items()):
        if count > 1:
            logger.warning(
                "%d components share the file name %s; the last download wins",
                count,
                filename,
            )


async def _fetch_document(client: FigmaClient, config: ExportConfig) -> Dict[str, ComponentRecord]:
    response = await asyncio.to_thread(client.fetch_document, config.file_id)
    logger.info("Processing response for %s", response.name or config.file_id)
    return collect_components(
        response.document, response.components, config.file_id, config.image_format
    )


async def _write_manifest(components: Dict[str, ComponentRecord], config: ExportConfig) -> Path:
    try:
        return await asyncio.to_thread(write_manifest, components, config.output_dir)
    except OSError as exc:
        raise ExportError(f"Failed to write manifest: {exc}", stage="manifest") from exc


async def run_export(config: ExportConfig, client: FigmaClient) -> ExportResult:
    """Walk, render, write the manifest and download, stopping at the first failed stage."""
    result = ExportResult()
    logger.info("Exporting %s components", config.file_url)

    walked = await _run_stage("document", _fetch_document, client, config)
    if not walked.ok:
        return _fail(result, walked)
    components = walked.value
    result.components = components
    _warn_filename_collisions(components)

    rendered = await _run_stage("render", fetch_render_urls, client, components, config)
    if not rendered.ok:
        return _fail(result, rendered)

    written = await _run_stage("manifest", _write_manifest, components, config)
    if not written.ok:
        return _fail(result, written)
    result.manifest_path = written.value

    downloaded = await _run_stage(
        "download", download_components, client, components, config
    )
    if not downloaded.ok:
        return _fail(result, downloaded)
    report = downloaded.value
    result.report = report
    if report.failures:
        first = report.failures[0]
        error = DownloadError(
            f"{len(report.failures)} download(s) failed, first: {first.error}",
            component_id=first.component_id,
        )
        return _fail(result, StageResult(stage="download", error=error))
    return result


def _fail(result: ExportResult, stage: StageResult[Any]) -> ExportResult:
    result.error = stage.error
    result.failed_stage = stage.error.stage if stage.error else stage.stage
    logger.error(
        "Error exporting components from Figma (%s stage): %s",
        result.failed_stage,
        stage.error,
    )
    return result


def export_components(config: ExportConfig, client: Optional[FigmaClient] = None) -> ExportResult:
    """Blocking entry point: runs the pipeline on a fresh event loop."""
    if client is not None:
        return asyncio.run(run_export(config, client))
    with FigmaClient(config.token, timeout=config.timeout) as owned:
        return asyncio.run(run_export(config, owned))
