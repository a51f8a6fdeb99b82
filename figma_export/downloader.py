"""Bounded-concurrency download of rendered component images."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from filetype import guess

from .client import FigmaClient
from .config import ExportConfig
from .errors import DownloadError, ExportError
from .models import ComponentRecord, DownloadFailure, DownloadReport

logger = logging.getLogger("figma_export")

# filetype reports these extensions for the formats Figma renders
SNIFFED_EXTENSIONS = {
    "jpg": {"jpg", "jpeg"},
    "png": {"png"},
    "pdf": {"pdf"},
}


def sniff_extension(data: bytes) -> Optional[str]:
    """Guess the extension of a rendered file from its leading bytes."""
    kind = guess(data)
    if kind is None:
        return None
    ext = kind.extension.lower()
    if ext == "jpeg":
        return "jpg"
    return ext


def write_image(destination: Path, body: Union[str, bytes]) -> None:
    """Create the parent directory if needed and write the image."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(body, str):
        destination.write_text(body, encoding="utf-8")
    else:
        destination.write_bytes(body)


class BoundedDownloader:
    """
    Downloads component images through a fixed number of worker tasks.

    Usage:
        downloader = BoundedDownloader(client, config)
        report = await downloader.run(components.values())
    """

    def __init__(self, client: FigmaClient, config: ExportConfig) -> None:
        self.client = client
        self.config = config
        self._in_flight = 0
        self._stop = False
        self._first_error: Optional[DownloadError] = None

    def _check_format(self, record: ComponentRecord, body: Union[str, bytes]) -> None:
        if isinstance(body, str):
            return
        expected = SNIFFED_EXTENSIONS.get(self.config.image_format)
        if not expected:
            return
        detected = sniff_extension(body)
        if detected not in expected:
            logger.warning(
                "Component %s: expected %s data but got %s",
                record.id,
                self.config.image_format,
                detected or "unknown",
            )

    async def download_one(self, record: ComponentRecord) -> Path:
        """Fetch one component's image and write it under the format directory."""
        try:
            body = await asyncio.to_thread(
                self.client.download, record.image, self.config.image_format
            )
            self._check_format(record, body)
            destination = self.config.image_dir / record.filename
            await asyncio.to_thread(write_image, destination, body)
        except ExportError as exc:
            raise DownloadError(
                f"Failed to download {record.name} ({record.id}): {exc}",
                component_id=record.id,
            ) from exc
        except OSError as exc:
            raise DownloadError(
                f"Failed to write {record.filename} ({record.id}): {exc}",
                component_id=record.id,
            ) from exc
        logger.debug("Saved %s", destination)
        return destination

    def _record_failure(
        self, record: ComponentRecord, error: DownloadError, report: DownloadReport
    ) -> None:
        logger.error("%s (url: %s)", error, record.image)
        report.failures.append(DownloadFailure(record.id, record.image or "", str(error)))
        if self.config.fail_fast and self._first_error is None:
            self._first_error = error
            self._stop = True

    async def _worker(
        self,
        queue: "asyncio.Queue[Optional[ComponentRecord]]",
        report: DownloadReport,
    ) -> None:
        while True:
            record = await queue.get()
            if record is None:
                queue.task_done()
                break
            if self._stop:
                report.skipped.append(record.id)
                queue.task_done()
                continue

            self._in_flight += 1
            report.peak_in_flight = max(report.peak_in_flight, self._in_flight)
            try:
                path = await self.download_one(record)
            except DownloadError as exc:
                self._record_failure(record, exc, report)
            except Exception as exc:  # pylint: disable=broad-except
                error = DownloadError(
                    f"Unexpected error downloading {record.name} ({record.id}): {exc!r}",
                    component_id=record.id,
                )
                error.__cause__ = exc
                self._record_failure(record, error, report)
            else:
                report.written.append(path)
            finally:
                self._in_flight -= 1
                queue.task_done()

    async def run(self, components: Iterable[ComponentRecord]) -> DownloadReport:
        """Download every record that has an image; returns once all tasks settled.

        With ``fail_fast`` the first failure stops the remaining queue and is
        raised after in-flight downloads finish. Otherwise failures are
        collected into the report.
        """
        report = DownloadReport()
        self._in_flight = 0
        self._stop = False
        self._first_error = None

        queue: "asyncio.Queue[Optional[ComponentRecord]]" = asyncio.Queue()
        pending: List[ComponentRecord] = []
        for record in components:
            if not record.image:
                report.skipped.append(record.id)
                continue
            pending.append(record)
        for record in pending:
            queue.put_nowait(record)

        num_workers = min(self.config.concurrency, max(len(pending), 1))
        for _ in range(num_workers):
            queue.put_nowait(None)

        logger.info(
            "Downloading %d images with %d workers", len(pending), num_workers
        )
        workers = [
            asyncio.create_task(self._worker(queue, report))
            for _ in range(num_workers)
        ]
        # a crashed worker surfaces here instead of leaving join() waiting
        await asyncio.gather(*workers)
        await queue.join()

        if self._first_error is not None:
            raise self._first_error
        logger.info(
            "Downloaded %d images (%d skipped, %d failed)",
            len(report.written),
            len(report.skipped),
            len(report.failures),
        )
        return report


async def download_components(
    client: FigmaClient,
    components: Dict[str, ComponentRecord],
    config: ExportConfig,
) -> DownloadReport:
    return await BoundedDownloader(client, config).run(components.values())
