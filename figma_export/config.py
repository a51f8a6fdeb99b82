"""Configuration objects and constants for the exporter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

from .errors import ConfigurationError
from .utils import extract_file_key

logger = logging.getLogger("figma_export")

TOKEN_ENV = "FIGMA_TOKEN"
FILE_URL_ENV = "FIGMA_FILE_URL"

DEFAULT_FORMAT = "jpg"
DEFAULT_OUTPUT_DIR = "./build/"
DEFAULT_SCALE = "1"
DEFAULT_CHUNK_SIZE = 100
DEFAULT_CONCURRENCY = 3
DEFAULT_TIMEOUT = 30.0

# key=value names accepted on the command line, mapped to config fields
OVERRIDE_KEYS = {
    "format": "image_format",
    "outputDir": "output_dir",
    "scale": "scale",
}


@dataclass(frozen=True)
class ExportConfig:
    """Settings for a single export run, built once at startup."""

    token: str
    file_url: str
    file_id: str
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    image_format: str = DEFAULT_FORMAT
    scale: str = DEFAULT_SCALE
    chunk_size: int = DEFAULT_CHUNK_SIZE
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float = DEFAULT_TIMEOUT
    fail_fast: bool = True

    @property
    def image_dir(self) -> Path:
        return self.output_dir / self.image_format

    @property
    def is_text_format(self) -> bool:
        return self.image_format == "svg"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str],
        overrides: Optional[Mapping[str, str]] = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
        fail_fast: bool = True,
    ) -> "ExportConfig":
        """Validate the environment and command-line overrides into a config."""
        token = environ.get(TOKEN_ENV)
        if not token:
            raise ConfigurationError(f"Cannot find {TOKEN_ENV} in the environment")

        file_url = environ.get(FILE_URL_ENV)
        if not file_url:
            raise ConfigurationError(f"Cannot find {FILE_URL_ENV} in the environment")

        file_id = extract_file_key(file_url)
        if not file_id:
            raise ConfigurationError(
                f"Cannot find a file key in {FILE_URL_ENV}={file_url!r}"
            )

        if chunk_size < 1:
            raise ConfigurationError(f"chunk size must be at least 1, got {chunk_size}")
        if concurrency < 1:
            raise ConfigurationError(
                f"concurrency must be at least 1, got {concurrency}"
            )

        values = {
            "image_format": DEFAULT_FORMAT,
            "output_dir": DEFAULT_OUTPUT_DIR,
            "scale": DEFAULT_SCALE,
        }
        for key, value in (overrides or {}).items():
            field_name = OVERRIDE_KEYS.get(key)
            if field_name and value:
                values[field_name] = value

        return cls(
            token=token,
            file_url=file_url,
            file_id=file_id,
            output_dir=Path(values["output_dir"]),
            image_format=values["image_format"].lower(),
            scale=values["scale"],
            chunk_size=chunk_size,
            concurrency=concurrency,
            timeout=timeout,
            fail_fast=fail_fast,
        )


def parse_overrides(args: Iterable[str]) -> Dict[str, str]:
    """Collect recognised ``key=value`` arguments; everything else is ignored."""
    overrides: Dict[str, str] = {}
    for arg in args:
        if "=" not in arg:
            logger.debug("Ignoring argument without '=': %s", arg)
            continue
        key, value = arg.split("=", 1)
        if key not in OVERRIDE_KEYS:
            logger.debug("Ignoring unknown option %s", key)
            continue
        overrides[key] = value
    return overrides
