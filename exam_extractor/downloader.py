"""
Source Downloader
=================
Fetches source PDFs over HTTP when they are not available locally.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


class DownloadError(RuntimeError):
    """Raised when a source document cannot be fetched."""


def download_pdf(url: str, timeout: int = DEFAULT_TIMEOUT) -> bytes:
    """
    Download a document and return its raw bytes.

    Raises:
        DownloadError: On connection failures and non-2xx responses.
    """
    logger.info(f"Downloading {url}")
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    logger.info(f"Downloaded {len(resp.content)} bytes from {url}")
    return resp.content


def fetch_pdf(url: str, dest: str | Path, timeout: int = DEFAULT_TIMEOUT) -> Path:
    """Download a document to `dest`, creating parent directories."""
    dest = Path(dest)
    data = download_pdf(url, timeout=timeout)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    logger.info(f"Saved download to: {dest}")
    return dest
