"""Download the four gzip-compressed MNIST IDX files.

Transfers stream into ``<name>.part`` and are renamed into place only once
complete, so a failed download never leaves a truncated archive behind.
Failures are raised as :class:`~digit_training.errors.DownloadError` and
abort the remaining downloads.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
from loguru import logger
from tqdm import tqdm

from digit_training.constants import MNIST_FILES, MNIST_URL
from digit_training.errors import DownloadError

if TYPE_CHECKING:
    from loguru import Logger

__all__ = ["download", "download_mnist", "mnist_files_present"]

_CHUNK_SIZE = 64 * 1024


def download(
    url: str,
    destination: Path,
    *,
    client: httpx.Client,
    log: Logger | None = None,
) -> Path:
    """Stream ``url`` into ``destination``, overwriting any existing file.

    Args:
        url: Source URL.
        destination: Target file path. Its parent directory must exist.
        client: HTTP client used for the transfer.
        log: Optional logger; defaults to the module logger.

    Returns:
        The destination path.

    Raises:
        DownloadError: On any HTTP, transport or filesystem failure.
    """
    log = log or logger
    part = destination.with_name(destination.name + ".part")
    try:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            total = int(response.headers.get("content-length", 0)) or None
            with (
                open(part, "wb") as f,
                tqdm(
                    total=total,
                    unit="B",
                    unit_scale=True,
                    desc=destination.name,
                    disable=None,
                ) as bar,
            ):
                for chunk in response.iter_bytes(_CHUNK_SIZE):
                    f.write(chunk)
                    bar.update(len(chunk))
        part.replace(destination)
    except httpx.HTTPError as e:
        part.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}") from e
    except OSError as e:
        part.unlink(missing_ok=True)
        raise DownloadError(f"Failed to write {destination}: {e}") from e

    log.debug(f"Downloaded {url} -> {destination}")
    return destination


def _download_with_retries(
    url: str,
    destination: Path,
    *,
    client: httpx.Client,
    retries: int,
    backoff_seconds: float,
    log: Logger,
) -> None:
    for attempt in range(retries + 1):
        try:
            download(url, destination, client=client, log=log)
            return
        except DownloadError as e:
            if attempt >= retries:
                raise
            delay = backoff_seconds * (attempt + 1)
            log.warning(
                f"{e} (attempt {attempt + 1}/{retries + 1}), retrying in {delay:.1f}s"
            )
            time.sleep(delay)


def download_mnist(
    directory: str | Path,
    *,
    base_url: str = MNIST_URL,
    client: httpx.Client | None = None,
    retries: int = 0,
    backoff_seconds: float = 1.0,
    timeout_seconds: float = 60.0,
    log: Logger | None = None,
) -> list[Path]:
    """Download the MNIST database into ``directory``.

    Creates ``directory`` if needed, then fetches the training images,
    training labels, test images and test labels in that order. Existing
    files are overwritten.

    Args:
        directory: Destination folder.
        base_url: Base URL the four file names are appended to.
        client: Optional HTTP client. When omitted a client is created and
            closed here.
        retries: Extra attempts per file after a failed transfer. ``0``
            means a failure aborts immediately.
        backoff_seconds: Delay before the first retry; grows linearly.
        timeout_seconds: Timeout for the internally created client.
        log: Optional logger; defaults to the module logger.

    Returns:
        Paths of the four downloaded files.

    Raises:
        DownloadError: If the directory cannot be created or any transfer
            fails after its retries.
    """
    log = log or logger
    base_dir = Path(directory)
    try:
        base_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DownloadError(f"Unable to create destination folder {base_dir}") from e

    log.info(f"Downloading MNIST database from {base_url} ...")

    owns_client = client is None
    http = client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)
    paths: list[Path] = []
    try:
        for name in MNIST_FILES:
            url = base_url.rstrip("/") + "/" + name
            destination = base_dir / name
            _download_with_retries(
                url,
                destination,
                client=http,
                retries=retries,
                backoff_seconds=backoff_seconds,
                log=log,
            )
            paths.append(destination)
    finally:
        if owns_client:
            http.close()

    log.info(f"MNIST database downloaded into {base_dir}")
    return paths


def mnist_files_present(directory: str | Path) -> bool:
    """Return True when all four MNIST archives exist under ``directory``."""
    base_dir = Path(directory)
    return all((base_dir / name).is_file() for name in MNIST_FILES)
