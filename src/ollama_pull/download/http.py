"""Resumable HTTP download with incremental hashing."""

from __future__ import annotations

from pathlib import Path

import httpx

from ollama_pull.download.progress import NO_PROGRESS, ProgressDisplay
from ollama_pull.errors import StoreError, TransportError
from ollama_pull.schema.digest import Hasher
from ollama_pull.utils import logging

DOWNLOAD_CHUNK_SIZE = 1024 * 1024

logger = logging.get_logger(__name__)


async def download(
    client: httpx.AsyncClient,
    url: str,
    destination: Path,
    hasher: Hasher,
    progress: ProgressDisplay = NO_PROGRESS,
    chunk_size: int = DOWNLOAD_CHUNK_SIZE,
) -> int:
    """Fetch ``url`` into ``destination``, resuming from any bytes already there.

    Bytes already on disk are fed through ``hasher`` first so that, once the
    transfer completes, the hasher holds the state of the whole file. The hasher
    is not finalized here. On any failure the partial file is left in place so
    a later call can resume from it.

    Returns the number of bytes in ``destination`` when the transfer ends.
    """
    downloaded = 0
    if destination.exists():
        try:
            with destination.open("rb") as f:
                downloaded = hasher.update_from_file(f)
        except OSError as exc:
            raise StoreError(f"Failed to read partial download {destination}: {exc}", path=destination) from exc

    headers = {}
    if downloaded > 0:
        headers["Range"] = f"bytes={downloaded}-"
        logger.debug("Resuming %s at byte %d", url, downloaded)

    try:
        async with client.stream("GET", url, headers=headers, follow_redirects=True) as response:
            if downloaded > 0 and response.status_code == httpx.codes.REQUESTED_RANGE_NOT_SATISFIABLE:
                # nothing left past the end of the partial file
                logger.debug("Partial download of %s already holds %d bytes", url, downloaded)
                return downloaded
            if not response.is_success:
                raise TransportError(
                    f"Failed to download {url}: HTTP {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )

            mode = "ab"
            if downloaded > 0 and response.status_code != httpx.codes.PARTIAL_CONTENT:
                logger.warning("Server ignored range request for %s, restarting download", url)
                hasher.reset()
                downloaded = 0
                mode = "wb"

            content_length = response.headers.get("content-length")
            total = downloaded + int(content_length) if content_length is not None else None
            handle = progress.start(total)
            handle.update(downloaded)

            with destination.open(mode) as f:
                async for chunk in response.aiter_bytes(chunk_size):
                    f.write(chunk)
                    hasher.update(chunk)
                    downloaded += len(chunk)
                    handle.update(downloaded)
            handle.finish()
    except httpx.HTTPError as exc:
        raise TransportError(f"Failed to download {url}: {exc}", url=url) from exc
    except OSError as exc:
        raise StoreError(f"Failed to write {destination}: {exc}", path=destination) from exc

    logger.debug("Downloaded %d bytes from %s", downloaded, url)
    return downloaded
