"""Pull a model: fetch its manifest, then every blob it references.

Each blob goes through::

    pending -> skipped
    pending -> downloading -> verifying -> committed | rejected

Blobs are processed one at a time, config first and then the layers in
manifest order. The manifest is written only after every blob is skipped or
committed, so a manifest on disk always means all of its blobs are present.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import httpx

from ollama_pull.download.http import DOWNLOAD_CHUNK_SIZE, download
from ollama_pull.download.progress import NO_PROGRESS, ObserverProgress, ProgressDisplay, PullObserver
from ollama_pull.download.registry import RegistryConfig
from ollama_pull.errors import DigestMismatchError, StoreError, TransportError
from ollama_pull.schema.digest import Digest, Hasher
from ollama_pull.schema.manifest import MANIFEST_MEDIA_TYPE, Manifest
from ollama_pull.schema.names import ModelRef
from ollama_pull.schema.pull import PullResponse
from ollama_pull.store.local import LocalStore
from ollama_pull.utils import logging
from ollama_pull.utils.human import size_units


class BlobStatus(str, Enum):
    SKIPPED = "skipped"
    SUCCESS = "success"


@dataclass(frozen=True)
class BlobResult:
    digest: Digest
    status: BlobStatus


class Puller:
    def __init__(
        self,
        store: LocalStore,
        client: httpx.AsyncClient,
        config: RegistryConfig | None = None,
        observer: PullObserver | None = None,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
    ) -> None:
        self.store = store
        self.client = client
        self.config = config or RegistryConfig()
        self.observer = observer
        self.chunk_size = chunk_size
        self.logger = logging.get_logger(__name__)

    @property
    def registry(self) -> str:
        return self.config.host

    def _notify(self, status: str, **kwargs) -> None:
        if self.observer is not None:
            self.observer(PullResponse(status=status, **kwargs))

    def _progress(self, digest: Digest) -> ProgressDisplay:
        if self.observer is None:
            return NO_PROGRESS
        return ObserverProgress(self.observer, str(digest))

    async def fetch_manifest(self, ref: ModelRef) -> tuple[Manifest, bytes]:
        url = self.config.manifest_url(ref)
        self._notify("pulling manifest")
        self.logger.info("Pulling manifest for %s from %s", ref, url)
        try:
            response = await self.client.get(url, headers={"Accept": MANIFEST_MEDIA_TYPE}, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to fetch manifest for {ref}: {exc}", url=url) from exc
        if not response.is_success:
            raise TransportError(
                f"Failed to fetch manifest for {ref}: HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        raw = response.content
        return Manifest.from_json(raw), raw

    async def pull_blob(self, digest: Digest, size: int | None = None) -> BlobResult:
        blobs = self.store.blobs
        async with blobs.locked(digest):
            if blobs.exists(digest):
                return self._skip(digest, size)

            temp_path = blobs.temp_path_for(digest)
            hasher = Hasher.for_digest(digest)
            self.logger.debug("Downloading blob %s (%s)", digest, size_units(size) if size is not None else "unknown size")
            await download(
                self.client,
                self.config.blob_url(digest),
                temp_path,
                hasher,
                progress=self._progress(digest),
                chunk_size=self.chunk_size,
            )

            self._notify("verifying sha256 digest", digest=str(digest))
            actual = hasher.finalize()
            if actual != digest:
                blobs.discard(temp_path)
                self.logger.warning("Rejected blob %s: content hashes to %s", digest, actual)
                raise DigestMismatchError(digest, actual)

            try:
                blobs.commit(digest, temp_path)
            except StoreError:
                # another writer sharing the blob directory committed it first
                if not temp_path.exists() and blobs.exists(digest):
                    return self._skip(digest, size)
                raise
            return BlobResult(digest, BlobStatus.SUCCESS)

    def _skip(self, digest: Digest, size: int | None) -> BlobResult:
        self.logger.debug("Blob %s already present, skipping", digest)
        self._notify(f"pulling {digest}", digest=str(digest), total=size, completed=size)
        return BlobResult(digest, BlobStatus.SKIPPED)

    async def pull_manifest(self, ref: ModelRef, manifest: Manifest, raw: str | bytes | None = None) -> list[BlobResult]:
        """Pull every blob of ``manifest`` and then persist the manifest.

        ``raw`` is the document as served by the registry; when given it is
        stored verbatim instead of re-serializing ``manifest``.
        """
        results = []
        for artifact in manifest.artifacts:
            results.append(await self.pull_blob(artifact.digest, artifact.size))

        self._notify("writing manifest")
        self.store.manifests.add(self.registry, ref, raw if raw is not None else manifest)
        self._notify("success")
        self.logger.info("Pulled %s (%s)", ref, size_units(manifest.total_size))
        return results

    async def pull(self, ref: ModelRef | str) -> list[BlobResult]:
        if isinstance(ref, str):
            ref = ModelRef.parse(ref)
        manifest, raw = await self.fetch_manifest(ref)
        return await self.pull_manifest(ref, manifest, raw)
