"""Content-addressable blob storage.

Blobs are stored under ``<root>/sha256-<hex>``. A blob is written to
``<root>/sha256-<hex>.tmp`` first and renamed into place once its digest has
been verified, so a file at the permanent path is always complete.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import os
from pathlib import Path

from ollama_pull.errors import DigestMismatchError, InvalidDataError, MalformedDigestError, StoreError
from ollama_pull.schema.digest import READ_CHUNK_SIZE, Digest, Hasher
from ollama_pull.utils import logging

TEMP_SUFFIX = ".tmp"


class BlobStore:
    def __init__(self, root: str | Path = "blobs") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.logger = logging.get_logger(__name__)
        self._locks: dict[Digest, asyncio.Lock] = {}
        self._lock_users: Counter[Digest] = Counter()

    def _normalize(self, digest: Digest | str) -> Digest:
        if isinstance(digest, Digest):
            return digest
        d = digest.strip()
        if ":" in d:
            return Digest.parse(d)
        return Digest.from_path_name(d)

    def path_for(self, digest: Digest | str) -> Path:
        return self.root / self._normalize(digest).path_name

    def temp_path_for(self, digest: Digest | str) -> Path:
        return self.root / f"{self._normalize(digest).path_name}{TEMP_SUFFIX}"

    def exists(self, digest: Digest | str) -> bool:
        return self.path_for(digest).is_file()

    def get_path(self, digest: Digest | str) -> Path | None:
        path = self.path_for(digest)
        return path if path.is_file() else None

    @asynccontextmanager
    async def locked(self, digest: Digest | str) -> AsyncIterator[None]:
        """Hold the per-digest lock guarding ``temp_path_for(digest)``.

        Every task writing a digest's temp file through this store must hold
        it. The lock is dropped once its last user leaves.
        """
        digest = self._normalize(digest)
        lock = self._locks.setdefault(digest, asyncio.Lock())
        self._lock_users[digest] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[digest] -= 1
            if self._lock_users[digest] == 0:
                del self._lock_users[digest]
                del self._locks[digest]

    def commit(self, digest: Digest | str, temp_path: Path) -> Path:
        digest = self._normalize(digest)
        path = self.path_for(digest)
        try:
            os.replace(temp_path, path)
        except OSError as exc:
            raise StoreError(f"Failed to commit blob {digest} from {temp_path}: {exc}", path=path, digest=digest) from exc
        self.logger.debug("Committed blob %s", digest)
        return path

    def discard(self, temp_path: Path) -> None:
        temp_path.unlink(missing_ok=True)

    def verify(self, digest: Digest | str) -> bool:
        """Re-hash a committed blob and compare it to its own digest."""
        digest = self._normalize(digest)
        path = self.path_for(digest)
        hasher = Hasher.for_digest(digest)
        try:
            with path.open("rb") as f:
                hasher.update_from_file(f, READ_CHUNK_SIZE)
        except OSError as exc:
            raise StoreError(f"Failed to read blob {digest}: {exc}", path=path, digest=digest) from exc
        actual = hasher.finalize()
        if actual != digest:
            self.logger.warning("Blob %s failed verification, content hashes to %s", digest, actual)
            return False
        return True

    def read(self, digest: Digest | str) -> bytes:
        digest = self._normalize(digest)
        path = self.path_for(digest)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StoreError(f"Failed to read blob {digest}: {exc}", path=path, digest=digest) from exc

    def read_text(self, digest: Digest | str) -> str:
        content = self.read(digest)
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidDataError(f"Blob {self._normalize(digest)} is not valid UTF-8: {exc}") from exc

    def save(self, digest: Digest | str, content: bytes) -> Path:
        expected = self._normalize(digest)
        hasher = Hasher.for_digest(expected)
        hasher.update(content)
        actual = hasher.finalize()
        if expected != actual:
            raise DigestMismatchError(expected, actual)
        temp_path = self.temp_path_for(expected)
        try:
            temp_path.write_bytes(content)
        except OSError as exc:
            self.discard(temp_path)
            raise StoreError(f"Failed to write blob {expected}: {exc}", path=temp_path, digest=expected) from exc
        return self.commit(expected, temp_path)

    def list_blobs(self) -> list[Digest]:
        digests = []
        for path in sorted(self.root.iterdir()):
            if not path.is_file() or path.name.endswith(TEMP_SUFFIX):
                continue
            try:
                digests.append(Digest.from_path_name(path.name))
            except MalformedDigestError:
                continue
        return digests
