"""Shared fixtures: an in-memory registry served through ``httpx.MockTransport``."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
import re

import httpx
import pytest

from ollama_pull.download.registry import RegistryConfig
from ollama_pull.schema.digest import Digest
from ollama_pull.schema.manifest import MANIFEST_MEDIA_TYPE, MEDIA_TYPE_IMAGE_CONFIG, Artifact, Manifest
from ollama_pull.store.local import LocalStore

REGISTRY_URL = "https://registry.test/"
_BLOB_PATH = re.compile(r"^/v2/library/registry/blobs/(?P<name>[^/]+)$")
_MANIFEST_PATH = re.compile(r"^/v2/library/(?P<model>[^/]+)/manifests/(?P<variant>[^/]+)$")


class InterruptedStream(httpx.AsyncByteStream):
    """Yields ``data`` then fails like a dropped connection."""

    def __init__(self, data: bytes) -> None:
        self.data = data

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self.data:
            yield self.data
        raise httpx.ReadError("connection reset")


class ChunkedStream(httpx.AsyncByteStream):
    """Yields ``data`` in ``chunk_size`` pieces, handing control back to the loop in between."""

    def __init__(self, data: bytes, chunk_size: int) -> None:
        self.data = data
        self.chunk_size = chunk_size

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for start in range(0, len(self.data), self.chunk_size):
            yield self.data[start : start + self.chunk_size]
            await asyncio.sleep(0)


class FakeRegistry:
    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.manifests: dict[tuple[str, str], bytes] = {}
        self.requests: list[httpx.Request] = []
        self.ignore_range = False
        # blob path name -> number of bytes to send before dropping the connection
        self.interrupt: dict[str, int] = {}
        # blob path name -> bytes served instead of the real content
        self.corrupt: dict[str, bytes] = {}
        # serve blobs in pieces of this size, yielding between them
        self.stream_chunk_size: int | None = None

    def add_blob(self, content: bytes) -> Digest:
        digest = Digest.of(content)
        self.blobs[digest.path_name] = content
        return digest

    def add_manifest(self, model: str, variant: str, manifest: Manifest | bytes) -> bytes:
        raw = manifest.to_json().encode("utf-8") if isinstance(manifest, Manifest) else manifest
        self.manifests[(model, variant)] = raw
        return raw

    def blob_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/blobs/" in r.url.path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if match := _MANIFEST_PATH.match(request.url.path):
            raw = self.manifests.get((match["model"], match["variant"]))
            if raw is None:
                return httpx.Response(404, json={"errors": [{"code": "MANIFEST_UNKNOWN"}]})
            return httpx.Response(200, content=raw, headers={"Content-Type": MANIFEST_MEDIA_TYPE})
        if match := _BLOB_PATH.match(request.url.path):
            return self._blob(request, match["name"])
        return httpx.Response(404)

    def _blob(self, request: httpx.Request, name: str) -> httpx.Response:
        content = self.blobs.get(name)
        if content is None:
            return httpx.Response(404)
        content = self.corrupt.get(name, content)

        status = 200
        start = 0
        range_header = request.headers.get("Range")
        if range_header and not self.ignore_range:
            start = int(range_header.removeprefix("bytes=").rstrip("-"))
            if start >= len(content):
                return httpx.Response(416)
            status = 206
        body = content[start:]

        if name in self.interrupt:
            sent = body[: self.interrupt.pop(name)]
            return httpx.Response(status, stream=InterruptedStream(sent), headers={"Content-Length": str(len(body))})
        if self.stream_chunk_size:
            stream = ChunkedStream(body, self.stream_chunk_size)
            return httpx.Response(status, stream=stream, headers={"Content-Length": str(len(body))})
        return httpx.Response(status, content=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def registry_config() -> RegistryConfig:
    return RegistryConfig(base_url=REGISTRY_URL)


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "ollama")


def _make_manifest(config: tuple[Digest, int], *layers: tuple[str, Digest, int]) -> Manifest:
    return Manifest(
        schema_version=2,
        media_type=MANIFEST_MEDIA_TYPE,
        config=Artifact(media_type=MEDIA_TYPE_IMAGE_CONFIG, digest=config[0], size=config[1]),
        layers=tuple(Artifact(media_type=m, digest=d, size=s) for m, d, s in layers),
    )


@pytest.fixture
def make_manifest():
    return _make_manifest
