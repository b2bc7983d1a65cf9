from __future__ import annotations

from urllib.parse import urljoin, urlsplit

from pydantic.dataclasses import dataclass

from ollama_pull.schema.digest import Digest
from ollama_pull.schema.names import ModelRef

DEFAULT_REGISTRY_URL = "https://registry.ollama.ai/"
DEFAULT_REGISTRY_VERSION = "v2"


@dataclass(frozen=True)
class RegistryConfig:
    base_url: str = DEFAULT_REGISTRY_URL
    version: str = DEFAULT_REGISTRY_VERSION

    @property
    def host(self) -> str:
        """Registry key used in the local manifest tree."""
        host = urlsplit(self.base_url).hostname
        if not host:
            raise ValueError(f"Registry URL {self.base_url!r} has no host")
        return host

    def _url(self, path: str) -> str:
        base = self.base_url if self.base_url.endswith("/") else f"{self.base_url}/"
        return urljoin(base, f"{self.version}/{path}")

    def manifest_url(self, ref: ModelRef) -> str:
        return self._url(f"library/{ref.model}/manifests/{ref.variant}")

    def blob_url(self, digest: Digest) -> str:
        return self._url(f"library/registry/blobs/{digest.path_name}")
