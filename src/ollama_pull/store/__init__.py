"""Local on-disk storage primitives.

This package groups together the local filesystem stores used by the puller:
- `BlobStore`: content-addressed blob storage under ``models/blobs``.
- `ManifestStore`: manifests keyed by registry, model and variant.
- `LocalStore`: a small façade that composes both.
"""

from ollama_pull.store.blobs import BlobStore
from ollama_pull.store.local import LocalStore
from ollama_pull.store.manifests import ManifestStore

__all__ = ["BlobStore", "LocalStore", "ManifestStore"]
