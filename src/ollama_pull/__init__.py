from ollama_pull.__about__ import __version__
from ollama_pull.config import Settings
from ollama_pull.download.registry import RegistryConfig
from ollama_pull.pull import BlobResult, BlobStatus, Puller
from ollama_pull.schema.digest import Digest, HashAlgorithm, Hasher
from ollama_pull.schema.manifest import Artifact, Manifest
from ollama_pull.schema.names import ModelRef
from ollama_pull.store import BlobStore, LocalStore, ManifestStore

__all__ = [
    "Artifact",
    "BlobResult",
    "BlobStatus",
    "BlobStore",
    "Digest",
    "HashAlgorithm",
    "Hasher",
    "LocalStore",
    "ManifestStore",
    "Manifest",
    "ModelRef",
    "Puller",
    "RegistryConfig",
    "Settings",
    "__version__",
]
