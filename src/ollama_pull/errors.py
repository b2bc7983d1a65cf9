"""Exception hierarchy for pulling and storing model artifacts."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ollama_pull.schema.digest import Digest


class PullError(Exception):
    """Base class for every error raised by this package."""


class TransportError(PullError):
    """Connection failure or non-success HTTP status."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class InvalidDataError(PullError, ValueError):
    """Input that cannot be parsed: digests, manifests, blob text."""


class MalformedDigestError(InvalidDataError):
    pass


class InvalidManifestError(InvalidDataError):
    pass


class DigestMismatchError(PullError):
    def __init__(self, expected: Digest, actual: Digest) -> None:
        super().__init__(f"Digest mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class StoreError(PullError, OSError):
    """Filesystem failure inside the blob or manifest store."""

    def __init__(self, message: str, *, path: Path, digest: Digest | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.digest = digest


class ArtifactNotFoundError(PullError, LookupError):
    def __init__(self, ref: object, media_type: str) -> None:
        super().__init__(f"No {media_type} layer found for {ref}")
        self.ref = ref
        self.media_type = media_type
