from __future__ import annotations

from typing import Annotated

from pydantic import ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel
from pydantic.dataclasses import dataclass

from ollama_pull.errors import InvalidManifestError
from ollama_pull.schema.digest import Digest

# https://github.com/ollama/ollama/blob/main/docs/api.md#pull-a-model
MANIFEST_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"
MEDIA_TYPE_IMAGE_CONFIG = "application/vnd.docker.container.image.v1+json"
MEDIA_TYPE_IMAGE_MODEL = "application/vnd.ollama.image.model"
MEDIA_TYPE_IMAGE_LICENSE = "application/vnd.ollama.image.license"
MEDIA_TYPE_IMAGE_TEMPLATE = "application/vnd.ollama.image.template"
MEDIA_TYPE_IMAGE_PARAMS = "application/vnd.ollama.image.params"
MEDIA_TYPE_IMAGE_SYSTEM = "application/vnd.ollama.image.system"
MEDIA_TYPE_IMAGE_ADAPTER = "application/vnd.ollama.image.adapter"

_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@dataclass(frozen=True, config=_CONFIG)
class Artifact:
    media_type: str
    digest: Digest
    size: Annotated[int, Field(ge=0)]
    from_: str | None = Field(default=None, alias="from")


@dataclass(frozen=True, config=_CONFIG)
class Manifest:
    """Registry description of one model variant: a config blob plus ordered layers."""

    schema_version: int
    media_type: str
    config: Artifact
    layers: tuple[Artifact, ...] = ()

    @classmethod
    def from_json(cls, data: str | bytes) -> Manifest:
        try:
            return _MANIFEST_ADAPTER.validate_json(data)
        except ValidationError as exc:
            raise InvalidManifestError(f"Invalid manifest: {exc}") from exc

    def to_json(self) -> str:
        return _MANIFEST_ADAPTER.dump_json(self, by_alias=True, exclude_none=True).decode("utf-8")

    @property
    def artifacts(self) -> list[Artifact]:
        return [self.config, *self.layers]

    @property
    def digests(self) -> list[Digest]:
        return [a.digest for a in self.artifacts]

    @property
    def total_size(self) -> int:
        return self.config.size + sum(layer.size for layer in self.layers)

    def find_media_type(self, media_type: str) -> Artifact | None:
        return next((layer for layer in self.layers if layer.media_type == media_type), None)


_MANIFEST_ADAPTER = TypeAdapter(Manifest)
