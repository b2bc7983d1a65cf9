from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import json
from pathlib import Path
from typing import Any

from ollama_pull.errors import ArtifactNotFoundError, InvalidDataError
from ollama_pull.schema.digest import Digest
from ollama_pull.schema.manifest import (
    MEDIA_TYPE_IMAGE_MODEL,
    MEDIA_TYPE_IMAGE_PARAMS,
    MEDIA_TYPE_IMAGE_TEMPLATE,
)
from ollama_pull.schema.names import ModelRef
from ollama_pull.store.blobs import BlobStore
from ollama_pull.store.manifests import ManifestStore
from ollama_pull.utils import logging


@dataclass
class LocalModel:
    registry: str
    ref: ModelRef
    size: int
    modified_at: datetime


@dataclass
class VerifyReport:
    registry: str
    ref: ModelRef
    missing: list[Digest] = field(default_factory=list)
    invalid: list[Digest] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.invalid


@dataclass
class ModelRun:
    """What the inference runtime needs once a model is fully pulled."""

    model_path: Path
    template: str | None
    params: dict[str, Any]


class LocalStore:
    """Local filesystem cache rooted at ``<base>/models``.

    Composes the independent blob and manifest stores so callers only have to
    wire up a single dependency.
    """

    def __init__(self, base: str | Path) -> None:
        self.base = Path(base)
        self.logger = logging.get_logger(__name__)
        self._blobs = BlobStore(root=self.models_path / "blobs")
        self._manifests = ManifestStore(root=self.models_path / "manifests")

    @property
    def models_path(self) -> Path:
        return self.base / "models"

    @property
    def blobs(self) -> BlobStore:
        return self._blobs

    @property
    def manifests(self) -> ManifestStore:
        return self._manifests

    def _refs(self, registry: str | None = None) -> list[tuple[str, ModelRef]]:
        registries = [registry] if registry else self._manifests.list_registries()
        return [
            (reg, ModelRef(model, variant))
            for reg in registries
            for model in self._manifests.list_models(reg)
            for variant in self._manifests.list_variants(reg, model)
        ]

    def list_models(self, registry: str | None = None, prefix: str | None = None) -> list[LocalModel]:
        """List stored manifests, newest first.

        ``prefix`` keeps only models whose ``model:variant`` name starts with it.
        Manifests that cannot be read are logged and skipped.
        """
        models: list[LocalModel] = []
        for reg, ref in self._refs(registry):
            if prefix and not str(ref).startswith(prefix):
                continue
            try:
                manifest = self._manifests.get(reg, ref)
            except InvalidDataError as exc:
                self.logger.warning("Skipping unreadable manifest for %s: %s", ref, exc)
                continue
            stats = self._manifests.path_for(reg, ref).stat()
            models.append(
                LocalModel(
                    registry=reg,
                    ref=ref,
                    size=manifest.total_size,
                    modified_at=datetime.fromtimestamp(stats.st_mtime),
                )
            )
        return sorted(models, key=lambda m: m.modified_at, reverse=True)

    def remove(self, registry: str, ref: ModelRef) -> bool:
        # Blobs stay behind: they may be shared with other manifests.
        return self._manifests.remove(registry, ref)

    def verify(self, registry: str, ref: ModelRef, check_blobs: bool = False) -> VerifyReport:
        manifest = self._manifests.get(registry, ref)
        report = VerifyReport(registry=registry, ref=ref)
        for digest in manifest.digests:
            if not self._blobs.exists(digest):
                report.missing.append(digest)
            elif check_blobs and not self._blobs.verify(digest):
                report.invalid.append(digest)
        return report

    def verify_all(self, check_blobs: bool = False) -> list[VerifyReport]:
        return [self.verify(reg, ref, check_blobs=check_blobs) for reg, ref in self._refs()]

    def prepare_run(self, registry: str, ref: ModelRef) -> ModelRun:
        manifest = self._manifests.get(registry, ref)

        model_layer = manifest.find_media_type(MEDIA_TYPE_IMAGE_MODEL)
        if model_layer is None:
            raise ArtifactNotFoundError(ref, MEDIA_TYPE_IMAGE_MODEL)

        template = None
        template_layer = manifest.find_media_type(MEDIA_TYPE_IMAGE_TEMPLATE)
        if template_layer is not None:
            template = self._blobs.read_text(template_layer.digest)

        params: dict[str, Any] = {}
        params_layer = manifest.find_media_type(MEDIA_TYPE_IMAGE_PARAMS)
        if params_layer is not None:
            try:
                params = json.loads(self._blobs.read_text(params_layer.digest))
            except json.JSONDecodeError as exc:
                raise InvalidDataError(f"Params layer {params_layer.digest} for {ref} is not JSON: {exc}") from exc

        return ModelRun(model_path=self._blobs.path_for(model_layer.digest), template=template, params=params)
