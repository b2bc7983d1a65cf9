"""Manifest storage keyed by registry host, model and variant.

Layout: ``<root>/<registry>/library/<model>/<variant>``, one UTF-8 JSON
document per leaf, in the encoding the registry served it.
"""

from __future__ import annotations

import os
from pathlib import Path

from ollama_pull.errors import InvalidDataError, StoreError
from ollama_pull.schema.manifest import Manifest
from ollama_pull.schema.names import ModelRef
from ollama_pull.utils import logging

NAMESPACE = "library"


class ManifestStore:
    def __init__(self, root: str | Path = "manifests") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.logger = logging.get_logger(__name__)

    def path_for(self, registry: str, ref: ModelRef) -> Path:
        if not registry:
            raise InvalidDataError("Registry must not be empty")
        return self.root / registry / NAMESPACE / ref.model / ref.variant

    def exists(self, registry: str, ref: ModelRef) -> bool:
        return self.path_for(registry, ref).is_file()

    def read_text(self, registry: str, ref: ModelRef) -> str:
        path = self.path_for(registry, ref)
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidDataError(f"Manifest {path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Failed to read manifest for {ref}: {exc}", path=path) from exc

    def get(self, registry: str, ref: ModelRef) -> Manifest:
        return Manifest.from_json(self.read_text(registry, ref))

    def add(self, registry: str, ref: ModelRef, manifest: Manifest | str | bytes) -> Path:
        """Write a manifest, replacing any previous one atomically.

        Raw registry text is written as-is; a :class:`Manifest` is serialized.
        """
        if isinstance(manifest, Manifest):
            data = manifest.to_json().encode("utf-8")
        elif isinstance(manifest, str):
            data = manifest.encode("utf-8")
        else:
            data = manifest

        path = self.path_for(registry, ref)
        temp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(data)
            os.replace(temp_path, path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise StoreError(f"Failed to write manifest for {ref}: {exc}", path=path) from exc
        self.logger.debug("Wrote manifest %s", path)
        return path

    def remove(self, registry: str, ref: ModelRef) -> bool:
        path = self.path_for(registry, ref)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise StoreError(f"Failed to remove manifest for {ref}: {exc}", path=path) from exc
        self.logger.debug("Removed manifest %s", path)
        return True

    def _names(self, folder: Path, *, dirs: bool) -> list[str]:
        if not folder.is_dir():
            return []
        names = []
        for entry in folder.iterdir():
            if entry.name.startswith("."):
                continue
            if (dirs and entry.is_dir()) or (not dirs and entry.is_file()):
                names.append(entry.name)
        return sorted(names)

    def list_registries(self) -> list[str]:
        return self._names(self.root, dirs=True)

    def list_models(self, registry: str) -> list[str]:
        return self._names(self.root / registry / NAMESPACE, dirs=True)

    def list_variants(self, registry: str, model: str) -> list[str]:
        return self._names(self.root / registry / NAMESPACE / model, dirs=False)
