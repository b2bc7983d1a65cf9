import json

import pytest

from ollama_pull.errors import InvalidManifestError
from ollama_pull.schema.digest import Digest
from ollama_pull.schema.manifest import (
    MEDIA_TYPE_IMAGE_MODEL,
    MEDIA_TYPE_IMAGE_TEMPLATE,
    Manifest,
)

MODEL = Digest.of(b"model")
TEMPLATE = Digest.of(b"template")
CONFIG = Digest.of(b"config")

REGISTRY_MANIFEST = {
    "schemaVersion": 2,
    "mediaType": "application/vnd.docker.distribution.manifest.v2+json",
    "config": {"mediaType": "application/vnd.docker.container.image.v1+json", "digest": str(CONFIG), "size": 6},
    "layers": [
        {"mediaType": MEDIA_TYPE_IMAGE_MODEL, "digest": str(MODEL), "size": 5, "from": "/models/base"},
        {"mediaType": MEDIA_TYPE_IMAGE_TEMPLATE, "digest": str(TEMPLATE), "size": 8},
    ],
}


def test_parse_registry_manifest() -> None:
    manifest = Manifest.from_json(json.dumps(REGISTRY_MANIFEST))
    assert manifest.schema_version == 2
    assert manifest.config.digest == CONFIG
    assert [layer.digest for layer in manifest.layers] == [MODEL, TEMPLATE]
    assert manifest.layers[0].from_ == "/models/base"
    assert manifest.layers[1].from_ is None


def test_artifacts_and_total_size() -> None:
    manifest = Manifest.from_json(json.dumps(REGISTRY_MANIFEST).encode())
    assert manifest.digests == [CONFIG, MODEL, TEMPLATE]
    assert manifest.total_size == 6 + 5 + 8


def test_find_media_type() -> None:
    manifest = Manifest.from_json(json.dumps(REGISTRY_MANIFEST))
    assert manifest.find_media_type(MEDIA_TYPE_IMAGE_TEMPLATE).digest == TEMPLATE
    assert manifest.find_media_type("application/vnd.ollama.image.license") is None


def test_to_json_uses_registry_keys() -> None:
    manifest = Manifest.from_json(json.dumps(REGISTRY_MANIFEST))
    data = json.loads(manifest.to_json())
    assert data == REGISTRY_MANIFEST
    assert Manifest.from_json(manifest.to_json()) == manifest


@pytest.mark.parametrize(
    "document",
    [
        "not json",
        json.dumps({"schemaVersion": 2}),
        json.dumps({**REGISTRY_MANIFEST, "config": {**REGISTRY_MANIFEST["config"], "digest": "sha256:abc"}}),
        json.dumps({**REGISTRY_MANIFEST, "config": {**REGISTRY_MANIFEST["config"], "size": -1}}),
    ],
)
def test_invalid_manifest(document: str) -> None:
    with pytest.raises(InvalidManifestError):
        Manifest.from_json(document)
