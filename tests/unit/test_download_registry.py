from ollama_pull.download.registry import RegistryConfig
from ollama_pull.schema.digest import Digest
from ollama_pull.schema.names import ModelRef


def test_default_registry() -> None:
    config = RegistryConfig()
    assert config.host == "registry.ollama.ai"
    assert config.manifest_url(ModelRef("llama3.2", "1b")) == (
        "https://registry.ollama.ai/v2/library/llama3.2/manifests/1b"
    )


def test_blob_url_uses_path_form() -> None:
    digest = Digest.of(b"test")
    url = RegistryConfig(base_url="http://localhost:5000").blob_url(digest)
    assert url == f"http://localhost:5000/v2/library/registry/blobs/sha256-{digest.hex}"


def test_host_ignores_port() -> None:
    assert RegistryConfig(base_url="http://localhost:5000/").host == "localhost"
