from __future__ import annotations

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
import httpx
from pydantic import Field
from pydantic.dataclasses import dataclass

from ollama_pull.__about__ import __version__
from ollama_pull.download.http import DOWNLOAD_CHUNK_SIZE
from ollama_pull.download.registry import DEFAULT_REGISTRY_URL, DEFAULT_REGISTRY_VERSION, RegistryConfig
from ollama_pull.store.local import LocalStore

ENV_PREFIX = "OLLAMA_PULL_"


@dataclass
class Settings:
    home: Path = Field(default_factory=lambda: Path.home() / ".ollama")
    registry_url: str = DEFAULT_REGISTRY_URL
    registry_version: str = DEFAULT_REGISTRY_VERSION
    chunk_size: int = Field(default=DOWNLOAD_CHUNK_SIZE, gt=0)
    timeout: float = 30.0
    user_agent: str = f"ollama-pull/{__version__}"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> Settings:
        """Build settings from ``OLLAMA_PULL_*`` variables, reading ``.env`` first."""
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        values = {}
        for name in ("home", "registry_url", "registry_version", "chunk_size", "timeout"):
            value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if value:
                values[name] = value
        # OLLAMA_PULL_REGISTRY is the short form of OLLAMA_PULL_REGISTRY_URL
        if "registry_url" not in values and os.environ.get(f"{ENV_PREFIX}REGISTRY"):
            values["registry_url"] = os.environ[f"{ENV_PREFIX}REGISTRY"]
        return cls(**values)

    def store(self) -> LocalStore:
        return LocalStore(self.home.expanduser())

    def registry(self) -> RegistryConfig:
        return RegistryConfig(base_url=self.registry_url, version=self.registry_version)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, headers={"User-Agent": self.user_agent})
