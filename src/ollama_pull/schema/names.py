from __future__ import annotations

from typing import Annotated

from pydantic import Field, ValidationError
from pydantic.dataclasses import dataclass

from ollama_pull.errors import InvalidDataError

DEFAULT_VARIANT = "latest"

NonEmpty = Annotated[str, Field(min_length=1)]


@dataclass(frozen=True)
class ModelRef:
    """A model name and variant (tag), e.g. ``llama3.2:1b``."""

    model: NonEmpty
    variant: NonEmpty = DEFAULT_VARIANT

    @classmethod
    def parse(cls, name: str) -> ModelRef:
        model, sep, variant = name.strip().partition(":")
        try:
            return cls(model, variant if sep else DEFAULT_VARIANT)
        except ValidationError as exc:
            raise InvalidDataError(f"{name!r} should have <model>:<tag> format") from exc

    def __str__(self) -> str:
        return f"{self.model}:{self.variant}"
