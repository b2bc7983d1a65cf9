from pydantic.dataclasses import dataclass

# https://github.com/ollama/ollama/blob/main/docs/api.md#pull-a-model


@dataclass
class PullResponse:
    status: str
    digest: str | None = None
    total: int | None = None
    completed: int | None = None
