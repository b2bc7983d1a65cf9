"""Progress reporting for downloads.

Rendering is left to callers: anything implementing :class:`ProgressDisplay`
can be handed to the downloader.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from ollama_pull.schema.pull import PullResponse

PullObserver = Callable[[PullResponse], None]


class ProgressHandle(Protocol):
    def update(self, position: int) -> None: ...

    def finish(self) -> None: ...


class ProgressDisplay(Protocol):
    def start(self, total: int | None) -> ProgressHandle: ...


class _NoProgressHandle:
    def update(self, position: int) -> None:
        pass

    def finish(self) -> None:
        pass


class NoProgress:
    def start(self, total: int | None) -> ProgressHandle:
        return _NoProgressHandle()


NO_PROGRESS = NoProgress()


class _ObserverHandle:
    def __init__(self, observer: PullObserver, status: str, digest: str | None, total: int | None) -> None:
        self.observer = observer
        self.status = status
        self.digest = digest
        self.total = total
        self.position = 0

    def update(self, position: int) -> None:
        self.position = position
        self.observer(PullResponse(status=self.status, digest=self.digest, total=self.total, completed=position))

    def finish(self) -> None:
        pass


class ObserverProgress:
    """Forwards progress as ``PullResponse`` events, like the pull API stream."""

    def __init__(self, observer: PullObserver, digest: str | None = None) -> None:
        self.observer = observer
        self.digest = digest

    def start(self, total: int | None) -> ProgressHandle:
        status = f"pulling {self.digest}" if self.digest else "downloading"
        return _ObserverHandle(self.observer, status, self.digest, total)
