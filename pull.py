import asyncio
import logging
import sys

from ollama_pull import ModelRef, Puller, Settings
from ollama_pull.schema.pull import PullResponse
from ollama_pull.utils import logging as pull_logging
from ollama_pull.utils.human import size_units


def print_status(event: PullResponse) -> None:
    if event.total:
        print(f"{event.status} {size_units(event.completed or 0)}/{size_units(event.total)}", flush=True)
    else:
        print(event.status, flush=True)


async def main(name: str) -> None:
    settings = Settings.from_env()
    store = settings.store()
    async with settings.client() as client:
        puller = Puller(store, client, config=settings.registry(), observer=print_status, chunk_size=settings.chunk_size)
        results = await puller.pull(ModelRef.parse(name))
    for result in results:
        print(f"{result.digest}: {result.status.value}")


if __name__ == "__main__":
    handler = pull_logging.configure(logging.INFO)
    try:
        asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "llama3.2:latest"))
    finally:
        pull_logging.teardown(handler)
