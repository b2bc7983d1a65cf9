"""Content identifiers and the incremental hasher that produces them.

A digest has two encodings which are both accepted on input:

- ``sha256:<hex>`` on the wire and inside manifests,
- ``sha256-<hex>`` on disk and in blob URLs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import hashlib
import re
from typing import Any, BinaryIO

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from ollama_pull.errors import MalformedDigestError

READ_CHUNK_SIZE = 16384


class HashAlgorithm(str, Enum):
    SHA256 = "sha256"

    @property
    def digest_size(self) -> int:
        return hashlib.new(self.value).digest_size

    def new(self) -> Any:
        return hashlib.new(self.value)


@dataclass(frozen=True)
class Digest:
    algorithm: HashAlgorithm
    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != self.algorithm.digest_size:
            raise MalformedDigestError(
                f"{self.algorithm.value} digest must be {self.algorithm.digest_size} bytes, got {len(self.raw)}"
            )

    @classmethod
    def parse(cls, text: str) -> Digest:
        """Parse the ``algo:hex`` text form."""
        return cls._from_separated(text, ":")

    @classmethod
    def from_path_name(cls, name: str) -> Digest:
        """Parse the ``algo-hex`` filesystem form."""
        return cls._from_separated(name, "-")

    @classmethod
    def _from_separated(cls, value: str, separator: str) -> Digest:
        prefix, sep, hexdigest = value.partition(separator)
        if not sep:
            raise MalformedDigestError(f"Invalid digest {value!r}: no {separator!r} separator found")
        try:
            algorithm = HashAlgorithm(prefix)
        except ValueError:
            raise MalformedDigestError(f"Invalid digest {value!r}: unknown hash algorithm {prefix!r}") from None
        if not re.fullmatch(f"[0-9a-fA-F]{{{2 * algorithm.digest_size}}}", hexdigest):
            raise MalformedDigestError(
                f"Invalid digest {value!r}: expected {2 * algorithm.digest_size} hexadecimal characters"
            )
        return cls(algorithm, bytes.fromhex(hexdigest))

    @classmethod
    def of(cls, data: bytes, algorithm: HashAlgorithm = HashAlgorithm.SHA256) -> Digest:
        hasher = Hasher(algorithm)
        hasher.update(data)
        return hasher.finalize()

    @property
    def hex(self) -> str:
        return self.raw.hex()

    @property
    def text(self) -> str:
        return f"{self.algorithm.value}:{self.hex}"

    @property
    def path_name(self) -> str:
        return f"{self.algorithm.value}-{self.hex}"

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Digest({self.text!r})"

    @classmethod
    def _validate(cls, value: Any) -> Digest:
        if isinstance(value, Digest):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        raise MalformedDigestError(f"Invalid digest {value!r}: expected a string")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str, when_used="always"),
        )


class Hasher:
    """Accumulates bytes across calls and yields a :class:`Digest`.

    Chunking never changes the result: ``update(a); update(b)`` equals
    ``update(a + b)``. Once :meth:`finalize` is called the hasher is spent.
    """

    def __init__(self, algorithm: HashAlgorithm = HashAlgorithm.SHA256) -> None:
        self.algorithm = algorithm
        self._ctx = algorithm.new()
        self._finalized = False
        self.consumed = 0

    @classmethod
    def for_digest(cls, digest: Digest) -> Hasher:
        return cls(digest.algorithm)

    def _check(self) -> None:
        if self._finalized:
            raise RuntimeError("Hasher already finalized")

    def update(self, data: bytes) -> None:
        self._check()
        self._ctx.update(data)
        self.consumed += len(data)

    def update_from_file(self, handle: BinaryIO, chunk_size: int = READ_CHUNK_SIZE) -> int:
        """Feed everything from the current position of ``handle`` to EOF."""
        read = 0
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            self.update(chunk)
            read += len(chunk)
        return read

    def reset(self) -> None:
        self._check()
        self._ctx = self.algorithm.new()
        self.consumed = 0

    def finalize(self) -> Digest:
        self._check()
        self._finalized = True
        return Digest(self.algorithm, self._ctx.digest())
