from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from ..infrastructure.exceptions import ChunkNotFoundError

AttributeValue: TypeAlias = str | int | float | bool | None
Attributes: TypeAlias = dict[str, AttributeValue]

# Keys of a manifest record that map onto Chunk fields; everything else is kept in `extra`.
_KNOWN_KEYS = frozenset({"file", "src", "isEntry", "imports", "dynamicImports", "css"})


def _string_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, str))


@dataclass(frozen=True, slots=True)
class Chunk:
    key: str
    file: str
    src: str | None = None
    is_entry: bool = False
    imports: tuple[str, ...] = ()
    dynamic_imports: tuple[str, ...] = ()
    css: tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, key: str, record: Any) -> Chunk | None:
        """Build a chunk from a manifest record, or None if the record is unusable."""
        if not isinstance(record, Mapping):
            return None
        file = record.get("file")
        if not isinstance(file, str) or not file:
            return None
        src = record.get("src")
        return cls(
            key=key,
            file=file,
            src=src if isinstance(src, str) else None,
            is_entry=record.get("isEntry") is True,
            imports=_string_tuple(record.get("imports")),
            dynamic_imports=_string_tuple(record.get("dynamicImports")),
            css=_string_tuple(record.get("css")),
            extra={k: v for k, v in record.items() if k not in _KNOWN_KEYS},
        )

    @classmethod
    def for_file(cls, file: str) -> Chunk:
        """Minimal chunk for a file that has no manifest record of its own (e.g. CSS)."""
        return cls(key=file, file=file)

    @property
    def source_key(self) -> str:
        return self.src or self.key

    def integrity(self, integrity_key: str | None) -> Any:
        if not integrity_key:
            return None
        return self.extra.get(integrity_key)


@dataclass(slots=True)
class Manifest:
    """Parsed Vite manifest: chunk key -> Chunk, in file order."""

    chunks: dict[str, Chunk]
    path: Path | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any], path: Path | None = None) -> Manifest:
        chunks: dict[str, Chunk] = {}
        for key, record in data.items():
            chunk = Chunk.from_record(key, record)
            if chunk is not None:
                chunks[key] = chunk
        return cls(chunks=chunks, path=path)

    def __contains__(self, key: object) -> bool:
        return key in self.chunks

    def __iter__(self) -> Iterator[str]:
        return iter(self.chunks)

    def __len__(self) -> int:
        return len(self.chunks)

    def get(self, key: str) -> Chunk | None:
        return self.chunks.get(key)

    def chunk(self, key: str) -> Chunk:
        """Return the chunk for ``key``; raises ChunkNotFoundError if it is absent."""
        try:
            return self.chunks[key]
        except KeyError:
            raise ChunkNotFoundError(key, self.path) from None

    def find_by_file(self, file: str) -> Chunk | None:
        for chunk in self.chunks.values():
            if chunk.file == file:
                return chunk
        return None


class PrefetchStrategy(str, Enum):
    WATERFALL = "waterfall"
    AGGRESSIVE = "aggressive"


class PrefetchAsset(BaseModel):
    """One `<link rel="prefetch">` the client loader will create."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    rel: str = "prefetch"
    fetch_priority: str = Field("low", alias="fetchpriority")
    href: str
    as_: str | None = Field(None, alias="as")
    nonce: str | None = None
    crossorigin: str | None = None
    integrity: str | None = None

    def to_attributes(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AttributeResolver(Protocol):
    """Contributes attributes for one tag; returning None opts a preload out."""

    def __call__(
        self, src: str, url: str, chunk: Chunk | None, manifest: Manifest | None
    ) -> Attributes | None: ...


class AssetPathResolver(Protocol):
    def __call__(self, path: str, secure: bool) -> str: ...
