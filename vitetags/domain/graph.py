"""
Traversals over a Vite manifest.

Two walks are provided:

* the static closure of a set of entries, which only looks one level into
  each entry's ``imports``; imports of imports are not preloaded;
* the dynamic closure, which follows ``dynamicImports`` of each entry and then
  fully expands ``imports``, ``dynamicImports`` and ``css`` of everything it
  reaches.

Keys that are missing from the manifest are skipped without error. Static
preload candidates may repeat a URL; the renderer keeps the first one that
survives the preload resolvers. The dynamic walk keeps a seen-set so manifests
with cycles terminate, and uses an explicit stack so long import chains do
not exhaust the interpreter stack.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from ..infrastructure.logging import get_logger
from .models import Chunk, Manifest

logger = get_logger(__name__)

# Only chunks that the browser can prefetch directly start a dynamic expansion.
_PREFETCHABLE_SUFFIXES = (".js", ".css")


@dataclass(frozen=True, slots=True)
class AssetRef:
    src: str
    url: str
    chunk: Chunk


@dataclass(slots=True)
class StaticClosure:
    preloads: list[AssetRef] = field(default_factory=list)
    tags: list[AssetRef] = field(default_factory=list)


class DependencyWalker:
    def __init__(self, manifest: Manifest, url_for: Callable[[str], str]):
        self.manifest = manifest
        self.url_for = url_for

    def _ref(self, src: str, chunk: Chunk) -> AssetRef:
        return AssetRef(src=src, url=self.url_for(chunk.file), chunk=chunk)

    def collect_static(self, entries: Iterable[str]) -> StaticClosure:
        closure = StaticClosure()

        def stylesheets(chunk: Chunk) -> None:
            for css in chunk.css:
                ref = self._ref(css, Chunk.for_file(css))
                closure.preloads.append(ref)
                closure.tags.append(ref)

        for entry in entries:
            chunk = self.manifest.get(entry)
            if chunk is None:
                logger.debug("Skipping entry point missing from manifest: %s", entry)
                continue

            entry_ref = self._ref(entry, chunk)
            closure.preloads.append(entry_ref)

            for key in chunk.imports:
                imported = self.manifest.get(key)
                if imported is None:
                    logger.debug("Skipping import %s of %s: not in manifest", key, entry)
                    continue
                closure.preloads.append(self._ref(key, imported))
                stylesheets(imported)

            closure.tags.append(entry_ref)
            stylesheets(chunk)

        return closure

    def collect_dynamic(self, entries: Iterable[str]) -> list[AssetRef]:
        refs: list[AssetRef] = []
        seen: set[str] = set()

        for entry in entries:
            chunk = self.manifest.get(entry)
            if chunk is None:
                continue
            for key in chunk.dynamic_imports:
                if key in seen:
                    continue
                imported = self.manifest.get(key)
                if imported is None:
                    logger.debug("Skipping dynamic import %s of %s: not in manifest", key, entry)
                    continue
                if not imported.file.endswith(_PREFETCHABLE_SUFFIXES):
                    continue
                seen.add(key)
                self._expand(imported, seen, refs)

        return refs

    def _expand(self, chunk: Chunk, seen: set[str], refs: list[AssetRef]) -> None:
        """Depth-first pre-order: the chunk, its imported subtrees, then its css."""
        refs.append(self._ref(chunk.source_key, chunk))
        stack: list[tuple[Chunk, Iterator[str]]] = [
            (chunk, iter((*chunk.imports, *chunk.dynamic_imports)))
        ]

        while stack:
            current, children = stack[-1]
            key = next(children, None)

            if key is None:
                stack.pop()
                for css in current.css:
                    css_chunk = self.manifest.find_by_file(css) or Chunk.for_file(css)
                    refs.append(self._ref(css, css_chunk))
                continue

            if key in seen:
                continue
            seen.add(key)
            child = self.manifest.get(key)
            if child is not None:
                refs.append(self._ref(child.source_key, child))
                stack.append((child, iter((*child.imports, *child.dynamic_imports))))
