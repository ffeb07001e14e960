"""
Vite integration facade.

Decides between the dev server (hot mode) and the production manifest, then
renders preload, script, stylesheet and prefetch tags for a set of entry
points. An instance owns mutable state (the manifest cache and the preloaded
assets registry) and is not safe to share across threads without external
serialization; call ``flush`` between independent renders.

Example:
    >>> vite = Vite(build_directory="static/build").with_entry_points(["src/main.ts"])
    >>> vite.use_csp_nonce()
    >>> html = vite.to_html()
"""

from __future__ import annotations

import secrets
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from ..domain.attributes import AttributePipeline
from ..domain.graph import AssetRef, DependencyWalker
from ..domain.models import (
    AssetPathResolver,
    AttributeResolver,
    Attributes,
    Chunk,
    Manifest,
    PrefetchStrategy,
)
from ..domain.prefetch import build_prefetch_assets, render_prefetch_script
from ..domain.tags import is_css_path, preload_tag, script_tag, stylesheet_tag
from ..infrastructure.config import ViteConfig
from ..infrastructure.exceptions import AssetFileNotFoundError, ConfigurationError
from ..infrastructure.hot import HotFile
from ..infrastructure.logging import LogContext, get_logger
from ..infrastructure.manifest_store import ManifestStore

logger = get_logger(__name__)

VITE_CLIENT = "@vite/client"
REACT_REFRESH = "@react-refresh"

_REACT_REFRESH_PREAMBLE = """<script type="module"{attributes}>
    import RefreshRuntime from '{url}'
    RefreshRuntime.injectIntoGlobalHook(window)
    window.$RefreshReg$ = () => {{}}
    window.$RefreshSig$ = () => (type) => type
    window.__vite_plugin_react_preamble_installed__ = true
</script>"""


def default_asset_path(path: str, secure: bool = False) -> str:
    return "/" + path.lstrip("/")


def prefixed_asset_path(prefix: str) -> AssetPathResolver:
    prefix = prefix.rstrip("/")

    def resolve(path: str, secure: bool = False) -> str:
        return f"{prefix}/{path.lstrip('/')}"

    return resolve


def _strategy(value: PrefetchStrategy | str | None) -> PrefetchStrategy | None:
    if value is None or value == "none":
        return None
    try:
        return PrefetchStrategy(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"Unknown prefetch strategy: {value!r}", config_key="prefetch_strategy"
        ) from exc


def _concurrency(value: int) -> int:
    if value < 1:
        raise ConfigurationError(
            f"Prefetch concurrency must be at least 1, got {value}",
            config_key="prefetch_concurrency",
        )
    return value


class Vite:
    def __init__(
        self,
        build_directory: str = "build",
        manifest_filename: str = "manifest.json",
        hot_file: str | Path = "hot",
        entry_points: Iterable[str] = (),
        nonce: str | None = None,
        integrity_key: str | None = "integrity",
        prefetch_strategy: PrefetchStrategy | str | None = None,
        prefetch_concurrency: int = 3,
        prefetch_event: str = "load",
        asset_path_resolver: AssetPathResolver | None = None,
        script_resolvers: Iterable[AttributeResolver] = (),
        style_resolvers: Iterable[AttributeResolver] = (),
        preload_resolvers: Iterable[AttributeResolver] = (),
    ):
        self.build_directory = build_directory
        self.entry_points: list[str] = list(dict.fromkeys(entry_points))
        self.prefetch_strategy = _strategy(prefetch_strategy)
        self.prefetch_concurrency = _concurrency(prefetch_concurrency)
        self.prefetch_event = prefetch_event
        self.asset_path_resolver = asset_path_resolver

        self._hot = HotFile(hot_file)
        self._manifests = ManifestStore(manifest_filename)
        self._attributes = AttributePipeline(
            nonce=nonce or None,
            integrity_key=integrity_key or None,
            script_resolvers=script_resolvers,
            style_resolvers=style_resolvers,
            preload_resolvers=preload_resolvers,
        )
        self._preloaded: dict[str, Attributes] = {}

    @classmethod
    def from_config(cls, config: ViteConfig) -> Vite:
        vite = cls(
            build_directory=config.build_directory,
            manifest_filename=config.manifest_filename,
            hot_file=config.hot_file,
            entry_points=config.entry_points,
            integrity_key=config.integrity_key,
            prefetch_strategy=config.prefetch_strategy,
            prefetch_concurrency=config.prefetch_concurrency,
            prefetch_event=config.prefetch_event,
            asset_path_resolver=(
                prefixed_asset_path(config.asset_url) if config.asset_url else None
            ),
        )
        if config.nonce is not None:
            vite.use_csp_nonce(config.nonce)
        return vite

    # Configuration

    @property
    def csp_nonce(self) -> str | None:
        return self._attributes.nonce

    def use_csp_nonce(self, nonce: str | None = None) -> str:
        """Set the CSP nonce, generating 30 random bytes (hex) when none is given."""
        if not nonce:
            nonce = secrets.token_hex(30)
        self._attributes.nonce = nonce
        return nonce

    @property
    def integrity_key(self) -> str | None:
        return self._attributes.integrity_key

    def use_integrity_key(self, key: str | None) -> Vite:
        self._attributes.integrity_key = key or None
        return self

    def with_entry_points(self, entry_points: Iterable[str]) -> Vite:
        self.entry_points = list(entry_points)
        return self

    def merge_entry_points(self, entry_points: Iterable[str]) -> Vite:
        self.entry_points = list(dict.fromkeys([*self.entry_points, *entry_points]))
        return self

    @property
    def manifest_filename(self) -> str:
        return self._manifests.manifest_filename

    def use_manifest_filename(self, filename: str) -> Vite:
        self._manifests.manifest_filename = filename
        return self

    @property
    def hot_file(self) -> str:
        return str(self._hot.path)

    def use_hot_file(self, path: str | Path) -> Vite:
        self._hot = HotFile(path)
        return self

    def use_build_directory(self, path: str) -> Vite:
        self.build_directory = path
        return self

    def create_asset_paths_using(self, resolver: AssetPathResolver | None) -> Vite:
        self.asset_path_resolver = resolver
        return self

    def use_script_tag_attributes(self, resolver: AttributeResolver) -> Vite:
        self._attributes.script_resolvers.append(resolver)
        return self

    def use_style_tag_attributes(self, resolver: AttributeResolver) -> Vite:
        self._attributes.style_resolvers.append(resolver)
        return self

    def use_preload_tag_attributes(self, resolver: AttributeResolver) -> Vite:
        self._attributes.preload_resolvers.append(resolver)
        return self

    def use_prefetch_strategy(
        self, strategy: PrefetchStrategy | str | None, concurrency: int | None = None
    ) -> Vite:
        self.prefetch_strategy = _strategy(strategy)
        if self.prefetch_strategy == PrefetchStrategy.WATERFALL and concurrency is not None:
            self.prefetch_concurrency = _concurrency(concurrency)
        return self

    def use_waterfall_prefetching(self, concurrency: int | None = None) -> Vite:
        return self.use_prefetch_strategy(PrefetchStrategy.WATERFALL, concurrency)

    def use_aggressive_prefetching(self) -> Vite:
        return self.use_prefetch_strategy(PrefetchStrategy.AGGRESSIVE)

    def prefetch(self, concurrency: int | None = None, event: str = "load") -> Vite:
        """Waterfall prefetching when a concurrency is given, aggressive otherwise."""
        self.prefetch_event = event or "load"
        if concurrency is None:
            return self.use_aggressive_prefetching()
        return self.use_waterfall_prefetching(concurrency)

    # Rendering

    def __call__(self, entry_points: Iterable[str], build_directory: str | None = None) -> str:
        return self.render(entry_points, build_directory)

    def render(self, entry_points: Iterable[str], build_directory: str | None = None) -> str:
        entries = list(entry_points)
        build_directory = build_directory or self.build_directory

        if self.is_running_hot():
            logger.debug("Rendering %d entry points from the dev server", len(entries))
            return self._hot_tags(entries)

        with LogContext(build_directory=build_directory, entry_points=entries):
            manifest = self._manifests.load(build_directory)
            return self._production_tags(entries, build_directory, manifest)

    def to_html(self) -> str:
        return self.render(self.entry_points)

    def __html__(self) -> str:
        return self.to_html()

    def __str__(self) -> str:
        return self.to_html()

    def is_running_hot(self) -> bool:
        return self._hot.is_running_hot()

    def asset(self, asset: str, build_directory: str | None = None) -> str:
        """URL of a single asset; raises ChunkNotFoundError if it is not in the manifest."""
        build_directory = build_directory or self.build_directory

        if self.is_running_hot():
            return self._hot.asset_url(asset)

        chunk = self._manifests.load(build_directory).chunk(asset)
        return self.asset_path(self._join(build_directory, chunk.file))

    def content(self, asset: str, build_directory: str | None = None) -> str:
        """Contents of a built asset, read from the build directory."""
        build_directory = build_directory or self.build_directory
        chunk = self._manifests.load(build_directory).chunk(asset)
        path = Path(build_directory) / chunk.file
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise AssetFileNotFoundError(path) from exc

    def manifest_hash(self, build_directory: str | None = None) -> str | None:
        """Hash of the manifest for cache busting; None when hot or not built."""
        if self.is_running_hot():
            return None
        return self._manifests.hash(build_directory or self.build_directory)

    def react_refresh(self) -> str:
        if not self.is_running_hot():
            return ""
        return _REACT_REFRESH_PREAMBLE.format(
            attributes=f' nonce="{self.csp_nonce}"' if self.csp_nonce else "",
            url=self._hot.asset_url(REACT_REFRESH),
        )

    @property
    def preloaded_assets(self) -> dict[str, Attributes]:
        return self._preloaded

    def flush(self) -> None:
        self._preloaded = {}

    def clear_manifest_cache(self) -> None:
        self._manifests.clear()

    def asset_path(self, path: str, secure: bool = False) -> str:
        resolver = self.asset_path_resolver or default_asset_path
        return resolver(path, secure)

    # Internals

    @staticmethod
    def _join(build_directory: str, file: str) -> str:
        return PurePosixPath(build_directory, file).as_posix()

    def _hot_tags(self, entries: list[str]) -> str:
        tags = [self._chunk_tag(VITE_CLIENT, self._hot.asset_url(VITE_CLIENT), None, None)]
        for entry in entries:
            tags.append(self._chunk_tag(entry, self._hot.asset_url(entry), None, None))
        return "".join(tags)

    def _production_tags(self, entries: list[str], build_directory: str, manifest: Manifest) -> str:
        walker = DependencyWalker(
            manifest, lambda file: self.asset_path(self._join(build_directory, file))
        )

        closure = walker.collect_static(entries)
        preloads: list[str] = []
        emitted: set[str] = set()
        for ref in closure.preloads:
            if ref.url in emitted:
                continue
            tag = self._preload_tag(ref, manifest)
            if tag:
                # A suppressed candidate leaves the URL open for a later source key.
                emitted.add(ref.url)
                preloads.append(tag)
        tags = [self._chunk_tag(ref.src, ref.url, ref.chunk, manifest) for ref in closure.tags]
        html = "".join(preloads) + "".join(tags)

        if self.prefetch_strategy is None:
            return html

        assets = build_prefetch_assets(
            walker.collect_dynamic(entries), self._attributes, self._preloaded, manifest
        )
        return html + render_prefetch_script(
            assets,
            self.prefetch_strategy,
            concurrency=self.prefetch_concurrency,
            event=self.prefetch_event,
            nonce=self.csp_nonce,
        )

    def _chunk_tag(
        self, src: str, url: str, chunk: Chunk | None, manifest: Manifest | None
    ) -> str:
        if is_css_path(url):
            attributes = self._attributes.stylesheet(src, url, chunk, manifest)
            return stylesheet_tag(url, attributes, self.csp_nonce)
        attributes = self._attributes.script(src, url, chunk, manifest)
        return script_tag(url, attributes, self.csp_nonce)

    def _preload_tag(self, ref: AssetRef, manifest: Manifest) -> str:
        attributes = self._attributes.preload(ref.src, ref.url, ref.chunk, manifest)
        if attributes is None:
            return ""
        self._preloaded[ref.url] = {k: v for k, v in attributes.items() if k != "href"}
        return preload_tag(attributes)
