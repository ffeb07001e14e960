from __future__ import annotations

from collections.abc import Iterable

from .models import AttributeResolver, Attributes, Chunk, Manifest
from .tags import is_css_path


class AttributePipeline:
    """
    Ordered attribute resolvers per tag kind, composed with built-in defaults.

    Resolvers run in registration order and later keys overwrite earlier
    ones. A preload resolver returning ``None`` suppresses that preload; script
    and style resolvers cannot suppress their tag.
    """

    def __init__(
        self,
        nonce: str | None = None,
        integrity_key: str | None = "integrity",
        script_resolvers: Iterable[AttributeResolver] = (),
        style_resolvers: Iterable[AttributeResolver] = (),
        preload_resolvers: Iterable[AttributeResolver] = (),
    ):
        self.nonce = nonce
        self.integrity_key = integrity_key
        self.script_resolvers: list[AttributeResolver] = list(script_resolvers)
        self.style_resolvers: list[AttributeResolver] = list(style_resolvers)
        self.preload_resolvers: list[AttributeResolver] = list(preload_resolvers)

    def _integrity(self, attributes: Attributes, chunk: Chunk | None) -> None:
        if chunk is None:
            return
        integrity = chunk.integrity(self.integrity_key)
        if integrity is not None:
            attributes["integrity"] = integrity

    @staticmethod
    def _apply(
        attributes: Attributes,
        resolvers: list[AttributeResolver],
        src: str,
        url: str,
        chunk: Chunk | None,
        manifest: Manifest | None,
    ) -> Attributes:
        for resolver in resolvers:
            resolved = resolver(src, url, chunk, manifest)
            if resolved:
                attributes.update(resolved)
        return attributes

    def script(
        self, src: str, url: str, chunk: Chunk | None, manifest: Manifest | None
    ) -> Attributes:
        attributes: Attributes = {}
        self._integrity(attributes, chunk)
        return self._apply(attributes, self.script_resolvers, src, url, chunk, manifest)

    def stylesheet(
        self, src: str, url: str, chunk: Chunk | None, manifest: Manifest | None
    ) -> Attributes:
        attributes: Attributes = {}
        self._integrity(attributes, chunk)
        return self._apply(attributes, self.style_resolvers, src, url, chunk, manifest)

    def preload(
        self, src: str, url: str, chunk: Chunk | None, manifest: Manifest | None
    ) -> Attributes | None:
        if is_css_path(url):
            attributes: Attributes = {
                "rel": "preload",
                "as": "style",
                "href": url,
                "nonce": self.nonce,
                "crossorigin": self.stylesheet(src, url, chunk, manifest).get("crossorigin"),
            }
        else:
            attributes = {
                "rel": "modulepreload",
                "as": "script",
                "href": url,
                "nonce": self.nonce,
                "crossorigin": self.script(src, url, chunk, manifest).get("crossorigin"),
            }

        self._integrity(attributes, chunk)

        for resolver in self.preload_resolvers:
            resolved = resolver(src, url, chunk, manifest)
            if resolved is None:
                return None
            attributes.update(resolved)
        return attributes
