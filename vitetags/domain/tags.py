"""
HTML tag rendering for Vite chunks.

Attribute values are written verbatim; callers are trusted to supply safe
values. ``None`` and ``False`` drop an attribute, ``True`` renders it bare.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from .models import AttributeValue

STYLE_PATH_RE = re.compile(r"\.(css|less|sass|scss|styl|stylus|pcss|postcss)(\?[^.]*)?$")


def is_css_path(path: str) -> bool:
    """Return True when ``path`` points at a stylesheet (query strings allowed)."""
    return STYLE_PATH_RE.search(path) is not None


def render_attributes(attributes: Mapping[str, AttributeValue]) -> list[str]:
    rendered: list[str] = []
    for name, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            rendered.append(name)
        else:
            rendered.append(f'{name}="{value}"')
    return rendered


def format_attributes(attributes: Mapping[str, AttributeValue]) -> str:
    return " ".join(render_attributes(attributes))


def _merge(
    defaults: dict[str, AttributeValue], attributes: Mapping[str, AttributeValue] | None
) -> dict[str, AttributeValue]:
    merged = dict(defaults)
    if attributes:
        merged.update(attributes)
    return merged


def script_tag(
    url: str, attributes: Mapping[str, AttributeValue] | None = None, nonce: str | None = None
) -> str:
    merged = _merge({"type": "module", "src": url, "nonce": nonce}, attributes)
    return f"<script {format_attributes(merged)}></script>"


def stylesheet_tag(
    url: str, attributes: Mapping[str, AttributeValue] | None = None, nonce: str | None = None
) -> str:
    merged = _merge({"rel": "stylesheet", "href": url, "nonce": nonce}, attributes)
    return f"<link {format_attributes(merged)} />"


def preload_tag(attributes: Mapping[str, AttributeValue]) -> str:
    return f"<link {format_attributes(attributes)} />"
