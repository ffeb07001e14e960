"""
Prefetching of dynamic imports.

The collected assets are embedded as JSON into a small inline loader that
runs after ``prefetch_event`` fires on ``window``:

* waterfall: ``concurrency`` links are appended at once and every load or
  error appends exactly one more until the queue is empty;
* aggressive: every link is appended in a single fragment.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import TypeAdapter

from .attributes import AttributePipeline
from .graph import AssetRef
from .models import Attributes, Manifest, PrefetchAsset, PrefetchStrategy

_ASSET_LIST = TypeAdapter(list[PrefetchAsset])

_MAKE_LINK = """\
        const makeLink = (asset) => {
            const link = document.createElement('link')

            for (const [attribute, value] of Object.entries(asset)) {
                link.setAttribute(attribute, value)
            }

            return link
        }
"""

_WATERFALL = """
<script{nonce}>
    window.addEventListener('{event}', () => window.setTimeout(() => {{
{make_link}
        const loadNext = (assets, count) => window.setTimeout(() => {{
            if (count > assets.length) {{
                count = assets.length

                if (count === 0) {{
                    return
                }}
            }}

            const fragment = new DocumentFragment

            while (count > 0) {{
                const link = makeLink(assets.shift())
                fragment.append(link)
                count--

                if (assets.length) {{
                    link.onload = () => loadNext(assets, 1)
                    link.onerror = () => loadNext(assets, 1)
                }}
            }}

            document.head.append(fragment)
        }})

        loadNext({assets}, {concurrency})
    }}))
</script>"""

_AGGRESSIVE = """
<script{nonce}>
    window.addEventListener('{event}', () => window.setTimeout(() => {{
{make_link}
        const fragment = new DocumentFragment
        {assets}.forEach((asset) => fragment.append(makeLink(asset)))
        document.head.append(fragment)
    }}))
</script>"""


def _string(attributes: Attributes, key: str) -> str | None:
    value = attributes.get(key)
    return value if isinstance(value, str) else None


def build_prefetch_assets(
    refs: Iterable[AssetRef],
    pipeline: AttributePipeline,
    preloaded: Mapping[str, Attributes],
    manifest: Manifest | None = None,
) -> list[PrefetchAsset]:
    """Turn dynamic-closure refs into prefetch assets, deduplicated by href."""
    assets: list[PrefetchAsset] = []
    seen: set[str] = set()

    for ref in refs:
        if ref.url in seen or ref.url in preloaded:
            continue
        attributes = pipeline.preload(ref.src, ref.url, ref.chunk, manifest)
        if attributes is None:
            continue
        seen.add(ref.url)
        assets.append(
            PrefetchAsset(
                href=ref.url,
                as_=_string(attributes, "as"),
                nonce=pipeline.nonce or None,
                crossorigin=_string(attributes, "crossorigin"),
                integrity=_string(attributes, "integrity"),
            )
        )

    return assets


def render_prefetch_script(
    assets: list[PrefetchAsset],
    strategy: PrefetchStrategy | None,
    *,
    concurrency: int = 3,
    event: str = "load",
    nonce: str | None = None,
) -> str:
    if not assets or strategy is None:
        return ""

    payload = _ASSET_LIST.dump_json(assets, by_alias=True, exclude_none=True).decode()
    nonce_attribute = f' nonce="{nonce}"' if nonce else ""

    if strategy == PrefetchStrategy.WATERFALL:
        return _WATERFALL.format(
            nonce=nonce_attribute,
            event=event,
            make_link=_MAKE_LINK,
            assets=payload,
            concurrency=concurrency,
        )
    if strategy == PrefetchStrategy.AGGRESSIVE:
        return _AGGRESSIVE.format(
            nonce=nonce_attribute, event=event, make_link=_MAKE_LINK, assets=payload
        )
    return ""
