from __future__ import annotations

from tests._fixtures.manifests import build_manifest
from vitetags.domain.attributes import AttributePipeline
from vitetags.domain.graph import DependencyWalker
from vitetags.domain.models import Manifest
from vitetags.domain.prefetch import build_prefetch_assets


def url_for(file: str) -> str:
    return f"/build/{file}"


def walker_for(data: dict) -> DependencyWalker:
    return DependencyWalker(Manifest.from_data(data), url_for)


class TestStaticClosure:
    def test_preloads_entry_direct_imports_and_css_before_tags(self) -> None:
        closure = walker_for(build_manifest()).collect_static(["main.js"])

        assert [ref.url for ref in closure.preloads] == [
            "/build/assets/main-abc123.js",
            "/build/assets/vendor-def456.js",
            "/build/assets/main-abc123.css",
        ]
        assert [ref.url for ref in closure.tags] == [
            "/build/assets/main-abc123.js",
            "/build/assets/main-abc123.css",
        ]

    def test_only_direct_imports_are_preloaded(self) -> None:
        data = {
            "main.js": {"file": "main.js", "imports": ["a.js"]},
            "a.js": {"file": "a.js", "imports": ["b.js"], "css": ["a.css"]},
            "b.js": {"file": "b.js"},
        }

        closure = walker_for(data).collect_static(["main.js"])

        assert [ref.url for ref in closure.preloads] == ["/build/main.js", "/build/a.js", "/build/a.css"]
        assert [ref.url for ref in closure.tags] == ["/build/a.css", "/build/main.js"]

    def test_shared_dependencies_are_listed_per_importer(self) -> None:
        data = {
            "one.js": {"file": "one.js", "imports": ["shared.js"]},
            "two.js": {"file": "two.js", "imports": ["shared.js", "one.js"]},
            "shared.js": {"file": "shared.js", "css": ["shared.css"]},
        }

        closure = walker_for(data).collect_static(["one.js", "two.js"])

        # Candidates keep every occurrence; the renderer emits the first one it resolves.
        assert [(ref.src, ref.url) for ref in closure.preloads] == [
            ("one.js", "/build/one.js"),
            ("shared.js", "/build/shared.js"),
            ("shared.css", "/build/shared.css"),
            ("two.js", "/build/two.js"),
            ("shared.js", "/build/shared.js"),
            ("shared.css", "/build/shared.css"),
            ("one.js", "/build/one.js"),
        ]
        assert [ref.url for ref in closure.tags].count("/build/shared.css") == 2

    def test_missing_keys_are_skipped(self) -> None:
        data = {"main.js": {"file": "main.js", "imports": ["gone.js"]}}

        closure = walker_for(data).collect_static(["nope.js", "main.js"])

        assert [ref.src for ref in closure.preloads] == ["main.js"]
        assert [ref.src for ref in closure.tags] == ["main.js"]


class TestDynamicClosure:
    def test_expands_imports_and_css_of_dynamic_chunks(self) -> None:
        refs = walker_for(build_manifest()).collect_dynamic(["main.js"])

        assert [ref.url for ref in refs] == [
            "/build/assets/dynamic-xyz789.js",
            "/build/assets/shared-abc123.js",
            "/build/assets/dynamic-xyz789.css",
        ]
        assert refs[0].src == "_dynamic-xyz789.js"

    def test_cycles_terminate_and_visit_each_key_once(self) -> None:
        data = {
            "A": {"file": "a.js", "dynamicImports": ["B"]},
            "B": {"file": "b.js", "imports": ["C"], "dynamicImports": ["A"]},
            "C": {"file": "c.js", "imports": ["B"]},
        }

        refs = walker_for(data).collect_dynamic(["A"])

        assert [ref.chunk.key for ref in refs] == ["B", "C", "A"]

    def test_long_import_chains_are_walked_in_order(self) -> None:
        depth = 1500
        data: dict = {"main.js": {"file": "main.js", "dynamicImports": ["c0"]}}
        for index in range(depth):
            record: dict = {"file": f"c{index}.js", "css": [f"c{index}.css"]}
            if index + 1 < depth:
                record["imports"] = [f"c{index + 1}"]
            data[f"c{index}"] = record

        refs = walker_for(data).collect_dynamic(["main.js"])

        assert len(refs) == 2 * depth
        assert [ref.url for ref in refs[:depth]] == [f"/build/c{i}.js" for i in range(depth)]
        # Stylesheets follow their chunk's whole subtree, so the deepest comes first.
        assert [ref.url for ref in refs[depth:]] == [
            f"/build/c{i}.css" for i in reversed(range(depth))
        ]

    def test_css_follows_every_imported_subtree(self) -> None:
        data = {
            "main.js": {"file": "main.js", "dynamicImports": ["A"]},
            "A": {"file": "a.js", "imports": ["B"], "dynamicImports": ["C"], "css": ["a.css"]},
            "B": {"file": "b.js", "css": ["b.css"]},
            "C": {"file": "c.js"},
        }

        refs = walker_for(data).collect_dynamic(["main.js"])

        assert [ref.url for ref in refs] == [
            "/build/a.js",
            "/build/b.js",
            "/build/b.css",
            "/build/c.js",
            "/build/a.css",
        ]

    def test_non_prefetchable_dynamic_chunks_are_ignored(self) -> None:
        data = {
            "main.js": {"file": "main.js", "dynamicImports": ["logo.svg", "lazy.js", "gone.js"]},
            "logo.svg": {"file": "assets/logo.svg"},
            "lazy.js": {"file": "lazy.js"},
        }

        refs = walker_for(data).collect_dynamic(["main.js"])

        assert [ref.url for ref in refs] == ["/build/lazy.js"]

    def test_css_resolves_to_manifest_chunk_when_present(self) -> None:
        data = {
            "main.js": {"file": "main.js", "dynamicImports": ["lazy.js"]},
            "lazy.js": {"file": "lazy.js", "css": ["lazy.css"]},
            "lazy.module.css": {"file": "lazy.css", "integrity": "sha384-css"},
        }

        refs = walker_for(data).collect_dynamic(["main.js"])

        assert refs[-1].src == "lazy.css"
        assert refs[-1].chunk.key == "lazy.module.css"
        assert refs[-1].chunk.integrity("integrity") == "sha384-css"


class TestPrefetchAssets:
    def test_collect_is_idempotent_until_asset_is_preloaded(self) -> None:
        manifest = Manifest.from_data(build_manifest())
        walker = DependencyWalker(manifest, url_for)
        pipeline = AttributePipeline()
        preloaded: dict = {}

        first = build_prefetch_assets(walker.collect_dynamic(["main.js"]), pipeline, preloaded, manifest)
        second = build_prefetch_assets(walker.collect_dynamic(["main.js"]), pipeline, preloaded, manifest)
        assert first == second

        preloaded["/build/assets/shared-abc123.js"] = {"rel": "modulepreload"}
        third = build_prefetch_assets(walker.collect_dynamic(["main.js"]), pipeline, preloaded, manifest)

        assert [asset.href for asset in third] == [
            "/build/assets/dynamic-xyz789.js",
            "/build/assets/dynamic-xyz789.css",
        ]

    def test_assets_carry_preload_attributes_and_dedupe_by_href(self) -> None:
        data = {
            "main.js": {"file": "main.js", "dynamicImports": ["a.js", "b.js"]},
            "a.js": {"file": "a.js", "css": ["shared.css"], "integrity": "sha384-a"},
            "b.js": {"file": "b.js", "css": ["shared.css"]},
        }
        manifest = Manifest.from_data(data)
        pipeline = AttributePipeline(
            nonce="n0",
            script_resolvers=[lambda src, url, chunk, manifest: {"crossorigin": "anonymous"}],
        )

        refs = DependencyWalker(manifest, url_for).collect_dynamic(["main.js"])
        assets = build_prefetch_assets(refs, pipeline, {}, manifest)

        assert [asset.href for asset in assets] == ["/build/a.js", "/build/shared.css", "/build/b.js"]
        assert assets[0].as_ == "script"
        assert assets[0].integrity == "sha384-a"
        assert assets[0].crossorigin == "anonymous"
        assert assets[0].nonce == "n0"
        assert assets[1].as_ == "style"
        assert assets[1].crossorigin is None

    def test_suppressed_preloads_are_not_prefetched(self) -> None:
        manifest = Manifest.from_data(build_manifest())
        pipeline = AttributePipeline(
            preload_resolvers=[
                lambda src, url, chunk, manifest: None if url.endswith(".css") else {}
            ]
        )

        refs = DependencyWalker(manifest, url_for).collect_dynamic(["main.js"])
        assets = build_prefetch_assets(refs, pipeline, {}, manifest)

        assert [asset.href for asset in assets] == [
            "/build/assets/dynamic-xyz789.js",
            "/build/assets/shared-abc123.js",
        ]
