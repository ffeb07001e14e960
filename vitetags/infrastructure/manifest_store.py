"""
Loading and caching of Vite manifests.

Manifests are cached per resolved path for the lifetime of the store and are
never re-read when the file changes on disk; call ``clear`` after a redeploy.
The cache is plain instance state without locking.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

from ..domain.models import Manifest
from .exceptions import ManifestNotFoundError, ManifestParseError, ManifestReadError
from .logging import get_logger, log_operation

logger = get_logger(__name__)


class ManifestStore:
    def __init__(self, manifest_filename: str = "manifest.json"):
        self.manifest_filename = manifest_filename
        self._manifests: dict[Path, Manifest] = {}

    @property
    def cached_paths(self) -> list[Path]:
        return list(self._manifests)

    def path_for(self, build_directory: str | Path) -> Path:
        return Path(build_directory) / self.manifest_filename

    def load(self, build_directory: str | Path) -> Manifest:
        path = self.path_for(build_directory)

        cached = self._manifests.get(path)
        if cached is not None:
            return cached

        manifest = self._read(path)
        self._manifests[path] = manifest
        return manifest

    @log_operation("read_manifest")
    def _read(self, path: Path) -> Manifest:
        if not path.is_file():
            raise ManifestNotFoundError(path)

        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ManifestParseError(path, str(exc)) from exc
        except OSError as exc:
            raise ManifestReadError(path, str(exc)) from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ManifestParseError(path, str(exc)) from exc

        if not isinstance(data, dict):
            raise ManifestParseError(path, f"expected a JSON object, got {type(data).__name__}")

        manifest = Manifest.from_data(data, path=path)
        skipped = len(data) - len(manifest)
        if skipped:
            logger.debug("Ignored %d malformed entries in %s", skipped, path)
        return manifest

    def clear(self) -> None:
        self._manifests.clear()

    def hash(self, build_directory: str | Path) -> str | None:
        """MD5 digest of the manifest file, or None when it does not exist."""
        path = self.path_for(build_directory)
        if not path.is_file():
            return None
        try:
            return hashlib.md5(path.read_bytes()).hexdigest()
        except OSError as exc:
            raise ManifestReadError(path, str(exc)) from exc
