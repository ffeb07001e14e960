from __future__ import annotations

from pathlib import Path

from .exceptions import HotFileReadError


class HotFile:
    """
    The file the Vite dev server writes while it is running.

    Its presence switches rendering to hot mode; its trimmed content is the
    dev server origin. Nothing is cached: every call probes the filesystem.
    """

    def __init__(self, path: str | Path = "hot"):
        self.path = Path(path)

    def is_running_hot(self) -> bool:
        return self.path.is_file()

    def origin(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as exc:
            raise HotFileReadError(self.path, str(exc)) from exc

    def asset_url(self, asset: str) -> str:
        return f"{self.origin().rstrip('/')}/{asset.lstrip('/')}"
