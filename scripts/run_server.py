from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import uvicorn

from vitetags.infrastructure.config import get_settings

FRONTEND_DIR = Path.cwd() / "frontend"


def frontend_status() -> str:
    """Return "hot", "built" or "missing" for the configured Vite output."""
    config = get_settings().vite
    if Path(config.hot_file).is_file():
        return "hot"
    if (Path(config.build_directory) / config.manifest_filename).is_file():
        return "built"
    return "missing"


def ensure_frontend_build() -> None:
    if frontend_status() != "missing":
        return

    if not FRONTEND_DIR.exists():
        print("[run-server] Frontend directory not found; skipping build.")
        return

    print("[run-server] Vite manifest missing and no dev server running. Running npm build…")
    try:
        subprocess.run(["npm", "install"], cwd=str(FRONTEND_DIR), check=True)
        subprocess.run(["npm", "run", "build"], cwd=str(FRONTEND_DIR), check=True)
    except FileNotFoundError as exc:
        raise RuntimeError(
            "npm is not available on PATH. Install Node.js (which ships with npm) "
            "to build the frontend bundle."
        ) from exc


def main() -> None:
    try:
        ensure_frontend_build()
    except Exception as exc:  # pragma: no cover - developer helper
        print(f"[run-server] Warning: {exc}", file=sys.stderr)

    uvicorn.run(
        "vitetags.web.main:get_app",
        factory=True,
        host="127.0.0.1",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
