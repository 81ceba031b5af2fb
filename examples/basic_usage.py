"""Minimal example showing a fixed modification time on an embedded tree."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.utils import format_datetime

from modtimefs import EmbedFS, ModTimeFS, walk_dir


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")

    assets = EmbedFS(
        {
            "index.html": "<h1>Hello</h1>",
            "css/site.css": "body { margin: 0 }",
            "js/app.js": "console.log('hi')",
        }
    )
    fsys = ModTimeFS(assets, datetime(2024, 1, 1, tzinfo=timezone.utc))

    for path, entry in walk_dir(fsys):
        info = entry.info()
        kind = "dir " if info.is_dir() else "file"
        print(f"{kind} {path:<16} {info.size:>5}  Last-Modified: {format_datetime(info.mod_time, usegmt=True)}")

    with fsys.open("index.html") as f:
        print("index.html:", f.read().decode())


if __name__ == "__main__":
    main()
