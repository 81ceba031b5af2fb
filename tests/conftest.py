from __future__ import annotations

import pytest

from fakes import FIXED
from modtimefs.embed import EmbedFS
from modtimefs.modtime import ModTimeFS


@pytest.fixture
def source() -> EmbedFS:
    return EmbedFS(
        {
            "a.txt": b"hi",
            "sub/b.txt": b"bee",
            "sub/c.bin": b"\x00\x01\x02\x03",
            "sub/deep/d.txt": "dee",
            "static/index.html": "<h1>hello</h1>",
        }
    )


@pytest.fixture
def wrapped(source: EmbedFS) -> ModTimeFS:
    return ModTimeFS(source, FIXED)
