from __future__ import annotations

import random
from pathlib import Path
from typing import Callable, List

import pytest


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[..., str]:
    """Write bytes (or text) to a fresh file under tmp_path; return its path."""
    counter = {"n": 0}

    def _write(content, name: str | None = None) -> str:
        counter["n"] += 1
        path = tmp_path / (name or f"input_{counter['n']}.txt")
        data = content.encode("utf-8") if isinstance(content, str) else content
        path.write_bytes(data)
        return str(path)

    return _write


def split_lines(data: bytes) -> List[str]:
    """Reference line split: newline-delimited, final terminator optional."""
    parts = data.split(b"\n")
    if parts[-1] == b"":
        parts.pop()
    return [p.decode("utf-8") for p in parts]


def random_text(seed: int, *, n_lines: int = 60, max_len: int = 40,
                trailing_newline: bool = True) -> bytes:
    """Lines of wildly varying length, including empty ones."""
    rng = random.Random(seed)
    lines = []
    for _ in range(n_lines):
        length = rng.choice([0, 1, 2, rng.randint(0, max_len), rng.randint(0, max_len * 5)])
        lines.append("".join(rng.choice("abcxyz0123 ") for _ in range(length)))
    text = "\n".join(lines)
    if trailing_newline:
        text += "\n"
    return text.encode("utf-8")
