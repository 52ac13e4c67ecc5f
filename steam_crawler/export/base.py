from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, List, Protocol

from ..adapters.base import ProductRecord


class Exporter(Protocol):
    def export(self, records: List[ProductRecord], path: str) -> None:
        ...


@contextmanager
def open_output(path: str, newline: str | None = None) -> Iterator[IO[str]]:
    """Open ``path`` for writing, creating parent dirs; "-" means stdout."""
    if path == "-":
        yield sys.stdout
        sys.stdout.flush()
        return
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline=newline) as f:
        yield f
