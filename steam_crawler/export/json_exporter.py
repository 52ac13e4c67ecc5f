from __future__ import annotations

import json
from typing import List

from .base import open_output
from ..adapters.base import ProductRecord


class JSONExporter:
    def export(self, records: List[ProductRecord], path: str) -> None:
        with open_output(path) as f:
            json.dump([r.to_dict() for r in records], f, indent=2, ensure_ascii=False)
            f.write("\n")
