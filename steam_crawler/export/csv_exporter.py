from __future__ import annotations

import csv
from typing import List

from .base import open_output
from ..adapters.base import ProductRecord


class CSVExporter:
    """
    Writes one semicolon-delimited row per product; tags are flattened into
    a single comma-joined field.
    """

    _headers = ["id", "name", "tags", "price"]
    delimiter = ";"

    def export(self, records: List[ProductRecord], path: str) -> None:
        with open_output(path, newline="") as f:
            w = csv.writer(f, delimiter=self.delimiter)
            w.writerow(self._headers)
            for record in records:
                w.writerow(
                    [
                        record.app_id,
                        record.name,
                        ",".join(record.tags),
                        record.price,
                    ]
                )
