"""Tests for JSON and CSV exporters."""

import json

from steam_crawler.adapters.base import ProductRecord
from steam_crawler.export.csv_exporter import CSVExporter
from steam_crawler.export.json_exporter import JSONExporter

RECORDS = [
    ProductRecord(app_id=10, name="Counter-Strike", tags=["Action", "FPS"], price=8.19),
    ProductRecord(app_id=400, name="Portal; Still Alive", tags=[], price=0.0),
]


def test_json_export(tmp_path):
    out = tmp_path / "nested" / "products.json"
    JSONExporter().export(RECORDS, str(out))

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data == [
        {"id": 10, "name": "Counter-Strike", "tags": ["Action", "FPS"], "price": 8.19},
        {"id": 400, "name": "Portal; Still Alive", "tags": [], "price": 0.0},
    ]


def test_csv_export_is_semicolon_delimited(tmp_path):
    out = tmp_path / "products.csv"
    CSVExporter().export(RECORDS, str(out))

    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "id;name;tags;price"
    assert lines[1] == "10;Counter-Strike;Action,FPS;8.19"
    # Delimiters inside a field are quoted.
    assert lines[2] == '400;"Portal; Still Alive";;0.0'


def test_export_to_stdout(capsys):
    JSONExporter().export(RECORDS[:1], "-")

    data = json.loads(capsys.readouterr().out)
    assert data[0]["id"] == 10
