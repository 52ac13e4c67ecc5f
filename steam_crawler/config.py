from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
import os
import json

from .version import __version__, CONFIG_SCHEMA_VERSION
from .engines.policy import CountPolicy, DurationPolicy, StoppingPolicy

FETCH_ERROR_POLICIES = ("skip", "abort")
OUTPUT_FORMATS = ("json", "csv")

EXPORTERS = {
    "json": "steam_crawler.export.json_exporter:JSONExporter",
    "csv": "steam_crawler.export.csv_exporter:CSVExporter",
}


@dataclass
class CrawlConfig:
    """
    Canonical configuration object passed throughout the system.
    Keep it dataclass-only (no heavy deps) to stay upgrade-friendly.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    seeds: List[int] = field(default_factory=list)
    # Exactly one of these two is the stopping policy.
    target_count: Optional[int] = None
    time_budget: Optional[float] = None
    max_concurrency: int = 8
    request_timeout: float = 15.0
    retries: int = 2
    user_agent: str = f"steam_crawler/{__version__}"
    accept_language: str = "en-US,en;q=0.9"
    # Coordinator polling while the frontier is empty but workers are still running.
    poll_interval: float = 0.1
    # Give up waiting on an empty frontier after this many seconds (safety cap).
    max_idle: float = 60.0
    on_fetch_error: str = "skip"
    # Dotted paths for engine/adapter to allow runtime swapping without code changes.
    engine: str = "steam_crawler.engines.simple_engine:SimpleCrawlEngine"
    adapter: str = "steam_crawler.adapters.steam:SteamStoreAdapter"
    output_format: str = "json"
    # "-" writes to stdout
    output_path: str = "-"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def exporter(self) -> str:
        return EXPORTERS[self.output_format]

    def stopping_policy(self) -> StoppingPolicy:
        if self.target_count is not None:
            return CountPolicy(self.target_count)
        return DurationPolicy(float(self.time_budget))

    # ---------- Loaders ----------

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Supports schema migration for older versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.seeds:
            raise ValueError("seeds cannot be empty; provide at least one app id.")
        if any(not isinstance(s, int) or s <= 0 for s in self.seeds):
            raise ValueError("seeds must be positive integers")
        if (self.target_count is None) == (self.time_budget is None):
            raise ValueError("exactly one of target_count or time_budget must be set")
        if self.target_count is not None and self.target_count <= 0:
            raise ValueError("target_count must be > 0")
        if self.time_budget is not None and self.time_budget <= 0:
            raise ValueError("time_budget must be > 0")
        if self.max_concurrency <= 0:
            raise ValueError("max_concurrency must be > 0")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if self.max_idle <= 0:
            raise ValueError("max_idle must be > 0")
        if self.on_fetch_error not in FETCH_ERROR_POLICIES:
            raise ValueError(f"on_fetch_error must be one of {FETCH_ERROR_POLICIES}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"output_format must be one of {OUTPUT_FORMATS}")


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    schema = raw.get("schema_version", 1)

    if schema < 2:
        # v1 was URL based; seeds were never part of it.
        for key in ("start_urls", "allowed_domains", "max_depth", "exporter", "extra_adapters"):
            raw.pop(key, None)
        raw["schema_version"] = 2

    raw.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    return raw
