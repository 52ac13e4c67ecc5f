from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

try:
    from fastapi import FastAPI, HTTPException
    from pydantic import BaseModel
except Exception as exc:  # pragma: no cover - optional dependency
    raise RuntimeError(
        "FastAPI not installed. Install with `pip install 'steam-crawler[api]'` "
        "or avoid using the API server."
    ) from exc

from ..config import CrawlConfig
from ..utils.loader import load_symbol
from ..engines.base import CrawlReport
from ..version import __version__

logger = logging.getLogger(__name__)

app = FastAPI(title="steam_crawler API", version=__version__)


class CrawlRequest(BaseModel):
    seeds: List[int]
    count: Optional[int] = None
    duration: Optional[float] = None
    max_concurrency: Optional[int] = None
    on_fetch_error: Optional[str] = None


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/crawl")
async def crawl(req: CrawlRequest) -> Dict[str, Any]:
    cfg = CrawlConfig(seeds=list(req.seeds), target_count=req.count, time_budget=req.duration)
    if req.max_concurrency is not None:
        cfg.max_concurrency = req.max_concurrency
    if req.on_fetch_error:
        cfg.on_fetch_error = req.on_fetch_error

    try:
        cfg.validate()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    # Load engine dynamically
    engine_cls = load_symbol(cfg.engine)
    engine = engine_cls(cfg)
    report: CrawlReport = await engine.crawl()
    if not report.complete:
        logger.warning("API crawl aborted (%s); returning partial results", report.error)
    return {
        "complete": report.complete,
        "visited": report.visited_count,
        "skipped": sorted(report.skipped),
        "failed": sorted(report.failed),
        "products": [p.to_dict() for p in report.products],
    }
