from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

try:
    from fastapi import Depends, FastAPI, HTTPException
    from pydantic import BaseModel
except Exception as exc:  # pragma: no cover - optional dependency
    raise RuntimeError(
        "FastAPI not installed. Install with `pip install fastapi pydantic uvicorn` "
        "or avoid using the API server."
    ) from exc

from ..config import SearchConfig
from ..errors import ConfigurationError, ValidationError, RemoteError, UnknownError
from ..engines.base import SearchReport
from ..engines.sequential_engine import SequentialSearchEngine
from ..request.options import SearchOptions
from ..version import __version__
from .paapi import SearchClient

logger = logging.getLogger(__name__)

app = FastAPI(title="paapi_search API", version=__version__)


class SearchRequest(BaseModel):
    items: List[SearchOptions]
    continue_on_fail: Optional[bool] = None
    marketplace: Optional[str] = None


def get_client() -> Optional[SearchClient]:
    """Client used by /search; None lets the engine build the configured one."""
    return None


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/search")
async def search(req: SearchRequest, client: Optional[SearchClient] = Depends(get_client)) -> Dict[str, Any]:
    cfg = SearchConfig.from_env()
    if req.continue_on_fail is not None:
        cfg.continue_on_fail = req.continue_on_fail
    if req.marketplace:
        cfg.marketplace = req.marketplace

    try:
        cfg.validate()
        engine = SequentialSearchEngine(cfg, client=client)
        report: SearchReport = await engine.run(req.items)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except (RemoteError, UnknownError) as exc:
        logger.warning("Search batch aborted: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return {
        "results": [r.to_dict() for r in report.results],
        "succeeded": report.succeeded,
        "failed": report.failed,
    }
