from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from abc import ABC, abstractmethod

from ..request.options import SearchOptions


@dataclass
class ItemResult:
    """Outcome for one input item; ``json`` is the remote payload, verbatim."""

    index: int
    json: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"json": self.json}
        return {"json": {}, "error": self.error}


@dataclass
class SearchReport:
    results: List[ItemResult] = field(default_factory=list)  # same order as the input batch

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded


class SearchEngine(ABC):
    """
    Abstract engine interface. Implementations own the batch lifecycle.
    """
    @abstractmethod
    async def run(self, items: Sequence[SearchOptions]) -> SearchReport:  # pragma: no cover - interface
        ...
