from __future__ import annotations

import json
from pathlib import Path

from .base import Exporter
from ..engines.base import SearchReport


class JSONExporter:
    """One record per input item, payloads written exactly as received."""

    def export(self, report: SearchReport, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            serializable = [r.to_dict() for r in report.results]
            json.dump(serializable, f, indent=2, ensure_ascii=False)
