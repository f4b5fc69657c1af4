from __future__ import annotations

import csv
from typing import Any, Dict, Iterator, List
from pathlib import Path

from .base import Exporter
from ..engines.base import SearchReport


def _dig(data: Any, *path: Any) -> Any:
    for key in path:
        if isinstance(data, dict):
            data = data.get(key)
        elif isinstance(data, list) and isinstance(key, int):
            data = data[key] if -len(data) <= key < len(data) else None
        else:
            return None
    return data


def _image_url(item: Dict[str, Any]) -> Any:
    for size in ("Medium", "Large", "Small"):
        url = _dig(item, "Images", "Primary", size, "URL")
        if url:
            return url
    return None


def iter_rows(report: SearchReport) -> Iterator[List[Any]]:
    for result in report.results:
        if not result.ok:
            yield [result.index, "", "", "", "", "", result.error]
            continue
        for item in _dig(result.json, "SearchResult", "Items") or []:
            yield [
                result.index,
                item.get("ASIN") or "",
                _dig(item, "ItemInfo", "Title", "DisplayValue") or "",
                _dig(item, "Offers", "Listings", 0, "Price", "DisplayAmount") or "",
                item.get("DetailPageURL") or "",
                _image_url(item) or "",
                "",
            ]


class CSVExporter:
    """
    Writes one row per returned catalog item; failed inputs get a single error row.
    """

    _headers = ["input", "asin", "title", "price", "url", "image", "error"]

    def export(self, report: SearchReport, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            w.writerow(self._headers)
            for row in iter_rows(report):
                w.writerow(row)
