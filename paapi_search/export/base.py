from __future__ import annotations

from typing import Protocol

from ..engines.base import SearchReport

class Exporter(Protocol):
    def export(self, report: SearchReport, path: str) -> None:
        ...
