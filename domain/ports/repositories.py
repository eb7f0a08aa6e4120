from __future__ import annotations

from pathlib import Path
from typing import Protocol

from domain.models import ExcalidrawDocument


class ExcalidrawRepository(Protocol):
    def load(self, path: Path) -> ExcalidrawDocument: ...
