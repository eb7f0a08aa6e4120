from __future__ import annotations

from pathlib import Path

from adapters.filesystem.json_utils import load_json
from domain.models import ExcalidrawDocument
from domain.ports.repositories import ExcalidrawRepository


class FileSystemExcalidrawRepository(ExcalidrawRepository):
    def load(self, path: Path) -> ExcalidrawDocument:
        data = load_json(path)
        elements = data.get("elements")
        return ExcalidrawDocument(
            elements=elements if isinstance(elements, list) else [],
            app_state=data.get("appState", {}),
            files=data.get("files", {}),
        )
