"""Shared fixtures for report_uploader tests."""
from typing import Dict, List, Optional

import pytest

from report_uploader.models import CatalogItem, CatalogWarning, DataSourceDefinition, ItemType


def _join(parent: str, name: str) -> str:
    return f"/{name}" if parent == "/" else f"{parent}/{name}"


class FakeCatalog:
    """In-memory IRemoteCatalog recording every call in order."""

    def __init__(self, items: Optional[Dict[str, ItemType]] = None):
        self.items: Dict[str, ItemType] = dict(items or {})
        self.calls: List[tuple] = []
        self.definitions: Dict[str, bytes] = {}
        self.data_sources: Dict[str, DataSourceDefinition] = {}
        self.warnings: List[CatalogWarning] = []

    @property
    def mutations(self) -> List[tuple]:
        return [call for call in self.calls if call[0] != "get_item_type"]

    async def get_item_type(self, path: str) -> ItemType:
        self.calls.append(("get_item_type", path))
        return self.items.get(path, ItemType.UNKNOWN)

    async def create_folder(self, name: str, parent: str) -> None:
        self.calls.append(("create_folder", name, parent))
        self.items[_join(parent, name)] = ItemType.FOLDER

    async def create_data_source(self, name: str, parent: str, definition: DataSourceDefinition) -> None:
        self.calls.append(("create_data_source", name, parent))
        path = _join(parent, name)
        self.items[path] = ItemType.DATA_SOURCE
        self.data_sources[path] = definition

    async def create_report(self, name: str, parent: str, definition: bytes) -> List[CatalogWarning]:
        self.calls.append(("create_report", name, parent))
        path = _join(parent, name)
        self.items[path] = ItemType.REPORT
        self.definitions[path] = definition
        return list(self.warnings)

    async def delete_item(self, path: str) -> None:
        self.calls.append(("delete_item", path))
        for key in list(self.items):
            if key == path or key.startswith(path + "/"):
                del self.items[key]

    async def list_children(self, path: str) -> List[CatalogItem]:
        self.calls.append(("list_children", path))
        prefix = "" if path == "/" else path
        children = []
        for key, item_type in sorted(self.items.items()):
            if key.startswith(prefix + "/") and "/" not in key[len(prefix) + 1:]:
                children.append(CatalogItem(name=key.rsplit("/", 1)[1], path=key, type=item_type))
        return children

    async def get_report_definition(self, path: str) -> bytes:
        self.calls.append(("get_report_definition", path))
        return self.definitions[path]


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def report_file(tmp_path):
    path = tmp_path / "report.rdl"
    path.write_bytes(b"<Report/>")
    return path
