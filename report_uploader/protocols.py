"""
Protocols (Interfaces) for Dependency Inversion.

Following Interface Segregation Principle - small, focused interfaces.
"""
from typing import List, Protocol, runtime_checkable

from .models import CatalogItem, CatalogWarning, DataSourceDefinition, ItemType


@runtime_checkable
class IRemoteCatalog(Protocol):
    """Interface for the report server catalog. All paths are physical."""

    async def get_item_type(self, path: str) -> ItemType:
        """Type of the item at path, ItemType.UNKNOWN when absent."""
        ...

    async def create_folder(self, name: str, parent: str) -> None:
        ...

    async def create_data_source(
        self,
        name: str,
        parent: str,
        definition: DataSourceDefinition,
    ) -> None:
        ...

    async def create_report(
        self,
        name: str,
        parent: str,
        definition: bytes,
    ) -> List[CatalogWarning]:
        """Create report and return any server warnings."""
        ...

    async def delete_item(self, path: str) -> None:
        """Delete item and everything beneath it."""
        ...

    async def list_children(self, path: str) -> List[CatalogItem]:
        ...

    async def get_report_definition(self, path: str) -> bytes:
        ...
