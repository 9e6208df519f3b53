"""
Catalog Service - Single Responsibility: path-level operations on the catalog.

Wraps a remote catalog client with symbolic path resolution, existence
checks and folder creation.
"""
import logging
from pathlib import Path
from typing import List, Optional

from ..errors import CatalogStateError, ReportFileError
from ..models import CatalogItem, DataSourceDefinition, ItemType
from ..paths import PATH_SEPARATOR, PathResolver, leaf_name, parent_dir, split_segments
from ..protocols import IRemoteCatalog

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Service for creating and deleting items in the report server catalog.

    Every public method takes a symbolic path, relative to the upload prefix.
    """

    def __init__(self, client: IRemoteCatalog, resolver: Optional[PathResolver] = None):
        """
        Initialize catalog service.

        Args:
            client: Remote catalog client
            resolver: Resolver carrying the upload prefix
        """
        self._client = client
        self._resolver = resolver or PathResolver()

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    async def mkdir(self, path: str) -> None:
        """
        Ensure every folder along path exists.

        Args:
            path: Symbolic folder path (e.g., "Sales/Monthly")

        Raises:
            CatalogStateError: an ancestor slot is occupied by a non-folder
        """
        logger.info(f"Creating dir {path}")
        physical = self._resolver.physical_path(path)
        logger.debug(f"Creating symbolic dir {path} as {physical}")

        current = ""
        for segment in split_segments(physical):
            parent = current or PATH_SEPARATOR
            candidate = f"{current}{PATH_SEPARATOR}{segment}"
            item_type = await self._client.get_item_type(candidate)
            if item_type == ItemType.UNKNOWN:
                logger.debug(f"Invoking create_folder(dir={segment}, parent={parent})")
                await self._client.create_folder(segment, parent)
            elif item_type != ItemType.FOLDER:
                raise CatalogStateError(
                    f"Path {candidate} exists and is not a folder but a {item_type.value}"
                )
            else:
                logger.debug(
                    f"Skipping create_folder(dir={segment}, parent={parent}) as folder exists"
                )
            current = candidate

    async def create_report(self, path: str, filename: Path) -> None:
        """
        Create a report from a local definition file. Path must not exist.

        Server warnings are logged, never raised.

        Args:
            path: Symbolic report path
            filename: Local report definition file
        """
        logger.info(f"Creating Report {path}")
        physical = self._resolver.physical_path(path)
        logger.debug(f"Creating Report with symbolic item {path} as {physical}")

        await self._ensure_absent(physical, "report")

        file_path = Path(filename)
        definition = self._read_report_file(path, file_path)
        name = leaf_name(physical)
        parent = parent_dir(physical) or PATH_SEPARATOR
        logger.debug(f"Invoking create_report(name={name}, parent={parent})")
        warnings = await self._client.create_report(name, parent, definition)

        for warning in warnings or []:
            logger.warning(
                f"Action 'create_report(name={name}, parent={parent}) from "
                f"{file_path.resolve()}' resulted in warning {warning.describe()}"
            )

    async def create_data_source(self, path: str, definition: DataSourceDefinition) -> None:
        """
        Create a data source from a complete definition. Path must not exist.

        Args:
            path: Symbolic data source path
            definition: Data source payload
        """
        logger.info(f"Creating DataSource {path}")
        physical = self._resolver.physical_path(path)

        await self._ensure_absent(physical, "data source")

        name = leaf_name(physical)
        parent = parent_dir(physical) or PATH_SEPARATOR
        logger.debug(f"Invoking create_data_source(name={name}, parent={parent})")
        await self._client.create_data_source(name, parent, definition)

    async def create_sql_data_source(self, path: str, connection_string: str) -> None:
        """Create a SQL Server data source with a specific connection string."""
        await self.create_data_source(path, DataSourceDefinition.for_sql(connection_string))

    async def delete(self, path: str) -> None:
        """Delete path and all sub elements. Skips if no such path."""
        logger.info(f"Deleting item {path}")
        physical = self._resolver.physical_path(path)
        logger.debug(f"Deleting symbolic item {path} as {physical}")

        item_type = await self._client.get_item_type(physical)
        if item_type == ItemType.UNKNOWN:
            logger.debug(f"Skipping delete_item(item={physical}) as item does not exist")
            return

        logger.debug(f"Invoking delete_item(item={physical})")
        await self._client.delete_item(physical)

    async def list_reports(self, path: str) -> List[str]:
        """Names of the reports directly under path."""
        logger.info(f"Listing Reports at {path}")
        return [item.name for item in await self._list_items(path) if item.type == ItemType.REPORT]

    async def list_folders(self, path: str) -> List[str]:
        """Names of the folders directly under path."""
        logger.info(f"Listing Folders at {path}")
        return [item.name for item in await self._list_items(path) if item.is_folder]

    async def download_report(self, path: str, filename: Path) -> Path:
        """
        Download a report definition to a local file.

        Args:
            path: Symbolic report path
            filename: Destination file

        Returns:
            Path of the written file
        """
        file_path = Path(filename)
        physical = self._resolver.physical_path(path)
        logger.info(f"Downloading Report with symbolic name {path} to {file_path}")

        data = await self._client.get_report_definition(physical)
        try:
            file_path.write_bytes(data)
        except OSError as exc:
            message = f"Failed to download report with symbolic name {path} to {file_path}"
            logger.warning(message)
            file_path.unlink(missing_ok=True)
            raise ReportFileError(message) from exc
        return file_path

    async def _ensure_absent(self, physical: str, kind: str) -> None:
        item_type = await self._client.get_item_type(physical)
        if item_type != ItemType.UNKNOWN:
            raise CatalogStateError(
                f"Can not create {kind} as path {physical} exists and is of type {item_type.value}."
            )

    async def _list_items(self, path: str) -> List[CatalogItem]:
        physical = self._resolver.physical_path(path)
        logger.debug(f"Invoking list_children(item={physical})")
        return await self._client.list_children(physical or PATH_SEPARATOR)

    @staticmethod
    def _read_report_file(name: str, file_path: Path) -> bytes:
        if not file_path.exists():
            raise ReportFileError(
                f"Report file {file_path.resolve()} for {name} does not exist."
            )
        try:
            return file_path.read_bytes()
        except OSError as exc:
            raise ReportFileError(f"Unable to load report file {file_path.resolve()}") from exc
