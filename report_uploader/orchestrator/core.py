"""Core orchestrator - coordinates catalog synchronization workflows."""
import logging
from typing import Optional, Sequence

from ..models import CatalogSession, DataSource, Report, SyncAction, DATA_SOURCES_DIR
from ..paths import PathResolver, parent_dir, top_level_directories
from ..protocols import IRemoteCatalog
from ..services.catalog import CatalogService
from ..services.soap_client import SoapCatalogClient

logger = logging.getLogger(__name__)


class CatalogSynchronizer:
    """
    Realizes a declared set of reports and data sources in the catalog.

    Remote calls are awaited one at a time; the first failure aborts the run.

    Usage:
        session = CatalogSession("http://reports/ReportServer", "/Apps/Billing")
        async with CatalogSynchronizer(session) as synchronizer:
            await synchronizer.run(SyncAction.UPLOAD, reports, data_sources)

        # With an injected client (tests, alternative transports)
        synchronizer = CatalogSynchronizer(session, client=fake_catalog)
        await synchronizer.upload_reports(reports)
    """

    def __init__(
        self,
        session: CatalogSession,
        client: Optional[IRemoteCatalog] = None,
    ):
        """
        Initialize synchronizer with dependencies.

        Args:
            session: Connection settings and upload prefix
            client: Pre-built remote catalog; a SoapCatalogClient is opened
                in __aenter__ when omitted
        """
        self._session = session
        self._external_client = client
        self._soap_client: Optional[SoapCatalogClient] = None
        self._catalog: Optional[CatalogService] = None
        if client is not None:
            self._catalog = CatalogService(client, PathResolver(session.upload_prefix))

    async def __aenter__(self):
        """Open the SOAP client unless one was injected."""
        if self._external_client is None:
            self._soap_client = SoapCatalogClient(self._session)
            await self._soap_client.__aenter__()
            self._catalog = CatalogService(
                self._soap_client, PathResolver(self._session.upload_prefix)
            )
        return self

    async def __aexit__(self, *args):
        """Cleanup resources."""
        if self._soap_client:
            await self._soap_client.__aexit__(*args)
            self._soap_client = None

    @property
    def catalog(self) -> CatalogService:
        if self._catalog is None:
            raise RuntimeError("CatalogSynchronizer not initialized. Use 'async with' context.")
        return self._catalog

    async def run(
        self,
        action: SyncAction,
        reports: Sequence[Report],
        data_sources: Sequence[DataSource],
    ) -> None:
        """Dispatch an action. Reports go before data sources on delete, after on upload."""
        logger.debug(f"Running action {action.value}")
        if action == SyncAction.DELETE:
            await self.delete_reports(reports)
            await self.delete_data_sources(data_sources)
        elif action == SyncAction.UPLOAD:
            await self.upload_data_sources(data_sources)
            await self.upload_reports(reports)
        elif action == SyncAction.UPLOAD_REPORTS:
            await self.upload_reports(reports)
        else:
            raise ValueError(f"Unsupported action: {action}")

    async def upload_reports(self, reports: Sequence[Report]) -> None:
        """
        Replace the report subtrees named by reports.

        Every top-level folder referenced by a nested report is deleted
        first, including reports outside this batch, then each report is
        created below freshly made folders.
        """
        await self.delete_reports(reports)
        for report in reports:
            if report.is_nested:
                await self.catalog.mkdir(parent_dir(report.name))
            await self.catalog.create_report(report.name, report.filename)

    async def delete_reports(self, reports: Sequence[Report]) -> None:
        for directory in top_level_directories(report.name for report in reports):
            await self.catalog.delete(directory)

    async def upload_data_sources(self, data_sources: Sequence[DataSource]) -> None:
        if data_sources:
            await self.catalog.mkdir(DATA_SOURCES_DIR)
        for data_source in data_sources:
            await self.catalog.delete(data_source.catalog_name)
            await self.catalog.create_sql_data_source(
                data_source.catalog_name, data_source.connection_string
            )

    async def delete_data_sources(self, data_sources: Sequence[DataSource]) -> None:
        for data_source in data_sources:
            await self.catalog.delete(data_source.catalog_name)
