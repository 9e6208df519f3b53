"""
report_uploader - Synchronize reports and data sources with a report server catalog.

Symbolic names from the configuration are resolved against an upload
prefix, intermediate folders are created on demand and every item is
deleted before it is recreated, so repeated uploads converge.

Usage:
    from report_uploader import CatalogSynchronizer, CatalogSession, SyncAction
    from report_uploader.config import load_sync_config

    config = load_sync_config(Path("reports.json"))
    session = CatalogSession("http://reports.example.com/ReportServer", "/Billing")

    async with CatalogSynchronizer(session) as synchronizer:
        await synchronizer.run(SyncAction.UPLOAD, config.reports, config.data_sources)
"""
__version__ = "0.3.0"

from .errors import (
    CatalogStateError,
    ConfigError,
    RemoteCatalogError,
    ReportFileError,
    ReportUploaderError,
)
from .models import (
    CatalogItem,
    CatalogSession,
    CatalogWarning,
    DataSource,
    DataSourceDefinition,
    ItemType,
    Report,
    ServerCredentials,
    SyncAction,
)
from .orchestrator import CatalogSynchronizer
from .paths import PathResolver
from .services import CatalogService, SoapCatalogClient

__all__ = [
    # Main
    "CatalogSynchronizer",
    "CatalogService",
    "SoapCatalogClient",
    "PathResolver",
    # Models
    "CatalogItem",
    "CatalogSession",
    "CatalogWarning",
    "DataSource",
    "DataSourceDefinition",
    "ItemType",
    "Report",
    "ServerCredentials",
    "SyncAction",
    # Errors
    "CatalogStateError",
    "ConfigError",
    "RemoteCatalogError",
    "ReportFileError",
    "ReportUploaderError",
]
