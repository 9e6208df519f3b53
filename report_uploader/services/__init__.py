"""Services for report_uploader module."""
from .catalog import CatalogService
from .soap_client import SoapCatalogClient

__all__ = [
    "CatalogService",
    "SoapCatalogClient",
]
