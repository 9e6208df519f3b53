"""
Models for report_uploader module.

Immutable dataclasses following Single Responsibility Principle.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

DATA_SOURCES_DIR = "DataSources"


class SyncAction(str, Enum):
    """Action requested on the command line."""
    UPLOAD = "upload"
    UPLOAD_REPORTS = "upload_reports"
    DELETE = "delete"


class ItemType(Enum):
    """Catalog item type as reported by the report server."""
    UNKNOWN = "Unknown"
    FOLDER = "Folder"
    REPORT = "Report"
    DATA_SOURCE = "DataSource"
    RESOURCE = "Resource"
    LINKED_REPORT = "LinkedReport"
    MODEL = "Model"

    @classmethod
    def parse(cls, value: str) -> "ItemType":
        """Map the server's ItemTypeEnum string to an ItemType."""
        try:
            return cls(value.strip())
        except ValueError:
            raise ValueError(f"Unrecognised catalog item type: {value!r}") from None


@dataclass(frozen=True)
class Report:
    """Report definition to place at a symbolic catalog path."""
    name: str
    filename: Path

    @property
    def is_nested(self) -> bool:
        return "/" in self.name


@dataclass(frozen=True)
class DataSource:
    """Immutable SQL Server data source declaration."""
    name: str
    host: str
    database: str
    instance: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def catalog_name(self) -> str:
        """Symbolic path under the reserved data sources folder."""
        return f"{DATA_SOURCES_DIR}/{self.name}"

    @property
    def has_credentials(self) -> bool:
        return self.username is not None

    @property
    def connection_string(self) -> str:
        data_source = self.host
        if self.instance:
            data_source = f"{self.host}\\{self.instance}"
        if self.has_credentials:
            auth = f"User Id={self.username};Password={self.password or ''}"
        else:
            auth = "Integrated Security=SSPI"
        return f"Data Source={data_source};Initial Catalog={self.database};{auth};"


@dataclass(frozen=True)
class DataSourceDefinition:
    """Payload of a CreateDataSource call."""
    connect_string: str
    extension: str = "SQL"
    enabled: bool = True
    impersonate_user: bool = False
    windows_credentials: bool = False
    credential_retrieval: str = "None"  # None, Prompt, Integrated, Store
    prompt: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def for_sql(cls, connect_string: str) -> "DataSourceDefinition":
        return cls(connect_string=connect_string)


@dataclass(frozen=True)
class CatalogItem:
    """Read-only view of an item in the remote catalog."""
    name: str
    path: str
    type: ItemType

    @property
    def physical_path(self) -> str:
        return self.path

    @property
    def is_folder(self) -> bool:
        return self.type == ItemType.FOLDER


@dataclass(frozen=True)
class CatalogWarning:
    """Advisory returned by the server from a successful CreateReport."""
    code: Optional[str] = None
    severity: Optional[str] = None
    object_name: Optional[str] = None
    object_type: Optional[str] = None
    message: Optional[str] = None

    def describe(self) -> str:
        return (
            f"Code={self.code} ObjectName={self.object_name} "
            f"ObjectType={self.object_type} Severity={self.severity} "
            f"Message={self.message}"
        )


@dataclass(frozen=True)
class ServerCredentials:
    """Windows account used to authenticate against the report server."""
    domain: str
    username: str
    password: str

    @property
    def account(self) -> str:
        return f"{self.domain}\\{self.username}"

    @classmethod
    def from_parts(
        cls,
        domain: Optional[str],
        username: Optional[str],
        password: Optional[str],
    ) -> Optional["ServerCredentials"]:
        """
        Build credentials from optional settings.

        Returns None when none of the three is set. Raises ValueError when
        only some are set.
        """
        parts = (domain, username, password)
        if all(part is None for part in parts):
            return None
        if any(part is None for part in parts):
            raise ValueError(
                "If domain, username or password is specified then all must be specified"
            )
        return cls(domain=domain, username=username, password=password)


@dataclass(frozen=True)
class CatalogSession:
    """Immutable connection settings for one run against the report server."""
    report_target: str
    upload_prefix: str = ""
    credentials: Optional[ServerCredentials] = None
    timeout: int = 60

    @property
    def service_url(self) -> str:
        return f"{self.report_target.rstrip('/')}/ReportService2005.asmx"
