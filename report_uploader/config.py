"""Loading of the JSON document declaring reports and data sources."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .models import DataSource, Report

logger = logging.getLogger(__name__)


class ReportEntry(BaseModel):
    name: str = Field(min_length=1)
    filename: str = Field(min_length=1)


class DataSourceEntry(BaseModel):
    name: str = Field(min_length=1)
    host: str = Field(min_length=1)
    instance: Optional[str] = None
    database: str = Field(min_length=1)
    username: Optional[str] = None
    password: Optional[str] = None


class ConfigDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reports: List[ReportEntry] = Field(default_factory=list)
    data_sources: List[DataSourceEntry] = Field(default_factory=list, alias="dataSources")


@dataclass(frozen=True)
class SyncConfig:
    """Reports and data sources to synchronize, in declaration order."""
    reports: Tuple[Report, ...] = ()
    data_sources: Tuple[DataSource, ...] = ()

    @classmethod
    def from_document(cls, document: ConfigDocument, base_dir: Path) -> "SyncConfig":
        """Convert a validated document, resolving report files against base_dir."""
        reports = []
        for entry in document.reports:
            filename = Path(entry.filename).expanduser()
            if not filename.is_absolute():
                filename = base_dir / filename
            reports.append(Report(name=entry.name, filename=filename))
        data_sources = [DataSource(**entry.model_dump()) for entry in document.data_sources]
        return cls(reports=tuple(reports), data_sources=tuple(data_sources))


def load_sync_config(path: Path) -> SyncConfig:
    """
    Load and validate the configuration document.

    Args:
        path: JSON file with "reports" and "dataSources" arrays

    Returns:
        SyncConfig with domain models

    Raises:
        ConfigError: file missing/unreadable or document malformed
    """
    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise ConfigError(f"configuration file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"could not read configuration file {config_path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"configuration file {config_path} is not valid UTF-8: {exc}") from exc

    try:
        document = ConfigDocument.model_validate_json(content)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration file {config_path}: {exc}") from exc

    config = SyncConfig.from_document(document, config_path.parent)
    logger.debug(
        f"Loaded {len(config.reports)} reports and {len(config.data_sources)} "
        f"data sources from {config_path}"
    )
    return config
