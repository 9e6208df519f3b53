"""
Catalog path helpers.

Symbolic names come from configuration and are relative to the upload
prefix. Physical paths are what the report server understands: absolute,
'/' separated. Paths are treated as opaque strings split only on '/'.
"""
from typing import Iterable, List, Optional

PATH_SEPARATOR = "/"


def normalize_component(value: str) -> str:
    """Return value with exactly one leading separator, or '' for the root."""
    if not value or value == PATH_SEPARATOR:
        return ""
    if value.startswith(PATH_SEPARATOR):
        return value
    return PATH_SEPARATOR + value


def physical_path(prefix: str, name: str) -> str:
    """
    Fully qualified catalog path for a symbolic name.

    Args:
        prefix: Upload prefix ('' or '/' for none)
        name: Symbolic name, with or without leading '/'

    Returns:
        normalize(prefix) + normalize(name)
    """
    return normalize_component(prefix) + normalize_component(name)


def leaf_name(path: str) -> str:
    index = path.rfind(PATH_SEPARATOR)
    if index == -1:
        return path
    return path[index + 1:]


def parent_dir(path: str) -> str:
    index = path.rfind(PATH_SEPARATOR)
    if index == -1:
        return ""
    return path[:index]


def top_level_segment(name: str) -> Optional[str]:
    """First segment of a nested name, None when the name is not nested."""
    parts = name.split(PATH_SEPARATOR)
    return parts[0] if len(parts) > 1 else None


def top_level_directories(names: Iterable[str]) -> List[str]:
    """Distinct, sorted top-level segments of the nested names."""
    segments = {top_level_segment(name) for name in names}
    segments.discard(None)
    return sorted(segments)


def split_segments(path: str) -> List[str]:
    """Ordered folder components of an absolute physical path."""
    return path[1:].split(PATH_SEPARATOR) if path else []


class PathResolver:
    """Resolves symbolic names against a fixed upload prefix."""

    def __init__(self, prefix: str = ""):
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def physical_path(self, name: str) -> str:
        return physical_path(self._prefix, name)
