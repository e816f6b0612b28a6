"""Read-only access to the workshop collections.

A source only has to expose ``list()``; fetching, retries and caching belong
to whoever owns the data. Two implementations ship here: an in-memory one
and one backed by CSV/JSON exports sitting in a data directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Type, Union

import pandas as pd

from core.models import Company, Invoice, Job, Warranty

logger = logging.getLogger(__name__)

ENTITY_FILES: Dict[str, Type] = {
    "companies": Company,
    "jobs": Job,
    "invoices": Invoice,
    "warranties": Warranty,
}
FILE_SUFFIXES = (".csv", ".json")


class DataSourceError(RuntimeError):
    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class EntitySource(Protocol):
    def list(self) -> Sequence[Any]:
        ...


class StaticSource:
    def __init__(self, entity_type: Type, records: Iterable[Union[Mapping[str, Any], Any]] = ()):
        self.entity_type = entity_type
        self._items = [r if isinstance(r, entity_type) else entity_type.from_record(r) for r in records]

    def list(self) -> List[Any]:
        return list(self._items)


def find_entity_file(data_dir: Path, stem: str) -> Optional[Path]:
    for suffix in FILE_SUFFIXES:
        path = Path(data_dir) / f"{stem}{suffix}"
        if path.exists():
            return path
    return None


def read_records(path: Path) -> List[Dict[str, Any]]:
    """Raw rows of a CSV/JSON export; every CSV cell is kept as text for the entity coercion."""
    path = Path(path)
    try:
        if path.suffix.lower() == ".json":
            if not path.read_text(encoding="utf-8").strip():
                return []
            df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
        else:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        return []
    except (ValueError, OSError) as exc:
        raise DataSourceError(path, f"could not read records ({exc})") from exc
    return df.to_dict(orient="records")


class FileSource:
    def __init__(self, entity_type: Type, path: Optional[Path]):
        self.entity_type = entity_type
        self.path = Path(path) if path is not None else None

    def list(self) -> List[Any]:
        if self.path is None or not self.path.exists():
            logger.warning("No %s file found; treating the collection as empty", self.entity_type.__name__)
            return []
        rows = read_records(self.path)
        items = [self.entity_type.from_record(r) for r in rows]
        logger.debug("Loaded %d %s rows from %s", len(items), self.entity_type.__name__, self.path.name)
        return items


@dataclass(frozen=True)
class DataSources:
    companies: EntitySource = field(default_factory=lambda: StaticSource(Company))
    jobs: EntitySource = field(default_factory=lambda: StaticSource(Job))
    invoices: EntitySource = field(default_factory=lambda: StaticSource(Invoice))
    warranties: EntitySource = field(default_factory=lambda: StaticSource(Warranty))


def file_sources(data_dir: Path) -> DataSources:
    return DataSources(**{
        stem: FileSource(entity_type, find_entity_file(data_dir, stem))
        for stem, entity_type in ENTITY_FILES.items()
    })
