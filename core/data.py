from __future__ import annotations

import logging
import os
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, Union

import pandas as pd

from core.filters import DashboardFilters, normalize_filters
from core.models import Company, Invoice, Job, Warranty, local_zone, parse_timestamp
from core.sources import ENTITY_FILES, DataSources, file_sources, find_entity_file

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("WORKSHOP_DATA_DIR") or Path(__file__).resolve().parents[1] / "data")

FrameLike = Union[pd.DataFrame, Sequence[Any], None]


def get_source_files(data_dir: Optional[Path] = None) -> List[Path]:
    data_dir = Path(data_dir or DATA_DIR)
    found = [find_entity_file(data_dir, stem) for stem in ENTITY_FILES]
    return [f for f in found if f is not None]


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((f.name, f.stat().st_mtime) for f in files)


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_currency(value: object) -> str:
    """``$1,234`` for whole amounts, up to two decimals otherwise."""
    if value is None or pd.isna(value):
        return "N/A"
    rounded = round_half_up(value, 2) or 0.0
    text = f"{rounded:,.2f}".rstrip("0").rstrip(".")
    return f"${text}"


def format_date(value: object) -> str:
    ts = parse_timestamp(value)
    if ts is None:
        return "N/A"
    return f"{ts.month}/{ts.day}/{ts.year}"


def format_long_date(value: object) -> str:
    ts = parse_timestamp(value)
    if ts is None:
        return ""
    return f"{ts:%A, %B} {ts.day}, {ts.year}"


def capture_now(now: object = None) -> pd.Timestamp:
    """The single reference instant of one aggregation pass, as naive local time."""
    if now is not None:
        ts = parse_timestamp(now)
        if ts is None:
            raise ValueError(f"Unparseable reference time: {now!r}")
        return ts
    return pd.Timestamp.now(tz=local_zone()).tz_localize(None)


def as_frame(items: FrameLike, entity_type: Type) -> pd.DataFrame:
    """Entities, raw mappings or an existing frame -> a typed frame with the entity's columns."""
    if isinstance(items, pd.DataFrame):
        if items.attrs.get("entity") == entity_type.__name__:
            return items.copy()
        items = items.to_dict(orient="records")
    entities = [it if isinstance(it, entity_type) else entity_type.from_record(it) for it in (items or [])]
    df = pd.DataFrame([e.to_record() for e in entities], columns=entity_type.columns())
    for col in entity_type.DATE_FIELDS:
        df[col] = pd.to_datetime(df[col])
    for col in entity_type.NUMBER_FIELDS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    df.attrs["entity"] = entity_type.__name__
    return df


def load_from_sources(sources: DataSources) -> Dict[str, pd.DataFrame]:
    frames = {
        "companies": as_frame(sources.companies.list(), Company),
        "jobs": as_frame(sources.jobs.list(), Job),
        "invoices": as_frame(sources.invoices.list(), Invoice),
        "warranties": as_frame(sources.warranties.list(), Warranty),
    }
    undated = int(frames["jobs"]["due_date"].isna().sum())
    if undated:
        logger.info("%d jobs have no usable due date and are left out of due-date alerts", undated)
    return frames


# ---------------- Public API (Streamlit parity + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(data_dir: str, files_sig: Tuple[Tuple[str, float], ...]) -> Dict[str, object]:
    frames = load_from_sources(file_sources(Path(data_dir)))
    logger.debug("Loaded dashboard data from %s: %s", data_dir, {k: len(v) for k, v in frames.items()})
    return {"files": [name for name, _ in files_sig], **frames}


def load_dashboard_data(data_dir: Optional[Path] = None) -> Dict[str, object]:
    data_dir = Path(data_dir or DATA_DIR)
    files = get_source_files(data_dir)
    if not files:
        logger.warning("No workshop data files found in %s", data_dir)
        return {"files": [], **load_from_sources(DataSources())}
    return _load_dashboard_data_cached(str(data_dir), file_signature(files))


def prepare_context(
    filters: Optional[dict | DashboardFilters],
    data_ctx: Dict[str, object],
    now: object = None,
) -> Dict[str, object]:
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)
    return {
        "filters": filt,
        "now": capture_now(now),
        "companies": as_frame(data_ctx.get("companies"), Company),
        "jobs": as_frame(data_ctx.get("jobs"), Job),
        "invoices": as_frame(data_ctx.get("invoices"), Invoice),
        "warranties": as_frame(data_ctx.get("warranties"), Warranty),
    }
