"""Fetch the five CSV feeds and parse them into records.

A feed source is either an http(s) URL (published sheet) or a local path.
Parsing is lenient: every cell is read as text, blanks stay empty strings,
rows with too many fields are truncated and short rows are padded.
"""

import io
import logging
import warnings
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Union

import pandas as pd
import requests

from src.config.constants import FEED_FILES, FEED_TIMEOUT_SEC, FEED_URLS
from src.data.records import (
    AreaRecord,
    FleetData,
    FuelRecord,
    MaintenanceRecord,
    TripRecord,
    VehicleRecord,
    unrecognized_month_headers,
)

logger = logging.getLogger(__name__)

Source = Union[str, Path]

RECORD_TYPES = {
    "trips": TripRecord,
    "vehicles": VehicleRecord,
    "fuel": FuelRecord,
    "maintenance": MaintenanceRecord,
    "areas": AreaRecord,
}


class FeedError(RuntimeError):
    """A feed could not be retrieved."""


def read_source(source: Source, session: Optional[requests.Session] = None) -> str:
    """Return the raw text of a feed."""
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        http = session or requests
        try:
            response = http.get(source, timeout=FEED_TIMEOUT_SEC)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FeedError(f"Failed to fetch {source}: {exc}") from exc
        # Without a declared charset requests falls back to ISO-8859-1 for text/*
        if "charset=" not in response.headers.get("Content-Type", "").lower():
            try:
                return response.content.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise FeedError(f"Feed {source} is not valid UTF-8: {exc}") from exc
        return response.text

    path = Path(source)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise FeedError(f"Failed to read {path}: {exc}") from exc


def parse_csv(text: str) -> pd.DataFrame:
    """Parse CSV text into a string-only DataFrame with stripped headers and cells."""
    if not text.strip():
        return pd.DataFrame()

    # index_col=False keeps surplus trailing fields from being read as an
    # index; pandas truncates them and reports a ParserWarning instead.
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", pd.errors.ParserWarning)
        try:
            df = pd.read_csv(
                io.StringIO(text),
                dtype=str,
                keep_default_na=False,
                index_col=False,
                skip_blank_lines=True,
                engine="python",
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            raise FeedError(f"Unreadable CSV feed: {exc}") from exc
    for warning in caught:
        logger.warning(f"CSV feed: {warning.message}")

    df = df.fillna("")
    df.columns = [str(c).strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def frame_to_records(df: pd.DataFrame, record_type: Callable) -> list:
    """Convert DataFrame rows into records; unknown columns are ignored."""
    return [record_type.from_row(row) for row in df.to_dict(orient="records")]


def load_feed(name: str, source: Source, session: Optional[requests.Session] = None) -> list:
    record_type = RECORD_TYPES[name]
    df = parse_csv(read_source(source, session))
    if record_type is FuelRecord:
        for header in unrecognized_month_headers(df.columns):
            logger.warning(f"Fuel column {header!r} is not a known month code; its costs are ignored")
    records = frame_to_records(df, record_type)
    logger.info(f"Loaded {len(records)} {name} records")
    return records


def default_sources(data_dir: Optional[Source] = None) -> Dict[str, Source]:
    """Feed sources: local CSV files under data_dir, else the published sheets."""
    if data_dir is None:
        return dict(FEED_URLS)
    base = Path(data_dir)
    return {name: base / filename for name, filename in FEED_FILES.items()}


def load_fleet_data(
    sources: Optional[Mapping[str, Source]] = None,
    session: Optional[requests.Session] = None,
) -> FleetData:
    """Load all five feeds into a FleetData snapshot.

    Raises:
        FeedError: if any feed cannot be retrieved. No partial snapshot is returned.
    """
    sources = dict(sources) if sources is not None else default_sources()
    missing = set(RECORD_TYPES) - set(sources)
    if missing:
        raise ValueError(f"Missing feed sources: {sorted(missing)}")

    loaded = {name: tuple(load_feed(name, sources[name], session)) for name in RECORD_TYPES}
    return FleetData(**loaded)
