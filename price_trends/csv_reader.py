"""
Load the transaction CSV and validate its rows into ``TransactionRecord`` objects.
"""
from __future__ import annotations

import logging
from numbers import Real
from pathlib import Path
from typing import IO, Iterable, List, Mapping, Union

import numpy as np
import pandas as pd

from . import config
from .periods import is_valid_date
from .records import TransactionRecord

logger = logging.getLogger(__name__)

COLUMN_ALIASES = {
    "交易年月日": "date",
    "社區名稱": "community",
    "交易價格": "price",
    "估值": "valuation",
    "縣市": "city",
    "行政區": "district",
    "緯度": "lat",
    "經度": "lng",
    "地址": "address",
    "transaction_date": "date",
    "community_name": "community",
    "transaction_price": "price",
    "estimated_valuation": "valuation",
    "latitude": "lat",
    "longitude": "lng",
}

REQUIRED_COLUMNS = ("date", "community", "price")
NUMERIC_COLUMNS = ("price", "valuation", "lat", "lng")
TEXT_COLUMNS = ("city", "district", "address")

Source = Union[str, Path, IO[str]]


class DatasetError(RuntimeError):
    """Raised when a transaction file cannot be turned into a table."""


def _canonical_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = df.rename(columns=lambda column: str(column).strip())
    renamed = renamed.rename(columns=COLUMN_ALIASES)
    missing = [column for column in REQUIRED_COLUMNS if column not in renamed.columns]
    if missing:
        raise DatasetError(f"Transaction data is missing required columns: {', '.join(missing)}")
    return renamed


def read_transactions(source: Source) -> pd.DataFrame:
    """
    Parse a CSV into a dataframe with canonical column names.

    Every column is read as text so ``YYYYMMDD`` dates survive untouched;
    numeric coercion happens during validation.
    """
    try:
        df = pd.read_csv(source, dtype=str, skipinitialspace=True)
    except FileNotFoundError as exc:
        raise DatasetError(f"Transaction file not found at {source}") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DatasetError(f"Could not parse transaction file: {exc}") from exc
    return _canonical_columns(df)


def _clean_dates(series: pd.Series) -> pd.Series:
    text = series.astype("string").str.strip()
    # Spreadsheet exports sometimes write the date as a float.
    return text.str.replace(r"\.0+$", "", regex=True)


def _valid_row_mask(df: pd.DataFrame) -> pd.Series:
    community_ok = df["community"].map(lambda value: isinstance(value, str) and value.strip() != "")
    price_ok = np.isfinite(df["price"].astype("float64"))
    date_ok = df["date"].map(lambda value: isinstance(value, str) and is_valid_date(value))
    return community_ok.astype(bool) & price_ok & date_ok.astype(bool)


def records_from_frame(df: pd.DataFrame) -> List[TransactionRecord]:
    """
    Validate rows and convert them into records, dropping malformed ones.
    """
    working = _canonical_columns(df).copy()
    if working.empty:
        return []

    for column in NUMERIC_COLUMNS:
        if column in working.columns:
            working[column] = pd.to_numeric(working[column], errors="coerce")
        else:
            working[column] = np.nan
    for column in TEXT_COLUMNS:
        if column not in working.columns:
            working[column] = ""

    working["date"] = _clean_dates(working["date"]).astype(object)
    mask = _valid_row_mask(working)
    dropped = int((~mask).sum())
    if dropped:
        logger.warning("Dropped %d malformed transaction rows out of %d", dropped, len(working))

    valid = working[mask]
    records: List[TransactionRecord] = []
    for row in valid.itertuples(index=False):
        records.append(
            TransactionRecord(
                date=str(row.date),
                community=str(row.community).strip(),
                price=float(row.price),
                valuation=_float_or_zero(row.valuation),
                city=_text_or_empty(row.city),
                district=_text_or_empty(row.district),
                lat=_float_or_zero(row.lat),
                lng=_float_or_zero(row.lng),
                address=_text_or_empty(row.address),
            )
        )
    return records


def _float_or_zero(value) -> float:
    if value is None or pd.isna(value):
        return 0.0
    return float(value)


def _text_or_empty(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, (bool, np.bool_))


def records_from_rows(rows: Iterable[Mapping]) -> List[TransactionRecord]:
    """
    Validate already-parsed row mappings, as delivered by an upstream CSV parser.

    Prices must already be numbers; text such as ``"1000000"`` marks the row
    as mistyped and it is dropped.
    """
    df = pd.DataFrame(list(rows))
    if df.empty:
        return []
    df = _canonical_columns(df)
    df["date"] = df["date"].map(lambda value: None if value is None else str(value))
    df["price"] = df["price"].map(lambda value: value if _is_number(value) else None)
    return records_from_frame(df)


def load_records(source: Source) -> List[TransactionRecord]:
    records = records_from_frame(read_transactions(source))
    logger.info("Loaded %d valid transaction records", len(records))
    return records


def load_default_records() -> List[TransactionRecord]:
    path = config.csv_path()
    if path is None:
        raise DatasetError("PRICE_TRENDS_CSV_PATH is not configured.")
    return load_records(path)


def records_to_frame(records: Iterable[TransactionRecord]) -> pd.DataFrame:
    """Tabular view of the records in input order."""
    rows = [
        {
            "date": record.date,
            "community": record.community,
            "price": record.price,
            "valuation": record.valuation,
            "city": record.city,
            "district": record.district,
            "lat": record.lat,
            "lng": record.lng,
            "address": record.address,
        }
        for record in records
    ]
    columns = ["date", "community", "price", "valuation", "city", "district", "lat", "lng", "address"]
    return pd.DataFrame(rows, columns=columns)


def list_districts(records: Iterable[TransactionRecord]) -> List[str]:
    """Expose the distinct districts present in the records."""
    return sorted({record.district for record in records if record.district})
