# risk_data.py
# Dataset wrapper and the indexer that derives the dropdown domains.

import numbers
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
import pandas as pd

from dashboard_errors import DatasetSchemaError, EmptyDatasetError

YEAR_KEY = "Year"
ENTITY_KEY = "Entity"


# longest leading decimal literal, the way parseFloat reads a string
LEADING_NUMBER = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


def _parse_one(v):
    if v is None or isinstance(v, (bool, np.bool_)):
        return np.nan
    if isinstance(v, numbers.Real):
        return float(v)
    if not isinstance(v, str):
        return np.nan
    m = LEADING_NUMBER.match(v)
    return float(m.group(1)) if m else np.nan


def parse_numeric(values):
    """
    parseFloat-style parse for scalars or Series: leading number wins
    ("10 deaths" -> 10, "1,234" -> 1), anything else -> NaN, never 0.
    """
    if isinstance(values, pd.Series):
        return values.map(_parse_one).astype(float)
    return _parse_one(values)


@dataclass(frozen=True, eq=False)
class Dataset:
    """The fetched records, kept in order, plus a DataFrame view of them."""

    records: tuple
    frame: pd.DataFrame
    year_keys: pd.Series

    @classmethod
    def from_records(cls, records):
        records = tuple(records)
        for i, rec in enumerate(records):
            if not isinstance(rec, Mapping):
                raise DatasetSchemaError(f"Record {i} is not an object: {type(rec).__name__}")
        frame = pd.DataFrame([dict(r) for r in records])
        if ENTITY_KEY not in frame.columns:
            # keep the filters working on malformed input; the indexer reports it
            frame[ENTITY_KEY] = pd.Series([None] * len(frame), dtype=object)
        # years compare as strings, whatever type the JSON carried
        year_keys = pd.Series([str(r.get(YEAR_KEY)) for r in records], index=frame.index, dtype=object)
        return cls(records=records, frame=frame, year_keys=year_keys)

    def __len__(self):
        return len(self.records)

    @property
    def empty(self):
        return not self.records

    def rows_for_year(self, year) -> pd.DataFrame:
        return self.frame[self.year_keys == str(year)]

    def numeric(self, rows: pd.DataFrame, column: str) -> pd.Series:
        """Parsed values of `column` for `rows`; a column missing from the data is all NaN."""
        if column not in rows.columns:
            return pd.Series(np.nan, index=rows.index, dtype=float)
        return parse_numeric(rows[column])


@dataclass(frozen=True)
class DatasetIndex:
    years: List[str]
    countries: List[str]
    risk_factors: List[str]


class DatasetIndexer:
    @staticmethod
    def infer(dataset) -> DatasetIndex:
        """
        Derive the dropdown domains from a dataset (a Dataset or a plain
        sequence of records).

        years / countries: distinct values in first-seen order.
        risk_factors: keys of the *first* record after the first two.
        Later records are not checked against that key set.
        """
        if not isinstance(dataset, Dataset):
            dataset = Dataset.from_records(dataset)
        if dataset.empty:
            raise EmptyDatasetError("Dataset has no records")

        first_keys = list(dataset.records[0].keys())
        missing = [k for k in (YEAR_KEY, ENTITY_KEY) if k not in first_keys]
        if missing:
            raise DatasetSchemaError(f"First record is missing keys: {missing}")

        frame = dataset.frame
        years = [str(y) for y in pd.unique(dataset.year_keys)]
        countries = [str(c) for c in pd.unique(frame[ENTITY_KEY].dropna())]
        return DatasetIndex(years=years, countries=countries, risk_factors=first_keys[2:])


def risk_factor_options(index: DatasetIndex, labels=None) -> Sequence[dict]:
    labels = labels or {}
    return [{"label": labels.get(rf, rf), "value": rf} for rf in index.risk_factors]
