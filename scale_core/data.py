"""
Data Loading and Preprocessing Module
======================================

Functions for loading the response table and locating each scale's
item columns.
"""

import re
from pathlib import Path
from typing import Optional

import pandas as pd

from . import config


_ITEM_RE = re.compile(config.ITEM_COLUMN_PATTERN)


def load_csv(filepath: str = None) -> pd.DataFrame:
    """
    Load CSV file with basic validation.

    Parameters:
        filepath: Path to CSV file. Defaults to config.DEFAULT_DATA_FILE

    Returns:
        DataFrame with loaded data

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the file cannot be parsed or has no rows
    """
    if filepath is None:
        filepath = config.DEFAULT_DATA_FILE

    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Input data file not found: {path}")

    try:
        df = pd.read_csv(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ValueError(f"Could not read input data file {path}: {e}") from e

    if df.empty:
        raise ValueError(f"Input data file {path} contains no observations")

    print(f"Loaded {len(df):,} records with {len(df.columns)} columns from {filepath}")
    return df


def parse_item_column(name: str) -> Optional[tuple[str, int]]:
    """Split an item column name like 'H3' into ('H', 3); None for non-items."""
    match = _ITEM_RE.match(str(name))
    if match is None:
        return None
    return match.group('scale'), int(match.group('index'))


def scale_columns(df: pd.DataFrame, scale: str) -> list[str]:
    """
    Return the item columns belonging to a scale, ordered by item index.

    Parameters:
        df: Observation table
        scale: Scale name (column prefix)

    Returns:
        List of column names
    """
    items = []
    for col in df.columns:
        parsed = parse_item_column(col)
        if parsed is not None and parsed[0] == scale:
            items.append((parsed[1], col))
    return [col for _, col in sorted(items)]


def coerce_numeric(df: pd.DataFrame, columns: list[str] = None) -> pd.DataFrame:
    """
    Convert columns to numeric, turning unparseable cells into NaN.

    Parameters:
        df: Input DataFrame
        columns: Columns to convert. Defaults to all columns

    Returns:
        Copy of df with numeric columns
    """
    if columns is None:
        columns = list(df.columns)

    df = df.copy()
    for col in columns:
        df[col] = pd.to_numeric(df[col], errors='coerce')
    return df


def scale_items(df: pd.DataFrame, scale: str) -> pd.DataFrame:
    """
    Complete-case numeric sub-table for one scale with unusable columns removed.

    Entirely missing columns are dropped before listwise deletion; columns
    that are constant among the complete rows are dropped after it.
    """
    items = coerce_numeric(df[scale_columns(df, scale)])
    items = complete_rows(items[[col for col in items.columns if items[col].notna().any()]])
    usable = [col for col in items.columns if items[col].nunique() > 1]
    return items[usable]


def complete_rows(items: pd.DataFrame) -> pd.DataFrame:
    """Listwise deletion: keep rows with no missing item."""
    return items.dropna(how='any')


def describe_scales(df: pd.DataFrame, scales: list[str]) -> pd.DataFrame:
    """
    Summarize which item columns were found for each scale.

    Returns:
        DataFrame with one row per scale (scale, n_items, items)
    """
    rows = []
    for scale in scales:
        cols = scale_columns(df, scale)
        rows.append({'scale': scale, 'n_items': len(cols), 'items': ', '.join(cols)})

    summary = pd.DataFrame(rows)
    print("\nScales found:")
    for _, row in summary.iterrows():
        print(f"  {row['scale']}: {row['n_items']} items ({row['items'] or 'none'})")
    return summary
