"""
Long Format Module
==================

Pivots item columns from wide to long format, one row per
(participant, item), labelled by the item's scale prefix.
"""

import re

import pandas as pd

from . import config, data


def to_long_format(
    df: pd.DataFrame,
    item_pattern: str = None,
    allowed_groups: list[str] = None,
    reference_group: str = None,
    carry_columns: list[str] = None,
) -> pd.DataFrame:
    """
    Reshape matched item columns to long format.

    Parameters:
        df: Observation table (with component score columns)
        item_pattern: Regex selecting item columns. Defaults to config.DEFAULT_ITEM_PATTERN
        allowed_groups: Group labels kept after reshaping. Defaults to config.DEFAULT_ALLOWED_GROUPS
        reference_group: Baseline category. Defaults to config.DEFAULT_REFERENCE_GROUP
        carry_columns: Participant-level columns copied to each item row.
            Defaults to config.DEFAULT_PCA_SCALES

    Returns:
        DataFrame with participant, item, value, group and carry columns;
        group is categorical with reference_group as its first level

    Raises:
        ValueError: naming the offending configuration value when the
            pattern matches nothing, an allow-listed group or carry column
            is absent, the reference is not allow-listed, or no rows remain
    """
    if item_pattern is None:
        item_pattern = config.DEFAULT_ITEM_PATTERN
    if allowed_groups is None:
        allowed_groups = config.DEFAULT_ALLOWED_GROUPS
    if reference_group is None:
        reference_group = config.DEFAULT_REFERENCE_GROUP
    if carry_columns is None:
        carry_columns = config.DEFAULT_PCA_SCALES

    carry_columns = list(carry_columns)
    allowed_groups = list(allowed_groups)
    if reference_group not in allowed_groups:
        raise ValueError(
            f"reference_group {reference_group!r} is not in allowed_groups {allowed_groups}"
        )

    missing_carry = [col for col in carry_columns if col not in df.columns]
    if missing_carry:
        raise ValueError(f"carry_columns not found in data: {missing_carry}")

    pattern = re.compile(item_pattern)
    item_cols = [col for col in df.columns
                 if pattern.match(str(col)) and data.parse_item_column(col) is not None]
    if not item_cols:
        raise ValueError(f"item_pattern {item_pattern!r} matched no columns")

    groups_present = {data.parse_item_column(col)[0] for col in item_cols}
    absent = [group for group in allowed_groups if group not in groups_present]
    if absent:
        raise ValueError(
            f"allowed_groups {absent} have no columns matching item_pattern {item_pattern!r}"
        )

    wide = data.coerce_numeric(df[carry_columns + item_cols], item_cols)
    wide['participant'] = df.index

    long_df = wide.melt(
        id_vars=['participant'] + carry_columns,
        value_vars=item_cols,
        var_name='item',
        value_name=config.RESPONSE_COL,
    )
    long_df[config.GROUP_COL] = long_df['item'].map(lambda col: data.parse_item_column(col)[0])

    long_df = long_df[long_df[config.GROUP_COL].isin(allowed_groups)].reset_index(drop=True)
    if long_df.empty:
        raise ValueError(f"no rows left after filtering to allowed_groups {allowed_groups}")

    levels = [reference_group] + [g for g in allowed_groups if g != reference_group]
    long_df[config.GROUP_COL] = pd.Categorical(long_df[config.GROUP_COL], categories=levels)

    print("\n" + "=" * 60)
    print("LONG FORMAT")
    print("=" * 60)
    print(f"Matched item columns ({item_pattern}): {', '.join(item_cols)}")
    print(f"Groups kept: {', '.join(allowed_groups)} (reference: {reference_group})")
    print(f"Long-format rows: {len(long_df):,}")
    print(long_df[config.GROUP_COL].value_counts().sort_index().to_string())

    return long_df[['participant', 'item', config.RESPONSE_COL, config.GROUP_COL] + carry_columns]
