"""
Internal Consistency Module
===========================

Cronbach's alpha per scale, with optional reorientation of miskeyed items
and item-level diagnostics (corrected item-total r, alpha if deleted).
"""

import numpy as np
import pandas as pd

from . import config, data
from .results import INSUFFICIENT_ITEMS, ScaleResult, results_to_frame


def cronbach_alpha(items: pd.DataFrame) -> float:
    """
    Cronbach's alpha for complete-case item data.

    alpha = k/(k-1) * (1 - sum(item variances) / variance(total score))

    Parameters:
        items: Item sub-table with at least two columns and no missing values

    Returns:
        Alpha coefficient (at most 1, may be negative)

    Raises:
        ValueError: if fewer than two items or the total score has no variance
    """
    n_items = items.shape[1]
    if n_items < 2:
        raise ValueError("alpha requires at least two items")

    item_variances = items.var(axis=0, ddof=1)
    total_variance = items.sum(axis=1).var(ddof=1)

    if not np.isfinite(total_variance) or total_variance <= 0:
        raise ValueError("total score has zero variance")

    return float((n_items / (n_items - 1)) * (1 - item_variances.sum() / total_variance))


def item_rest_correlations(items: pd.DataFrame) -> pd.Series:
    """Correlation of each item with the sum of the remaining items."""
    total = items.sum(axis=1)
    return pd.Series(
        {col: items[col].corr(total - items[col]) for col in items.columns},
        name='item_rest_r',
    )


def reverse_score(item: pd.Series) -> pd.Series:
    """Reflect an item within its own observed range (min + max - x)."""
    return item.min() + item.max() - item


def reorient_items(items: pd.DataFrame) -> tuple[pd.DataFrame, list[str]]:
    """
    Reverse-score items that correlate negatively with the rest of the scale.

    The item with the most negative item-rest correlation is flipped, then
    correlations are recomputed, until none is negative. Every flip raises
    the summed inter-item covariance, so the loop ends, and running it again
    on its own output flips nothing.

    Parameters:
        items: Complete-case item sub-table

    Returns:
        Tuple of (reoriented items, names of flipped items in flip order)
    """
    items = items.copy()
    flipped = []

    while True:
        correlations = item_rest_correlations(items).dropna()
        if correlations.empty or correlations.min() >= 0:
            break
        worst = correlations.idxmin()
        items[worst] = reverse_score(items[worst])
        flipped.append(worst)

    # An item flipped twice ends up in its original orientation
    reversed_items = [col for col in dict.fromkeys(flipped) if flipped.count(col) % 2 == 1]
    return items, reversed_items


def item_statistics(items: pd.DataFrame) -> pd.DataFrame:
    """
    Item-level reliability diagnostics.

    Returns:
        DataFrame indexed by item with mean, sd, corrected item-total
        correlation and alpha if the item were deleted
    """
    rest_r = item_rest_correlations(items)
    rows = []
    for col in items.columns:
        remaining = items.drop(columns=col)
        if remaining.shape[1] >= 2:
            try:
                alpha_deleted = cronbach_alpha(remaining)
            except ValueError:
                alpha_deleted = np.nan
        else:
            alpha_deleted = np.nan
        rows.append({
            'item': col,
            'mean': items[col].mean(),
            'sd': items[col].std(ddof=1),
            'item_rest_r': rest_r[col],
            'alpha_if_deleted': alpha_deleted,
        })
    return pd.DataFrame(rows).set_index('item')


def evaluate_scale(df: pd.DataFrame, scale: str, reorient: bool = True) -> ScaleResult:
    """Compute Cronbach's alpha for one scale, never raising."""
    items = data.complete_rows(data.scale_items(df, scale))
    n_items, n_obs = items.shape[1], len(items)

    if n_items < 2:
        return ScaleResult.failure(scale, INSUFFICIENT_ITEMS, n_items, n_obs)

    reversed_items = []
    if reorient:
        items, reversed_items = reorient_items(items)

    try:
        alpha = cronbach_alpha(items)
    except ValueError as e:
        return ScaleResult.failure(scale, f"could not compute: {e}", n_items, n_obs)

    return ScaleResult.success(
        scale,
        {
            'alpha': alpha,
            'alpha_label': config.get_alpha_label(alpha),
            'reversed_items': reversed_items,
            'item_stats': item_statistics(items),
        },
        n_items,
        n_obs,
    )


def evaluate_scales(
    df: pd.DataFrame,
    scales: list[str],
    reorient: bool = True
) -> dict[str, ScaleResult]:
    """
    Run Cronbach's alpha for every scale.

    Parameters:
        df: Observation table
        scales: Scale names to evaluate
        reorient: Reverse-score items that correlate negatively with the rest

    Returns:
        Dictionary of scale name to ScaleResult, in input order
    """
    print("\n" + "=" * 60)
    print(f"RELIABILITY (CRONBACH'S ALPHA{', ITEMS REORIENTED' if reorient else ''})")
    print("=" * 60)

    results = {}
    for scale in scales:
        result = evaluate_scale(df, scale, reorient=reorient)
        results[scale] = result

        print(f"\nScale {scale} ({result.n_items} items, n={result.n_obs}):")
        if not result.ok:
            print(f"  {result.reason}")
            continue

        stats = result.value
        print(f"  alpha: {stats['alpha']:.3f} ({stats['alpha_label']})")
        if stats['reversed_items']:
            print(f"  Reversed items: {', '.join(stats['reversed_items'])}")
        print(stats['item_stats'].round(3).to_string())

    return results


def summary_table(results: dict[str, ScaleResult]) -> pd.DataFrame:
    """Convert reliability results to one row per scale."""
    table = results_to_frame(results, ['alpha', 'alpha_label', 'reversed_items'])
    table['reversed_items'] = [
        ', '.join(items) if isinstance(items, list) else ''
        for items in table['reversed_items']
    ]
    return table
