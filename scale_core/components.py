"""
Component Score Module
======================

First principal component scores per scale, used as continuous
predictors in the interaction regression.
"""

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from . import data
from .results import INSUFFICIENT_ITEMS, ScaleResult


def first_component_scores(items: pd.DataFrame) -> dict:
    """
    Extract standardized first principal component scores.

    Items are z-scored, so the decomposition is of the correlation matrix.
    No rotation. Scores have mean 0 and sample SD 1, and are signed so that
    they correlate positively with the raw item sum. Rows with any missing
    item get NaN (listwise deletion).

    Parameters:
        items: Item sub-table for one scale

    Returns:
        Dictionary with scores (Series aligned to items.index), loadings,
        eigenvalue and explained variance ratio
    """
    complete = data.complete_rows(items)
    n_obs = len(complete)

    scaled = StandardScaler().fit_transform(complete)
    pca = PCA(n_components=1)
    projected = pca.fit_transform(scaled)[:, 0]

    # explained_variance_ uses the n-1 divisor, so this gives sample SD 1
    scores = projected / np.sqrt(pca.explained_variance_[0])

    total = complete.sum(axis=1).values
    sign = 1.0 if np.corrcoef(scores, total)[0, 1] >= 0 else -1.0
    scores = sign * scores

    eigenvalue = pca.explained_variance_[0] * (n_obs - 1) / n_obs
    loadings = pd.Series(
        sign * pca.components_[0] * np.sqrt(eigenvalue),
        index=items.columns,
        name='loading',
    )

    return {
        'scores': pd.Series(scores, index=complete.index).reindex(items.index),
        'loadings': loadings,
        'eigenvalue': float(eigenvalue),
        'explained_variance_ratio': float(pca.explained_variance_ratio_[0]),
        'n_obs': n_obs,
    }


def add_component_scores(
    df: pd.DataFrame,
    scales: list[str]
) -> tuple[pd.DataFrame, dict[str, ScaleResult]]:
    """
    Append one component score column per scale, named after the scale.

    Parameters:
        df: Observation table (not modified)
        scales: Scales to summarize

    Returns:
        Tuple of (new DataFrame with score columns, per-scale ScaleResults)
    """
    print("\n" + "=" * 60)
    print("PRINCIPAL COMPONENT SCORES")
    print("=" * 60)

    df = df.copy()
    results = {}
    for scale in scales:
        items = data.scale_items(df, scale)
        n_items = items.shape[1]

        if n_items < 2:
            results[scale] = ScaleResult.failure(scale, INSUFFICIENT_ITEMS, n_items)
            df[scale] = np.nan
            print(f"\nScale {scale}: {INSUFFICIENT_ITEMS}")
            continue

        try:
            pc = first_component_scores(items)
        except (np.linalg.LinAlgError, ValueError) as e:
            results[scale] = ScaleResult.failure(scale, f"could not compute: {e}", n_items)
            df[scale] = np.nan
            print(f"\nScale {scale}: could not compute: {e}")
            continue

        df[scale] = pc['scores']
        results[scale] = ScaleResult.success(
            scale,
            {
                'loadings': pc['loadings'],
                'eigenvalue': pc['eigenvalue'],
                'explained_variance_ratio': pc['explained_variance_ratio'],
                'mean': float(pc['scores'].mean()),
                'sd': float(pc['scores'].std(ddof=1)),
            },
            n_items,
            pc['n_obs'],
        )

        print(f"\nScale {scale} ({n_items} items, n={pc['n_obs']}):")
        print(f"  Eigenvalue: {pc['eigenvalue']:.3f} "
              f"({pc['explained_variance_ratio'] * 100:.1f}% of variance)")
        for item, loading in pc['loadings'].items():
            print(f"    {item}: {loading:.3f}")

    print("\nComponent Score Statistics:")
    print(df[scales].describe().round(3).to_string())

    return df, results
