"""
Sampling Adequacy Module
========================

Per-scale factorability tests: Kaiser-Meyer-Olkin measure of sampling
adequacy and Bartlett's test of sphericity.
"""

import numpy as np
import pandas as pd
from factor_analyzer.factor_analyzer import calculate_bartlett_sphericity, calculate_kmo

from . import config, data
from .results import INSUFFICIENT_ITEMS, ScaleResult, results_to_frame


def check_factorability(items: pd.DataFrame) -> dict:
    """
    Test whether a scale's items are suitable for factor analysis.

    Performs:
    - Bartlett's Test of Sphericity: Should be significant (p < 0.05)
    - KMO (Kaiser-Meyer-Olkin): Should be > 0.6, ideally > 0.8

    Parameters:
        items: Complete-case item sub-table (n_samples x n_items)

    Returns:
        Dictionary with test results and interpretations

    Raises:
        ValueError: if either statistic is not finite
    """
    chi_square, p_value = calculate_bartlett_sphericity(items)
    kmo_all, kmo_model = calculate_kmo(items)

    if not np.isfinite(kmo_model) or not np.isfinite(chi_square):
        raise ValueError("non-finite statistic (singular correlation matrix?)")

    return {
        'bartlett_chi_square': float(chi_square),
        'bartlett_p_value': float(p_value),
        'bartlett_pass': bool(p_value < config.SIGNIFICANCE_LEVEL),
        'kmo_overall': float(kmo_model),
        'kmo_label': config.get_kmo_label(kmo_model),
        'kmo_per_item': dict(zip(items.columns, np.atleast_1d(kmo_all))),
    }


def evaluate_scale(df: pd.DataFrame, scale: str) -> ScaleResult:
    """Run the factorability tests on one scale, never raising."""
    items = data.complete_rows(data.scale_items(df, scale))
    n_items, n_obs = items.shape[1], len(items)

    if n_items < 2:
        return ScaleResult.failure(scale, INSUFFICIENT_ITEMS, n_items, n_obs)

    try:
        results = check_factorability(items)
    except (np.linalg.LinAlgError, ValueError, ZeroDivisionError) as e:
        return ScaleResult.failure(scale, f"could not compute: {e}", n_items, n_obs)

    return ScaleResult.success(scale, results, n_items, n_obs)


def evaluate_scales(df: pd.DataFrame, scales: list[str]) -> dict[str, ScaleResult]:
    """
    Run KMO and Bartlett's test for every scale.

    Parameters:
        df: Observation table
        scales: Scale names to evaluate

    Returns:
        Dictionary of scale name to ScaleResult, in input order
    """
    print("\n" + "=" * 60)
    print("SAMPLING ADEQUACY (KMO & BARTLETT)")
    print("=" * 60)

    results = {}
    for scale in scales:
        result = evaluate_scale(df, scale)
        results[scale] = result

        print(f"\nScale {scale} ({result.n_items} items, n={result.n_obs}):")
        if not result.ok:
            print(f"  {result.reason}")
            continue

        stats = result.value
        print(f"  KMO: {stats['kmo_overall']:.3f} ({stats['kmo_label']})")
        for item, kmo in stats['kmo_per_item'].items():
            print(f"    {item}: {kmo:.3f}")
        print(f"  Bartlett: chi2={stats['bartlett_chi_square']:,.2f}, "
              f"p={stats['bartlett_p_value']:.2e} "
              f"({'PASS' if stats['bartlett_pass'] else 'FAIL'})")

    return results


def summary_table(results: dict[str, ScaleResult]) -> pd.DataFrame:
    """Convert factorability results to one row per scale."""
    return results_to_frame(
        results,
        ['kmo_overall', 'kmo_label', 'bartlett_chi_square', 'bartlett_p_value', 'bartlett_pass'],
    )
