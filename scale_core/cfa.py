"""
Confirmatory Factor Analysis Module
===================================

Fits a fixed measurement model by maximum likelihood, reports global fit
indices and standardized loadings, and derives composite reliability (CR)
and average variance extracted (AVE) per factor.

Identification: every latent factor variance is fixed to 1 and all
loadings are free (factor_analyzer's ConfirmatoryFactorAnalyzer).
"""

import warnings

import numpy as np
import pandas as pd
from factor_analyzer import ConfirmatoryFactorAnalyzer, ModelSpecificationParser
from scipy import stats as scipy_stats

from . import config, data


def model_items(measurement_model: dict[str, list[str]]) -> list[str]:
    """All item columns referenced by the measurement model, first-seen order."""
    return list(dict.fromkeys(
        item for items in measurement_model.values() for item in items
    ))


def _failed(reason: str, n_obs: int = 0) -> dict:
    return {
        'converged': False,
        'reason': f"model could not be estimated: {reason}",
        'n_obs': n_obs,
        'loadings': None,
        'standardized_loadings': None,
        'fit_indices': {},
        'fit_label': None,
    }


def _ml_discrepancy(sample_cov: np.ndarray, implied_cov: np.ndarray) -> float:
    """F_ML = ln|Sigma| + tr(S Sigma^-1) - ln|S| - p"""
    p = sample_cov.shape[0]
    _, logdet_implied = np.linalg.slogdet(implied_cov)
    _, logdet_sample = np.linalg.slogdet(sample_cov)
    trace = np.trace(sample_cov @ np.linalg.inv(implied_cov))
    return float(logdet_implied + trace - logdet_sample - p)


def fit_indices(
    sample_cov: np.ndarray,
    implied_cov: np.ndarray,
    n_obs: int,
    n_free_params: int
) -> dict:
    """
    Global fit statistics of a covariance structure model.

    Parameters:
        sample_cov: Observed covariance matrix (ML, divisor n)
        implied_cov: Model-implied covariance matrix
        n_obs: Number of observations
        n_free_params: Number of estimated parameters

    Returns:
        Dictionary with chi_square, df, p_value, CFI, TLI, RMSEA, SRMR, n_obs
    """
    p = sample_cov.shape[0]
    dof = p * (p + 1) // 2 - n_free_params

    chi_square = max(n_obs * _ml_discrepancy(sample_cov, implied_cov), 0.0)
    p_value = float(scipy_stats.chi2.sf(chi_square, dof)) if dof > 0 else np.nan

    # Independence (baseline) model: diagonal covariance
    sample_var = np.diag(sample_cov)
    _, logdet_sample = np.linalg.slogdet(sample_cov)
    chi_square_base = n_obs * float(np.sum(np.log(sample_var)) - logdet_sample)
    dof_base = p * (p - 1) // 2

    excess = max(chi_square - dof, 0.0)
    excess_base = max(chi_square_base - dof_base, excess, 0.0)
    cfi = 1.0 - excess / excess_base if excess_base > 0 else 1.0

    if dof > 0 and dof_base > 0 and chi_square_base / dof_base != 1:
        tli = ((chi_square_base / dof_base) - (chi_square / dof)) / ((chi_square_base / dof_base) - 1)
        rmsea = float(np.sqrt(excess / (dof * (n_obs - 1))))
    else:
        tli = np.nan
        rmsea = np.nan

    sample_sd = np.sqrt(sample_var)
    implied_sd = np.sqrt(np.diag(implied_cov))
    residual = (sample_cov / np.outer(sample_sd, sample_sd)
                - implied_cov / np.outer(implied_sd, implied_sd))
    lower = np.tril_indices(p)
    srmr = float(np.sqrt(np.mean(residual[lower] ** 2)))

    return {
        'chi_square': chi_square,
        'df': dof,
        'p_value': p_value,
        'CFI': float(cfi),
        'TLI': float(tli),
        'RMSEA': rmsea,
        'SRMR': srmr,
        'n_obs': n_obs,
    }


def fit_cfa(df: pd.DataFrame, measurement_model: dict[str, list[str]] = None) -> dict:
    """
    Fit the confirmatory factor model.

    Rows with any missing model item are dropped (listwise). Failures are
    returned as converged=False rather than raised.

    Parameters:
        df: Observation table
        measurement_model: Factor name -> ordered item list.
            Defaults to config.DEFAULT_MEASUREMENT_MODEL

    Returns:
        Dictionary with converged, reason, loadings, standardized_loadings,
        fit_indices, fit_label, n_obs
    """
    if measurement_model is None:
        measurement_model = config.DEFAULT_MEASUREMENT_MODEL

    items = model_items(measurement_model)
    missing = [item for item in items if item not in df.columns]
    if missing:
        return _failed(f"missing item columns {', '.join(missing)}")

    X = data.complete_rows(data.coerce_numeric(df[items]))
    n_obs = len(X)
    if n_obs <= len(items):
        return _failed(f"only {n_obs} complete observations for {len(items)} items", n_obs)

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            spec = ModelSpecificationParser.parse_model_specification_from_dict(X, measurement_model)
            cfa = ConfirmatoryFactorAnalyzer(spec, disp=False)
            cfa.fit(X.values)
    except Exception as e:
        return _failed(f"{type(e).__name__}: {e}", n_obs)

    for w in caught:
        if 'converge' in str(w.message).lower():
            return _failed(str(w.message), n_obs)

    factors = list(measurement_model.keys())
    loadings = np.asarray(cfa.loadings_)
    factor_cov = np.asarray(cfa.factor_varcovs_)
    error_vars = np.asarray(cfa.error_vars_).ravel()

    if not (np.all(np.isfinite(loadings)) and np.all(np.isfinite(error_vars))):
        return _failed("non-finite parameter estimates", n_obs)

    implied_cov = loadings @ factor_cov @ loadings.T + np.diag(error_vars)
    sample_cov = np.cov(X.values, rowvar=False, ddof=0)

    try:
        n_loadings = sum(len(measurement_model[factor]) for factor in factors)
        n_free = n_loadings + len(items) + len(factors) * (len(factors) - 1) // 2
        indices = fit_indices(sample_cov, implied_cov, n_obs, n_free)
    except np.linalg.LinAlgError as e:
        return _failed(str(e), n_obs)

    implied_sd = np.sqrt(np.diag(implied_cov))
    factor_sd = np.sqrt(np.diag(factor_cov))
    std_loadings = loadings * factor_sd[np.newaxis, :] / implied_sd[:, np.newaxis]

    rows = []
    for j, factor in enumerate(factors):
        for item in measurement_model[factor]:
            i = items.index(item)
            rows.append({
                'factor': factor,
                'item': item,
                'estimate': loadings[i, j],
                'std_estimate': std_loadings[i, j],
            })

    return {
        'converged': True,
        'reason': None,
        'n_obs': n_obs,
        'loadings': pd.DataFrame(loadings, index=items, columns=factors),
        'standardized_loadings': pd.DataFrame(rows),
        'fit_indices': indices,
        'fit_label': config.get_fit_label(indices),
    }


def composite_reliability(std_loadings) -> float:
    """CR = (sum lambda)^2 / ((sum lambda)^2 + sum(1 - lambda^2))"""
    lam = np.asarray(std_loadings, dtype=float)
    squared_sum = lam.sum() ** 2
    return float(squared_sum / (squared_sum + np.sum(1 - lam ** 2)))


def average_variance_extracted(std_loadings) -> float:
    """AVE = sum(lambda^2) / k"""
    lam = np.asarray(std_loadings, dtype=float)
    return float(np.mean(lam ** 2))


def reliability_table(
    result: dict,
    measurement_model: dict[str, list[str]] = None
) -> pd.DataFrame:
    """
    Composite reliability and AVE per factor.

    Both are NaN for every factor when the model did not converge.
    """
    if measurement_model is None:
        measurement_model = config.DEFAULT_MEASUREMENT_MODEL

    rows = []
    for factor, items in measurement_model.items():
        if result['converged']:
            std = result['standardized_loadings']
            lam = std.loc[std['factor'] == factor, 'std_estimate'].values
            cr = composite_reliability(lam)
            ave = average_variance_extracted(lam)
        else:
            cr = ave = np.nan
        rows.append({
            'factor': factor,
            'n_items': len(items),
            'CR': cr,
            'AVE': ave,
            'CR_ok': bool(cr >= config.CR_THRESHOLD) if np.isfinite(cr) else None,
            'AVE_ok': bool(ave >= config.AVE_THRESHOLD) if np.isfinite(ave) else None,
        })
    return pd.DataFrame(rows)


def print_cfa_results(result: dict, reliability: pd.DataFrame) -> None:
    """Print CFA fit, loadings and CR/AVE in readable format."""
    print("\n" + "=" * 60)
    print("CONFIRMATORY FACTOR ANALYSIS")
    print("=" * 60)

    if not result['converged']:
        print(f"\n{result['reason']}")
        print("Composite reliability and AVE not available.")
        return

    fit = result['fit_indices']
    print(f"\nObservations: {result['n_obs']:,}")
    print(f"Chi-square: {fit['chi_square']:.2f} (df={fit['df']}, p={fit['p_value']:.3g})")
    print(f"CFI={fit['CFI']:.3f}  TLI={fit['TLI']:.3f}  "
          f"RMSEA={fit['RMSEA']:.3f}  SRMR={fit['SRMR']:.3f}  ({result['fit_label']} fit)")

    print("\nStandardized Loadings:")
    print("-" * 50)
    print(result['standardized_loadings'].round(3).to_string(index=False))

    print("\nComposite Reliability / AVE:")
    print("-" * 50)
    print(reliability.round(3).to_string(index=False))
