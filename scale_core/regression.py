"""
Interaction Regression Module
=============================

OLS of item value on group, component scores and group x score products.

The model is described by a structured spec (response, categorical group,
numeric predictors, interaction pairs) and the design matrix is built
explicitly with treatment coding against the reference level. Column
labels follow the familiar `group[T.D]` / `group[T.D]:H` convention.
"""

import numpy as np
import pandas as pd
import statsmodels.api as sm

from . import config


def model_spec(
    predictors: list[str] = None,
    interactions: list[tuple[str, str]] = None,
    response: str = None,
    group: str = None,
) -> dict:
    """
    Build the structured model specification.

    Parameters:
        predictors: Numeric main effects. Defaults to config.DEFAULT_PCA_SCALES
        interactions: (term, term) pairs entering as products.
            Defaults to config.DEFAULT_INTERACTIONS
        response: Dependent variable. Defaults to config.RESPONSE_COL
        group: Categorical predictor. Defaults to config.GROUP_COL

    Returns:
        Dictionary with response, group, predictors, interactions

    Raises:
        ValueError: if an interaction names a term that is not a main effect
    """
    spec = {
        'response': response or config.RESPONSE_COL,
        'group': group or config.GROUP_COL,
        'predictors': list(predictors if predictors is not None else config.DEFAULT_PCA_SCALES),
        'interactions': [tuple(pair) for pair in
                         (interactions if interactions is not None else config.DEFAULT_INTERACTIONS)],
    }

    main_effects = {spec['group'], *spec['predictors']}
    for pair in spec['interactions']:
        unknown = [term for term in pair if term not in main_effects]
        if len(pair) != 2 or unknown:
            raise ValueError(f"interaction {pair} must pair two main effects, unknown: {unknown}")

    return spec


def describe_spec(spec: dict) -> str:
    """Readable one-line model description, e.g. value ~ group + H + group:H"""
    terms = [spec['group']] + spec['predictors'] + [f"{a}:{b}" for a, b in spec['interactions']]
    return f"{spec['response']} ~ " + " + ".join(terms)


def build_design_matrix(frame: pd.DataFrame, spec: dict, levels: list[str]) -> pd.DataFrame:
    """
    Treatment-coded design matrix with explicit product columns.

    Parameters:
        frame: Long-format data
        spec: Output of model_spec()
        levels: Group levels, reference first

    Returns:
        DataFrame with Intercept, group dummies, predictors and products
    """
    group_col = spec['group']
    X = pd.DataFrame(index=frame.index)
    X['Intercept'] = 1.0

    dummy_cols = []
    for level in levels[1:]:
        name = f"{group_col}[T.{level}]"
        X[name] = (frame[group_col].astype(object) == level).astype(float)
        dummy_cols.append(name)

    for predictor in spec['predictors']:
        X[predictor] = frame[predictor].astype(float)

    for left, right in spec['interactions']:
        left_cols = dummy_cols if left == group_col else [left]
        right_cols = dummy_cols if right == group_col else [right]
        for lcol in left_cols:
            for rcol in right_cols:
                X[f"{lcol}:{rcol}"] = X[lcol] * X[rcol]

    return X


def group_levels(frame: pd.DataFrame, group_col: str, reference_group: str = None) -> list[str]:
    """
    Levels of the group column with the reference first.

    Uses the categorical order when the column is categorical (as produced
    by reshape.to_long_format), otherwise sorted unique values.
    """
    column = frame[group_col]
    if isinstance(column.dtype, pd.CategoricalDtype):
        levels = list(column.cat.categories)
    else:
        levels = sorted(column.dropna().unique())

    if reference_group is not None:
        if reference_group not in levels:
            raise ValueError(f"reference_group {reference_group!r} is not a level of {group_col}: {levels}")
        levels = [reference_group] + [level for level in levels if level != reference_group]

    observed = set(column.dropna().astype(object))
    empty = [level for level in levels if level not in observed]
    if empty:
        raise ValueError(f"group levels {empty} have no observations")

    return levels


def fit_interaction_model(
    long_df: pd.DataFrame,
    spec: dict = None,
    reference_group: str = None
) -> dict:
    """
    Fit the interaction model by ordinary least squares.

    Rows with a missing response or predictor are dropped.

    Parameters:
        long_df: Output of reshape.to_long_format()
        spec: Output of model_spec(). Defaults to model_spec()
        reference_group: Override the baseline level of the group column

    Returns:
        Dictionary with model (statsmodels results), spec, levels, data,
        design_columns, r_squared, adj_r_squared, n_obs
    """
    if spec is None:
        spec = model_spec()

    needed = [spec['response'], spec['group']] + spec['predictors']
    missing = [col for col in needed if col not in long_df.columns]
    if missing:
        raise ValueError(f"columns required by the model are missing: {missing}")

    frame = long_df[needed].dropna()
    if frame.empty:
        raise ValueError("no complete rows to fit the interaction model")

    levels = group_levels(frame, spec['group'], reference_group)
    X = build_design_matrix(frame, spec, levels)
    y = frame[spec['response']].astype(float)

    model = sm.OLS(y, X).fit()

    print("\n" + "=" * 60)
    print(f"REGRESSION: {describe_spec(spec)}")
    print("=" * 60)
    print(f"Reference group: {levels[0]}")
    print(model.summary())

    return {
        'model': model,
        'spec': spec,
        'levels': levels,
        'data': frame,
        'design_columns': list(X.columns),
        'r_squared': model.rsquared,
        'adj_r_squared': model.rsquared_adj,
        'n_obs': int(model.nobs),
    }


def _sig_marker(p_value: float) -> str:
    if p_value < 0.001:
        return "***"
    elif p_value < 0.01:
        return "**"
    elif p_value < 0.05:
        return "*"
    return ""


def coefficient_table(fit: dict) -> pd.DataFrame:
    """
    Full coefficient table.

    Returns:
        DataFrame with term, estimate, std_error, t_value, p_value,
        ci_lower, ci_upper, sig_marker
    """
    model = fit['model']
    conf_int = model.conf_int(alpha=config.SIGNIFICANCE_LEVEL)
    table = pd.DataFrame({
        'term': model.params.index,
        'estimate': model.params.values,
        'std_error': model.bse.values,
        't_value': model.tvalues.values,
        'p_value': model.pvalues.values,
        'ci_lower': conf_int[0].values,
        'ci_upper': conf_int[1].values,
    })
    table['sig_marker'] = table['p_value'].map(_sig_marker)
    return table


def interaction_table(coefficients: pd.DataFrame) -> pd.DataFrame:
    """Rows of the coefficient table whose term is a two-way product."""
    is_product = coefficients['term'].str.count(':') == 1
    return coefficients[is_product].reset_index(drop=True)


def predict_grid(fit: dict, focal: str, n_points: int = None) -> pd.DataFrame:
    """
    Predicted values with 95% confidence bands along one predictor.

    The focal predictor spans its observed range; the other numeric
    predictors are held at their sample means. One curve per group level.

    Parameters:
        fit: Output of fit_interaction_model()
        focal: Numeric predictor on the x axis
        n_points: Grid resolution. Defaults to config.PLOT_GRID_POINTS

    Returns:
        DataFrame with group, focal, mean, ci_lower, ci_upper
    """
    if n_points is None:
        n_points = config.PLOT_GRID_POINTS

    spec = fit['spec']
    if focal not in spec['predictors']:
        raise ValueError(f"focal predictor {focal!r} is not in the model: {spec['predictors']}")

    frame = fit['data']
    grid = np.linspace(frame[focal].min(), frame[focal].max(), n_points)
    held = {p: frame[p].mean() for p in spec['predictors'] if p != focal}

    curves = []
    for level in fit['levels']:
        new = pd.DataFrame({focal: grid, spec['group']: level, **held})
        X = build_design_matrix(new, spec, fit['levels'])[fit['design_columns']]
        pred = fit['model'].get_prediction(X.values).summary_frame(alpha=config.SIGNIFICANCE_LEVEL)
        curves.append(pd.DataFrame({
            spec['group']: level,
            focal: grid,
            'mean': pred['mean'].values,
            'ci_lower': pred['mean_ci_lower'].values,
            'ci_upper': pred['mean_ci_upper'].values,
        }))

    return pd.concat(curves, ignore_index=True)


def print_interaction_results(interactions: pd.DataFrame) -> None:
    """Print the interaction coefficients in readable format."""
    print("\n" + "-" * 60)
    print("INTERACTION TERMS")
    print("-" * 60)

    for _, row in interactions.iterrows():
        print(f"\n{row['term']}:")
        print(f"  Estimate: {row['estimate']:.4f} (SE {row['std_error']:.4f})")
        print(f"  t = {row['t_value']:.2f}, p = {row['p_value']:.2e} {row['sig_marker']}")
