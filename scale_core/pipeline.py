"""
Scale Analysis Pipeline
=======================

Runs the full scale validation and interaction analysis on one dataset:

1. Load data
2. Sampling adequacy (KMO, Bartlett) per scale
3. Reliability (Cronbach's alpha) per scale
4. Confirmatory factor analysis, CR and AVE
5. First principal component scores for the predictor scales
6. Long-format reshape of the outcome items
7. OLS with group x component interactions, interaction plots

Each stage returns new objects; the loaded table is never modified in place.
"""

from pathlib import Path

import pandas as pd

from . import (
    cfa,
    components,
    config,
    data,
    factorability,
    output,
    regression,
    reliability,
    reshape,
    viz,
)

# =============================================================================
# PARAMETERS
# =============================================================================
DEFAULTS = {
    'data_file': config.DEFAULT_DATA_FILE,
    'scales': config.DEFAULT_SCALES,
    'measurement_model': config.DEFAULT_MEASUREMENT_MODEL,
    'reorient_items': True,
    'pca_scales': config.DEFAULT_PCA_SCALES,
    'item_pattern': config.DEFAULT_ITEM_PATTERN,
    'allowed_groups': config.DEFAULT_ALLOWED_GROUPS,
    'reference_group': config.DEFAULT_REFERENCE_GROUP,
    'interactions': config.DEFAULT_INTERACTIONS,
    'plot_points': True,
    'plot_figsize': config.DEFAULT_FIGSIZE,
    'plot_dpi': config.DEFAULT_DPI,
    'plot_filename': config.PLOT_FILENAME_TEMPLATE,
    'output_dir': config.DEFAULT_OUTPUT_BASE,
    'save_tables': True,
}


def _banner(title: str) -> None:
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def run_analysis(params: dict = None) -> dict:
    """
    Run the scale analysis pipeline.

    Parameters:
        params: Dictionary overriding DEFAULTS

    Returns:
        Dictionary with all intermediate tables, results and written files

    Raises:
        FileNotFoundError, ValueError: when the data file cannot be loaded,
            or the reshape/regression configuration does not fit the data
    """
    params = {**DEFAULTS, **(params or {})}

    _banner("SCALE VALIDATION AND INTERACTION ANALYSIS")

    # Step 1: Load data (fatal on failure, before any output is created)
    _banner("STEP 1: LOADING DATA")
    df = data.load_csv(params['data_file'])
    data.describe_scales(df, params['scales'])

    output_dir = output.get_output_dir(params['output_dir'])
    written = []

    # Step 2: Sampling adequacy
    _banner("STEP 2: SAMPLING ADEQUACY")
    adequacy = factorability.evaluate_scales(df, params['scales'])

    # Step 3: Reliability
    _banner("STEP 3: RELIABILITY")
    alphas = reliability.evaluate_scales(df, params['scales'], reorient=params['reorient_items'])

    # Step 4: Confirmatory factor analysis
    _banner("STEP 4: CONFIRMATORY FACTOR ANALYSIS")
    cfa_result = cfa.fit_cfa(df, params['measurement_model'])
    cfa_reliability = cfa.reliability_table(cfa_result, params['measurement_model'])
    cfa.print_cfa_results(cfa_result, cfa_reliability)

    # Step 5: Component scores
    _banner("STEP 5: COMPONENT SCORES")
    scored_df, pca_results = components.add_component_scores(df, params['pca_scales'])

    # Step 6: Long format
    _banner("STEP 6: LONG FORMAT")
    long_df = reshape.to_long_format(
        scored_df,
        item_pattern=params['item_pattern'],
        allowed_groups=params['allowed_groups'],
        reference_group=params['reference_group'],
        carry_columns=params['pca_scales'],
    )

    # Step 7: Interaction regression
    _banner("STEP 7: INTERACTION REGRESSION")
    spec = regression.model_spec(
        predictors=params['pca_scales'],
        interactions=params['interactions'],
    )
    fit = regression.fit_interaction_model(long_df, spec)
    coefficients = regression.coefficient_table(fit)
    interactions = regression.interaction_table(coefficients)
    regression.print_interaction_results(interactions)

    viz.setup_style()
    for scale in params['pca_scales']:
        fig = viz.plot_interaction(fit, scale, plot_points=params['plot_points'],
                                   figsize=params['plot_figsize'])
        filename = params['plot_filename'].format(scale=scale)
        written.append(output.save_figure(fig, output_dir, filename, dpi=params['plot_dpi']))

    results = {
        'df': scored_df,
        'factorability': adequacy,
        'reliability': alphas,
        'cfa': cfa_result,
        'cfa_reliability': cfa_reliability,
        'components': pca_results,
        'long_df': long_df,
        'regression': fit,
        'coefficients': coefficients,
        'interactions': interactions,
        'output_dir': output_dir,
    }

    if params['save_tables']:
        written.extend(save_tables(results, output_dir))
        written.append(output.save_report(generate_report(results, params), output_dir))

    results['files'] = written

    _banner("ANALYSIS COMPLETE")
    output.print_summary(written)

    return results


def save_tables(results: dict, output_dir: Path) -> list[Path]:
    """Write the per-stage result tables as CSV files."""
    written = [
        output.save_csv(factorability.summary_table(results['factorability']),
                        output_dir, 'factorability.csv'),
        output.save_csv(reliability.summary_table(results['reliability']),
                        output_dir, 'reliability.csv'),
        output.save_csv(results['cfa_reliability'], output_dir, 'cfa_reliability.csv'),
    ]

    if results['cfa']['converged']:
        written.append(output.save_csv(results['cfa']['standardized_loadings'],
                                       output_dir, 'cfa_loadings.csv'))
        written.append(output.save_csv(pd.DataFrame([results['cfa']['fit_indices']]),
                                       output_dir, 'cfa_fit.csv'))

    score_cols = list(results['components'].keys())
    written.append(output.save_csv(results['df'][score_cols], output_dir,
                                   'component_scores.csv', index=True))
    written.append(output.save_csv(results['coefficients'], output_dir, 'coefficients.csv'))
    written.append(output.save_csv(results['interactions'], output_dir, 'interaction_terms.csv'))
    return written


def generate_report(results: dict, params: dict) -> str:
    """Generate text report summarizing analysis."""
    lines = [
        "=" * 70,
        "SCALE VALIDATION AND INTERACTION ANALYSIS REPORT",
        "=" * 70,
        "",
        "CONFIGURATION",
        "-" * 50,
        f"Data file: {params['data_file']}",
        f"Observations: {len(results['df']):,}",
        f"Scales: {', '.join(params['scales'])}",
        f"Component scales: {', '.join(params['pca_scales'])}",
        f"Groups: {', '.join(params['allowed_groups'])} (reference: {params['reference_group']})",
        "",
        "SAMPLING ADEQUACY",
        "-" * 50,
    ]

    for scale, result in results['factorability'].items():
        if result.ok:
            lines.append(
                f"{scale}: KMO={result.value['kmo_overall']:.3f} ({result.value['kmo_label']}), "
                f"Bartlett p={result.value['bartlett_p_value']:.2e}"
            )
        else:
            lines.append(f"{scale}: {result.reason}")

    lines.extend(["", "RELIABILITY (Cronbach's alpha)", "-" * 50])
    for scale, result in results['reliability'].items():
        if result.ok:
            reversed_note = ""
            if result.value['reversed_items']:
                reversed_note = f", reversed: {', '.join(result.value['reversed_items'])}"
            lines.append(f"{scale}: alpha={result.value['alpha']:.3f} "
                         f"({result.value['alpha_label']}{reversed_note})")
        else:
            lines.append(f"{scale}: {result.reason}")

    lines.extend(["", "CONFIRMATORY FACTOR ANALYSIS", "-" * 50])
    cfa_result = results['cfa']
    if cfa_result['converged']:
        fit = cfa_result['fit_indices']
        lines.append(f"Chi-square={fit['chi_square']:.2f}, df={fit['df']}, p={fit['p_value']:.3g}")
        lines.append(f"CFI={fit['CFI']:.3f}, TLI={fit['TLI']:.3f}, "
                     f"RMSEA={fit['RMSEA']:.3f}, SRMR={fit['SRMR']:.3f} ({cfa_result['fit_label']} fit)")
        lines.append("")
        lines.append(results['cfa_reliability'].round(3).to_string(index=False))
    else:
        lines.append(cfa_result['reason'])

    lines.extend(["", "COMPONENT SCORES", "-" * 50])
    for scale, result in results['components'].items():
        if result.ok:
            lines.append(f"{scale}: eigenvalue={result.value['eigenvalue']:.3f}, "
                         f"{result.value['explained_variance_ratio'] * 100:.1f}% variance")
        else:
            lines.append(f"{scale}: {result.reason}")

    fit = results['regression']
    lines.extend([
        "",
        "INTERACTION REGRESSION",
        "-" * 50,
        regression.describe_spec(fit['spec']),
        f"n={fit['n_obs']:,}, R^2={fit['r_squared']:.3f}, adj. R^2={fit['adj_r_squared']:.3f}",
        "",
        results['interactions'].round(4).to_string(index=False),
        "",
        "=" * 70,
    ])

    return "\n".join(lines)
