"""
Visualization Utilities Module
==============================

Minimal style setup and the interaction plot.
"""

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving plots

import matplotlib.pyplot as plt
import seaborn as sns

from . import config, regression


def setup_style() -> None:
    """
    Configure matplotlib and seaborn style settings.

    Sets:
    - Seaborn whitegrid style
    - Consistent font sizes
    """
    plt.style.use('seaborn-v0_8-whitegrid')
    plt.rcParams.update({
        'figure.figsize': config.DEFAULT_FIGSIZE,
        'font.size': 10,
        'axes.titlesize': 12,
        'axes.labelsize': 11,
        'legend.fontsize': 10,
    })


def get_palette(levels: list[str]) -> dict:
    """Map each group level to a consistent color."""
    colors = sns.color_palette('colorblind', n_colors=len(levels))
    return dict(zip(levels, colors))


def plot_interaction(
    fit: dict,
    focal: str,
    plot_points: bool = True,
    figsize: tuple = None,
    n_points: int = None
) -> plt.Figure:
    """
    Fitted lines with confidence bands per group along one predictor.

    Parameters:
        fit: Output of regression.fit_interaction_model()
        focal: Component score on the x axis
        plot_points: Overlay the raw observations
        figsize: Figure size in inches. Defaults to config.DEFAULT_FIGSIZE
        n_points: Grid resolution for the fitted lines

    Returns:
        Matplotlib figure (caller saves and closes it)
    """
    if figsize is None:
        figsize = config.DEFAULT_FIGSIZE

    spec = fit['spec']
    group_col = spec['group']
    response = spec['response']
    palette = get_palette(fit['levels'])
    curves = regression.predict_grid(fit, focal, n_points)

    fig, ax = plt.subplots(figsize=figsize)

    if plot_points:
        points = fit['data'].copy()
        points[group_col] = points[group_col].astype(str)
        sns.scatterplot(data=points, x=focal, y=response, hue=group_col,
                        palette={str(k): v for k, v in palette.items()},
                        alpha=0.25, s=12, legend=False, ax=ax)

    for level in fit['levels']:
        curve = curves[curves[group_col] == level]
        ax.plot(curve[focal], curve['mean'], color=palette[level], linewidth=2, label=str(level))
        ax.fill_between(curve[focal], curve['ci_lower'], curve['ci_upper'],
                        color=palette[level], alpha=0.2)

    ax.set_xlabel(focal)
    ax.set_ylabel(response)
    ax.legend(title=group_col)

    return fig
