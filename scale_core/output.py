"""
Output Saving Module
====================

Functions for creating the output directory and saving figures, tables
and the text report.
"""

import os
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from . import config


def get_output_dir(base: str = None) -> Path:
    """
    Create and return the output directory.

    Parameters:
        base: Output directory. Defaults to config.DEFAULT_OUTPUT_BASE

    Returns:
        Path to created output directory
    """
    if base is None:
        base = config.DEFAULT_OUTPUT_BASE

    output_dir = Path(base)
    os.makedirs(output_dir, exist_ok=True)

    print(f"Output directory: {output_dir}")
    return output_dir


def save_csv(
    df: pd.DataFrame,
    output_dir: Path,
    filename: str,
    index: bool = False
) -> Path:
    """
    Save DataFrame to CSV.

    Parameters:
        df: DataFrame to save
        output_dir: Output directory path
        filename: File name, e.g. 'coefficients.csv'
        index: Whether to include index in output

    Returns:
        Path to saved file
    """
    filepath = Path(output_dir) / filename
    df.to_csv(filepath, index=index)
    print(f"Saved: {filepath}")
    return filepath


def save_figure(
    fig: plt.Figure,
    output_dir: Path,
    filename: str,
    dpi: int = None
) -> Path:
    """
    Save matplotlib figure and close it.

    Parameters:
        fig: Matplotlib figure to save
        output_dir: Output directory path
        filename: File name, e.g. 'interaction_plot_H.png'
        dpi: Resolution. Defaults to config.DEFAULT_DPI

    Returns:
        Path to saved file
    """
    if dpi is None:
        dpi = config.DEFAULT_DPI

    filepath = Path(output_dir) / filename
    fig.savefig(filepath, dpi=dpi, facecolor='white')
    plt.close(fig)
    print(f"Saved: {filepath}")
    return filepath


def save_report(text: str, output_dir: Path, filename: str = None) -> Path:
    """
    Save text report.

    Parameters:
        text: Text content to save
        output_dir: Output directory path
        filename: File name. Defaults to config.REPORT_FILENAME

    Returns:
        Path to saved file
    """
    if filename is None:
        filename = config.REPORT_FILENAME

    filepath = Path(output_dir) / filename
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(text)
    print(f"Saved: {filepath}")
    return filepath


def print_summary(written: list[Path]) -> None:
    """Print summary of all output files."""
    if written:
        print("\nFiles generated:")
        for path in written:
            print(f"  - {path}")
    else:
        print("\nNo files generated")
