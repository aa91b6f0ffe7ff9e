#!/usr/bin/env python3
"""
Scale Analysis Script
=====================

Validates the survey scales and tests whether the H/J/K component scores
moderate responses across item groups.

Parameters:
    data_file        - Path to input CSV
    scales           - Scales checked for sampling adequacy and reliability
    measurement_model- Factor -> items mapping for the CFA
    pca_scales       - Scales summarized by their first principal component
    allowed_groups   - Item groups kept in the long-format regression
    reference_group  - Baseline group
    output_dir       - Where plots, tables and the report are written

Outputs:
    - interaction_plot_<SCALE>.png for each component scale
    - Factorability, reliability, CFA and coefficient tables (CSV)
    - Text report (TXT)
"""

import sys
from pathlib import Path

# Hybrid import: works both when pip-installed and when run directly
try:
    from scale_core import pipeline
except ImportError:
    sys.path.insert(0, str(Path(__file__).parent.parent))
    from scale_core import pipeline

import warnings
warnings.filterwarnings('ignore')


# =============================================================================
# PARAMETERS
# =============================================================================
PARAMS = {
    **pipeline.DEFAULTS,
}


# =============================================================================
# ENTRY POINT
# =============================================================================
if __name__ == '__main__':
    if len(sys.argv) > 1:
        PARAMS['data_file'] = sys.argv[1]
    if len(sys.argv) > 2:
        PARAMS['output_dir'] = sys.argv[2]

    try:
        pipeline.run_analysis(PARAMS)
    except (FileNotFoundError, ValueError) as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        sys.exit(1)
