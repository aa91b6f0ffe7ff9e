"""
Global Configuration for Scale Analysis Framework
==================================================

Central location for default parameters used across the pipeline.
Override these through the params dict passed to pipeline.run_analysis().
"""

# =============================================================================
# DATA CONFIGURATION
# =============================================================================
DEFAULT_DATA_FILE = 'Data/scale_responses.csv'

# Scales evaluated for sampling adequacy and reliability
DEFAULT_SCALES = ['C', 'D', 'E', 'G', 'H', 'J', 'K']

# Item columns are named <SCALE><INDEX>, e.g. C1, C2, H4
ITEM_COLUMN_PATTERN = r'^(?P<scale>[A-Za-z]+)(?P<index>\d+)$'

# =============================================================================
# MEASUREMENT MODEL (CFA)
# =============================================================================
DEFAULT_MEASUREMENT_MODEL = {
    'C': ['C1', 'C2', 'C3'],
    'D': ['D1', 'D2', 'D3'],
    'E': ['E1', 'E2', 'E3'],
    'G': ['G1', 'G2', 'G3'],
    'H': ['H1', 'H2', 'H3', 'H4'],
    'J': ['J1', 'J2', 'J3', 'J4'],
    'K': ['K1', 'K2', 'K3', 'K4'],
}

# =============================================================================
# COMPONENT SCORES
# =============================================================================
DEFAULT_PCA_SCALES = ['H', 'J', 'K']

# =============================================================================
# LONG FORMAT / REGRESSION
# =============================================================================
# Deliberately broader than the allow-list below
DEFAULT_ITEM_PATTERN = r'^[A-G]\d$'
DEFAULT_ALLOWED_GROUPS = ['C', 'D', 'E', 'G']
DEFAULT_REFERENCE_GROUP = 'C'

RESPONSE_COL = 'value'
GROUP_COL = 'group'

# (categorical, numeric) pairs entering the model as product terms
DEFAULT_INTERACTIONS = [
    ('group', 'H'),
    ('group', 'J'),
    ('group', 'K'),
]

SIGNIFICANCE_LEVEL = 0.05

# =============================================================================
# OUTPUT CONFIGURATION
# =============================================================================
DEFAULT_OUTPUT_BASE = '.'
DEFAULT_DPI = 300
DEFAULT_FIGSIZE = (8, 6)
PLOT_FILENAME_TEMPLATE = 'interaction_plot_{scale}.png'
PLOT_GRID_POINTS = 100
REPORT_FILENAME = 'scale_analysis_report.txt'

# =============================================================================
# INTERPRETATION LABELS
# =============================================================================
KMO_THRESHOLDS = {
    0.9: "Marvelous",
    0.8: "Meritorious",
    0.7: "Middling",
    0.6: "Mediocre",
    0.5: "Miserable",
    0.0: "Unacceptable",
}

ALPHA_THRESHOLDS = {
    0.9: "Excellent",
    0.8: "Good",
    0.7: "Acceptable",
    0.6: "Questionable",
    0.5: "Poor",
}

# Hu & Bentler style cut-offs
FIT_CUTOFFS = {
    'CFI': 0.95,
    'TLI': 0.95,
    'RMSEA': 0.06,
    'SRMR': 0.08,
}

CR_THRESHOLD = 0.7
AVE_THRESHOLD = 0.5


def get_kmo_label(kmo_value: float) -> str:
    """Return human-readable KMO interpretation."""
    for threshold, label in sorted(KMO_THRESHOLDS.items(), reverse=True):
        if kmo_value >= threshold:
            return label
    return "Unacceptable"


def get_alpha_label(alpha: float) -> str:
    """Return human-readable Cronbach's alpha interpretation."""
    for threshold, label in sorted(ALPHA_THRESHOLDS.items(), reverse=True):
        if alpha >= threshold:
            return label
    return "Unacceptable"


def get_fit_label(fit_indices: dict) -> str:
    """Summarize CFI/TLI/RMSEA/SRMR against the cut-offs as one word."""
    checks = [
        fit_indices.get('CFI') is not None and fit_indices['CFI'] >= FIT_CUTOFFS['CFI'],
        fit_indices.get('TLI') is not None and fit_indices['TLI'] >= FIT_CUTOFFS['TLI'],
        fit_indices.get('RMSEA') is not None and fit_indices['RMSEA'] <= FIT_CUTOFFS['RMSEA'],
        fit_indices.get('SRMR') is not None and fit_indices['SRMR'] <= FIT_CUTOFFS['SRMR'],
    ]
    n_good = sum(checks)
    if n_good == 4:
        return "excellent"
    elif n_good == 3:
        return "good"
    elif n_good == 2:
        return "adequate"
    return "poor"
