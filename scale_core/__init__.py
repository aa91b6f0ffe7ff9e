"""
Scale Core Library
==================

Psychometric scale validation and interaction regression on one
wide-format survey dataset.

Modules:
    config         - Global configuration parameters
    data           - Data loading and item-column parsing
    results        - Per-scale success/failure results
    factorability  - KMO and Bartlett's test per scale
    reliability    - Cronbach's alpha and item reorientation
    cfa            - Confirmatory factor analysis, CR and AVE
    components     - First principal component scores
    reshape        - Wide to long format
    regression     - OLS with group x score interactions
    viz            - Interaction plots
    output         - Output saving
    pipeline       - End-to-end run
"""

from . import config
from . import results
from . import data
from . import factorability
from . import reliability
from . import cfa
from . import components
from . import reshape
from . import regression
from . import viz
from . import output
from . import pipeline

__version__ = '1.0.0'

__all__ = [
    'config',
    'results',
    'data',
    'factorability',
    'reliability',
    'cfa',
    'components',
    'reshape',
    'regression',
    'viz',
    'output',
    'pipeline',
]
