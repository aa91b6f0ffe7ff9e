"""
Pytest Configuration and Shared Fixtures
=========================================

Provides synthetic survey data with known structure for testing.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from scale_core import components, reshape


SCALE_ITEMS = {'C': 3, 'D': 3, 'E': 3, 'G': 3, 'H': 4, 'J': 4, 'K': 4}


def make_survey_data(n_obs: int = 200, seed: int = 42) -> pd.DataFrame:
    """
    Likert (1-5) responses driven by one correlated latent trait per scale.
    """
    rng = np.random.default_rng(seed)
    scales = list(SCALE_ITEMS)
    n_scales = len(scales)

    latent_cov = np.full((n_scales, n_scales), 0.3)
    np.fill_diagonal(latent_cov, 1.0)
    latent = rng.multivariate_normal(np.zeros(n_scales), latent_cov, size=n_obs)

    columns = {'participant_id': np.arange(1, n_obs + 1)}
    for j, scale in enumerate(scales):
        for i in range(1, SCALE_ITEMS[scale] + 1):
            raw = 3 + 0.9 * latent[:, j] + rng.normal(0, 0.7, n_obs)
            columns[f'{scale}{i}'] = np.clip(np.round(raw), 1, 5)

    return pd.DataFrame(columns)


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def survey_df():
    """200 synthetic participants, scales C/D/E/G (3 items) and H/J/K (4 items)."""
    return make_survey_data()


@pytest.fixture
def survey_csv(tmp_path, survey_df):
    """Synthetic survey written to a CSV file."""
    path = tmp_path / 'survey.csv'
    survey_df.to_csv(path, index=False)
    return path


@pytest.fixture
def scored_df(survey_df):
    """Survey with H/J/K component score columns."""
    scored, _ = components.add_component_scores(survey_df, ['H', 'J', 'K'])
    return scored


@pytest.fixture
def long_df(scored_df):
    """Long-format table for groups C/D/E/G with reference C."""
    return reshape.to_long_format(
        scored_df,
        item_pattern=r'^[A-G]\d$',
        allowed_groups=['C', 'D', 'E', 'G'],
        reference_group='C',
        carry_columns=['H', 'J', 'K'],
    )


@pytest.fixture
def two_factor_data():
    """Continuous indicators of two correlated factors with strong loadings."""
    rng = np.random.default_rng(7)
    n_obs = 500
    latent = rng.multivariate_normal([0, 0], [[1.0, 0.4], [0.4, 1.0]], size=n_obs)

    columns = {}
    for j, factor in enumerate(['F', 'M']):
        for i in range(1, 4):
            columns[f'{factor}{i}'] = 0.8 * latent[:, j] + rng.normal(0, 0.6, n_obs)
    return pd.DataFrame(columns)
