"""
Tests for the Interaction Regression
====================================
"""

import numpy as np
import pandas as pd
import pytest

from scale_core import regression


@pytest.fixture
def fit(long_df):
    return regression.fit_interaction_model(long_df)


class TestModelSpec:
    """Tests for the structured model specification."""

    def test_defaults(self):
        spec = regression.model_spec()
        assert spec['response'] == 'value'
        assert spec['group'] == 'group'
        assert spec['predictors'] == ['H', 'J', 'K']
        assert spec['interactions'] == [('group', 'H'), ('group', 'J'), ('group', 'K')]

    def test_unknown_interaction_term(self):
        with pytest.raises(ValueError, match='Q'):
            regression.model_spec(interactions=[('group', 'Q')])

    def test_describe(self):
        spec = regression.model_spec(predictors=['H'], interactions=[('group', 'H')])
        assert regression.describe_spec(spec) == 'value ~ group + H + group:H'


class TestDesignMatrix:
    """Tests for explicit treatment coding."""

    def test_columns(self, long_df):
        X = regression.build_design_matrix(long_df, regression.model_spec(), ['C', 'D', 'E', 'G'])

        assert list(X.columns[:7]) == [
            'Intercept', 'group[T.D]', 'group[T.E]', 'group[T.G]', 'H', 'J', 'K',
        ]
        assert X.shape[1] == 1 + 3 + 3 + 9
        assert 'group[T.C]' not in X.columns

    def test_product_columns(self, long_df):
        X = regression.build_design_matrix(long_df, regression.model_spec(), ['C', 'D', 'E', 'G'])
        expected = (long_df['group'] == 'D').astype(float) * long_df['H']
        np.testing.assert_allclose(X['group[T.D]:H'], expected)


class TestFitInteractionModel:
    """Tests for the fitted model and its tables."""

    def test_reference_absent_from_coefficients(self, fit):
        terms = regression.coefficient_table(fit)['term']
        assert not terms.str.contains(r'\[T\.C\]').any()
        assert fit['levels'][0] == 'C'

    def test_coefficient_table_columns(self, fit):
        coefs = regression.coefficient_table(fit)
        assert list(coefs.columns) == [
            'term', 'estimate', 'std_error', 't_value', 'p_value',
            'ci_lower', 'ci_upper', 'sig_marker',
        ]
        assert len(coefs) == 16

    def test_interaction_table(self, fit):
        coefs = regression.coefficient_table(fit)
        interactions = regression.interaction_table(coefs)

        assert len(interactions) == (4 - 1) * 3
        assert interactions['term'].str.contains(':').all()
        assert 'Intercept' not in set(interactions['term'])
        assert not set(interactions['term']) & {'H', 'J', 'K', 'group[T.D]'}

    def test_reparameterization_invariance(self, long_df, fit):
        refit = regression.fit_interaction_model(long_df, reference_group='D')

        assert refit['levels'][0] == 'D'
        assert 'group[T.C]' in refit['model'].params.index
        assert 'group[T.D]' not in refit['model'].params.index
        assert refit['model'].params['Intercept'] != pytest.approx(fit['model'].params['Intercept'])
        np.testing.assert_allclose(refit['model'].fittedvalues, fit['model'].fittedvalues)

    def test_drops_incomplete_rows(self, long_df):
        df = long_df.copy()
        df.loc[:4, 'value'] = np.nan
        fit = regression.fit_interaction_model(df)
        assert fit['n_obs'] == len(df) - 5

    def test_unknown_reference(self, long_df):
        with pytest.raises(ValueError, match="'Z'"):
            regression.fit_interaction_model(long_df, reference_group='Z')

    def test_missing_predictor_column(self, long_df):
        with pytest.raises(ValueError, match='K'):
            regression.fit_interaction_model(long_df.drop(columns=['K']))


class TestPredictGrid:
    """Tests for the plotted prediction curves."""

    def test_shape(self, fit):
        grid = regression.predict_grid(fit, 'H', n_points=25)

        assert len(grid) == 4 * 25
        assert set(grid['group']) == {'C', 'D', 'E', 'G'}
        assert (grid['ci_lower'] <= grid['mean']).all()
        assert (grid['mean'] <= grid['ci_upper']).all()

    def test_matches_model(self, fit):
        grid = regression.predict_grid(fit, 'J', n_points=5)
        params = fit['model'].params
        held = fit['data'][['H', 'K']].mean()

        row = grid[grid['group'] == 'C'].iloc[0]
        expected = (params['Intercept'] + params['J'] * row['J']
                    + params['H'] * held['H'] + params['K'] * held['K'])
        assert row['mean'] == pytest.approx(expected)

    def test_unknown_focal(self, fit):
        with pytest.raises(ValueError):
            regression.predict_grid(fit, 'Q')
