"""
Tests for Internal Consistency
==============================
"""

import numpy as np
import pandas as pd
import pytest

from scale_core import reliability
from scale_core.results import INSUFFICIENT_ITEMS


class TestCronbachAlpha:
    """Tests for the alpha coefficient itself."""

    def test_identical_items_give_one(self):
        x = [1, 2, 3, 4, 5]
        items = pd.DataFrame({'A1': x, 'A2': x, 'A3': x})
        assert reliability.cronbach_alpha(items) == pytest.approx(1.0)

    def test_matches_formula(self, survey_df):
        items = survey_df[['C1', 'C2', 'C3']]
        k = 3
        expected = k / (k - 1) * (1 - items.var().sum() / items.sum(axis=1).var())
        assert reliability.cronbach_alpha(items) == pytest.approx(expected)

    def test_requires_two_items(self):
        with pytest.raises(ValueError):
            reliability.cronbach_alpha(pd.DataFrame({'A1': [1, 2, 3]}))

    @pytest.mark.parametrize('scale', ['C', 'D', 'E', 'G', 'H', 'J', 'K'])
    def test_synthetic_scales_in_unit_interval(self, survey_df, scale):
        result = reliability.evaluate_scale(survey_df, scale)
        assert result.ok
        assert 0 < result.value['alpha'] <= 1


class TestReorientation:
    """Tests for reverse-scoring miskeyed items."""

    @pytest.fixture
    def miskeyed(self, survey_df):
        items = survey_df[['H1', 'H2', 'H3', 'H4']].copy()
        items['H3'] = 6 - items['H3']
        return items

    def test_flips_negative_item(self, miskeyed):
        reoriented, flipped = reliability.reorient_items(miskeyed)

        assert flipped == ['H3']
        assert (reliability.item_rest_correlations(reoriented) >= 0).all()

    def test_raises_alpha(self, miskeyed):
        before = reliability.cronbach_alpha(miskeyed)
        reoriented, _ = reliability.reorient_items(miskeyed)
        assert reliability.cronbach_alpha(reoriented) > before

    def test_is_idempotent(self, miskeyed):
        once, _ = reliability.reorient_items(miskeyed)
        twice, flipped_again = reliability.reorient_items(once)

        assert flipped_again == []
        pd.testing.assert_frame_equal(once, twice)
        assert reliability.cronbach_alpha(once) == pytest.approx(reliability.cronbach_alpha(twice))

    def test_reverse_score_keeps_range(self):
        item = pd.Series([1, 2, 5, 4])
        reversed_item = reliability.reverse_score(item)
        assert list(reversed_item) == [5, 4, 1, 2]

    def test_evaluate_reports_reversed_items(self, survey_df):
        df = survey_df.copy()
        df['J2'] = 6 - df['J2']

        with_keys = reliability.evaluate_scale(df, 'J', reorient=True)
        without_keys = reliability.evaluate_scale(df, 'J', reorient=False)

        assert with_keys.value['reversed_items'] == ['J2']
        assert without_keys.value['reversed_items'] == []
        assert with_keys.value['alpha'] > without_keys.value['alpha']


class TestEvaluateScales:
    """Tests for the per-scale loop."""

    def test_insufficient_items_does_not_raise(self, survey_df):
        df = survey_df.copy()
        df['Z1'] = np.arange(len(df))

        results = reliability.evaluate_scales(df, ['Z', 'Q', 'C'])

        assert results['Z'].reason == INSUFFICIENT_ITEMS
        assert results['Q'].reason == INSUFFICIENT_ITEMS
        assert np.isnan(results['Z'].get('alpha'))
        assert results['C'].ok

    def test_listwise_deletion(self, survey_df):
        df = survey_df.copy()
        df.loc[:9, 'C2'] = np.nan

        result = reliability.evaluate_scale(df, 'C')
        assert result.n_obs == len(df) - 10

    def test_item_constant_among_complete_rows_not_counted(self, survey_df):
        df = survey_df.copy()
        df['C2'] = 3
        df.loc[:9, 'C2'] = 1
        df.loc[:9, 'C3'] = np.nan

        result = reliability.evaluate_scale(df, 'C')

        assert result.n_items == 2
        assert result.n_obs == len(df) - 10

    def test_item_statistics(self, survey_df):
        stats = reliability.item_statistics(survey_df[['H1', 'H2', 'H3', 'H4']])

        assert list(stats.index) == ['H1', 'H2', 'H3', 'H4']
        assert (stats['item_rest_r'] > 0).all()
        assert stats['alpha_if_deleted'].notna().all()

    def test_summary_table(self, survey_df):
        table = reliability.summary_table(reliability.evaluate_scales(survey_df, ['C', 'Z']))
        assert list(table.columns[:4]) == ['scale', 'status', 'n_items', 'n_obs']
        assert table.loc[0, 'reversed_items'] == ''
        assert np.isnan(table.loc[1, 'alpha'])
