"""
Tests for Long Format Reshaping
===============================
"""

import pandas as pd
import pytest

from scale_core import reshape


class TestToLongFormat:
    """Tests for the wide-to-long pivot."""

    def test_row_count(self, long_df, scored_df):
        # 12 items in C/D/E/G
        assert len(long_df) == len(scored_df) * 12

    def test_groups_from_allow_list(self, long_df):
        assert set(long_df['group'].unique()) == {'C', 'D', 'E', 'G'}

    def test_reference_is_first_level(self, long_df):
        assert isinstance(long_df['group'].dtype, pd.CategoricalDtype)
        assert list(long_df['group'].cat.categories) == ['C', 'D', 'E', 'G']

    def test_reference_reorders_levels(self, scored_df):
        long_df = reshape.to_long_format(scored_df, allowed_groups=['C', 'D', 'E', 'G'],
                                         reference_group='E')
        assert list(long_df['group'].cat.categories) == ['E', 'C', 'D', 'G']

    def test_group_matches_item_prefix(self, long_df):
        assert (long_df['item'].str[0] == long_df['group'].astype(str)).all()

    def test_scores_broadcast_to_items(self, long_df, scored_df):
        row = long_df[long_df['participant'] == 5]
        assert len(row) == 12
        for scale in ['H', 'J', 'K']:
            assert (row[scale] == scored_df.loc[5, scale]).all()

    def test_values_preserved(self, long_df, scored_df):
        cell = long_df[(long_df['participant'] == 10) & (long_df['item'] == 'D2')]
        assert cell['value'].iloc[0] == scored_df.loc[10, 'D2']

    def test_subset_allow_list(self, scored_df):
        long_df = reshape.to_long_format(scored_df, allowed_groups=['D', 'G'], reference_group='G')
        assert len(long_df) == len(scored_df) * 6
        assert set(long_df['group'].unique()) == {'D', 'G'}


class TestReshapeDiagnostics:
    """Configuration errors name the offending value."""

    def test_absent_allowed_group(self, scored_df):
        with pytest.raises(ValueError, match="'F'"):
            reshape.to_long_format(scored_df, allowed_groups=['C', 'F'], reference_group='C')

    def test_reference_not_allowed(self, scored_df):
        with pytest.raises(ValueError, match="'Z'"):
            reshape.to_long_format(scored_df, reference_group='Z')

    def test_pattern_matches_nothing(self, scored_df):
        with pytest.raises(ValueError, match='matched no columns'):
            reshape.to_long_format(scored_df, item_pattern=r'^Q\d$')

    def test_missing_carry_column(self, survey_df):
        with pytest.raises(ValueError, match='carry_columns'):
            reshape.to_long_format(survey_df)
