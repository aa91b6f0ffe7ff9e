"""
Per-Scale Result Types
======================

Each per-scale stage returns a ScaleResult instead of raising, so that a
single scale's failure never aborts the run.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd


INSUFFICIENT_ITEMS = "insufficient items"


@dataclass(frozen=True)
class ScaleResult:
    """Outcome of one statistical routine on one scale."""

    scale: str
    ok: bool
    value: dict = field(default_factory=dict)
    reason: Optional[str] = None
    n_items: int = 0
    n_obs: int = 0

    @classmethod
    def success(cls, scale: str, value: dict, n_items: int, n_obs: int) -> 'ScaleResult':
        return cls(scale=scale, ok=True, value=value, n_items=n_items, n_obs=n_obs)

    @classmethod
    def failure(cls, scale: str, reason: str, n_items: int = 0, n_obs: int = 0) -> 'ScaleResult':
        return cls(scale=scale, ok=False, reason=reason, n_items=n_items, n_obs=n_obs)

    def get(self, key: str, default=np.nan):
        """Return a statistic, or `default` when the scale failed."""
        if not self.ok:
            return default
        return self.value.get(key, default)


def results_to_frame(results: dict[str, ScaleResult], keys: list[str]) -> pd.DataFrame:
    """
    Flatten a collection of ScaleResults to one row per scale.

    Parameters:
        results: Mapping of scale name to ScaleResult
        keys: Scalar statistics to pull out of each successful result

    Returns:
        DataFrame with scale, status, item/observation counts and `keys`
    """
    rows = []
    for scale, result in results.items():
        row = {
            'scale': scale,
            'status': 'ok' if result.ok else result.reason,
            'n_items': result.n_items,
            'n_obs': result.n_obs,
        }
        for key in keys:
            row[key] = result.get(key)
        rows.append(row)
    return pd.DataFrame(rows, columns=['scale', 'status', 'n_items', 'n_obs'] + keys)
