"""
Chart-ready data for survey analysis results.

This module reshapes aggregation results into the flat record lists that
charting front ends consume (bar, stacked bar, scatter and heatmap series).
It draws nothing itself and never reorders what the aggregators produced.
"""

import logging
from typing import Any, Dict, List, Set

from ..data_processing.models import (
    CategorySummary, CrossTabResult, FrequencyResult, QuestionCorrelation
)

_RECORD_KEYS = ('name', 'total')


class ChartDataAdapter:
    """
    Convert analysis results into chart series.

    Features:
    - Bar series for frequency distributions and cross-tab marginals
    - Stacked bar rows for contingency matrices
    - Scatter points with counts for correlation views
    - Heatmap cells for choice question correlations
    - Category average bars
    """

    def __init__(self):
        """Initialize ChartDataAdapter."""
        self.logger = logging.getLogger(__name__)

    def frequency_chart_data(self, result: FrequencyResult) -> List[Dict[str, Any]]:
        """Bar series ``[{"name", "value"}]`` in bucket order."""
        return [{'name': b.value, 'value': b.count} for b in result.distinct_value_counts]

    def marginal_chart_data(self, result: CrossTabResult, dimension: int = 1) -> List[Dict[str, Any]]:
        """
        Bar series for one marginal of a cross-tab.

        Parameters
        ----------
        result : CrossTabResult
            Cross-tab holding the marginals
        dimension : int, default 1
            1 for the row question, 2 for the column question
        """
        if dimension == 1:
            marginal = result.marginal1
        elif dimension == 2:
            marginal = result.marginal2
        else:
            raise ValueError(f"dimension must be 1 or 2, got {dimension}")

        return [{'name': b.value, 'value': b.count} for b in marginal]

    def crosstab_chart_data(self, result: CrossTabResult) -> List[Dict[str, Any]]:
        """
        Stacked bar rows, one per row value.

        Each record holds ``name`` (the row value), one key per column value
        with its count, and the row ``total``. A column value that clashes
        with ``name`` or ``total`` is stored as ``<value>_count``; see
        ``series_keys``.
        """
        column_keys = self.series_keys(result.column_values)

        rows = []
        for row_value in result.row_values:
            cells = result.matrix.get(row_value, {})
            record: Dict[str, Any] = {'name': row_value}
            for column_value in result.column_values:
                record[column_keys[column_value]] = cells.get(column_value, 0)
            record['total'] = sum(cells.values())
            rows.append(record)
        return rows

    @staticmethod
    def series_key(column_value: str, taken: Set[str]) -> str:
        """Record key for a column value, suffixed until it is free."""
        key = column_value
        while key in taken:
            key = f"{key}_count"
        return key

    def series_keys(self, column_values: List[str]) -> Dict[str, str]:
        """Map each column value to its stacked bar record key."""
        taken = set(_RECORD_KEYS) | set(column_values)
        keys = {}
        for column_value in column_values:
            if column_value in _RECORD_KEYS:
                keys[column_value] = self.series_key(column_value, taken)
                taken.add(keys[column_value])
            else:
                keys[column_value] = column_value
        return keys

    def scatter_chart_data(self, correlation: QuestionCorrelation) -> List[Dict[str, Any]]:
        """Scatter series ``[{"x", "y", "count"}]`` of aggregated points."""
        return [{'x': p.x, 'y': p.y, 'count': p.count} for p in correlation.points]

    def heatmap_chart_data(self, result: CrossTabResult) -> List[Dict[str, Any]]:
        """Heatmap cells ``[{"x", "y", "count"}]`` for non-empty matrix cells."""
        cells = []
        for row_value in result.row_values:
            for column_value, count in result.matrix.get(row_value, {}).items():
                if count:
                    cells.append({'x': row_value, 'y': column_value, 'count': count})
        return cells

    def category_chart_data(self, summaries: List[CategorySummary]) -> List[Dict[str, Any]]:
        """Bar series ``[{"name", "value"}]`` of category averages."""
        return [{'name': s.category, 'value': s.average} for s in summaries]
