"""Chart data preparation for survey results."""

from .chart_data import ChartDataAdapter

__all__ = [
    'ChartDataAdapter'
]
