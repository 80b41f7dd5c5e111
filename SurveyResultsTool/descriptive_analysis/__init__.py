"""Descriptive analysis module for survey results."""

from .frequency_analysis import FrequencyAnalyzer
from .category_analysis import CategoryAnalyzer
from .demographic_profiling import DemographicProfiler

__all__ = [
    'FrequencyAnalyzer',
    'CategoryAnalyzer',
    'DemographicProfiler'
]
