"""Correlation analysis module for survey results."""

from .correlation_engine import CorrelationEngine

__all__ = [
    'CorrelationEngine'
]
