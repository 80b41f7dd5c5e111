"""Categorical data analysis module for survey results."""

from .cross_tabulation import CrossTabulation
from .association_measures import AssociationMeasures

__all__ = [
    'CrossTabulation',
    'AssociationMeasures'
]
