"""
Survey Results Tool

Analysis core for survey results: per-question frequency distributions,
category and demographic summaries, cross-tabulation and correlation
between questions, and chart-ready series for the results views.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .survey_results_tool import SurveyResultsTool
from .data_processing.models import (
    QuestionKind,
    CorrelationStrength,
    CorrelationSign,
    Question,
    Response,
    SurveySet,
    FrequencyResult,
    CrossTabResult,
    CorrelationResult,
    QuestionCorrelation,
    CategorySummary
)

__all__ = [
    'SurveyResultsTool',
    'QuestionKind',
    'CorrelationStrength',
    'CorrelationSign',
    'Question',
    'Response',
    'SurveySet',
    'FrequencyResult',
    'CrossTabResult',
    'CorrelationResult',
    'QuestionCorrelation',
    'CategorySummary'
]
