"""Data processing module for survey results."""

from .answer_reader import AnswerStoreReader
from .response_normalizer import ResponseNormalizer, normalize
from .respondent_join import join_on_respondent
from .models import (
    QuestionKind,
    CorrelationStrength,
    CorrelationSign,
    Question,
    Response,
    SurveySet,
    ValueCount,
    FrequencyResult,
    CrossTabResult,
    CorrelationResult,
    ScatterPoint,
    QuestionCorrelation,
    CategorySummary,
    OptionBreakdown
)

__all__ = [
    'AnswerStoreReader',
    'ResponseNormalizer',
    'normalize',
    'join_on_respondent',
    'QuestionKind',
    'CorrelationStrength',
    'CorrelationSign',
    'Question',
    'Response',
    'SurveySet',
    'ValueCount',
    'FrequencyResult',
    'CrossTabResult',
    'CorrelationResult',
    'ScatterPoint',
    'QuestionCorrelation',
    'CategorySummary',
    'OptionBreakdown'
]
