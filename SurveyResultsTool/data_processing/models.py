"""
Core data models and structures for survey results analysis.

This module defines the fundamental data structures used throughout the
survey results tool, including question and response records, question type
handling, and result containers for frequency, cross-tabulation and
correlation analyses.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Union, Tuple, Any
from enum import Enum
import pandas as pd


UNCATEGORIZED = "Uncategorized"

# Canonical question type for each accepted spelling (lower-cased, no spaces)
QUESTION_TYPE_ALIASES = {
    'single_choice': 'single_choice',
    'single': 'single_choice',
    'singlechoice': 'single_choice',
    'multiple_choice': 'multiple_choice',
    'multiple': 'multiple_choice',
    'multiplechoice': 'multiple_choice',
    'text': 'text',
    'scale': 'scale_5',
}

_SCALE_PATTERN = re.compile(r'^scale_?(\d+)$')


class QuestionKind(Enum):
    """Enumeration of question answer kinds."""
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    SCALE = "scale"
    TEXT = "text"


class CorrelationStrength(Enum):
    """Enumeration of correlation strength labels."""
    VERY_STRONG = "very strong"
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    VERY_WEAK = "very weak"


class CorrelationSign(Enum):
    """Enumeration of correlation directions."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONE = "none"


def canonical_question_type(question_type: Optional[str]) -> Optional[str]:
    """
    Canonicalize a declared question type.

    Accepts the spellings used by uploaded question sets (``single``,
    ``scale7``, ``Multiple Choice`` ...). Unknown types are returned
    unchanged so that they can still be analysed as free text.
    """
    if question_type is None:
        return None

    compact = re.sub(r'\s+', '', str(question_type).lower())
    if compact in QUESTION_TYPE_ALIASES:
        return QUESTION_TYPE_ALIASES[compact]

    match = _SCALE_PATTERN.match(compact)
    if match and int(match.group(1)) > 0:
        return f"scale_{int(match.group(1))}"

    return str(question_type)


def question_kind(question_type: Optional[str]) -> QuestionKind:
    """Map a (canonical or raw) question type onto its answer kind."""
    canonical = canonical_question_type(question_type)
    if canonical == 'single_choice':
        return QuestionKind.SINGLE_CHOICE
    if canonical == 'multiple_choice':
        return QuestionKind.MULTIPLE_CHOICE
    if scale_size(canonical):
        return QuestionKind.SCALE
    return QuestionKind.TEXT


def scale_size(question_type: Optional[str]) -> Optional[int]:
    """Return N for a ``scale_N`` question type, otherwise None."""
    canonical = canonical_question_type(question_type)
    if not canonical:
        return None
    match = _SCALE_PATTERN.match(canonical)
    if match and int(match.group(1)) > 0:
        return int(match.group(1))
    return None


@dataclass
class Question:
    """A prompt within a question set."""
    id: Any
    type: str
    category: Optional[str] = None
    options: List[str] = field(default_factory=list)
    text: str = ""
    survey_set_id: Optional[Any] = None

    def __post_init__(self):
        self.type = canonical_question_type(self.type) or 'text'
        if not self.category:
            self.category = UNCATEGORIZED
        self.options = [str(option) for option in (self.options or [])]

    @property
    def kind(self) -> QuestionKind:
        """Answer kind derived from the declared type."""
        return question_kind(self.type)

    @property
    def scale_size(self) -> Optional[int]:
        """Number of points for scale questions."""
        return scale_size(self.type)

    def is_choice(self) -> bool:
        """Check if question is single- or multiple-choice."""
        return self.kind in [QuestionKind.SINGLE_CHOICE, QuestionKind.MULTIPLE_CHOICE]

    def is_scale(self) -> bool:
        """Check if question is a numeric scale."""
        return self.kind == QuestionKind.SCALE

    def declared_values(self) -> List[str]:
        """Declared bucket labels: options for choices, "1".."N" for scales."""
        if self.is_scale():
            return [str(i) for i in range(1, self.scale_size + 1)]
        if self.is_choice():
            return list(self.options)
        return []


@dataclass
class Response:
    """One respondent's answer to one question."""
    question_id: Any
    respondent_id: Any
    answer: Optional[str] = None
    submitted_at: Optional[datetime] = None


@dataclass
class SurveySet:
    """A named collection of questions administered together."""
    id: Any
    name: str = ""
    type: str = ""

    def is_demographic(self, keyword: str = "demographic") -> bool:
        """Check if this set holds demographic questions."""
        return keyword.lower() in (self.type or "").lower()


@dataclass
class ValueCount:
    """Count of responses for one distinct answer value."""
    value: str
    count: int


@dataclass
class FrequencyResult:
    """Container for per-question frequency analysis results."""
    question_id: Any
    question_type: str
    count: int = 0
    raw_count: int = 0
    distinct_value_counts: List[ValueCount] = field(default_factory=list)
    average: Optional[float] = None
    has_data: bool = False
    text_answers: List[str] = field(default_factory=list)
    unique_respondents: int = 0

    def get_bucket(self, value: str) -> Optional[ValueCount]:
        """Return the bucket for a value, if present."""
        for bucket in self.distinct_value_counts:
            if bucket.value == value:
                return bucket
        return None

    def to_frame(self) -> pd.DataFrame:
        """Frequency table with counts and percentages of ``count``."""
        frame = pd.DataFrame({
            'Value': [b.value for b in self.distinct_value_counts],
            'Frequency': [b.count for b in self.distinct_value_counts]
        })
        if self.count > 0:
            frame['Percentage'] = frame['Frequency'] / self.count * 100
        else:
            frame['Percentage'] = 0.0
        return frame


@dataclass
class CrossTabResult:
    """Container for two-dimensional contingency analysis results."""
    dimension1: Any
    dimension2: Any
    matrix: Dict[str, Dict[str, int]] = field(default_factory=dict)
    row_values: List[str] = field(default_factory=list)
    column_values: List[str] = field(default_factory=list)
    marginal1: List[ValueCount] = field(default_factory=list)
    marginal2: List[ValueCount] = field(default_factory=list)
    pair_count: int = 0
    insufficient_data: bool = False
    message: str = ""
    association_measures: Dict[str, float] = field(default_factory=dict)

    @property
    def observed_frequencies(self) -> pd.DataFrame:
        """Contingency table as a DataFrame (rows: dimension1 values)."""
        if not self.matrix:
            return pd.DataFrame()
        return pd.DataFrame(
            [[self.matrix[row].get(col, 0) for col in self.column_values]
             for row in self.row_values],
            index=pd.Index(self.row_values, name=str(self.dimension1)),
            columns=pd.Index(self.column_values, name=str(self.dimension2))
        )

    def total(self) -> int:
        """Sum of all matrix cells."""
        return sum(sum(row.values()) for row in self.matrix.values())


@dataclass
class CorrelationResult:
    """Container for correlation analysis results."""
    coefficient: Optional[float]
    strength: Optional[CorrelationStrength]
    sign: Optional[CorrelationSign]
    pair_count: int
    p_value: Optional[float] = None

    @property
    def insufficient_data(self) -> bool:
        """True when too few pairs were available for a coefficient."""
        return self.coefficient is None

    def is_significant(self, alpha: float = 0.05) -> bool:
        """Check if correlation is statistically significant."""
        return self.p_value is not None and self.p_value < alpha


@dataclass
class ScatterPoint:
    """Aggregated display point for a correlation view."""
    x: float
    y: float
    x_label: str
    y_label: str
    count: int = 1


@dataclass
class QuestionCorrelation:
    """Correlation between two questions, with its display data."""
    question1: Any
    question2: Any
    correlation: CorrelationResult
    points: List[ScatterPoint] = field(default_factory=list)
    contingency: Optional[CrossTabResult] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class CategorySummary:
    """Aggregate scale statistics for one question category."""
    category: str
    question_count: int
    count: int = 0
    average: float = 0.0
    has_data: bool = False
    question_ids: List[Any] = field(default_factory=list)


@dataclass
class OptionBreakdown:
    """Scale averages among respondents choosing one demographic option."""
    option: str
    respondent_count: int
    scale_averages: Dict[Any, Dict[str, Union[float, int]]] = field(default_factory=dict)


# Type aliases for convenience
NormalizedValue = Union[float, str, List[str], None]
AnalysisResults = Dict[str, Any]
NumericPair = Tuple[float, float]
