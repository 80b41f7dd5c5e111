"""
Correlation analysis engine for survey questions.

This module computes Pearson correlations between paired numeric answers.
Scale answers are used as-is and single-choice answers by the position of
the chosen option, so ordered choice lists (e.g. frequency or agreement
wordings) can be correlated with scales. Question-level correlations also
carry aggregated scatter points and, for choice questions, the contingency
table that a heatmap view would display instead.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import pandas as pd
import numpy as np
from scipy import stats
import itertools

from ..categorical_analysis.cross_tabulation import CrossTabulation
from ..data_processing.models import (
    CorrelationResult, CorrelationSign, CorrelationStrength, NormalizedValue,
    NumericPair, Question, QuestionCorrelation, QuestionKind, Response, ScatterPoint
)
from ..data_processing.respondent_join import join_on_respondent
from ..data_processing.response_normalizer import ResponseNormalizer

PairLike = Union[Tuple[float, float], Sequence[float], Mapping[str, float]]


class CorrelationEngine:
    """
    Correlation analysis engine for survey responses.

    Features:
    - Pearson coefficient with a zero-variance fallback of 0
    - Strength and direction labels
    - Two-sided p-values when at least three varying pairs exist
    - Numeric interpretation of scale and single-choice answers
    - Question-level correlations with scatter points and contingency tables
    - All pairwise correlations over a question catalogue
    """

    def __init__(self,
                 normalizer: Optional[ResponseNormalizer] = None,
                 cross_tabulation: Optional[CrossTabulation] = None):
        """
        Initialize the CorrelationEngine.

        Parameters
        ----------
        normalizer : ResponseNormalizer, optional
            Normalizer used to interpret raw answers
        cross_tabulation : CrossTabulation, optional
            Cross-tabulator used for choice question contingency tables
        """
        self.normalizer = normalizer or ResponseNormalizer()
        self.cross_tabulation = cross_tabulation or CrossTabulation(normalizer=self.normalizer)
        self.logger = logging.getLogger(__name__)

    def correlate(self, pairs: Sequence[PairLike]) -> CorrelationResult:
        """
        Pearson correlation of paired numeric values.

        Parameters
        ----------
        pairs : sequence
            ``(x, y)`` tuples or ``{"x": ..., "y": ...}`` mappings

        Returns
        -------
        CorrelationResult
            ``coefficient`` is None with fewer than 2 pairs, and 0 when
            either axis has no variance
        """
        x, y = self._pair_arrays(pairs)
        n = len(x)

        if n < 2:
            self.logger.debug(f"Correlation needs at least 2 pairs, got {n}")
            return CorrelationResult(coefficient=None, strength=None, sign=None, pair_count=n)

        # Checked on the raw values; a float mean leaves residue in the deviations
        constant_axis = bool(np.all(x == x[0]) or np.all(y == y[0]))

        if constant_axis:
            correlation = 0.0
        else:
            x_dev = x - x.mean()
            y_dev = y - y.mean()
            numerator = float((x_dev * y_dev).sum())
            denominator = float(np.sqrt((x_dev ** 2).sum() * (y_dev ** 2).sum()))
            correlation = float(np.clip(numerator / denominator, -1.0, 1.0))

        p_value = None
        if n >= 3 and not constant_axis:
            try:
                _, p_value = stats.pearsonr(x, y)
                p_value = float(p_value)
            except Exception as e:
                self.logger.warning(f"Pearson p-value calculation failed: {e}")

        return CorrelationResult(
            coefficient=correlation,
            strength=self._interpret_strength(abs(correlation)),
            sign=self._interpret_sign(correlation),
            pair_count=n,
            p_value=p_value
        )

    def numeric_value(self, value: NormalizedValue, question: Question) -> Optional[float]:
        """
        Numeric interpretation of a normalized answer.

        Scale answers are returned as floats, single-choice answers as the
        0-based index of the option. Values that match no option, and
        answers to other question types, have no numeric interpretation.
        """
        if value is None:
            return None

        kind = question.kind
        if kind == QuestionKind.SCALE:
            return float(value)
        if kind == QuestionKind.SINGLE_CHOICE:
            if value in question.options:
                return float(question.options.index(value))
            return None
        return None

    def is_numeric_eligible(self, question: Question) -> bool:
        """Check if a question's answers have a numeric interpretation."""
        return question.kind in (QuestionKind.SCALE, QuestionKind.SINGLE_CHOICE)

    def correlate_questions(self,
                            responses_a: List[Response],
                            responses_b: List[Response],
                            question_a: Question,
                            question_b: Question) -> QuestionCorrelation:
        """
        Correlate two questions over respondents who answered both.

        Parameters
        ----------
        responses_a : list of Response
            Responses containing the answers to ``question_a`` (x axis)
        responses_b : list of Response
            Responses containing the answers to ``question_b`` (y axis)
        question_a, question_b : Question
            Questions to correlate

        Returns
        -------
        QuestionCorrelation
            Coefficient, aggregated ``{x, y, count}`` points and, when
            either question is a choice question, the contingency table
        """
        warnings = []
        for question in (question_a, question_b):
            if not self.is_numeric_eligible(question):
                warnings.append(f"Question {question.id} ({question.type}) has no numeric interpretation")

        answers_a = self.normalizer.normalized_answers(responses_a, question_a)
        answers_b = self.normalizer.normalized_answers(responses_b, question_b)
        joined = join_on_respondent(answers_a, answers_b)

        numeric_pairs: List[NumericPair] = []
        labelled_points: List[Tuple[float, float, str, str]] = []
        excluded = 0

        for _, value_a, value_b in joined:
            x = self.numeric_value(value_a, question_a)
            y = self.numeric_value(value_b, question_b)
            if x is None or y is None:
                excluded += 1
                continue
            numeric_pairs.append((x, y))
            labelled_points.append(
                (x, y, self.normalizer.value_key(value_a), self.normalizer.value_key(value_b))
            )

        if excluded:
            self.logger.debug(
                f"Correlation {question_a.id} x {question_b.id}: "
                f"{excluded} joined pair(s) without a numeric value"
            )

        correlation = self.correlate(numeric_pairs)
        if correlation.insufficient_data:
            warnings.append("Fewer than 2 respondents gave numeric answers to both questions")

        contingency = None
        if question_a.is_choice() or question_b.is_choice():
            contingency = self.cross_tabulation.cross_tab(responses_a, responses_b, question_a, question_b)

        self.logger.info(
            f"Correlation {question_a.id} x {question_b.id}: r={correlation.coefficient} "
            f"over {correlation.pair_count} pairs"
        )

        return QuestionCorrelation(
            question1=question_a.id,
            question2=question_b.id,
            correlation=correlation,
            points=self.aggregate_points(labelled_points),
            contingency=contingency,
            warnings=warnings
        )

    def compute_correlations(self,
                             questions: List[Question],
                             responses: List[Response]) -> List[QuestionCorrelation]:
        """
        Correlate every pair of numeric-eligible questions.

        Parameters
        ----------
        questions : list of Question
            Question catalogue; only scale and single-choice questions are used
        responses : list of Response
            Responses for the distribution

        Returns
        -------
        list of QuestionCorrelation
            One entry per question pair, in catalogue order
        """
        eligible = [q for q in questions if self.is_numeric_eligible(q)]

        if len(eligible) < 2:
            self.logger.warning("Need at least 2 scale or single-choice questions for correlation analysis")
            return []

        question_pairs = list(itertools.combinations(eligible, 2))
        self.logger.info(f"Computing {len(question_pairs)} question correlations")

        results = []
        for question_a, question_b in question_pairs:
            try:
                results.append(self.correlate_questions(responses, responses, question_a, question_b))
            except Exception as e:
                self.logger.error(f"Error computing correlation between {question_a.id} and {question_b.id}: {e}")

        return results

    def correlation_matrix(self, correlations: List[QuestionCorrelation]) -> pd.DataFrame:
        """Symmetric coefficient matrix from pairwise question correlations."""
        question_ids: List[Any] = []
        for item in correlations:
            for question_id in (item.question1, item.question2):
                if question_id not in question_ids:
                    question_ids.append(question_id)

        matrix = pd.DataFrame(np.nan, index=question_ids, columns=question_ids, dtype=float)
        for question_id in question_ids:
            matrix.at[question_id, question_id] = 1.0

        for item in correlations:
            coefficient = item.correlation.coefficient
            if coefficient is None:
                continue
            matrix.at[item.question1, item.question2] = coefficient
            matrix.at[item.question2, item.question1] = coefficient

        return matrix

    @staticmethod
    def aggregate_points(points: List[Tuple[float, float, str, str]]) -> List[ScatterPoint]:
        """Collapse identical ``(x, y)`` points into one point with a count."""
        aggregated: Dict[Tuple[float, float], ScatterPoint] = {}
        for x, y, x_label, y_label in points:
            key = (x, y)
            if key in aggregated:
                aggregated[key].count += 1
            else:
                aggregated[key] = ScatterPoint(x=x, y=y, x_label=x_label, y_label=y_label)
        return list(aggregated.values())

    def _pair_arrays(self, pairs: Sequence[PairLike]) -> Tuple[np.ndarray, np.ndarray]:
        """Split pairs into finite x and y arrays."""
        xs, ys = [], []
        for pair in pairs:
            if isinstance(pair, Mapping):
                x, y = pair.get('x'), pair.get('y')
            else:
                x, y = pair[0], pair[1]

            if x is None or y is None:
                continue

            x, y = float(x), float(y)
            if not (np.isfinite(x) and np.isfinite(y)):
                self.logger.debug(f"Skipping non-finite pair ({x}, {y})")
                continue

            xs.append(x)
            ys.append(y)

        return np.array(xs, dtype=float), np.array(ys, dtype=float)

    @staticmethod
    def _interpret_strength(abs_correlation: float) -> CorrelationStrength:
        """Interpret the magnitude of a correlation coefficient."""
        if abs_correlation >= 0.9:
            return CorrelationStrength.VERY_STRONG
        elif abs_correlation >= 0.7:
            return CorrelationStrength.STRONG
        elif abs_correlation >= 0.5:
            return CorrelationStrength.MODERATE
        elif abs_correlation >= 0.3:
            return CorrelationStrength.WEAK
        else:
            return CorrelationStrength.VERY_WEAK

    @staticmethod
    def _interpret_sign(correlation: float) -> CorrelationSign:
        """Direction of a correlation coefficient."""
        if correlation > 0:
            return CorrelationSign.POSITIVE
        elif correlation < 0:
            return CorrelationSign.NEGATIVE
        return CorrelationSign.NONE
