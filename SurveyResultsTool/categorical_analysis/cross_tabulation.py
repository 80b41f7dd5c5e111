"""
Cross-tabulation of two survey questions.

This module pairs each respondent's answer to one question with the same
respondent's answer to another and counts the joint occurrences. Marginal
distributions are computed independently from each question's own
responses, so they also count respondents who answered only one side.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .association_measures import AssociationMeasures
from ..data_processing.models import (
    CrossTabResult, NormalizedValue, Question, QuestionKind, Response, ValueCount
)
from ..data_processing.respondent_join import join_on_respondent
from ..data_processing.response_normalizer import ResponseNormalizer


class CrossTabulation:
    """
    Two-question cross-tabulation for survey responses.

    Features:
    - Respondent-level inner join of two independently filtered answer lists
    - Contingency matrix keyed by answer strings, in first-seen order
    - Independent marginals seeded with declared options or scale points
    - Chi-square test and association measures for tables of 2x2 and up
    - Row, column and total percentage tables
    """

    def __init__(self,
                 normalizer: Optional[ResponseNormalizer] = None,
                 statistical_tests: bool = True):
        """
        Initialize CrossTabulation analyzer.

        Parameters
        ----------
        normalizer : ResponseNormalizer, optional
            Normalizer used to interpret raw answers
        statistical_tests : bool, default True
            Whether to attach the chi-square test and association measures
        """
        self.normalizer = normalizer or ResponseNormalizer()
        self.statistical_tests = statistical_tests
        self.logger = logging.getLogger(__name__)

        self.association_measures = AssociationMeasures()

    def cross_tab(self,
                  responses_a: List[Response],
                  responses_b: List[Response],
                  question_a: Question,
                  question_b: Question) -> CrossTabResult:
        """
        Cross-tabulate two questions.

        Parameters
        ----------
        responses_a : list of Response
            Responses containing the answers to ``question_a``
        responses_b : list of Response
            Responses containing the answers to ``question_b``
        question_a : Question
            Question on the rows (dimension 1)
        question_b : Question
            Question on the columns (dimension 2)

        Returns
        -------
        CrossTabResult
            Matrix over respondents who answered both questions. When either
            side has no usable answer or no respondent overlaps, the matrix
            is empty and ``insufficient_data`` is set.
        """
        answers_a = self.normalizer.normalized_answers(responses_a, question_a)
        answers_b = self.normalizer.normalized_answers(responses_b, question_b)

        result = CrossTabResult(
            dimension1=question_a.id,
            dimension2=question_b.id,
            marginal1=self.marginal(answers_a, question_a),
            marginal2=self.marginal(answers_b, question_b)
        )

        pairs = join_on_respondent(answers_a, answers_b)

        if not pairs:
            result.insufficient_data = True
            result.message = self._insufficient_message(answers_a, answers_b, question_a, question_b)
            self.logger.info(f"Cross-tab {question_a.id} x {question_b.id}: {result.message}")
            return result

        keyed_pairs = [
            (self.normalizer.value_key(value_a), self.normalizer.value_key(value_b))
            for _, value_a, value_b in pairs
        ]
        table = self._contingency_table(keyed_pairs, question_a, question_b)

        result.row_values = list(table.index)
        result.column_values = list(table.columns)
        result.matrix = {
            row: {col: int(table.at[row, col]) for col in result.column_values}
            for row in result.row_values
        }
        result.pair_count = len(pairs)

        if self.statistical_tests and table.shape[0] >= 2 and table.shape[1] >= 2:
            result.association_measures = self.association_measures.calculate_measures(table)

        self.logger.info(
            f"Cross-tab {question_a.id} x {question_b.id}: {result.pair_count} pairs, "
            f"{len(result.row_values)}x{len(result.column_values)} table"
        )
        return result

    def marginal(self,
                 answers: List[Tuple[Any, NormalizedValue]],
                 question: Question) -> List[ValueCount]:
        """
        Per-value answer counts for one side of a cross-tab.

        Buckets start with the question's declared values; every other value
        key is appended in first-seen order. Multi-select answers are counted
        by their joined key so that marginals line up with matrix rows, and
        get no declared-option seeding since single options are not keys.
        """
        buckets: Dict[str, int] = {}
        if question.kind != QuestionKind.MULTIPLE_CHOICE:
            buckets = {value: 0 for value in question.declared_values()}

        for _, value in answers:
            key = self.normalizer.value_key(value)
            if key is None:
                continue
            buckets[key] = buckets.get(key, 0) + 1

        return [ValueCount(value=value, count=count) for value, count in buckets.items()]

    def percentages(self, result: CrossTabResult, percentage_type: str = 'row') -> pd.DataFrame:
        """
        Percentage table of a cross-tab result.

        Parameters
        ----------
        result : CrossTabResult
            Cross-tab to convert
        percentage_type : str, default 'row'
            'row', 'column' or 'total'
        """
        freq_table = result.observed_frequencies
        if freq_table.empty:
            return freq_table

        if percentage_type == 'row':
            return freq_table.div(freq_table.sum(axis=1), axis=0) * 100

        elif percentage_type == 'column':
            return freq_table.div(freq_table.sum(axis=0), axis=1) * 100

        elif percentage_type == 'total':
            return (freq_table / freq_table.values.sum()) * 100

        else:
            raise ValueError(f"Unknown percentage type: {percentage_type}")

    def _contingency_table(self,
                           keyed_pairs: List[Tuple[str, str]],
                           question_a: Question,
                           question_b: Question) -> pd.DataFrame:
        """Count joint occurrences, keeping values in first-seen order."""
        frame = pd.DataFrame(keyed_pairs, columns=['value_a', 'value_b'])

        row_values = list(dict.fromkeys(frame['value_a']))
        column_values = list(dict.fromkeys(frame['value_b']))

        table = pd.crosstab(frame['value_a'], frame['value_b'])
        table = table.reindex(index=row_values, columns=column_values, fill_value=0)
        table.index.name = str(question_a.id)
        table.columns.name = str(question_b.id)
        return table

    @staticmethod
    def _insufficient_message(answers_a: List[Tuple[Any, NormalizedValue]],
                              answers_b: List[Tuple[Any, NormalizedValue]],
                              question_a: Question,
                              question_b: Question) -> str:
        """Explain why a cross-tab has no pairs."""
        for answers, question in ((answers_a, question_a), (answers_b, question_b)):
            if not any(value is not None for _, value in answers):
                return f"No responses for question {question.id}"
        return "No respondents answered both questions"
