"""
Per-question frequency analysis for survey responses.

This module aggregates the responses to one question into a frequency
distribution: declared buckets first (options for choice questions, the
integer points 1..N for scale questions), then any undeclared values in the
order they were first seen. Scale questions additionally report the mean
answer, and free-text questions return their answers verbatim.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from ..data_processing.models import (
    FrequencyResult, Question, QuestionKind, Response, ValueCount
)
from ..data_processing.response_normalizer import ResponseNormalizer


class FrequencyAnalyzer:
    """
    Frequency aggregation for single questions.

    Features:
    - Zero-count buckets for every declared option or scale point
    - Extra buckets for undeclared choice values, in first-seen order
    - Per-selection counting for multi-select questions
    - Rounded scale averages with an explicit has-data flag
    - Item and distribution level response summaries
    """

    def __init__(self,
                 normalizer: Optional[ResponseNormalizer] = None,
                 average_decimals: int = 2):
        """
        Initialize FrequencyAnalyzer.

        Parameters
        ----------
        normalizer : ResponseNormalizer, optional
            Normalizer used to interpret raw answers
        average_decimals : int, default 2
            Number of decimals scale averages are rounded to
        """
        self.normalizer = normalizer or ResponseNormalizer()
        self.average_decimals = average_decimals
        self.logger = logging.getLogger(__name__)

    def aggregate(self, responses: List[Response], question: Question) -> FrequencyResult:
        """
        Aggregate the responses to one question.

        Parameters
        ----------
        responses : list of Response
            Responses for any number of questions; only rows for
            ``question`` are considered
        question : Question
            Question being summarized

        Returns
        -------
        FrequencyResult
            ``raw_count`` counts every row for the question, ``count`` only
            rows whose answer could be normalized
        """
        rows = [r for r in responses if r.question_id == question.id]
        values = [self.normalizer.normalize_response(r, question) for r in rows]
        valid_values = [v for v in values if v is not None]

        result = FrequencyResult(
            question_id=question.id,
            question_type=question.type,
            count=len(valid_values),
            raw_count=len(rows),
            has_data=len(valid_values) > 0,
            unique_respondents=len({r.respondent_id for r in rows if r.respondent_id is not None})
        )

        malformed = result.raw_count - result.count
        if malformed:
            self.logger.debug(f"Question {question.id}: {malformed} answer(s) could not be normalized")

        kind = question.kind
        if kind == QuestionKind.SCALE:
            self._aggregate_scale(valid_values, question, result)
        elif kind in (QuestionKind.SINGLE_CHOICE, QuestionKind.MULTIPLE_CHOICE):
            result.distinct_value_counts = self.count_values(valid_values, question)
        else:
            result.text_answers = [str(v) for v in valid_values]

        return result

    def count_values(self, values: List[Any], question: Question) -> List[ValueCount]:
        """
        Bucket normalized values against the question's declared values.

        Choice values are counted by their string key; list values (multi-
        select) increment each selection. Scale values only land in a bucket
        when they equal one of the integer points 1..N.
        """
        buckets: Dict[str, int] = {value: 0 for value in question.declared_values()}

        if question.is_scale():
            for value in values:
                key = self._scale_bucket(value, question.scale_size)
                if key is not None:
                    buckets[key] += 1
        else:
            for value in values:
                selections = value if isinstance(value, list) else [value]
                for selection in selections:
                    key = self.normalizer.value_key(selection)
                    buckets[key] = buckets.get(key, 0) + 1

        return [ValueCount(value=value, count=count) for value, count in buckets.items()]

    def _aggregate_scale(self,
                         values: List[float],
                         question: Question,
                         result: FrequencyResult):
        """Fill scale buckets and the rounded average."""
        result.distinct_value_counts = self.count_values(values, question)

        if not values:
            # has_data distinguishes this from a real average of 0
            result.average = 0
            return

        out_of_range = sum(1 for v in values if self._scale_bucket(v, question.scale_size) is None)
        if out_of_range:
            self.logger.debug(
                f"Question {question.id}: {out_of_range} value(s) outside 1..{question.scale_size}"
            )

        result.average = round(float(np.mean(values)), self.average_decimals)

    @staticmethod
    def _scale_bucket(value: float, size: int) -> Optional[str]:
        """Bucket label for a scale value, or None when it matches no point."""
        if float(value).is_integer() and 1 <= value <= size:
            return str(int(value))
        return None

    def item_summary(self,
                     responses: List[Response],
                     questions: List[Question]) -> Dict[Any, FrequencyResult]:
        """
        Frequency results for every question, keyed by question id.

        Questions keep their catalogue order.
        """
        return {question.id: self.aggregate(responses, question) for question in questions}

    def distribution_summary(self,
                             responses: List[Response],
                             questions: List[Question]) -> Dict[str, int]:
        """
        Headline totals for one distribution.

        Returns
        -------
        dict
            ``total_questions``, ``total_responses`` (rows for catalogue
            questions) and ``unique_respondents``
        """
        question_ids = {q.id for q in questions}
        rows = [r for r in responses if r.question_id in question_ids]

        return {
            'total_questions': len(questions),
            'total_responses': len(rows),
            'unique_respondents': len({r.respondent_id for r in rows if r.respondent_id is not None})
        }

    def frequency_table(self, result: FrequencyResult) -> pd.DataFrame:
        """Frequency table DataFrame with cumulative percentages."""
        table = result.to_frame()
        table['Cumulative_Frequency'] = table['Frequency'].cumsum()
        table['Cumulative_Percentage'] = table['Percentage'].cumsum()
        return table
