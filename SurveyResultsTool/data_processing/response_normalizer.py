"""
Answer normalization for survey responses.

Raw answers arrive from the answer store as strings regardless of the
question's declared type. This module is the single conversion boundary
that turns a raw answer into a canonical value: a float for scale questions,
a trimmed string for single-choice questions, a list of selections for
multi-select questions, and control-character-free text for open ends.
"""

import logging
import math
import re
from typing import Any, List, Optional, Tuple

from .models import (
    NormalizedValue, Question, QuestionKind, Response, question_kind
)

# C0 controls, DEL and C1 controls
_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


class ResponseNormalizer:
    """
    Convert raw answers into canonical values according to question type.

    Features:
    - Lax float parsing for scale answers (no range validation)
    - Trimmed single-choice values, empty answers treated as missing
    - Delimited multi-select answers split into a list of selections
    - Control-character stripping for free text
    """

    def __init__(self, multi_choice_delimiter: str = ';'):
        """
        Initialize the ResponseNormalizer.

        Parameters
        ----------
        multi_choice_delimiter : str, default ';'
            Separator used when multi-select answers are stored as one string
        """
        self.multi_choice_delimiter = multi_choice_delimiter
        self.logger = logging.getLogger(__name__)

    def normalize(self, raw_answer: Any, question_type: Optional[str]) -> NormalizedValue:
        """
        Normalize a raw answer for the given question type.

        Parameters
        ----------
        raw_answer : str or None
            Answer as stored
        question_type : str
            Declared question type (``scale_N``, ``single_choice``,
            ``multiple_choice`` or ``text``; aliases accepted)

        Returns
        -------
        float, str, list of str or None
            Canonical value, or None when the answer is missing or cannot be
            interpreted for the question type
        """
        if raw_answer is None:
            return None

        kind = question_kind(question_type)

        if kind == QuestionKind.SCALE:
            return self._normalize_scale(raw_answer)
        elif kind == QuestionKind.SINGLE_CHOICE:
            return self._normalize_single_choice(raw_answer)
        elif kind == QuestionKind.MULTIPLE_CHOICE:
            return self._normalize_multiple_choice(raw_answer)
        else:
            if question_type not in (None, 'text'):
                self.logger.debug(f"Unknown question type {question_type!r}, treating answer as text")
            return self._normalize_text(raw_answer)

    def normalize_response(self, response: Response, question: Question) -> NormalizedValue:
        """Normalize a single response row against its question."""
        return self.normalize(response.answer, question.type)

    def normalized_answers(self,
                           responses: List[Response],
                           question: Question) -> List[Tuple[Any, NormalizedValue]]:
        """
        Normalize every response row belonging to a question.

        Rows for other questions are skipped. Rows whose answer cannot be
        normalized are kept with a None value so callers can still count them.

        Returns
        -------
        list of tuple
            ``(respondent_id, normalized_value)`` in input order
        """
        return [
            (response.respondent_id, self.normalize_response(response, question))
            for response in responses
            if response.question_id == question.id
        ]

    def value_key(self, value: NormalizedValue) -> Optional[str]:
        """
        String form of a normalized value, used as a table key.

        Whole-number floats drop their fractional part (``4.0`` -> ``"4"``),
        multi-select lists are re-joined with the delimiter.
        """
        if value is None:
            return None
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else repr(value)
        if isinstance(value, list):
            return self.multi_choice_delimiter.join(value)
        return str(value)

    def _normalize_scale(self, raw_answer: Any) -> Optional[float]:
        """Parse a scale answer as a float."""
        try:
            value = float(str(raw_answer).strip())
        except (TypeError, ValueError):
            self.logger.debug(f"Discarding non-numeric scale answer {raw_answer!r}")
            return None

        if not math.isfinite(value):
            return None

        return value

    def _normalize_single_choice(self, raw_answer: Any) -> Optional[str]:
        """Trim a single-choice answer."""
        value = str(raw_answer).strip()
        return value or None

    def _normalize_multiple_choice(self, raw_answer: Any) -> Optional[List[str]]:
        """Split a delimited multi-select answer into its selections."""
        selections = [
            part.strip() for part in str(raw_answer).split(self.multi_choice_delimiter)
        ]
        selections = [part for part in selections if part]
        return selections or None

    def _normalize_text(self, raw_answer: Any) -> str:
        """Strip control characters from free text."""
        return _CONTROL_CHARS.sub('', str(raw_answer))


_default_normalizer = ResponseNormalizer()


def normalize(raw_answer: Any, question_type: Optional[str]) -> NormalizedValue:
    """Normalize a raw answer with the default ``;`` multi-select delimiter."""
    return _default_normalizer.normalize(raw_answer, question_type)
