"""
Respondent-level joins between two independently filtered answer lists.

Cross-tabulation and correlation both pair one respondent's answer to
question A with the same respondent's answer to question B. The join is an
inner join on respondent id with no de-duplication: a respondent with two
rows for A and one row for B contributes two pairs.
"""

from typing import Any, Iterable, List, Tuple

import pandas as pd

from .models import NormalizedValue

RespondentPair = Tuple[Any, NormalizedValue, NormalizedValue]


def _answer_frame(answers: Iterable[Tuple[Any, NormalizedValue]], value_column: str) -> pd.DataFrame:
    """Build a two-column frame, dropping missing ids and values."""
    rows = [
        (respondent_id, value) for respondent_id, value in answers
        if respondent_id is not None and value is not None
    ]
    frame = pd.DataFrame(rows, columns=['respondent_id', value_column], dtype=object)
    return frame


def join_on_respondent(answers_a: Iterable[Tuple[Any, NormalizedValue]],
                       answers_b: Iterable[Tuple[Any, NormalizedValue]]) -> List[RespondentPair]:
    """
    Inner-join two ``(respondent_id, value)`` lists on respondent id.

    Parameters
    ----------
    answers_a, answers_b : iterable of tuple
        Normalized answers, typically from
        ``ResponseNormalizer.normalized_answers``. Entries with a None value
        or None respondent id never join.

    Returns
    -------
    list of tuple
        ``(respondent_id, value_a, value_b)`` ordered by the first list,
        then by the second list within one respondent
    """
    frame_a = _answer_frame(answers_a, 'value_a')
    frame_b = _answer_frame(answers_b, 'value_b')

    if frame_a.empty or frame_b.empty:
        return []

    merged = pd.merge(frame_a, frame_b, on='respondent_id', how='inner', sort=False)

    return list(merged[['respondent_id', 'value_a', 'value_b']].itertuples(index=False, name=None))
