"""
Answer store reader for survey results.

This module is the boundary between the analysis core and the external
answer store. It adapts store rows into ``Question`` and ``Response``
records, concatenates paginated fetches into one materialized list, and
offers tabular views (long and respondent-wide) of the response set.
The store itself, and any network access, belongs to the caller.
"""

import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .models import Question, Response, SurveySet

# fetch_page(distribution_id, question_ids, offset, limit) -> list of row dicts
PageFetcher = Callable[[Any, Sequence[Any], int, int], List[Dict[str, Any]]]

DEFAULT_PAGE_SIZE = 1000

_RESPONDENT_KEYS = ('respondent_id', 'user_id', 'participant_id')


class AnswerStoreReader:
    """
    Reader for question and response rows coming from the answer store.

    Supports:
    - Pass-through of already materialized response lists
    - Row adapters tolerant of the store's alternative column names
    - Paginated response fetching through a caller-supplied page function
    - Survey-set id lists stored as JSON, comma-separated text or arrays
    - Long and respondent-wide DataFrame views of responses
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        """
        Initialize the AnswerStoreReader.

        Parameters
        ----------
        page_size : int, default 1000
            Maximum number of rows requested per page when fetching
        """
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self.page_size = page_size
        self.logger = logging.getLogger(__name__)

    def read(self,
             responses: List[Response],
             questions: Optional[List[Question]] = None) -> List[Response]:
        """Return the response list unchanged; the store owns filtering."""
        return responses

    def load_questions(self, records: Iterable[Union[Dict[str, Any], Question]]) -> List[Question]:
        """Convert store rows into Question objects."""
        return [
            record if isinstance(record, Question) else self.question_from_record(record)
            for record in records
        ]

    def load_responses(self, records: Iterable[Union[Dict[str, Any], Response]]) -> List[Response]:
        """Convert store rows into Response objects."""
        return [
            record if isinstance(record, Response) else self.response_from_record(record)
            for record in records
        ]

    def load_survey_sets(self, records: Iterable[Union[Dict[str, Any], SurveySet]]) -> List[SurveySet]:
        """Convert store rows into SurveySet objects."""
        survey_sets = []
        for record in records:
            if isinstance(record, SurveySet):
                survey_sets.append(record)
                continue
            if record.get('id') is None:
                raise ValueError(f"Survey set record without id: {record}")
            survey_sets.append(SurveySet(
                id=record['id'],
                name=record.get('name') or record.get('title') or '',
                type=record.get('type') or ''
            ))
        return survey_sets

    def question_from_record(self, record: Dict[str, Any]) -> Question:
        """
        Build a Question from a store row.

        Accepts both ``question_type``/``type``, ``question_category``/
        ``category`` and ``question_text``/``text`` column names. Options may
        be a list or a comma-separated string.
        """
        question_id = record.get('id', record.get('question_id'))
        if question_id is None:
            raise ValueError(f"Question record without id: {record}")

        return Question(
            id=question_id,
            type=record.get('question_type') or record.get('type') or 'text',
            category=record.get('question_category') or record.get('category'),
            options=self.parse_options(record.get('options')),
            text=record.get('question_text') or record.get('text') or '',
            survey_set_id=record.get('survey_set_id')
        )

    def response_from_record(self, record: Dict[str, Any]) -> Response:
        """
        Build a Response from a store row.

        The respondent id is taken from ``respondent_id``, ``user_id`` or
        ``participant_id``, whichever is present first.
        """
        if record.get('question_id') is None:
            raise ValueError(f"Response record without question_id: {record}")

        respondent_id = None
        for key in _RESPONDENT_KEYS:
            if record.get(key) is not None:
                respondent_id = record[key]
                break

        if respondent_id is None:
            raise ValueError(f"Response record without respondent id: {record}")

        answer = record.get('answer', record.get('response_value'))

        return Response(
            question_id=record['question_id'],
            respondent_id=respondent_id,
            answer=None if answer is None else str(answer),
            submitted_at=self._parse_timestamp(record.get('submitted_at'))
        )

    def fetch_all_responses(self,
                            fetch_page: PageFetcher,
                            distribution_id: Any,
                            question_ids: Sequence[Any]) -> List[Response]:
        """
        Fetch every response row for a distribution, one page at a time.

        Parameters
        ----------
        fetch_page : callable
            ``fetch_page(distribution_id, question_ids, offset, limit)``
            returning a list of row dicts; exceptions propagate unchanged
        distribution_id : any
            Distribution scoping the responses
        question_ids : sequence
            Questions whose responses are requested

        Returns
        -------
        list of Response
            Concatenation of all pages, in fetch order
        """
        rows: List[Dict[str, Any]] = []
        page = 0

        while True:
            batch = fetch_page(distribution_id, question_ids, page * self.page_size, self.page_size)
            if not batch:
                break

            rows.extend(batch)
            page += 1
            self.logger.debug(f"Fetched response page {page}: {len(batch)} rows, {len(rows)} total")

            if len(batch) < self.page_size:
                break

        self.logger.info(
            f"Fetched {len(rows)} responses for distribution {distribution_id} "
            f"across {page} page(s)"
        )

        return self.load_responses(rows)

    def to_frame(self, responses: List[Response]) -> pd.DataFrame:
        """Long-format DataFrame with one row per response."""
        return pd.DataFrame(
            [(r.question_id, r.respondent_id, r.answer, r.submitted_at) for r in responses],
            columns=['question_id', 'respondent_id', 'answer', 'submitted_at']
        )

    def pivot_responses(self,
                        responses: List[Response],
                        questions: List[Question]) -> pd.DataFrame:
        """
        Respondent x question table of raw answers.

        Rows follow respondents in first-seen order, columns follow the
        question catalogue order. When a respondent answered a question more
        than once the last row wins; unanswered cells are None.
        """
        question_ids = [q.id for q in questions]
        known_ids = set(question_ids)
        rows: Dict[Any, Dict[Any, Optional[str]]] = {}

        for response in responses:
            if response.question_id not in known_ids:
                continue
            rows.setdefault(response.respondent_id, {})[response.question_id] = response.answer

        if not rows:
            return pd.DataFrame(columns=question_ids)

        return pd.DataFrame(
            [[answers.get(question_id) for question_id in question_ids] for answers in rows.values()],
            index=pd.Index(list(rows.keys()), name='respondent_id'),
            columns=question_ids
        )

    @staticmethod
    def parse_options(raw_options: Any) -> List[str]:
        """Parse declared options from a list or a comma-separated string."""
        if raw_options is None:
            return []
        if isinstance(raw_options, (list, tuple)):
            candidates = [str(option) for option in raw_options]
        else:
            candidates = str(raw_options).split(',')
        return [option.strip() for option in candidates if option.strip()]

    def parse_survey_set_ids(self, raw_ids: Any) -> List[Any]:
        """
        Parse the survey set ids attached to a distribution.

        Accepts a list, JSON array text, comma-separated text or a single id.
        """
        if raw_ids is None:
            return []
        if isinstance(raw_ids, (list, tuple)):
            return list(raw_ids)
        if not isinstance(raw_ids, str):
            return [raw_ids]

        text = raw_ids.strip()
        if not text:
            return []

        if text.startswith('[') or text.startswith('{'):
            try:
                parsed = json.loads(text)
            except ValueError as e:
                self.logger.warning(f"Could not parse survey set ids {text!r}: {e}")
                return [text]
            if isinstance(parsed, list):
                return parsed
            if isinstance(parsed, dict):
                return list(parsed.values())
            return [parsed]

        if ',' in text:
            return [part.strip() for part in text.split(',') if part.strip()]

        return [text]

    def _parse_timestamp(self, value: Any) -> Optional[Any]:
        """Parse a submission timestamp; unparseable values become None."""
        if value is None or value == '':
            return None

        timestamp = pd.to_datetime(value, errors='coerce')
        if pd.isna(timestamp):
            self.logger.debug(f"Unparseable submitted_at value {value!r}")
            return None

        return timestamp.to_pydatetime()
