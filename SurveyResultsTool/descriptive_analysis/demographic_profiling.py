"""
Demographic profiling of survey respondents.

Demographic questions live in survey sets whose type mentions
"demographic". This module profiles those questions and breaks scale
outcomes down by demographic option.
"""

import logging
from typing import Any, Dict, List, Optional, Set

import numpy as np

from ..data_processing.models import (
    FrequencyResult, OptionBreakdown, Question, Response, SurveySet
)
from ..data_processing.response_normalizer import ResponseNormalizer
from .frequency_analysis import FrequencyAnalyzer


class DemographicProfiler:
    """
    Demographic profiles and per-option outcome breakdowns.

    Features:
    - Detection of demographic survey sets by type keyword
    - Frequency profiles of demographic questions
    - Scale averages among respondents choosing each demographic option
    """

    def __init__(self,
                 frequency_analyzer: Optional[FrequencyAnalyzer] = None,
                 demographic_keyword: str = "demographic",
                 average_decimals: int = 2):
        """
        Initialize DemographicProfiler.

        Parameters
        ----------
        frequency_analyzer : FrequencyAnalyzer, optional
            Analyzer used for demographic question profiles
        demographic_keyword : str, default "demographic"
            Substring identifying demographic survey set types
        average_decimals : int, default 2
            Number of decimals breakdown averages are rounded to
        """
        self.frequency_analyzer = frequency_analyzer or FrequencyAnalyzer(average_decimals=average_decimals)
        self.demographic_keyword = demographic_keyword
        self.average_decimals = average_decimals
        self.logger = logging.getLogger(__name__)

    @property
    def normalizer(self) -> ResponseNormalizer:
        return self.frequency_analyzer.normalizer

    def demographic_set_ids(self, survey_sets: List[SurveySet]) -> Set[Any]:
        """Ids of survey sets holding demographic questions."""
        return {s.id for s in survey_sets if s.is_demographic(self.demographic_keyword)}

    def demographic_questions(self,
                              questions: List[Question],
                              survey_sets: List[SurveySet]) -> List[Question]:
        """Questions belonging to demographic survey sets."""
        set_ids = self.demographic_set_ids(survey_sets)
        return [q for q in questions if q.survey_set_id in set_ids]

    def demographic_categories(self,
                               questions: List[Question],
                               survey_sets: List[SurveySet]) -> List[str]:
        """Categories of demographic questions in first-seen order."""
        categories: List[str] = []
        for question in self.demographic_questions(questions, survey_sets):
            if question.category not in categories:
                categories.append(question.category)
        return categories

    def profile(self, responses: List[Response], question: Question) -> FrequencyResult:
        """Frequency distribution of a demographic question."""
        return self.frequency_analyzer.aggregate(responses, question)

    def option_breakdown(self,
                         responses: List[Response],
                         demographic_question: Question,
                         outcome_questions: List[Question]) -> List[OptionBreakdown]:
        """
        Scale outcomes among respondents who chose each demographic option.

        Parameters
        ----------
        responses : list of Response
            Responses for the distribution
        demographic_question : Question
            Choice question defining the groups
        outcome_questions : list of Question
            Questions to average; non-scale questions are skipped

        Returns
        -------
        list of OptionBreakdown
            One entry per bucket of the demographic question's profile, in
            bucket order. ``scale_averages`` maps each scale question id to
            ``{'average': float, 'count': int}``; average is 0 when the group
            gave no valid answer.
        """
        if not demographic_question.is_choice():
            raise ValueError(
                f"Question {demographic_question.id} is {demographic_question.type}, "
                f"option breakdown needs a choice question"
            )

        respondents_by_option: Dict[str, Set[Any]] = {}
        for respondent_id, value in self.normalizer.normalized_answers(responses, demographic_question):
            if value is None:
                continue
            selections = value if isinstance(value, list) else [value]
            for selection in selections:
                respondents_by_option.setdefault(selection, set()).add(respondent_id)

        scale_questions = [q for q in outcome_questions if q.is_scale()]
        answers_by_question = {
            q.id: [
                (respondent_id, value)
                for respondent_id, value in self.normalizer.normalized_answers(responses, q)
                if value is not None
            ]
            for q in scale_questions
        }

        breakdowns = []
        for bucket in self.profile(responses, demographic_question).distinct_value_counts:
            respondents = respondents_by_option.get(bucket.value, set())
            scale_averages = {}

            for question in scale_questions:
                values = [v for rid, v in answers_by_question[question.id] if rid in respondents]
                average = round(float(np.mean(values)), self.average_decimals) if values else 0
                scale_averages[question.id] = {'average': average, 'count': len(values)}

            breakdowns.append(OptionBreakdown(
                option=bucket.value,
                respondent_count=len(respondents),
                scale_averages=scale_averages
            ))

        self.logger.info(
            f"Broke down {len(scale_questions)} scale question(s) by "
            f"{len(breakdowns)} option(s) of {demographic_question.id}"
        )
        return breakdowns
