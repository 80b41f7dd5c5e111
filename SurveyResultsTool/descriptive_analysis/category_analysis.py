"""
Category level summaries of scale questions.

Questions carry a free-text category. This module groups the question
catalogue by category and pools the scale answers of each group into one
average, which is how administrators compare topic areas of a survey.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from ..data_processing.models import CategorySummary, Question, Response, UNCATEGORIZED
from ..data_processing.response_normalizer import ResponseNormalizer


class CategoryAnalyzer:
    """
    Group questions by category and summarize their scale answers.

    Categories are free-form strings and keep the order in which they first
    appear in the question catalogue.
    """

    def __init__(self,
                 normalizer: Optional[ResponseNormalizer] = None,
                 average_decimals: int = 2,
                 uncategorized_label: str = UNCATEGORIZED):
        """
        Initialize CategoryAnalyzer.

        Parameters
        ----------
        normalizer : ResponseNormalizer, optional
            Normalizer used to interpret raw answers
        average_decimals : int, default 2
            Number of decimals category averages are rounded to
        uncategorized_label : str, default "Uncategorized"
            Category assigned to questions without one
        """
        self.normalizer = normalizer or ResponseNormalizer()
        self.average_decimals = average_decimals
        self.uncategorized_label = uncategorized_label
        self.logger = logging.getLogger(__name__)

    def category_of(self, question: Question) -> str:
        """Category of a question, falling back to the uncategorized label."""
        if not question.category or question.category == UNCATEGORIZED:
            return self.uncategorized_label
        return question.category

    def list_categories(self, questions: List[Question]) -> List[str]:
        """Distinct categories in first-seen order."""
        categories: List[str] = []
        for question in questions:
            category = self.category_of(question)
            if category not in categories:
                categories.append(category)
        return categories

    def questions_in_category(self, questions: List[Question], category: str) -> List[Question]:
        """Questions belonging to a category, in catalogue order."""
        return [q for q in questions if self.category_of(q) == category]

    def category_summary(self,
                         responses: List[Response],
                         questions: List[Question]) -> List[CategorySummary]:
        """
        Pool the scale answers of every category.

        Parameters
        ----------
        responses : list of Response
            Responses for the distribution
        questions : list of Question
            Question catalogue

        Returns
        -------
        list of CategorySummary
            One entry per category. ``question_count`` counts every question
            in the category; ``count`` and ``average`` cover valid answers to
            its scale questions only. A category without scale answers has
            ``average = 0`` and ``has_data = False``.
        """
        responses_by_question: Dict[Any, List[Response]] = {}
        for response in responses:
            responses_by_question.setdefault(response.question_id, []).append(response)

        summaries = []
        for category in self.list_categories(questions):
            members = self.questions_in_category(questions, category)

            values: List[float] = []
            for question in members:
                if not question.is_scale():
                    continue
                for response in responses_by_question.get(question.id, []):
                    value = self.normalizer.normalize_response(response, question)
                    if value is not None:
                        values.append(value)

            summary = CategorySummary(
                category=category,
                question_count=len(members),
                count=len(values),
                question_ids=[q.id for q in members]
            )

            if values:
                summary.average = round(float(np.mean(values)), self.average_decimals)
                summary.has_data = True
            else:
                self.logger.debug(f"Category {category!r} has no scale answers")

            summaries.append(summary)

        self.logger.info(f"Summarized {len(summaries)} categories")
        return summaries
