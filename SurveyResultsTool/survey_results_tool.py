"""
Main Survey Results Tool class.

This module provides the primary interface for survey results analysis,
integrating response loading, item frequencies, category and demographic
summaries, cross-tabulation and correlation analysis for one distribution.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from .data_processing import (
    AnswerStoreReader, ResponseNormalizer,
    Question, Response, SurveySet,
    FrequencyResult, CrossTabResult, CategorySummary, QuestionCorrelation
)
from .descriptive_analysis import FrequencyAnalyzer, CategoryAnalyzer, DemographicProfiler
from .correlation_analysis import CorrelationEngine
from .categorical_analysis import CrossTabulation
from .visualization import ChartDataAdapter

DEFAULT_CONFIG = {
    'uncategorized_label': 'Uncategorized',
    'page_size': 1000,
    'demographic_keyword': 'demographic',
    'average_decimals': 2,
    'multi_choice_delimiter': ';',
}


class SurveyResultsTool:
    """
    Survey results analysis tool.

    This is the main interface that integrates all analysis components for
    one distribution's responses. Every analysis is recomputed from the
    loaded responses on each call.

    Features:
    - Question, response and survey set loading from store rows
    - Paginated response fetching through a caller-supplied page function
    - Per-question frequency distributions and distribution totals
    - Category averages and category cross analysis
    - Demographic profiles, option breakdowns and cross-tabs
    - Cross-tabulation and correlation between questions
    - Chart-ready series through the chart data adapter
    """

    def __init__(self,
                 config_path: Optional[str] = None,
                 log_level: str = 'INFO'):
        """
        Initialize the Survey Results Tool.

        Parameters
        ----------
        config_path : str, optional
            Path to a JSON configuration file
        log_level : str, default 'INFO'
            Logging level
        """
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        self.logger = logging.getLogger(__name__)

        self.config = dict(DEFAULT_CONFIG)
        if config_path:
            self.config.update(self._load_config(config_path))

        # Initialize components
        self.normalizer = ResponseNormalizer(
            multi_choice_delimiter=self.config['multi_choice_delimiter']
        )
        self.answer_reader = AnswerStoreReader(page_size=self.config['page_size'])
        self.frequency_analyzer = FrequencyAnalyzer(
            normalizer=self.normalizer,
            average_decimals=self.config['average_decimals']
        )
        self.category_analyzer = CategoryAnalyzer(
            normalizer=self.normalizer,
            average_decimals=self.config['average_decimals'],
            uncategorized_label=self.config['uncategorized_label']
        )
        self.demographic_profiler = DemographicProfiler(
            frequency_analyzer=self.frequency_analyzer,
            demographic_keyword=self.config['demographic_keyword'],
            average_decimals=self.config['average_decimals']
        )
        self.cross_tabulation = CrossTabulation(normalizer=self.normalizer)
        self.correlation_engine = CorrelationEngine(
            normalizer=self.normalizer,
            cross_tabulation=self.cross_tabulation
        )
        self.chart_data = ChartDataAdapter()

        # Data storage
        self.questions: List[Question] = []
        self.responses: Optional[List[Response]] = None
        self.survey_sets: List[SurveySet] = []
        self.analysis_results = {}

        self.logger.info("Survey Results Tool initialized successfully")

    def load_data(self,
                  questions: List[Any],
                  responses: List[Any],
                  survey_sets: Optional[List[Any]] = None) -> List[Response]:
        """
        Load the question catalogue and responses of one distribution.

        Parameters
        ----------
        questions : list of Question or dict
            Question catalogue, as objects or store rows
        responses : list of Response or dict
            Responses, as objects or store rows
        survey_sets : list of SurveySet or dict, optional
            Survey sets the questions belong to

        Returns
        -------
        list of Response
            Loaded responses
        """
        try:
            self.questions = self.answer_reader.load_questions(questions)
            self.survey_sets = self.answer_reader.load_survey_sets(survey_sets or [])
            self.responses = self.answer_reader.read(
                self.answer_reader.load_responses(responses), self.questions
            )
        except Exception as e:
            self.logger.error(f"Failed to load survey results: {e}")
            raise

        self.analysis_results = {}

        self.logger.info(
            f"Loaded {len(self.responses)} responses to {len(self.questions)} questions "
            f"in {len(self.survey_sets)} survey sets"
        )

        return self.responses

    def load_distribution(self,
                          fetch_page: Callable,
                          distribution_id: Any,
                          questions: List[Any],
                          survey_sets: Optional[List[Any]] = None) -> List[Response]:
        """
        Fetch and load every response of a distribution.

        Parameters
        ----------
        fetch_page : callable
            ``fetch_page(distribution_id, question_ids, offset, limit)``
            returning a list of response rows
        distribution_id : any
            Distribution whose responses are fetched
        questions : list of Question or dict
            Question catalogue of the distribution
        survey_sets : list of SurveySet or dict, optional
            Survey sets the questions belong to
        """
        catalogue = self.answer_reader.load_questions(questions)

        try:
            responses = self.answer_reader.fetch_all_responses(
                fetch_page, distribution_id, [q.id for q in catalogue]
            )
        except Exception as e:
            self.logger.error(f"Failed to fetch responses for distribution {distribution_id}: {e}")
            raise

        return self.load_data(catalogue, responses, survey_sets)

    def get_question(self, question_id: Any) -> Question:
        """Look up a loaded question by id."""
        for question in self.questions:
            if question.id == question_id:
                return question
        raise ValueError(f"Unknown question id: {question_id}")

    def item_analysis(self, question_ids: Optional[List[Any]] = None) -> Dict[Any, FrequencyResult]:
        """
        Frequency distribution of every (or the selected) question.

        Parameters
        ----------
        question_ids : list, optional
            Questions to analyze. If None, analyzes the whole catalogue

        Returns
        -------
        dict
            Question id to FrequencyResult, in catalogue order
        """
        self._require_data()
        questions = self._select_questions(question_ids)

        self.logger.info(f"Starting item analysis for {len(questions)} questions")

        try:
            results = self.frequency_analyzer.item_summary(self.responses, questions)
            self.analysis_results['item_analysis'] = results

            answered = sum(1 for r in results.values() if r.has_data)
            self.logger.info(f"Item analysis completed. {answered} of {len(results)} questions have answers")

            return results

        except Exception as e:
            self.logger.error(f"Item analysis failed: {e}")
            raise

    def distribution_summary(self) -> Dict[str, int]:
        """Total questions, responses and unique respondents."""
        self._require_data()
        summary = self.frequency_analyzer.distribution_summary(self.responses, self.questions)
        self.analysis_results['distribution_summary'] = summary
        return summary

    def category_analysis(self) -> List[CategorySummary]:
        """
        Scale answer averages per question category.

        Returns
        -------
        list of CategorySummary
            One entry per category, in first-seen order
        """
        self._require_data()

        self.logger.info("Starting category analysis")

        try:
            summaries = self.category_analyzer.category_summary(self.responses, self.questions)
            self.analysis_results['category_analysis'] = summaries
            return summaries

        except Exception as e:
            self.logger.error(f"Category analysis failed: {e}")
            raise

    def cross_tabulation_analysis(self,
                                  row_question_id: Any = None,
                                  column_question_id: Any = None) -> CrossTabResult:
        """
        Cross-tabulate two questions.

        Parameters
        ----------
        row_question_id : any
            Question on the table rows
        column_question_id : any
            Question on the table columns

        Returns
        -------
        CrossTabResult
            Cross-tabulation over respondents who answered both
        """
        self._require_data()

        if row_question_id is None or column_question_id is None:
            raise ValueError("Both row_question_id and column_question_id are required")

        question_a = self.get_question(row_question_id)
        question_b = self.get_question(column_question_id)

        self.logger.info(f"Creating cross-tabulation: {row_question_id} × {column_question_id}")

        try:
            result = self.cross_tabulation.cross_tab(self.responses, self.responses, question_a, question_b)
            self.analysis_results.setdefault('cross_tabulations', []).append(result)
            return result

        except Exception as e:
            self.logger.error(f"Cross-tabulation failed: {e}")
            raise

    def category_cross_analysis(self, category_a: str, category_b: str) -> CrossTabResult:
        """
        Cross-tabulate two categories through their first questions.

        A category without questions yields an insufficient-data result.
        """
        self._require_data()

        first_questions = []
        for category in (category_a, category_b):
            members = self.category_analyzer.questions_in_category(self.questions, category)
            if not members:
                self.logger.warning(f"Category {category!r} has no questions")
                return CrossTabResult(
                    dimension1=category_a,
                    dimension2=category_b,
                    insufficient_data=True,
                    message=f"No questions in category {category}"
                )
            first_questions.append(members[0])

        return self.cross_tabulation_analysis(first_questions[0].id, first_questions[1].id)

    def demographic_analysis(self,
                             outcome_question_ids: Optional[List[Any]] = None,
                             category: Optional[str] = None) -> Dict[Any, Dict[str, Any]]:
        """
        Profile demographic questions and break outcomes down by them.

        Parameters
        ----------
        outcome_question_ids : list, optional
            Outcome questions for breakdowns and cross-tabs. If None, uses
            every non-demographic question
        category : str, optional
            Restrict to demographic questions of one category

        Returns
        -------
        dict
            Per demographic question id: ``profile`` (FrequencyResult),
            ``option_breakdown`` (list of OptionBreakdown, choice questions
            only) and ``cross_tabs`` (outcome question id to CrossTabResult)
        """
        self._require_data()

        self.logger.info("Generating demographic profiles")

        demographic_questions = self.demographic_profiler.demographic_questions(
            self.questions, self.survey_sets
        )
        if category is not None:
            demographic_questions = [q for q in demographic_questions if q.category == category]

        if not demographic_questions:
            self.logger.warning("No demographic questions found")

        if outcome_question_ids is None:
            demographic_ids = {q.id for q in demographic_questions}
            outcomes = [q for q in self.questions if q.id not in demographic_ids]
        else:
            outcomes = self._select_questions(outcome_question_ids)

        try:
            demographic_results = {}

            for question in demographic_questions:
                entry: Dict[str, Any] = {
                    'profile': self.demographic_profiler.profile(self.responses, question),
                    'option_breakdown': [],
                    'cross_tabs': {}
                }

                if question.is_choice():
                    entry['option_breakdown'] = self.demographic_profiler.option_breakdown(
                        self.responses, question, outcomes
                    )

                    for outcome in outcomes:
                        if outcome.is_choice() or outcome.is_scale():
                            entry['cross_tabs'][outcome.id] = self.cross_tabulation.cross_tab(
                                self.responses, self.responses, question, outcome
                            )

                demographic_results[question.id] = entry

            self.analysis_results['demographic_profile'] = demographic_results

            self.logger.info(f"Demographic profiling completed for {len(demographic_questions)} questions")

            return demographic_results

        except Exception as e:
            self.logger.error(f"Demographic profiling failed: {e}")
            raise

    def correlation_analysis(self, question_ids: Optional[List[Any]] = None) -> List[QuestionCorrelation]:
        """
        Correlate every pair of scale and single-choice questions.

        Parameters
        ----------
        question_ids : list, optional
            Questions to correlate. If None, uses the whole catalogue

        Returns
        -------
        list of QuestionCorrelation
            Correlation results for all eligible question pairs
        """
        self._require_data()
        questions = self._select_questions(question_ids)

        self.logger.info("Starting correlation analysis")

        try:
            correlation_results = self.correlation_engine.compute_correlations(questions, self.responses)
            self.analysis_results['correlations'] = correlation_results

            significant_correlations = sum(1 for r in correlation_results if r.correlation.is_significant())

            self.logger.info(
                f"Correlation analysis completed. {len(correlation_results)} correlations computed, "
                f"{significant_correlations} significant at α=0.05"
            )

            return correlation_results

        except Exception as e:
            self.logger.error(f"Correlation analysis failed: {e}")
            raise

    def correlate_questions(self, question_a_id: Any, question_b_id: Any) -> QuestionCorrelation:
        """Correlate two questions, with scatter points and contingency table."""
        self._require_data()
        question_a = self.get_question(question_a_id)
        question_b = self.get_question(question_b_id)
        return self.correlation_engine.correlate_questions(
            self.responses, self.responses, question_a, question_b
        )

    def responses_frame(self, wide: bool = False) -> pd.DataFrame:
        """
        Loaded responses as a DataFrame.

        Parameters
        ----------
        wide : bool, default False
            If True, one row per respondent and one column per question
        """
        self._require_data()
        if wide:
            return self.answer_reader.pivot_responses(self.responses, self.questions)
        return self.answer_reader.to_frame(self.responses)

    def get_analysis_summary(self) -> Dict[str, Any]:
        """
        Get summary of all completed analyses.

        Returns
        -------
        dict
            Summary of analysis results
        """
        summary = {
            'data_loaded': self.responses is not None,
            'n_questions': len(self.questions),
            'n_responses': len(self.responses) if self.responses is not None else 0,
            'n_survey_sets': len(self.survey_sets),
            'analyses_completed': list(self.analysis_results.keys())
        }

        if self.responses is not None:
            summary['n_respondents'] = len({r.respondent_id for r in self.responses})

        if 'correlations' in self.analysis_results:
            correlations = self.analysis_results['correlations']
            summary['n_correlations'] = len(correlations)
            summary['significant_correlations'] = sum(
                1 for r in correlations if r.correlation.is_significant()
            )

        if 'cross_tabulations' in self.analysis_results:
            summary['n_cross_tabulations'] = len(self.analysis_results['cross_tabulations'])

        return summary

    def _require_data(self):
        """Raise if no responses have been loaded."""
        if self.responses is None:
            raise ValueError("No data loaded. Call load_data() first.")

    def _select_questions(self, question_ids: Optional[List[Any]]) -> List[Question]:
        """Questions for the given ids, or the whole catalogue."""
        if question_ids is None:
            return list(self.questions)
        return [self.get_question(question_id) for question_id in question_ids]

    def _load_config(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from file."""
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
            self.logger.info(f"Configuration loaded from {config_path}")
            return config
        except Exception as e:
            self.logger.warning(f"Failed to load configuration: {e}")
            return {}
