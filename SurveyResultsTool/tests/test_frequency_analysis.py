"""
Tests for per-question frequency, category and demographic analysis.
"""

import unittest

from SurveyResultsTool.data_processing.models import Question, Response, SurveySet
from SurveyResultsTool.descriptive_analysis import (
    CategoryAnalyzer, DemographicProfiler, FrequencyAnalyzer
)


def _responses(question_id, answers, start=1):
    """One response per answer, respondents r<start>, r<start+1>, ..."""
    return [
        Response(question_id=question_id, respondent_id=f"r{i}", answer=answer)
        for i, answer in enumerate(answers, start=start)
    ]


class TestFrequencyAnalyzer(unittest.TestCase):
    """Test cases for FrequencyAnalyzer."""

    def setUp(self):
        """Set up test fixtures."""
        self.analyzer = FrequencyAnalyzer()
        self.scale_question = Question(id="Q1", type="scale_5")
        self.choice_question = Question(id="Q2", type="single_choice", options=["Yes", "No"])

    def test_scale_example(self):
        responses = _responses("Q1", ["3", "4", "5", "5", "garbage"])
        result = self.analyzer.aggregate(responses, self.scale_question)

        self.assertEqual(result.count, 4)
        self.assertEqual(result.raw_count, 5)
        self.assertEqual(result.average, 4.25)
        self.assertTrue(result.has_data)
        self.assertEqual(
            [(b.value, b.count) for b in result.distinct_value_counts],
            [("1", 0), ("2", 0), ("3", 1), ("4", 1), ("5", 2)]
        )

    def test_single_choice_example(self):
        responses = _responses("Q2", ["Yes", "Yes", "Maybe"])
        result = self.analyzer.aggregate(responses, self.choice_question)

        self.assertEqual(result.count, 3)
        self.assertEqual(
            [(b.value, b.count) for b in result.distinct_value_counts],
            [("Yes", 2), ("No", 0), ("Maybe", 1)]
        )
        self.assertIsNone(result.average)

    def test_bucket_completeness(self):
        question = Question(id="Q3", type="single_choice", options=["A", "B", "C", "D"])
        result = self.analyzer.aggregate(_responses("Q3", ["B"]), question)

        values = [b.value for b in result.distinct_value_counts]
        for option in question.options:
            self.assertIn(option, values)

    def test_count_conservation(self):
        question = Question(id="Q3", type="single_choice", options=["A", "B"])
        responses = _responses("Q3", ["A", "B", "B", "Other", " ", "A"])
        result = self.analyzer.aggregate(responses, question)

        self.assertEqual(sum(b.count for b in result.distinct_value_counts), result.count)
        self.assertEqual(result.count, 5)
        self.assertEqual(result.raw_count, 6)

    def test_scale_average_bounded(self):
        responses = _responses("Q1", ["1", "5", "2", "4", "3", "5"])
        result = self.analyzer.aggregate(responses, self.scale_question)
        self.assertGreaterEqual(result.average, 1)
        self.assertLessEqual(result.average, 5)

    def test_scale_out_of_range_counts_without_bucket(self):
        responses = _responses("Q1", ["5", "9", "2.5"])
        result = self.analyzer.aggregate(responses, self.scale_question)

        self.assertEqual(result.count, 3)
        self.assertEqual(result.average, round((5 + 9 + 2.5) / 3, 2))
        self.assertEqual(sum(b.count for b in result.distinct_value_counts), 1)
        self.assertEqual(result.get_bucket("5").count, 1)

    def test_scale_without_data(self):
        result = self.analyzer.aggregate(_responses("Q1", ["n/a"]), self.scale_question)

        self.assertEqual(result.average, 0)
        self.assertFalse(result.has_data)
        self.assertEqual(result.count, 0)
        self.assertTrue(all(b.count == 0 for b in result.distinct_value_counts))
        self.assertEqual(len(result.distinct_value_counts), 5)

    def test_multiple_choice_counts_each_selection(self):
        question = Question(id="Q4", type="multiple_choice", options=["Red", "Blue", "Green"])
        responses = _responses("Q4", ["Red;Blue", "Blue", "Purple; Red"])
        result = self.analyzer.aggregate(responses, question)

        self.assertEqual(result.count, 3)
        self.assertEqual(
            [(b.value, b.count) for b in result.distinct_value_counts],
            [("Red", 2), ("Blue", 2), ("Green", 0), ("Purple", 1)]
        )

    def test_text_answers_kept_in_order(self):
        question = Question(id="Q5", type="text")
        responses = _responses("Q5", ["Great", "Great", "Needs work\n"])
        result = self.analyzer.aggregate(responses, question)

        self.assertEqual(result.text_answers, ["Great", "Great", "Needs work"])
        self.assertEqual(result.distinct_value_counts, [])
        self.assertIsNone(result.average)

    def test_other_questions_ignored(self):
        responses = _responses("Q1", ["3"]) + _responses("Q2", ["Yes"])
        result = self.analyzer.aggregate(responses, self.scale_question)
        self.assertEqual(result.raw_count, 1)

    def test_no_responses(self):
        result = self.analyzer.aggregate([], self.choice_question)
        self.assertEqual(result.count, 0)
        self.assertFalse(result.has_data)
        self.assertEqual([b.count for b in result.distinct_value_counts], [0, 0])

    def test_unique_respondents_and_distribution_summary(self):
        responses = [
            Response(question_id="Q1", respondent_id="r1", answer="3"),
            Response(question_id="Q1", respondent_id="r1", answer="4"),
            Response(question_id="Q2", respondent_id="r2", answer="Yes"),
            Response(question_id="QX", respondent_id="r3", answer="Yes"),
        ]
        result = self.analyzer.aggregate(responses, self.scale_question)
        self.assertEqual(result.raw_count, 2)
        self.assertEqual(result.unique_respondents, 1)

        summary = self.analyzer.distribution_summary(
            responses, [self.scale_question, self.choice_question]
        )
        self.assertEqual(summary, {'total_questions': 2, 'total_responses': 3, 'unique_respondents': 2})

    def test_item_summary_keeps_catalogue_order(self):
        results = self.analyzer.item_summary([], [self.choice_question, self.scale_question])
        self.assertEqual(list(results.keys()), ["Q2", "Q1"])

    def test_frequency_table(self):
        responses = _responses("Q2", ["Yes", "Yes", "No", "No"])
        table = self.analyzer.frequency_table(self.analyzer.aggregate(responses, self.choice_question))

        self.assertEqual(list(table['Value']), ["Yes", "No"])
        self.assertEqual(list(table['Percentage']), [50.0, 50.0])
        self.assertEqual(list(table['Cumulative_Percentage']), [50.0, 100.0])


class TestCategoryAnalyzer(unittest.TestCase):
    """Test cases for CategoryAnalyzer."""

    def setUp(self):
        """Set up test fixtures."""
        self.analyzer = CategoryAnalyzer()
        self.questions = [
            Question(id="q1", type="scale_5", category="Workload"),
            Question(id="q2", type="scale_5", category="Workload"),
            Question(id="q3", type="single_choice", category="Support", options=["Yes", "No"]),
            Question(id="q4", type="scale_7"),
        ]

    def test_list_categories(self):
        self.assertEqual(
            self.analyzer.list_categories(self.questions),
            ["Workload", "Support", "Uncategorized"]
        )

    def test_questions_in_category(self):
        members = self.analyzer.questions_in_category(self.questions, "Workload")
        self.assertEqual([q.id for q in members], ["q1", "q2"])

    def test_category_summary(self):
        responses = (
            _responses("q1", ["2", "4"]) +
            _responses("q2", ["5", "bad"]) +
            _responses("q3", ["Yes"])
        )
        summaries = {s.category: s for s in self.analyzer.category_summary(responses, self.questions)}

        workload = summaries["Workload"]
        self.assertEqual(workload.question_count, 2)
        self.assertEqual(workload.count, 3)
        self.assertEqual(workload.average, round(11 / 3, 2))
        self.assertTrue(workload.has_data)

        support = summaries["Support"]
        self.assertEqual(support.question_count, 1)
        self.assertEqual(support.average, 0.0)
        self.assertFalse(support.has_data)

    def test_custom_uncategorized_label(self):
        analyzer = CategoryAnalyzer(uncategorized_label="Other")
        self.assertIn("Other", analyzer.list_categories(self.questions))


class TestDemographicProfiler(unittest.TestCase):
    """Test cases for DemographicProfiler."""

    def setUp(self):
        """Set up test fixtures."""
        self.profiler = DemographicProfiler()
        self.survey_sets = [
            SurveySet(id="s1", name="About you", type="Demographic Survey"),
            SurveySet(id="s2", name="Engagement", type="engagement"),
        ]
        self.gender = Question(
            id="d1", type="single_choice", category="Gender",
            options=["Female", "Male"], survey_set_id="s1"
        )
        self.satisfaction = Question(id="e1", type="scale_5", category="Satisfaction", survey_set_id="s2")
        self.comment = Question(id="e2", type="text", survey_set_id="s2")
        self.questions = [self.gender, self.satisfaction, self.comment]

        self.responses = (
            _responses("d1", ["Female", "Female", "Male", "Female"]) +
            _responses("e1", ["4", "2", "5"])
        )

    def test_demographic_questions(self):
        questions = self.profiler.demographic_questions(self.questions, self.survey_sets)
        self.assertEqual([q.id for q in questions], ["d1"])
        self.assertEqual(self.profiler.demographic_categories(self.questions, self.survey_sets), ["Gender"])

    def test_profile(self):
        profile = self.profiler.profile(self.responses, self.gender)
        self.assertEqual(
            [(b.value, b.count) for b in profile.distinct_value_counts],
            [("Female", 3), ("Male", 1)]
        )

    def test_option_breakdown(self):
        breakdown = self.profiler.option_breakdown(
            self.responses, self.gender, [self.satisfaction, self.comment]
        )

        female, male = breakdown
        self.assertEqual(female.option, "Female")
        self.assertEqual(female.respondent_count, 3)
        # r1 and r2 answered e1 among female respondents r1, r2, r4
        self.assertEqual(female.scale_averages["e1"], {'average': 3.0, 'count': 2})
        self.assertNotIn("e2", female.scale_averages)

        self.assertEqual(male.respondent_count, 1)
        self.assertEqual(male.scale_averages["e1"], {'average': 5.0, 'count': 1})

    def test_option_without_outcome_answers(self):
        responses = _responses("d1", ["Male"], start=9)
        breakdown = self.profiler.option_breakdown(responses, self.gender, [self.satisfaction])
        self.assertEqual(breakdown[0].respondent_count, 0)
        self.assertEqual(breakdown[0].scale_averages["e1"], {'average': 0, 'count': 0})

    def test_option_breakdown_requires_choice_question(self):
        with self.assertRaises(ValueError):
            self.profiler.option_breakdown(self.responses, self.satisfaction, [])


if __name__ == '__main__':
    unittest.main()
