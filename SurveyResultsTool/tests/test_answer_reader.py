"""
Tests for the answer store reader.
"""

import unittest
from datetime import datetime

import pandas as pd

from SurveyResultsTool.data_processing import AnswerStoreReader, Question, Response


class TestAnswerStoreReader(unittest.TestCase):
    """Test cases for AnswerStoreReader."""

    def setUp(self):
        """Set up test fixtures."""
        self.reader = AnswerStoreReader()

    def test_read_is_pass_through(self):
        responses = [Response(question_id="q1", respondent_id="r1", answer="3")]
        self.assertIs(self.reader.read(responses, []), responses)

    def test_question_from_record(self):
        question = self.reader.question_from_record({
            'id': 7,
            'question_type': 'Single',
            'question_category': '',
            'question_text': 'Do you agree?',
            'options': 'Yes, No ,, Maybe',
            'survey_set_id': 2,
        })

        self.assertEqual(question.id, 7)
        self.assertEqual(question.type, 'single_choice')
        self.assertEqual(question.category, 'Uncategorized')
        self.assertEqual(question.options, ['Yes', 'No', 'Maybe'])
        self.assertEqual(question.text, 'Do you agree?')
        self.assertEqual(question.survey_set_id, 2)

    def test_question_types_canonicalized(self):
        for raw, expected in [('scale7', 'scale_7'), ('scale', 'scale_5'),
                              ('multiple', 'multiple_choice'), ('ranking', 'ranking')]:
            question = self.reader.question_from_record({'id': 1, 'type': raw})
            self.assertEqual(question.type, expected)

    def test_question_without_id(self):
        with self.assertRaises(ValueError):
            self.reader.question_from_record({'type': 'text'})

    def test_response_from_record_respondent_aliases(self):
        by_user = self.reader.response_from_record({'question_id': 1, 'user_id': 'u1', 'answer': 4})
        by_participant = self.reader.response_from_record(
            {'question_id': 1, 'participant_id': 'p1', 'answer': 'Yes'}
        )

        self.assertEqual(by_user.respondent_id, 'u1')
        self.assertEqual(by_user.answer, '4')
        self.assertEqual(by_participant.respondent_id, 'p1')

    def test_response_timestamp(self):
        response = self.reader.response_from_record({
            'question_id': 1, 'respondent_id': 'r1', 'answer': 'x',
            'submitted_at': '2024-03-01T10:15:00'
        })
        self.assertEqual(response.submitted_at, datetime(2024, 3, 1, 10, 15))

        response = self.reader.response_from_record({
            'question_id': 1, 'respondent_id': 'r1', 'submitted_at': 'not a date'
        })
        self.assertIsNone(response.submitted_at)
        self.assertIsNone(response.answer)

    def test_response_without_ids(self):
        with self.assertRaises(ValueError):
            self.reader.response_from_record({'respondent_id': 'r1', 'answer': 'x'})
        with self.assertRaises(ValueError):
            self.reader.response_from_record({'question_id': 1, 'answer': 'x'})

    def test_fetch_all_responses_pages(self):
        rows = [{'question_id': 1, 'user_id': f'u{i}', 'answer': str(i % 5 + 1)} for i in range(5)]
        calls = []

        def fetch_page(distribution_id, question_ids, offset, limit):
            calls.append((offset, limit))
            return rows[offset:offset + limit]

        reader = AnswerStoreReader(page_size=2)
        responses = reader.fetch_all_responses(fetch_page, 'd1', [1])

        self.assertEqual(len(responses), 5)
        self.assertEqual([r.respondent_id for r in responses], [f'u{i}' for i in range(5)])
        self.assertEqual(calls, [(0, 2), (2, 2), (4, 2)])

    def test_fetch_stops_on_empty_page(self):
        calls = []

        def fetch_page(distribution_id, question_ids, offset, limit):
            calls.append(offset)
            return [{'question_id': 1, 'user_id': 'u', 'answer': 'a'}] * limit if offset == 0 else []

        reader = AnswerStoreReader(page_size=3)
        self.assertEqual(len(reader.fetch_all_responses(fetch_page, 'd1', [1])), 3)
        self.assertEqual(calls, [0, 3])

    def test_fetch_errors_propagate(self):
        def fetch_page(distribution_id, question_ids, offset, limit):
            raise ConnectionError("store unavailable")

        with self.assertRaises(ConnectionError):
            self.reader.fetch_all_responses(fetch_page, 'd1', [1])

    def test_invalid_page_size(self):
        with self.assertRaises(ValueError):
            AnswerStoreReader(page_size=0)

    def test_parse_survey_set_ids(self):
        self.assertEqual(self.reader.parse_survey_set_ids('[1, 2, 3]'), [1, 2, 3])
        self.assertEqual(self.reader.parse_survey_set_ids('4, 5'), ['4', '5'])
        self.assertEqual(self.reader.parse_survey_set_ids('abc'), ['abc'])
        self.assertEqual(self.reader.parse_survey_set_ids(9), [9])
        self.assertEqual(self.reader.parse_survey_set_ids(['a', 'b']), ['a', 'b'])
        self.assertEqual(self.reader.parse_survey_set_ids(None), [])
        self.assertEqual(self.reader.parse_survey_set_ids('  '), [])
        self.assertEqual(self.reader.parse_survey_set_ids('[broken'), ['[broken'])

    def test_load_survey_sets(self):
        survey_sets = self.reader.load_survey_sets([{'id': 1, 'title': 'About you', 'type': 'demographic'}])
        self.assertEqual(survey_sets[0].name, 'About you')
        self.assertTrue(survey_sets[0].is_demographic())

    def test_to_frame(self):
        responses = [
            Response(question_id='q1', respondent_id='r1', answer='3'),
            Response(question_id='q2', respondent_id='r1', answer='Yes'),
        ]
        frame = self.reader.to_frame(responses)

        self.assertEqual(list(frame.columns), ['question_id', 'respondent_id', 'answer', 'submitted_at'])
        self.assertEqual(len(frame), 2)

    def test_pivot_responses(self):
        questions = [Question(id='q2', type='text'), Question(id='q1', type='scale_5')]
        responses = [
            Response(question_id='q1', respondent_id='r2', answer='3'),
            Response(question_id='q2', respondent_id='r1', answer='Fine'),
            Response(question_id='q1', respondent_id='r1', answer='4'),
            Response(question_id='q1', respondent_id='r1', answer='5'),
            Response(question_id='q9', respondent_id='r3', answer='x'),
        ]
        frame = self.reader.pivot_responses(responses, questions)

        self.assertEqual(list(frame.columns), ['q2', 'q1'])
        self.assertEqual(list(frame.index), ['r2', 'r1'])
        self.assertEqual(frame.loc['r1', 'q1'], '5')
        self.assertTrue(pd.isna(frame.loc['r2', 'q2']))

    def test_pivot_without_responses(self):
        frame = self.reader.pivot_responses([], [Question(id='q1', type='text')])
        self.assertTrue(frame.empty)
        self.assertEqual(list(frame.columns), ['q1'])


if __name__ == '__main__':
    unittest.main()
