from django.test import SimpleTestCase

from gradebook.academic.stats import is_at_risk, tracking_stats
from gradebook.academic.types import AcademicState, GradingThresholds
from gradebook.test.utils.builders import course, record


class TrackingStatsTests(SimpleTestCase):
    def setUp(self):
        self.activity = course(evaluation_count=3, session_count=4)
        self.records = [
            record(1, [5, 6, 0], {"session_1": True}, final_grade=5.5, attendance_percentage=25,
                   state=AcademicState.IN_PROGRESS),
            record(2, [3, 3, 3], {}, final_grade=3.0, state=AcademicState.FAILED),
            record(3, [], {}),
            record(4, [6, 6, 6], {f"session_{i}": True for i in range(1, 5)}, final_grade=6.0,
                   attendance_percentage=100, state=AcademicState.APPROVED),
        ]

    def test_summary(self):
        stats = tracking_stats(self.activity, self.records)
        self.assertEqual(stats.total, 4)
        self.assertEqual(stats.advancing, 3)
        self.assertEqual(stats.global_average, 4.8)
        self.assertEqual(stats.grade_entry_pct, 67)
        self.assertEqual(stats.average_attendance, 63)
        self.assertEqual(stats.approval_rate, 25)
        self.assertEqual(stats.at_risk, [1, 2])

    def test_global_average_rounds_ties_up(self):
        stats = tracking_stats(course(evaluation_count=2), [record(1, [1.3, 6.6])])
        self.assertEqual(stats.global_average, 4.0)

    def test_empty_activity(self):
        stats = tracking_stats(self.activity, [])
        self.assertEqual(stats.total, 0)
        self.assertEqual(stats.global_average, 0.0)
        self.assertEqual(stats.grade_entry_pct, 0)
        self.assertEqual(stats.at_risk, [])

    def test_untouched_enrollment_is_not_at_risk(self):
        self.assertFalse(is_at_risk(record(9, []), GradingThresholds()))

    def test_thresholds_decide_risk(self):
        rec = record(9, [4.5], final_grade=4.5, attendance_percentage=80)
        self.assertFalse(is_at_risk(rec, GradingThresholds()))
        self.assertTrue(is_at_risk(rec, GradingThresholds(min_passing_grade=5.0)))
