from django.test import SimpleTestCase

from gradebook.academic.attendance import (
    AttendanceTracker,
    attendance_percentage,
    course_session_keys,
    module_attendance_percentage,
    tracked_sessions,
)
from gradebook.test.utils.builders import course, module, program, schema


class AttendancePercentageTests(SimpleTestCase):
    def test_three_of_four(self):
        marks = {"a": True, "b": True, "c": True, "d": False}
        self.assertEqual(attendance_percentage(marks, ["a", "b", "c", "d"]), 75)

    def test_no_sessions_is_zero(self):
        self.assertEqual(attendance_percentage({"a": True}, []), 0)

    def test_rounds_half_up(self):
        self.assertEqual(attendance_percentage({"s1": True}, [f"s{i}" for i in range(1, 9)]), 13)
        self.assertEqual(attendance_percentage({"s1": True, "s2": True}, ["s1", "s2", "s3"]), 67)

    def test_untracked_keys_ignored(self):
        self.assertEqual(attendance_percentage({"session_9": True}, course_session_keys(4)), 0)


class TrackedSessionsTests(SimpleTestCase):
    def test_course_uses_declared_session_count(self):
        self.assertEqual(
            tracked_sessions(course(session_count=3)),
            ["session_1", "session_2", "session_3"],
        )

    def test_program_uses_union_of_class_dates(self):
        s = schema(
            module("A", 1, class_dates=["2024-03-08", "2024-03-01"]),
            module("B", 1, class_dates=["2024-03-08", "2024-04-05"]),
        )
        self.assertEqual(tracked_sessions(program(s)), ["2024-03-01", "2024-03-08", "2024-04-05"])

    def test_module_percentage(self):
        m = module("A", 1, class_dates=["2024-03-01", "2024-03-08"])
        self.assertEqual(module_attendance_percentage({"2024-03-01": True}, m), 50)


class AttendanceTrackerTests(SimpleTestCase):
    def test_toggle_returns_copy(self):
        tracker = AttendanceTracker(course(session_count=4))
        marks = {"session_1": True}
        out = tracker.toggle(marks, "session_2")
        self.assertEqual(out, {"session_1": True, "session_2": True})
        self.assertEqual(marks, {"session_1": True})
        self.assertEqual(tracker.percentage(out), 50)
        self.assertEqual(tracker.present_count(out), 2)

    def test_toggle_unknown_session(self):
        tracker = AttendanceTracker(course(session_count=2))
        with self.assertRaises(KeyError):
            tracker.toggle({}, "session_3")
