from unittest.mock import AsyncMock

from django.test import SimpleTestCase

from gradebook.academic.types import AcademicState
from gradebook.services.grading.buffer import PendingEditBuffer
from gradebook.services.grading.sync import SyncCoordinator
from gradebook.services.shared.errors import (
    ActivityClosedError,
    ExternalDependencyError,
    ValidationError,
)
from gradebook.test.utils.builders import course, module, program, record, schema


class CourseCommitTests(SimpleTestCase):
    def setUp(self):
        self.buffer = PendingEditBuffer(
            course(evaluation_count=2, session_count=2),
            [record(1, [5.0]), record(2, [4.0]), record(3, [6.0])],
        )

    async def test_commit_persists_only_dirty_enrollments(self):
        persist = AsyncMock(return_value=None)
        self.buffer.set_grade(1, 1, "6")
        self.buffer.set_grade(3, 1, "7")

        result = await SyncCoordinator(self.buffer, persist).commit()

        self.assertTrue(result.ok)
        self.assertEqual(sorted(result.committed), [1, 3])
        self.assertEqual(persist.await_count, 2)
        first = persist.await_args_list[0].args[0]
        self.assertEqual(first["grades"], [5.0, 6.0])
        self.assertEqual(first["final_grade"], 5.5)
        self.assertEqual(first["state"], AcademicState.FAILED)
        self.assertTrue(self.buffer.is_empty)

    async def test_second_commit_is_noop(self):
        persist = AsyncMock(return_value=None)
        coordinator = SyncCoordinator(self.buffer, persist)
        self.buffer.set_grade(1, 1, "6")

        await coordinator.commit()
        again = await coordinator.commit()

        self.assertTrue(again.is_noop)
        self.assertEqual(persist.await_count, 1)

    async def test_failed_enrollment_stays_pending_and_retries(self):
        persist = AsyncMock(side_effect=[RuntimeError("db down"), None])
        coordinator = SyncCoordinator(self.buffer, persist)
        self.buffer.set_grade(2, 1, "5")

        with self.assertLogs("gradebook.services.grading.sync", level="WARNING"):
            failed = await coordinator.commit()
        self.assertFalse(failed.ok)
        self.assertIsInstance(failed.failed[2], ExternalDependencyError)
        self.assertTrue(self.buffer.is_dirty(2))

        retried = await coordinator.commit()
        self.assertEqual(retried.committed, [2])
        self.assertTrue(self.buffer.is_empty)

    async def test_service_errors_are_kept_as_raised(self):
        err = ActivityClosedError("closed meanwhile")
        coordinator = SyncCoordinator(self.buffer, AsyncMock(side_effect=err))
        self.buffer.set_grade(1, 1, "6")
        with self.assertLogs("gradebook.services.grading.sync", level="WARNING"):
            result = await coordinator.commit()
        self.assertIs(result.failed[1], err)

    async def test_edit_during_inflight_write_stays_pending(self):
        buffer = self.buffer

        async def persist(update):
            # operator keeps typing while the write is in flight
            buffer.set_grade(update["enrollment_id"], 0, "7")

        buffer.set_grade(1, 1, "6")
        result = await SyncCoordinator(buffer, persist).commit()

        self.assertEqual(result.committed, [1])
        self.assertEqual(buffer.persisted(1).grades, [5.0, 6.0])
        self.assertTrue(buffer.is_dirty(1))
        self.assertEqual(buffer.live_grades(1), [7.0, 6.0])

    async def test_closed_activity_refuses_commit(self):
        buffer = PendingEditBuffer(course(closed=True), [record(1, [5.0])])
        with self.assertRaises(ActivityClosedError):
            await SyncCoordinator(buffer, AsyncMock()).commit()

    async def test_module_scope_needs_program(self):
        with self.assertRaises(ValidationError):
            await SyncCoordinator(self.buffer, AsyncMock()).commit("A")


class ProgramCommitTests(SimpleTestCase):
    def setUp(self):
        self.buffer = PendingEditBuffer(
            program(schema(module("A", 1, weights=[100]), module("B", 1, weights=[100]))),
            [record(1, [], activity_id="DIP-2024-ANUAL-V1")],
        )

    async def test_module_scoped_commit(self):
        persist = AsyncMock(return_value=None)
        self.buffer.set_module_grade(1, "A", 0, "5")
        self.buffer.set_module_grade(1, "B", 0, "6")

        result = await SyncCoordinator(self.buffer, persist).commit("B")

        self.assertEqual(result.scope, "B")
        self.assertEqual(result.committed, [1])
        self.assertEqual(persist.await_args.args[0]["grades"], [0.0, 6.0])
        self.assertFalse(self.buffer.is_dirty(1, "B"))
        self.assertTrue(self.buffer.is_dirty(1, "A"))

    async def test_unknown_module(self):
        with self.assertRaises(ValidationError):
            await SyncCoordinator(self.buffer, AsyncMock()).commit("Z")
